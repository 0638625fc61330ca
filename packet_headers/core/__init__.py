"""
Core module initialization for packet-headers.
"""

from .checksum import (
    InternetChecksum,
    ChecksumError,
    in_cksum,
    ip_checksum,
    verify_checksum,
)
from .byteorder import put16, put32, get16, get32
from .address import IP4, IP4Proto
from .ipv4_header import (
    IP4Header,
    HeaderError,
    BufferTooSmallError,
    PacketTooLargeError,
    MalformedHeaderError,
    IP_HEADER_LENGTH,
    MAX_PACKET_LENGTH,
)
from .icmp_header import (
    ICMP4Header,
    ICMP4Type,
    ICMP4Code,
    ICMP_ALL_HEADERS_LENGTH,
)

__all__ = [
    'InternetChecksum',
    'ChecksumError',
    'in_cksum',
    'ip_checksum',
    'verify_checksum',
    'put16',
    'put32',
    'get16',
    'get32',
    'IP4',
    'IP4Proto',
    'IP4Header',
    'HeaderError',
    'BufferTooSmallError',
    'PacketTooLargeError',
    'MalformedHeaderError',
    'IP_HEADER_LENGTH',
    'MAX_PACKET_LENGTH',
    'ICMP4Header',
    'ICMP4Type',
    'ICMP4Code',
    'ICMP_ALL_HEADERS_LENGTH',
]
