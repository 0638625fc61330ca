"""
packet-headers v1.0.0 - IPv4/ICMPv4 header marshaling
=====================================================

Builds fixed-layout IPv4 and ICMPv4 headers into caller-owned buffers,
computes Internet checksums inline, and turns request headers into
response headers for a packet-rewriting layer.

Usage:
    from packet_headers import IP4, IP4Header, IP4Proto

    header = IP4Header(proto=IP4Proto.TCP, ipid=0x1234,
                       src_ip=IP4.from_string("10.0.0.1"),
                       dst_ip=IP4.from_string("10.0.0.2"))
    buf = bytearray(40)
    header.marshal(buf)

Version: 1.0.0
"""

__version__ = "1.0.0"

from packet_headers.core import (
    IP4,
    IP4Proto,
    IP4Header,
    ICMP4Header,
    ICMP4Type,
    ICMP4Code,
    HeaderError,
    BufferTooSmallError,
    PacketTooLargeError,
    MalformedHeaderError,
    in_cksum,
)

__all__ = [
    'IP4',
    'IP4Proto',
    'IP4Header',
    'ICMP4Header',
    'ICMP4Type',
    'ICMP4Code',
    'HeaderError',
    'BufferTooSmallError',
    'PacketTooLargeError',
    'MalformedHeaderError',
    'in_cksum',
    '__version__',
]
