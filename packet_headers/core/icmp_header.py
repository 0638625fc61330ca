"""
ICMPv4 Header - combined IPv4 + ICMP header marshaling.

ICMP4Header contains an IP4Header and adds the 4-byte ICMP type, code
and checksum. The ICMP checksum is computed over the whole buffer,
including the already finalized IPv4 header.
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum

from .address import IP4Proto
from .byteorder import get16, put16
from .checksum import ip_checksum, verify_checksum
from .ipv4_header import (
    IP4Header,
    IP_HEADER_LENGTH,
    MalformedHeaderError,
    check_buffer_length,
)


ICMP_HEADER_LENGTH = 4
ICMP_ALL_HEADERS_LENGTH = IP_HEADER_LENGTH + ICMP_HEADER_LENGTH


class ICMP4Type(IntEnum):
    """ICMPv4 message types."""
    ECHO_REPLY = 0x00
    UNREACHABLE = 0x03
    ECHO_REQUEST = 0x08
    TIME_EXCEEDED = 0x0B

    @classmethod
    def from_wire(cls, number: int) -> 'ICMP4Type':
        """
        Raises:
            MalformedHeaderError: If number is not a supported type
        """
        try:
            return cls(number)
        except ValueError:
            raise MalformedHeaderError(f"Unsupported ICMP type: {number}") from None

    def __str__(self) -> str:
        return _TYPE_NAMES[self]


_TYPE_NAMES = {
    ICMP4Type.ECHO_REPLY: "EchoReply",
    ICMP4Type.UNREACHABLE: "Unreachable",
    ICMP4Type.ECHO_REQUEST: "EchoRequest",
    ICMP4Type.TIME_EXCEEDED: "TimeExceeded",
}


class ICMP4Code(IntEnum):
    """ICMPv4 codes. Only the zero code is modeled."""
    NO_CODE = 0


@dataclass
class ICMP4Header:
    """
    ICMPv4 packet header (IPv4 header followed by the ICMP header).

    ICMP Header Format (bytes 20-23):
    +-----------+-----------+-------------------------+
    | Type (8)  | Code (8)  |      Checksum (16)      |
    +-----------+-----------+-------------------------+
    """

    HEADER_LENGTH = ICMP_ALL_HEADERS_LENGTH

    ip: IP4Header = field(default_factory=IP4Header)
    icmp_type: ICMP4Type = ICMP4Type.ECHO_REPLY
    code: ICMP4Code = ICMP4Code.NO_CODE

    def __len__(self) -> int:
        return ICMP_ALL_HEADERS_LENGTH

    def marshal(self, buf) -> None:
        """
        Serialize the IPv4 and ICMP headers into the first 24 bytes of buf.

        The IPv4 protocol is always written as ICMP; the contained header
        is left untouched. The IPv4 header is finalized before the ICMP
        checksum is taken, because its bytes are part of the summed range.

        Raises:
            BufferTooSmallError: If buf is shorter than 24 bytes
            PacketTooLargeError: If buf is longer than MAX_PACKET_LENGTH
        """
        check_buffer_length(buf, ICMP_ALL_HEADERS_LENGTH)

        buf[20] = int(self.icmp_type)
        buf[21] = int(self.code)

        replace(self.ip, proto=IP4Proto.ICMP).marshal(buf)

        put16(buf, 22, 0)
        put16(buf, 22, ip_checksum(buf))

    def to_response(self) -> None:
        """
        Turn an echo request header into the echo reply header.

        Only correct for EchoRequest. Unreachable and TimeExceeded are
        generated by intermediate nodes and have no reply.
        """
        self.icmp_type = ICMP4Type.ECHO_REPLY
        self.code = ICMP4Code.NO_CODE
        self.ip.to_response()

    @classmethod
    def unmarshal(cls, buf) -> 'ICMP4Header':
        """
        Decode the IPv4 and ICMP headers of a captured ICMP packet.

        The ICMP checksum is verified over the first total-length bytes of
        buf, the same range marshal sums. Bytes past the total length are
        ignored.

        Raises:
            BufferTooSmallError: If buf is shorter than 24 bytes
            PacketTooLargeError: If buf is longer than MAX_PACKET_LENGTH
            MalformedHeaderError: If the packet is truncated, fails the
                                  ICMP checksum or is not a supported ICMP
                                  message
        """
        check_buffer_length(buf, ICMP_ALL_HEADERS_LENGTH)

        ip = IP4Header.unmarshal(buf)
        if ip.proto != IP4Proto.ICMP:
            raise MalformedHeaderError(f"Not an ICMP packet: protocol {ip.proto!s}")
        if buf[21] != ICMP4Code.NO_CODE:
            raise MalformedHeaderError(f"Unsupported ICMP code: {buf[21]}")

        total = get16(buf, 2)
        if not ICMP_ALL_HEADERS_LENGTH <= total <= len(buf):
            raise MalformedHeaderError(
                f"Truncated ICMP packet: total length {total}, have {len(buf)} bytes"
            )
        if not verify_checksum(buf[:total]):
            raise MalformedHeaderError(f"Invalid ICMP checksum: {get16(buf, 22):#06x}")

        return cls(ip=ip, icmp_type=ICMP4Type.from_wire(buf[20]), code=ICMP4Code.NO_CODE)


__all__ = [
    'ICMP4Header',
    'ICMP4Type',
    'ICMP4Code',
    'ICMP_HEADER_LENGTH',
    'ICMP_ALL_HEADERS_LENGTH',
]
