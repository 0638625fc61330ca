"""
IPv4 Header - fixed 20-byte IPv4 header marshaling.

Provides:
- IPv4 header construction into a caller-owned buffer (no options)
- Pseudo-header construction for seeding TCP/UDP checksums
- Request to response transformation (address swap, IPID flip)
- Decoding of a captured header back into a header value

The buffer passed to marshal is the whole intended packet: its length
becomes the IPv4 total length field.
"""

from dataclasses import dataclass, field

from .address import IP4, IP4Proto
from .byteorder import get16, get32, put16, put32
from .checksum import ip_checksum, verify_checksum


IP_HEADER_LENGTH = 20
MAX_PACKET_LENGTH = 65535
DEFAULT_TTL = 64


class HeaderError(Exception):
    """Base class for header marshaling and decoding failures."""
    pass


class BufferTooSmallError(HeaderError):
    """Raised when a buffer is shorter than the header being written."""
    pass


class PacketTooLargeError(HeaderError):
    """Raised when a buffer exceeds MAX_PACKET_LENGTH."""
    pass


class MalformedHeaderError(HeaderError):
    """Raised when captured bytes do not decode as a supported header."""
    pass


def check_buffer_length(buf, required: int) -> None:
    """
    Validate a marshal buffer before anything is written to it.

    Raises:
        BufferTooSmallError: If len(buf) < required
        PacketTooLargeError: If len(buf) > MAX_PACKET_LENGTH
    """
    if len(buf) < required:
        raise BufferTooSmallError(
            f"Buffer too small: {len(buf)} bytes, header needs {required}"
        )
    if len(buf) > MAX_PACKET_LENGTH:
        raise PacketTooLargeError(
            f"Packet too large: {len(buf)} bytes. "
            f"Maximum is {MAX_PACKET_LENGTH} bytes."
        )


@dataclass
class IP4Header:
    """
    IPv4 packet header.

    IPv4 Header Format:
    +-----------+-----------+-------------------+-------------------------+
    | Ver=4     | IHL=5     | DSCP/ECN = 0      |  Total Length = len(buf)|
    +-----------+-----------+-------------------+-------------------------+
    |         Identification = ipid             |  Flags/Offset = 0       |
    +-----------------------+-------------------+-------------------------+
    |  TTL = 64             |  Protocol         |  Header Checksum        |
    +-----------------------+-------------------+-------------------------+
    |                    Source Address                                   |
    +---------------------------------------------------------------------+
    |                    Destination Address                              |
    +---------------------------------------------------------------------+
    """

    HEADER_LENGTH = IP_HEADER_LENGTH

    proto: IP4Proto = IP4Proto.UNKNOWN
    ipid: int = 0
    src_ip: IP4 = field(default_factory=IP4)
    dst_ip: IP4 = field(default_factory=IP4)

    def __post_init__(self) -> None:
        if not 0 <= self.ipid <= 0xFFFF:
            raise ValueError(f"IPID out of range: {self.ipid:#x}")

    def __len__(self) -> int:
        return IP_HEADER_LENGTH

    def marshal(self, buf) -> None:
        """
        Serialize the header into the first 20 bytes of buf.

        Args:
            buf: Mutable buffer (bytearray or writable memoryview) holding
                 the entire packet

        Raises:
            BufferTooSmallError: If buf is shorter than 20 bytes
            PacketTooLargeError: If buf is longer than MAX_PACKET_LENGTH
        """
        check_buffer_length(buf, IP_HEADER_LENGTH)

        buf[0] = 0x40 | (IP_HEADER_LENGTH >> 2)  # version, IHL
        buf[1] = 0x00                            # DSCP, ECN
        put16(buf, 2, len(buf))
        put16(buf, 4, self.ipid)
        put16(buf, 6, 0)                         # flags, fragment offset
        buf[8] = DEFAULT_TTL
        buf[9] = int(self.proto)
        put16(buf, 10, 0)
        put32(buf, 12, int(self.src_ip))
        put32(buf, 16, int(self.dst_ip))

        put16(buf, 10, ip_checksum(buf[:IP_HEADER_LENGTH]))

    def marshal_pseudo(self, buf) -> None:
        """
        Serialize the header into buf in pseudo-header form.

        Layout: 8 zero bytes, source, destination, zero, protocol,
        upper-layer length (len(buf) - 20). The result is a checksum seed
        for the transport segment following it in buf and is never sent.

        Raises:
            BufferTooSmallError: If buf is shorter than 20 bytes
            PacketTooLargeError: If buf is longer than MAX_PACKET_LENGTH
        """
        check_buffer_length(buf, IP_HEADER_LENGTH)

        buf[0:8] = bytes(8)
        put32(buf, 8, int(self.src_ip))
        put32(buf, 12, int(self.dst_ip))
        buf[16] = 0x00
        buf[17] = int(self.proto)
        put16(buf, 18, len(buf) - IP_HEADER_LENGTH)

    def to_response(self) -> None:
        """
        Turn this header into the header of a reply.

        Swaps the addresses and flips every bit of the IPID. Distinct
        incoming IPIDs stay distinct; this is not a uniqueness guarantee.
        """
        self.src_ip, self.dst_ip = self.dst_ip, self.src_ip
        self.ipid = ~self.ipid & 0xFFFF

    @classmethod
    def unmarshal(cls, buf) -> 'IP4Header':
        """
        Decode the IPv4 header at the start of a captured packet.

        Non-first fragments decode with proto FRAGMENT, since only the
        first fragment carries the upper-layer header.

        Raises:
            BufferTooSmallError: If buf is shorter than 20 bytes
            PacketTooLargeError: If buf is longer than MAX_PACKET_LENGTH
            MalformedHeaderError: On a non-IPv4 packet, IP options or a
                                  bad header checksum
        """
        check_buffer_length(buf, IP_HEADER_LENGTH)

        version = buf[0] >> 4
        ihl = buf[0] & 0x0F
        if version != 4:
            raise MalformedHeaderError(f"Not an IPv4 packet: version {version}")
        if ihl != IP_HEADER_LENGTH >> 2:
            raise MalformedHeaderError(f"IPv4 options not supported: IHL {ihl}")
        if not verify_checksum(buf[:IP_HEADER_LENGTH]):
            raise MalformedHeaderError(
                f"Invalid IPv4 header checksum: {get16(buf, 10):#06x}"
            )

        if get16(buf, 6) & 0x1FFF:
            proto = IP4Proto.FRAGMENT
        else:
            proto = IP4Proto.from_wire(buf[9])

        return cls(
            proto=proto,
            ipid=get16(buf, 4),
            src_ip=IP4(get32(buf, 12)),
            dst_ip=IP4(get32(buf, 16)),
        )


__all__ = [
    'IP4Header',
    'HeaderError',
    'BufferTooSmallError',
    'PacketTooLargeError',
    'MalformedHeaderError',
    'IP_HEADER_LENGTH',
    'MAX_PACKET_LENGTH',
    'check_buffer_length',
]
