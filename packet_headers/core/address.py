"""
IPv4 address value type and protocol numbers.

IP4 holds an address as the 32-bit integer formed by its network-order
bytes. IP4Proto is the closed set of upper-layer protocols the header
code recognizes, plus sentinel values that never appear on the wire
with their literal meaning.
"""

import ipaddress
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .byteorder import get32


@dataclass(frozen=True, order=True)
class IP4:
    """
    IPv4 address as a 32-bit unsigned integer.

    Every 32-bit value is a legal address; no reserved-range checks
    are made beyond the two classification predicates.

    Example:
        >>> str(IP4.from_octets(10, 0, 0, 1))
        '10.0.0.1'
        >>> IP4.from_string('224.0.0.1').is_multicast()
        True
    """

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {self.value:#x}")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> 'IP4':
        """
        Convert 4 network-order bytes into an address.

        Raises:
            ValueError: If data is not exactly 4 bytes
        """
        if len(data) != 4:
            raise ValueError(f"IPv4 address must be 4 bytes, got {len(data)}")
        return cls(get32(data, 0))

    @classmethod
    def from_octets(cls, a: int, b: int, c: int, d: int) -> 'IP4':
        for octet in (a, b, c, d):
            if not 0 <= octet <= 0xFF:
                raise ValueError(f"Octet out of range: {octet}")
        return cls((a << 24) | (b << 16) | (c << 8) | d)

    @classmethod
    def from_string(cls, addr: str) -> 'IP4':
        """
        Parse dotted-decimal text.

        Raises:
            ValueError: If addr is not an IPv4 address
        """
        return cls.from_ipaddress(ipaddress.IPv4Address(addr))

    @classmethod
    def from_ipaddress(cls, addr: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> 'IP4':
        if addr.version != 4:
            raise ValueError(f"Not an IPv4 address: {addr}")
        return cls(int(addr))

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(4, 'big')

    def to_ipaddress(self) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(self.value)

    def octets(self) -> tuple:
        v = self.value
        return (v >> 24) & 0xFF, (v >> 16) & 0xFF, (v >> 8) & 0xFF, v & 0xFF

    def is_multicast(self) -> bool:
        """True for 224.0.0.0/4."""
        return (self.value >> 24) & 0xF0 == 0xE0

    def is_link_local_unicast(self) -> bool:
        """True for 169.254.0.0/16."""
        return (self.value >> 16) == 0xA9FE

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return '%d.%d.%d.%d' % self.octets()


class IP4Proto(IntEnum):
    """
    IPv4 protocol numbers.

    Recognized values match their IANA protocol number. UNKNOWN is the
    zero value; FRAGMENT uses the unassigned 0xFF to mark a non-first
    fragment, whose protocol field cannot be trusted for dispatch.
    """
    UNKNOWN = 0x00
    ICMP = 0x01
    IGMP = 0x02
    TCP = 0x06
    UDP = 0x11
    ICMPV6 = 0x3A
    FRAGMENT = 0xFF

    @classmethod
    def from_wire(cls, number: int) -> 'IP4Proto':
        """Map a protocol byte read from a packet to a member."""
        try:
            return cls(number)
        except ValueError:
            # unrecognized
            return cls.UNKNOWN

    def __str__(self) -> str:
        return _PROTO_NAMES[self]


_PROTO_NAMES = {
    IP4Proto.UNKNOWN: "Unknown",
    IP4Proto.ICMP: "ICMP",
    IP4Proto.IGMP: "IGMP",
    IP4Proto.TCP: "TCP",
    IP4Proto.UDP: "UDP",
    IP4Proto.ICMPV6: "ICMPv6",
    IP4Proto.FRAGMENT: "Frag",
}


__all__ = ['IP4', 'IP4Proto']
