"""
Checksum Module - RFC 1071 Internet checksum for header marshaling.

Provides the ones-complement checksum used by:
- IPv4 headers (RFC 791)
- ICMP messages (RFC 792)
- TCP/UDP segments seeded with an IPv4 pseudo-header (RFC 793, RFC 768)

The checksum field of the summed region must be zero before calculation;
the caller then writes the result back into that field.
"""

from typing import Union


BytesLike = Union[bytes, bytearray, memoryview]


class ChecksumError(Exception):
    """Raised when checksum input is not a bytes-like object."""
    pass


def ip_checksum(data: BytesLike) -> int:
    """
    Calculate the Internet checksum of a header region.

    Args:
        data: Bytes to checksum, checksum field zeroed

    Returns:
        16-bit checksum value
    """
    return InternetChecksum.in_cksum(data)


def in_cksum(data: BytesLike, start: int = 0) -> int:
    """Module-level shortcut for InternetChecksum.in_cksum."""
    return InternetChecksum.in_cksum(data, start)


def verify_checksum(data: BytesLike) -> bool:
    """
    Check a region that already embeds its checksum.

    A correctly checksummed region sums to 0xFFFF, so its
    ones-complement is zero.
    """
    return InternetChecksum.in_cksum(data) == 0


class InternetChecksum:
    """
    RFC 1071 ones-complement checksum calculator.

    Algorithm:
    1. Sum all 16-bit big-endian words (odd trailing byte padded with zero)
    2. Fold carries above bit 16 back into the low 16 bits
    3. Return the ones-complement

    Example:
        >>> InternetChecksum.in_cksum(b'\\x00\\x01\\x00\\x02')
        65532
    """

    @staticmethod
    def _fold_32_to_16(total: int) -> int:
        """
        Fold the accumulator to 16 bits with carry propagation.

        Repeated until no carry remains; a single fold can itself
        produce a carry.
        """
        while total >> 16:
            total = (total & 0xFFFF) + (total >> 16)
        return total

    @staticmethod
    def _ones_complement_16(value: int) -> int:
        return (~value) & 0xFFFF

    @staticmethod
    def in_cksum(data: BytesLike, start: int = 0) -> int:
        """
        Compute Internet checksum per RFC 1071.

        Args:
            data: Bytes-like object to checksum
            start: Seed added to the sum (default 0)

        Returns:
            16-bit ones-complement checksum

        Raises:
            ChecksumError: If data is not bytes-like
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ChecksumError("Data must be bytes-like")

        view = memoryview(data).cast('B')
        length = len(view)
        even = length - (length % 2)

        total = start
        for i in range(0, even, 2):
            # Network byte order
            total += (view[i] << 8) | view[i + 1]
        if length % 2:
            total += view[length - 1] << 8

        total = InternetChecksum._fold_32_to_16(total)
        return InternetChecksum._ones_complement_16(total)


__all__ = [
    'InternetChecksum',
    'ChecksumError',
    'in_cksum',
    'ip_checksum',
    'verify_checksum',
]
