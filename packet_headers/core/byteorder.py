"""
Network byte order helpers.

Thin wrappers over struct for writing and reading 16/32-bit unsigned
integers at an offset of a mutable buffer. Bounds are the caller's
responsibility; header marshaling checks buffer length up front.
"""

import struct


_U16 = struct.Struct('!H')
_U32 = struct.Struct('!I')


def put16(buf, offset: int, value: int) -> None:
    """Write value as a big-endian 16-bit integer at buf[offset:offset+2]."""
    _U16.pack_into(buf, offset, value & 0xFFFF)


def put32(buf, offset: int, value: int) -> None:
    """Write value as a big-endian 32-bit integer at buf[offset:offset+4]."""
    _U32.pack_into(buf, offset, value & 0xFFFFFFFF)


def get16(buf, offset: int) -> int:
    return _U16.unpack_from(buf, offset)[0]


def get32(buf, offset: int) -> int:
    return _U32.unpack_from(buf, offset)[0]


__all__ = ['put16', 'put32', 'get16', 'get32']
