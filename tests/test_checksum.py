"""Tests for the Internet checksum and byte order helpers."""

import pytest

from scapy.layers.inet import IP, ICMP

from packet_headers.core import (
    ChecksumError,
    InternetChecksum,
    get16,
    get32,
    in_cksum,
    put16,
    put32,
    verify_checksum,
)


def test_known_value():
    """RFC 1071 worked example"""
    data = bytes.fromhex("0001f203f4f5f6f7")
    assert in_cksum(data) == 0x220D


def test_small_sum():
    assert in_cksum(b'\x00\x01\x00\x02') == 0xFFFC


def test_odd_length_pads_with_zero():
    assert in_cksum(b"abc") == 0x3B9D
    assert in_cksum(b"abc") == in_cksum(b"abc\x00")


def test_empty():
    assert in_cksum(b"") == 0xFFFF


def test_carry_folding():
    """Carries above bit 16 wrap around into the low bits"""
    assert in_cksum(b'\xff\xff\x00\x01') == 0xFFFE
    assert in_cksum(b'\xff\xff' * 3) == 0x0000


def test_fold_repeats_until_no_carry():
    assert InternetChecksum._fold_32_to_16(0x1FFFF) == 0x0001
    assert InternetChecksum._fold_32_to_16(0xFFFF + 0xFFFF) == 0xFFFF


def test_start_seed():
    assert in_cksum(b'\x00\x01', start=2) == (~3) & 0xFFFF


def test_bytes_like_inputs_agree():
    data = bytes(range(31))
    assert in_cksum(data) == in_cksum(bytearray(data))
    assert in_cksum(data) == in_cksum(memoryview(data))


def test_rejects_str():
    with pytest.raises(ChecksumError):
        in_cksum("abc")


def test_scapy_ip_header_verifies():
    """A header built by scapy sums to zero"""
    pck = IP(src="192.168.2.1", dst="192.168.2.2")
    assert in_cksum(pck.build()) == 0
    assert verify_checksum(pck.build())


def test_scapy_icmp_verifies():
    pck = ICMP(type=8, id=0x4242, seq=7) / b"payload"
    assert verify_checksum(pck.build())


def test_verify_detects_corruption():
    data = bytearray(IP(src="10.1.1.1", dst="10.1.1.2").build())
    data[15] ^= 0x01
    assert not verify_checksum(data)


def test_put_get_16():
    buf = bytearray(4)
    put16(buf, 1, 0xABCD)
    assert buf == bytearray(b'\x00\xab\xcd\x00')
    assert get16(buf, 1) == 0xABCD


def test_put_get_32():
    buf = bytearray(6)
    put32(buf, 2, 0x0A000001)
    assert buf[2:6] == b'\x0a\x00\x00\x01'
    assert get32(buf, 2) == 0x0A000001


def test_put_masks_to_width():
    buf = bytearray(2)
    put16(buf, 0, 0x12345)
    assert get16(buf, 0) == 0x2345
