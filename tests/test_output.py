"""Tests for console formatting and the PCAP writer."""

import struct

import pytest

from colorama import Fore
from scapy.utils import rdpcap

from packet_headers.core import IP4, IP4Header, IP4Proto, ICMP4Header, ICMP4Type
from packet_headers.output import ConsoleFormatter, PCAPWriter


def test_hexdump_single_row():
    out = ConsoleFormatter.hexdump(b'E\x00\x00\x14')
    assert out.startswith("0000  45 00 00 14")
    assert out.endswith("  E...")
    assert "\n" not in out


def test_hexdump_rows():
    lines = ConsoleFormatter.hexdump(bytes(range(0x41, 0x41 + 17))).splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("ABCDEFGHIJKLMNOP")
    assert lines[1].startswith("0010  51")


def test_plain_messages():
    formatter = ConsoleFormatter(colors_enabled=False)
    assert formatter.error("boom") == "[✗] boom"
    assert formatter.success("ok") == "[✓] ok"


def test_colored_messages():
    formatter = ConsoleFormatter(colors_enabled=True)
    assert formatter.error("boom").startswith(Fore.RED)


def test_describe_ip_header():
    formatter = ConsoleFormatter(colors_enabled=False)
    hdr = IP4Header(proto=IP4Proto.TCP, ipid=0x1234,
                    src_ip=IP4.from_string("10.0.0.1"),
                    dst_ip=IP4.from_string("10.0.0.2"))
    assert formatter.describe(hdr) == "[→] IPv4 10.0.0.1 > 10.0.0.2 proto=TCP ipid=0x1234"


def test_describe_icmp_header():
    formatter = ConsoleFormatter(colors_enabled=False)
    hdr = ICMP4Header(ip=IP4Header(src_ip=IP4.from_string("10.0.0.1"),
                                   dst_ip=IP4.from_string("10.0.0.2")),
                      icmp_type=ICMP4Type.ECHO_REQUEST)
    assert "EchoRequest code=0" in formatter.describe(hdr)


def test_pcap_writer_global_header(tmp_path):
    path = tmp_path / "out.pcap"
    with PCAPWriter(str(path)):
        pass
    data = path.read_bytes()
    assert len(data) == 24
    magic, major, minor, _, _, snaplen, network = struct.unpack('<IHHiIII', data)
    assert magic == 0xa1b2c3d4
    assert (major, minor) == (2, 4)
    assert snaplen == 65535
    assert network == 101


def test_pcap_writer_round_trip(tmp_path):
    packets = []
    for ipid in (1, 2):
        buf = bytearray(28)
        IP4Header(proto=IP4Proto.UDP, ipid=ipid,
                  src_ip=IP4.from_string("10.0.0.1"),
                  dst_ip=IP4.from_string("10.0.0.2")).marshal(buf)
        packets.append(bytes(buf))

    path = tmp_path / "out.pcap"
    with PCAPWriter(str(path)) as writer:
        writer.write_packets(packets)
        assert writer.packet_count == 2

    read = rdpcap(str(path))
    assert [bytes(pkt) for pkt in read] == packets


def test_pcap_writer_size_limit(tmp_path, monkeypatch):
    monkeypatch.setattr(PCAPWriter, "MAX_FILE_SIZE", 64)
    with PCAPWriter(str(tmp_path / "out.pcap")) as writer:
        with pytest.raises(OSError):
            writer.write_packet(bytes(40))
        assert writer.packet_count == 0


def test_pcap_writer_rejects_null_byte():
    with pytest.raises(ValueError):
        PCAPWriter("bad\x00name.pcap")


def test_warning_message():
    assert ConsoleFormatter(colors_enabled=False).warning("careful") == "[!] careful"
