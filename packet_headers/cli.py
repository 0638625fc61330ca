#!/usr/bin/env python3
"""
pkthdr - IPv4/ICMPv4 header builder
===================================

Builds IPv4 and ICMPv4 headers into packet-sized buffers, turns captured
requests into their replies, and computes Internet checksums.

USAGE:
    pkthdr [global options] <command> [options]

COMMANDS:
    ip4         Build an IPv4 header
    icmp4       Build an IPv4 + ICMP header
    pseudo      Build a TCP/UDP checksum pseudo-header
    respond     Turn a captured IPv4/ICMP packet into its reply
    checksum    Internet checksum of hex data
    config      Show, create or edit the config file

GLOBAL OPTIONS:
    -c, --config <file>        JSON config file
    -f, --format <fmt>         Output format: hex|hexdump|dissect
    --pcap <file>              Write produced packets to a raw-IP PCAP file
    -v, --verbose              Verbose output
    --no-color                 Disable colors

EXAMPLES:
    pkthdr ip4 --src 10.0.0.1 --dst 10.0.0.2 --proto tcp --ipid 0x1234
    pkthdr icmp4 --src 10.0.0.1 --dst 10.0.0.2 --length 64 -f hexdump
    pkthdr respond --pcap-in pings.pcap --pcap replies.pcap
    pkthdr checksum 4500001412340000400600000a0000010a000002
    pkthdr config --set output.format=hexdump
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional, Tuple, Union

from . import __version__
from .config import ConfigError, ConfigManager, create_default_config
from .core import (
    IP4,
    IP4Header,
    IP4Proto,
    ICMP4Header,
    ICMP4Type,
    HeaderError,
    get16,
    in_cksum,
)
from .output import ConsoleFormatter, PCAPWriter


logger = logging.getLogger(__name__)

Header = Union[IP4Header, ICMP4Header]

PROTO_NAMES = {
    'unknown': IP4Proto.UNKNOWN,
    'icmp': IP4Proto.ICMP,
    'igmp': IP4Proto.IGMP,
    'tcp': IP4Proto.TCP,
    'udp': IP4Proto.UDP,
    'icmpv6': IP4Proto.ICMPV6,
}

ICMP_TYPE_NAMES = {
    'echo-reply': ICMP4Type.ECHO_REPLY,
    'unreachable': ICMP4Type.UNREACHABLE,
    'echo-request': ICMP4Type.ECHO_REQUEST,
    'time-exceeded': ICMP4Type.TIME_EXCEEDED,
}


class CommandError(Exception):
    """Raised for command-level failures reported to the user."""
    pass


# =============================================================================
# ARGUMENT PARSER
# =============================================================================

class HeaderToolParser(argparse.ArgumentParser):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault('formatter_class', argparse.RawDescriptionHelpFormatter)
        super().__init__(*args, **kwargs)

    def error(self, message):
        self.exit(2, f"[ERROR] {message}\n")


# =============================================================================
# INPUT VALIDATION FUNCTIONS
# =============================================================================

def validate_address(value: str) -> IP4:
    try:
        return IP4.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid IPv4 address: '{value}'")


def validate_uint(value: str, field_name: str, max_value: int) -> int:
    try:
        int_value = int(value, 0)
    except (ValueError, TypeError):
        raise argparse.ArgumentTypeError(f"{field_name} must be an integer, got '{value}'")

    if not 0 <= int_value <= max_value:
        raise argparse.ArgumentTypeError(
            f"{field_name} must be between 0 and {max_value}, got {int_value}"
        )
    return int_value


def validate_ipid(value: str) -> int:
    return validate_uint(value, "IPID", 0xFFFF)


def validate_length(value: str) -> int:
    # Upper bound is enforced by marshal and by the configured maximum
    return validate_uint(value, "Length", sys.maxsize)


def validate_proto(value: str) -> IP4Proto:
    if value.lower() in PROTO_NAMES:
        return PROTO_NAMES[value.lower()]
    number = validate_uint(value, "Protocol", 0xFF)
    proto = IP4Proto.from_wire(number)
    if proto == IP4Proto.UNKNOWN and number != 0:
        raise argparse.ArgumentTypeError(f"Unsupported protocol number: {number}")
    return proto


def validate_icmp_type(value: str) -> ICMP4Type:
    if value.lower() in ICMP_TYPE_NAMES:
        return ICMP_TYPE_NAMES[value.lower()]
    raise argparse.ArgumentTypeError(
        f"ICMP type must be one of {', '.join(ICMP_TYPE_NAMES)}, got '{value}'"
    )


def validate_hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value.replace(':', '').replace(' ', ''))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hex data: '{value}'")


def validate_setting(value: str) -> Tuple[str, str]:
    key, sep, setting = value.partition('=')
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{value}'")
    return key.strip(), setting.strip()


def create_parser() -> HeaderToolParser:
    """Create the argument parser."""
    parser = HeaderToolParser(
        prog='pkthdr',
        description=__doc__,
    )
    parser.add_argument('--version', action='version', version=f"pkthdr {__version__}")
    parser.add_argument('-c', '--config',
                        default=None,
                        help='JSON config file')
    parser.add_argument('-f', '--format',
                        choices=['hex', 'hexdump', 'dissect'],
                        default=None,
                        help='Output format (default from config)')
    parser.add_argument('--pcap',
                        default=None,
                        help='Write produced packets to this PCAP file')
    parser.add_argument('-v', '--verbose',
                        action='store_true',
                        help='Verbose')
    parser.add_argument('--no-color',
                        action='store_true',
                        help='Disable colors')

    subparsers = parser.add_subparsers(dest='command', metavar='command',
                                       parser_class=HeaderToolParser)
    subparsers.required = True

    ip4 = subparsers.add_parser('ip4', help='Build an IPv4 header')
    _add_address_args(ip4)
    ip4.add_argument('--proto', type=validate_proto, default=IP4Proto.UNKNOWN,
                     help='Protocol name or number (default: unknown)')
    ip4.add_argument('--ipid', type=validate_ipid, default=0, help='Identification')
    ip4.add_argument('--length', type=validate_length, default=None,
                     help='Total packet length (default: header length)')

    icmp4 = subparsers.add_parser('icmp4', help='Build an IPv4 + ICMP header')
    _add_address_args(icmp4)
    icmp4.add_argument('--type', dest='icmp_type', type=validate_icmp_type,
                       default=ICMP4Type.ECHO_REQUEST,
                       help='ICMP type (default: echo-request)')
    icmp4.add_argument('--ipid', type=validate_ipid, default=0, help='Identification')
    icmp4.add_argument('--length', type=validate_length, default=None,
                       help='Total packet length (default: header length)')

    pseudo = subparsers.add_parser('pseudo', help='Build a checksum pseudo-header')
    _add_address_args(pseudo)
    pseudo.add_argument('--proto', type=validate_proto, required=True,
                        help='Transport protocol name or number')
    pseudo.add_argument('--length', type=validate_length, default=None,
                        help='Pseudo-header plus transport segment length')

    respond = subparsers.add_parser('respond', help='Turn a packet into its reply')
    source = respond.add_mutually_exclusive_group(required=True)
    source.add_argument('--hex', dest='packet_hex', type=validate_hex,
                        help='Packet as hex')
    source.add_argument('--pcap-in', dest='pcap_in',
                        help='Read packets from a PCAP file')

    checksum = subparsers.add_parser('checksum', help='Internet checksum of hex data')
    checksum.add_argument('data', type=validate_hex, help='Data as hex')

    config = subparsers.add_parser('config',
                                   help='Show the effective config, or create or edit the file')
    action = config.add_mutually_exclusive_group()
    action.add_argument('--init', action='store_true',
                        help='Write a default config file')
    action.add_argument('--set', dest='settings', type=validate_setting,
                        action='append', metavar='KEY=VALUE',
                        help='Change a setting in the config file (repeatable)')

    return parser


def _add_address_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--src', type=validate_address, required=True,
                        help='Source IPv4 address')
    parser.add_argument('--dst', type=validate_address, required=True,
                        help='Destination IPv4 address')


# =============================================================================
# COMMANDS
# =============================================================================

def _allocate(length: Optional[int], header_length: int, max_size: int) -> bytearray:
    if length is None:
        length = header_length
    if length > max_size:
        raise CommandError(f"Length {length} exceeds configured max_packet_size {max_size}")
    return bytearray(length)


def build_ip4(args, max_size: int) -> Tuple[Header, bytearray]:
    header = IP4Header(proto=args.proto, ipid=args.ipid, src_ip=args.src, dst_ip=args.dst)
    buf = _allocate(args.length, len(header), max_size)
    header.marshal(buf)
    return header, buf


def build_icmp4(args, max_size: int) -> Tuple[Header, bytearray]:
    header = ICMP4Header(
        ip=IP4Header(ipid=args.ipid, src_ip=args.src, dst_ip=args.dst),
        icmp_type=args.icmp_type,
    )
    buf = _allocate(args.length, len(header), max_size)
    header.marshal(buf)
    return header, buf


def build_pseudo(args, max_size: int) -> Tuple[Header, bytearray]:
    header = IP4Header(proto=args.proto, src_ip=args.src, dst_ip=args.dst)
    buf = _allocate(args.length, len(header), max_size)
    header.marshal_pseudo(buf)
    return header, buf


def decode_packet(raw: bytes) -> Header:
    """Decode a captured packet as ICMP when it carries ICMP, else as IPv4."""
    if len(raw) >= ICMP4Header.HEADER_LENGTH and raw[9] == IP4Proto.ICMP:
        return ICMP4Header.unmarshal(raw)
    return IP4Header.unmarshal(raw)


def respond_packet(raw: bytes) -> Tuple[Header, bytearray]:
    """
    Build the reply to one captured packet, keeping its payload.

    Raises:
        HeaderError: If raw does not decode
        CommandError: If raw is truncated, a non-first fragment or an ICMP
                      message other than an echo request
    """
    if len(raw) >= 4:
        total = get16(raw, 2)
        if total > len(raw):
            raise CommandError(
                f"Truncated capture: IPv4 total length {total}, captured {len(raw)} bytes"
            )
        # drop link-layer padding beyond the IPv4 total length
        if IP4Header.HEADER_LENGTH <= total < len(raw):
            raw = raw[:total]

    header = decode_packet(raw)
    if isinstance(header, ICMP4Header):
        if header.icmp_type != ICMP4Type.ECHO_REQUEST:
            raise CommandError(f"No reply exists for ICMP {header.icmp_type!s}")
    elif header.proto == IP4Proto.FRAGMENT:
        raise CommandError("Cannot reply to a non-first fragment")
    elif header.proto in (IP4Proto.TCP, IP4Proto.UDP):
        logger.debug("Transport checksum of %s packet is left unchanged", header.proto)

    header.to_response()
    buf = bytearray(raw)
    header.marshal(buf)
    return header, buf


def read_pcap_packets(path: str) -> List[bytes]:
    """Raw IPv4 bytes of every IPv4 packet in a capture file."""
    from scapy.layers.inet import IP
    from scapy.utils import rdpcap

    packets = []
    for pkt in rdpcap(path):
        if IP not in pkt:
            logger.warning("Skipping non-IPv4 packet: %s", pkt.summary())
            continue
        packets.append(bytes(pkt[IP]))
    return packets


def dissect(buf: bytearray) -> str:
    from scapy.layers.inet import IP

    return IP(bytes(buf)).show(dump=True)


# =============================================================================
# OUTPUT
# =============================================================================

def emit(results: List[Tuple[Header, bytearray]], fmt: str,
         formatter: ConsoleFormatter, verbose: bool, pseudo: bool = False) -> None:
    if fmt == 'dissect' and pseudo:
        print(formatter.warning("Pseudo-headers cannot be dissected, using hexdump"),
              file=sys.stderr)
        fmt = 'hexdump'

    for header, buf in results:
        if verbose:
            print(formatter.describe(header))
        if fmt == 'hex':
            print(buf.hex())
        elif fmt == 'hexdump':
            print(formatter.hexdump(buf))
        else:
            print(dissect(buf))


def resolve_pcap_path(path: str, directory: str) -> str:
    """Place a bare file name under the configured PCAP directory."""
    if os.path.dirname(path):
        return path
    os.makedirs(directory, exist_ok=True)
    return os.path.join(directory, path)


def write_pcap(path: str, results: List[Tuple[Header, bytearray]]) -> None:
    with PCAPWriter(path) as writer:
        writer.write_packets([bytes(buf) for _, buf in results])
    logger.info("Wrote %d packet(s) to %s", len(results), path)


def run_config(args, config: ConfigManager, formatter: ConsoleFormatter) -> None:
    if args.init:
        if os.path.exists(config.config_file):
            raise CommandError(f"Config file already exists: {config.config_file}")
        create_default_config(config.config_file)
        print(formatter.success(f"Wrote default config to {config.config_file}"))
    elif args.settings:
        for key, value in args.settings:
            config.set(key, value)
        config.save()
        print(formatter.success(f"Updated {config.config_file}"))
    else:
        print(json.dumps(config.effective(), indent=2))


def run(args, config: ConfigManager, formatter: ConsoleFormatter) -> None:
    max_size = config.get("general.max_packet_size")
    fmt = args.format or config.get("output.format")

    if args.command == 'checksum':
        print(f"{in_cksum(args.data):#06x}")
        return

    if args.command == 'config':
        run_config(args, config, formatter)
        return

    if args.command == 'ip4':
        results = [build_ip4(args, max_size)]
    elif args.command == 'icmp4':
        results = [build_icmp4(args, max_size)]
    elif args.command == 'pseudo':
        results = [build_pseudo(args, max_size)]
    else:
        if args.pcap_in:
            raws = read_pcap_packets(args.pcap_in)
        else:
            raws = [args.packet_hex]
        results = [respond_packet(raw) for raw in raws]

    pseudo = args.command == 'pseudo'
    emit(results, fmt, formatter, args.verbose, pseudo=pseudo)

    if args.pcap:
        if pseudo:
            raise CommandError("Pseudo-headers are never transmitted; not writing PCAP")
        path = resolve_pcap_path(args.pcap, config.get("output.pcap_directory"))
        write_pcap(path, results)
        print(formatter.success(f"Wrote {len(results)} packet(s) to {path}"))


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    strict = args.config is not None
    if args.command == 'config':
        # editing starts from the defaults when the file does not exist yet
        strict = os.path.exists(args.config or ConfigManager.DEFAULT_FILE)

    config = ConfigManager(args.config)
    formatter = ConsoleFormatter(colors_enabled=not args.no_color and sys.stdout.isatty())
    try:
        config.load(strict=strict)
    except ConfigError as e:
        print(formatter.error(f"Config error: {e}"), file=sys.stderr)
        return 1

    level = logging.DEBUG if args.verbose else getattr(
        logging, config.get("general.log_level", "WARNING"))
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    formatter.colors_enabled = (formatter.colors_enabled and
                                config.get("output.colors_enabled", True))

    try:
        run(args, config, formatter)
    except (HeaderError, CommandError, ConfigError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(formatter.error(str(e)), file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
