from typing import Union

from colorama import Fore, Style

from ..core.icmp_header import ICMP4Header
from ..core.ipv4_header import IP4Header


class ConsoleColors:
    """Terminal colors used by the formatter"""
    CYAN = Fore.CYAN
    GREEN = Fore.GREEN
    YELLOW = Fore.YELLOW
    RED = Fore.RED
    ENDC = Style.RESET_ALL


class ConsoleFormatter:
    """Formatters for console output"""

    def __init__(self, colors_enabled: bool = True) -> None:
        self.colors_enabled = colors_enabled

    def _color(self, color: str, msg: str) -> str:
        if not self.colors_enabled:
            return msg
        return f"{color}{msg}{ConsoleColors.ENDC}"

    def success(self, msg: str) -> str:
        return self._color(ConsoleColors.GREEN, f"[✓] {msg}")

    def error(self, msg: str) -> str:
        return self._color(ConsoleColors.RED, f"[✗] {msg}")

    def warning(self, msg: str) -> str:
        return self._color(ConsoleColors.YELLOW, f"[!] {msg}")

    def describe(self, header: Union[IP4Header, ICMP4Header]) -> str:
        """One-line summary of a header value."""
        if isinstance(header, ICMP4Header):
            ip = header.ip
            text = (f"ICMP {ip.src_ip} > {ip.dst_ip} "
                    f"{header.icmp_type!s} code={int(header.code)} ipid={ip.ipid:#06x}")
        else:
            text = (f"IPv4 {header.src_ip} > {header.dst_ip} "
                    f"proto={header.proto!s} ipid={header.ipid:#06x}")
        return self._color(ConsoleColors.CYAN, f"[→] {text}")

    @staticmethod
    def hexdump(data: Union[bytes, bytearray, memoryview], width: int = 16) -> str:
        """
        Render bytes as offset, hex and printable ASCII columns.

        Example:
            0000  45 00 00 14 12 34 00 00 40 06 ...  E....4..@.
        """
        data = bytes(data)
        lines = []
        for offset in range(0, len(data), width):
            chunk = data[offset:offset + width]
            hex_part = " ".join(f"{b:02x}" for b in chunk)
            ascii_part = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
            lines.append(f"{offset:04x}  {hex_part:<{width * 3 - 1}}  {ascii_part}")
        return "\n".join(lines)
