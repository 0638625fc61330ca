from .pcap_writer import PCAPWriter
from .console import ConsoleFormatter, ConsoleColors

__all__ = [
    'PCAPWriter',
    'ConsoleFormatter',
    'ConsoleColors',
]
