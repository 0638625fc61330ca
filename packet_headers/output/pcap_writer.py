import logging
import struct
import threading
import time
from typing import List, Optional, Union


logger = logging.getLogger(__name__)


class PCAPWriter:
    """
    Native PCAP file writer for marshaled IPv4 packets.

    Packets are stored without a link-layer header (link type 101, raw IP),
    exactly as marshaled into their buffers.

    PCAP Global Header (24 bytes):
    - magic_number: 0xa1b2c3d4
    - version_major: 2
    - version_minor: 4
    - thiszone: 0 (timezone correction)
    - sigfigs: 0 (timestamp accuracy)
    - snaplen: 65535 (max packet length)
    - network: 101 (raw IP)

    PCAP Packet Header (16 bytes):
    - ts_sec: seconds since epoch
    - ts_usec: microseconds
    - incl_len: bytes saved in file
    - orig_len: actual length of packet
    """

    PCAP_MAGIC = 0xa1b2c3d4
    VERSION_MAJOR = 2
    VERSION_MINOR = 4
    THISZONE = 0
    SIGFIGS = 0
    SNAPLEN = 65535
    NETWORK_RAW = 101

    # Maximum file size (prevent disk exhaustion)
    MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB

    def __init__(self, filename: str) -> None:
        """
        Open filename and write the PCAP global header.

        Raises:
            ValueError: If filename contains a null byte
            OSError: If the file cannot be created
        """
        if '\x00' in filename:
            raise ValueError("Null byte in PCAP filename")

        self.filename = filename
        self.packet_count = 0
        self._file_size = 0
        self._lock = threading.Lock()
        self._file = open(filename, 'wb')
        self._write_global_header()

    def _write_global_header(self) -> None:
        header = struct.pack('<IHHiIII',
            self.PCAP_MAGIC,
            self.VERSION_MAJOR,
            self.VERSION_MINOR,
            self.THISZONE,
            self.SIGFIGS,
            self.SNAPLEN,
            self.NETWORK_RAW
        )
        with self._lock:
            self._file.write(header)
            self._file_size = len(header)

    @property
    def file_size(self) -> int:
        with self._lock:
            return self._file_size

    def write_packet(self, packet: Union[bytes, bytearray, memoryview],
                     timestamp: Optional[float] = None) -> None:
        """
        Append one packet record.

        Raises:
            OSError: If the file size limit is reached
        """
        if timestamp is None:
            timestamp = time.time()

        ts_sec = int(timestamp)
        ts_usec = int((timestamp - ts_sec) * 1000000)

        data = bytes(packet)
        incl_len = min(len(data), self.SNAPLEN)
        record = struct.pack('<IIII', ts_sec, ts_usec, incl_len, len(data))

        with self._lock:
            if self._file_size + len(record) + incl_len > self.MAX_FILE_SIZE:
                logger.warning("PCAP file size limit (%d bytes) reached", self.MAX_FILE_SIZE)
                raise OSError("PCAP file size limit reached")

            self._file.write(record)
            self._file.write(data[:incl_len])
            self._file.flush()
            self._file_size += len(record) + incl_len

        self.packet_count += 1

    def write_packets(self, packets: List[bytes],
                      base_timestamp: Optional[float] = None) -> None:
        """Write multiple packets 1ms apart"""
        if base_timestamp is None:
            base_timestamp = time.time()

        for i, packet in enumerate(packets):
            self.write_packet(packet, base_timestamp + (i * 0.001))

    def close(self) -> None:
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None

    def __enter__(self) -> 'PCAPWriter':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
