"""Binary reading utilities for little-endian PC archive data."""

import struct
from io import BytesIO
from typing import BinaryIO, Callable, Optional, Union


class BinaryReader:
    """Cursor over little-endian archive data."""

    def __init__(self, data: Union[bytes, bytearray, BinaryIO]):
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(bytes(data))
        else:
            self._stream = data

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(f"Expected {size} bytes at 0x{self.tell() - len(data):X}, got {len(data)}")
        return data

    def read_u16(self) -> int:
        return struct.unpack("<H", self.read_bytes(2))[0]

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_cstring(
        self,
        max_length: int = 1024,
        stop: Optional[Callable[[int], bool]] = None,
    ) -> str:
        """Read a null-terminated ASCII string.

        ``stop`` is an extra terminator test on each byte value; header tags
        end at the first byte it accepts.
        """
        chars = bytearray()
        for _ in range(max_length):
            byte = self._stream.read(1)
            if not byte or byte == b"\x00":
                break
            if stop is not None and stop(byte[0]):
                break
            chars += byte
        return chars.decode("ascii", errors="replace")


def write_u32_le(value: int) -> bytes:
    """Pack a little-endian 32-bit unsigned integer."""
    return struct.pack("<I", value)
