"""Binary reading and writing utilities for little-endian YPF data."""

import struct
from io import BytesIO
from typing import BinaryIO, Union

from ..errors import TruncatedInputError


class BinaryReader:
    """Helper for reading little-endian binary data."""

    def __init__(self, data: Union[bytes, bytearray, memoryview, BinaryIO]):
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

    def tell(self) -> int:
        return self._stream.tell()

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise TruncatedInputError(f"Expected {size} bytes at offset {self.tell() - len(data)}, got {len(data)}")
        return data

    def read_u8(self) -> int:
        return struct.unpack("<B", self.read_bytes(1))[0]

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_u64(self) -> int:
        return struct.unpack("<Q", self.read_bytes(8))[0]

    def read_uint(self, width: int) -> int:
        """Read an unsigned integer that is either 4 or 8 bytes wide."""
        if width == 4:
            return self.read_u32()
        if width == 8:
            return self.read_u64()
        raise ValueError(f"Unsupported integer width: {width}")


class BinaryWriter:
    """Helper for building little-endian binary data in memory."""

    def __init__(self):
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def write(self, data: bytes) -> None:
        self._buffer.extend(data)

    def write_u8(self, value: int) -> None:
        self._buffer.extend(struct.pack("<B", value))

    def write_u32(self, value: int) -> None:
        self._buffer.extend(struct.pack("<I", value))

    def write_u64(self, value: int) -> None:
        self._buffer.extend(struct.pack("<Q", value))

    def write_uint(self, value: int, width: int) -> None:
        """Write an unsigned integer that is either 4 or 8 bytes wide."""
        if width == 4:
            self.write_u32(value)
        elif width == 8:
            self.write_u64(value)
        else:
            raise ValueError(f"Unsupported integer width: {width}")
