"""Tests for binary utilities."""

import pytest

from ypf_toolkit.errors import TruncatedInputError
from ypf_toolkit.utils.binary import BinaryReader, BinaryWriter


class TestBinaryReader:
    """Tests for BinaryReader class."""

    def test_read_u8(self):
        reader = BinaryReader(b"\x42")
        assert reader.read_u8() == 0x42

    def test_read_u32_little_endian(self):
        reader = BinaryReader(b"\x78\x56\x34\x12")
        assert reader.read_u32() == 0x12345678

    def test_read_u64_little_endian(self):
        reader = BinaryReader(b"\xF0\xDE\xBC\x9A\x78\x56\x34\x12")
        assert reader.read_u64() == 0x123456789ABCDEF0

    def test_read_uint_widths(self):
        reader = BinaryReader(b"\x01\x00\x00\x00\x02\x00\x00\x00\x00\x00\x00\x00")
        assert reader.read_uint(4) == 1
        assert reader.read_uint(8) == 2

    def test_read_uint_bad_width(self):
        reader = BinaryReader(b"\x00" * 8)
        with pytest.raises(ValueError):
            reader.read_uint(2)

    def test_truncated_read(self):
        reader = BinaryReader(b"\x00\x01")
        with pytest.raises(TruncatedInputError):
            reader.read_bytes(10)


class TestBinaryWriter:
    """Tests for BinaryWriter class."""

    def test_write_integers(self):
        writer = BinaryWriter()
        writer.write_u8(0x42)
        writer.write_u32(0x12345678)
        writer.write_u64(1)
        assert writer.getvalue() == b"\x42\x78\x56\x34\x12\x01" + b"\x00" * 7
        assert len(writer) == 13

    def test_write_uint_matches_reader(self):
        writer = BinaryWriter()
        writer.write_uint(0xDEADBEEF, 4)
        writer.write_uint(0x1_0000_0000, 8)
        reader = BinaryReader(writer.getvalue())
        assert reader.read_uint(4) == 0xDEADBEEF
        assert reader.read_uint(8) == 0x1_0000_0000
