"""Tests for binary utilities."""

import pytest

from bra_toolkit.utils.binary import BinaryReader, write_u32_le


class TestBinaryReader:
    """Tests for BinaryReader class."""

    def test_read_u16_little_endian(self):
        reader = BinaryReader(b"\x34\x12")
        assert reader.read_u16() == 0x1234

    def test_read_u32_little_endian(self):
        reader = BinaryReader(b"\x78\x56\x34\x12")
        assert reader.read_u32() == 0x12345678

    def test_accepts_bytearray(self):
        reader = BinaryReader(bytearray(b"\x01\x00\x00\x00"))
        assert reader.read_u32() == 1

    def test_read_cstring(self):
        reader = BinaryReader(b"PDA\x00\x02\x00")
        assert reader.read_cstring() == "PDA"
        assert reader.tell() == 4

    def test_read_cstring_max_length(self):
        reader = BinaryReader(b"ABCDEFGH")
        assert reader.read_cstring(max_length=4) == "ABCD"

    def test_read_cstring_stop_predicate(self):
        reader = BinaryReader(b"PD\xffA\x00")
        assert reader.read_cstring(stop=lambda b: b >= 0x80) == "PD"

    def test_seek_and_tell(self):
        reader = BinaryReader(b"\x00\x01\x02\x03\x04\x05")
        reader.seek(2)
        assert reader.tell() == 2
        assert reader.read_u16() == 0x0302

    def test_eof_error(self):
        reader = BinaryReader(b"\x00\x01")
        with pytest.raises(EOFError, match="Expected 4 bytes"):
            reader.read_u32()


def test_write_u32_le():
    assert write_u32_le(0x12345678) == b"\x78\x56\x34\x12"
