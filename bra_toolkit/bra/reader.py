"""BRA header and entry table decoding."""

from typing import List

from ..utils.binary import BinaryReader
from .header import (
    HEADER_COMPRESSION_TYPE,
    MAGIC_SIZE,
    BRAFileEntry,
    BRAHeader,
    decode_name,
    is_invalid_path_char,
    sanitize_name,
)


def _ends_magic(value: int) -> bool:
    return value >= 0x80 or is_invalid_path_char(value)


def read_header(data: bytes) -> BRAHeader:
    """Read the 16-byte BRA header."""
    reader = BinaryReader(data)

    magic = reader.read_cstring(max_length=MAGIC_SIZE, stop=_ends_magic)

    reader.seek(HEADER_COMPRESSION_TYPE)
    compression_type = reader.read_u32()
    entry_table_offset = reader.read_u32()
    entry_count = reader.read_u32()

    return BRAHeader(
        magic=magic,
        compression_type=compression_type,
        entry_table_offset=entry_table_offset,
        entry_count=entry_count,
    )


def read_entries(data: bytes, header: BRAHeader) -> List[BRAFileEntry]:
    """Read every record of the entry table, in table order."""
    reader = BinaryReader(data)
    reader.seek(header.entry_table_offset)

    entries = []
    for _ in range(header.entry_count):
        record_offset = reader.tell()

        packed_time = reader.read_u32()
        reserved = reader.read_u32()
        compressed_size = reader.read_u32()
        uncompressed_size = reader.read_u32()
        name_length = reader.read_u16()
        flags = reader.read_u16()
        payload_offset = reader.read_u32()
        raw_name = decode_name(reader.read_bytes(name_length))

        entries.append(
            BRAFileEntry(
                record_offset=record_offset,
                packed_time=packed_time,
                reserved=reserved,
                compressed_size=compressed_size,
                uncompressed_size=uncompressed_size,
                name_length=name_length,
                flags=flags,
                payload_offset=payload_offset,
                name=sanitize_name(raw_name),
            )
        )

    return entries
