"""BRA header and file entry structures."""

from dataclasses import dataclass
from typing import List

# BRA magic tag, stored null-terminated at offset 0
BRA_MAGIC = "PDA"

# Header field offsets
MAGIC_SIZE = 0x04
HEADER_COMPRESSION_TYPE = 0x04
HEADER_ENTRY_TABLE_OFFSET = 0x08
HEADER_ENTRY_COUNT = 0x0C
HEADER_SIZE = 0x10

# Entry record field offsets, relative to the record start
ENTRY_PACKED_TIME = 0x00
ENTRY_RESERVED = 0x04
ENTRY_COMPRESSED_SIZE = 0x08
ENTRY_UNCOMPRESSED_SIZE = 0x0C
ENTRY_NAME_LENGTH = 0x10
ENTRY_FLAGS = 0x12
ENTRY_PAYLOAD_OFFSET = 0x14
ENTRY_NAME = 0x18

# Every payload block starts with {u32 size, u32 zsize, 8 opaque bytes}
BLOCK_PREFIX_SIZE = 0x10
BLOCK_UNCOMPRESSED_SIZE = 0x00
BLOCK_COMPRESSED_SIZE = 0x04

# Characters Windows rejects in paths and file names. The backslash is the
# archive's path separator and survives sanitizing.
INVALID_PATH_CHARS = frozenset(chr(c) for c in range(32)) | frozenset('"<>|:*?\\/')
PATH_SEPARATOR = "\\"


def is_invalid_path_char(value: int) -> bool:
    return chr(value) in INVALID_PATH_CHARS


def decode_name(raw: bytes) -> str:
    """Decode raw name bytes as ASCII, turning every byte >= 0x80 into ``?``."""
    return raw.decode("ascii", errors="replace").replace("\ufffd", "?")


def sanitize_name(raw: str) -> str:
    """Turn a raw entry name into a relative path.

    Invalid characters are dropped, then the name is cut three characters
    after its first dot. Names are assumed to carry three-letter extensions;
    anything following is padding in the samples seen so far.

    A name without a dot is returned whole. The old packing tool cut such
    names down to their first three characters; that is not reproduced.
    """
    name = "".join(
        c for c in raw if c == PATH_SEPARATOR or c not in INVALID_PATH_CHARS
    )
    dot = name.find(".")
    if dot < 0:
        return name
    return name[: dot + 4]


@dataclass
class BRAHeader:
    """BRA archive header (16 bytes)."""

    magic: str  # 4 bytes: "PDA\0"
    compression_type: int  # 4 bytes: usually 2
    entry_table_offset: int  # 4 bytes: offset of the first entry record
    entry_count: int  # 4 bytes

    @property
    def is_valid(self) -> bool:
        return self.magic == BRA_MAGIC

    def __str__(self) -> str:
        return (
            f"BRAHeader => [entryTableOffset: 0x{self.entry_table_offset:04X}, "
            f"entryCount: {self.entry_count}]"
        )


@dataclass
class BRAFileEntry:
    """BRA entry table record (24 bytes + name)."""

    record_offset: int  # Where the record started when the archive was read
    packed_time: int  # 4 bytes: whole seconds since 1970-01-01
    reserved: int  # 4 bytes: unknown
    compressed_size: int  # 4 bytes: includes the 16-byte block prefix
    uncompressed_size: int  # 4 bytes
    name_length: int  # 2 bytes
    flags: int  # 2 bytes: unknown
    payload_offset: int  # 4 bytes: offset of the block prefix
    name: str = ""

    @property
    def reserved_length(self) -> int:
        """Length of the compressed data currently declared for this entry."""
        return self.compressed_size - BLOCK_PREFIX_SIZE

    @property
    def data_offset(self) -> int:
        return self.payload_offset + BLOCK_PREFIX_SIZE

    @property
    def path_parts(self) -> List[str]:
        return [part for part in self.name.split(PATH_SEPARATOR) if part]
