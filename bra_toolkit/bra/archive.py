"""BRA archive held in memory for in-place patching.

The archive keeps the raw file as a ``bytearray`` next to the decoded entry
list. Edits never re-encode a whole structure: each write targets the 2 or 4
bytes of a single field at its absolute offset.

Layout of a BRA file::

    header          16 bytes, entry table offset at 0x08
    payload blocks  16-byte size prefix + raw DEFLATE data, one per entry
    entry table     24-byte records followed by the entry name

The entry table sits after the payloads, so every byte spliced into a payload
moves all records by the same amount. ``diff_length`` tracks that amount for
the current run; a record is found at ``record_offset + diff_length``.
"""

import shutil
from pathlib import Path
from typing import List, Optional, Union

from ..utils import buffer
from ..utils.binary import write_u32_le
from .header import (
    BLOCK_COMPRESSED_SIZE,
    BLOCK_UNCOMPRESSED_SIZE,
    ENTRY_COMPRESSED_SIZE,
    ENTRY_PACKED_TIME,
    ENTRY_PAYLOAD_OFFSET,
    ENTRY_UNCOMPRESSED_SIZE,
    HEADER_ENTRY_TABLE_OFFSET,
    BRAFileEntry,
    BRAHeader,
)
from .reader import read_entries, read_header

BACKUP_SUFFIX = ".bak"


class BRAArchive:
    """A BRA archive buffer plus its decoded header and entry table."""

    def __init__(
        self,
        data: Union[bytes, bytearray, Path],
        header: Optional[BRAHeader] = None,
        entries: Optional[List[BRAFileEntry]] = None,
    ):
        """Wrap ``data``, decoding the header and entry table unless given."""
        if isinstance(data, Path):
            data = data.read_bytes()
        self._buffer = bytearray(data)
        self._header: BRAHeader = header or read_header(self._buffer)
        if entries is None:
            entries = read_entries(self._buffer, self._header)
        self._entries: List[BRAFileEntry] = entries
        self.original_entry_table_offset = self._header.entry_table_offset
        self.diff_length = 0

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BRAArchive":
        return cls(Path(path))

    @property
    def buffer(self) -> bytearray:
        return self._buffer

    @property
    def header(self) -> BRAHeader:
        return self._header

    @property
    def entries(self) -> List[BRAFileEntry]:
        return self._entries

    def record_position(self, entry: BRAFileEntry) -> int:
        """Current absolute offset of an entry's table record."""
        return entry.record_offset + self.diff_length

    def splice(self, offset: int, length: int, data: bytes) -> int:
        """Replace ``length`` bytes at ``offset`` with ``data``.

        The net size change is added to ``diff_length`` and returned. Callers
        are responsible for shifting the payload offsets that follow.
        """
        delta = buffer.replace_range(self._buffer, offset, length, data)
        self.diff_length += delta
        return delta

    def write_block_sizes(
        self, entry: BRAFileEntry, uncompressed_size: int, compressed_length: int
    ) -> None:
        """Rewrite the size prefix in front of an entry's payload."""
        buffer.overwrite(
            self._buffer,
            entry.payload_offset + BLOCK_UNCOMPRESSED_SIZE,
            write_u32_le(uncompressed_size),
        )
        buffer.overwrite(
            self._buffer,
            entry.payload_offset + BLOCK_COMPRESSED_SIZE,
            write_u32_le(compressed_length),
        )

    def write_entry_sizes(
        self, entry: BRAFileEntry, compressed_size: int, uncompressed_size: int
    ) -> None:
        """Rewrite both size fields of an entry record and keep ``entry`` in sync."""
        position = self.record_position(entry)
        buffer.overwrite(
            self._buffer, position + ENTRY_COMPRESSED_SIZE, write_u32_le(compressed_size)
        )
        buffer.overwrite(
            self._buffer, position + ENTRY_UNCOMPRESSED_SIZE, write_u32_le(uncompressed_size)
        )
        entry.compressed_size = compressed_size
        entry.uncompressed_size = uncompressed_size

    def write_packed_time(self, entry: BRAFileEntry, packed_time: int) -> None:
        buffer.overwrite(
            self._buffer,
            self.record_position(entry) + ENTRY_PACKED_TIME,
            write_u32_le(packed_time),
        )
        entry.packed_time = packed_time

    def write_payload_offset(self, entry: BRAFileEntry) -> None:
        """Store the entry's in-memory payload offset in its record."""
        buffer.overwrite(
            self._buffer,
            self.record_position(entry) + ENTRY_PAYLOAD_OFFSET,
            write_u32_le(entry.payload_offset),
        )

    def write_entry_table_offset(self) -> None:
        """Point the header at the entry table's current position."""
        offset = self.original_entry_table_offset + self.diff_length
        buffer.overwrite(self._buffer, HEADER_ENTRY_TABLE_OFFSET, write_u32_le(offset))
        self._header.entry_table_offset = offset

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    def save(self, path: Union[str, Path], backup: bool = True) -> Optional[Path]:
        """Write the buffer to ``path``.

        With ``backup`` set, the existing file is first copied to
        ``<path>.bak``, replacing any older backup. Returns the backup path.
        """
        path = Path(path)
        backup_path = None

        if backup and path.exists():
            backup_path = path.with_name(path.name + BACKUP_SUFFIX)
            if backup_path.exists():
                backup_path.unlink()
            shutil.copyfile(path, backup_path)

        path.write_bytes(self.to_bytes())
        return backup_path

    def __repr__(self) -> str:
        return (
            f"BRAArchive({self._header.magic!r}, {len(self._entries)} entries, "
            f"{len(self._buffer)} bytes, diff_length={self.diff_length})"
        )
