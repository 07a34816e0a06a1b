"""Recompress changed source files into a BRA archive in place.

Entries are visited in table order, which is also the order of their payloads
in the file. When a new payload is larger than its slot the slot is grown and
every later entry's payload offset moves by the same amount; entries already
visited are never touched again. A smaller payload is written over the start
of the slot and the tail is zeroed, so the slot keeps its size.

Compression itself has no ordering constraint, so with ``jobs > 1`` the
source files are deflated on a thread pool while the splices are still
applied one by one in table order.
"""

import zlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..utils import buffer
from .archive import BRAArchive
from .header import BLOCK_PREFIX_SIZE, BRAFileEntry

DEFAULT_COMPRESSION_LEVEL = 6

ProgressCallback = Callable[[int, int, BRAFileEntry, Path], None]


@dataclass
class RepackOptions:
    """Settings for a repack run."""

    force_all: bool = False  # Recompress even when timestamps match
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    jobs: int = 1  # Compression threads


@dataclass
class RepackResult:
    """Counters for a finished repack run."""

    compressed: int = 0
    ignored: int = 0  # missing + unmodified
    missing: int = 0
    unmodified: int = 0
    diff_length: int = 0
    changed: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.compressed > 0


@dataclass
class _PendingEntry:
    index: int
    path: Path
    packed_time: int


def compress_raw(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """DEFLATE ``data`` without a zlib header or checksum."""
    compressor = zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def file_packed_time(path: Path) -> int:
    """Modification time of ``path`` in whole seconds since 1970-01-01."""
    return int(path.stat().st_mtime)


def source_path(folder: Path, entry: BRAFileEntry) -> Path:
    """Location of an entry's source file inside ``folder``."""
    return Path(folder).joinpath(*entry.path_parts)


def check_payload_order(entries: List[BRAFileEntry]) -> None:
    """Raise ValueError unless payload offsets ascend in table order."""
    for previous, current in zip(entries, entries[1:]):
        if current.payload_offset <= previous.payload_offset:
            raise ValueError(
                f"Entry {current.name!r} at 0x{current.payload_offset:X} does not follow "
                f"{previous.name!r} at 0x{previous.payload_offset:X}"
            )


def _load_and_compress(path: Path, level: int) -> Tuple[int, bytes]:
    data = path.read_bytes()
    return len(data), compress_raw(data, level)


def _collect(
    archive: BRAArchive, folder: Path, options: RepackOptions, result: RepackResult
) -> List[_PendingEntry]:
    """Pick the entries whose source file exists and has changed."""
    pending = []
    for index, entry in enumerate(archive.entries):
        path = source_path(folder, entry)
        if not entry.path_parts or not path.is_file():
            result.missing += 1
            result.ignored += 1
            continue

        packed_time = file_packed_time(path)
        if not options.force_all and packed_time == entry.packed_time:
            result.unmodified += 1
            result.ignored += 1
            continue

        pending.append(_PendingEntry(index=index, path=path, packed_time=packed_time))

    return pending


def _compressed_payloads(
    pending: List[_PendingEntry], options: RepackOptions
) -> Iterator[Tuple[_PendingEntry, int, bytes]]:
    """Yield each pending entry with its raw size and compressed bytes, in order."""
    worker = partial(_load_and_compress, level=options.compression_level)
    paths = [item.path for item in pending]

    if options.jobs > 1 and len(pending) > 1:
        with ThreadPoolExecutor(max_workers=options.jobs) as pool:
            for item, (size, compressed) in zip(pending, pool.map(worker, paths)):
                yield item, size, compressed
    else:
        for item, (size, compressed) in zip(pending, map(worker, paths)):
            yield item, size, compressed


def repack_entry(
    archive: BRAArchive,
    index: int,
    compressed: bytes,
    uncompressed_size: int,
    packed_time: int,
) -> int:
    """Store ``compressed`` as the payload of entry ``index``.

    Updates the block prefix, the entry record and the in-memory entry, and
    shifts the payload offsets of all later entries when the slot grows.
    Returns the change in archive length.
    """
    entries = archive.entries
    entry = entries[index]
    reserved = entry.reserved_length
    length = len(compressed)
    delta = 0

    if length > reserved:
        delta = archive.splice(entry.data_offset, reserved, compressed)
        for later in entries[index + 1 :]:
            later.payload_offset += delta
    elif length == reserved:
        buffer.overwrite(archive.buffer, entry.data_offset, compressed)
    else:
        # Slot keeps its physical size
        buffer.overwrite(archive.buffer, entry.data_offset, compressed)
        buffer.zero_fill(archive.buffer, entry.data_offset + length, reserved - length)

    archive.write_block_sizes(entry, uncompressed_size, length)
    archive.write_entry_sizes(entry, length + BLOCK_PREFIX_SIZE, uncompressed_size)
    archive.write_packed_time(entry, packed_time)
    return delta


def finalize(archive: BRAArchive) -> None:
    """Write the shifted payload offsets and entry table offset back to the buffer."""
    if archive.diff_length == 0:
        return

    for entry in archive.entries:
        archive.write_payload_offset(entry)
    archive.write_entry_table_offset()


def repack(
    archive: BRAArchive,
    folder: Union[str, Path],
    options: Optional[RepackOptions] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RepackResult:
    """Recompress every changed source file under ``folder`` into ``archive``.

    Only the in-memory buffer is modified; saving is left to the caller.
    """
    options = options or RepackOptions()
    folder = Path(folder)
    result = RepackResult()

    check_payload_order(archive.entries)
    pending = _collect(archive, folder, options, result)

    total = len(archive.entries)
    for item, size, compressed in _compressed_payloads(pending, options):
        entry = archive.entries[item.index]
        if progress_callback:
            progress_callback(item.index, total, entry, item.path)

        repack_entry(archive, item.index, compressed, size, item.packed_time)
        result.compressed += 1
        result.changed.append(entry.name)

    finalize(archive)
    result.diff_length = archive.diff_length
    return result
