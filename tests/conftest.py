"""Shared fixtures for building small BRA archives."""

import os
import struct
from pathlib import Path

import pytest

PREFIX_FILLER = b"\xEE" * 8


def make_bra(entries, magic: bytes = b"PDA\x00", compression_type: int = 2) -> bytes:
    """Build a BRA file: header, payload blocks, then the entry table.

    Each entry is a dict with ``name`` (str or raw bytes) and ``data`` (the
    stored compressed bytes), plus optional ``size``, ``packed_time``,
    ``flags`` and ``declared_size`` (overrides the compressed size field).
    """
    body = bytearray()
    offsets = []
    cursor = 0x10

    for entry in entries:
        data = entry["data"]
        block = struct.pack("<II", entry.get("size", len(data)), len(data)) + PREFIX_FILLER + data
        offsets.append(cursor)
        body += block
        cursor += len(block)

    table = bytearray()
    for entry, offset in zip(entries, offsets):
        name = entry["name"]
        if isinstance(name, str):
            name = name.encode("ascii")
        table += struct.pack(
            "<IIIIHHI",
            entry.get("packed_time", 0),
            0x12345678,
            entry.get("declared_size", len(entry["data"]) + 0x10),
            entry.get("size", len(entry["data"])),
            len(name),
            entry.get("flags", 0),
            offset,
        )
        table += name

    header = magic + struct.pack("<III", compression_type, cursor, len(entries))
    return bytes(header + body + table)


def write_source(folder: Path, name: str, content: bytes, mtime: float) -> Path:
    """Write a source file under ``folder`` for a backslash-separated entry name."""
    path = folder.joinpath(*name.split("\\"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def build_archive():
    return make_bra


@pytest.fixture
def source_dir(tmp_path):
    folder = tmp_path / "source"
    folder.mkdir()
    return folder


@pytest.fixture
def add_source(source_dir):
    def _add(name: str, content: bytes, mtime: float) -> Path:
        return write_source(source_dir, name, content, mtime)

    return _add
