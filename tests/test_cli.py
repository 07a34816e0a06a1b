"""Tests for the command-line interface."""

import random

import pytest
from click.testing import CliRunner

from bra_toolkit import __version__
from bra_toolkit.bra import BRAArchive
from bra_toolkit.cli import format_elapsed, format_packed_time, main

PACKED = 1_500_000_000
MODIFIED = 1_600_000_000


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def archive_path(tmp_path, build_archive):
    path = tmp_path / "system.bra"
    path.write_bytes(
        build_archive(
            [
                {"name": "text\\t_town.tbl", "data": b"\x01" * 4, "packed_time": PACKED},
                {"name": "text\\t_item.tbl", "data": b"\x02" * 4, "packed_time": PACKED},
            ]
        )
    )
    return path


def payload() -> bytes:
    rng = random.Random(7)
    return bytes(rng.getrandbits(8) for _ in range(256))


class TestFormatting:
    def test_elapsed_milliseconds(self):
        assert format_elapsed(0.0123) == "12ms"

    def test_elapsed_seconds(self):
        assert format_elapsed(1.5) == "1.5s"

    def test_packed_time(self):
        assert format_packed_time(0) == "1970-01-01 00:00:00"


class TestPatch:
    def test_patches_modified_file(self, runner, archive_path, source_dir, add_source):
        original = archive_path.read_bytes()
        add_source("text\\t_town.tbl", b"town", PACKED)
        add_source("text\\t_item.tbl", payload(), MODIFIED)

        result = runner.invoke(main, ["patch", str(archive_path), str(source_dir)])

        assert result.exit_code == 0, result.output
        assert "BRAHeader => [entryTableOffset:" in result.output
        assert "t_item.tbl" in result.output
        assert "Files compressed added: 1 | Files ignored: 1" in result.output
        assert "Parsing Archive |" in result.output
        assert "Parsing File Details |" in result.output
        assert "Compress Files |" in result.output

        backup = archive_path.with_name("system.bra.bak")
        assert backup.read_bytes() == original
        patched = BRAArchive.from_file(archive_path)
        assert patched.entries[1].packed_time == MODIFIED
        assert patched.entries[1].uncompressed_size == 256

    def test_no_changes_leaves_files(self, runner, archive_path, source_dir, add_source):
        original = archive_path.read_bytes()
        add_source("text\\t_town.tbl", b"town", PACKED)

        result = runner.invoke(main, ["patch", str(archive_path), str(source_dir)])

        assert result.exit_code == 0, result.output
        assert "Files compressed added: 0 | Files ignored: 2" in result.output
        assert "Nothing to write." in result.output
        assert archive_path.read_bytes() == original
        assert not archive_path.with_name("system.bra.bak").exists()

    def test_force_all(self, runner, archive_path, source_dir, add_source):
        add_source("text\\t_town.tbl", b"town", PACKED)
        add_source("text\\t_item.tbl", b"item", PACKED)

        result = runner.invoke(main, ["patch", str(archive_path), str(source_dir), "--all"])

        assert result.exit_code == 0, result.output
        assert "Files compressed added: 2 | Files ignored: 0" in result.output
        assert archive_path.with_name("system.bra.bak").exists()

    def test_dry_run(self, runner, archive_path, source_dir, add_source):
        original = archive_path.read_bytes()
        add_source("text\\t_item.tbl", payload(), MODIFIED)

        result = runner.invoke(
            main, ["patch", str(archive_path), str(source_dir), "--dry-run", "-j", "2", "-l", "9"]
        )

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert "  text\\t_item.tbl" in result.output
        assert archive_path.read_bytes() == original
        assert not archive_path.with_name("system.bra.bak").exists()

    def test_invalid_level(self, runner, archive_path, source_dir):
        result = runner.invoke(main, ["patch", str(archive_path), str(source_dir), "--level", "12"])
        assert result.exit_code != 0

    def test_missing_folder(self, runner, archive_path, tmp_path):
        result = runner.invoke(main, ["patch", str(archive_path), str(tmp_path / "nope")])
        assert result.exit_code != 0

    def test_corrupt_archive(self, runner, tmp_path, source_dir):
        path = tmp_path / "broken.bra"
        path.write_bytes(b"PDA\x00\x02\x00")

        result = runner.invoke(main, ["patch", str(path), str(source_dir)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestList:
    def test_lists_entries(self, runner, archive_path):
        result = runner.invoke(main, ["list", str(archive_path)])

        assert result.exit_code == 0, result.output
        assert "Files in archive (2):" in result.output
        assert "text\\t_town.tbl" in result.output
        assert "text\\t_item.tbl" in result.output
        assert "2017-07-14 02:40:00" in result.output


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert __version__ in result.output
