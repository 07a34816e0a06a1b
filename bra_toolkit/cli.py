"""BRA Toolkit CLI."""

import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import click

from . import __version__
from .bra.repacker import DEFAULT_COMPRESSION_LEVEL


@contextmanager
def timed(label: str) -> Iterator[None]:
    """Echo ``label`` with the time spent in the block."""
    start = time.perf_counter()
    yield
    click.echo(f"{label} | {format_elapsed(time.perf_counter() - start)}")


def format_elapsed(seconds: float) -> str:
    milliseconds = int(seconds * 1000)
    if milliseconds >= 1000:
        return f"{milliseconds / 1000}s"
    return f"{milliseconds}ms"


def format_packed_time(packed_time: int) -> str:
    return datetime.fromtimestamp(packed_time, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.version_option(version=__version__)
def main():
    """BRA Toolkit - Patch Tokyo Xanadu .bra archives in place.

    Files edited in a folder mirroring the archive are recompressed and
    spliced back into the archive without rebuilding it.
    """
    pass


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("folder", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-a",
    "--all",
    "force_all",
    is_flag=True,
    help="Compress all files, even unmodified ones",
)
@click.option(
    "-l",
    "--level",
    type=click.IntRange(0, 9),
    default=DEFAULT_COMPRESSION_LEVEL,
    show_default=True,
    help="DEFLATE compression level",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of compression threads",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Repack in memory only, leave the archive untouched",
)
def patch(archive: Path, folder: Path, force_all: bool, level: int, jobs: int, dry_run: bool):
    """Recompress modified files from FOLDER into ARCHIVE.

    A file is recompressed when its modification time differs from the one
    stored in the archive. The original archive is copied to ARCHIVE.bak
    before it is overwritten.
    """
    from .bra import BRAArchive, RepackOptions, repack
    from .bra.reader import read_entries, read_header

    click.echo(f"Opening: {archive}")

    try:
        with timed("Reading Archive"):
            data = archive.read_bytes()

        with timed("Parsing Archive"):
            header = read_header(data)
        click.echo(str(header))
        if not header.is_valid:
            click.echo(f"Warning: unexpected magic {header.magic!r}", err=True)

        with timed("Parsing File Details"):
            entries = read_entries(data, header)
        bra = BRAArchive(data, header, entries)

        options = RepackOptions(force_all=force_all, compression_level=level, jobs=jobs)

        def report(index, total, entry, path):
            click.echo(f"  [{index + 1}/{total}] {path}")

        with timed("Compress Files"):
            result = repack(bra, folder, options, progress_callback=report)

        click.echo(
            f"Files compressed added: {result.compressed} | Files ignored: {result.ignored}"
        )
        if result.missing:
            click.echo(f"Not found in folder: {result.missing}")

        if not result.has_changes:
            click.echo("Nothing to write.")
            return

        click.echo(f"Size change: {result.diff_length:+d} bytes")
        if dry_run:
            click.echo("Dry run, archive not written. Entries that would change:")
            for name in result.changed:
                click.echo(f"  {name}")
            return

        with timed("Writing Archive"):
            backup = bra.save(archive)
        if backup:
            click.echo(f"Backup:  {backup}")
        click.echo(f"Patched: {archive}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def list_entries(archive: Path):
    """List the entries stored in ARCHIVE."""
    from .bra import BRAArchive

    try:
        bra = BRAArchive.from_file(archive)

        click.echo(str(bra.header))
        click.echo(f"\nFiles in archive ({len(bra.entries)}):")
        for entry in bra.entries:
            click.echo(
                f"  0x{entry.payload_offset:08X} {entry.reserved_length:>10} "
                f"{entry.uncompressed_size:>10}  {format_packed_time(entry.packed_time)}  "
                f"{entry.name}"
            )

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
