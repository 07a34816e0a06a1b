"""Tokyo Xanadu BRA archive support."""

from .archive import BRAArchive
from .header import BRA_MAGIC, BRAFileEntry, BRAHeader
from .repacker import RepackOptions, RepackResult, repack

__all__ = [
    "BRA_MAGIC",
    "BRAArchive",
    "BRAFileEntry",
    "BRAHeader",
    "RepackOptions",
    "RepackResult",
    "repack",
]
