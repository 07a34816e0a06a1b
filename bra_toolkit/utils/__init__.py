"""Low-level binary helpers."""

from .binary import BinaryReader
from .buffer import OutOfRangeError

__all__ = ["BinaryReader", "OutOfRangeError"]
