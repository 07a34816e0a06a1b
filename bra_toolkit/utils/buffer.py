"""In-place edits on a growable byte buffer.

All helpers operate on a ``bytearray`` owned by the caller and bounds-check
every edit. A failed check means the archive is corrupt or the caller has a
logic error, so :class:`OutOfRangeError` is never meant to be recovered from.
"""


class OutOfRangeError(IndexError):
    """Raised when an edit would touch bytes outside the buffer."""


def _check_range(buf: bytearray, offset: int, length: int) -> None:
    if offset < 0 or length < 0 or offset + length > len(buf):
        raise OutOfRangeError(
            f"Range 0x{offset:X}+{length} outside buffer of {len(buf)} bytes"
        )


def overwrite(buf: bytearray, offset: int, data: bytes) -> None:
    """Replace ``len(data)`` bytes starting at ``offset``."""
    _check_range(buf, offset, len(data))
    buf[offset : offset + len(data)] = data


def remove_range(buf: bytearray, offset: int, length: int) -> None:
    """Delete ``length`` bytes starting at ``offset``."""
    _check_range(buf, offset, length)
    del buf[offset : offset + length]


def insert_range(buf: bytearray, offset: int, data: bytes) -> None:
    """Insert ``data`` before the byte at ``offset`` (``len(buf)`` appends)."""
    _check_range(buf, offset, 0)
    buf[offset:offset] = data


def replace_range(buf: bytearray, offset: int, length: int, data: bytes) -> int:
    """Swap ``length`` bytes at ``offset`` for ``data``.

    Returns the net change in buffer length.
    """
    remove_range(buf, offset, length)
    insert_range(buf, offset, data)
    return len(data) - length


def zero_fill(buf: bytearray, offset: int, length: int) -> None:
    """Overwrite ``length`` bytes at ``offset`` with zeros."""
    overwrite(buf, offset, bytes(length))
