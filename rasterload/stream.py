"""Helpers for reading image data from seekable binary streams."""

from __future__ import annotations

import io
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from .surface import ImageError


def peek(src: BinaryIO, size: int) -> bytes:
    """Read up to size bytes without moving the stream position."""
    start = src.tell()
    try:
        return src.read(size)
    finally:
        src.seek(start)


def read_exact(src: BinaryIO, size: int) -> bytes:
    """Read exactly size bytes, raising ImageError if the data runs out."""
    if size < 0:
        raise ValueError("size must not be negative")
    data = src.read(size)
    if len(data) != size:
        raise ImageError("Unexpected end of data")
    return data


def remaining(src: BinaryIO) -> int:
    """Number of bytes between the current position and the end."""
    start = src.tell()
    end = src.seek(0, io.SEEK_END)
    src.seek(start)
    return max(end - start, 0)


@contextmanager
def rewind_on_error(src: BinaryIO) -> Iterator[int]:
    """Restore the stream position if the body raises; yields the start."""
    start = src.tell()
    try:
        yield start
    except BaseException:
        src.seek(start)
        raise