"""TIFF loader producing 32-bit RGBA surfaces."""

from __future__ import annotations

import io
from typing import BinaryIO

from PIL import Image, ImageOps

from .stream import peek, rewind_on_error
from .surface import ImageError, PixelFormat, Surface

_MAGICS = (b"II\x2a\x00", b"MM\x00\x2a")


def is_tif(src: BinaryIO) -> bool:
    """True if the stream starts with a little- or big-endian TIFF signature."""
    return peek(src, 4) in _MAGICS


def load_tif(src: BinaryIO) -> Surface:
    """Decode a TIFF image, top-left oriented, into an RGBA byte surface.

    The stream is rewound if decoding fails.
    """
    with rewind_on_error(src):
        data = src.read()
        try:
            with Image.open(io.BytesIO(data), formats=("TIFF",)) as image:
                image.load()
                oriented = ImageOps.exif_transpose(image)
                rgba = oriented.convert("RGBA")
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise ImageError(f"Couldn't read TIFF image: {exc}") from exc
        try:
            return Surface(rgba.width, rgba.height, PixelFormat.ABGR8888, rgba.tobytes())
        except MemoryError:
            raise ImageError("Out of memory") from None