"""SVG detection and the sizing rules used when rasterising SVG images."""

from __future__ import annotations

import math
import struct
from typing import BinaryIO

from .stream import peek
from .surface import ImageError

_MAGIC_SIZE = 4096
_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


def is_svg(src: BinaryIO) -> bool:
    """True if '<svg' appears in the first 4095 bytes, before any NUL byte."""
    magic = peek(src, _MAGIC_SIZE - 1).split(b"\0", 1)[0]
    return b"<svg" in magic


def svg_scale(image_width: float, image_height: float, width: int, height: int) -> float:
    """Scale factor that fits an image into the requested size.

    With both sizes positive the smaller factor wins, keeping the aspect
    ratio; with one of them positive only that one is used; otherwise 1.0.
    """
    if image_width <= 0 or image_height <= 0:
        raise ImageError("Couldn't parse SVG image")
    image_width = _f32(image_width)
    image_height = _f32(image_height)
    if width > 0 and height > 0:
        return min(_f32(width / image_width), _f32(height / image_height))
    if width > 0:
        return _f32(width / image_width)
    if height > 0:
        return _f32(height / image_height)
    return 1.0


def svg_output_size(
    image_width: float, image_height: float, width: int, height: int
) -> tuple[int, int]:
    """Pixel size of the surface an SVG image is rendered into."""
    scale = svg_scale(image_width, image_height, width, height)
    return (
        math.ceil(_f32(_f32(image_width) * scale)),
        math.ceil(_f32(_f32(image_height) * scale)),
    )