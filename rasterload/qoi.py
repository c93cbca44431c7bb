"""Quite OK Image (QOI) loader producing RGBA surfaces."""

from __future__ import annotations

import struct
from typing import BinaryIO

from .stream import peek
from .surface import ImageError, PixelFormat, Surface

_MAGIC = b"qoif"
_HEADER = struct.Struct(">4sIIBB")
_PADDING_SIZE = 8
_PIXELS_MAX = 400_000_000
_INT_MAX = 0x7FFFFFFF

_OP_INDEX = 0x00
_OP_DIFF = 0x40
_OP_LUMA = 0x80
_OP_RGB = 0xFE
_OP_RGBA = 0xFF

_PARSE_ERROR = "Couldn't parse QOI image"


def is_qoi(src: BinaryIO) -> bool:
    """True if the stream starts with the QOI signature."""
    return peek(src, 4) == _MAGIC


def _decode(data: bytes) -> tuple[int, int, bytearray]:
    if len(data) < _HEADER.size + _PADDING_SIZE:
        raise ImageError(_PARSE_ERROR)
    magic, width, height, channels, colorspace = _HEADER.unpack_from(data)
    if (
        magic != _MAGIC
        or width == 0
        or height == 0
        or channels not in (3, 4)
        or colorspace > 1
        or height >= _PIXELS_MAX // width
    ):
        raise ImageError(_PARSE_ERROR)

    out = bytearray(width * height * 4)
    index = [(0, 0, 0, 0)] * 64
    r, g, b, a = 0, 0, 0, 255
    p = _HEADER.size
    chunks_len = len(data) - _PADDING_SIZE
    run = 0
    for pos in range(0, len(out), 4):
        if run:
            run -= 1
        elif p < chunks_len:
            b1 = data[p]
            p += 1
            tag = b1 & 0xC0
            if b1 == _OP_RGB:
                r, g, b = data[p : p + 3]
                p += 3
            elif b1 == _OP_RGBA:
                r, g, b, a = data[p : p + 4]
                p += 4
            elif tag == _OP_INDEX:
                r, g, b, a = index[b1]
            elif tag == _OP_DIFF:
                r = (r + ((b1 >> 4) & 3) - 2) & 0xFF
                g = (g + ((b1 >> 2) & 3) - 2) & 0xFF
                b = (b + (b1 & 3) - 2) & 0xFF
            elif tag == _OP_LUMA:
                b2 = data[p]
                p += 1
                vg = (b1 & 0x3F) - 32
                r = (r + vg - 8 + ((b2 >> 4) & 0x0F)) & 0xFF
                g = (g + vg) & 0xFF
                b = (b + vg - 8 + (b2 & 0x0F)) & 0xFF
            else:
                run = b1 & 0x3F
            index[(r * 3 + g * 5 + b * 7 + a * 11) % 64] = (r, g, b, a)
        out[pos : pos + 4] = bytes((r, g, b, a))
    return width, height, out


def load_qoi(src: BinaryIO) -> Surface:
    """Decode the rest of the stream as a QOI image into an RGBA surface."""
    data = src.read()
    if len(data) > _INT_MAX:
        raise ImageError("QOI image is too big.")
    width, height, pixels = _decode(data)
    return Surface(width, height, PixelFormat.RGBA32, pixels)