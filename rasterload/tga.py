"""Truevision Targa loader.

Reads 8, 15, 16, 24 and 32 bpp images, uncompressed or RLE encoded,
with colour maps, colour keys and greyscale data.
"""

from __future__ import annotations

import enum
import io
import struct
from typing import BinaryIO

from .stream import read_exact, rewind_on_error
from .surface import Color, ImageError, PixelFormat, Surface

_HEADER = struct.Struct("<BBBHHBHHHHBB")

_INTERLEAVE_MASK = 0xC0
_ORIGIN_RIGHT = 0x10
_ORIGIN_UPPER = 0x20

_READ_ERROR = "Error reading TGA data"
_UNSUPPORTED = "Unsupported TGA format"


class _TgaType(enum.IntEnum):
    INDEXED = 1
    RGB = 2
    BW = 3
    RLE_INDEXED = 9
    RLE_RGB = 10
    RLE_BW = 11


def _read(src: BinaryIO, size: int) -> bytes:
    try:
        return read_exact(src, size)
    except ImageError:
        raise ImageError(_READ_ERROR) from None


def _decode_palette(
    data: bytes, ncols: int, cmap_bits: int, palette: list[Color]
) -> tuple[list[Color], int | None]:
    colors = list(palette[:ncols])
    colorkey = None
    if cmap_bits in (15, 16):
        for i in range(ncols):
            c = data[2 * i] | (data[2 * i + 1] << 8)
            colors[i] = Color((c >> 7) & 0xF8, (c >> 2) & 0xF8, (c << 3) & 0xFF)
    elif cmap_bits in (24, 32):
        step = cmap_bits // 8
        for i in range(ncols):
            b, g, r = data[i * step : i * step + 3]
            colors[i] = Color(r, g, b)
            if cmap_bits == 32 and data[i * step + 3] < 128:
                colorkey = i
    return colors, colorkey


def load_tga(src: BinaryIO) -> Surface:
    """Decode a TGA image; the stream is rewound if decoding fails."""
    with rewind_on_error(src):
        try:
            return _decode(src)
        except MemoryError:
            raise ImageError("Out of memory") from None


def _decode(src: BinaryIO) -> Surface:
    (
        infolen,
        has_cmap,
        img_type,
        _cmap_start,
        ncols,
        cmap_bits,
        _yorigin,
        _xorigin,
        width,
        height,
        pixel_bits,
        flags,
    ) = _HEADER.unpack(_read(src, _HEADER.size))

    try:
        kind = _TgaType(img_type)
    except ValueError:
        raise ImageError(_UNSUPPORTED) from None
    rle = kind >= _TgaType.RLE_INDEXED
    base = _TgaType(kind & 7)

    indexed = grey = False
    if base is _TgaType.INDEXED:
        if not has_cmap or pixel_bits != 8 or ncols > 256:
            raise ImageError(_UNSUPPORTED)
        indexed = True
    elif base is _TgaType.BW:
        if pixel_bits != 8:
            raise ImageError(_UNSUPPORTED)
        indexed = grey = True

    bpp = (pixel_bits + 7) >> 3
    if pixel_bits == 8:
        if not indexed:
            raise ImageError(_UNSUPPORTED)
        fmt = PixelFormat.INDEX8
    elif pixel_bits in (15, 16):
        # The extra alpha bit of 16 bpp data is ignored.
        fmt = PixelFormat.RGB555
    elif pixel_bits == 32:
        fmt = PixelFormat.BGRA32
    elif pixel_bits == 24:
        fmt = PixelFormat.BGR24
    else:
        raise ImageError(_UNSUPPORTED)

    if flags & _INTERLEAVE_MASK or flags & _ORIGIN_RIGHT:
        raise ImageError(_UNSUPPORTED)

    src.seek(infolen, io.SEEK_CUR)
    img = Surface(width, height, fmt)

    if has_cmap:
        palsiz = ncols * ((cmap_bits + 7) >> 3)
        if indexed and not grey:
            data = _read(src, palsiz)
            img.palette, img.colorkey = _decode_palette(data, ncols, cmap_bits, img.palette)
        else:
            src.seek(palsiz, io.SEEK_CUR)

    if grey:
        img.palette = [Color(i, i, i) for i in range(256)]

    rows = range(height) if flags & _ORIGIN_UPPER else range(height - 1, -1, -1)

    # RLE packets may span scan lines, so the packet state outlives each row.
    count = rep = 0
    pixel = b""
    for y in rows:
        row = img.row(y)
        if not rle:
            row[:] = _read(src, width * bpp)
            continue
        x = 0
        while True:
            if count:
                n = min(count, width - x)
                row[x * bpp : (x + n) * bpp] = _read(src, n * bpp)
                count -= n
                x += n
                if x == width:
                    break
            elif rep:
                n = min(rep, width - x)
                rep -= n
                row[x * bpp : (x + n) * bpp] = pixel * n
                x += n
                if x == width:
                    break
            packet = _read(src, 1)[0]
            if packet & 0x80:
                pixel = _read(src, bpp)
                rep = (packet & 0x7F) + 1
            else:
                count = packet + 1
    return img