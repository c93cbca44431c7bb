"""Portable anymap (PBM, PGM, PPM) loader, ASCII and binary variants.

PBM and PGM load as 8-bit indexed surfaces; component values above 255
are not supported.
"""

from __future__ import annotations

from typing import BinaryIO

from .stream import peek, read_exact, rewind_on_error
from .surface import Color, ImageError, PixelFormat, Surface

_PBM, _PGM, _PPM = range(3)
_INT32_MAX = 0x7FFFFFFF
_WHITESPACE = frozenset(b" \t\n\v\f\r")
_DIGITS = range(ord("0"), ord("9") + 1)


def is_pnm(src: BinaryIO) -> bool:
    """True if the stream starts with a P1..P6 signature."""
    magic = peek(src, 2)
    return len(magic) == 2 and magic[0] == ord("P") and ord("1") <= magic[1] <= ord("6")


def _read_number(src: BinaryIO) -> int | None:
    """Read a non-negative decimal number, or None if there is none.

    Leading whitespace and '#' comments are skipped; the character that
    ends the number is consumed and must be present.
    """
    ch = src.read(1)
    while True:
        if not ch:
            return None
        if ch == b"#":
            while ch not in (b"\r", b"\n"):
                ch = src.read(1)
                if not ch:
                    return None
        if ch[0] not in _WHITESPACE:
            break
        ch = src.read(1)

    if ch[0] not in _DIGITS:
        return None
    number = 0
    while ch and ch[0] in _DIGITS:
        if number >= _INT32_MAX // 10:
            return None
        number = number * 10 + ch[0] - ord("0")
        ch = src.read(1)
    if not ch:
        return None
    return number


def _read_ascii_bit(src: BinaryIO) -> int:
    while True:
        ch = src.read(1)
        if not ch:
            raise ImageError("file truncated")
        value = (ch[0] - ord("0")) & 0xFF
        if value <= 1:
            return value


def load_pnm(src: BinaryIO) -> Surface:
    """Decode a PNM image; the stream is rewound if decoding fails."""
    with rewind_on_error(src):
        magic = src.read(2)
        if len(magic) != 2:
            raise ImageError("file truncated")
        if magic[0] != ord("P") or not ord("1") <= magic[1] <= ord("6"):
            raise ImageError("unsupported PNM format")
        kind = magic[1] - ord("1")
        ascii_data = kind < 3
        kind %= 3

        width = _read_number(src)
        height = _read_number(src)
        if not width or not height:
            raise ImageError("Unable to read image width and height")

        if kind != _PBM:
            maxval = _read_number(src)
            if not maxval or maxval > 255:
                raise ImageError("unsupported PNM format")
        else:
            maxval = 255

        fmt = PixelFormat.RGB24 if kind == _PPM else PixelFormat.INDEX8
        try:
            surface = Surface(width, height, fmt)
        except MemoryError:
            raise ImageError("Out of memory") from None

        bpl = width * fmt.bytes_per_pixel
        if kind == _PGM:
            surface.palette = [Color(i, i, i) for i in range(256)]
        elif kind == _PBM:
            surface.palette = [Color(255, 255, 255), Color(0, 0, 0)]
            bpl = (width + 7) >> 3

        for y in range(height):
            row = surface.row(y)
            if ascii_data:
                if kind == _PBM:
                    row[:] = bytes(_read_ascii_bit(src) for _ in range(width))
                else:
                    for i in range(bpl):
                        value = _read_number(src)
                        if value is None:
                            raise ImageError("file truncated")
                        row[i] = value & 0xFF
            else:
                try:
                    data = read_exact(src, bpl)
                except ImageError:
                    raise ImageError("file truncated") from None
                if kind == _PBM:
                    row[:] = bytes(
                        (data[i >> 3] >> (7 - (i & 7))) & 1 for i in range(width)
                    )
                else:
                    row[:] = data
            if maxval < 255:
                row[:] = bytes(v * 255 // maxval for v in row)
        return surface