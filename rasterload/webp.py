"""WebP loader for still images and animations."""

from __future__ import annotations

import io
from typing import BinaryIO

from PIL import Image

from .stream import peek, read_exact, remaining, rewind_on_error
from .surface import Animation, ImageError, PixelFormat, Surface

_OPEN_ERRORS = (OSError, ValueError, SyntaxError, EOFError, Image.DecompressionBombError)


def is_webp(src: BinaryIO) -> bool:
    """True if the stream starts with a RIFF/WEBP header holding a VP8 chunk."""
    magic = peek(src, 20)
    return (
        len(magic) == 20
        and magic[0:4] == b"RIFF"
        and magic[8:12] == b"WEBP"
        and magic[12:15] == b"VP8"
        and magic[15:16] in (b" ", b"X", b"L")
    )


def _read_data(src: BinaryIO, what: str) -> bytes:
    if not is_webp(src):
        raise ImageError(f"Invalid {what}")
    try:
        return read_exact(src, remaining(src))
    except ImageError:
        raise ImageError(f"Failed to read {what}") from None


def _open(data: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(data), formats=("WEBP",))
    except _OPEN_ERRORS:
        raise ImageError("WebPGetFeatures has failed") from None


def _has_alpha(image: Image.Image) -> bool:
    return "A" in image.getbands()


def _to_surface(image: Image.Image, has_alpha: bool) -> Surface:
    mode, fmt = ("RGBA", PixelFormat.RGBA32) if has_alpha else ("RGB", PixelFormat.RGB24)
    try:
        pixels = image.convert(mode).tobytes()
    except _OPEN_ERRORS:
        raise ImageError("Failed to decode WEBP") from None
    except MemoryError:
        raise ImageError("Failed to allocate SDL_Surface") from None
    return Surface(image.width, image.height, fmt, pixels)


def load_webp(src: BinaryIO) -> Surface:
    """Decode a WebP image into an RGB or RGBA surface.

    The stream is rewound if decoding fails.
    """
    with rewind_on_error(src):
        data = _read_data(src, "WEBP")
        with _open(data) as image:
            return _to_surface(image, _has_alpha(image))


def load_webp_animation(src: BinaryIO) -> Animation:
    """Decode every frame of a WebP file together with its delay in ms.

    Decoding stops at the first frame that cannot be decoded. The stream is
    rewound if the file itself cannot be read.
    """
    with rewind_on_error(src):
        data = _read_data(src, "WEBP Animation")
        with _open(data) as image:
            has_alpha = _has_alpha(image)
            animation = Animation(image.width, image.height)
            count = getattr(image, "n_frames", 1)
            for index in range(count):
                try:
                    image.seek(index)
                except _OPEN_ERRORS:
                    break
                try:
                    frame = _to_surface(image, has_alpha)
                except ImageError:
                    break
                animation.frames.append(frame)
                animation.delays.append(int(image.info.get("duration", 0)))
            return animation