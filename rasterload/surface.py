"""In-memory pixel surfaces produced by the image loaders."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class ImageError(Exception):
    """Raised when image data cannot be decoded."""


class PixelFormat(enum.Enum):
    """Pixel layouts a surface can hold; multi-byte pixels are little-endian."""

    INDEX8 = "index8"
    RGB555 = "rgb555"
    RGB24 = "rgb24"
    BGR24 = "bgr24"
    RGBA32 = "rgba32"
    BGRA32 = "bgra32"
    ARGB8888 = "argb8888"
    ABGR8888 = "abgr8888"

    @property
    def bytes_per_pixel(self) -> int:
        return _LAYOUT[self][0]

    @property
    def alpha_offset(self) -> int | None:
        """Byte offset of the alpha channel inside a pixel, if there is one."""
        return _LAYOUT[self][1]


_LAYOUT: dict[PixelFormat, tuple[int, int | None]] = {
    PixelFormat.INDEX8: (1, None),
    PixelFormat.RGB555: (2, None),
    PixelFormat.RGB24: (3, None),
    PixelFormat.BGR24: (3, None),
    PixelFormat.RGBA32: (4, 3),
    PixelFormat.BGRA32: (4, 3),
    PixelFormat.ARGB8888: (4, 3),
    PixelFormat.ABGR8888: (4, 3),
}


class BlendMode(enum.Enum):
    """How a surface is combined with the destination when blitted."""

    NONE = "none"
    BLEND = "blend"


@dataclass(frozen=True)
class Color:
    """An RGBA palette entry."""

    r: int
    g: int
    b: int
    a: int = 255


_WHITE = Color(255, 255, 255)

Rect = tuple[int, int, int, int]


class Surface:
    """A rectangular buffer of pixels in a given format.

    Indexed surfaces carry a palette, initialised to 256 opaque white entries.
    """

    def __init__(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat,
        pixels: bytes | bytearray | None = None,
    ) -> None:
        if width < 0 or height < 0:
            raise ImageError(f"Invalid surface size {width}x{height}")
        self.width = width
        self.height = height
        self.format = pixel_format
        self.pitch = width * pixel_format.bytes_per_pixel
        size = self.pitch * height
        if pixels is None:
            self.pixels = bytearray(size)
        else:
            if len(pixels) != size:
                raise ImageError("Pixel buffer does not match surface size")
            self.pixels = bytearray(pixels)
        self.palette: list[Color] | None = (
            [_WHITE] * 256 if pixel_format is PixelFormat.INDEX8 else None
        )
        self.colorkey: int | None = None
        self.blend_mode = (
            BlendMode.BLEND if pixel_format.alpha_offset is not None else BlendMode.NONE
        )

    def __repr__(self) -> str:
        return f"Surface({self.width}x{self.height}, {self.format.name})"

    def row(self, y: int) -> memoryview:
        """A writable view of one row of pixel bytes."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} out of range")
        start = y * self.pitch
        return memoryview(self.pixels)[start : start + self.pitch]

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) out of range")
        return y * self.pitch + x * self.format.bytes_per_pixel

    def get_pixel(self, x: int, y: int) -> int:
        """The raw pixel value at (x, y): a palette index or a packed value."""
        bpp = self.format.bytes_per_pixel
        start = self._offset(x, y)
        return int.from_bytes(self.pixels[start : start + bpp], "little")

    def set_pixel(self, x: int, y: int, value: int) -> None:
        bpp = self.format.bytes_per_pixel
        start = self._offset(x, y)
        mask = (1 << (8 * bpp)) - 1
        self.pixels[start : start + bpp] = (value & mask).to_bytes(bpp, "little")

    def _clip(self, rect: Rect | None) -> Rect:
        if rect is None:
            return 0, 0, self.width, self.height
        x, y, w, h = rect
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + w, self.width), min(y + h, self.height)
        return x0, y0, x1 - x0, y1 - y0

    def fill(self, value: int, rect: Rect | None = None) -> None:
        """Set every pixel of rect (or the whole surface) to value."""
        x, y, w, h = self._clip(rect)
        if w <= 0 or h <= 0:
            return
        bpp = self.format.bytes_per_pixel
        mask = (1 << (8 * bpp)) - 1
        chunk = (value & mask).to_bytes(bpp, "little") * w
        for yy in range(y, y + h):
            start = yy * self.pitch + x * bpp
            self.pixels[start : start + len(chunk)] = chunk

    def blit_from(
        self,
        source: Surface,
        src_rect: Rect | None = None,
        dst_rect: Rect | None = None,
    ) -> None:
        """Copy source pixels onto this surface, clipped to both surfaces.

        Only the position of dst_rect is used. Sources with an alpha channel
        in blend mode are alpha-blended; a colour key skips matching pixels.
        """
        if source.format is not self.format:
            raise ImageError("Incompatible pixel formats for blit")
        sx, sy, w, h = src_rect if src_rect is not None else (0, 0, source.width, source.height)
        dx, dy = (dst_rect[0], dst_rect[1]) if dst_rect is not None else (0, 0)

        if sx < 0:
            w += sx
            dx -= sx
            sx = 0
        if sy < 0:
            h += sy
            dy -= sy
            sy = 0
        w = min(w, source.width - sx)
        h = min(h, source.height - sy)
        if dx < 0:
            w += dx
            sx -= dx
            dx = 0
        if dy < 0:
            h += dy
            sy -= dy
            dy = 0
        w = min(w, self.width - dx)
        h = min(h, self.height - dy)
        if w <= 0 or h <= 0:
            return

        bpp = self.format.bytes_per_pixel
        alpha = self.format.alpha_offset
        blend = source.blend_mode is BlendMode.BLEND and alpha is not None
        length = w * bpp
        for r in range(h):
            s = (sy + r) * source.pitch + sx * bpp
            d = (dy + r) * self.pitch + dx * bpp
            chunk = source.pixels[s : s + length]
            if blend:
                self._blend_row(d, chunk, bpp, alpha)
            elif source.colorkey is not None:
                for i in range(0, length, bpp):
                    pixel = chunk[i : i + bpp]
                    if int.from_bytes(pixel, "little") != source.colorkey:
                        self.pixels[d + i : d + i + bpp] = pixel
            else:
                self.pixels[d : d + length] = chunk

    def _blend_row(self, start: int, chunk: bytes, bpp: int, alpha: int) -> None:
        dst = self.pixels
        for i in range(0, len(chunk), bpp):
            a = chunk[i + alpha]
            if a == 255:
                dst[start + i : start + i + bpp] = chunk[i : i + bpp]
                continue
            if a == 0:
                continue
            inv = 255 - a
            for c in range(bpp):
                pos = start + i + c
                if c == alpha:
                    dst[pos] = a + (dst[pos] * inv + 127) // 255
                else:
                    dst[pos] = (chunk[i + c] * a + dst[pos] * inv + 127) // 255


@dataclass
class Animation:
    """A sequence of equally sized frames with per-frame delays."""

    width: int
    height: int
    frames: list[Surface] = field(default_factory=list)
    delays: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frames)