"""GIMP XCF loader: flattens visible layers and channels into one surface."""

from __future__ import annotations

from typing import BinaryIO, Callable

from .stream import rewind_on_error
from .surface import ImageError, PixelFormat, Surface
from .xcf_reader import (
    Compression,
    ImageType,
    XcfChannel,
    XcfHeader,
    XcfLayer,
    load_tile_none,
    load_tile_rle,
    read_channel,
    read_header,
    read_hierarchy,
    read_layer,
    read_level,
    read_offset,
)

TileLoader = Callable[[BinaryIO, int, int, int, int], bytes]

_TILE_SIZE = 64
# Arbitrary limit that keeps tile arithmetic within sane bounds.
_MAX_DIMENSION = 20000
_OPAQUE = 0xFF000000


def rgb_to_grey(color: int) -> int:
    """Convert a packed 0xRRGGBB colour to a packed grey of equal components."""
    luma = int(
        0.2990 * ((color & 0x00FF0000) >> 16)
        + 0.5870 * ((color & 0x0000FF00) >> 8)
        + 0.1140 * (color & 0x000000FF)
    ) & 0xFF
    return (luma << 16) | (luma << 8) | luma


def _colormap_entry(header: XcfHeader, index: int) -> int:
    start = index * 3
    entry = header.colormap[start : start + 3]
    if len(entry) != 3:
        raise ImageError(f"Gimp colormap index {index} out of range")
    return int.from_bytes(entry, "big")


def _pixel_values(chunk: bytes, bpp: int, header: XcfHeader) -> list[int] | None:
    """Packed ARGB values for one row of tile data, or None if bpp is 0."""
    if bpp == 4:
        return [int.from_bytes(chunk[i : i + 4], "big") for i in range(0, len(chunk), 4)]
    if bpp == 3:
        return [
            _OPAQUE | int.from_bytes(chunk[i : i + 3], "big")
            for i in range(0, len(chunk), 3)
        ]
    if bpp in (1, 2):
        if header.image_type == ImageType.INDEXED:
            def colour(value: int) -> int:
                return _colormap_entry(header, value)
        elif header.image_type == ImageType.GREYSCALE:
            def colour(value: int) -> int:
                return value * 0x010101
        else:
            raise ImageError(f"Unknown Gimp image type ({header.image_type})")
        if bpp == 1:
            return [_OPAQUE | colour(v) for v in chunk]
        return [
            (chunk[i + 1] << 24) | colour(chunk[i]) for i in range(0, len(chunk), 2)
        ]
    return None


def _draw_layer(
    surface: Surface,
    src: BinaryIO,
    header: XcfHeader,
    layer: XcfLayer,
    load_tile: TileLoader,
) -> None:
    src.seek(layer.hierarchy_offset)
    hierarchy = read_hierarchy(src, header)
    bpp = hierarchy.bpp
    if bpp > 4:
        raise ImageError(f"Unknown Gimp image bpp ({bpp})")
    if hierarchy.width > _MAX_DIMENSION or hierarchy.height > _MAX_DIMENSION:
        raise ImageError(f"Gimp image too large ({hierarchy.width}x{hierarchy.height})")
    if not hierarchy.level_offsets:
        return

    # Only the first level holds the full-size image; GIMP skips the rest too.
    src.seek(hierarchy.level_offsets[0])
    level = read_level(src, header)
    offsets = level.tile_offsets
    tx = ty = 0
    for j, tile_offset in enumerate(offsets):
        src.seek(tile_offset)
        ox = level.width % _TILE_SIZE if tx + _TILE_SIZE > level.width else _TILE_SIZE
        oy = level.height % _TILE_SIZE if ty + _TILE_SIZE > level.height else _TILE_SIZE
        following = offsets[j + 1] if j + 1 < len(offsets) else 0
        length = following - tile_offset if following > tile_offset else ox * oy * 6
        tile = load_tile(src, length, bpp, ox, oy)
        needed = ox * oy * bpp
        if len(tile) < needed:
            tile += bytes(needed - len(tile))

        row_bytes = ox * bpp
        for r in range(oy):
            y = ty + r
            if y >= surface.height or tx + ox > surface.width:
                break
            values = _pixel_values(tile[r * row_bytes : (r + 1) * row_bytes], bpp, header)
            if values is None:
                continue
            start = y * surface.pitch + tx * 4
            surface.pixels[start : start + 4 * ox] = b"".join(
                v.to_bytes(4, "little") for v in values
            )

        tx += _TILE_SIZE
        if tx >= level.width:
            tx = 0
            ty += _TILE_SIZE
        if ty >= level.height:
            break


def _channel_value(header: XcfHeader, channel: XcfChannel) -> int:
    if header.image_type in (ImageType.RGB, ImageType.INDEXED):
        return channel.opacity | channel.color
    if header.image_type == ImageType.GREYSCALE:
        return channel.opacity | rgb_to_grey(channel.color)
    return 0


def _new_surface(header: XcfHeader) -> Surface:
    try:
        return Surface(header.width, header.height, PixelFormat.ARGB8888)
    except MemoryError:
        raise ImageError("Out of memory") from None


def load_xcf(src: BinaryIO) -> Surface:
    """Decode an XCF image; the stream is rewound if decoding fails."""
    with rewind_on_error(src):
        try:
            header = read_header(src)
        except ImageError:
            raise ImageError("Couldn't read header") from None

        if header.compression == Compression.NONE:
            load_tile: TileLoader = load_tile_none
        elif header.compression == Compression.RLE:
            load_tile = load_tile_rle
        else:
            raise ImageError("Unsupported compression")

        surface = _new_surface(header)

        layer_offsets = []
        while offset := read_offset(src, header):
            layer_offsets.append(offset)
        header.layer_offsets = layer_offsets
        resume = src.tell()

        scratch = _new_surface(header)
        # GIMP stores layers topmost first, so draw them in reverse.
        for offset in reversed(layer_offsets):
            src.seek(offset)
            try:
                layer = read_layer(src, header)
            except ImageError:
                continue
            if not layer.visible:
                continue
            try:
                _draw_layer(scratch, src, header, layer, load_tile)
            except ImageError:
                pass  # a damaged layer keeps whatever was drawn before
            surface.blit_from(
                scratch,
                (0, 0, layer.width, layer.height),
                (layer.offset_x, layer.offset_y, layer.width, layer.height),
            )

        src.seek(resume)
        channels: list[XcfChannel] = []
        while offset := read_offset(src, header):
            resume = src.tell()
            src.seek(offset)
            try:
                channels.append(read_channel(src, header))
            except ImageError:
                pass
            src.seek(resume)

        if channels:
            overlay = _new_surface(header)
            for channel in channels:
                if not channel.selection and channel.visible:
                    overlay.fill(_channel_value(header, channel))
                    surface.blit_from(overlay)
        return surface