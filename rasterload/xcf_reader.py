"""Readers for the structures stored in GIMP XCF files."""

from __future__ import annotations

import enum
import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from .stream import peek, read_exact, remaining
from .surface import ImageError

# Size of the property payload area; COLOR and COMPRESSION payloads
# longer than this are only partially read.
_PROP_DATA_SIZE = 24

_U32 = struct.Struct(">I")
_S32 = struct.Struct(">i")


class PropType(enum.IntEnum):
    END = 0
    COLORMAP = 1
    ACTIVE_LAYER = 2
    ACTIVE_CHANNEL = 3
    SELECTION = 4
    FLOATING_SELECTION = 5
    OPACITY = 6
    MODE = 7
    VISIBLE = 8
    LINKED = 9
    PRESERVE_TRANSPARENCY = 10
    APPLY_MASK = 11
    EDIT_MASK = 12
    SHOW_MASK = 13
    SHOW_MASKED = 14
    OFFSETS = 15
    COLOR = 16
    COMPRESSION = 17
    GUIDES = 18
    RESOLUTION = 19
    TATTOO = 20
    PARASITES = 21
    UNIT = 22
    PATHS = 23
    USER_UNIT = 24


class Compression(enum.IntEnum):
    NONE = 0
    RLE = 1
    ZLIB = 2
    FRACTAL = 3


class ImageType(enum.IntEnum):
    RGB = 0
    GREYSCALE = 1
    INDEXED = 2


@dataclass
class XcfProperty:
    """One property record; only the fields relevant to its id are set."""

    id: int
    length: int
    colormap: bytes = b""
    offset: tuple[int, int] = (0, 0)
    opacity: int = 0
    visible: bool = False
    color: tuple[int, int, int] = (0, 0, 0)
    compression: int = 0


@dataclass
class XcfHeader:
    signature: bytes
    width: int
    height: int
    image_type: int
    file_version: int = 0
    precision: int = 150
    compression: int = Compression.NONE
    colormap: bytes = b""
    layer_offsets: list[int] = field(default_factory=list)

    @property
    def colormap_size(self) -> int:
        return len(self.colormap) // 3


@dataclass
class XcfLayer:
    width: int
    height: int
    layer_type: int
    name: str | None = None
    offset_x: int = 0
    offset_y: int = 0
    visible: bool = False
    hierarchy_offset: int = 0
    mask_offset: int = 0


@dataclass
class XcfChannel:
    width: int
    height: int
    name: str | None = None
    opacity: int = 0
    color: int = 0
    selection: bool = False
    visible: bool = False
    hierarchy_offset: int = 0


@dataclass
class XcfHierarchy:
    width: int
    height: int
    bpp: int
    level_offsets: list[int] = field(default_factory=list)


@dataclass
class XcfLevel:
    width: int
    height: int
    tile_offsets: list[int] = field(default_factory=list)


def _read_u32(src: BinaryIO) -> int:
    return _U32.unpack(read_exact(src, 4))[0]


def _read_s32(src: BinaryIO) -> int:
    return _S32.unpack(read_exact(src, 4))[0]


def _try_u32(src: BinaryIO) -> int | None:
    data = src.read(4)
    return _U32.unpack(data)[0] if len(data) == 4 else None


def is_xcf(src: BinaryIO) -> bool:
    """True if the stream starts with a GIMP XCF signature."""
    magic = peek(src, 14)
    return len(magic) == 14 and magic.startswith(b"gimp xcf ")


def read_string(src: BinaryIO) -> str | None:
    """Read a length-prefixed string, or None if it cannot be read."""
    length = _try_u32(src)
    if length is None or length > remaining(src):
        return None
    data = src.read(length)
    if len(data) != length:
        return None
    text = data[: max(length - 1, 0)].split(b"\0", 1)[0]
    return text.decode("utf-8", errors="replace")


def read_offset(src: BinaryIO, header: XcfHeader) -> int:
    """Read a file offset: 64 bits from version 11 on, 32 bits before.

    Missing data counts as zero.
    """
    offset = 0
    if header.file_version >= 11:
        high = _try_u32(src)
        if high is not None:
            offset = high << 32
    low = _try_u32(src)
    if low is not None:
        offset |= low
    return offset


def read_property(src: BinaryIO) -> XcfProperty:
    """Read one property record, skipping payloads that are not used."""
    prop = XcfProperty(_read_u32(src), _read_u32(src))
    if prop.id == PropType.COLORMAP:
        count = _read_u32(src)
        prop.colormap = read_exact(src, count * 3)
    elif prop.id == PropType.OFFSETS:
        prop.offset = (_read_s32(src), _read_s32(src))
    elif prop.id == PropType.OPACITY:
        prop.opacity = _read_u32(src)
    elif prop.id in (PropType.COMPRESSION, PropType.COLOR):
        raw = read_exact(src, min(prop.length, _PROP_DATA_SIZE))
        padded = raw + bytes(3)
        prop.compression = padded[0]
        prop.color = (padded[0], padded[1], padded[2])
    elif prop.id == PropType.VISIBLE:
        prop.visible = _read_u32(src) != 0
    else:
        src.seek(prop.length, io.SEEK_CUR)
    return prop


def _read_properties(src: BinaryIO):
    while True:
        prop = read_property(src)
        yield prop
        if prop.id == PropType.END:
            return


def _parse_version(signature: bytes) -> int:
    digits = signature[10:13]
    if signature[9:10] == b"v" and len(digits) == 3 and digits.isdigit():
        return int(digits)
    return 0


def read_header(src: BinaryIO) -> XcfHeader:
    """Read the image header and its property list."""
    signature = read_exact(src, 14)
    header = XcfHeader(signature, _read_u32(src), _read_u32(src), _read_u32(src))
    header.file_version = _parse_version(signature)
    header.precision = _read_u32(src) if header.file_version >= 4 else 150

    for prop in _read_properties(src):
        if prop.id == PropType.COMPRESSION:
            try:
                header.compression = Compression(prop.compression)
            except ValueError:
                header.compression = prop.compression
        elif prop.id == PropType.COLORMAP:
            header.colormap = prop.colormap
    return header


def read_layer(src: BinaryIO, header: XcfHeader) -> XcfLayer:
    """Read a layer record, including its hierarchy and mask offsets."""
    layer = XcfLayer(_read_u32(src), _read_u32(src), _read_u32(src))
    layer.name = read_string(src)
    for prop in _read_properties(src):
        if prop.id == PropType.OFFSETS:
            layer.offset_x, layer.offset_y = prop.offset
        elif prop.id == PropType.VISIBLE:
            layer.visible = prop.visible
    layer.hierarchy_offset = read_offset(src, header)
    layer.mask_offset = read_offset(src, header)
    return layer


def read_channel(src: BinaryIO, header: XcfHeader) -> XcfChannel:
    """Read a channel record; opacity is kept in the top byte."""
    channel = XcfChannel(_read_u32(src), _read_u32(src))
    channel.name = read_string(src)
    for prop in _read_properties(src):
        if prop.id == PropType.OPACITY:
            channel.opacity = (prop.opacity << 24) & 0xFFFFFFFF
        elif prop.id == PropType.COLOR:
            r, g, b = prop.color
            channel.color = (r << 16) | (g << 8) | b
        elif prop.id == PropType.SELECTION:
            channel.selection = True
        elif prop.id == PropType.VISIBLE:
            channel.visible = prop.visible
    channel.hierarchy_offset = read_offset(src, header)
    return channel


def _read_offset_list(src: BinaryIO, header: XcfHeader) -> list[int]:
    offsets = []
    while offset := read_offset(src, header):
        offsets.append(offset)
    return offsets


def read_hierarchy(src: BinaryIO, header: XcfHeader) -> XcfHierarchy:
    """Read a hierarchy record and its zero-terminated level offsets."""
    hierarchy = XcfHierarchy(_read_u32(src), _read_u32(src), _read_u32(src))
    hierarchy.level_offsets = _read_offset_list(src, header)
    return hierarchy


def read_level(src: BinaryIO, header: XcfHeader) -> XcfLevel:
    """Read a level record and its zero-terminated tile offsets."""
    level = XcfLevel(_read_u32(src), _read_u32(src))
    level.tile_offsets = _read_offset_list(src, header)
    return level


def load_tile_none(src: BinaryIO, length: int, bpp: int, width: int, height: int) -> bytes:
    """Read an uncompressed tile of length bytes."""
    return read_exact(src, length)


def load_tile_rle(src: BinaryIO, length: int, bpp: int, width: int, height: int) -> bytes:
    """Decode an RLE tile into width*height pixels of bpp interleaved bytes.

    Bogus runs stop decoding; bytes not reached stay zero.
    """
    if length == 0:
        raise ImageError("Empty RLE tile")
    load = src.read(length)
    amount_read = len(load)
    if amount_read == 0:
        raise ImageError("Unexpected end of data")
    buf = load + bytes(length - amount_read)

    def at(pos: int) -> int:
        return buf[pos] if pos < len(buf) else 0

    data = bytearray(width * height * bpp)
    t = 0
    for channel in range(bpp):
        d = channel
        size = width * height
        while size > 0:
            val = at(t)
            t += 1
            if val >= 128:
                count = 256 - val
                if count == 128:
                    count = (at(t) << 8) + at(t + 1)
                    t += 2
                if t + count >= amount_read or count > size:
                    break
                size -= count
                data[d : d + count * bpp : bpp] = buf[t : t + count]
                t += count
            else:
                count = val + 1
                if count == 128:
                    count = (at(t) << 8) + at(t + 1)
                    t += 2
                if t >= amount_read or count > size:
                    break
                size -= count
                value = at(t)
                t += 1
                data[d : d + count * bpp : bpp] = bytes([value]) * count
            d += count * bpp
        if size > 0:
            break
    return bytes(data)