"""Decoders for PNM, TGA, QOI, XCF, TIFF and WebP images into pixel surfaces, plus SVG sizing helpers."""

__version__ = "0.1.0"

__all__ = [
    "surface",
    "stream",
    "pnm",
    "tga",
    "xcf_reader",
    "qoi",
    "xcf",
    "tif",
    "webp",
    "svg",
]