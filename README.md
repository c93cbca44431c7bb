# rasterload

Decoders that turn image files into plain in-memory pixel surfaces. Each
loader reads from a seekable binary stream (an open file or an `io.BytesIO`)
and returns a `Surface` holding the decoded pixels, its pixel format and, for
indexed images, its palette.

PNM, TGA, QOI and XCF are decoded in pure Python. TIFF and WebP decoding goes
through Pillow, which is the package's only dependency.

| Format | Module                 | Detect    | Load                                                       |
|--------|------------------------|-----------|------------------------------------------------------------|
| PNM    | `rasterload.pnm`       | `is_pnm`  | `load_pnm` – PBM, PGM, PPM, ASCII and binary, max value ≤ 255 |
| TGA    | `rasterload.tga`       | –         | `load_tga` – 8/15/16/24/32 bpp, colour-mapped, greyscale, RLE |
| QOI    | `rasterload.qoi`       | `is_qoi`  | `load_qoi` – always an RGBA surface                        |
| XCF    | `rasterload.xcf`       | `is_xcf` (in `rasterload.xcf_reader`) | `load_xcf` – uncompressed or RLE tiles, flattened |
| TIFF   | `rasterload.tif`       | `is_tif`  | `load_tif` – RGBA, oriented top-left                       |
| WebP   | `rasterload.webp`      | `is_webp` | `load_webp`, `load_webp_animation`                         |
| SVG    | `rasterload.svg`       | `is_svg`  | sizing helpers only: `svg_scale`, `svg_output_size`        |

## Installation

```
pip install rasterload
```

## Usage

```python
from rasterload.pnm import is_pnm, load_pnm
from rasterload.surface import ImageError

with open("picture.ppm", "rb") as fh:
    if is_pnm(fh):
        try:
            surface = load_pnm(fh)
        except ImageError as exc:
            print("could not decode:", exc)
        else:
            print(surface.width, surface.height, surface.format)
            print(surface.get_pixel(0, 0))
            first_row = surface.row(0)
```

The `is_*` functions only peek at the first bytes of the stream and leave the
stream position where it was, so several checks can be tried in a row.

Decoding failures raise `ImageError`. `load_pnm`, `load_tga`, `load_xcf`,
`load_tif`, `load_webp` and `load_webp_animation` seek the stream back to
where decoding began when they fail, so another loader can be tried on the
same stream. `load_qoi` reads the rest of the stream and does not rewind.

### What each loader produces

- PNM: PPM files give `RGB24` surfaces; PBM and PGM give `INDEX8` surfaces
  with a two-entry (white, black) or 256-entry grey palette. Values with a
  maximum below 255 are scaled up to the full 0–255 range.
- TGA: `INDEX8`, `RGB555`, `BGR24` or `BGRA32`, depending on the bits per
  pixel. In a 32-bit colour map the last entry whose alpha is below 128
  becomes the surface's colour key.
- QOI: `RGBA32`.
- XCF: `ARGB8888`. Visible layers are drawn bottom to top at their offsets,
  then visible non-selection channels are blended over the result. A layer
  that cannot be read or drawn is skipped or left partly drawn instead of
  failing the whole image.
- TIFF: `ABGR8888`, i.e. R, G, B, A bytes in memory.
- WebP: `RGBA32` if the image has alpha, otherwise `RGB24`.

### Animations

```python
from rasterload.webp import load_webp_animation

with open("spinner.webp", "rb") as fh:
    animation = load_webp_animation(fh)

for frame, delay in zip(animation.frames, animation.delays):
    print(frame, delay)
```

An `Animation` holds one `Surface` per frame and each frame's delay in
milliseconds; `len(animation)` is the number of frames. Decoding stops at the
first frame that cannot be decoded.

### SVG sizing

`svg_scale` picks the scale factor for a document of a given natural size:
with a target width and height the smaller factor wins (keeping the aspect
ratio), with only one of them that one is used, and with neither the scale is
1.0. `svg_output_size` gives the resulting pixel size, rounded up.

```python
from rasterload.svg import svg_scale, svg_output_size

svg_scale(200.0, 100.0, 400, 0)          # 2.0
svg_output_size(200.0, 100.0, 400, 400)  # (400, 200)
```

## Surfaces

`rasterload.surface` provides the shared types:

- `Surface` – a pixel buffer (`width`, `height`, `format`, `pitch`, `pixels`,
  `palette`, `colorkey`, `blend_mode`) with `row(y)`, `get_pixel(x, y)`,
  `set_pixel(x, y, value)`, `fill(value, rect)` and
  `blit_from(source, src_rect, dst_rect)`. Pixel values are the little-endian
  integer of a pixel's bytes. Blits need matching formats, are clipped to
  both surfaces, alpha-blend sources in `BlendMode.BLEND`, and skip pixels
  equal to the source's colour key.
- `PixelFormat` – the pixel layout, with `bytes_per_pixel` and `alpha_offset`.
- `Color` – an RGBA palette entry.
- `BlendMode` – `NONE` or `BLEND`.
- `Animation` – frames and delays.
- `ImageError` – raised for decoding failures.

`rasterload.stream` has the small helpers the loaders share: `peek`,
`read_exact`, `remaining` and the `rewind_on_error` context manager.

`rasterload.xcf_reader` exposes the individual XCF record readers
(`read_header`, `read_layer`, `read_channel`, `read_hierarchy`, `read_level`,
`read_property`, `read_string`, `read_offset`) and tile decoders
(`load_tile_none`, `load_tile_rle`) for anyone who wants to inspect an XCF
file without flattening it.

## What this package does not do

- It does not render SVG images; it only detects SVG data and computes the
  size a rendering would have.
- It does not detect TGA data; call `load_tga` directly.
- It does not pick a loader for you: there is no single "load any image"
  function and no detection by file name.
- It does not write or save images in any format.
- It has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```