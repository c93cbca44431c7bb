import io

import pytest

from rasterload.pnm import is_pnm, load_pnm
from rasterload.surface import Color, ImageError, PixelFormat


@pytest.mark.parametrize("digit", "123456")
def test_is_pnm_accepts_signatures(digit):
    buf = io.BytesIO(b"P" + digit.encode() + b"\n1 1\n")
    assert is_pnm(buf) is True
    assert buf.tell() == 0


@pytest.mark.parametrize("data", [b"P7\n", b"XY", b"P", b""])
def test_is_pnm_rejects(data):
    assert is_pnm(io.BytesIO(data)) is False


def test_binary_ppm():
    pixels = bytes([1, 2, 3, 4, 5, 6])
    s = load_pnm(io.BytesIO(b"P6\n2 1\n255\n" + pixels))
    assert s.format is PixelFormat.RGB24
    assert (s.width, s.height) == (2, 1)
    assert bytes(s.pixels) == pixels


def test_binary_pgm_has_grey_palette():
    pixels = bytes([0, 100, 200, 255])
    s = load_pnm(io.BytesIO(b"P5 2 2 255\n" + pixels))
    assert s.format is PixelFormat.INDEX8
    assert bytes(s.pixels) == pixels
    assert all(s.palette[i] == Color(i, i, i) for i in range(256))


def test_binary_pbm_expands_bits():
    s = load_pnm(io.BytesIO(b"P4\n10 1\n" + bytes([0b10100000, 0b01000000])))
    assert list(s.pixels) == [1, 0, 1, 0, 0, 0, 0, 0, 0, 1]
    assert s.palette == [Color(255, 255, 255), Color(0, 0, 0)]


def test_ascii_pbm_with_comment():
    s = load_pnm(io.BytesIO(b"P1\n# a comment\n3 2\n1 0 1\n0 1 0\n"))
    assert list(s.pixels) == [1, 0, 1, 0, 1, 0]


def test_ascii_pbm_without_separators():
    s = load_pnm(io.BytesIO(b"P1 3 1\n101"))
    assert list(s.pixels) == [1, 0, 1]


def test_ascii_pgm_scaled_to_full_range():
    s = load_pnm(io.BytesIO(b"P2 2 1 1\n0 1\n"))
    assert list(s.pixels) == [0, 255]


def test_ascii_ppm():
    s = load_pnm(io.BytesIO(b"P3\n1 2\n255\n1 2 3\n4 5 6\n"))
    assert s.format is PixelFormat.RGB24
    assert list(s.pixels) == [1, 2, 3, 4, 5, 6]


def test_binary_and_ascii_agree():
    binary = load_pnm(io.BytesIO(b"P5 3 1 255\n" + bytes([9, 8, 7])))
    ascii_ = load_pnm(io.BytesIO(b"P2 3 1 255\n9 8 7\n"))
    assert binary.pixels == ascii_.pixels


@pytest.mark.parametrize(
    "data, message",
    [
        (b"P5 0 2 255\n", "Unable to read image width and height"),
        (b"P5 x 2 255\n", "Unable to read image width and height"),
        (b"P5 2 2 256\n", "unsupported PNM format"),
        (b"P5 2 2 0\n", "unsupported PNM format"),
        (b"P5 2 2 255\n\x01\x02", "file truncated"),
        (b"P2 1 1 255 7", "file truncated"),
        (b"P1 2 1\n1", "file truncated"),
        (b"P8 1 1\n", "unsupported PNM format"),
    ],
)
def test_errors(data, message):
    with pytest.raises(ImageError, match=message):
        load_pnm(io.BytesIO(data))


def test_error_rewinds_stream():
    buf = io.BytesIO(b"junk" + b"P6 2 2 255\n\x00")
    buf.seek(4)
    with pytest.raises(ImageError):
        load_pnm(buf)
    assert buf.tell() == 4