import pytest

from rasterload.surface import (
    Animation,
    BlendMode,
    Color,
    ImageError,
    PixelFormat,
    Surface,
)


@pytest.mark.parametrize("fmt", list(PixelFormat))
def test_new_surface_is_zeroed_and_sized(fmt):
    s = Surface(5, 3, fmt)
    assert s.pitch == 5 * fmt.bytes_per_pixel
    assert len(s.pixels) == s.pitch * s.height
    assert not any(s.pixels)


def test_indexed_surface_has_white_palette():
    s = Surface(2, 2, PixelFormat.INDEX8)
    assert s.palette == [Color(255, 255, 255)] * 256
    assert Surface(2, 2, PixelFormat.RGB24).palette is None


def test_blend_mode_follows_alpha():
    assert Surface(1, 1, PixelFormat.ARGB8888).blend_mode is BlendMode.BLEND
    assert Surface(1, 1, PixelFormat.RGB24).blend_mode is BlendMode.NONE


def test_negative_size_rejected():
    with pytest.raises(ImageError):
        Surface(-1, 2, PixelFormat.RGB24)


def test_pixel_buffer_size_checked():
    with pytest.raises(ImageError):
        Surface(2, 2, PixelFormat.RGB24, b"\x00" * 5)


def test_set_get_pixel_round_trip():
    s = Surface(4, 4, PixelFormat.ARGB8888)
    s.set_pixel(2, 3, 0x11223344)
    assert s.get_pixel(2, 3) == 0x11223344
    assert bytes(s.row(3)[8:12]) == (0x11223344).to_bytes(4, "little")
    assert s.get_pixel(0, 0) == 0


def test_pixel_out_of_range():
    s = Surface(2, 2, PixelFormat.INDEX8)
    with pytest.raises(IndexError):
        s.get_pixel(2, 0)
    with pytest.raises(IndexError):
        s.row(2)


def test_row_is_writable_view():
    s = Surface(3, 2, PixelFormat.INDEX8)
    s.row(1)[:] = b"\x07\x08\x09"
    assert [s.get_pixel(x, 1) for x in range(3)] == [7, 8, 9]
    assert len(s.row(0)) == s.pitch


def test_fill_whole_and_clipped_rect():
    s = Surface(4, 4, PixelFormat.INDEX8)
    s.fill(5)
    assert set(s.pixels) == {5}
    s.fill(9, (2, 2, 10, 10))
    assert s.get_pixel(3, 3) == 9
    assert s.get_pixel(1, 1) == 5
    assert sum(1 for v in s.pixels if v == 9) == 4


def test_blit_copies_with_offset():
    src = Surface(2, 2, PixelFormat.RGB24, bytes(range(12)))
    dst = Surface(4, 4, PixelFormat.RGB24)
    dst.blit_from(src, None, (1, 1, 2, 2))
    assert dst.get_pixel(1, 1) == src.get_pixel(0, 0)
    assert dst.get_pixel(2, 2) == src.get_pixel(1, 1)
    assert dst.get_pixel(0, 0) == 0


def test_blit_negative_offset_clips():
    src = Surface(2, 2, PixelFormat.INDEX8, bytes([1, 2, 3, 4]))
    dst = Surface(2, 2, PixelFormat.INDEX8)
    dst.blit_from(src, None, (-1, -1, 2, 2))
    assert dst.get_pixel(0, 0) == src.get_pixel(1, 1)
    assert sum(dst.pixels) == src.get_pixel(1, 1)


def test_blit_alpha_extremes():
    dst = Surface(2, 1, PixelFormat.ARGB8888)
    dst.fill(0xFF102030)
    src = Surface(2, 1, PixelFormat.ARGB8888)
    src.set_pixel(0, 0, 0xFFAABBCC)
    src.set_pixel(1, 0, 0x00AABBCC)
    dst.blit_from(src)
    assert dst.get_pixel(0, 0) == 0xFFAABBCC
    assert dst.get_pixel(1, 0) == 0xFF102030


def test_blit_partial_alpha_stays_between():
    dst = Surface(1, 1, PixelFormat.ARGB8888)
    dst.fill(0xFF000000)
    src = Surface(1, 1, PixelFormat.ARGB8888)
    src.fill(0x80FFFFFF)
    dst.blit_from(src)
    red = (dst.get_pixel(0, 0) >> 16) & 0xFF
    assert 0 < red < 255
    assert dst.get_pixel(0, 0) >> 24 == 255


def test_blit_skips_colorkey():
    src = Surface(2, 1, PixelFormat.INDEX8, bytes([3, 4]))
    src.colorkey = 3
    dst = Surface(2, 1, PixelFormat.INDEX8, bytes([7, 7]))
    dst.blit_from(src)
    assert list(dst.pixels) == [7, 4]


def test_blit_format_mismatch():
    with pytest.raises(ImageError):
        Surface(1, 1, PixelFormat.RGB24).blit_from(Surface(1, 1, PixelFormat.BGR24))


def test_animation_length():
    frames = [Surface(1, 1, PixelFormat.RGB24), Surface(1, 1, PixelFormat.RGB24)]
    anim = Animation(1, 1, frames, [10, 20])
    assert len(anim) == len(frames)
    assert anim.delays == [10, 20]