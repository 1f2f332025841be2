import io

import pytest

from vectrace.bitmap_io import (
    Bitmap,
    BitmapReadError,
    EmptyInputError,
    ReadResult,
    UnknownFormatError,
    format_bitmap_text,
    read_pnm,
    write_pbm,
)


def _row(bm, y):
    return [bm.get(x, y) for x in range(bm.width)]


def _pattern(w, h):
    bm = Bitmap(w, h)
    for y in range(h):
        for x in range(w):
            bm.put(x, y, (x * 3 + y) % 4 == 0)
    return bm


def test_bitmap_get_put_and_bounds():
    bm = Bitmap(3, 2)
    bm.put(1, 1, True)
    bm.put(5, 5, True)
    bm.put(-1, 0, True)
    assert bm.get(1, 1) is True
    assert bm.get(0, 0) is False
    assert bm.get(5, 5) is False
    assert sum(bm.data) == 1


def test_bitmap_rejects_bad_size():
    with pytest.raises(ValueError):
        Bitmap(-1, 2)
    with pytest.raises(ValueError):
        Bitmap(2, 2, bytearray(3))


def test_flip_twice_is_identity():
    bm = _pattern(5, 4)
    orig = bm.copy()
    bm.flip()
    assert _row(bm, 0) == _row(orig, 3)
    bm.flip()
    assert bm == orig


def test_resize_keeps_low_rows_and_adds_white():
    bm = _pattern(4, 3)
    orig = bm.copy()
    bm.resize(2)
    assert bm.height == 2
    assert _row(bm, 1) == _row(orig, 1)
    bm.resize(4)
    assert _row(bm, 3) == [False] * 4
    assert _row(bm, 0) == _row(orig, 0)


def test_copy_is_independent_and_clear():
    bm = _pattern(3, 3)
    dup = bm.copy()
    dup.clear(True)
    assert all(dup.get(x, y) for x in range(3) for y in range(3))
    assert bm == _pattern(3, 3)
    dup.clear(False)
    assert not any(dup.data)


def test_read_p1_with_comment_is_bottom_up():
    result = read_pnm(io.BytesIO(b"P1\n# comment\n3 2\n1 0 1\n0 1 0\n"), 0.5)
    assert isinstance(result, ReadResult)
    assert result.complete is True
    bm = result.bitmap
    assert (bm.width, bm.height) == (3, 2)
    assert _row(bm, 1) == [True, False, True]
    assert _row(bm, 0) == [False, True, False]


def test_read_p1_packed_digits():
    bm = read_pnm(io.BytesIO(b"P1 3 1 101"), 0.5).bitmap
    assert _row(bm, 0) == [True, False, True]


def test_read_p2_threshold():
    bm = read_pnm(io.BytesIO(b"P2 2 1 255 10 200"), 0.5).bitmap
    assert _row(bm, 0) == [True, False]
    bm = read_pnm(io.BytesIO(b"P2 2 1 255 10 200"), 0.9).bitmap
    assert _row(bm, 0) == [True, True]


def test_read_p3_ascii_colour():
    bm = read_pnm(io.BytesIO(b"P3 2 1 255 0 0 0 255 255 255"), 0.5).bitmap
    assert _row(bm, 0) == [True, False]


def test_read_p5_sixteen_bit():
    data = b"P5 2 1 65535\n" + bytes([0, 1, 255, 255])
    bm = read_pnm(io.BytesIO(data), 0.5).bitmap
    assert _row(bm, 0) == [True, False]


def test_read_p6_raw_colour():
    data = b"P6 2 1 255\n" + bytes([0, 0, 0, 250, 250, 250])
    bm = read_pnm(io.BytesIO(data), 0.5).bitmap
    assert _row(bm, 0) == [True, False]


def test_truncated_file_keeps_rows_read():
    result = read_pnm(io.BytesIO(b"P1\n3 3\n1 1 1\n0 0"), 0.5)
    assert result.complete is False
    bm = result.bitmap
    assert bm.height == 2
    assert _row(bm, 1) == [True, True, True]
    assert _row(bm, 0) == [False, False, False]


def test_bad_maxval_is_format_error():
    with pytest.raises(BitmapReadError, match="invalid pgm file"):
        read_pnm(io.BytesIO(b"P2 2 2 0 "), 0.5)


def test_missing_size_is_format_error():
    with pytest.raises(BitmapReadError, match="invalid pbm file"):
        read_pnm(io.BytesIO(b"P4 x"), 0.5)
    with pytest.raises(BitmapReadError, match="invalid ppm file"):
        read_pnm(io.BytesIO(b"P6"), 0.5)


def test_empty_input():
    with pytest.raises(EmptyInputError):
        read_pnm(io.BytesIO(b"  # only a comment\n"), 0.5)


def test_unknown_magic():
    with pytest.raises(UnknownFormatError):
        read_pnm(io.BytesIO(b"GIF89a"), 0.5)


def test_concatenated_ascii_images():
    stream = io.BytesIO(b"P2 1 1 255 0\nP2 1 1 255 255\n")
    first = read_pnm(stream, 0.5).bitmap
    second = read_pnm(stream, 0.5).bitmap
    assert first.get(0, 0) is True
    assert second.get(0, 0) is False
    with pytest.raises(EmptyInputError):
        read_pnm(stream, 0.5)


def test_write_pbm_header():
    out = io.BytesIO()
    write_pbm(out, _pattern(10, 3))
    data = out.getvalue()
    assert data.startswith(b"P4\n10 3\n")
    assert len(data) == len(b"P4\n10 3\n") + 2 * 3


@pytest.mark.parametrize("size", [(1, 1), (8, 2), (10, 3), (17, 5)])
def test_pbm_round_trip(size):
    bm = _pattern(*size)
    out = io.BytesIO()
    write_pbm(out, bm)
    out.seek(0)
    result = read_pnm(out, 0.5)
    assert result.complete is True
    assert result.bitmap == bm


def test_format_bitmap_text_small():
    bm = Bitmap(2, 2)
    bm.put(0, 1, True)
    bm.put(1, 0, True)
    assert format_bitmap_text(bm) == "* \n *\n"


def test_format_bitmap_text_wide_is_limited():
    bm = Bitmap(200, 100)
    bm.clear(True)
    lines = format_bitmap_text(bm).splitlines()
    assert all(len(line) == 79 for line in lines)
    assert all(set(line) == {"*"} for line in lines)