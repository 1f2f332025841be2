import io
import struct

import pytest

from vectrace.bitmap_io import BitmapReadError, EmptyInputError, UnknownFormatError
from vectrace.bmp_io import read_bitmap, read_bmp

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def make_bmp(width, height, bits, data, palette=(), comp=0, planes=1,
             info_size=40, masks=None, trailing=b""):
    table = b"".join(bytes((b, g, r, 0)) for (r, g, b) in palette)
    info = struct.pack(
        "<IiiHHIIiiII", info_size, width, height, planes, bits, comp,
        len(data), 0, 0, len(palette), 0,
    )
    if info_size >= 108:
        info += struct.pack("<IIII", *(masks or (0, 0, 0, 0)))
    info += bytes(info_size - len(info))
    offset = 14 + info_size + len(table)
    header = b"BM" + struct.pack("<III", offset + len(data), 0, offset)
    return header + info + table + data + trailing


def rgb_rows(rows):
    out = b""
    for row in rows:
        line = b"".join(bytes((b, g, r)) for (r, g, b) in row)
        out += line + bytes((-len(line)) & 3)
    return out


def pixels(bm):
    return [[bm.get(x, y) for x in range(bm.width)] for y in range(bm.height)]


def test_24bit_bottom_up():
    data = rgb_rows([[BLACK, WHITE], [WHITE, BLACK]])
    result = read_bmp(io.BytesIO(make_bmp(2, 2, 24, data)))
    assert result.complete
    assert pixels(result.bitmap) == [[True, False], [False, True]]


def test_top_down_is_flipped():
    data = rgb_rows([[BLACK, BLACK], [WHITE, BLACK]])
    up = read_bmp(io.BytesIO(make_bmp(2, 2, 24, data))).bitmap
    down = read_bmp(io.BytesIO(make_bmp(2, -2, 24, data))).bitmap
    assert pixels(down) == list(reversed(pixels(up)))


def test_threshold_controls_grey():
    data = rgb_rows([[(128, 128, 128)]])
    low = read_bmp(io.BytesIO(make_bmp(1, 1, 24, data)), 0.5).bitmap
    high = read_bmp(io.BytesIO(make_bmp(1, 1, 24, data)), 0.6).bitmap
    assert low.get(0, 0) is False
    assert high.get(0, 0) is True


def test_monochrome_palette_and_swapped_palette_invert():
    data = bytes([0b01100000, 0, 0, 0])
    a = read_bmp(io.BytesIO(make_bmp(3, 1, 1, data, palette=[BLACK, WHITE]))).bitmap
    b = read_bmp(io.BytesIO(make_bmp(3, 1, 1, data, palette=[WHITE, BLACK]))).bitmap
    assert pixels(a) == [[True, False, False]]
    assert pixels(b) == [[not v for v in row] for row in pixels(a)]


def test_8bit_palette():
    palette = [BLACK, WHITE, (100, 100, 100), (200, 200, 200)]
    data = bytes([0, 1, 2, 3])
    bm = read_bmp(io.BytesIO(make_bmp(4, 1, 8, data, palette=palette))).bitmap
    assert pixels(bm) == [[True, False, True, False]]


def test_4bit_palette():
    data = bytes([0x01, 0x00, 0, 0])
    bm = read_bmp(io.BytesIO(make_bmp(3, 1, 4, data, palette=[BLACK, WHITE]))).bitmap
    assert pixels(bm) == [[True, False, True]]


def test_rle8():
    data = bytes([2, 0, 0, 0, 2, 1, 0, 1])
    result = read_bmp(io.BytesIO(make_bmp(2, 2, 8, data, palette=[BLACK, WHITE], comp=1)))
    assert result.complete
    assert pixels(result.bitmap) == [[True, True], [False, False]]


def test_rle4_alternates_colours():
    data = bytes([4, 0x01, 0, 1])
    bm = read_bmp(io.BytesIO(make_bmp(4, 1, 4, data, palette=[BLACK, WHITE], comp=2))).bitmap
    assert pixels(bm) == [[True, False, True, False]]


def test_bitfields():
    data = struct.pack("<II", 0, 0x00FFFFFF)
    bmp = make_bmp(2, 1, 32, data, comp=3, info_size=108,
                   masks=(0xFF0000, 0xFF00, 0xFF, 0))
    bm = read_bmp(io.BytesIO(bmp)).bitmap
    assert pixels(bm) == [[True, False]]


def test_truncated_data_is_incomplete():
    full = make_bmp(2, 2, 24, rgb_rows([[BLACK, BLACK], [BLACK, BLACK]]))
    cut = full[: len(full) - 8]
    result = read_bmp(io.BytesIO(cut))
    assert result.complete is False
    assert result.bitmap.height == 2
    assert pixels(result.bitmap) == [[True, True], [False, False]]


def test_trailing_bytes_after_file_are_left():
    stream = io.BytesIO(make_bmp(1, 1, 24, rgb_rows([[BLACK]]), trailing=b"rest"))
    read_bmp(stream)
    assert stream.read() == b"rest"


def test_truncated_header_is_format_error():
    with pytest.raises(BitmapReadError, match="invalid bmp file"):
        read_bmp(io.BytesIO(b"BM\x00\x01"))


def test_read_bmp_rejects_other_magic():
    with pytest.raises(UnknownFormatError):
        read_bmp(io.BytesIO(b"P1\n1 1\n1\n"))


def test_read_bitmap_dispatches_pnm():
    result = read_bitmap(io.BytesIO(b"P1\n2 1\n1 0\n"))
    assert pixels(result.bitmap) == [[True, False]]


def test_read_bitmap_dispatches_bmp():
    raw = make_bmp(2, 1, 24, rgb_rows([[WHITE, BLACK]]))
    assert pixels(read_bitmap(io.BytesIO(raw)).bitmap) == pixels(read_bmp(io.BytesIO(raw)).bitmap)


def test_read_bitmap_empty_input():
    with pytest.raises(EmptyInputError):
        read_bitmap(io.BytesIO(b"  \n# only a comment\n"))


def test_read_bitmap_unknown_magic():
    with pytest.raises(UnknownFormatError):
        read_bitmap(io.BytesIO(b"XY123"))