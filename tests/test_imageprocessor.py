import pytest

from vectrace.imageprocessor import adjust_image, image_to_bitmap

IMAGE = [[0, 64, 127], [128, 200, 255]]


def test_no_adjustment_is_identity():
    assert adjust_image(IMAGE, 0, 0) == IMAGE


def test_brightness_saturates():
    assert adjust_image(IMAGE, 300, 0) == [[255] * 3, [255] * 3]
    assert adjust_image(IMAGE, -300, 0) == [[0] * 3, [0] * 3]


def test_brightness_shift_is_clamped_addition():
    out = adjust_image(IMAGE, 10, 0)
    for row_in, row_out in zip(IMAGE, out):
        for a, b in zip(row_in, row_out):
            assert b == min(255, a + 10)


def test_contrast_keeps_midpoint_and_spreads():
    out = adjust_image([[100, 128, 156]], 0, 50)
    assert out[0][1] == 128
    assert out[0][0] < 100
    assert out[0][2] > 156


def test_full_contrast_thresholds():
    assert adjust_image([[127, 128, 129]], 0, 255) == [[0, 128, 255]]


def test_rgb_pixels_are_greyed():
    assert adjust_image([[(255, 255, 255), (0, 0, 0)]], 0, 0) == [[255, 0]]


def test_bitmap_threshold():
    bm = image_to_bitmap(IMAGE)
    assert (bm.width, bm.height) == (3, 2)
    assert [bm.get(x, 0) for x in range(3)] == [True, True, True]
    assert [bm.get(x, 1) for x in range(3)] == [False, False, False]


def test_empty_image():
    bm = image_to_bitmap([])
    assert (bm.width, bm.height) == (0, 0)


def test_ragged_rows_rejected():
    with pytest.raises(ValueError):
        image_to_bitmap([[0, 1], [2]])
    with pytest.raises(ValueError):
        adjust_image([[0], [1, 2]], 0, 0)