"""Brightness and contrast adjustment of grey images and conversion to bitmaps."""

from __future__ import annotations

from typing import List, Sequence

from .bitmap_io import Bitmap


def _gray(pixel) -> int:
    if isinstance(pixel, int):
        return pixel
    r, g, b = pixel[:3]
    return (r * 11 + g * 16 + b * 5) // 32


def _grey_rows(pixels) -> List[List[int]]:
    rows = [[_gray(px) for px in row] for row in pixels]
    if rows and any(len(row) != len(rows[0]) for row in rows):
        raise ValueError("image rows differ in length")
    return rows


def _clamp(value: int) -> int:
    return max(0, min(255, value))


def adjust_image(pixels: Sequence[Sequence], brightness, contrast) -> List[List[int]]:
    """Return a grey copy of ``pixels`` with contrast, then brightness, applied.

    ``pixels`` holds rows of grey values 0-255 or (r, g, b) tuples.
    ``contrast`` must be below 259.
    """
    rows = _grey_rows(pixels)
    if contrast != 0:
        factor = (259.0 * (contrast + 255)) / (255.0 * (259 - contrast))
        rows = [[_clamp(int(factor * (px - 128) + 128)) for px in row] for row in rows]
    if brightness != 0:
        rows = [[_clamp(px + brightness) for px in row] for row in rows]
    return rows


def image_to_bitmap(pixels: Sequence[Sequence]) -> Bitmap:
    """Threshold an image at grey level 128: darker pixels become black.

    Image row y becomes bitmap row y.
    """
    rows = _grey_rows(pixels)
    height = len(rows)
    width = len(rows[0]) if rows else 0
    bitmap = Bitmap(width, height)
    for y, row in enumerate(rows):
        for x, px in enumerate(row):
            bitmap.put(x, y, px < 128)
    return bitmap