"""Decompose a black-and-white bitmap into closed boundary paths."""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .bitmap_io import Bitmap
from .curve import Path, PathList, Point

_INT_MAX = 0x7FFFFFFF
_MASK32 = 0xFFFFFFFF
_INVERT = bytes.maketrans(b"\x00\x01", b"\x01\x00")

# non-linear sequence: constant term of inverse in GF(8), mod x^8+x^4+x^3+x+1
_DETRAND_TABLE = bytes((
    0, 1, 1, 0, 1, 0, 1, 1, 0, 1, 1, 0, 0, 1, 1, 1, 0, 0, 0, 1, 1, 1, 0, 1,
    0, 1, 1, 0, 1, 0, 0, 0, 0, 0, 0, 1, 1, 1, 0, 1, 1, 0, 0, 1, 0, 0, 0, 0,
    0, 1, 0, 0, 1, 1, 0, 0, 0, 1, 0, 1, 1, 1, 1, 1, 1, 0, 1, 1, 1, 1, 1, 1,
    1, 0, 1, 1, 0, 1, 1, 1, 1, 0, 1, 0, 0, 0, 1, 1, 0, 0, 0, 0, 1, 0, 1, 1,
    0, 0, 1, 1, 1, 0, 0, 1, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 1, 0, 0,
    0, 0, 0, 0, 1, 0, 1, 0, 1, 0, 1, 0, 0, 1, 0, 0, 1, 0, 1, 1, 1, 0, 1, 0,
    0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 1, 0, 1, 0, 0, 1, 1, 0, 1, 0,
    0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 1, 1, 1, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1,
    1, 0, 1, 1, 0, 0, 0, 1, 1, 1, 1, 0, 1, 0, 0, 0, 0, 1, 0, 1, 1, 1, 0, 0,
    0, 1, 0, 1, 1, 0, 0, 1, 1, 1, 0, 1, 0, 0, 1, 1, 0, 0, 1, 1, 1, 0, 0, 1,
    1, 1, 0, 0, 0, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0,
))


class TurnPolicy(enum.IntEnum):
    """How to resolve ambiguous turns where two pixels touch diagonally."""

    BLACK = 0
    WHITE = 1
    LEFT = 2
    RIGHT = 3
    MINORITY = 4
    MAJORITY = 5
    RANDOM = 6


@dataclass
class DecomposeParams:
    """Parameters of the decomposition.

    Paths enclosing an area of at most ``turdsize`` pixels are dropped.
    """

    turdsize: int = 2
    turnpolicy: TurnPolicy = TurnPolicy.MINORITY


def detrand(x, y) -> int:
    """Hash (x, y) deterministically into a pseudo-random bit."""
    z = ((((0x04B3E375 * x) & _MASK32) ^ (y & _MASK32)) * 0x05A8EF93) & _MASK32
    t = _DETRAND_TABLE
    return t[z & 0xFF] ^ t[(z >> 8) & 0xFF] ^ t[(z >> 16) & 0xFF] ^ t[(z >> 24) & 0xFF]


def majority(bitmap: Bitmap, x, y) -> bool:
    """Return the majority colour around the pixel corner (x, y); True is black."""
    get = bitmap.get
    for i in range(2, 5):
        ct = 0
        for a in range(-i + 1, i):
            ct += 1 if get(x + a, y + i - 1) else -1
            ct += 1 if get(x + i - 1, y + a - 1) else -1
            ct += 1 if get(x + a - 1, y - i) else -1
            ct += 1 if get(x - i, y + a) else -1
        if ct > 0:
            return True
        if ct < 0:
            return False
    return False


def _turns_right(policy, sign: str, bitmap: Bitmap, x: int, y: int) -> bool:
    if policy == TurnPolicy.RIGHT:
        return True
    if policy == TurnPolicy.BLACK:
        return sign == "+"
    if policy == TurnPolicy.WHITE:
        return sign == "-"
    if policy == TurnPolicy.RANDOM:
        return bool(detrand(x, y))
    if policy == TurnPolicy.MAJORITY:
        return majority(bitmap, x, y)
    if policy == TurnPolicy.MINORITY:
        return not majority(bitmap, x, y)
    return False


def find_path(bitmap: Bitmap, x0, y0, sign, turnpolicy) -> Path:
    """Trace the boundary starting at the upper left pixel corner (x0, y0).

    Points lie on pixel corners: point (x, y) is the lower left corner of
    pixel (x, y). The enclosed area is stored in the returned path.
    """
    x, y = x0, y0
    dirx, diry = 0, -1
    points: List[Point] = []
    area = 0

    while True:
        points.append(Point(x, y))
        x += dirx
        y += diry
        area += x * diry
        if x == x0 and y == y0:
            break

        c = bitmap.get(x + (dirx + diry - 1) // 2, y + (diry - dirx - 1) // 2)
        d = bitmap.get(x + (dirx - diry - 1) // 2, y + (diry + dirx - 1) // 2)

        if c and not d:
            right = _turns_right(turnpolicy, sign, bitmap, x, y)
        elif c:
            right = True
        elif not d:
            right = False
        else:
            continue
        if right:
            dirx, diry = diry, -dirx
        else:
            dirx, diry = -diry, dirx

    if area < 0 or area > _INT_MAX:
        area = _INT_MAX
    return Path(sign=sign, area=area, points=points)


def _xor_path(bitmap: Bitmap, points) -> None:
    """Invert every pixel inside the closed path."""
    if not points:
        return
    w = bitmap.width
    data = bitmap.data
    ref = points[0].x
    y1 = points[-1].y
    for pt in points:
        if pt.y != y1:
            row = min(pt.y, y1) * w
            lo, hi = sorted((pt.x, ref))
            data[row + lo:row + hi] = data[row + lo:row + hi].translate(_INVERT)
            y1 = pt.y


def _bbox(points) -> Tuple[int, int, int, int]:
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def _clear_rect(bitmap: Bitmap, x0: int, y0: int, x1: int, y1: int) -> None:
    w = bitmap.width
    blank = bytes(x1 - x0)
    for y in range(y0, y1):
        bitmap.data[y * w + x0:y * w + x1] = blank


def _find_next(bitmap: Bitmap, x: int, y: int) -> Optional[Tuple[int, int]]:
    """Find the next black pixel, scanning left to right and top down."""
    w = bitmap.width
    if w == 0:
        return None
    x0 = min(x & ~31, w)
    while y >= 0:
        start = y * w
        i = bitmap.data.find(1, start + x0, start + w)
        if i >= 0:
            return i - start, y
        x0 = 0
        y -= 1
    return None


def _build_tree(paths: List[Path], scratch: Bitmap) -> List[Path]:
    """Nest paths by insideness; outer paths must come before inner ones."""
    scratch.clear(0)
    for p in paths:
        p.children = []
    roots: List[Path] = []
    jobs = [(list(paths), roots)]
    while jobs:
        pending, target = jobs.pop()
        if not pending:
            continue
        head, rest = pending[0], pending[1:]
        target.append(head)

        _xor_path(scratch, head.points)
        bx0, by0, bx1, by1 = _bbox(head.points)

        inside: List[Path] = []
        outside: List[Path] = []
        for k, p in enumerate(rest):
            start = p.points[0]
            if start.y <= by0:
                outside.extend(rest[k:])
                break
            if scratch.get(start.x, start.y - 1):
                inside.append(p)
            else:
                outside.append(p)

        _clear_rect(scratch, bx0, by0, bx1, by1)
        jobs.append((outside, target))
        jobs.append((inside, head.children))
    return roots


def _output_order(roots: List[Path]) -> List[Path]:
    """List each positive path followed directly by its holes."""
    ordered: List[Path] = []
    queue = deque([roots])
    while queue:
        for p in queue.popleft():
            ordered.append(p)
            for hole in p.children:
                ordered.append(hole)
                if hole.children:
                    queue.append(hole.children)
    return ordered


def bitmap_to_pathlist(
    bitmap: Bitmap,
    params: Optional[DecomposeParams] = None,
    progress: Optional[Callable[[float], None]] = None,
) -> PathList:
    """Decompose ``bitmap`` into boundary paths, nested as a tree.

    ``progress``, if given, is called with the fraction of work done.
    The input bitmap is left unchanged.
    """
    params = params or DecomposeParams()
    work = bitmap.copy()
    found: List[Path] = []

    x, y = 0, work.height - 1
    while True:
        nxt = _find_next(work, x, y)
        if nxt is None:
            break
        x, y = nxt
        sign = "+" if bitmap.get(x, y) else "-"
        path = find_path(work, x, y + 1, sign, params.turnpolicy)
        _xor_path(work, path.points)
        if path.area > params.turdsize:
            found.append(path)
        if progress is not None and work.height > 0:
            progress(1 - y / work.height)

    roots = _build_tree(found, work)
    if progress is not None:
        progress(1.0)
    return PathList(_output_order(roots), roots=roots)