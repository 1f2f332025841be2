"""Exact extent of a set of traced curves along a direction."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .curve import DPoint, SegmentTag


@dataclass
class Interval:
    """A closed interval [min, max]."""

    min: float
    max: float

    def extend(self, x) -> None:
        """Grow the interval so that it contains ``x``."""
        if x < self.min:
            self.min = x
        elif x > self.max:
            self.max = x

    def __contains__(self, x) -> bool:
        return self.min <= x <= self.max


def _iprod(a, b) -> float:
    return a.x * b.x + a.y * b.y


def bezier(t, x0, x1, x2, x3) -> float:
    """Return the value at ``t`` of a one-dimensional cubic Bezier segment."""
    s = 1 - t
    return s * s * s * x0 + 3 * (s * s * t) * x1 + 3 * (t * t * s) * x2 + t * t * t * x3


def _bezier_limits(x0, x1, x2, x3, iv: Interval) -> None:
    # x0 is assumed to lie in iv already: curves are closed, so every start
    # point is also the end point of an earlier segment.
    iv.extend(x3)
    if x1 in iv and x2 in iv:
        return
    a = -3 * x0 + 9 * x1 - 9 * x2 + 3 * x3
    b = 6 * x0 - 12 * x1 + 6 * x2
    c = -3 * x0 + 3 * x1
    d = b * b - 4 * a * c
    if d > 0 and a != 0:
        r = math.sqrt(d)
        for t in ((-b - r) / (2 * a), (-b + r) / (2 * a)):
            if 0 < t < 1:
                iv.extend(bezier(t, x0, x1, x2, x3))


def _segment_limits(tag, start: DPoint, seg, direction, iv: Interval) -> None:
    if tag == SegmentTag.CORNER:
        iv.extend(_iprod(seg[1], direction))
        iv.extend(_iprod(seg[2], direction))
    elif tag == SegmentTag.CURVETO:
        _bezier_limits(
            _iprod(start, direction),
            _iprod(seg[0], direction),
            _iprod(seg[1], direction),
            _iprod(seg[2], direction),
            iv,
        )


def _curve_limits(curve, direction, iv: Interval) -> None:
    if curve.n == 0:
        return
    start = curve.c[-1][2]
    for tag, seg in zip(curve.tag, curve.c):
        _segment_limits(tag, start, seg, direction, iv)
        start = seg[2]


def path_limits(paths, direction) -> Interval:
    """Return the smallest interval holding <v | direction> for all curve points.

    An empty collection of paths gives the interval [0, 0].
    """
    paths = list(paths)
    if not paths:
        return Interval(0.0, 0.0)
    first = _iprod(paths[0].curve.c[0][2], direction)
    iv = Interval(first, first)
    for p in paths:
        _curve_limits(p.curve, direction, iv)
    return iv