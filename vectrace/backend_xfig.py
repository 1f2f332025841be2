"""Output traced paths as an xfig drawing."""

from __future__ import annotations

import math
from typing import TextIO

from .curve import Point, SegmentTag
from .options import CREATOR, Transform

# page formats known by xfig, with their sizes in PostScript points
_PAGE_FORMATS = (
    ("A9", 105, 149),
    ("A8", 149, 211),
    ("A7", 211, 298),
    ("A6", 298, 421),
    ("A5", 421, 595),
    ("A4", 595, 842),
    ("A3", 842, 1191),
    ("A2", 1191, 1685),
    ("A1", 1685, 2383),
    ("A0", 2383, 3370),
    ("B10", 91, 129),
    ("B9", 129, 182),
    ("B8", 182, 258),
    ("B7", 258, 365),
    ("B6", 365, 516),
    ("B5", 516, 730),
    ("B4", 730, 1032),
    ("B3", 1032, 1460),
    ("B2", 1460, 2064),
    ("B1", 2064, 2920),
    ("B0", 2920, 4127),
    ("Letter", 612, 792),
    ("Legal", 612, 1008),
    ("Tabloid", 792, 1224),
    ("A", 612, 792),
    ("B", 792, 1224),
    ("C", 1224, 1584),
    ("D", 1584, 2448),
    ("E", 2448, 3168),
)

_XFIG_PER_PT = 1200 / 72.0


def paper_format_name(width, height) -> str:
    """Return the smallest xfig page format holding a page of the given size."""
    best = None
    name = "Letter"
    for fname, w, h in _PAGE_FORMATS:
        if w >= width - 1 and h >= height - 1:
            penalty = w + h
            if best is None or penalty < best:
                best = penalty
                name = fname
    return name


def tree_depth(roots) -> int:
    """Return the depth of a path tree; an empty tree has depth 1."""
    return max((tree_depth(p.children) for p in roots), default=0) + 1


def _quantize(p) -> Point:
    return Point(math.floor(p.x + 0.5), math.floor(p.y + 0.5))


def _write_point(stream: TextIO, p, t: Transform) -> None:
    q = _quantize(t.apply(p))
    stream.write(f"{q.x} {q.y}\n")


def _write_curve(stream: TextIO, curve, t: Transform, sign: str, depth: int) -> None:
    npoints = sum(1 if tag == SegmentTag.CORNER else 2 for tag in curve.tag)
    color = 32 if sign == "+" else 33
    stream.write(f"3 1 0 0 0 {color} {depth} 0 20 0.000 0 0 0 {npoints}\n")
    for tag, seg in zip(curve.tag, curve.c):
        if tag == SegmentTag.CORNER:
            _write_point(stream, seg[1], t)
        else:
            _write_point(stream, seg[0], t)
            _write_point(stream, seg[1], t)
    for tag in curve.tag:
        stream.write("0\n" if tag == SegmentTag.CORNER else "1 1\n")


def _write_tree(stream: TextIO, roots, t: Transform, depth: int) -> None:
    for p in roots:
        _write_curve(stream, p.curve, t, p.sign, depth)
        for q in p.children:
            _write_curve(stream, q.curve, t, q.sign, max(depth - 1, 0))
        for q in p.children:
            _write_tree(stream, q.children, t, max(depth - 2, 0))


def write_xfig(stream: TextIO, paths, info, options) -> None:
    """Write ``paths`` (a PathList) as an xfig 3.2 document to ``stream``."""
    tr = info.trans
    k = _XFIG_PER_PT
    origx = tr.orig[0] + info.lmar
    origy = -tr.orig[1] - info.bmar + options.paperheight

    t = Transform(
        orig=(k * origx, k * origy),
        x=(k * tr.x[0], -k * tr.x[1]),
        y=(k * tr.y[0], -k * tr.y[1]),
    )

    x0 = int(k * (origx - tr.orig[0]))
    y0 = int(k * (origy + tr.orig[1]))
    x1 = x0 + int(k * tr.bb[0])
    y1 = y0 - int(k * tr.bb[1])

    formatname = paper_format_name(options.paperwidth, options.paperheight)

    stream.write("#FIG 3.2\n")
    stream.write(f"#created by {CREATOR}\n")
    stream.write("Portrait\n")
    stream.write("Center\n")
    stream.write("Inches\n")
    stream.write(f"{formatname}\n")
    stream.write("100.0\n")
    stream.write("Single\n")
    stream.write("-2\n")
    stream.write("1200 2\n")
    stream.write(f"0 32 #{options.color:06x}\n")
    stream.write(f"0 33 #{options.fillcolor:06x}\n")
    stream.write(f"6 {x0 - 75} {y1 - 35} {x1 + 75} {y0 + 35}\n")

    # xfig only has depths 0..999 available
    depth = tree_depth(paths.roots)
    if depth <= 40:
        depth = 50
    elif depth < 990:
        depth += 10
    else:
        depth = 999

    _write_tree(stream, paths.roots, t, depth)

    stream.write("-6\n")
    stream.flush()