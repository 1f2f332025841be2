"""Output traced paths as a GeoJSON feature collection."""

from __future__ import annotations

import math
from typing import TextIO

from .bbox import bezier
from .curve import DPoint, SegmentTag
from .options import Transform

_CURVE_STEPS = 8


def number_format(transform: Transform, unit) -> str:
    """Return a format spec precise enough for the given scaling and unit."""
    s = min(abs(transform.scalex), abs(transform.scaley))
    if unit != 0 and s != 0:
        d = math.ceil(math.log(unit / s) / math.log(10))
    else:
        d = 0
    if d <= 0:
        return ".0f"
    if d <= 20:
        return f".{d}f"
    return "e"


class _GeoJsonWriter:
    def __init__(self, stream: TextIO, transform: Transform, fmt: str):
        self.stream = stream
        self.transform = transform
        self.fmt = fmt
        self.cur = DPoint(0.0, 0.0)

    def coord(self, x: float, y: float) -> str:
        return f"[{format(x, self.fmt)}, {format(y, self.fmt)}]"

    def moveto(self, p) -> None:
        q = self.transform.apply(p)
        self.stream.write(self.coord(q.x, q.y))
        self.cur = q

    def lineto(self, p) -> None:
        q = self.transform.apply(p)
        self.stream.write(", " + self.coord(q.x, q.y))
        self.cur = q

    def curveto(self, p1, p2, p3) -> None:
        q1, q2, q3 = (self.transform.apply(p) for p in (p1, p2, p3))
        step = 1.0 / _CURVE_STEPS
        t = step
        for _ in range(_CURVE_STEPS):
            x = bezier(t, self.cur.x, q1.x, q2.x, q3.x)
            y = bezier(t, self.cur.y, q1.y, q2.y, q3.y)
            self.stream.write(", " + self.coord(x, y))
            t += step
        self.cur = q3

    def ring(self, curve) -> None:
        self.stream.write("      [")
        self.moveto(curve.c[-1][2])
        for tag, seg in zip(curve.tag, curve.c):
            if tag == SegmentTag.CORNER:
                self.lineto(seg[1])
                self.lineto(seg[2])
            elif tag == SegmentTag.CURVETO:
                self.curveto(seg[0], seg[1], seg[2])
        self.stream.write(" ]")

    def polygons(self, tree, first: bool) -> None:
        write = self.stream.write
        for p in tree:
            if not first:
                write(",\n")
            write('{ "type": "Feature",\n')
            write('  "properties": { },\n')
            write('  "geometry": {\n')
            write('    "type": "Polygon",\n')
            write('    "coordinates": [\n')
            self.ring(p.curve)
            for q in p.children:
                write(",\n")
                self.ring(q.curve)
            write("    ]\n")
            write("  }\n")
            write("}")
            for q in p.children:
                self.polygons(q.children, False)
            first = False


def write_geojson(stream: TextIO, paths, info, options) -> None:
    """Write ``paths`` (a PathList) as GeoJSON polygons to ``stream``.

    Each positive path becomes a polygon whose holes are its children;
    Bezier segments are approximated by eight straight pieces.
    """
    writer = _GeoJsonWriter(stream, info.with_margins(), number_format(info.trans, options.unit))
    stream.write("{\n")
    stream.write('"type": "FeatureCollection",\n')
    stream.write('"features": [\n')
    writer.polygons(paths.roots, True)
    stream.write("\n]\n")
    stream.write("}\n")
    stream.flush()