"""Output traced paths as DXF polylines made of circular arcs."""

from __future__ import annotations

import math
from typing import TextIO

from .curve import DPoint, SegmentTag, interval
from .options import CREATOR

_LAYER = "0"


def _sub(v, w) -> DPoint:
    return DPoint(v.x - w.x, v.y - w.y)


def _iprod(v, w) -> float:
    return v.x * w.x + v.y * w.y


def _xprod(v, w) -> float:
    return v.x * w.y - v.y * w.x


def bulge(v, w) -> float:
    """Return the DXF bulge for the angle between ``v`` and ``w``; 0.0 if parallel."""
    vxw = _xprod(v, w)
    if vxw == 0.0:
        return 0.0
    nvw = math.sqrt(_iprod(v, v) * _iprod(w, w))
    return (nvw - _iprod(v, w)) / vxw


class _DxfWriter:
    def __init__(self, stream: TextIO, transform):
        self.stream = stream
        self.transform = transform

    def ship(self, code: int, value: str) -> None:
        self.stream.write(f"{code:3d}\n{value}\n")

    def vertex(self, p, bulge_value: float) -> None:
        self.ship(0, "VERTEX")
        self.ship(8, _LAYER)
        self.ship(10, f"{p.x:f}")
        self.ship(20, f"{p.y:f}")
        self.ship(42, f"{bulge_value:f}")

    def pseudo_quad(self, a, c, b) -> None:
        """Two arcs from a to b, tangent to ac at a and to cb at b; b is not output."""
        v = _sub(a, c)
        w = _sub(b, c)
        v2 = _iprod(v, v)
        w2 = _iprod(w, w)
        vw = _iprod(v, w)
        vxw = _xprod(v, w)
        nvw = math.sqrt(v2 * w2)
        qa = v2 + 2 * vw + w2
        qb = v2 + 2 * nvw + w2
        qc = 4 * nvw
        if vxw == 0 or qa == 0:
            self.vertex(a, 0.0)
            return
        y = (qb - math.sqrt(max(0.0, qb * qb - qa * qc))) / qa
        g = interval(y, c, interval(0.5, a, b))
        self.vertex(a, -bulge(_sub(a, g), v))
        self.vertex(g, -bulge(w, _sub(b, g)))

    def pseudo_bezier(self, a, b, c, d) -> None:
        e = interval(0.75, a, b)
        g = interval(0.75, d, c)
        f = interval(0.5, e, g)
        self.pseudo_quad(a, e, f)
        self.pseudo_quad(f, g, d)

    def path(self, curve) -> None:
        t = self.transform.apply
        self.ship(0, "POLYLINE")
        self.ship(8, _LAYER)
        self.ship(66, "1")
        self.ship(70, "1")
        prev = curve.c[-1] if curve.n else None
        for tag, seg in zip(curve.tag, curve.c):
            if tag == SegmentTag.CORNER:
                self.vertex(t(prev[2]), 0.0)
                self.vertex(t(seg[1]), 0.0)
            elif tag == SegmentTag.CURVETO:
                self.pseudo_bezier(t(prev[2]), t(seg[0]), t(seg[1]), t(seg[2]))
            prev = seg
        self.ship(0, "SEQEND")


def write_dxf(stream: TextIO, paths, info, options) -> None:
    """Write ``paths`` as closed DXF polylines to ``stream``.

    Bezier segments are approximated by up to four circular arcs each.
    """
    tr = info.with_margins()
    writer = _DxfWriter(stream, tr)
    ship = writer.ship

    ship(999, f"DXF data, created by {CREATOR}")
    ship(0, "SECTION")
    ship(2, "HEADER")
    ship(9, "$ACADVER")
    ship(1, "AC1006")
    ship(9, "$EXTMIN")
    ship(10, f"{0.0:f}")
    ship(20, f"{0.0:f}")
    ship(30, f"{0.0:f}")
    ship(9, "$EXTMAX")
    ship(10, f"{tr.bb[0]:f}")
    ship(20, f"{tr.bb[1]:f}")
    ship(30, f"{0.0:f}")
    ship(0, "ENDSEC")

    ship(0, "SECTION")
    ship(2, "ENTITIES")
    for p in paths:
        writer.path(p.curve)
    ship(0, "ENDSEC")
    ship(0, "EOF")
    stream.flush()