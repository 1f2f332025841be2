import io

import pytest

from vectrace.backend_dxf import bulge, write_dxf
from vectrace.curve import Curve, DPoint, Path, PathList, SegmentTag
from vectrace.options import ImageInfo, RenderOptions, Transform

O = DPoint(0.0, 0.0)


def square_curve():
    pts = [DPoint(0, 0), DPoint(4, 0), DPoint(4, 4), DPoint(0, 4)]
    c = [(O, pts[k], pts[(k + 1) % 4]) for k in range(4)]
    return Curve(tag=[SegmentTag.CORNER] * 4, c=c)


def round_curve():
    c = [
        (DPoint(0.55, -1), DPoint(1, -0.55), DPoint(1, 0)),
        (DPoint(1, 0.55), DPoint(0.55, 1), DPoint(0, 1)),
        (DPoint(-0.55, 1), DPoint(-1, 0.55), DPoint(-1, 0)),
        (DPoint(-1, -0.55), DPoint(-0.55, -1), DPoint(0, -1)),
    ]
    return Curve(tag=[SegmentTag.CURVETO] * 4, c=c)


def dxf(curves):
    buf = io.StringIO()
    info = ImageInfo(trans=Transform(bb=(10.0, 10.0)))
    paths = PathList([Path(curve=c) for c in curves])
    write_dxf(buf, paths, info, RenderOptions())
    lines = buf.getvalue().split("\n")[:-1]
    return list(zip(lines[0::2], lines[1::2]))


def test_bulge_parallel_is_zero():
    assert bulge(DPoint(1, 0), DPoint(2, 0)) == 0.0


def test_bulge_right_angle():
    assert bulge(DPoint(1, 0), DPoint(0, 1)) == pytest.approx(1.0)
    assert bulge(DPoint(0, 1), DPoint(1, 0)) == pytest.approx(-1.0)


def test_document_frame():
    pairs = dxf([])
    assert pairs[0][0] == "999"
    assert pairs[-1] == ("  0", "EOF")
    assert ("  9", "$EXTMAX") in pairs
    k = pairs.index(("  9", "$EXTMAX"))
    assert pairs[k + 1] == (" 10", "10.000000")
    assert pairs.count(("  0", "SECTION")) == 2
    assert pairs.count(("  0", "ENDSEC")) == 2


def test_corner_path_vertices():
    pairs = dxf([square_curve()])
    assert pairs.count(("  0", "POLYLINE")) == 1
    assert pairs.count(("  0", "SEQEND")) == 1
    assert pairs.count(("  0", "VERTEX")) == 8
    bulges = [v for code, v in pairs if code == " 42"]
    assert bulges == ["0.000000"] * 8


def test_curve_path_uses_arcs():
    pairs = dxf([round_curve()])
    assert pairs.count(("  0", "VERTEX")) == 16
    bulges = [float(v) for code, v in pairs if code == " 42"]
    assert any(b != 0 for b in bulges)


def test_collinear_curve_is_degenerate():
    c = [
        (DPoint(1, 0), DPoint(2, 0), DPoint(3, 0)),
        (DPoint(2, 0), DPoint(1, 0), DPoint(0, 0)),
    ]
    pairs = dxf([Curve(tag=[SegmentTag.CURVETO] * 2, c=c)])
    bulges = [v for code, v in pairs if code == " 42"]
    assert len(bulges) == 4
    assert all(float(b) == 0.0 for b in bulges)