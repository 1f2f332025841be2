import pytest

from vectrace.bbox import Interval, bezier, path_limits
from vectrace.curve import Curve, DPoint, Path, SegmentTag


def _square(x0, y0, x1, y1):
    corners = [DPoint(x0, y0), DPoint(x1, y0), DPoint(x1, y1), DPoint(x0, y1)]
    segs = []
    for i, v in enumerate(corners):
        nxt = corners[(i + 1) % 4]
        mid = DPoint((v.x + nxt.x) / 2, (v.y + nxt.y) / 2)
        segs.append((DPoint(0, 0), v, mid))
    return Path(curve=Curve(tag=[SegmentTag.CORNER] * 4, c=segs))


def _bump():
    # a single Bezier segment from (0,0) back to (0,0) bulging along x
    end = DPoint(0.0, 0.0)
    return Path(
        curve=Curve(
            tag=[SegmentTag.CURVETO],
            c=[(DPoint(4.0, 1.0), DPoint(4.0, -1.0), end)],
        )
    )


def test_interval_extend_and_contains():
    iv = Interval(1.0, 1.0)
    iv.extend(3.0)
    iv.extend(-2.0)
    assert (iv.min, iv.max) == (-2.0, 3.0)
    assert 0.0 in iv
    assert 4.0 not in iv


def test_interval_extend_inside_keeps_bounds():
    iv = Interval(0.0, 10.0)
    iv.extend(5.0)
    assert (iv.min, iv.max) == (0.0, 10.0)


@pytest.mark.parametrize("coeffs", [(0, 1, 2, 3), (5, -1, 7, 2), (1.5, 1.5, 1.5, 1.5)])
def test_bezier_endpoints(coeffs):
    assert bezier(0, *coeffs) == pytest.approx(coeffs[0])
    assert bezier(1, *coeffs) == pytest.approx(coeffs[3])


def test_bezier_constant():
    assert bezier(0.37, 2.0, 2.0, 2.0, 2.0) == pytest.approx(2.0)


def test_path_limits_empty():
    iv = path_limits([], DPoint(1.0, 0.0))
    assert (iv.min, iv.max) == (0, 0)


def test_path_limits_square_x_and_y():
    paths = [_square(0, 0, 10, 20)]
    ix = path_limits(paths, DPoint(1.0, 0.0))
    iy = path_limits(paths, DPoint(0.0, 1.0))
    assert (ix.min, ix.max) == (0, 10)
    assert (iy.min, iy.max) == (0, 20)


def test_path_limits_multiple_paths():
    paths = [_square(0, 0, 10, 10), _square(-5, 3, 2, 30)]
    iv = path_limits(paths, DPoint(1.0, 0.0))
    assert (iv.min, iv.max) == (-5, 10)


def test_path_limits_negative_direction_mirrors():
    paths = [_square(1, 2, 7, 9)]
    pos = path_limits(paths, DPoint(1.0, 0.0))
    neg = path_limits(paths, DPoint(-1.0, 0.0))
    assert neg.min == pytest.approx(-pos.max)
    assert neg.max == pytest.approx(-pos.min)


def test_path_limits_bezier_contains_samples():
    iv = path_limits([_bump()], DPoint(0.0, 1.0))
    for k in range(11):
        t = k / 10
        assert bezier(t, 0.0, 1.0, -1.0, 0.0) in Interval(iv.min - 1e-9, iv.max + 1e-9)