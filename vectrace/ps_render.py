"""Drawing traced paths as PostScript code, including debugging renderings."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from .curve import Curve, DPoint, Path, Point, SegmentTag, interval

BLACK = 0x000000
RED = 0xFF0000
GREEN = 0x008000
BLUE = 0x0000FF

# Macros for the size-optimised encoding of curves; "%s" stand for the
# foreground and fill colour commands.
OPTIMACROS = (
    "/D{bind def}def\n"
    "/R{roll}D\n"
    "/K{copy}D\n"
    "/P{pop}D\n"
    "/p{3 2 R add 3 1 R add exch}D\n"
    "/t{dup 4 3 R mul 3 1 R mul}D\n"
    "/a{dup 1 sub neg 4 1 R t 5 2 R t p}D\n"
    "/m{2 K le{exch}if P}D\n"
    "/n{abs exch abs m}D\n"
    "/d{-1 t p n}D\n"
    "/s{[4 2 R] cvx def}D\n"
    "/g{7 K P 4 K P P d 5 1 R d 10 m m div 5 K 12 8 R 5 4 R a 9 4 R 3 2 R a 6 4 R curveto}D\n"
    "/e{4 2 R lineto lineto P P}D\n"
    "/q{3 K P n 10 m div}D\n"
    "/f{x y 7 4 R 5 1 R 4 K p /y s 7 2 R 2 K 9 7 R 7 6 R t p 2 K /x s}D\n"
    "/C{4 1 R q f 7 6 R g}D\n"
    "/V{q f e}D\n"
    "/c{3 1 R .5 f 7 6 R g}D\n"
    "/v{.5 f e}D\n"
    "/j{5 K P p /y s 3 K t 7 5 R p /x s x moveto P}D\n"
    "/i{.5 j}D\n"
    "/I{dup 6 1 R q j 3 2 R}D\n"
    "/z{closepath}D\n"
    "/b{%s z fill}D\n"
    "/w{%s z fill}D\n"
)

# Macros for debugging output; "%f" stands for the unit.
DEBUGMACROS = (
    "/unit { %f } def\n"
    "/box { newpath 0 0 moveto 0 1 lineto 1 1 lineto 1 0 lineto closepath } def\n"
    "/circ { newpath 0 0 1 0 360 arc closepath } def\n"
    "/dot { gsave .15 mul dup scale circ fill grestore } def\n"
    "/sq { gsave unit unit scale -.5 -.5 translate box .02 setlinewidth stroke grestore } def\n"
    "/sq1 { gsave translate sq unit .6 mul dot grestore } def\n"
    "/dot2 { gsave translate unit dot grestore } def\n"
    "/usq { gsave unit unit scale -.5 -.5 rmoveto 0 1 rlineto 1 0 rlineto 0 -1 rlineto closepath .02 setlinewidth stroke grestore } def\n"
    "/dot1 { gsave translate unit .3 mul dup scale circ fill grestore } def\n"
    "/times { /Times-Roman findfont unit .3 mul scalefont setfont } def\n"
    "/times1 { /Times-Roman findfont unit 10 mul scalefont setfont 0 0 0 setrgbcolor } def\n"
    "/times2 { /Times-Roman findfont unit 2 mul scalefont setfont 0 0 0 setrgbcolor } def\n"
)


def ps_color(color) -> str:
    """Return the PostScript command selecting the 0xRRGGBB colour."""
    r = (color & 0xFF0000) >> 16
    g = (color & 0x00FF00) >> 8
    b = color & 0x0000FF
    if r == 0 and g == 0 and b == 0:
        return "0 setgray"
    if r == 255 and g == 255 and b == 255:
        return "1 setgray"
    if r == g == b:
        return f"{r / 255.0:.3f} setgray"
    return f"{r / 255.0:.3f} {g / 255.0:.3f} {b / 255.0:.3f} setrgbcolor"


def _dpoint(p) -> DPoint:
    return DPoint(float(p.x), float(p.y))


def _final(p: Path) -> Curve:
    return p.final_curve if p.final_curve is not None else p.curve


def _with_next(paths: Iterable[Path]):
    """Yield (path, following path or None)."""
    items = list(paths)
    for k, p in enumerate(items):
        yield p, (items[k + 1] if k + 1 < len(items) else None)


class PsRenderer:
    """Emits PostScript drawing code for paths through a shipper.

    All drawing code is shipped in filtered mode. The renderer remembers the
    current point, colour and line width so that it can use relative
    coordinates and skip redundant state changes.
    """

    def __init__(self, shipper, options):
        self.shipper = shipper
        self.options = options
        self.cur = Point(0, 0)
        self.reset()

    def reset(self) -> None:
        """Forget the current colour and line width (at the start of a page)."""
        self._color = -1
        self._width = -1.0

    def ship(self, text: str) -> None:
        self.shipper.ship(text, 1)

    # -- primitives ---------------------------------------------------------

    def _unit(self, p) -> Point:
        u = self.options.unit
        return Point(math.floor(p.x * u + 0.5), math.floor(p.y * u + 0.5))

    def _coords(self, p) -> None:
        self.cur = self._unit(p)
        self.ship(f"{self.cur.x} {self.cur.y} ")

    def _rcoords(self, p) -> None:
        q = self._unit(p)
        self.ship(f"{q.x - self.cur.x} {q.y - self.cur.y} ")
        self.cur = q

    def _moveto(self, p) -> None:
        self._coords(p)
        self.ship("moveto\n")

    def _moveto_offs(self, p, xoffs: float, yoffs: float) -> None:
        self._coords(DPoint(p.x + xoffs, p.y + yoffs))
        self.ship("moveto\n")

    def _lineto(self, p) -> None:
        self._rcoords(p)
        self.ship("rlineto\n")

    def _curveto(self, p1, p2, p3) -> None:
        cx, cy = self.cur.x, self.cur.y
        q1, q2, q3 = self._unit(p1), self._unit(p2), self._unit(p3)
        self.ship(
            f"{q1.x - cx} {q1.y - cy} {q2.x - cx} {q2.y - cy} {q3.x - cx} {q3.y - cy} rcurveto\n"
        )
        self.cur = q3

    def _setcolor(self, color: int) -> None:
        if color == self._color:
            return
        self._color = color
        self.ship(f"{ps_color(color)}\n")

    def _linewidth(self, w: float) -> None:
        if w == self._width:
            return
        self._width = w
        self.ship(f"{w * self.options.unit:f} setlinewidth\n")

    # -- curves -------------------------------------------------------------

    def _path_long(self, curve: Curve) -> None:
        self._moveto(curve.c[-1][2])
        for tag, seg in zip(curve.tag, curve.c):
            if tag == SegmentTag.CORNER:
                self._lineto(seg[1])
                self._lineto(seg[2])
            elif tag == SegmentTag.CURVETO:
                self._curveto(seg[0], seg[1], seg[2])

    def _path_short(self, curve: Curve) -> None:
        m = curve.n
        v: List[Point] = [self._unit(p) for p in curve.vertex]
        bq = [0] * m
        aq = [0] * m
        q: List[Optional[DPoint]] = [None] * m

        # quantize beta
        for i in range(m):
            i1 = (i + 1) % m
            big = max(10, abs(v[i1].x - v[i].x), abs(v[i1].y - v[i].y))
            bq[i] = int(big * curve.beta[i] + 0.5)
            t = bq[i] / big if curve.beta[i] != 0.5 else 0.5
            q[i1] = interval(t, _dpoint(v[i]), _dpoint(v[i1]))

        # quantize alpha
        for i in range(m):
            i1 = (i + 1) % m
            big = max(
                10,
                abs(int(q[i].x - v[i].x)),
                abs(int(q[i].y - v[i].y)),
                abs(int(v[i].x - q[i1].x)),
                abs(int(v[i].y - q[i1].y)),
            )
            if curve.tag[i] == SegmentTag.CURVETO:
                aq[i] = int(big * curve.alpha[i] + 0.5)
                if aq[i] > big:
                    aq[i] -= 1

        self.ship(f"{v[-1].x} {v[-1].y} ")
        self.ship(f"{v[0].x - v[-1].x} {v[0].y - v[-1].y} ")
        if curve.beta[-1] == 0.5:
            self.ship("i\n")
        else:
            self.ship(f"{bq[-1]} I\n")
        for i in range(m):
            if i < m - 1:
                self.ship(f"{v[i + 1].x - v[i].x} {v[i + 1].y - v[i].y} ")
                if curve.beta[i] != 0.5:
                    self.ship(f"{bq[i]} ")
            if curve.tag[i] == SegmentTag.CURVETO:
                op = "c" if curve.beta[i] == 0.5 else "C"
                self.ship(f"{aq[i]} {op}\n")
            else:
                self.ship("v\n" if curve.beta[i] == 0.5 else "V\n")

    def path(self, curve) -> None:
        """Ship the drawing code of one curve, in short form where possible."""
        if not self.options.longcoding and curve.alphacurve:
            self._path_short(curve)
        else:
            self._path_long(curve)

    # -- debugging pieces ---------------------------------------------------

    def _jaggy(self, paths) -> None:
        self.ship(".9 setgray\n")
        for p, nxt in _with_next(paths):
            pt = p.points
            if p.sign == "+":
                cur = prev = pt[-1]
                self._moveto(_dpoint(cur))
                order = pt
                last = pt[-1]
            else:
                cur = prev = pt[0]
                self._moveto(_dpoint(cur))
                order = reversed(pt)
                last = pt[0]
            for point in order:
                if point.x != cur.x and point.y != cur.y:
                    cur = prev
                    self._lineto(_dpoint(cur))
                prev = point
            self._lineto(_dpoint(last))
            if nxt is None or nxt.sign == "+":
                self.ship("fill\n")

    def _polygon(self, curve: Curve, color: int) -> None:
        self._linewidth(0.02)
        self._setcolor(color)
        self._moveto(curve.vertex[-1])
        for vtx in curve.vertex:
            self._lineto(vtx)
        self.ship("stroke\n")

    def _lines_l(self, curve: Curve, color: int) -> None:
        m = curve.n
        for i in range(m):
            i1 = (i + 1) % m
            gamma = curve.alpha0[i1] * 0.75
            p1l = interval(gamma, curve.c[i][2], curve.vertex[i1])
            p4l = interval(gamma, curve.c[i1][2], curve.vertex[i1])
            self._linewidth(0.02)
            self._setcolor(color)
            self._moveto(p1l)
            self._lineto(p4l)
            self.ship("stroke\n")
            self._moveto_offs(curve.vertex[i1], -0.4, -0.4)
            self.ship(f"times ({curve.alpha0[i1]:.2f}) show\n")

    def _outline(self, curve: Curve, width: float, color: int) -> None:
        self._linewidth(width)
        self._setcolor(color)
        self.path(curve)
        self.ship("closepath\n")
        self.ship("stroke\n")

    def _dots(self, curve: Curve) -> None:
        for seg in curve.c:
            self._coords(seg[2])
            self.ship("dot1\n")

    # -- renderings ---------------------------------------------------------

    def _render_normal(self, paths) -> None:
        opts = self.options
        if opts.longcoding:
            self._setcolor(opts.color)
            for p, nxt in _with_next(paths):
                self.path(_final(p))
                self.ship("closepath\n")
                if nxt is None or nxt.sign == "+":
                    self.ship("fill\n")
        else:
            for p, nxt in _with_next(paths):
                self.path(_final(p))
                self.ship("b\n" if nxt is None or nxt.sign == "+" else "z\n")

    def _render_opaque(self, paths) -> None:
        opts = self.options
        for p in paths:
            self.path(_final(p))
            if opts.longcoding:
                self.ship("closepath\n")
                self._setcolor(opts.color if p.sign == "+" else opts.fillcolor)
                self.ship("fill\n")
            else:
                self.ship("b\n" if p.sign == "+" else "w\n")

    def _render_polygons(self, paths) -> None:
        self._jaggy(paths)
        for p in paths:
            pt = [_dpoint(point) for point in p.points]
            self._linewidth(0.02)
            self._setcolor(BLACK)
            for prev, point in zip(pt, pt[1:]):
                self._moveto(prev)
                self._lineto(point)
                self.ship("stroke\n")
                self._coords(point)
                self.ship("sq1\n")
            self._moveto(pt[-1])
            self._lineto(pt[0])
            self.ship("stroke\n")
            self._coords(pt[0])
            self.ship("sq1\n")

            corners = [pt[k] for k in p.po]
            self._linewidth(0.1)
            self._setcolor(BLUE)
            self._moveto(corners[0])
            for corner in corners[1:]:
                self._lineto(corner)
            self._lineto(corners[0])
            self.ship("stroke\n")
            for corner in corners:
                self._coords(corner)
                self.ship("dot2\n")

    def _render_corrected(self, paths) -> None:
        opts = self.options
        self._jaggy(paths)
        for p in paths:
            curve = p.polygon_curve
            self._polygon(curve, BLACK)
            self._lines_l(curve, BLACK)
            for vtx in curve.vertex:
                self._moveto(vtx)
                self.ship("usq\n")
            self._outline(curve, 0.1, BLUE)
            if opts.opticurve and opts.debug == 3:
                self._outline(p.opti_curve, 0.05, RED)
                self._dots(p.opti_curve)

    def _render_debug(self, paths) -> None:
        opts = self.options
        self._jaggy(paths)
        for count, p in enumerate(paths):
            curve = p.polygon_curve
            self._moveto_offs(curve.vertex[0], 0, 5)
            self.ship(f"times1 ({count}) show\n")
            self._polygon(curve, BLACK)
            self._lines_l(curve, BLACK)
            for vtx in curve.vertex:
                self._moveto(vtx)
                self.ship("usq\n")
            for k, vtx in enumerate(curve.vertex):
                self._moveto_offs(vtx, 1, 1)
                self.ship(f"times2 ({k}) show\n")
            self._outline(curve, 0.1, BLUE)
            if opts.opticurve:
                ocurve = p.opti_curve
                self._polygon(ocurve, GREEN)
                self._outline(ocurve, 0.05, RED)
                self._dots(ocurve)
                for seg, beta in zip(ocurve.c, ocurve.beta):
                    self._moveto_offs(seg[2], 0.4, -0.4)
                    self.ship(f"times ({beta:.2f}) show\n")

    def render(self, paths) -> None:
        """Ship the drawing code for all paths, as selected by the debug level."""
        paths = list(paths)
        debug = self.options.debug
        if debug == 0:
            if self.options.opaque:
                self._render_opaque(paths)
            else:
                self._render_normal(paths)
        elif debug == 1:
            self._render_polygons(paths)
        elif debug in (2, 3):
            self._render_corrected(paths)
        else:
            self._render_debug(paths)