"""Output traced paths as an SVG document."""

from __future__ import annotations

import dataclasses
import math
from typing import TextIO

from .curve import Point, SegmentTag
from .options import CREATOR

_MAX_COLUMN = 75


class _PathDataWriter:
    """Writes SVG path data with relative coordinates, wrapping long lines."""

    def __init__(self, stream: TextIO, unit: float):
        self.stream = stream
        self.unit = unit
        self.cur = Point(0, 0)
        self.lastop = ""
        self.column = 0
        self.newline = True

    def begin(self, prefix: str) -> None:
        self.stream.write(prefix)
        self.column = len(prefix)
        self.newline = True
        self.lastop = ""

    def quantize(self, p) -> Point:
        return Point(math.floor(p.x * self.unit + 0.5), math.floor(p.y * self.unit + 0.5))

    def token(self, token: str) -> None:
        if not self.newline and self.column + len(token) + 1 > _MAX_COLUMN:
            self.stream.write("\n")
            self.column = 0
            self.newline = True
        elif not self.newline:
            self.stream.write(" ")
            self.column += 1
        self.stream.write(token)
        self.column += len(token)
        self.newline = False

    def ship(self, text: str) -> None:
        for tok in text.split(" "):
            self.token(tok)

    def close(self) -> None:
        self.newline = True
        self.token("z")

    def moveto(self, p) -> None:
        self.cur = self.quantize(p)
        self.ship(f"M{self.cur.x} {self.cur.y}")
        self.lastop = "M"

    def rmoveto(self, p) -> None:
        q = self.quantize(p)
        self.ship(f"m{q.x - self.cur.x} {q.y - self.cur.y}")
        self.cur = q
        self.lastop = "m"

    def lineto(self, p) -> None:
        q = self.quantize(p)
        op = "" if self.lastop == "l" else "l"
        self.ship(f"{op}{q.x - self.cur.x} {q.y - self.cur.y}")
        self.cur = q
        self.lastop = "l"

    def curveto(self, p1, p2, p3) -> None:
        cx, cy = self.cur.x, self.cur.y
        q1, q2, q3 = self.quantize(p1), self.quantize(p2), self.quantize(p3)
        op = "" if self.lastop == "c" else "c"
        self.ship(
            f"{op}{q1.x - cx} {q1.y - cy} {q2.x - cx} {q2.y - cy} {q3.x - cx} {q3.y - cy}"
        )
        self.cur = q3
        self.lastop = "c"

    def curve(self, curve, absolute: bool) -> None:
        start = curve.c[-1][2]
        if absolute:
            self.moveto(start)
        else:
            self.rmoveto(start)
        for tag, seg in zip(curve.tag, curve.c):
            if tag == SegmentTag.CORNER:
                self.lineto(seg[1])
                self.lineto(seg[2])
            elif tag == SegmentTag.CURVETO:
                self.curveto(seg[0], seg[1], seg[2])
        self.close()

    def jaggy(self, pt, absolute: bool) -> None:
        """Outline the raw pixel path; relative paths run in reverse."""
        if absolute:
            cur = prev = pt[-1]
            self.moveto(cur)
            order = pt
            last = pt[-1]
        else:
            cur = prev = pt[0]
            self.rmoveto(cur)
            order = reversed(pt)
            last = pt[0]
        for p in order:
            if p.x != cur.x and p.y != cur.y:
                cur = prev
                self.lineto(cur)
            prev = p
        self.lineto(last)
        self.close()


class _SvgWriter:
    def __init__(self, stream: TextIO, options):
        self.stream = stream
        self.options = options
        self.data = _PathDataWriter(stream, options.unit)

    def shape(self, path, absolute: bool) -> None:
        if self.options.debug == 1:
            self.data.jaggy(path.points, absolute)
        else:
            self.data.curve(path.curve, absolute)

    def opaque(self, tree) -> None:
        opts = self.options
        write = self.stream.write
        for p in tree:
            if opts.grouping == 2:
                write("<g>\n<g>\n")
            self.data.begin(f'<path fill="#{opts.color:06x}" stroke="none" d="')
            self.shape(p, True)
            write('"/>\n')
            for q in p.children:
                self.data.begin(f'<path fill="#{opts.fillcolor:06x}" stroke="none" d="')
                self.shape(q, True)
                write('"/>\n')
            if opts.grouping == 2:
                write("</g>\n")
            for q in p.children:
                self.opaque(q.children)
            if opts.grouping == 2:
                write("</g>\n")

    def transparent_tree(self, tree) -> None:
        grouping = self.options.grouping
        write = self.stream.write
        for p in tree:
            if grouping == 2:
                write("<g>\n")
            if grouping != 0:
                self.data.begin('<path d="')
            self.shape(p, True)
            for q in p.children:
                self.shape(q, False)
            if grouping != 0:
                write('"/>\n')
            for q in p.children:
                self.transparent_tree(q.children)
            if grouping == 2:
                write("</g>\n")

    def transparent(self, tree) -> None:
        if self.options.grouping == 0:
            self.data.begin('<path d="')
        self.transparent_tree(tree)
        if self.options.grouping == 0:
            self.stream.write('"/>\n')


def write_svg(stream: TextIO, paths, info, options) -> None:
    """Write ``paths`` (a PathList) as an SVG document to ``stream``."""
    tr = info.trans
    bboxx = tr.bb[0] + info.lmar + info.rmar
    bboxy = tr.bb[1] + info.tmar + info.bmar
    origx = tr.orig[0] + info.lmar
    origy = bboxy - tr.orig[1] - info.bmar
    scalex = tr.scalex / options.unit
    scaley = -tr.scaley / options.unit

    write = stream.write
    write('<?xml version="1.0" standalone="no"?>\n')
    write('<svg version="1.0" xmlns="http://www.w3.org/2000/svg"\n')
    write(f' width="{bboxx:f}pt" height="{bboxy:f}pt" viewBox="0 0 {bboxx:f} {bboxy:f}"\n')
    write(' preserveAspectRatio="xMidYMid meet">\n')
    write("<metadata>\n")
    write(f"Created by {CREATOR}\n")
    write("</metadata>\n")

    write('<g transform="')
    if origx != 0 or origy != 0:
        write(f"translate({origx:f},{origy:f}) ")
    if options.angle != 0:
        write(f"rotate({-options.angle:.2f}) ")
    write(f"scale({scalex:f},{scaley:f})")
    write('"\n')
    write(f'fill="#{options.color:06x}" stroke="none">\n')

    writer = _SvgWriter(stream, options)
    if options.opaque:
        writer.opaque(paths.roots)
    else:
        writer.transparent(paths.roots)

    write("</g>\n")
    write("</svg>\n")
    stream.flush()


def write_gimp(stream: TextIO, paths, info, options) -> None:
    """Write SVG suited for import as a Gimp path: never opaque, one flat path."""
    flat = dataclasses.replace(options, opaque=False, grouping=0)
    write_svg(stream, paths, info, flat)