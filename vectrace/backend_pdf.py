"""Output traced paths as a PDF document."""

from __future__ import annotations

import math
from typing import BinaryIO, List, Optional

from .compression import DummyShipper, PdfShipper, Shipper
from .curve import Point, SegmentTag
from .options import CREATOR


def pdf_color(color) -> str:
    """Return the PDF fill colour operator selecting the 0xRRGGBB colour."""
    r = (color & 0xFF0000) >> 16
    g = (color & 0x00FF00) >> 8
    b = color & 0x0000FF
    if r == 0 and g == 0 and b == 0:
        return "0 g"
    if r == 255 and g == 255 and b == 255:
        return "1 g"
    if r == g == b:
        return f"{r / 255.0:.3f} g"
    return f"{r / 255.0:.3f} {g / 255.0:.3f} {b / 255.0:.3f} rg"


class PdfWriter:
    """Writes traced paths as a PDF document to a binary stream.

    Call ``start`` once, then ``page`` or ``page_full`` for each page, and
    ``finish`` to write the page tree, cross-reference table and trailer.
    """

    def __init__(self, stream: BinaryIO, options):
        self.stream = stream
        self.options = options
        self.shipper: Shipper = PdfShipper(stream) if options.compress else DummyShipper(stream)
        self.xref: List[Optional[int]] = []
        self.pages: List[int] = []
        self.outcount = 0
        self._streamofs = 0
        self._color = -1

    # -- shipping ---------------------------------------------------------

    def _ship(self, text: str) -> None:
        self.outcount += self.shipper.ship(text, 1)

    def _clear(self, text: str) -> None:
        self.outcount += self.shipper.ship(text, 0)

    def _new_object(self) -> int:
        self.xref.append(self.outcount)
        return len(self.xref)

    # -- drawing ----------------------------------------------------------

    def _unit(self, p) -> Point:
        u = self.options.unit
        return Point(math.floor(p.x * u + 0.5), math.floor(p.y * u + 0.5))

    def _coords(self, p) -> None:
        q = self._unit(p)
        self._ship(f"{q.x} {q.y} ")

    def _setcolor(self, color: int) -> None:
        if color == self._color:
            return
        self._color = color
        self._ship(f"{pdf_color(color)}\n")

    def _path(self, curve) -> None:
        self._coords(curve.c[-1][2])
        self._ship("m\n")
        for tag, seg in zip(curve.tag, curve.c):
            if tag == SegmentTag.CORNER:
                self._coords(seg[1])
                self._ship("l\n")
                self._coords(seg[2])
                self._ship("l\n")
            elif tag == SegmentTag.CURVETO:
                q1, q2, q3 = (self._unit(p) for p in seg)
                self._ship(f"{q1.x} {q1.y} {q2.x} {q2.y} {q3.x} {q3.y} c\n")

    def _render(self, paths) -> None:
        opts = self.options
        items = list(paths)
        if opts.opaque:
            for p in items:
                self._path(p.curve)
                self._ship("h\n")
                self._setcolor(opts.color if p.sign == "+" else opts.fillcolor)
                self._ship("f\n")
            return
        self._setcolor(opts.color)
        for k, p in enumerate(items):
            self._path(p.curve)
            self._ship("h\n")
            nxt = items[k + 1] if k + 1 < len(items) else None
            if nxt is None or nxt.sign == "+":
                self._ship("f\n")

    # -- document structure -----------------------------------------------

    def start(self) -> None:
        """Write the file header, catalog and document information objects."""
        self.xref = []
        self.pages = []
        self.outcount = 0
        self._clear("%PDF-1.3\n")
        self._new_object()
        self._clear("1 0 obj\n<</Type/Catalog/Pages 3 0 R>>\nendobj\n")
        self._new_object()
        self._clear(f"2 0 obj\n<</Creator({CREATOR})>>\nendobj\n")
        # object 3, the page tree, is written by finish()
        self.xref.append(None)
        self.stream.flush()

    def _page_init(self, info, largebbox: bool) -> None:
        opts = self.options
        tr = info.trans
        origx = tr.orig[0] + info.lmar
        origy = tr.orig[1] + info.bmar
        dxx = tr.x[0] / opts.unit
        dxy = tr.x[1] / opts.unit
        dyx = tr.y[0] / opts.unit
        dyy = tr.y[1] / opts.unit
        pagew = tr.bb[0] + info.lmar + info.rmar
        pageh = tr.bb[1] + info.tmar + info.bmar

        self._color = -1

        num = self._new_object()
        self._clear(f"{num} 0 obj\n")
        self._clear("<</Type/Page/Parent 3 0 R/Resources<</ProcSet[/PDF]>>")
        if largebbox:
            self._clear(f"/MediaBox[0 0 {opts.paperwidth} {opts.paperheight}]")
        else:
            self._clear(f"/MediaBox[0 0 {pagew:f} {pageh:f}]")
        self._clear(f"/Contents {num + 1} 0 R>>\n")
        self._clear("endobj\n")
        self.pages.append(num)

        num = self._new_object()
        self._clear(f"{num} 0 obj\n")
        if opts.compress:
            self._clear(f"<</Filter/FlateDecode/Length {num + 1} 0 R>>\n")
        else:
            self._clear(f"<</Length {num + 1} 0 R>>\n")
        self._clear("stream\n")
        self._streamofs = self.outcount
        self._ship(f"{dxx:f} {dxy:f} {dyx:f} {dyy:f} {origx:f} {origy:f} cm\n")

    def _page_term(self) -> None:
        self._clear("")
        streamlen = self.outcount - self._streamofs
        self._clear("endstream\nendobj\n")
        num = self._new_object()
        self._clear(f"{num} 0 obj\n{streamlen}\nendobj\n")

    def _page(self, paths, info, largebbox: bool) -> None:
        self._page_init(info, largebbox)
        self._render(paths)
        self._page_term()
        self.stream.flush()

    def page(self, paths, info) -> None:
        """Write a page sized to the image and its margins."""
        self._page(paths, info, False)

    def page_full(self, paths, info) -> None:
        """Write a page with the media box set to the paper size."""
        self._page(paths, info, True)

    def finish(self) -> None:
        """Write the page tree, cross-reference table and trailer."""
        self.xref[2] = self.outcount
        self._clear(f"3 0 obj\n<</Type/Pages/Count {len(self.pages)}/Kids[\n")
        for num in self.pages:
            self._clear(f"{num} 0 R\n")
        self._clear("]>>\nendobj\n")

        startxref = self.outcount
        self._clear(f"xref\n0 {len(self.xref) + 1}\n")
        self._clear("0000000000 65535 f \n")
        for offset in self.xref:
            self._clear(f"{offset:010d} 00000 n \n")
        self._clear(f"trailer\n<</Size {len(self.xref) + 1}/Root 1 0 R/Info 2 0 R>>\n")
        self._clear(f"startxref\n{startxref}\n%%EOF\n")
        self.stream.flush()