"""Output traced paths as Encapsulated PostScript or multi-page PostScript."""

from __future__ import annotations

import math
from typing import BinaryIO

from .compression import A85Shipper, DummyShipper, FlateShipper, Shipper
from .options import CREATOR
from .ps_render import DEBUGMACROS, OPTIMACROS, PsRenderer, ps_color


def _make_shipper(stream: BinaryIO, options) -> Shipper:
    if options.compress and options.pslevel == 3:
        return FlateShipper(stream)
    if options.compress and options.pslevel == 2:
        # Level 2 output is ASCII85-encoded, which every level 2 interpreter reads.
        return A85Shipper(stream)
    return DummyShipper(stream)


class PostScriptWriter:
    """Writes traced paths as PostScript to a binary stream.

    ``write_eps`` produces a single-page EPS file. For multi-page PostScript,
    call ``start`` once, ``page`` for each page and ``finish`` at the end.
    """

    def __init__(self, stream: BinaryIO, options):
        self.stream = stream
        self.options = options
        self.shipper = _make_shipper(stream, options)
        self.renderer = PsRenderer(self.shipper, options)
        self.pages = 0

    # -- shipping ---------------------------------------------------------

    def _ship(self, text: str) -> None:
        self.shipper.ship(text, 1)

    def _comment(self, text: str) -> None:
        self.shipper.ship(text, 0)

    def _macros(self) -> None:
        opts = self.options
        if not opts.longcoding:
            self._ship(OPTIMACROS % (ps_color(opts.color), ps_color(opts.fillcolor)))
        if opts.debug:
            self._ship(DEBUGMACROS % opts.unit)

    def _coordinate_system(self, info) -> None:
        opts = self.options
        tr = info.trans
        origx = tr.orig[0] + info.lmar
        origy = tr.orig[1] + info.bmar
        if origx != 0 or origy != 0:
            self._ship(f"{origx:f} {origy:f} translate\n")
        if opts.angle != 0:
            self._ship(f"{opts.angle:.2f} rotate\n")
        self._ship(f"{tr.scalex / opts.unit:f} {tr.scaley / opts.unit:f} scale\n")

    # -- EPS --------------------------------------------------------------

    def write_eps(self, paths, info) -> None:
        """Write ``paths`` as a complete single-page EPS document."""
        opts = self.options
        tr = info.trans
        width = tr.bb[0] + info.lmar + info.rmar
        height = tr.bb[1] + info.tmar + info.bmar

        self.renderer.reset()
        self._comment("%!PS-Adobe-3.0 EPSF-3.0\n")
        self._comment(f"%%Creator: {CREATOR}\n")
        self._comment(f"%%LanguageLevel: {opts.pslevel}\n")
        self._comment(
            f"%%BoundingBox: 0 0 {float(math.ceil(width)):.0f} {float(math.ceil(height)):.0f}\n"
        )
        self._comment(f"%%HiResBoundingBox: 0 0 {width:f} {height:f}\n")
        self._comment("%%Pages: 1\n")
        self._comment("%%EndComments\n")
        self._comment("%%Page: 1 1\n")
        self._ship("save\n")
        self._macros()
        self._coordinate_system(info)

        self.renderer.render(paths)

        self._ship("restore\n")
        self._comment("%%EOF\n")
        self.stream.flush()

    # -- multi-page PostScript -------------------------------------------

    def start(self) -> None:
        """Write the document header of a multi-page PostScript file."""
        opts = self.options
        self._comment("%!PS-Adobe-3.0\n")
        self._comment(f"%%Creator: {CREATOR}\n")
        self._comment(f"%%LanguageLevel: {opts.pslevel}\n")
        self._comment(f"%%BoundingBox: 0 0 {opts.paperwidth} {opts.paperheight}\n")
        self._comment("%%Pages: (atend)\n")
        self._comment("%%EndComments\n")
        if not opts.longcoding or opts.debug:
            self._comment("%%BeginSetup\n")
            self._macros()
            self._comment("%%EndSetup\n")
        self.pages = 0
        self.stream.flush()

    def page(self, paths, info) -> None:
        """Write one page holding ``paths``."""
        self.pages += 1
        self.renderer.reset()
        self._comment(f"%%Page: {self.pages} {self.pages}\n")
        self._ship("save\n")
        self._coordinate_system(info)

        self.renderer.render(paths)

        self._ship("restore\n")
        self._ship("showpage\n")
        self._comment("")
        self.stream.flush()

    def finish(self) -> None:
        """Write the document trailer with the page count."""
        self._comment("%%Trailer\n")
        self._comment(f"%%Pages: {self.pages}\n")
        self._comment("%%EOF\n")
        self.stream.flush()