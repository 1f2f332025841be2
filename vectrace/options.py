"""Rendering options, coordinate transforms and page geometry for backends."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Tuple

from .curve import DPoint

CREATOR = "vectrace"


@dataclass
class RenderOptions:
    """Settings shared by the output backends.

    Colours are 0xRRGGBB integers. ``unit`` is the quantisation factor for
    coordinates, ``grouping`` is 0 (flat), 1 (per path) or 2 (hierarchical),
    and ``debug`` selects a debugging rendering when non-zero.
    """

    unit: float = 10.0
    color: int = 0x000000
    fillcolor: int = 0xFFFFFF
    opaque: bool = False
    grouping: int = 1
    debug: int = 0
    longcoding: bool = False
    compress: bool = True
    pslevel: int = 3
    paperwidth: int = 612
    paperheight: int = 792
    angle: float = 0.0
    gamma: float = 2.2
    opticurve: bool = True


@dataclass(frozen=True)
class Transform:
    """An affine map from image coordinates to output coordinates.

    ``bb`` is the size of the output bounding box, ``orig`` the image of the
    origin, and ``x`` and ``y`` the images of the unit vectors.
    """

    bb: Tuple[float, float] = (0.0, 0.0)
    orig: Tuple[float, float] = (0.0, 0.0)
    x: Tuple[float, float] = (1.0, 0.0)
    y: Tuple[float, float] = (0.0, 1.0)
    scalex: float = 1.0
    scaley: float = 1.0

    def apply(self, p) -> DPoint:
        """Map the point ``p``."""
        return DPoint(
            self.orig[0] + p.x * self.x[0] + p.y * self.y[0],
            self.orig[1] + p.x * self.x[1] + p.y * self.y[1],
        )


@dataclass
class ImageInfo:
    """Geometry of one output page: image size, margins and transform."""

    width: float = 0.0
    height: float = 0.0
    lmar: float = 0.0
    rmar: float = 0.0
    tmar: float = 0.0
    bmar: float = 0.0
    trans: Transform = field(default_factory=Transform)

    def with_margins(self) -> Transform:
        """Return the transform with the bounding box grown by the margins."""
        t = self.trans
        return dataclasses.replace(
            t,
            bb=(t.bb[0] + self.lmar + self.rmar, t.bb[1] + self.tmar + self.bmar),
            orig=(t.orig[0] + self.lmar, t.orig[1] + self.bmar),
        )