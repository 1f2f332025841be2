"""Path and curve data structures produced by tracing a bitmap."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Tuple


class SegmentTag(enum.IntEnum):
    """Kind of a curve segment."""

    CURVETO = 1
    CORNER = 2


@dataclass(frozen=True)
class Point:
    """A point with integer coordinates (a pixel corner)."""

    x: int
    y: int


@dataclass(frozen=True)
class DPoint:
    """A point with floating-point coordinates."""

    x: float
    y: float


Segment = Tuple[DPoint, DPoint, DPoint]


def interval(t, a, b) -> DPoint:
    """Return the point at parameter ``t`` on the line from ``a`` to ``b``."""
    return DPoint(a.x + t * (b.x - a.x), a.y + t * (b.y - a.y))


@dataclass
class Curve:
    """A closed curve made of corner and Bezier segments.

    ``c[i]`` holds three control points. For a corner, ``c[i][0]`` is unused,
    ``c[i][1]`` is the corner vertex and ``c[i][2]`` the end point. For a
    Bezier segment the three points are the two control points and the end
    point; the start point is the end point of the previous segment.

    ``vertex``, ``alpha``, ``alpha0`` and ``beta`` are only meaningful when
    ``alphacurve`` is set.
    """

    tag: list = field(default_factory=list)
    c: list = field(default_factory=list)
    vertex: list = field(default_factory=list)
    alpha: list = field(default_factory=list)
    alpha0: list = field(default_factory=list)
    beta: list = field(default_factory=list)
    alphacurve: bool = False

    @property
    def n(self) -> int:
        """Number of segments."""
        return len(self.tag)


def new_curve(n) -> Curve:
    """Return a curve with ``n`` zero-initialised corner segments."""
    if n < 0:
        raise ValueError(f"curve size must not be negative, got {n}")
    origin = DPoint(0.0, 0.0)
    return Curve(
        tag=[SegmentTag.CORNER] * n,
        c=[(origin, origin, origin) for _ in range(n)],
        vertex=[origin] * n,
        alpha=[0.0] * n,
        alpha0=[0.0] * n,
        beta=[0.0] * n,
    )


@dataclass(eq=False)
class Path:
    """One traced path together with the data of each tracing stage.

    ``sign`` is ``"+"`` for an outer boundary and ``"-"`` for a hole.
    ``curve`` is the final public curve; the other fields are intermediate
    results that debugging output may read. ``children`` holds the paths
    directly inside this one.
    """

    sign: str = "+"
    area: int = 0
    curve: Curve = field(default_factory=Curve)
    points: list = field(default_factory=list)
    lon: list = field(default_factory=list)
    x0: int = 0
    y0: int = 0
    sums: list = field(default_factory=list)
    po: list = field(default_factory=list)
    polygon_curve: Curve = field(default_factory=Curve)
    opti_curve: Curve = field(default_factory=Curve)
    final_curve: Optional[Curve] = None
    children: list = field(default_factory=list)

    @property
    def m(self) -> int:
        """Number of vertices of the optimal polygon."""
        return len(self.po)


class PathList:
    """An ordered collection of paths, with a tree of nesting.

    Iteration yields every path in output order: each positive path is
    followed directly by its holes. ``roots`` holds the outermost paths of
    the nesting tree; when not given, it is every path that is not a child
    of another path in the list.
    """

    def __init__(self, paths: Iterable[Path] = (), roots: Optional[Iterable[Path]] = None):
        self.paths = list(paths)
        if roots is None:
            nested = {id(child) for p in self.paths for child in p.children}
            roots = [p for p in self.paths if id(p) not in nested]
        self.roots = list(roots)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)