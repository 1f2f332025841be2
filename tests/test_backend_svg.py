import io
import xml.etree.ElementTree as ET

from vectrace.backend_svg import write_gimp, write_svg
from vectrace.curve import Curve, DPoint, Path, PathList, Point, SegmentTag
from vectrace.options import ImageInfo, RenderOptions, Transform

O = DPoint(0.0, 0.0)


def square(x0, y0, size):
    a = DPoint(x0, y0)
    b = DPoint(x0 + size, y0)
    c = DPoint(x0 + size, y0 + size)
    d = DPoint(x0, y0 + size)
    return Curve(tag=[SegmentTag.CORNER, SegmentTag.CORNER], c=[(O, b, c), (O, d, a)])


def info(size=2.0):
    return ImageInfo(trans=Transform(bb=(size, size)))


def render(paths, options=None, image=None, writer=write_svg):
    out = io.StringIO()
    writer(out, paths, image or info(), options or RenderOptions())
    return out.getvalue()


def path_elements(text):
    root = ET.fromstring(text)
    return [e for e in root.iter() if e.tag.endswith("path")]


def group_elements(text):
    root = ET.fromstring(text)
    return [e for e in root.iter() if e.tag.endswith("}g")]


def nested():
    outer = Path(sign="+", curve=square(0, 0, 2))
    hole = Path(sign="-", curve=square(0.5, 0.5, 1))
    outer.children = [hole]
    return PathList([outer, hole])


def test_single_square_path_data():
    text = render(PathList([Path(curve=square(0, 0, 1))]))
    assert '<path d="M0 0 l10 0 0 10 -10 0 0 -10z"/>\n' in text


def test_document_structure():
    text = render(nested())
    assert text.startswith("<?xml")
    assert text.endswith("</g>\n</svg>\n")
    root = ET.fromstring(text)
    assert root.tag.endswith("svg")
    assert root.get("width") == "2.000000pt"


def test_hole_goes_into_same_element_relatively():
    elems = path_elements(render(nested()))
    assert len(elems) == 1
    d = elems[0].get("d")
    assert d.count("z") == 2
    assert " m" in d


def test_opaque_uses_fill_and_fillcolor():
    opts = RenderOptions(opaque=True)
    elems = path_elements(render(nested(), opts))
    assert [e.get("fill") for e in elems] == [f"#{opts.color:06x}", f"#{opts.fillcolor:06x}"]


def test_flat_grouping_gives_one_element():
    paths = PathList([Path(curve=square(0, 0, 1)), Path(curve=square(3, 3, 1))])
    assert len(path_elements(render(paths, RenderOptions(grouping=0)))) == 1
    assert len(path_elements(render(paths, RenderOptions(grouping=1)))) == 2


def test_hierarchical_grouping_adds_groups():
    paths = PathList([Path(curve=square(0, 0, 1)), Path(curve=square(3, 3, 1))])
    flat = group_elements(render(paths, RenderOptions(grouping=1)))
    tree = group_elements(render(paths, RenderOptions(grouping=2)))
    assert len(tree) == len(flat) + len(paths)


def test_gimp_ignores_opaque_and_keeps_options():
    opts = RenderOptions(opaque=True, grouping=2)
    text = render(nested(), opts, writer=write_gimp)
    elems = path_elements(text)
    assert len(elems) == 1
    assert elems[0].get("fill") is None
    assert opts.opaque is True and opts.grouping == 2


def test_transform_attributes():
    text = render(nested(), RenderOptions(angle=90))
    assert "scale(0.100000,-0.100000)" in text
    assert "rotate(-90.00)" in text
    assert "translate(0.000000,2.000000)" in text


def test_no_translate_when_origin_is_zero():
    text = render(nested(), image=ImageInfo())
    assert "translate(" not in text
    assert "rotate(" not in text


def test_long_paths_wrap():
    n = 60
    segs = [(O, DPoint(i * 100.0, 0.0), DPoint(i * 100.0, 500.0)) for i in range(n)]
    curve = Curve(tag=[SegmentTag.CORNER] * n, c=segs)
    text = render(PathList([Path(curve=curve)]))
    start = text.index('<path d="')
    body = text[start:text.index('"/>', start) + 3].split("\n")
    assert len(body) > 1
    assert all(len(line) <= 79 for line in body)


def test_curveto_operator_not_repeated():
    segs = [
        (DPoint(1, 0), DPoint(1, 1), DPoint(0, 1)),
        (DPoint(-1, 1), DPoint(-1, 0), DPoint(0, 0)),
    ]
    curve = Curve(tag=[SegmentTag.CURVETO] * 2, c=segs)
    d = path_elements(render(PathList([Path(curve=curve)])))[0].get("d")
    assert d.count("c") == 1
    assert d.startswith("M0 0 c")


def test_debug_jaggy_path_closes():
    pts = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]
    p = Path(points=pts, curve=square(0, 0, 1))
    d = path_elements(render(PathList([p]), RenderOptions(debug=1)))[0].get("d")
    tokens = d.replace("z", "").split()
    assert tokens[0].startswith("M")
    moves = [int(t.lstrip("l")) for t in tokens[2:]]
    assert sum(moves[0::2]) == 0
    assert sum(moves[1::2]) == 0
    assert len(moves) > 0