# vectrace

`vectrace` reads black-and-white bitmaps and finds the borders between
their black and white regions. It also writes closed curves, built from
straight corners and cubic Bezier segments, in several vector formats. It is
pure Python and uses only the standard library.

## Reading a bitmap

`vectrace.bmp_io.read_bitmap` reads two kinds of file and tells them apart
by the magic number:

- PBM, PGM and PPM, in ASCII (P1 to P3) and raw (P4 to P6) form
- BMP: 1 to 8 bit palettes, 24 and 32 bit colour, 32 bit bitfields and
  RLE4/RLE8, in the Windows format and both OS/2 formats

`vectrace.bitmap_io.read_pnm` reads only the PNM family, and
`vectrace.bmp_io.read_bmp` reads only BMP.

Grey and colour pixels brighter than `threshold` become white and all others
become black. `threshold` is a fraction of the maximum value.

```python
from vectrace.bmp_io import read_bitmap

with open("drawing.pbm", "rb") as stream:
    result = read_bitmap(stream, 0.5)
bitmap = result.bitmap          # a vectrace.bitmap_io.Bitmap
print(result.complete)          # False if the pixel data was cut short
```

A `Bitmap` is stored bottom to top, so row 0 is the lowest scan line. It
offers these methods:

- `get` and `put` read and set single pixels.
- `flip`, `resize`, `copy` and `clear` change or copy the whole image.

Reads outside the image return white, and writes outside it are ignored.

When the input cannot be read, an exception is raised:

- `EmptyInputError` if the input holds only whitespace and comments
- `UnknownFormatError` if the input does not start with a known magic number
- `BitmapReadError` if the file is malformed

All three exceptions live in `vectrace.bitmap_io`.

If the pixel data ends early, no exception is raised. The call returns the
scan lines that were read, with `complete` set to `False`.

Two functions write a bitmap out:

- `vectrace.bitmap_io.write_pbm` writes raw PBM (P4).
- `vectrace.bitmap_io.format_bitmap_text` returns a coarse text picture of
  the image, at most 79 columns wide.

## Finding boundary paths

`vectrace.decompose.bitmap_to_pathlist(bitmap, params, progress)` returns a
`vectrace.curve.PathList` of `Path` objects. Each path holds:

- the pixel-corner points of one border, in `points`
- its `sign`: `"+"` for an outer boundary and `"-"` for a hole
- its enclosed `area`
- its `children`, the paths directly inside it

Two settings in `DecomposeParams` control the result:

- `turdsize` drops paths that enclose at most that many pixels.
- `turnpolicy` is a `TurnPolicy` that settles ambiguous diagonal turns.

Iterating a `PathList` yields each positive path followed directly by its
holes. `PathList.roots` holds the outermost paths.

## Writing curves

The backends write the `curve` of each `Path`, which is a
`vectrace.curve.Curve`. Each segment of a curve is tagged
`SegmentTag.CORNER` or `SegmentTag.CURVETO`. Page geometry is described by
`vectrace.options.ImageInfo` and `Transform`. Colours, coordinate unit,
opacity, grouping, compression and the other settings are in
`vectrace.options.RenderOptions`.

| Module | What it writes |
| --- | --- |
| `vectrace.backend_svg` | SVG (`write_svg`), and a flat, non-opaque SVG for GIMP paths (`write_gimp`) |
| `vectrace.backend_eps` | EPS (`PostScriptWriter.write_eps`), or multi-page PostScript (`start`, then `page` for each page, then `finish`) |
| `vectrace.backend_pdf` | PDF (`PdfWriter`: `start`, then `page` or `page_full` for each page, then `finish`) |
| `vectrace.backend_dxf` | DXF polylines (`write_dxf`); each Bezier segment becomes up to four circular arcs |
| `vectrace.backend_geojson` | GeoJSON polygons (`write_geojson`); each Bezier segment becomes eight straight pieces |
| `vectrace.backend_xfig` | XFig 3.2 (`write_xfig`) |

The SVG, DXF, GeoJSON and XFig writers take a text stream. `PostScriptWriter`
and `PdfWriter` take a binary stream.

This example writes a single square as SVG:

```python
import sys
from vectrace.curve import Curve, DPoint, Path, PathList, SegmentTag
from vectrace.options import ImageInfo, RenderOptions, Transform
from vectrace.backend_svg import write_svg

square = Curve(
    tag=[SegmentTag.CORNER] * 4,
    c=[
        (DPoint(0, 0), DPoint(0, 0), DPoint(5, 0)),
        (DPoint(0, 0), DPoint(10, 0), DPoint(10, 5)),
        (DPoint(0, 0), DPoint(10, 10), DPoint(5, 10)),
        (DPoint(0, 0), DPoint(0, 10), DPoint(0, 5)),
    ],
)
info = ImageInfo(width=10, height=10, trans=Transform(bb=(10.0, 10.0)))
write_svg(sys.stdout, PathList([Path(sign="+", curve=square)]), info, RenderOptions())
```

### Compression

The PostScript and PDF writers ship their output through a shipper from
`vectrace.compression`:

- `DummyShipper` writes the output plainly.
- `FlateShipper` writes zlib data wrapped in ASCII85. It is used for
  PostScript level 3.
- `A85Shipper` writes ASCII85 only. It is used for compressed PostScript
  level 2.
- `PdfShipper` writes zlib data for PDF content streams.

`Ascii85Encoder` is the streaming encoder that the ASCII85 shippers use.

## Other helpers

- `vectrace.bbox.path_limits(paths, direction)` returns the exact
  `Interval` covered by a set of curves along any direction.
- `vectrace.imageprocessor.adjust_image` applies contrast and then
  brightness to rows of grey values or `(r, g, b)` tuples.
- `vectrace.imageprocessor.image_to_bitmap` turns such rows into a `Bitmap`.
  Grey values below 128 become black.

## What the package does not do

`bitmap_to_pathlist` fills in the raw border `points` of each path, but it
leaves the `curve` empty. The package has no stage that fits polygons and
Bezier curves to those points. To use the backends, you must fill in each
path's `curve` yourself.

The package also has no command that converts an image file to a vector file
in one step. It has no graphical interface, and it cannot render curves back
into a greymap.

## Command line

`vectrace-checkbin` reads the first line of a text file and reports its line
ending:

```sh
vectrace-checkbin notes.txt
```

The exit status is:

- `1` if the first line ends in CR or CRLF
- `0` if it does not
- `2` on an error

Pass `-` as the file name to read standard input.

## Running the tests

```sh
pip install -e ".[test]"
pytest
```