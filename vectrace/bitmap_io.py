"""Black-and-white bitmaps, PNM reading, PBM writing and a text preview."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

_WHITESPACE = frozenset(b" \t\r\n\x0c")
_MAX_NUMBER = 0x7FFFFFFF


class BitmapReadError(ValueError):
    """The input is not a valid image file."""


class EmptyInputError(BitmapReadError):
    """The input holds nothing but whitespace and comments."""


class UnknownFormatError(BitmapReadError):
    """The input does not start with a known magic number."""


@dataclass
class Bitmap:
    """A black-and-white image stored bottom to top.

    Row 0 is the bottom-most scan line. ``data`` holds one byte per pixel,
    1 for black and 0 for white. Reads and writes outside the image are
    ignored: they read as white and change nothing.
    """

    width: int
    height: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"invalid bitmap size {self.width}x{self.height}")
        size = self.width * self.height
        if not self.data:
            self.data = bytearray(size)
        else:
            self.data = bytearray(self.data)
            if len(self.data) != size:
                raise ValueError(f"bitmap data has {len(self.data)} pixels, expected {size}")

    def _inside(self, x, y) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x, y) -> bool:
        """Return True if pixel (x, y) is black."""
        return self._inside(x, y) and bool(self.data[y * self.width + x])

    def put(self, x, y, value) -> None:
        """Set pixel (x, y) to black if ``value`` is true, else to white."""
        if self._inside(x, y):
            self.data[y * self.width + x] = 1 if value else 0

    def flip(self) -> None:
        """Turn the image upside down."""
        w = self.width
        rows = [self.data[y * w:(y + 1) * w] for y in range(self.height)]
        self.data = bytearray(b"".join(reversed(rows)))

    def resize(self, height) -> None:
        """Change the number of rows, keeping the lowest ones; new rows are white."""
        if height < 0:
            raise ValueError(f"invalid bitmap height {height}")
        size = self.width * height
        if size <= len(self.data):
            del self.data[size:]
        else:
            self.data.extend(bytes(size - len(self.data)))
        self.height = height

    def copy(self) -> "Bitmap":
        """Return an independent copy."""
        return Bitmap(self.width, self.height, bytearray(self.data))

    def clear(self, value) -> None:
        """Set every pixel to black if ``value`` is true, else to white."""
        fill = 1 if value else 0
        self.data[:] = bytes([fill]) * len(self.data)


@dataclass
class ReadResult:
    """A bitmap read from a file; ``complete`` is False if the file was cut short."""

    bitmap: Bitmap
    complete: bool = True


class _Truncated(Exception):
    pass


class _Reader:
    """Byte reader with one byte of push-back."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self._pending = -1

    def getc(self) -> int:
        if self._pending >= 0:
            c, self._pending = self._pending, -1
            return c
        b = self.stream.read(1)
        return b[0] if b else -1

    def ungetc(self, c: int) -> None:
        self._pending = c

    def release(self) -> None:
        """Hand a pushed-back byte back to the stream where possible."""
        if self._pending >= 0:
            seekable = getattr(self.stream, "seekable", None)
            if seekable is not None and seekable():
                self.stream.seek(-1, 1)
            self._pending = -1

    def getc_ws(self) -> int:
        """Return the next byte after whitespace and comments, or -1."""
        while True:
            c = self.getc()
            if c == ord("#"):
                while c not in (ord("\n"), -1):
                    c = self.getc()
            if c not in _WHITESPACE:
                return c

    def readnum(self) -> int:
        """Read a non-negative decimal number, skipping junk; -1 on EOF or overflow."""
        while True:
            c = self.getc_ws()
            if c < 0:
                return -1
            if ord("0") <= c <= ord("9"):
                break
        acc = c - ord("0")
        while True:
            c = self.getc()
            if c < 0:
                break
            if not ord("0") <= c <= ord("9"):
                self.ungetc(c)
                break
            acc = acc * 10 + c - ord("0")
            if acc > _MAX_NUMBER:
                return -1
        return acc

    def readbit(self) -> int:
        """Read a single '0' or '1', skipping junk; -1 on EOF."""
        while True:
            c = self.getc_ws()
            if c < 0:
                return -1
            if c in (ord("0"), ord("1")):
                return c - ord("0")


def _format_error(magic: str) -> BitmapReadError:
    if magic in "14":
        return BitmapReadError("invalid pbm file")
    if magic in "25":
        return BitmapReadError("invalid pgm file")
    return BitmapReadError("invalid ppm file")


def _read_sample(reader: _Reader, maxval: int) -> int:
    b = reader.getc()
    if b < 0:
        raise _Truncated
    if maxval >= 256:
        b1 = reader.getc()
        if b1 < 0:
            raise _Truncated
        b = (b << 8) | b1
    return b


def _read_max(reader: _Reader, magic: str) -> int:
    maxval = reader.readnum()
    if maxval < 1:
        raise _format_error(magic)
    return maxval


def _read_pnm_body(reader: _Reader, threshold: float, magic: str) -> ReadResult:
    w = reader.readnum()
    if w < 0:
        raise _format_error(magic)
    h = reader.readnum()
    if h < 0:
        raise _format_error(magic)

    bm = Bitmap(w, h)
    realheight = 0
    try:
        if magic == "1":
            for y in range(h):
                realheight = y + 1
                for x in range(w):
                    b = reader.readbit()
                    if b < 0:
                        raise _Truncated
                    bm.put(x, y, b)
        elif magic == "2":
            maxval = _read_max(reader, magic)
            for y in range(h):
                realheight = y + 1
                for x in range(w):
                    b = reader.readnum()
                    if b < 0:
                        raise _Truncated
                    bm.put(x, y, not b > threshold * maxval)
        elif magic == "3":
            maxval = _read_max(reader, magic)
            for y in range(h):
                realheight = y + 1
                for x in range(w):
                    total = 0
                    for _ in range(3):
                        b = reader.readnum()
                        if b < 0:
                            raise _Truncated
                        total += b
                    bm.put(x, y, not total > 3 * threshold * maxval)
        elif magic == "4":
            if reader.getc() < 0:
                raise _format_error(magic)
            bpr = (w + 7) // 8
            for y in range(h):
                realheight = y + 1
                for i in range(bpr):
                    b = reader.getc()
                    if b < 0:
                        raise _Truncated
                    for bit in range(8):
                        bm.put(8 * i + bit, y, (b >> (7 - bit)) & 1)
        elif magic == "5":
            maxval = _read_max(reader, magic)
            if reader.getc() < 0:
                raise _format_error(magic)
            for y in range(h):
                realheight = y + 1
                for x in range(w):
                    b = _read_sample(reader, maxval)
                    bm.put(x, y, not b > threshold * maxval)
        elif magic == "6":
            maxval = _read_max(reader, magic)
            if reader.getc() < 0:
                raise _format_error(magic)
            for y in range(h):
                realheight = y + 1
                for x in range(w):
                    total = sum(_read_sample(reader, maxval) for _ in range(3))
                    bm.put(x, y, not total > 3 * threshold * maxval)
        else:
            raise _format_error(magic)
    except _Truncated:
        bm.resize(realheight)
        bm.flip()
        return ReadResult(bm, complete=False)

    bm.flip()
    return ReadResult(bm, complete=True)


def read_pnm(stream: BinaryIO, threshold=0.5) -> ReadResult:
    """Read one PBM, PGM or PPM image (P1 to P6) from a binary stream.

    Grey and colour pixels brighter than ``threshold`` (a fraction of the
    maximum value) become white, all others black. Whitespace and comments
    before the magic number are skipped, so several ASCII images may follow
    one another in one stream.
    """
    reader = _Reader(stream)
    try:
        first = reader.getc_ws()
        if first < 0:
            raise EmptyInputError("empty file")
        second = reader.getc()
        if first == ord("P") and ord("1") <= second <= ord("6"):
            return _read_pnm_body(reader, threshold, chr(second))
        raise UnknownFormatError("file format not recognized")
    finally:
        reader.release()


def write_pbm(stream: BinaryIO, bitmap: Bitmap) -> None:
    """Write ``bitmap`` as a raw PBM (P4) image to a binary stream."""
    w, h = bitmap.width, bitmap.height
    stream.write(f"P4\n{w} {h}\n".encode("ascii"))
    bpr = (w + 7) // 8
    for y in reversed(range(h)):
        row = bytearray(bpr)
        for x in range(w):
            if bitmap.get(x, y):
                row[x // 8] |= 0x80 >> (x % 8)
        stream.write(bytes(row))


def format_bitmap_text(bitmap: Bitmap) -> str:
    """Return a coarse picture of the bitmap, at most 79 columns wide."""
    w, h = bitmap.width, bitmap.height
    sw = min(w, 79)
    sh = h if w < 79 else h * sw * 44 // (79 * w)
    lines = []
    for yy in reversed(range(sh)):
        chars = []
        for xx in range(sw):
            filled = any(
                bitmap.get(x, y)
                for x in range(xx * w // sw, (xx + 1) * w // sw)
                for y in range(yy * h // sh, (yy + 1) * h // sh)
            )
            chars.append("*" if filled else " ")
        lines.append("".join(chars) + "\n")
    return "".join(lines)