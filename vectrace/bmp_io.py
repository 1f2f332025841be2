"""Reading Windows and OS/2 BMP images as black-and-white bitmaps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, List

from .bitmap_io import (
    Bitmap,
    BitmapReadError,
    EmptyInputError,
    ReadResult,
    UnknownFormatError,
    _Reader,
    _read_pnm_body,
)

_INT_BITS = 32
_INT_MASK = 0xFFFFFFFF
_MAX_DIMENSION = 0x7FFFFFFF


class _Eof(Exception):
    pass


def _invalid(message: str = "invalid bmp file") -> BitmapReadError:
    return BitmapReadError(message)


def _lowest_bit(mask: int) -> int:
    return (mask & -mask).bit_length() - 1


class _BmpStream:
    """Little-endian reader that tracks the file position and row padding."""

    def __init__(self, reader: _Reader):
        self.reader = reader
        self.count = 0
        self.pos = 2  # the magic number has been read

    def read_int(self, n: int) -> int:
        total = 0
        for i in range(n):
            b = self.reader.getc()
            if b < 0:
                raise _Eof
            total |= b << (8 * i)
        self.count += n
        self.pos += n
        return total

    def pad_reset(self) -> None:
        self.count = 0

    def pad(self) -> None:
        """Skip padding up to a 4-byte boundary."""
        c = (-self.count) & 3
        for _ in range(c):
            if self.reader.getc() < 0:
                raise _invalid()
        self.pos += c
        self.count = 0

    def forward(self, pos: int) -> bool:
        """Skip ahead to file position ``pos``; False if the input ends first."""
        while self.pos < pos:
            if self.reader.getc() < 0:
                return False
            self.pos += 1
            self.count += 1
        return True


@dataclass
class _BmpInfo:
    file_size: int = 0
    data_offset: int = 0
    info_size: int = 0
    width: int = 0
    height: int = 0
    planes: int = 0
    bits: int = 0
    comp: int = 0
    ncolors: int = 0
    red_mask: int = 0
    green_mask: int = 0
    blue_mask: int = 0
    ctbits: int = 32
    topdown: bool = False


def _read_info(src: _BmpStream) -> _BmpInfo:
    info = _BmpInfo()
    info.file_size = src.read_int(4)
    src.read_int(4)  # reserved
    info.data_offset = src.read_int(4)
    info.info_size = src.read_int(4)

    if info.info_size in (40, 64, 108, 124):
        # Windows or new OS/2 format
        info.ctbits = 32
        info.width = src.read_int(4)
        info.height = src.read_int(4)
        info.planes = src.read_int(2)
        info.bits = src.read_int(2)
        info.comp = src.read_int(4)
        src.read_int(4)  # image size
        src.read_int(4)  # x pixels per metre
        src.read_int(4)  # y pixels per metre
        info.ncolors = src.read_int(4)
        src.read_int(4)  # important colours
        if info.info_size >= 108:
            info.red_mask = src.read_int(4)
            info.green_mask = src.read_int(4)
            info.blue_mask = src.read_int(4)
            src.read_int(4)  # alpha mask
        if info.width > _MAX_DIMENSION:
            raise _invalid()
        if info.height > _MAX_DIMENSION:
            info.height = (-info.height) & _INT_MASK
            info.topdown = True
        if info.height > _MAX_DIMENSION:
            raise _invalid()
    elif info.info_size == 12:
        # old OS/2 format
        info.ctbits = 24
        info.width = src.read_int(2)
        info.height = src.read_int(2)
        info.planes = src.read_int(2)
        info.bits = src.read_int(2)
    else:
        raise _invalid()

    if info.comp == 3 and info.info_size < 108:
        # bitfields are only understood in the V4 and V5 formats
        raise _invalid()
    if info.comp > 3 or info.bits > 32:
        raise _invalid()

    if not src.forward(14 + info.info_size):
        raise _invalid()

    if info.planes != 1:
        raise _invalid("cannot handle bmp planes")

    if info.ncolors == 0 and info.bits <= 8:
        info.ncolors = 1 << info.bits
    return info


@dataclass
class _Decoder:
    src: _BmpStream
    info: _BmpInfo
    bitmap: Bitmap
    threshold: float
    coltable: List[int] = field(default_factory=list)
    col1: List[int] = field(default_factory=lambda: [0, 0])
    realheight: int = 0

    def color(self, index: int) -> int:
        return self.coltable[index] if index < len(self.coltable) else 0

    def is_black(self, total: int) -> bool:
        return not total > 3 * self.threshold * 255

    def read_color_table(self) -> None:
        if self.info.bits > 8:
            return
        for i in range(self.info.ncolors):
            c = self.src.read_int(self.info.ctbits // 8)
            c = ((c >> 16) & 0xFF) + ((c >> 8) & 0xFF) + (c & 0xFF)
            self.coltable.append(1 if self.is_black(c) else 0)
            if i < 2:
                self.col1[i] = c

    def decode(self) -> None:
        key = self.info.bits + 0x100 * self.info.comp
        if key == 0x001:
            self.mono()
        elif 0x002 <= key <= 0x008:
            self.palette()
        elif key == 0x010:
            raise _invalid("cannot handle bmp 16-bit coding")
        elif key in (0x018, 0x020):
            self.truecolor()
        elif key == 0x320:
            self.bitfields()
        elif key == 0x204:
            self.rle4()
        elif key == 0x108:
            self.rle8()
        else:
            raise _invalid()

    def mono(self) -> None:
        # make the darker palette colour black
        mask = 0xFF if self.col1[0] < self.col1[1] else 0
        w = self.info.width
        for y in range(self.info.height):
            self.realheight = y + 1
            self.src.pad_reset()
            i = 0
            while 8 * i < w:
                b = self.src.read_int(1) ^ mask
                for bit in range(8):
                    self.bitmap.put(8 * i + bit, y, (b >> (7 - bit)) & 1)
                i += 1
            self.src.pad()

    def palette(self) -> None:
        bits = self.info.bits
        for y in range(self.info.height):
            self.realheight = y + 1
            self.src.pad_reset()
            bitbuf = 0  # bits in the buffer are high-aligned
            n = 0
            for x in range(self.info.width):
                if n < bits:
                    b = self.src.read_int(1)
                    bitbuf |= b << (_INT_BITS - 8 - n)
                    n += 8
                index = bitbuf >> (_INT_BITS - bits)
                bitbuf = (bitbuf << bits) & _INT_MASK
                n -= bits
                self.bitmap.put(x, y, self.color(index))
            self.src.pad()

    def truecolor(self) -> None:
        nbytes = self.info.bits // 8
        for y in range(self.info.height):
            self.realheight = y + 1
            self.src.pad_reset()
            for x in range(self.info.width):
                c = self.src.read_int(nbytes)
                c = ((c >> 16) & 0xFF) + ((c >> 8) & 0xFF) + (c & 0xFF)
                self.bitmap.put(x, y, self.is_black(c))
            self.src.pad()

    def bitfields(self) -> None:
        info = self.info
        if not (info.red_mask and info.green_mask and info.blue_mask):
            raise _invalid()
        channels = [
            (info.red_mask, _lowest_bit(info.red_mask)),
            (info.green_mask, _lowest_bit(info.green_mask)),
            (info.blue_mask, _lowest_bit(info.blue_mask)),
        ]
        nbytes = info.bits // 8
        for y in range(info.height):
            self.realheight = y + 1
            self.src.pad_reset()
            for x in range(info.width):
                c = self.src.read_int(nbytes)
                total = sum((c & mask) >> shift for mask, shift in channels)
                self.bitmap.put(x, y, self.is_black(total))
            self.src.pad()

    def rle4(self) -> None:
        w, h = self.info.width, self.info.height
        read = self.src.read_int
        x = y = 0
        while True:
            b = read(1)  # opcode
            c = read(1)  # argument
            if b > 0:
                # repeat count, alternating two colours
                cols = (self.color((c >> 4) & 0xF), self.color(c & 0xF))
                i = 0
                while i < b and x < w:
                    if y >= h:
                        break
                    self.realheight = y + 1
                    self.bitmap.put(x, y, cols[i & 1])
                    x += 1
                    i += 1
            elif c == 0:
                y += 1
                x = 0
            elif c == 1:
                break
            elif c == 2:
                x += read(1)
                y += read(1)
            else:
                # verbatim segment
                for i in range(c):
                    if (i & 1) == 0:
                        b = read(1)
                    if x >= w:
                        x = 0
                        y += 1
                    if x >= w or y >= h:
                        break
                    self.realheight = y + 1
                    self.bitmap.put(x, y, self.color((b >> (4 - 4 * (i & 1))) & 0xF))
                    x += 1
                if (c + 1) & 2:
                    read(1)  # pad to a 16-bit boundary

    def rle8(self) -> None:
        w, h = self.info.width, self.info.height
        read = self.src.read_int
        x = y = 0
        while True:
            b = read(1)  # opcode
            c = read(1)  # argument
            if b > 0:
                for _ in range(b):
                    if x >= w:
                        x = 0
                        y += 1
                    if x >= w or y >= h:
                        break
                    self.realheight = y + 1
                    self.bitmap.put(x, y, self.color(c))
                    x += 1
            elif c == 0:
                y += 1
                x = 0
            elif c == 1:
                break
            elif c == 2:
                x += read(1)
                y += read(1)
            else:
                for _ in range(c):
                    b = read(1)
                    if x >= w:
                        x = 0
                        y += 1
                    if x >= w or y >= h:
                        break
                    self.realheight = y + 1
                    self.bitmap.put(x, y, self.color(b))
                    x += 1
                if c & 1:
                    read(1)  # pad to a 16-bit boundary


def _read_bmp_body(reader: _Reader, threshold: float) -> ReadResult:
    src = _BmpStream(reader)
    try:
        info = _read_info(src)
        decoder = _Decoder(src, info, Bitmap(0, 0), threshold)
        decoder.read_color_table()
        if info.info_size != 12 and not src.forward(info.data_offset):
            raise _invalid()
    except _Eof:
        raise _invalid() from None

    decoder.bitmap = Bitmap(info.width, info.height)
    try:
        decoder.decode()
    except _Eof:
        decoder.bitmap.resize(decoder.realheight)
        if info.topdown:
            decoder.bitmap.flip()
        return ReadResult(decoder.bitmap, complete=False)

    # skip trailing junk in the data section; running out of input is fine
    src.forward(info.file_size)
    if info.topdown:
        decoder.bitmap.flip()
    return ReadResult(decoder.bitmap, complete=True)


def read_bmp(stream: BinaryIO, threshold=0.5) -> ReadResult:
    """Read a BMP image, starting at its "BM" magic number.

    1 to 8 bit palettes, 24 and 32 bit colour, 32 bit bitfields and RLE4/RLE8
    compression are understood, in the Windows and both OS/2 variants.
    Pixels brighter than ``threshold`` become white, all others black.
    """
    reader = _Reader(stream)
    try:
        if reader.getc() != ord("B") or reader.getc() != ord("M"):
            raise UnknownFormatError("file format not recognized")
        return _read_bmp_body(reader, threshold)
    finally:
        reader.release()


def read_bitmap(stream: BinaryIO, threshold=0.5) -> ReadResult:
    """Read a PNM (P1 to P6) or BMP image, recognised by its magic number."""
    reader = _Reader(stream)
    try:
        first = reader.getc_ws()
        if first < 0:
            raise EmptyInputError("empty file")
        second = reader.getc()
        if first == ord("P") and ord("1") <= second <= ord("6"):
            return _read_pnm_body(reader, threshold, chr(second))
        if first == ord("B") and second == ord("M"):
            return _read_bmp_body(reader, threshold)
        raise UnknownFormatError("file format not recognized")
    finally:
        reader.release()