"""Output filters: pass-through, ASCII85, and zlib compression for PostScript and PDF.

A shipper writes chunks of output to a binary stream. Each chunk is shipped
with a mode: 0 writes it unencoded, 1 writes it encoded (starting the
encoding with a PostScript header if it is not yet running), and 2 encodes it
without that header. Shipping in mode 0 ends a running encoding first; an
empty chunk with mode 0 flushes. ``ship`` returns the number of bytes written.
"""

from __future__ import annotations

import zlib
from typing import BinaryIO, Optional, Union

Data = Union[bytes, bytearray, str]


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("latin-1")
    return bytes(data)


class Ascii85Encoder:
    """Streaming ASCII85 encoder writing lines of at most 71 characters."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self._buf = bytearray()
        self._col = 0

    def write(self, data: Data) -> int:
        """Encode ``data``; return the number of characters written."""
        written = 0
        for byte in _as_bytes(data):
            self._buf.append(byte)
            if len(self._buf) == 4:
                written += self._out(4)
                self._buf.clear()
        return written

    def finish(self) -> int:
        """Encode any pending bytes and write the end marker."""
        written = 0
        if self._buf:
            written += self._out(len(self._buf))
            self._buf.clear()
        self.stream.write(b"~>\n")
        return written + 2

    def _out(self, n: int) -> int:
        word = int.from_bytes(bytes(self._buf) + bytes(4 - n), "big")
        if word == 0:
            return self._spool(ord("z"))
        digits = []
        for _ in range(5):
            word, digit = divmod(word, 85)
            digits.append(digit)
        digits.reverse()
        return sum(self._spool(d + 33) for d in digits[: n + 1])

    def _spool(self, c: int) -> int:
        self.stream.write(bytes([c]))
        self._col += 1
        if self._col > 70:
            self.stream.write(b"\n")
            self._col = 0
            return 2
        return 1


class Shipper:
    """Writes output chunks to a binary stream without any encoding."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def _write(self, data: Data) -> int:
        raw = _as_bytes(data)
        self.stream.write(raw)
        return len(raw)

    def ship(self, data: Data, mode=0) -> int:
        """Write ``data`` as is and return the number of bytes written."""
        return self._write(data)


class DummyShipper(Shipper):
    """Writes every chunk unencoded, whatever the mode."""

    def ship(self, data: Data, mode=0) -> int:
        """Write ``data`` as is and return the number of bytes written."""
        return self._write(data)


class FlateShipper(Shipper):
    """zlib compression wrapped in ASCII85, for PostScript level 3."""

    HEADER = b"currentfile /ASCII85Decode filter /FlateDecode filter cvx exec\n"

    def __init__(self, stream: BinaryIO):
        super().__init__(stream)
        self._compressor = None
        self._a85: Optional[Ascii85Encoder] = None

    def ship(self, data: Data, mode=0) -> int:
        """Ship ``data`` in the given mode; see the module description."""
        written = 0
        if mode and self._compressor is None:
            if mode == 1:
                written += self._write(self.HEADER)
            self._compressor = zlib.compressobj(9)
            self._a85 = Ascii85Encoder(self.stream)
        elif not mode and self._compressor is not None:
            written += self._a85.write(self._compressor.flush())
            written += self._a85.finish()
            self._compressor = None
            self._a85 = None
        if self._compressor is None:
            return written + self._write(data)
        return written + self._a85.write(self._compressor.compress(_as_bytes(data)))


class PdfShipper(Shipper):
    """Raw zlib compression, for PDF content streams."""

    def __init__(self, stream: BinaryIO):
        super().__init__(stream)
        self._compressor = None

    def ship(self, data: Data, mode=0) -> int:
        """Ship ``data`` in the given mode; see the module description."""
        written = 0
        if mode and self._compressor is None:
            self._compressor = zlib.compressobj(9)
        elif not mode and self._compressor is not None:
            written += self._write(self._compressor.flush())
            self._compressor = None
        if self._compressor is None:
            return written + self._write(data)
        return written + self._write(self._compressor.compress(_as_bytes(data)))


class A85Shipper(Shipper):
    """ASCII85 encoding without compression."""

    HEADER = b"currentfile /ASCII85Decode filter cvx exec\n"

    def __init__(self, stream: BinaryIO):
        super().__init__(stream)
        self._a85: Optional[Ascii85Encoder] = None

    def ship(self, data: Data, mode=0) -> int:
        """Ship ``data`` in the given mode; see the module description."""
        written = 0
        if mode and self._a85 is None:
            if mode == 1:
                written += self._write(self.HEADER)
            self._a85 = Ascii85Encoder(self.stream)
        elif not mode and self._a85 is not None:
            written += self._a85.finish()
            self._a85 = None
        if self._a85 is None:
            return written + self._write(data)
        return written + self._a85.write(data)