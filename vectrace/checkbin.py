"""Report whether a text file uses CR or CRLF line endings."""

from __future__ import annotations

import sys
from typing import BinaryIO


def ends_with_cr(stream: BinaryIO) -> bool:
    """Return True if the first line of ``stream`` ends in CR or CRLF."""
    while True:
        c = stream.read(1)
        if not c or c == b"\n":
            return False
        if c == b"\r":
            return True


def main(argv=None) -> int:
    """Check one file ("-" for standard input).

    Returns 1 for CR/CRLF endings, 0 otherwise, and 2 on error.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("checkbin: wrong number of arguments", file=sys.stderr)
        print("Usage: checkbin file", file=sys.stderr)
        return 2
    name = args[0]
    if name == "-":
        return int(ends_with_cr(sys.stdin.buffer))
    try:
        with open(name, "rb") as f:
            return int(ends_with_cr(f))
    except OSError as exc:
        print(f"checkbin: {name}: {exc.strerror}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())