"""Read bitmaps, decompose them into boundary paths, and write curves in vector formats."""

__version__ = "0.1.0"