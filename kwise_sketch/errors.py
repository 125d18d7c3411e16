"""Exception types raised by :mod:`kwise_sketch`."""
from __future__ import annotations


class SketchError(Exception):
    """Base class for every error raised by the sketching primitives."""


class InvalidRangeError(SketchError, ValueError):
    """A sampling range or a dyadic query range is empty or out of bounds."""


class IndexOutOfBoundsError(SketchError, IndexError):
    """A hash row index is outside ``[0, depth)``."""


class DimensionMismatchError(SketchError, ValueError):
    """Two sketches with different shapes were combined."""


__all__ = [
    "SketchError",
    "InvalidRangeError",
    "IndexOutOfBoundsError",
    "DimensionMismatchError",
]
