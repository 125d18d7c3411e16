"""Canonical dyadic decomposition of integer ranges.

The domain ``[0, n - 1]`` (``n`` a power of two) is viewed as an implicit
complete binary tree: the root spans the whole domain and each node
``[l, r]`` splits at ``mid = l + (r - l) // 2``.  :func:`cover` returns the
minimal set of tree nodes whose union is exactly a query range, so a range
query touches at most ``2 * log2(n)`` precomputed per-node summaries.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import List, Tuple

from .errors import InvalidRangeError

DyadicInterval = Tuple[int, int]


def is_power_of_two(n: int) -> bool:
    return isinstance(n, int) and n > 0 and n & (n - 1) == 0


def max_cover_size(n: int) -> int:
    """Upper bound on ``len(cover(a, b, n))``."""
    if not is_power_of_two(n):
        raise InvalidRangeError(f"domain size must be a power of two, got {n}")
    return max(1, 2 * math.ceil(math.log2(n)))


def interval_level(lo: int, hi: int) -> int:
    """Tree level of a dyadic interval: ``log2`` of its length."""
    length = hi - lo + 1
    if not is_power_of_two(length) or lo % length:
        raise InvalidRangeError(f"[{lo}, {hi}] is not a dyadic interval")
    return length.bit_length() - 1


def cover(a: int, b: int, n: int) -> List[DyadicInterval]:
    """Minimal ascending list of dyadic intervals whose union is ``[a, b]``.

    >>> cover(3, 9, 16)
    [(3, 3), (4, 7), (8, 9)]
    """
    if not is_power_of_two(n):
        raise InvalidRangeError(f"domain size must be a power of two, got {n}")
    if not (isinstance(a, int) and isinstance(b, int)):
        raise InvalidRangeError("range bounds must be integers")
    if not 0 <= a <= b <= n - 1:
        raise InvalidRangeError(f"range [{a}, {b}] is not inside [0, {n - 1}]")
    return list(_cover(a, b, n))


@lru_cache(maxsize=4096)
def _cover(a: int, b: int, n: int) -> Tuple[DyadicInterval, ...]:
    out: List[DyadicInterval] = []
    # Explicit stack keeps the depth at O(log n); right child is pushed first
    # so nodes come off in ascending order.
    stack: List[DyadicInterval] = [(0, n - 1)]
    while stack:
        lo, hi = stack.pop()
        if lo > b or hi < a:
            continue
        if a <= lo and hi <= b:
            out.append((lo, hi))
            continue
        mid = lo + (hi - lo) // 2
        stack.append((mid + 1, hi))
        stack.append((lo, mid))
    return tuple(out)


__all__ = ["DyadicInterval", "cover", "interval_level", "is_power_of_two", "max_cover_size"]
