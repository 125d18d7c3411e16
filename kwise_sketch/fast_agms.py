# Fast-AGMS (Tug-of-War) linear sketch
# - depth x width grid of signed counters
# - pairwise independent bucket hash + 4-wise independent sign hash per row
# - point frequency via median of row estimates, join size via median of
#   row inner products
# Python 3.9+

from __future__ import annotations

import logging
import math
import operator
from numbers import Real
from typing import Iterable, List, Tuple, Union

from .errors import DimensionMismatchError
from .kwise_hash import BinHash, SignHash

logger = logging.getLogger(__name__)

Item = Union[int, str, bytes]
Counter = Union[int, float]


def item_id(item: Item) -> int:
    """
    Stable integer identifier for a sketch item.

    Integers (and anything implementing ``__index__``) pass through.  ``str``
    is encoded as UTF-8 and ``bytes`` are read as one big-endian integer, so a
    one-character string maps to its code point (``"a" -> 97``).
    """
    if isinstance(item, str):
        item = item.encode("utf-8")
    if isinstance(item, (bytes, bytearray)):
        return int.from_bytes(item, "big")
    try:
        return operator.index(item)
    except TypeError:
        raise TypeError(f"unsupported sketch item type: {type(item).__name__}") from None


def _upper_median(values: List[Counter]) -> Counter:
    values.sort()
    return values[len(values) // 2]


class FastAGMS:
    """
    Fast-AGMS sketch for frequency and join-size estimation.

    Paper:
      - Cormode, Graham, and Minos Garofalakis. "Sketching streams through
        the net: distributed approximate query tracking." VLDB 2005.

    Each row hashes an item into one bucket and adds ``sign * weight``.
    Other items landing in the same bucket carry independent random signs, so
    their contributions cancel in expectation and ``bucket * sign`` is an
    unbiased estimate of the item's weight.  The median over independent rows
    concentrates those noisy estimates.

    The bucket hash and the sign hash are both seeded with ``seed``; two
    sketches are comparable only if they share ``depth``, ``width`` and
    ``seed``.

    Public API:
      update(item, weight=1), extend(items), query(item), dot_product(other),
      second_moment(), merge(other), get_grid()
    """

    __slots__ = ("_depth", "_width", "_seed", "_grid", "_bins", "_signs", "_total_weight")

    def __init__(self, depth: int, width: int, seed: int):
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        if width < 1:
            raise ValueError(f"width must be >= 1, got {width}")
        self._depth = int(depth)
        self._width = int(width)
        self._seed = int(seed)
        self._grid: List[List[Counter]] = [[0] * self._width for _ in range(self._depth)]
        self._bins = BinHash(self._depth, self._width, seed=self._seed)
        self._signs = SignHash(self._depth, seed=self._seed)
        self._total_weight: Counter = 0
        logger.debug("created FastAGMS depth=%d width=%d seed=%d", self._depth, self._width, self._seed)

    @classmethod
    def from_error_rate(cls, epsilon: float, delta: float, seed: int) -> "FastAGMS":
        """Size a sketch so point errors stay within ``epsilon * ||f||_2``
        with probability at least ``1 - delta``."""
        if not 0.0 < epsilon < 1.0:
            raise ValueError(f"epsilon must be in (0, 1), got {epsilon}")
        if not 0.0 < delta < 1.0:
            raise ValueError(f"delta must be in (0, 1), got {delta}")
        width = int(math.ceil(math.e / (epsilon * epsilon)))
        depth = max(1, int(math.ceil(math.log(1.0 / delta))))
        return cls(depth, width, seed)

    # ------------------------------- Properties --------------------------------
    @property
    def depth(self) -> int:
        return self._depth

    @property
    def width(self) -> int:
        return self._width

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def total_weight(self) -> Counter:
        return self._total_weight

    # ------------------------------- Public API --------------------------------
    def update(self, item: Item, weight: Counter = 1) -> None:
        """Add ``weight`` occurrences of ``item`` (negative weights delete)."""
        w = self._check_weight(weight)
        # Resolve every row before touching the grid so a failure leaves it intact.
        cells = self._cells(item_id(item))
        for row, (col, sign) in enumerate(cells):
            self._grid[row][col] += sign * w
        self._total_weight += w

    def extend(self, items: Iterable[Item]) -> None:
        for item in items:
            self.update(item)

    def query(self, item: Item) -> Counter:
        """Estimated accumulated weight of ``item``."""
        estimates = [
            self._grid[row][col] * sign
            for row, (col, sign) in enumerate(self._cells(item_id(item)))
        ]
        return _upper_median(estimates)

    def dot_product(self, other: "FastAGMS") -> Counter:
        """Estimate the inner product (join size) of the two sketched streams."""
        self._check_compatible(other)
        row_sums: List[Counter] = []
        for mine, theirs in zip(self._grid, other._grid):
            row_sums.append(sum(a * b for a, b in zip(mine, theirs)))
        return _upper_median(row_sums)

    def second_moment(self) -> Counter:
        """AGMS estimate of F2, the sum of squared item frequencies."""
        return self.dot_product(self)

    def merge(self, other: "FastAGMS") -> None:
        """Add ``other``'s counters into this sketch.

        The sketch is linear, so the result equals a sketch of the
        concatenated streams.  Both sketches must share their hash functions.
        """
        self._check_compatible(other)
        if self._seed != other._seed:
            raise DimensionMismatchError(
                f"cannot merge sketches built from different seeds ({self._seed} != {other._seed})"
            )
        for mine, theirs in zip(self._grid, other._grid):
            for col, value in enumerate(theirs):
                if value:
                    mine[col] += value
        self._total_weight += other._total_weight

    def get_grid(self) -> Tuple[Tuple[Counter, ...], ...]:
        """Immutable snapshot of the counter grid."""
        return tuple(tuple(row) for row in self._grid)

    # ------------------------------- Internals ---------------------------------
    def _cells(self, ident: int) -> List[Tuple[int, int]]:
        return [
            (self._bins.hash(ident, row), self._signs.hash(ident, row))
            for row in range(self._depth)
        ]

    def _check_compatible(self, other: "FastAGMS") -> None:
        if not isinstance(other, FastAGMS):
            raise TypeError("expected a FastAGMS sketch")
        if self._depth != other._depth or self._width != other._width:
            raise DimensionMismatchError(
                f"sketch dimensions differ: {self._depth}x{self._width} vs {other._depth}x{other._width}"
            )

    @staticmethod
    def _check_weight(weight: Counter) -> Counter:
        if isinstance(weight, bool) or not isinstance(weight, Real):
            raise TypeError(f"weight must be a real number, got {type(weight).__name__}")
        if isinstance(weight, int):
            return weight
        wv = float(weight)
        if math.isnan(wv) or math.isinf(wv):
            raise ValueError("weight must be finite")
        if wv.is_integer():
            return int(wv)
        return wv

    def __repr__(self) -> str:
        return f"FastAGMS(depth={self._depth}, width={self._width}, seed={self._seed})"


__all__ = ["FastAGMS", "item_id"]
