# Range-frequency queries over a power-of-two integer domain.
# One FastAGMS per dyadic level; level L summarizes the nodes of size 2^L, so
# a value x lands in node x >> L.  A range query adds up the point estimates
# of the nodes returned by cover().

from __future__ import annotations

import logging
from typing import List

from .dyadic import cover, interval_level, is_power_of_two
from .errors import InvalidRangeError
from .fast_agms import Counter, FastAGMS

logger = logging.getLogger(__name__)


class DyadicRangeSketch:
    """
    Hierarchy of Fast-AGMS sketches answering ``sum of frequencies in [a, b]``.

    Each update touches ``log2(domain_size) + 1`` sketches and each range
    query at most ``2 * log2(domain_size)`` point queries.  Level ``L`` is
    seeded with ``seed + L`` so the levels use independent hash functions.
    """

    __slots__ = ("_domain_size", "_levels")

    def __init__(self, domain_size: int, depth: int, width: int, seed: int):
        if not is_power_of_two(domain_size):
            raise InvalidRangeError(f"domain size must be a power of two, got {domain_size}")
        self._domain_size = domain_size
        n_levels = domain_size.bit_length()
        self._levels: List[FastAGMS] = [
            FastAGMS(depth, width, seed + level) for level in range(n_levels)
        ]
        logger.debug(
            "created DyadicRangeSketch domain=%d levels=%d depth=%d width=%d",
            domain_size, n_levels, depth, width,
        )

    @property
    def domain_size(self) -> int:
        return self._domain_size

    @property
    def levels(self) -> int:
        return len(self._levels)

    def level_sketch(self, level: int) -> FastAGMS:
        if not 0 <= level < len(self._levels):
            raise InvalidRangeError(f"level {level} not in [0, {len(self._levels)})")
        return self._levels[level]

    def update(self, x: int, weight: Counter = 1) -> None:
        self._check_point(x)
        for level, sketch in enumerate(self._levels):
            sketch.update(x >> level, weight)

    def extend(self, xs) -> None:
        for x in xs:
            self.update(x)

    def point_query(self, x: int) -> Counter:
        self._check_point(x)
        return self._levels[0].query(x)

    def range_query(self, a: int, b: int) -> Counter:
        """Estimated total weight of values in ``[a, b]``."""
        total: Counter = 0
        for lo, hi in cover(a, b, self._domain_size):
            level = interval_level(lo, hi)
            total += self._levels[level].query(lo >> level)
        return total

    def _check_point(self, x: int) -> None:
        if not isinstance(x, int) or not 0 <= x < self._domain_size:
            raise InvalidRangeError(f"value {x!r} not in [0, {self._domain_size})")

    def __repr__(self) -> str:
        base = self._levels[0]
        return (
            f"DyadicRangeSketch(domain_size={self._domain_size}, depth={base.depth}, "
            f"width={base.width}, seed={base.seed})"
        )


__all__ = ["DyadicRangeSketch"]
