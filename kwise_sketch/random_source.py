# SplitMix64 deterministic pseudorandom source.
# The only entropy source of the package: every hash family is drawn from one
# of these, so a seed fully determines every coefficient table.

from __future__ import annotations

from typing import Iterator

from .errors import InvalidRangeError

MASK64: int = 0xFFFFFFFFFFFFFFFF
_TWO_64: int = 1 << 64


class SplitMix64:
    """
    Seeded 64-bit generator (Steele, Lea & Flood, "Fast splittable
    pseudorandom number generators", OOPSLA 2014).

    The state advances by the golden-ratio increment and each output runs the
    state through two xor-shift/multiply rounds.  Outputs are bit-identical to
    any other SplitMix64 implementation given the same 64-bit seed.
    """

    _GOLDEN_GAMMA: int = 0x9E3779B97F4A7C15
    _MIX_MUL_1: int = 0xBF58476D1CE4E5B9
    _MIX_MUL_2: int = 0x94D049BB133111EB

    __slots__ = ("_state",)

    def __init__(self, seed: int):
        self._state = int(seed) & MASK64

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> int:
        """Return the next 64-bit value of the sequence."""
        self._state = (self._state + self._GOLDEN_GAMMA) & MASK64
        z = self._state
        z = ((z ^ (z >> 30)) * self._MIX_MUL_1) & MASK64
        z = ((z ^ (z >> 27)) * self._MIX_MUL_2) & MASK64
        return z ^ (z >> 31)

    def next_in_range(self, lo: int, hi: int) -> int:
        """Uniform draw from ``[lo, hi)`` without modulo bias.

        Raw values below ``(2**64 - span) % span`` are rejected so the
        accepted values split evenly over the span.
        """
        span = hi - lo
        if span <= 0:
            raise InvalidRangeError(f"empty range [{lo}, {hi}): hi must be greater than lo")
        if span > _TWO_64:
            raise InvalidRangeError(f"range [{lo}, {hi}) is wider than 2**64")
        threshold = (_TWO_64 - span) % span
        raw = self.next()
        while raw < threshold:
            raw = self.next()
        return lo + raw % span

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return self.next()

    def __repr__(self) -> str:
        return f"SplitMix64(state=0x{self._state:016x})"


__all__ = ["SplitMix64", "MASK64"]
