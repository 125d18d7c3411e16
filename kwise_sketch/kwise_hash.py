# k-wise independent hashing over the Mersenne field Z_P, P = 2^61 - 1.
# - Random polynomials of degree k-1 give k-wise independent hash functions
# - Coefficient tables are immutable tuples, one row per hash function
# - Horner evaluation with a checked 128-bit accumulator and Mersenne folding
# Python 3.9+

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .errors import IndexOutOfBoundsError
from .random_source import SplitMix64

logger = logging.getLogger(__name__)

MERSENNE_EXPONENT: int = 61
MERSENNE_PRIME: int = (1 << MERSENNE_EXPONENT) - 1

# Widest value fast_mersenne_mod accepts.  Operands of a Horner step are
# already reduced, so result * x + a_i < 2^122 + 2^61 fits with room to spare.
ACCUMULATOR_BITS: int = 128
_ACCUMULATOR_LIMIT: int = 1 << ACCUMULATOR_BITS

HashCoefficients = Tuple[int, ...]


def fast_mersenne_mod(x: int) -> int:
    """Return ``x mod (2**61 - 1)`` for ``0 <= x < 2**128`` without division."""
    if x < 0:
        raise ValueError("fast_mersenne_mod expects a non-negative value")
    if x >= _ACCUMULATOR_LIMIT:
        raise OverflowError(f"value exceeds the {ACCUMULATOR_BITS}-bit accumulator")
    # 2^61 == 1 (mod P): fold the high bits onto the low 61 bits.  Two folds
    # bring any 128-bit value below 2P, one subtraction finishes the job.
    x = (x & MERSENNE_PRIME) + (x >> MERSENNE_EXPONENT)
    x = (x & MERSENNE_PRIME) + (x >> MERSENNE_EXPONENT)
    if x >= MERSENNE_PRIME:
        x -= MERSENNE_PRIME
    return x


def to_field(x: int) -> int:
    """Map an integer (or anything with ``__index__``) into ``[0, P)``."""
    return operator.index(x) % MERSENNE_PRIME


def poly_hash(x: int, coeffs: Sequence[int]) -> int:
    """Evaluate ``a0*x^(k-1) + ... + a_{k-1}`` in Z_P by Horner's rule."""
    x = to_field(x)
    result = coeffs[0]
    for a in coeffs[1:]:
        result = fast_mersenne_mod(result * x + a)
    return result


class PolynomialHashFamily:
    """
    ``depth`` independent random polynomials over Z_P of degree ``k - 1``.

    Every row draws ``k - 1`` coefficients from ``[1, P)`` and a final one from
    ``[0, P)``, all from a single :class:`SplitMix64` seeded with ``seed``.
    The resulting family is ``k``-wise independent: ``k=4`` is what the sign
    hash needs for its variance bound, ``k=2`` suffices for bucketing.
    """

    __slots__ = ("_depth", "_k", "_seed", "_coefficients")

    def __init__(self, depth: int, k: int, seed: int):
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        if k < 2:
            raise ValueError(f"k must be >= 2, got {k}")
        self._depth = int(depth)
        self._k = int(k)
        self._seed = int(seed)

        rng = SplitMix64(seed)
        rows: List[HashCoefficients] = []
        for _ in range(self._depth):
            row = [rng.next_in_range(1, MERSENNE_PRIME) for _ in range(self._k - 1)]
            row.append(rng.next_in_range(0, MERSENNE_PRIME))
            rows.append(tuple(row))
        self._coefficients: Tuple[HashCoefficients, ...] = tuple(rows)
        logger.debug("built %d-wise hash family: depth=%d seed=%d", self._k, self._depth, self._seed)

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def k(self) -> int:
        return self._k

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def coefficients(self) -> Tuple[HashCoefficients, ...]:
        return self._coefficients

    def row(self, index: int) -> HashCoefficients:
        self._check_row(index)
        return self._coefficients[index]

    def evaluate(self, row: int, x: int) -> int:
        """Evaluate polynomial ``row`` at ``x``; the result lies in ``[0, P)``."""
        self._check_row(row)
        return poly_hash(x, self._coefficients[row])

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self._depth:
            raise IndexOutOfBoundsError(f"row {row} out of bounds (depth={self._depth})")

    def __repr__(self) -> str:
        return f"PolynomialHashFamily(depth={self._depth}, k={self._k}, seed={self._seed})"


class _RowHash:
    """Shared plumbing for hashes that post-process a polynomial family."""

    __slots__ = ("_family",)

    def __init__(self, depth: int, k: int, seed: int):
        self._family = PolynomialHashFamily(depth, k, seed)

    @property
    def depth(self) -> int:
        return self._family.depth

    @property
    def k(self) -> int:
        return self._family.k

    @property
    def seed(self) -> int:
        return self._family.seed

    @property
    def family(self) -> PolynomialHashFamily:
        return self._family

    def hash(self, x: int, row: int = 0) -> int:
        return self._finish(self._family.evaluate(row, x))

    def hash_batch(self, xs: Iterable[int], row: int = 0) -> List[int]:
        return [self.hash(x, row) for x in xs]

    def hash_all(self, x: int) -> List[int]:
        """One value per row for a single input."""
        return [self.hash(x, row) for row in range(self.depth)]

    def _finish(self, value: int) -> int:
        raise NotImplementedError


class SignHash(_RowHash):
    """Maps inputs to ``{-1, +1}`` using the low bit of a 4-wise independent hash."""

    DEFAULT_K: int = 4

    __slots__ = ()

    def __init__(self, depth: int, k: int = DEFAULT_K, *, seed: int):
        super().__init__(depth, k, seed)

    def _finish(self, value: int) -> int:
        return 1 if value & 1 else -1

    def __repr__(self) -> str:
        return f"SignHash(depth={self.depth}, k={self.k}, seed={self.seed})"


class BinHash(_RowHash):
    """Maps inputs to a bucket in ``[0, width)`` using a pairwise independent hash."""

    DEFAULT_K: int = 2

    __slots__ = ("_width",)

    def __init__(self, depth: int, width: int, k: int = DEFAULT_K, *, seed: int):
        if width < 1:
            raise ValueError(f"width must be >= 1, got {width}")
        super().__init__(depth, k, seed)
        self._width = int(width)

    @property
    def width(self) -> int:
        return self._width

    def _finish(self, value: int) -> int:
        return value % self._width

    def __repr__(self) -> str:
        return f"BinHash(depth={self.depth}, width={self._width}, k={self.k}, seed={self.seed})"


# ------------------------- single-counter Tug-of-War -------------------------
def tug_of_war_sketch(data: Iterable[int], sign_hash: SignHash, row: int = 0) -> int:
    """Sum of ``sign_hash`` signs over a stream: one AGMS counter."""
    return sum(sign_hash.hash(x, row) for x in data)


def estimate_frequency(value: int, sketches: Sequence[float], sign_hash: SignHash) -> float:
    """Mean of the per-row estimates ``sketches[r] * sign(value, r)``."""
    if not sketches:
        raise ValueError("at least one sketch counter is required")
    total = 0.0
    for row, counter in enumerate(sketches):
        total += counter * sign_hash.hash(value, row)
    return total / len(sketches)


# ------------------------------ balance check --------------------------------
@dataclass(frozen=True)
class RowBalance:
    row: int
    total: int
    deviation: float
    passed: bool


@dataclass(frozen=True)
class SignBalanceReport:
    n: int
    depth: int
    rows: Tuple[RowBalance, ...]

    @property
    def all_passed(self) -> bool:
        return all(r.passed for r in self.rows)


def sign_balance_report(
    n: int = 10_000, depth: int = 5, seed: int = 42, tolerance: float = 0.1
) -> SignBalanceReport:
    """
    Sum ``SignHash.hash(i, row)`` over ``i = 1..n`` for each row.

    A 4-wise independent sign hash is balanced, so ``|sum| / n`` should sit
    close to zero; rows whose deviation reaches ``tolerance`` fail.
    """
    if n < 1:
        raise ValueError("n must be positive")
    signs = SignHash(depth, seed=seed)
    rows = []
    for row in range(depth):
        total = sum(signs.hash(i, row) for i in range(1, n + 1))
        deviation = abs(total) / n
        rows.append(RowBalance(row=row, total=total, deviation=deviation, passed=deviation < tolerance))
    report = SignBalanceReport(n=n, depth=depth, rows=tuple(rows))
    logger.info("sign balance over %d inputs: all_passed=%s", n, report.all_passed)
    return report


__all__ = [
    "MERSENNE_PRIME",
    "ACCUMULATOR_BITS",
    "HashCoefficients",
    "fast_mersenne_mod",
    "to_field",
    "poly_hash",
    "PolynomialHashFamily",
    "SignHash",
    "BinHash",
    "tug_of_war_sketch",
    "estimate_frequency",
    "RowBalance",
    "SignBalanceReport",
    "sign_balance_report",
]


# ----------------------------- quick self-test --------------------------------
if __name__ == "__main__":
    result = sign_balance_report(10_000, 5)
    print(f"sign balance over {result.n} values, {result.depth} hash functions:")
    for r in result.rows:
        status = "PASS" if r.passed else "FAIL"
        print(f"  row {r.row}: sum={r.total:+d} deviation={r.deviation:.6f} {status}")
    print("all rows balanced" if result.all_passed else "some rows unbalanced")
    raise SystemExit(0 if result.all_passed else 1)
