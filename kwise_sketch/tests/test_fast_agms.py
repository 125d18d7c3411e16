"""Deterministic regression tests for :mod:`kwise_sketch.fast_agms`."""
from __future__ import annotations

import math
import random
from collections import Counter

import pytest

from kwise_sketch import DimensionMismatchError, FastAGMS, IndexOutOfBoundsError, SignHash, item_id


def _demo_sketch(seed: int = 123) -> FastAGMS:
    sketch = FastAGMS(depth=8, width=64, seed=seed)
    sketch.update("a", 3)
    sketch.update("b", 2)
    sketch.update("c", 1)
    return sketch


def test_demo_stream_point_queries() -> None:
    sketch = _demo_sketch()
    assert sketch.query("a") == 3
    assert sketch.query("b") == 2
    assert sketch.query("c") == 1
    assert sketch.query("z") == 0


def test_demo_grid_layout() -> None:
    # Row 0 buckets: 'a' -> 57, 'b' -> 47, 'c' -> 38 with signs +1, +1, -1.
    row0 = FastAGMS(8, 64, 123).get_grid()[0]
    assert row0 == (0,) * 64
    grid = _demo_sketch().get_grid()
    expected = [0] * 64
    expected[57] = 3
    expected[47] = 2
    expected[38] = -1
    assert grid[0] == tuple(expected)
    assert len(grid) == 8
    assert all(len(row) == 64 for row in grid)


def test_dot_product_and_second_moment_reference() -> None:
    a = _demo_sketch()
    b = FastAGMS(8, 64, 123)
    b.update("a", 1)
    b.update("b", 4)
    assert a.dot_product(b) == 11
    assert b.dot_product(a) == 11
    assert a.second_moment() == 14


def test_dot_product_is_symmetric_with_float_weights() -> None:
    rng = random.Random(5)
    a = FastAGMS(5, 32, 9)
    b = FastAGMS(5, 32, 9)
    for _ in range(300):
        a.update(rng.randrange(1_000), rng.uniform(-2.0, 2.0))
        b.update(rng.randrange(1_000), rng.uniform(-2.0, 2.0))
    assert a.dot_product(b) == b.dot_product(a)


@pytest.mark.parametrize("other_shape", [(7, 64), (8, 32), (1, 1)])
def test_dot_product_dimension_mismatch(other_shape) -> None:
    sketch = _demo_sketch()
    other = FastAGMS(other_shape[0], other_shape[1], 123)
    with pytest.raises(DimensionMismatchError):
        sketch.dot_product(other)
    with pytest.raises(DimensionMismatchError):
        other.dot_product(sketch)


def test_dot_product_rejects_non_sketches() -> None:
    with pytest.raises(TypeError):
        _demo_sketch().dot_product([[0] * 64] * 8)  # type: ignore[arg-type]


def test_get_grid_is_a_read_only_snapshot() -> None:
    sketch = _demo_sketch()
    snapshot = sketch.get_grid()
    with pytest.raises(TypeError):
        snapshot[0][57] = 100  # type: ignore[index]
    sketch.update("a", 10)
    assert snapshot[0][57] == 3
    assert sketch.get_grid()[0][57] == 13


def test_failed_update_leaves_grid_untouched(monkeypatch: pytest.MonkeyPatch) -> None:
    sketch = _demo_sketch()
    before = sketch.get_grid()
    original = SignHash.hash

    def flaky(self, x, row=0):
        if row == 5:
            raise IndexOutOfBoundsError("simulated failure")
        return original(self, x, row)

    monkeypatch.setattr(SignHash, "hash", flaky)
    with pytest.raises(IndexOutOfBoundsError):
        sketch.update("q", 7)
    monkeypatch.undo()

    assert sketch.get_grid() == before
    assert sketch.total_weight == 6


def test_negative_weights_cancel() -> None:
    sketch = FastAGMS(4, 16, 1)
    sketch.update(42, 5)
    sketch.update(42, -5)
    assert sketch.get_grid() == ((0,) * 16,) * 4
    assert sketch.total_weight == 0


def test_fractional_weights() -> None:
    sketch = FastAGMS(4, 16, 1)
    sketch.update(7, 0.5)
    sketch.update(7, 1.0)
    assert sketch.query(7) == pytest.approx(1.5)
    assert sketch.total_weight == pytest.approx(1.5)


@pytest.mark.parametrize("weight", [float("nan"), float("inf"), -float("inf")])
def test_non_finite_weights_raise(weight: float) -> None:
    sketch = FastAGMS(4, 16, 1)
    with pytest.raises(ValueError):
        sketch.update(1, weight)
    assert sketch.get_grid() == ((0,) * 16,) * 4


@pytest.mark.parametrize("weight", ["1", None, True, [1]])
def test_non_numeric_weights_raise(weight) -> None:
    with pytest.raises(TypeError):
        FastAGMS(4, 16, 1).update(1, weight)


def test_large_integer_weights_do_not_wrap() -> None:
    sketch = FastAGMS(3, 8, 4)
    big = 1 << 70
    for _ in range(4):
        sketch.update(11, big)
    assert sketch.query(11) == 4 * big


def test_extend_matches_repeated_update() -> None:
    items = ["x", "y", "x", 5, 5, 5, b"raw"]
    a = FastAGMS(5, 32, 77)
    b = FastAGMS(5, 32, 77)
    a.extend(items)
    for item in items:
        b.update(item)
    assert a.get_grid() == b.get_grid()
    assert a.total_weight == len(items)


def test_merge_equals_single_stream() -> None:
    rng = random.Random(12)
    left = [rng.randrange(500) for _ in range(2_000)]
    right = [rng.randrange(500) for _ in range(2_000)]

    serial = FastAGMS(6, 128, 31)
    serial.extend(left + right)

    a = FastAGMS(6, 128, 31)
    b = FastAGMS(6, 128, 31)
    a.extend(left)
    b.extend(right)
    a.merge(b)

    assert a.get_grid() == serial.get_grid()
    assert a.total_weight == serial.total_weight == 4_000


def test_merge_requires_matching_hashes() -> None:
    a = FastAGMS(6, 128, 31)
    with pytest.raises(DimensionMismatchError):
        a.merge(FastAGMS(6, 128, 32))
    with pytest.raises(DimensionMismatchError):
        a.merge(FastAGMS(6, 64, 31))
    with pytest.raises(TypeError):
        a.merge("sketch")  # type: ignore[arg-type]


def test_heavy_hitter_estimate_is_accurate() -> None:
    rng = random.Random(0)
    sketch = FastAGMS(depth=7, width=256, seed=2024)
    sketch.update(1, 500)
    noise = [rng.randrange(2, 1_000_000) for _ in range(2_000)]
    sketch.extend(noise)
    truth = Counter(noise)
    truth[1] += 500

    assert abs(sketch.query(1) - 500) <= 30
    l2 = math.sqrt(sum(c * c for c in truth.values()))
    for item in list(truth)[:50]:
        assert abs(sketch.query(item) - truth[item]) <= 0.5 * l2


def test_join_size_estimate() -> None:
    a = FastAGMS(depth=9, width=512, seed=8)
    b = FastAGMS(depth=9, width=512, seed=8)
    for item in range(300):
        a.update(item, 5)
    for item in range(150, 450):
        b.update(item, 3)
    true_join = 150 * 5 * 3
    assert abs(a.dot_product(b) - true_join) <= 700


def test_from_error_rate_sizing() -> None:
    sketch = FastAGMS.from_error_rate(epsilon=0.1, delta=0.01, seed=1)
    assert sketch.width == 272
    assert sketch.depth == 5
    assert sketch.seed == 1


@pytest.mark.parametrize("epsilon,delta", [(0.0, 0.1), (1.0, 0.1), (0.1, 0.0), (0.1, 1.5)])
def test_from_error_rate_validation(epsilon: float, delta: float) -> None:
    with pytest.raises(ValueError):
        FastAGMS.from_error_rate(epsilon, delta, seed=0)


@pytest.mark.parametrize("depth,width", [(0, 8), (4, 0), (-1, -1)])
def test_invalid_dimensions(depth: int, width: int) -> None:
    with pytest.raises(ValueError):
        FastAGMS(depth, width, 0)


def test_item_ids() -> None:
    assert item_id("a") == 97
    assert item_id(b"a") == 97
    assert item_id("ab") == 0x6162
    assert item_id("é") == 0xC3A9
    assert item_id(12) == 12
    assert item_id(-3) == -3
    with pytest.raises(TypeError):
        item_id(1.0)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        item_id(None)  # type: ignore[arg-type]


def test_string_and_code_point_items_share_counters() -> None:
    sketch = FastAGMS(4, 32, 3)
    sketch.update("a", 2)
    assert sketch.query(97) == 2
