"""Tests for :mod:`kwise_sketch.range_sketch`."""
from __future__ import annotations

import pytest

from kwise_sketch import DyadicRangeSketch, FastAGMS, InvalidRangeError

DATA = {3: 4, 5: 2, 9: 7, 12: 1}


def _build() -> DyadicRangeSketch:
    sketch = DyadicRangeSketch(domain_size=16, depth=5, width=1024, seed=10)
    for x, weight in DATA.items():
        sketch.update(x, weight)
    return sketch


def test_levels_and_seeds() -> None:
    sketch = DyadicRangeSketch(16, 3, 32, seed=100)
    assert sketch.levels == 5
    assert sketch.domain_size == 16
    assert [sketch.level_sketch(level).seed for level in range(5)] == [100, 101, 102, 103, 104]
    assert isinstance(sketch.level_sketch(0), FastAGMS)
    with pytest.raises(InvalidRangeError):
        sketch.level_sketch(5)


def test_all_ranges_match_exact_counts() -> None:
    sketch = _build()
    for a in range(16):
        for b in range(a, 16):
            truth = sum(w for x, w in DATA.items() if a <= x <= b)
            assert sketch.range_query(a, b) == truth


def test_point_queries() -> None:
    sketch = _build()
    assert sketch.point_query(9) == 7
    assert sketch.point_query(0) == 0


def test_top_level_holds_the_total() -> None:
    sketch = _build()
    assert sketch.level_sketch(4).query(0) == sum(DATA.values())


def test_extend_counts_each_value_once() -> None:
    a = DyadicRangeSketch(8, 4, 64, seed=1)
    b = DyadicRangeSketch(8, 4, 64, seed=1)
    a.extend([1, 1, 6])
    b.update(1, 2)
    b.update(6)
    for level in range(a.levels):
        assert a.level_sketch(level).get_grid() == b.level_sketch(level).get_grid()


@pytest.mark.parametrize("x", [-1, 16, 3.0, "3"])
def test_out_of_domain_updates(x) -> None:
    sketch = _build()
    with pytest.raises(InvalidRangeError):
        sketch.update(x)
    with pytest.raises(InvalidRangeError):
        sketch.point_query(x)


def test_invalid_ranges_and_domains() -> None:
    with pytest.raises(InvalidRangeError):
        DyadicRangeSketch(12, 3, 32, seed=0)
    with pytest.raises(InvalidRangeError):
        _build().range_query(4, 2)
