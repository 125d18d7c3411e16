"""Benchmark collection hooks: make the checkout importable, keep benchmarks opt-in."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config: pytest.Config) -> None:
    # pytest-benchmark writes here when run with
    # ``--benchmark-json=bench_out/pytest/results.json``.
    Path("bench_out/pytest").mkdir(parents=True, exist_ok=True)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("-m"):
        return
    skip_marker = pytest.mark.skip(reason="sketch benchmarks are opt-in; run with -m benchmark")
    for item in items:
        if "benchmark" in item.keywords:
            item.add_marker(skip_marker)
