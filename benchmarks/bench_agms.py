#!/usr/bin/env python3
"""Benchmark runner for the local Fast-AGMS implementation."""

from __future__ import annotations

import argparse
import hashlib
import math
import time
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from kwise_sketch import FastAGMS, cover


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--outdir", default="bench_out", help="Directory for benchmark CSV outputs")
    parser.add_argument("--seed", type=int, default=42, help="Base seed for data and hash functions")
    parser.add_argument("--Ns", nargs="+", default=["1e4", "1e5"], help="Stream lengths to benchmark")
    parser.add_argument(
        "--shapes", nargs="+", default=["5x256", "7x1024"], help="Sketch shapes as DEPTHxWIDTH"
    )
    parser.add_argument(
        "--distributions",
        nargs="+",
        default=["uniform", "zipf", "hotspot"],
        help="Synthetic item distributions to sample",
    )
    parser.add_argument("--universe", type=int, default=100_000, help="Number of distinct item ids")
    parser.add_argument("--probes", type=int, default=200, help="Point queries per configuration")
    parser.add_argument("--domain", type=int, default=1 << 20, help="Power-of-two domain for cover timings")
    return parser.parse_args()


def _to_int_list(values: Iterable[str]) -> List[int]:
    return [int(float(v)) for v in values]


def _parse_shape(text: str) -> tuple:
    depth, width = text.lower().split("x")
    return int(depth), int(width)


def _hash_seed(seed: int, *parts: object) -> int:
    material = "::".join(str(p) for p in (seed,) + parts)
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _uniform(rng: np.random.Generator, size: int, universe: int) -> np.ndarray:
    return rng.integers(0, universe, size)


def _zipf(rng: np.random.Generator, size: int, universe: int) -> np.ndarray:
    return np.minimum(rng.zipf(1.3, size), universe) - 1


def _hotspot(rng: np.random.Generator, size: int, universe: int) -> np.ndarray:
    hot = rng.integers(0, 10, size)
    cold = rng.integers(10, universe, size)
    return np.where(rng.random(size) < 0.5, hot, cold)


DATA_GENERATORS: Dict[str, Callable[[np.random.Generator, int, int], np.ndarray]] = {
    "uniform": _uniform,
    "zipf": _zipf,
    "hotspot": _hotspot,
}


def _validate_distributions(names: Sequence[str]) -> None:
    unknown = sorted(set(names) - DATA_GENERATORS.keys())
    if unknown:
        raise ValueError(f"Unknown distributions requested: {', '.join(unknown)}")


def main() -> None:
    args = _parse_args()

    Ns = _to_int_list(args.Ns)
    shapes = [_parse_shape(s) for s in args.shapes]
    _validate_distributions(args.distributions)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    accuracy_records: List[Dict[str, object]] = []
    throughput_records: List[Dict[str, object]] = []
    latency_records: List[Dict[str, object]] = []
    join_records: List[Dict[str, object]] = []

    for dist in args.distributions:
        for N in Ns:
            data_rng = np.random.default_rng(_hash_seed(args.seed, dist, N))
            generator = DATA_GENERATORS[dist]
            left = [int(v) for v in generator(data_rng, N, args.universe)]
            right = [int(v) for v in generator(data_rng, N, args.universe)]
            truth_left = Counter(left)
            truth_right = Counter(right)
            l2 = math.sqrt(sum(c * c for c in truth_left.values()))
            exact_join = sum(c * truth_right[item] for item, c in truth_left.items())
            probes = [int(v) for v in data_rng.choice(left, size=min(args.probes, N), replace=False)]

            for depth, width in shapes:
                sketch = FastAGMS(depth, width, args.seed)
                start = time.perf_counter()
                for item in left:
                    sketch.update(item)
                update_elapsed = time.perf_counter() - start
                updates_per_sec = (N / update_elapsed) if update_elapsed > 0 else math.inf

                throughput_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "depth": depth,
                        "width": width,
                        "update_time_s": update_elapsed,
                        "updates_per_sec": updates_per_sec,
                    }
                )

                for item in probes:
                    q_start = time.perf_counter()
                    approx = sketch.query(item)
                    q_elapsed = time.perf_counter() - q_start
                    latency_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "depth": depth,
                            "width": width,
                            "latency_us": q_elapsed * 1e6,
                        }
                    )
                    accuracy_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "depth": depth,
                            "width": width,
                            "item": item,
                            "estimate": approx,
                            "exact": truth_left[item],
                            # error relative to the L2 norm of the stream
                            "rel_error": abs(approx - truth_left[item]) / l2 if l2 else 0.0,
                        }
                    )

                other = FastAGMS(depth, width, args.seed)
                other.extend(right)
                j_start = time.perf_counter()
                join = other.dot_product(sketch)
                j_elapsed = time.perf_counter() - j_start
                norm = l2 * math.sqrt(sum(c * c for c in truth_right.values()))
                join_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "depth": depth,
                        "width": width,
                        "estimate": join,
                        "exact": exact_join,
                        "rel_error": abs(join - exact_join) / norm if norm else 0.0,
                        "dot_time_s": j_elapsed,
                    }
                )

    cover_rng = np.random.default_rng(args.seed)
    cover_records: List[Dict[str, object]] = []
    for _ in range(1_000):
        a, b = sorted(int(v) for v in cover_rng.integers(0, args.domain, 2))
        c_start = time.perf_counter()
        intervals = cover(a, b, args.domain)
        cover_records.append(
            {
                "a": a,
                "b": b,
                "intervals": len(intervals),
                "latency_us": (time.perf_counter() - c_start) * 1e6,
            }
        )

    accuracy_path = outdir / "accuracy.csv"
    throughput_path = outdir / "update_throughput.csv"
    latency_path = outdir / "query_latency.csv"
    join_path = outdir / "join.csv"
    cover_path = outdir / "cover.csv"

    pd.DataFrame.from_records(accuracy_records).to_csv(accuracy_path, index=False)
    pd.DataFrame.from_records(throughput_records).to_csv(throughput_path, index=False)
    pd.DataFrame.from_records(latency_records).to_csv(latency_path, index=False)
    pd.DataFrame.from_records(join_records).to_csv(join_path, index=False)
    pd.DataFrame.from_records(cover_records).to_csv(cover_path, index=False)

    print("Benchmark artifacts written to:")
    for path in (accuracy_path, throughput_path, latency_path, join_path, cover_path):
        print(f"  {path}")


if __name__ == "__main__":
    main()
