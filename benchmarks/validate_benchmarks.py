#!/usr/bin/env python3
"""Validate benchmark outputs against regression thresholds.

This script is intended to run in CI after ``benchmarks/bench_agms.py``. It
reads CSV outputs from ``bench_out`` (or a supplied directory) and enforces
conservative performance and accuracy targets so regressions surface early.
"""

from __future__ import annotations

import argparse
import json
import math
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd


# Point-query error as a fraction of the stream's L2 norm.  Fast-AGMS keeps
# this near sqrt(1/width); 0.25 flags broken hashing without being noisy.
POINT_REL_ERROR_MAX = 0.25
JOIN_REL_ERROR_MAX = 0.25
# Pure-Python updates touch depth rows with two polynomial evaluations each.
THROUGHPUT_MIN_UPS = 5_000
LATENCY_P95_MAX_US = 1_000.0
COVER_P95_MAX_US = 500.0


def _load_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Expected benchmark artifact missing: {path}")
    return pd.read_csv(path)


def _check_accuracy(df: pd.DataFrame) -> Tuple[bool, Dict[str, float]]:
    if df.empty:
        return True, {"overall": 0.0}
    worst = df.groupby(["distribution"])["rel_error"].quantile(0.95).to_dict()
    overall = max(worst.values())
    worst["overall"] = overall
    return overall <= POINT_REL_ERROR_MAX, worst


def _check_join(df: pd.DataFrame) -> Tuple[bool, float]:
    maximum = float(df["rel_error"].max()) if not df.empty else 0.0
    return maximum <= JOIN_REL_ERROR_MAX, maximum


def _check_throughput(df: pd.DataFrame) -> Tuple[bool, float]:
    minimum = float(df["updates_per_sec"].min()) if not df.empty else float("inf")
    return minimum >= THROUGHPUT_MIN_UPS, minimum


def _check_latency(df: pd.DataFrame, limit: float) -> Tuple[bool, float]:
    if df.empty:
        return True, 0.0
    p95 = float(df["latency_us"].quantile(0.95))
    return p95 <= limit, p95


def _check_cover_size(df: pd.DataFrame, domain: int) -> Tuple[bool, int]:
    largest = int(df["intervals"].max()) if not df.empty else 0
    return largest <= 2 * math.ceil(math.log2(domain)), largest


def _summarise(results: Dict[str, Dict[str, object]]) -> str:
    lines: List[str] = ["# Benchmark validation summary", ""]
    lines.append("| Check | Threshold | Observed | Status |")
    lines.append("| --- | --- | --- | --- |")
    for name, payload in results.items():
        status = "PASS" if payload["ok"] else "FAIL"
        lines.append(f"| {name} | {payload['threshold']} | {payload['observed']} | {status} |")
    lines.append("")
    lines.append("```json")
    lines.append(json.dumps(results, indent=2, sort_keys=True))
    lines.append("```")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("outdir", nargs="?", default="bench_out", help="Directory containing benchmark CSVs")
    parser.add_argument("--summary", default="bench_summary.md", help="Filename for the generated markdown summary")
    parser.add_argument("--domain", type=int, default=1 << 20, help="Domain used for the cover timings")
    args = parser.parse_args()

    outdir = Path(args.outdir)
    accuracy = _load_csv(outdir / "accuracy.csv")
    join = _load_csv(outdir / "join.csv")
    throughput = _load_csv(outdir / "update_throughput.csv")
    latency = _load_csv(outdir / "query_latency.csv")
    cover = _load_csv(outdir / "cover.csv")

    summary: Dict[str, Dict[str, object]] = {}

    accuracy_ok, accuracy_obs = _check_accuracy(accuracy)
    summary["Point query p95 rel error"] = {
        "threshold": f"<= {POINT_REL_ERROR_MAX}",
        "observed": {name: round(value, 6) for name, value in accuracy_obs.items()},
        "ok": accuracy_ok,
    }

    join_ok, join_obs = _check_join(join)
    summary["Join rel error"] = {
        "threshold": f"<= {JOIN_REL_ERROR_MAX}",
        "observed": round(join_obs, 6),
        "ok": join_ok,
    }

    throughput_ok, throughput_obs = _check_throughput(throughput)
    summary["Update throughput"] = {
        "threshold": f">= {THROUGHPUT_MIN_UPS} updates/sec",
        "observed": round(throughput_obs, 2),
        "ok": throughput_ok,
    }

    latency_ok, latency_obs = _check_latency(latency, LATENCY_P95_MAX_US)
    summary["Query latency p95"] = {
        "threshold": f"<= {LATENCY_P95_MAX_US} µs",
        "observed": round(latency_obs, 2),
        "ok": latency_ok,
    }

    cover_ok, cover_obs = _check_latency(cover, COVER_P95_MAX_US)
    summary["Cover latency p95"] = {
        "threshold": f"<= {COVER_P95_MAX_US} µs",
        "observed": round(cover_obs, 2),
        "ok": cover_ok,
    }

    size_ok, size_obs = _check_cover_size(cover, args.domain)
    summary["Cover size"] = {
        "threshold": f"<= 2*log2({args.domain})",
        "observed": size_obs,
        "ok": size_ok,
    }

    summary_path = outdir / args.summary
    summary_path.write_text(_summarise(summary), encoding="utf-8")

    print(summary_path.read_text(encoding="utf-8"))

    if not all(item["ok"] for item in summary.values()):
        raise SystemExit("Benchmark regression detected; see summary above.")


if __name__ == "__main__":
    main()
