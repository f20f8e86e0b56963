"""
scripts/bench_ops_serial_vs_threaded.py

Benchmark script (NOT a unit test) comparing keybin operations when run
1) serially (KEYBIN_WORKERS=1)
2) with output partitioning across worker threads (KEYBIN_WORKERS=N)

It measures:
- transpose
- reduce_sum over the last axis
- window_max (2D pooling)
- binary add with a broadcast row

NumPy timings are printed alongside as a reference point only; keybin runs
in pure Python and is expected to be much slower.

Usage examples
--------------
# Default: one shape, 4 workers
python scripts/bench_ops_serial_vs_threaded.py

# Larger input, 8 workers
python scripts/bench_ops_serial_vs_threaded.py --H 512 --W 512 --workers 8

Notes
-----
- Output chunks are materialized on threads; CPython's GIL limits the
  speedup, so this mainly shows the partitioning overhead.
"""

from __future__ import annotations

import os
import sys

# Ensure repo_root/src is importable when running this file directly:
# repo_root/
#   src/keybin/...
#   scripts/bench_ops_serial_vs_threaded.py
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import argparse
import statistics
import time
from contextlib import contextmanager
from typing import Callable, Dict, List

import numpy as np

from keybin.infrastructure import reload_config
from keybin.infrastructure.interop import from_numpy
from keybin.infrastructure.ops import binary, reduce_sum, transpose, window_max


@contextmanager
def _workers(n: int, threshold: int):
    saved = {k: os.environ.get(k) for k in ("KEYBIN_WORKERS", "KEYBIN_PARALLEL_THRESHOLD")}
    os.environ["KEYBIN_WORKERS"] = str(n)
    os.environ["KEYBIN_PARALLEL_THRESHOLD"] = str(threshold)
    reload_config()
    try:
        yield
    finally:
        for k, v in saved.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        reload_config()


def _time_one(fn: Callable[[], None], *, warmup: int, repeats: int) -> List[float]:
    for _ in range(warmup):
        fn()

    times: List[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        times.append(t1 - t0)
    return times


def _fmt_seconds(x: float) -> str:
    if x < 1e-6:
        return f"{x*1e9:.2f} ns"
    if x < 1e-3:
        return f"{x*1e6:.2f} µs"
    if x < 1:
        return f"{x*1e3:.2f} ms"
    return f"{x:.3f} s"


def _print_row(name: str, numpy_s: float, serial_s: float, threaded_s: float) -> None:
    speedup = (serial_s / threaded_s) if threaded_s > 0 else float("inf")
    print(
        f"{name:<14}  "
        f"numpy={_fmt_seconds(numpy_s):>10}  "
        f"serial={_fmt_seconds(serial_s):>10}  "
        f"threaded={_fmt_seconds(threaded_s):>10}  "
        f"speedup={speedup:>6.2f}x"
    )


def bench_one(*, H: int, W: int, workers: int, warmup: int, repeats: int) -> None:
    rng = np.random.default_rng(0)
    x = rng.standard_normal((H, W)).astype(np.float32)
    row = x[0].copy()
    xs, xd, xb = from_numpy(x)
    rs, rd, rb = from_numpy(row)

    cases: Dict[str, tuple] = {
        "transpose": (
            lambda: np.ascontiguousarray(x.T),
            lambda: transpose(xs, xd, xb),
        ),
        "reduce_sum": (
            lambda: x.sum(axis=1),
            lambda: reduce_sum(xs, xd, xb, axes=(1,)),
        ),
        "window_max": (
            lambda: x[: H // 2 * 2, : W // 2 * 2].reshape(H // 2, 2, W // 2, 2).max(axis=(1, 3)),
            lambda: window_max(xs, xd, xb, (2, 2), 2),
        ),
        "add_row": (
            lambda: x + row,
            lambda: binary("add", xs, xd, xb, rs, rd, rb),
        ),
    }

    print("\n" + "=" * 90)
    print(f"Shape: H={H} W={W}  workers={workers}  (warmup={warmup}, repeats={repeats})")
    print("-" * 90)
    for name, (ref, op) in cases.items():
        t_numpy = _time_one(ref, warmup=warmup, repeats=repeats)
        with _workers(1, 1):
            t_serial = _time_one(op, warmup=warmup, repeats=repeats)
        with _workers(workers, 1):
            t_threaded = _time_one(op, warmup=warmup, repeats=repeats)
        _print_row(
            name,
            statistics.median(t_numpy),
            statistics.median(t_serial),
            statistics.median(t_threaded),
        )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--H", type=int, default=128)
    ap.add_argument("--W", type=int, default=128)
    ap.add_argument("--workers", type=int, default=4)
    ap.add_argument("--warmup", type=int, default=1)
    ap.add_argument("--repeats", type=int, default=5)
    args = ap.parse_args()

    bench_one(
        H=args.H,
        W=args.W,
        workers=args.workers,
        warmup=args.warmup,
        repeats=args.repeats,
    )


if __name__ == "__main__":
    main()
