#!/usr/bin/env python3
"""
Benchmark DelayLine block processing against the per-sample path.

Reports mean time per block and the realtime ratio at each block size.
The first block call compiles the numba kernel, so warmup runs are
excluded from the timings.

Run with: python benchmarks/benchmark_delay.py [--runs 5] [--warmup 2]

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import argparse
import time
from dataclasses import dataclass

import numpy as np

from stereodelay import DelayLine, StereoDelay, DelayParams


@dataclass
class BenchmarkResult:
    """Result from one benchmark configuration."""
    name: str
    samples_per_run: int
    sample_rate: int
    times_s: list[float]

    @property
    def mean_time_ms(self) -> float:
        return float(np.mean(self.times_s)) * 1000

    @property
    def realtime_ratio(self) -> float:
        """Ratio vs realtime (>1 = faster than realtime)."""
        if self.mean_time_ms == 0:
            return 0.0
        return (self.samples_per_run / self.sample_rate) / (self.mean_time_ms / 1000)


def _time_runs(fn, num_runs: int, warmup_runs: int) -> list[float]:
    for _ in range(warmup_runs):
        fn()
    times = []
    for _ in range(num_runs):
        t0 = time.perf_counter()
        fn()
        times.append(time.perf_counter() - t0)
    return times


def run_benchmarks(
    block_sizes=(64, 256, 1024, 4096),
    duration_s: float = 2.0,
    sample_rate: int = 44100,
    num_runs: int = 5,
    warmup_runs: int = 2,
) -> list[BenchmarkResult]:
    total = int(duration_s * sample_rate)
    rng = np.random.default_rng(0)
    mono = rng.uniform(-1.0, 1.0, total)
    stereo = rng.uniform(-1.0, 1.0, (total, 2))
    results = []

    for block_size in block_sizes:
        line = DelayLine(sample_rate, delay_ms=123.45, feedback_pct=50.0, mix_pct=50.0)
        out = np.zeros(block_size)

        def mono_blocks():
            for start in range(0, total - block_size + 1, block_size):
                line.process_block(mono[start:start + block_size], out=out)

        results.append(BenchmarkResult(
            f"DelayLine block={block_size}", total, sample_rate,
            _time_runs(mono_blocks, num_runs, warmup_runs),
        ))

        fx = StereoDelay(sample_rate, params=DelayParams(123.45, 50.0, 50.0))
        stereo_out = np.zeros((block_size, 2))

        def stereo_blocks():
            for start in range(0, total - block_size + 1, block_size):
                fx.process_block(stereo[start:start + block_size], out=stereo_out)

        results.append(BenchmarkResult(
            f"StereoDelay block={block_size}", total, sample_rate,
            _time_runs(stereo_blocks, num_runs, warmup_runs),
        ))

    line = DelayLine(sample_rate, delay_ms=123.45, feedback_pct=50.0, mix_pct=50.0)
    short = mono[: sample_rate // 10]

    def per_sample():
        for x in short:
            line.process_sample(x)

    results.append(BenchmarkResult(
        "DelayLine process_sample", len(short), sample_rate,
        _time_runs(per_sample, num_runs, 0),
    ))
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[1])
    parser.add_argument("--runs", type=int, default=5)
    parser.add_argument("--warmup", type=int, default=2)
    parser.add_argument("--duration", type=float, default=2.0, help="Seconds of audio")
    args = parser.parse_args()

    print("stereodelay benchmark")
    print(f"  Runs: {args.runs} (warmup {args.warmup}), {args.duration}s of audio\n")
    print(f"{'Benchmark':<32} {'Mean (ms)':>12} {'x Realtime':>12}")
    print("-" * 58)
    for r in run_benchmarks(
        duration_s=args.duration, num_runs=args.runs, warmup_runs=args.warmup
    ):
        print(f"{r.name:<32} {r.mean_time_ms:>12.2f} {r.realtime_ratio:>12.1f}")


if __name__ == "__main__":
    main()
