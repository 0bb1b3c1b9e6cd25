#!/usr/bin/env python3
"""
Benchmark script for GIF generation performance.

Tests:
- Frame rendering (serial, one worker)
- Frame rendering (parallel)
- GIF encoding
- Full PGN to GIF generation

Usage:
    python benchmark.py game.pgn [--runs N]
"""

import argparse
import statistics
import sys
import time
from pathlib import Path
from typing import Callable

from animation.encoder import GifEncoder
from config import RenderConfig
from errors import ChessGifError
from game.pgn import read_record
from game.state import GameStateMachine
from render.assets import AssetBundle
from services.gif_generator import build_animation, generate_game_gif, render_frames_parallel
from utils.stats import get_system_specs


def benchmark(
    name: str,
    func: Callable[[], None],
    iterations: int = 3,
) -> dict:
    """
    Run a benchmark and return timing statistics.

    Args:
        name: Name of the benchmark
        func: Function to benchmark
        iterations: Number of iterations to run

    Returns:
        Dictionary with timing statistics
    """
    times = []

    for i in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = time.perf_counter() - start
        times.append(elapsed)
        print(f"  Run {i + 1}/{iterations}: {elapsed:.3f}s")

    return {
        "name": name,
        "iterations": iterations,
        "min": min(times),
        "max": max(times),
        "mean": statistics.mean(times),
        "stdev": statistics.stdev(times) if len(times) > 1 else 0,
    }


def run_benchmarks(pgn: str, iterations: int):
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("chess-gif Benchmark Suite")
    print("=" * 60)

    for key, value in get_system_specs().items():
        print(f"  {key:<22} {value}")

    record = read_record(pgn)
    machine = GameStateMachine()
    positions = machine.run(record)
    termination = machine.termination(positions, record)
    print(f"\nBenchmark game: {len(positions)} positions, ended by {termination.kind}")

    config = RenderConfig.from_env()
    serial_config = RenderConfig.from_env(workers=1)
    assets = AssetBundle.load(config)
    results = []

    print("\n" + "-" * 60)
    print("RENDERING BENCHMARKS")
    print("-" * 60)

    print("\n[1] Frame rendering (serial)")
    results.append(benchmark(
        "Frame rendering (serial)",
        lambda: render_frames_parallel(positions, record, termination, serial_config, assets),
        iterations,
    ))

    print("\n[2] Frame rendering (parallel)")
    results.append(benchmark(
        "Frame rendering (parallel)",
        lambda: render_frames_parallel(positions, record, termination, config, assets),
        iterations,
    ))

    print("\n" + "-" * 60)
    print("ENCODING BENCHMARKS")
    print("-" * 60)

    animation = build_animation(record, config, assets)

    print("\n[3] GIF encoding")
    results.append(benchmark("GIF encoding", lambda: GifEncoder().encode(animation), iterations))

    print("\n[4] Full generation")
    results.append(benchmark("Full generation", lambda: generate_game_gif(pgn, config, assets), iterations))

    # --- Summary ---
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"\n{'Benchmark':<35} {'Mean':>10} {'Min':>10} {'Max':>10}")
    print("-" * 65)

    for r in results:
        print(
            f"{r['name']:<35} {r['mean']:>9.3f}s {r['min']:>9.3f}s {r['max']:>9.3f}s"
        )

    speedup = results[0]["mean"] / results[1]["mean"] if results[1]["mean"] > 0 else 0
    per_frame = results[3]["mean"] / len(positions) * 1000

    print("\n" + "-" * 60)
    print(f"Parallel rendering speedup: {speedup:>6.1f}x")
    print(f"Generation per frame:       {per_frame:>6.1f}ms")

    print("\n" + "=" * 60)
    print("Benchmark complete!")
    print("=" * 60)


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark GIF rendering and encoding performance")
    parser.add_argument("pgn", help="PGN file of the game to benchmark")
    parser.add_argument(
        "--runs", "-r",
        type=int,
        default=3,
        help="Number of runs per benchmark (default: 3)"
    )
    args = parser.parse_args()

    pgn = Path(args.pgn).read_text(encoding="utf-8")
    try:
        run_benchmarks(pgn, args.runs)
    except ChessGifError as e:
        print(f"Benchmark failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
