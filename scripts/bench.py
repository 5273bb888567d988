#!/usr/bin/env python3
"""
Benchmark script for the space chart - Reproducible Performance Testing
=======================================================================

Runs a fixed number of ticks on synthetic games with a deterministic seed
and reports:
- Ticks per second
- Average time per tick (forces, collisions, halos and snapshot together)
- Remaining overlap after the run

Usage:
    python scripts/bench.py [--ticks N] [--nodes N] [--seed N]

Example:
    python scripts/bench.py --ticks 300 --nodes 800
"""

import sys
import os
import time
import argparse
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import taichi as ti

from config import TOP_GENRES, CLUSTER_CENTERS
from nodes import GameRecord
from simulation import Simulation


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Benchmark space chart layout')
    parser.add_argument('--ticks', type=int, default=300,
                        help='Number of ticks to run (default: 300)')
    parser.add_argument('--nodes', type=int, default=500,
                        help='Number of synthetic games (default: 500)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for reproducibility (default: 42)')
    parser.add_argument('--arch', choices=['cpu', 'gpu'], default='cpu',
                        help='Taichi backend (default: cpu)')
    return parser.parse_args()


def synthetic_records(n, seed):
    """Games with log-normal player counts spread over the top genres."""
    rng = np.random.default_rng(seed)
    players = np.round(rng.lognormal(mean=6.0, sigma=1.5, size=n)) + 20
    scores = rng.uniform(40, 98, size=n)
    genres = rng.integers(0, len(TOP_GENRES), size=n)
    indie = rng.random(n) < 0.5
    return [
        GameRecord(f"game-{i}", TOP_GENRES[genres[i]], float(players[i]), float(scores[i]),
                   (TOP_GENRES[genres[i]], "Indie") if indie[i] else (TOP_GENRES[genres[i]],))
        for i in range(n)
    ]


def run_benchmark(args):
    """
    Run benchmark and collect performance statistics.

    Returns:
        Dictionary with benchmark results
    """
    print(f"\n{'='*70}")
    print(f"SPACE CHART BENCHMARK")
    print(f"{'='*70}\n")
    print(f"Configuration:")
    print(f"  Nodes:         {args.nodes}")
    print(f"  Ticks:         {args.ticks}")
    print(f"  Seed:          {args.seed}")
    print(f"  Backend:       {args.arch}")
    print(f"\n")

    ti.init(arch=ti.gpu if args.arch == 'gpu' else ti.cpu, random_seed=args.seed)

    sim = Simulation(CLUSTER_CENTERS)
    sim.load(synthetic_records(args.nodes, args.seed))

    # Warm-up (first ticks include JIT compilation)
    warmup_ticks = 5
    sim.run(warmup_ticks)
    ti.sync()
    print(f"Warm-up complete ({warmup_ticks} ticks)\n")

    times_tick = []
    start_time_total = time.perf_counter()
    for t in range(args.ticks):
        t0 = time.perf_counter()
        sim.tick()
        ti.sync()
        times_tick.append(time.perf_counter() - t0)

        if (t + 1) % 50 == 0 or t == args.ticks - 1:
            print(f"  Tick {t+1:4d}/{args.ticks}: {1.0 / times_tick[-1]:6.1f} ticks/s")

    total_time = time.perf_counter() - start_time_total
    avg_tick = float(np.mean(times_tick))
    overlap = sim.max_overlap()

    print(f"\n{'='*70}")
    print(f"BENCHMARK RESULTS")
    print(f"{'='*70}\n")
    print(f"  Average rate:  {args.ticks / total_time:.2f} ticks/s")
    print(f"  Total Time:    {total_time:.2f}s")
    print(f"  Avg Tick:      {avg_tick*1000:.2f}ms")
    print(f"  Max overlap:   {overlap:.3f}px")
    print(f"\n")

    return {
        'ticks_per_s': args.ticks / total_time,
        'total_time': total_time,
        'avg_tick_ms': avg_tick * 1000,
        'max_overlap': overlap,
        'config': {
            'nodes': args.nodes,
            'ticks': args.ticks,
            'seed': args.seed,
            'arch': args.arch,
        }
    }


def main():
    """Main entry point."""
    args = parse_args()
    run_benchmark(args)

    print(f"Benchmark complete!")
    print(f"{'='*70}\n")

    return 0


if __name__ == '__main__':
    sys.exit(main())
