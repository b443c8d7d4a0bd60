#!/usr/bin/env python3
"""
Shut the Box AI Benchmark — Play N turns per strategy and print score distributions.

Usage: uv run python ai_benchmark.py [--turns N] [--strategy NAME]
       uv run python ai_benchmark.py --verbose --turns 500
       uv run python ai_benchmark.py --csv --rule never
"""
import argparse
import random
import statistics
import time

from ai import (
    BestMoveStrategy,
    FirstComboStrategy,
    RandomStrategy,
    play_turn,
)
from game_engine import OneDieRule, initial_tiles
from settings import load_settings, resolve_rule


def benchmark_strategy(strategy, num_turns, rule=OneDieRule.AFTER_TOP_TILES_SHUT,
                       max_tile=12, start_seed=0, rigged=False):
    """Play num_turns fresh boards with a strategy.

    With rigged=True every roll is the one that enables the biggest move.

    Returns:
        (scores, shut_count, elapsed_seconds)
    """
    scores = []
    shut_count = 0
    t0 = time.perf_counter()
    for seed in range(start_seed, start_seed + num_turns):
        rng = random.Random(seed)
        if isinstance(strategy, RandomStrategy):
            strategy.rng = rng
        result = play_turn(initial_tiles(max_tile), strategy, rule=rule, rng=rng,
                           rigged=rigged)
        scores.append(result.score)
        if result.shut:
            shut_count += 1
    elapsed = time.perf_counter() - t0
    return scores, shut_count, elapsed


def print_results(name, scores, shut_count, elapsed, verbose=False):
    """Print formatted benchmark results.

    With verbose=True, adds stdev, median, and percentiles.
    """
    avg = sum(scores) / len(scores)
    lo = min(scores)
    hi = max(scores)
    shut_rate = shut_count / len(scores)
    per_turn = elapsed / len(scores) * 1000  # ms per turn
    print(f"  {name:15s}  avg={avg:5.1f}  min={lo:3d}  max={hi:3d}  shut={shut_rate:6.2%}  "
          f"({len(scores)} turns in {elapsed:.2f}s, {per_turn:.2f}ms/turn)")

    if verbose:
        stdev = statistics.stdev(scores) if len(scores) >= 2 else 0.0
        median = statistics.median(scores)
        sorted_scores = sorted(scores)
        n = len(sorted_scores)
        p25 = sorted_scores[n // 4]
        p75 = sorted_scores[(3 * n) // 4]
        print(f"  {'':15s}  stdev={stdev:5.1f}  median={median:4.0f}  "
              f"p25={p25:3d}  p75={p75:3d}")


def print_csv_header():
    """Print CSV header row."""
    print("strategy,turns,avg,stdev,median,min,max,shut_rate,elapsed_s")


def print_csv_row(name, scores, shut_count, elapsed):
    """Print one CSV data row."""
    avg = sum(scores) / len(scores)
    stdev = statistics.stdev(scores) if len(scores) >= 2 else 0.0
    median = statistics.median(scores)
    print(f"{name},{len(scores)},{avg:.1f},{stdev:.1f},{median:.0f},"
          f"{min(scores)},{max(scores)},{shut_count / len(scores):.4f},{elapsed:.2f}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Shut the Box AI Benchmark")
    parser.add_argument("--turns", type=int, default=1000,
                        help="Number of turns per strategy (default: 1000)")
    parser.add_argument("--strategy", choices=["random", "first", "best"],
                        help="Run only a single strategy (default: all)")
    parser.add_argument("--rule", choices=[r.value for r in OneDieRule],
                        help="One-die rule (default: from settings)")
    parser.add_argument("--max-tile", type=int,
                        help="Highest tile on the board (default: from settings)")
    parser.add_argument("--rigged", action="store_true",
                        help="Rig every roll (default: the rigged_rolls setting)")
    parser.add_argument("--settings", metavar="PATH",
                        help="Settings file (default: ~/.shutbox_settings.json)")
    parser.add_argument("--verbose", action="store_true",
                        help="Show extra statistics (stdev, median, percentiles)")
    parser.add_argument("--csv", action="store_true",
                        help="Output results as CSV")
    args = parser.parse_args(argv)
    if args.turns < 1:
        parser.error("--turns must be at least 1")

    settings = load_settings(args.settings)
    rule = OneDieRule(args.rule) if args.rule else resolve_rule(settings)
    max_tile = args.max_tile if args.max_tile is not None else settings["max_tile"]
    rigged = args.rigged or bool(settings["rigged_rolls"])
    all_strategies = {
        "random": ("Random", RandomStrategy()),
        "first": ("FirstCombo", FirstComboStrategy()),
        "best": ("BestMove", BestMoveStrategy()),
    }

    if args.strategy:
        strategies = [all_strategies[args.strategy]]
    else:
        strategies = list(all_strategies.values())

    if args.csv:
        print_csv_header()
        for name, strategy in strategies:
            scores, shut_count, elapsed = benchmark_strategy(strategy, args.turns, rule, max_tile,
                                                             rigged=rigged)
            print_csv_row(name, scores, shut_count, elapsed)
    else:
        print(f"Shut the Box AI Benchmark — {args.turns} turns per strategy ({rule.title}"
              f"{', rigged' if rigged else ''})")
        print("=" * 80)

        for name, strategy in strategies:
            scores, shut_count, elapsed = benchmark_strategy(strategy, args.turns, rule, max_tile,
                                                             rigged=rigged)
            print_results(name, scores, shut_count, elapsed, verbose=args.verbose)

        print("=" * 80)


if __name__ == "__main__":
    main()
