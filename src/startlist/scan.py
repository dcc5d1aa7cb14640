#!/usr/bin/env python3
"""Scan seeds to find the most evenly spaced startlist.

Usage: startlist-scan [config.yaml] [-n MAX_SEED]
"""

import argparse
import copy
import sys
from pathlib import Path

from startlist.config import load_config
from startlist.constraints import validate_startlist
from startlist.models import total_duration
from startlist.scheduler import generate_startlist
from startlist.stats import compute_stats


def scan_seed(config: dict, seed: int) -> dict:
    """Run a single seed on a copy of the config and return summary info."""
    event = config["event"]
    windows = copy.deepcopy(config["windows"])
    competitors = [c for w in windows for c in w.competitors]

    entries = generate_startlist(
        windows, event["spacing_threshold"], event["min_spacing"],
        seed=seed, verbose=False,
    )
    result = validate_startlist(entries, competitors, event["min_spacing"],
                                event_length=total_duration(windows))
    stats = compute_stats(entries, windows, event["spacing_threshold"])

    return {
        "seed": seed,
        "ok": result["valid"],
        "warnings": len(result["warnings"]),
        "min_gap": stats["min_gap"],
        "max_gap": stats["max_gap"],
        "spread": stats["max_gap"] - stats["min_gap"],
    }


def best_seed(results: list[dict]) -> dict | None:
    """Valid result with the fewest warnings, then the smallest gap spread."""
    ok = [r for r in results if r["ok"]]
    if not ok:
        return None
    return min(ok, key=lambda r: (r["warnings"], r["spread"], r["seed"]))


def main():
    parser = argparse.ArgumentParser(
        description="Scan seeds to find the most evenly spaced startlist",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "-n", "--max-seed", type=int, default=100,
        help="Maximum seed to try (default: 100, scans 0..N-1)"
    )
    args = parser.parse_args()

    config_path = args.config
    if not Path(config_path).exists():
        print(f"Error: config file {config_path} not found")
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    max_seed = args.max_seed

    print(f"Scanning seeds 0..{max_seed - 1} using {config_path}...")
    print(f"{'Seed':>6}  {'MinGap':>6}  {'MaxGap':>6}  {'Warn':>5}  Result")
    print("-" * 50)

    results = []
    for seed in range(max_seed):
        result = scan_seed(config, seed)
        results.append(result)
        status = "OK" if result["ok"] else "FAIL"
        print(f"{seed:>6}  {result['min_gap']:>6}  {result['max_gap']:>6}  "
              f"{result['warnings']:>5}  {status}", flush=True)

    print("-" * 50)
    best = best_seed(results)
    if best is not None:
        print(f"\nBest seed: {best['seed']} (gaps {best['min_gap']}-"
              f"{best['max_gap']}, {best['warnings']} warnings)")
    else:
        print(f"\nNo valid seeds found in 0..{max_seed - 1}")

    sys.exit(0 if best is not None else 1)


if __name__ == "__main__":
    main()
