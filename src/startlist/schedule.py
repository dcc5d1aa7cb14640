#!/usr/bin/env python3
"""Startlist builder.

    startlist [config.yaml] [--seed N] [--csv]

Reads windows and competitors from the YAML config, shuffles and stabilizes
the windows, assigns start times and prints:
  - the startlist (text, or CSV with --csv)
  - a validation report
  - balance statistics

Examples:
    startlist                          # default config, random seed
    startlist --seed 42                # reproducible
    startlist club.yaml --threshold 4  # override spacing threshold
    startlist --csv > startlist.csv
"""

import argparse
import sys
from pathlib import Path

from startlist.config import load_config
from startlist.constraints import validate_startlist, format_validation_report
from startlist.models import total_duration
from startlist.output import format_startlist, format_startlist_csv
from startlist.scheduler import generate_startlist
from startlist.stabilize import StabilizationError
from startlist.stats import compute_stats, format_stats_report


def main():
    parser = argparse.ArgumentParser(
        description="Startlist builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Exit codes:
  0  Startlist valid
  1  Config error, stabilization failure or constraint violations
""",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for a reproducible startlist (overrides config)"
    )
    parser.add_argument(
        "--threshold", type=int, default=None,
        help="Spacing threshold (overrides config)"
    )
    parser.add_argument(
        "--min-spacing", type=int, default=None,
        help="Minimum spacing between starts (overrides config)"
    )
    parser.add_argument(
        "--csv", action="store_true",
        help="Print the startlist as CSV only"
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

    event = config["event"]
    windows = config["windows"]
    threshold = args.threshold if args.threshold is not None else event["spacing_threshold"]
    min_spacing = args.min_spacing if args.min_spacing is not None else event["min_spacing"]
    seed = args.seed if args.seed is not None else event["seed"]

    competitors = [c for w in windows for c in w.competitors]
    event_length = total_duration(windows)

    if not args.csv:
        print(f"Loaded {len(competitors)} competitors in {len(windows)} "
              f"windows from {config_path}")
        print(f"Generating startlist (seed={seed}, threshold={threshold}, "
              f"min spacing={min_spacing})...")

    try:
        entries = generate_startlist(windows, threshold, min_spacing,
                                     seed=seed, verbose=not args.csv)
    except (ValueError, StabilizationError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    result = validate_startlist(entries, competitors, min_spacing,
                                event_length=event_length)

    if args.csv:
        sys.stdout.write(format_startlist_csv(entries, event["start_time"]))
        sys.exit(0 if result["valid"] else 1)

    print()
    print(format_startlist(entries, event["start_time"], title=event["name"],
                           windows=windows))
    print("\n" + format_validation_report(result))
    print("\n" + format_stats_report(compute_stats(entries, windows, threshold)))

    if not result["valid"]:
        print(f"\nStartlist has {len(result['errors'])} constraint violations.")
        sys.exit(1)


if __name__ == "__main__":
    main()
