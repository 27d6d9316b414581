#!/usr/bin/env python3
"""
Grouping CLI - split 2-D points into two groups.

Usage:
    python scripts/group.py run points.yaml
    python scripts/group.py run points.yaml --refinements 5 --output result.yaml
    python scripts/group.py random 50 --seed 7
    python scripts/group.py demo
"""

import argparse
import random
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.backends import BACKENDS
from src.core.distance import get_distances
from src.core.logger import GroupLogger, VERBOSITY_INFO, VERBOSITY_TRACE
from src.core.point import Point
from src.grouping.config import GroupingConfig
from src.grouping.io import load_points_file, dump_result
from src.grouping.session import GroupingSession


def build_config(args, base: GroupingConfig) -> GroupingConfig:
    """Apply command-line overrides on top of a base config."""
    config_dict = base.to_dict()
    if args.refinements is not None:
        config_dict['refinements'] = args.refinements
    if args.backend:
        config_dict['backend'] = args.backend
    if args.verbose:
        config_dict['verbosity'] = VERBOSITY_TRACE if args.verbose > 1 else VERBOSITY_INFO
    config_dict['max_points'] = None
    return GroupingConfig.from_dict(config_dict).validate()


def run_session(args, points, seeds, config) -> int:
    """Group points once and report."""
    rng = random.Random(args.seed)
    with GroupLogger(args.log_dir, config.verbosity) as logger:
        session = GroupingSession(config, logger, rng)
        if seeds:
            session.centers = (seeds[0], seeds[1])
        for point in points:
            session.add_point(point)

        result = session.find_groups()
        if result is None:
            print(session.prompt)
            return 1

        for line in session.describe():
            print(line)
        print(f"Assignments: {result.assignments}")

        if args.output:
            dump_result(result, Path(args.output), points)
            print(f"Result written to {args.output}")
    return 0


def cmd_run(args):
    """Group points from a YAML file."""
    points, seeds, base = load_points_file(Path(args.points_file))
    config = build_config(args, base)
    print(f"Grouping {len(points)} points ({config.refinements} rounds, {config.backend})")
    return run_session(args, points, seeds, config)


def cmd_random(args):
    """Group randomly placed points."""
    config = build_config(args, GroupingConfig(seed_range=args.max_value))
    rng = random.Random(args.seed)
    points = [
        Point(float(rng.randint(0, int(args.max_value))), float(rng.randint(0, int(args.max_value))))
        for _ in range(args.count)
    ]
    print(f"Grouping {len(points)} random points in [0, {args.max_value}]")
    return run_session(args, points, None, config)


def cmd_demo(args):
    """Walk through the primitives the engine is built from."""
    print("Example 1, distance to points")
    centers = np.array([[1, 1], [10, 10]], dtype=np.float64)
    points = np.array([[2, 2], [8, 8]], dtype=np.float64)
    print(f"Center points:\n{centers}")
    print(f"Points to measure:\n{points}")
    distances = get_distances(centers, points)
    print(f"Distances from each point to each center:\n{distances}")
    print("-----")

    print("Example 2, find lesser of each pair")
    pairs = np.array([[1, 2], [5, 1], [3, 7]])
    print(f"a,b pairs:\n{pairs}")
    print(f"Index of min value of each pair: {np.argmin(pairs, axis=-1)}")
    print("-----")

    print("Example 3, group assignment")
    data = np.array([0, 10, 20, 30, 40, 50, 60, 70])
    assignments = np.array(['a', 'a', 'a', 'b', 'b', 'a', 'a', 'a'])
    mask = assignments == 'b'
    print(f"Initial data: {data}")
    print(f"Group assignments: {assignments}")
    print(f"Data mask results for b: {mask}")
    print(f"Indices of group b items: {np.flatnonzero(mask)}")
    print(f"Group b items: {data[mask]}")
    print("-----")
    return 0


def add_grouping_args(parser):
    parser.add_argument("--refinements", type=int, help="Fixed refinement rounds")
    parser.add_argument("--backend", choices=sorted(BACKENDS), help="Compute backend")
    parser.add_argument("--seed", type=int, help="Random seed for initial centers")
    parser.add_argument("--output", help="Write result YAML here")
    parser.add_argument("--log-dir", help="Directory for grouping.jsonl")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for info, -vv for trace")


def main():
    parser = argparse.ArgumentParser(
        description="Split 2-D points into two groups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # run
    p_run = subparsers.add_parser("run", help="Group points from a YAML file")
    p_run.add_argument("points_file", help="YAML file with points (and optional seeds/config)")
    add_grouping_args(p_run)

    # random
    p_random = subparsers.add_parser("random", help="Group randomly placed points")
    p_random.add_argument("count", type=int, help="Number of points")
    p_random.add_argument("--max-value", type=float, default=400.0, help="Coordinate range")
    add_grouping_args(p_random)

    # demo
    subparsers.add_parser("demo", help="Show the distance/argmin/mask primitives")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "run": cmd_run,
        "random": cmd_random,
        "demo": cmd_demo,
    }

    try:
        return commands[args.command](args)
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
