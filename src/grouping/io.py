"""
YAML points files and grouping results.

Points file format:

    points:
      - [0, 0]
      - [10, 10]
    seeds:            # optional, exactly two
      - [1, 1]
      - [9, 9]
    config:           # optional GroupingConfig fields
      refinements: 5
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml

from src.core.point import Point

from .config import GroupingConfig
from .models import GroupResult


def _parse_points(values, label: str) -> list[Point]:
    if not isinstance(values, list):
        raise ValueError(f"'{label}' must be a list of [x, y] pairs")
    points = []
    for i, value in enumerate(values):
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"'{label}[{i}]' must be an [x, y] pair, got {value!r}")
        points.append(Point.from_array(value))
    return points


def load_points_file(path: Path) -> tuple[list[Point], Optional[list[Point]], GroupingConfig]:
    """
    Load points, optional seeds and optional config overrides.

    Raises:
        ValueError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Points file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Points file must contain a mapping: {path}")

    points = _parse_points(data.get("points", []), "points")

    seeds = None
    if data.get("seeds") is not None:
        seeds = _parse_points(data["seeds"], "seeds")
        if len(seeds) != 2:
            raise ValueError(f"'seeds' must hold exactly 2 points, got {len(seeds)}")

    config = GroupingConfig.from_dict(data.get("config") or {})
    return points, seeds, config


def dump_result(result: GroupResult, path: Path, points: Optional[list[Point]] = None) -> None:
    """Write a result (and optionally its points) as YAML."""
    data = result.to_dict()
    if points is not None:
        data["points"] = [p.to_array() for p in points]
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(data, f, sort_keys=False, default_flow_style=None)


def load_result(path: Path) -> GroupResult:
    """Read a result written by dump_result."""
    with open(path) as f:
        return GroupResult.from_dict(yaml.safe_load(f))
