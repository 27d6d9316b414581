"""
2-D point value type.

Points are constructed by the caller (a click on the canvas) or by the
grouping engine (a seed or a derived centroid) and never mutated.
"""

from __future__ import annotations

import numbers
import random
from dataclasses import dataclass
from typing import Optional, Sequence


def round2(value: float) -> float:
    """Round to two decimal places."""
    return round(value * 100) / 100


@dataclass(frozen=True)
class Point:
    """Immutable (x, y) pair with value equality."""

    x: float
    y: float

    def __str__(self) -> str:
        return f"({round2(self.x):06.2f}, {round2(self.y):06.2f})"

    def to_array(self) -> list[float]:
        return [self.x, self.y]

    @classmethod
    def from_array(cls, values: Sequence[float]) -> Point:
        """
        Create from an [x, y] pair.

        Raises:
            ValueError: If values is not a pair of real numbers
        """
        if isinstance(values, (str, bytes)) or not hasattr(values, "__len__"):
            raise ValueError(f"Point needs an [x, y] pair, got {values!r}")
        if len(values) != 2:
            raise ValueError(f"Point needs exactly 2 coordinates, got {len(values)}")
        for value in values:
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"Point coordinates must be numbers, got {value!r}")
        return cls(float(values[0]), float(values[1]))


def random_seed_centroid(max_value: float, rng: Optional[random.Random] = None) -> Point:
    """
    Random seed center with integer coordinates in [0, max_value].

    Seeds are drawn across the whole canvas rather than sampled from the
    user's points.
    """
    rng = rng or random.Random()
    return Point(
        float(round(rng.random() * max_value)),
        float(round(rng.random() * max_value)),
    )
