"""
Caller-side grouping state.

Holds the user's points and the current two centers between grouping calls.
The engine is stateless; this session carries each result's centers forward
as the seeds for the next call.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Optional

from src.core.buffers import BufferTracker
from src.core.logger import GroupLogger
from src.core.point import Point, random_seed_centroid

from .config import GroupingConfig, MIN_GROUP_SIZE
from .engine import group_points
from .models import GroupResult

PROMPT_GROUP = "Group"
PROMPT_REGROUP = "Regroup"
PROMPT_MORE_POINTS = "Add more points..."
PROMPT_MAX_POINTS = "Max points reached"


class GroupingSession:
    """Points, current centers and prompt state for one interactive session."""

    def __init__(
        self,
        config: Optional[GroupingConfig] = None,
        logger: Optional[GroupLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        # Private copy; the auto_group setter writes to it
        self.config = replace(config or GroupingConfig()).validate()
        self.logger = logger
        self.rng = rng or random.Random()
        self.tracker = BufferTracker()

        self.points: list[Point] = []
        self.centers: Optional[tuple[Point, Point]] = None
        self.last_result: Optional[GroupResult] = None
        self.prompt = PROMPT_GROUP
        self.max_reached = False

    @property
    def auto_group(self) -> bool:
        return self.config.auto_group

    @auto_group.setter
    def auto_group(self, enabled: bool) -> None:
        self.config.auto_group = enabled
        if enabled:
            self.find_groups()

    def add_point(self, point: Point) -> bool:
        """
        Add a point, regrouping if auto-group is on.

        Returns:
            False if the max point count was reached and the point was dropped
        """
        max_points = self.config.max_points
        if max_points is not None and len(self.points) >= max_points:
            self.max_reached = True
            self.prompt = PROMPT_MAX_POINTS
            return False

        self.points.append(point)
        if self.auto_group:
            self.find_groups()
        return True

    def _seeds(self) -> tuple[Point, Point]:
        if self.centers is None:
            self.centers = (
                random_seed_centroid(self.config.seed_range, self.rng),
                random_seed_centroid(self.config.seed_range, self.rng),
            )
        return self.centers

    def find_groups(self) -> Optional[GroupResult]:
        """
        Group the current points from the current centers.

        Returns:
            The result, or None when there are too few points or neither
            group is meaningful
        """
        if len(self.points) < MIN_GROUP_SIZE:
            self.prompt = PROMPT_MORE_POINTS
            return None

        result = group_points(
            self.points, self._seeds(), self.config, self.logger, self.tracker
        )
        if result.group1_is_default() and result.group2_is_default():
            self.prompt = PROMPT_MORE_POINTS
            return None

        self.centers = result.centers
        self.last_result = result
        self.prompt = PROMPT_REGROUP
        return result

    def describe(self) -> list[str]:
        """Summary line per non-default group."""
        if self.last_result is None:
            return []
        lines = []
        for k, center in enumerate(self.last_result.centers):
            if not self.last_result.is_default(k):
                lines.append(f"Center {k + 1}: {center} Total: {self.last_result.count(k):03d}")
        return lines

    def clear(self) -> None:
        """Drop all points. Current centers stay as seeds for the next grouping."""
        self.points = []
        self.last_result = None
        self.prompt = PROMPT_GROUP
        self.max_reached = False
