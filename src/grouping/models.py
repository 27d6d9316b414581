"""
Data models for two-group clustering results.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.point import Point

from .config import MIN_GROUP_SIZE

# Center outcome kinds
CENTER_RECOMPUTED = "recomputed"
CENTER_CARRIED = "carried"

NUM_GROUPS = 2


@dataclass(frozen=True)
class CenterOutcome:
    """How one cluster's center was produced in a round."""

    kind: str                    # CENTER_RECOMPUTED or CENTER_CARRIED
    center: Point
    member_count: int

    @property
    def recomputed(self) -> bool:
        return self.kind == CENTER_RECOMPUTED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "center": self.center.to_array(),
            "member_count": self.member_count,
        }


@dataclass(frozen=True)
class RoundOutcome:
    """Result of one assign-then-recenter pass."""

    round_num: int
    assignments: list[int]
    outcomes: tuple[CenterOutcome, CenterOutcome]

    @property
    def centers(self) -> tuple[Point, Point]:
        return (self.outcomes[0].center, self.outcomes[1].center)


@dataclass
class GroupResult:
    """Per-point cluster assignments and the two final centers."""

    assignments: list[int]
    centers: tuple[Point, Point]

    def count(self, cluster: int) -> int:
        return sum(1 for a in self.assignments if a == cluster)

    def counts(self) -> list[int]:
        return [self.count(k) for k in range(NUM_GROUPS)]

    # If a group has 0 or 1 points, it has no meaningful center to render
    def is_default(self, cluster: int) -> bool:
        return self.count(cluster) < MIN_GROUP_SIZE

    def group1_is_default(self) -> bool:
        return self.is_default(0)

    def group2_is_default(self) -> bool:
        return self.is_default(1)

    def to_dict(self) -> dict:
        return {
            "assignments": list(self.assignments),
            "centers": [c.to_array() for c in self.centers],
            "counts": self.counts(),
            "defaults": [self.is_default(k) for k in range(NUM_GROUPS)],
        }

    @classmethod
    def from_dict(cls, data: dict) -> GroupResult:
        centers = [Point.from_array(c) for c in data["centers"]]
        if len(centers) != NUM_GROUPS:
            raise ValueError(f"Expected {NUM_GROUPS} centers, got {len(centers)}")
        return cls(
            assignments=[int(a) for a in data["assignments"]],
            centers=(centers[0], centers[1]),
        )
