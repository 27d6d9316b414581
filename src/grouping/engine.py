"""
Iterative two-group clustering.

Each call runs a fixed number of refinement rounds:
1. Distance from every point to the two current centers
2. Assign each point to the nearer center (ties go to center 0)
3. Partition points by assignment, keeping input order
4. Recompute each center as its members' mean, or carry the previous
   center forward when the cluster has fewer than 2 members

Intermediate buffers live in a per-round BufferScope. Only the two centers
and the assignment list cross round boundaries.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence, Union

from src.core.backends import get_backend
from src.core.buffers import BufferScope, BufferTracker
from src.core.logger import GroupLogger
from src.core.point import Point

from .config import GroupingConfig, MIN_GROUP_SIZE
from .models import (
    CenterOutcome,
    GroupResult,
    RoundOutcome,
    CENTER_CARRIED,
    CENTER_RECOMPUTED,
    NUM_GROUPS,
)

PointLike = Union[Point, Sequence[float]]


def _as_point(value: PointLike) -> Point:
    if isinstance(value, Point):
        return value
    return Point.from_array(value)


def recenter(backend, members, previous: Point) -> CenterOutcome:
    """
    Choose a cluster's center for this round.

    Args:
        backend: Compute backend
        members: Backend matrix of the cluster's points
        previous: Center the cluster had entering the round

    Returns:
        CENTER_RECOMPUTED with the members' mean when there are at least
        MIN_GROUP_SIZE members, else CENTER_CARRIED with `previous`
    """
    member_count = backend.size(members)
    if member_count >= MIN_GROUP_SIZE:
        return CenterOutcome(CENTER_RECOMPUTED, backend.centroid(members), member_count)
    return CenterOutcome(CENTER_CARRIED, previous, member_count)


def refine_round(
    backend,
    matrix,
    centers: tuple[Point, Point],
    round_num: int,
    scope: BufferScope,
    logger: Optional[GroupLogger] = None,
) -> RoundOutcome:
    """Run one assign-then-recenter pass. Buffers are registered with `scope`."""
    center_matrix = scope.track(backend.to_matrix(centers))
    distances = scope.track(backend.distances(center_matrix, matrix))
    if logger:
        logger.trace(f"Distances, round {round_num}", distances)

    assignments = backend.assign(distances)

    outcomes = []
    for cluster in range(NUM_GROUPS):
        mask = scope.track(backend.mask(assignments, cluster))
        members = scope.track(backend.gather(matrix, mask))
        if logger:
            logger.trace(f"Points for group {cluster}, round {round_num}", members)
        outcomes.append(recenter(backend, members, centers[cluster]))

    return RoundOutcome(round_num, assignments, (outcomes[0], outcomes[1]))


def group_points(
    points: Sequence[PointLike],
    seed_centers: Sequence[PointLike],
    config: Optional[GroupingConfig] = None,
    logger: Optional[GroupLogger] = None,
    tracker: Optional[BufferTracker] = None,
) -> GroupResult:
    """
    Split points into two groups around the seed centers.

    Args:
        points: Points to group (read only)
        seed_centers: Exactly two starting centers
        config: Round count and backend (defaults if None)
        logger: Optional event logger
        tracker: Buffer tracker to account allocations against

    Returns:
        GroupResult with the last round's assignments and centers

    Raises:
        ValueError: If seed_centers does not hold exactly two points, or
            config is invalid
    """
    config = (config or GroupingConfig()).validate()
    if len(seed_centers) != NUM_GROUPS:
        raise ValueError(f"Expected {NUM_GROUPS} seed centers, got {len(seed_centers)}")

    seeds = (_as_point(seed_centers[0]), _as_point(seed_centers[1]))
    points = [_as_point(p) for p in points]
    backend = get_backend(config.backend)

    if tracker is None:
        tracker = BufferTracker()
    if logger and tracker.on_release is None:
        tracker.on_release = logger.log_release

    if logger:
        logger.log_group_start(
            len(points), [s.to_array() for s in seeds], config.refinements, backend.name
        )

    # Too few points to form any group
    if len(points) < MIN_GROUP_SIZE:
        result = GroupResult([0] * len(points), seeds)
        if logger:
            _log_result(logger, result)
        return result

    centers = seeds
    assignments = [0] * len(points)
    round_num = None
    try:
        with tracker.scope() as call_scope:
            matrix = call_scope.track(backend.to_matrix(points))
            for round_num in range(config.refinements):
                with tracker.scope() as round_scope:
                    outcome = refine_round(backend, matrix, centers, round_num, round_scope, logger)
                centers = outcome.centers
                assignments = outcome.assignments
                if logger:
                    logger.log_round_end(
                        round_num,
                        assignments,
                        [o.to_dict() for o in outcome.outcomes],
                        [o.recomputed for o in outcome.outcomes],
                    )
    except Exception as e:
        if logger:
            logger.log_error(f"{type(e).__name__}: {e}", round_num)
        raise

    result = GroupResult(assignments, centers)
    if logger:
        logger.log_memory("Buffers after grouping", tracker.memory())
        _log_result(logger, result)
    return result


async def group_points_async(
    points: Sequence[PointLike],
    seed_centers: Sequence[PointLike],
    config: Optional[GroupingConfig] = None,
    logger: Optional[GroupLogger] = None,
    tracker: Optional[BufferTracker] = None,
) -> GroupResult:
    """Awaitable group_points; the result is only produced after all rounds."""
    return await asyncio.to_thread(group_points, points, seed_centers, config, logger, tracker)


def _log_result(logger: GroupLogger, result: GroupResult) -> None:
    logger.log_group_end(
        [c.to_array() for c in result.centers],
        result.counts(),
        [result.is_default(k) for k in range(NUM_GROUPS)],
    )
