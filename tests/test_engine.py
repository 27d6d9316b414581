"""
Test the two-group refinement engine
"""

import asyncio
import random
from unittest.mock import patch

import pytest

from src.core.backends import NumpyBackend
from src.core.buffers import BufferTracker
from src.core.point import Point
from src.grouping import (
    GroupingConfig,
    GroupResult,
    group_points,
    group_points_async,
    recenter,
    refine_round,
    CENTER_CARRIED,
    CENTER_RECOMPUTED,
)

SQUARE = [Point(0, 0), Point(0, 10), Point(10, 0), Point(10, 10)]
SQUARE_SEEDS = (Point(1, 1), Point(9, 9))

LINE = [Point(0, 0), Point(1, 0), Point(2, 0), Point(10, 0), Point(11, 0)]
LINE_SEEDS = (Point(0, 0), Point(2, 0))


def approx_point(point, x, y):
    return point.x == pytest.approx(x) and point.y == pytest.approx(y)


def test_square_single_round():
    """Equidistant corners tie to cluster 0; lone corner keeps its seed"""
    print("Testing square scenario with 1 round...")

    result = group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=1))

    # (0,10) and (10,0) are sqrt(82) from both seeds
    assert result.assignments == [0, 0, 0, 1], f"Got {result.assignments}"
    assert approx_point(result.centers[0], 10 / 3, 10 / 3)
    assert result.centers[1] == Point(9, 9), "Single-member cluster must keep its seed"
    assert not result.group1_is_default()
    assert result.group2_is_default()
    print(f"  ✓ Assignments {result.assignments}, centers {result.centers[0]} {result.centers[1]}")


def test_empty_second_cluster():
    """All points near seed 0; cluster 1 keeps (100, 100)"""
    points = [Point(5, 5), Point(5, 6), Point(5, 7)]
    seeds = (Point(5, 6), Point(100, 100))

    result = group_points(points, seeds)

    assert result.assignments == [0, 0, 0]
    assert result.centers[0] == Point(5.0, 6.0)
    assert result.centers[1] == Point(100, 100)
    assert result.is_default(1)
    assert not result.is_default(0)
    assert result.counts() == [3, 0]


def test_fixed_round_count_changes_result():
    """No early exit: more rounds can move points"""
    one = group_points(LINE, LINE_SEEDS, GroupingConfig(refinements=1))
    two = group_points(LINE, LINE_SEEDS, GroupingConfig(refinements=2))

    assert one.assignments == [0, 0, 1, 1, 1]
    assert two.assignments == [0, 0, 0, 1, 1]
    assert approx_point(two.centers[0], 1.0, 0.0)
    assert approx_point(two.centers[1], 10.5, 0.0)
    print(f"  ✓ R=1 {one.assignments} vs R=2 {two.assignments}")


def test_zero_rounds_returns_seeds():
    """R=0 returns the seeds and an all-zero assignment"""
    result = group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=0))
    assert result.assignments == [0, 0, 0, 0]
    assert result.centers == SQUARE_SEEDS


def test_too_few_points():
    """Fewer than 2 points: no rounds, both groups default"""
    for points in ([], [Point(3, 3)]):
        result = group_points(points, SQUARE_SEEDS)
        assert result.assignments == [0] * len(points)
        assert result.centers == SQUARE_SEEDS
        assert result.group1_is_default() and result.group2_is_default()


def test_coincident_seeds():
    """Identical seeds send everything to cluster 0 on the first round"""
    points = [Point(0, 0), Point(4, 0), Point(8, 0)]
    seeds = (Point(2, 2), Point(2, 2))

    result = group_points(points, seeds, GroupingConfig(refinements=1))

    assert result.assignments == [0, 0, 0]
    assert result.centers[0] == Point(4.0, 0.0)
    assert result.centers[1] == Point(2, 2)
    assert result.group2_is_default()

    # Cluster 0 moves away, cluster 1 picks up one point but never recenters
    later = group_points(points, seeds, GroupingConfig(refinements=5))
    assert later.assignments == [1, 0, 0]
    assert later.centers[0] == Point(6.0, 0.0)
    assert later.centers[1] == Point(2, 2)
    assert later.group2_is_default()


def test_undersized_cluster_carries_center_across_rounds():
    """A lone member never moves its center, however many rounds run"""
    result = group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=7))
    assert result.assignments == [0, 0, 0, 1]
    assert result.centers[1] == Point(9, 9)


def test_deterministic():
    """Identical inputs give identical outputs"""
    rng = random.Random(11)
    points = [Point(rng.uniform(0, 400), rng.uniform(0, 400)) for _ in range(60)]
    seeds = (Point(50, 50), Point(350, 350))

    first = group_points(points, seeds)
    second = group_points(points, seeds)

    assert first.assignments == second.assignments
    assert first.centers == second.centers
    assert len(first.assignments) == len(points)
    assert set(first.assignments) <= {0, 1}


def test_backends_agree():
    """Reference and numpy backends produce the same grouping"""
    rng = random.Random(3)
    points = [Point(rng.randint(0, 100), rng.randint(0, 100)) for _ in range(40)]
    seeds = (Point(10, 10), Point(90, 90))

    fast = group_points(points, seeds, GroupingConfig(backend="numpy"))
    reference = group_points(points, seeds, GroupingConfig(backend="python"))

    assert fast.assignments == reference.assignments
    for a, b in zip(fast.centers, reference.centers):
        assert approx_point(a, b.x, b.y)
    print(f"  ✓ Backends agree on {len(points)} points")


def test_accepts_coordinate_pairs():
    """Plain [x, y] pairs are accepted for points and seeds"""
    result = group_points([[0, 0], [0, 1], [9, 9], [9, 8]], [[0, 0], [9, 9]])
    assert result.assignments == [0, 0, 1, 1]
    assert result.centers[0] == Point(0.0, 0.5)


def test_invalid_arguments():
    """Contract violations fail fast"""
    with pytest.raises(ValueError):
        group_points(SQUARE, [Point(0, 0)])
    with pytest.raises(ValueError):
        group_points(SQUARE, [Point(0, 0), Point(1, 1), Point(2, 2)])
    with pytest.raises(ValueError):
        group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=-1))
    with pytest.raises(ValueError):
        group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(backend="webgl"))
    with pytest.raises(ValueError):
        group_points(["12", "34"], SQUARE_SEEDS)
    with pytest.raises(ValueError):
        group_points(SQUARE, ["11", "99"])


def test_round_tracks_masks_and_centers():
    """Center matrix and boolean membership masks are scoped buffers too"""
    tracker = BufferTracker()
    tracked = []
    track = tracker.track

    def record(buffer):
        tracked.append(buffer)
        return track(buffer)

    tracker.track = record
    group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=1), tracker=tracker)

    masks = [b for b in tracked if getattr(b, "dtype", None) == bool]
    shapes = [b.shape for b in tracked]
    assert len(tracked) == 7, f"Tracked shapes: {shapes}"
    assert len(masks) == 2, "Each cluster's membership mask should be tracked"
    assert all(m.shape == (4,) for m in masks)
    assert (2, 2) in shapes, "Center matrix should be tracked"
    assert tracker.memory()["num_buffers"] == 0
    print(f"  ✓ Tracked per call: {shapes}")


def test_no_buffers_leak():
    """Every buffer is released once the call returns"""
    releases = []
    tracker = BufferTracker(on_release=lambda buffer_id, status: releases.append(status))

    group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=3), tracker=tracker)

    assert tracker.memory() == {"num_buffers": 0, "num_bytes": 0}
    # points matrix + (centers, distances, 2 masks, 2 member sets) per round
    assert len(releases) == 1 + 3 * 6
    assert set(releases) == {"Disposed!"}
    print(f"  ✓ {len(releases)} buffers released, none live")


def test_no_buffers_leak_on_error():
    """Buffers are released when a round fails"""
    tracker = BufferTracker()

    with patch.object(NumpyBackend, "centroid", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            group_points(SQUARE, SQUARE_SEEDS, tracker=tracker)

    assert tracker.memory()["num_buffers"] == 0


def test_recenter_outcomes():
    """Recenter is tagged recomputed or carried"""
    backend = NumpyBackend()
    previous = Point(7, 7)

    recomputed = recenter(backend, backend.to_matrix([Point(0, 0), Point(2, 4)]), previous)
    assert recomputed.kind == CENTER_RECOMPUTED
    assert recomputed.recomputed
    assert recomputed.center == Point(1.0, 2.0)
    assert recomputed.member_count == 2

    for members in ([Point(1, 1)], []):
        carried = recenter(backend, backend.to_matrix(members), previous)
        assert carried.kind == CENTER_CARRIED
        assert carried.center == previous
        assert carried.member_count == len(members)


def test_refine_round_in_isolation():
    """One round over the square"""
    backend = NumpyBackend()
    tracker = BufferTracker()

    with tracker.scope() as scope:
        matrix = backend.to_matrix(SQUARE)
        outcome = refine_round(backend, matrix, SQUARE_SEEDS, 0, scope)
        assert tracker.memory()["num_buffers"] == 6

    assert tracker.memory()["num_buffers"] == 0
    assert outcome.round_num == 0
    assert outcome.assignments == [0, 0, 0, 1]
    assert [o.kind for o in outcome.outcomes] == [CENTER_RECOMPUTED, CENTER_CARRIED]
    assert outcome.centers[1] == Point(9, 9)


def test_async_matches_sync():
    """Awaitable form gives the same result"""
    expected = group_points(LINE, LINE_SEEDS)
    result = asyncio.run(group_points_async(LINE, LINE_SEEDS))
    assert result == expected


def test_result_serialization():
    """GroupResult round-trips through a dict"""
    result = group_points(SQUARE, SQUARE_SEEDS, GroupingConfig(refinements=1))
    data = result.to_dict()

    assert data["counts"] == [3, 1]
    assert data["defaults"] == [False, True]
    assert GroupResult.from_dict(data) == result

    with pytest.raises(ValueError):
        GroupResult.from_dict({"assignments": [], "centers": [[0, 0]]})


def run_all_tests():
    """Run all engine tests"""
    print("=" * 60)
    print("GROUPING ENGINE VALIDATION")
    print("=" * 60)
    print()

    test_square_single_round()
    test_empty_second_cluster()
    test_fixed_round_count_changes_result()
    test_zero_rounds_returns_seeds()
    test_too_few_points()
    test_coincident_seeds()
    test_undersized_cluster_carries_center_across_rounds()
    test_deterministic()
    test_backends_agree()
    test_accepts_coordinate_pairs()
    test_invalid_arguments()
    test_round_tracks_masks_and_centers()
    test_no_buffers_leak()
    test_no_buffers_leak_on_error()
    test_recenter_outcomes()
    test_refine_round_in_isolation()
    test_async_matches_sync()
    test_result_serialization()

    print()
    print("=" * 60)
    print("✅ ALL GROUPING ENGINE TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
