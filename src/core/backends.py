"""
Compute backends for the grouping engine.

A backend is selected explicitly by name and passed to the engine. Both
backends implement the same primitives:

    to_matrix(points)          -> point matrix
    distances(centers, matrix) -> N x M distance matrix (both matrices)
    assign(distances)          -> nearest center index per row, ties to lowest
    mask(assignments, cluster) -> boolean membership per row
    gather(matrix, mask)       -> rows where mask is set, in order
    size(matrix)               -> number of rows
    centroid(matrix)           -> Point
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .distance import get_distances, centroid
from .point import Point

__all__ = [
    "NumpyBackend",
    "PythonBackend",
    "BACKENDS",
    "get_backend",
]


class NumpyBackend:
    """Vectorized backend on float64 arrays."""

    name = "numpy"

    def to_matrix(self, points: Sequence[Point]) -> np.ndarray:
        if not points:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([p.to_array() for p in points], dtype=np.float64)

    def distances(self, centers: np.ndarray, matrix: np.ndarray) -> np.ndarray:
        return get_distances(centers, matrix)

    def assign(self, distances: np.ndarray) -> list[int]:
        if distances.shape[0] == 0:
            return []
        # argmin returns the first minimum, so exact ties go to index 0
        return [int(i) for i in np.argmin(distances, axis=-1)]

    def mask(self, assignments: list[int], cluster: int) -> np.ndarray:
        return np.asarray(assignments, dtype=np.int64) == cluster

    def gather(self, matrix: np.ndarray, mask: np.ndarray) -> np.ndarray:
        return matrix[mask]

    def size(self, matrix: np.ndarray) -> int:
        return int(matrix.shape[0])

    def centroid(self, matrix: np.ndarray) -> Point:
        return Point.from_array(centroid(matrix).tolist())


class PythonBackend:
    """Pure-Python reference backend on lists of [x, y] rows."""

    name = "python"

    def to_matrix(self, points: Sequence[Point]) -> list[list[float]]:
        return [p.to_array() for p in points]

    def distances(self, centers: list[list[float]], matrix: list[list[float]]) -> list[list[float]]:
        return [
            [math.sqrt(sum((q - r) ** 2 for q, r in zip(row, ref))) for ref in centers]
            for row in matrix
        ]

    def assign(self, distances: list[list[float]]) -> list[int]:
        assignments = []
        for row in distances:
            best_index = 0
            best_distance = math.inf
            for j, distance in enumerate(row):
                if distance < best_distance:
                    best_index = j
                    best_distance = distance
            assignments.append(best_index)
        return assignments

    def mask(self, assignments: list[int], cluster: int) -> list[bool]:
        return [a == cluster for a in assignments]

    def gather(self, matrix: list[list[float]], mask: list[bool]) -> list[list[float]]:
        return [row for row, selected in zip(matrix, mask) if selected]

    def size(self, matrix: list[list[float]]) -> int:
        return len(matrix)

    def centroid(self, matrix: list[list[float]]) -> Point:
        if not matrix:
            raise ValueError("Cannot take the centroid of an empty point set")
        n = len(matrix)
        return Point(sum(row[0] for row in matrix) / n, sum(row[1] for row in matrix) / n)


BACKENDS = {
    NumpyBackend.name: NumpyBackend,
    PythonBackend.name: PythonBackend,
}


def get_backend(name: str):
    """Instantiate a backend by name."""
    if not isinstance(name, str) or name not in BACKENDS:
        raise ValueError(f"Unknown backend '{name}'. Choose from: {', '.join(sorted(BACKENDS))}")
    return BACKENDS[name]()
