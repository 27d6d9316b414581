"""
Distance and centroid primitives on (N, 2) point matrices.
"""

from __future__ import annotations

import numpy as np


def get_distances(centers: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Euclidean distance from every point to every center.

    Args:
        centers: (M, D) reference points
        points: (N, D) query points

    Returns:
        (N, M) matrix, dist[i][j] = |points[i] - centers[j]|
    """
    centers = np.asarray(centers, dtype=np.float64)
    points = np.asarray(points, dtype=np.float64)
    # Empty inputs arrive as shape (0,) from plain lists
    dim = centers.shape[-1] if centers.ndim == 2 else points.shape[-1] if points.ndim == 2 else 2
    centers = centers.reshape(-1, dim)
    points = points.reshape(-1, dim)
    # Broadcast (N, 1, D) against (1, M, D)
    diff = points[:, np.newaxis, :] - centers[np.newaxis, :, :]
    return np.sqrt(np.square(diff).sum(axis=-1))


def centroid(points: np.ndarray) -> np.ndarray:
    """Coordinate-wise mean of a non-empty (N, D) matrix."""
    points = np.asarray(points, dtype=np.float64)
    if points.shape[0] == 0:
        raise ValueError("Cannot take the centroid of an empty point set")
    return points.mean(axis=0)
