"""
Two-group point clustering.

Fixed-round k-means with k = 2: assign points to the nearer of two centers,
move each center to its members' mean, repeat.
"""

from .config import GroupingConfig, DEFAULT_REFINEMENTS, MIN_GROUP_SIZE, load_config
from .models import (
    CenterOutcome,
    RoundOutcome,
    GroupResult,
    CENTER_RECOMPUTED,
    CENTER_CARRIED,
)
from .engine import group_points, group_points_async, refine_round, recenter
from .session import GroupingSession

__all__ = [
    # Config
    "GroupingConfig",
    "DEFAULT_REFINEMENTS",
    "MIN_GROUP_SIZE",
    "load_config",
    # Models
    "CenterOutcome",
    "RoundOutcome",
    "GroupResult",
    "CENTER_RECOMPUTED",
    "CENTER_CARRIED",
    # Engine
    "group_points",
    "group_points_async",
    "refine_round",
    "recenter",
    # Session
    "GroupingSession",
]
