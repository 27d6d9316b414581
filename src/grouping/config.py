"""
Configuration for grouping runs.
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

import yaml

from src.core.backends import get_backend
from src.core.logger import VERBOSITY_NONE, check_verbosity

__all__ = [
    "GroupingConfig",
    "DEFAULT_REFINEMENTS",
    "MIN_GROUP_SIZE",
    "load_config",
]

# Fixed refinement rounds per call; there is no convergence check
DEFAULT_REFINEMENTS = 10

# Clusters below this size keep their previous center and are not rendered
MIN_GROUP_SIZE = 2


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class GroupingConfig:
    """Configuration for grouping calls and sessions."""

    # Engine
    refinements: int = DEFAULT_REFINEMENTS
    backend: str = "numpy"

    # Output
    verbosity: str = VERBOSITY_NONE

    # Session
    seed_range: float = 400.0         # Random seeds fall in [0, seed_range]
    max_points: Optional[int] = 400   # None = unlimited
    auto_group: bool = False

    def validate(self) -> "GroupingConfig":
        """Raise ValueError on invalid settings."""
        if not _is_int(self.refinements):
            raise ValueError(f"refinements must be an integer, got {self.refinements!r}")
        if self.max_points is not None and not _is_int(self.max_points):
            raise ValueError(f"max_points must be an integer or None, got {self.max_points!r}")
        if isinstance(self.seed_range, bool) or not isinstance(self.seed_range, (int, float)):
            raise ValueError(f"seed_range must be a number, got {self.seed_range!r}")
        if self.refinements < 0:
            raise ValueError(f"refinements must be >= 0, got {self.refinements}")
        if self.seed_range < 0:
            raise ValueError(f"seed_range must be >= 0, got {self.seed_range}")
        if self.max_points is not None and self.max_points < 0:
            raise ValueError(f"max_points must be >= 0, got {self.max_points}")
        get_backend(self.backend)
        check_verbosity(self.verbosity)
        return self

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GroupingConfig":
        """Create from dict, filtering out unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def load_config(path: Path) -> GroupingConfig:
    """
    Load config from a YAML file.

    Accepts either a bare mapping or one nested under a `config:` key.
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Config file not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    if isinstance(data.get("config"), dict):
        data = data["config"]
    return GroupingConfig.from_dict(data).validate()
