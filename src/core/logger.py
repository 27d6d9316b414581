"""
Structured logging for grouping runs.

Console output gated by verbosity, plus an optional JSONL file with
typed events for analysis.

Event types:
- group_start: Point count, seeds, refinements, backend
- round_end: Assignments and center outcomes for one round
- memory: Live buffer statistics
- group_end: Final centers and group counts
- error: Exception raised mid-call
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

VERBOSITY_NONE = "none"
VERBOSITY_INFO = "info"
VERBOSITY_TRACE = "trace"

VERBOSITY_LEVELS = {
    VERBOSITY_NONE: 0,
    VERBOSITY_INFO: 1,
    VERBOSITY_TRACE: 2,
}


def check_verbosity(verbosity: str) -> str:
    if not isinstance(verbosity, str) or verbosity not in VERBOSITY_LEVELS:
        raise ValueError(
            f"Unknown verbosity '{verbosity}'. Choose from: {', '.join(VERBOSITY_LEVELS)}"
        )
    return verbosity


class GroupLogger:
    def __init__(self, output_dir: Optional[Path] = None, verbosity: str = VERBOSITY_NONE):
        """
        Initialize logger.

        Args:
            output_dir: Directory for grouping.jsonl (None = console only)
            verbosity: none, info or trace
        """
        self.verbosity = check_verbosity(verbosity)
        self.file_handle = None
        self.log_file = None

        if output_dir is not None:
            self.output_dir = Path(output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.output_dir / "grouping.jsonl"
            self.file_handle = open(self.log_file, 'a')

    def _enabled(self, level: str) -> bool:
        return VERBOSITY_LEVELS[self.verbosity] >= VERBOSITY_LEVELS[level]

    def _print(self, level: str, prefix: str, data: Any = None) -> None:
        if not self._enabled(level):
            return
        label = level.capitalize()
        if data is None:
            print(f"{label} - {prefix}")
        elif isinstance(data, str):
            print(f"{label} - {prefix} {data}")
        else:
            # Matrices print on their own lines
            print(f"{label} - {prefix}")
            print(data)
        print("---")

    def info(self, prefix: str, data: Any = None) -> None:
        self._print(VERBOSITY_INFO, prefix, data)

    def trace(self, prefix: str, data: Any = None) -> None:
        self._print(VERBOSITY_TRACE, prefix, data)

    def log_release(self, buffer_id: int, status: str) -> None:
        """Buffer release callback for BufferTracker."""
        self.trace(f"Buffer {buffer_id}", status)

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        if self.file_handle is None:
            return
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()

    def log_group_start(self, num_points: int, seeds: list, refinements: int, backend: str) -> None:
        """
        Log start of a grouping call.

        Args:
            num_points: Number of points to group
            seeds: The two seed centers as [x, y] pairs
            refinements: Fixed round count
            backend: Compute backend name
        """
        self.info("Grouping", f"{num_points} points, {refinements} rounds, backend={backend}")
        self._write_event("group_start", {
            "num_points": num_points,
            "seeds": seeds,
            "refinements": refinements,
            "backend": backend,
        })

    def log_round_end(
        self,
        round_num: int,
        assignments: list[int],
        outcomes: list[dict],
        recomputed: list[bool],
    ) -> None:
        """
        Log one refinement round.

        Args:
            round_num: Round index (0-based)
            assignments: Cluster index per point
            outcomes: Per-cluster center outcome dicts
            recomputed: Per-cluster flag, True when the center was recomputed
        """
        for cluster, fresh in enumerate(recomputed):
            if fresh:
                self.info(f"Group {cluster}, round {round_num}", "Cluster can be grouped")
            else:
                self.info(f"Group {cluster}, round {round_num}", "Cluster cannot be grouped, using default")
        self._write_event("round_end", {
            "round": round_num,
            "assignments": assignments,
            "outcomes": outcomes,
        })

    def log_memory(self, label: str, stats: dict) -> None:
        """Log live buffer statistics."""
        self.info(label, json.dumps(stats, indent=4))
        self._write_event("memory", {"label": label, **stats})

    def log_group_end(self, centers: list, counts: list[int], defaults: list[bool]) -> None:
        """
        Log completion of a grouping call.

        Args:
            centers: Final centers as [x, y] pairs
            counts: Member count per cluster
            defaults: Whether each cluster is default
        """
        self.info("Centroids", str(centers))
        self._write_event("group_end", {
            "centers": centers,
            "counts": counts,
            "defaults": defaults,
        })

    def log_error(self, message: str, round_num: Optional[int] = None) -> None:
        """Log an exception raised during grouping."""
        self.info("Error", message)
        data: dict[str, Any] = {"message": message}
        if round_num is not None:
            data["round"] = round_num
        self._write_event("error", data)

    def close(self) -> None:
        """Close log file."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
