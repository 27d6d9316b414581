"""
Buffer tracking for grouping computations.

Every intermediate array a grouping round creates is registered with a
BufferScope and released when the scope exits, on every exit path.
BufferTracker keeps live counts so a caller can check that nothing leaked.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional


def _nbytes(buffer: Any) -> int:
    nbytes = getattr(buffer, "nbytes", None)
    if nbytes is not None:
        return int(nbytes)
    return sys.getsizeof(buffer)


class BufferTracker:
    """Tracks live buffers and their total size."""

    def __init__(self, on_release: Optional[Callable[[int, str], None]] = None):
        """
        Args:
            on_release: Called with (buffer_id, status) on every release
                attempt; status is "Disposed!" or "Already disposed!".
        """
        self._live: dict[int, tuple[Any, int]] = {}   # buffer_id -> (buffer, nbytes)
        self._next_id = 0
        self.on_release = on_release

    def track(self, buffer: Any) -> int:
        """Register a buffer and return its id."""
        buffer_id = self._next_id
        self._next_id += 1
        self._live[buffer_id] = (buffer, _nbytes(buffer))
        return buffer_id

    def release(self, buffer_id: int) -> None:
        """Release a buffer. Releasing twice is a no-op."""
        entry = self._live.pop(buffer_id, None)
        if self.on_release:
            self.on_release(buffer_id, "Already disposed!" if entry is None else "Disposed!")

    def is_live(self, buffer_id: int) -> bool:
        return buffer_id in self._live

    def memory(self) -> dict:
        """Live buffer statistics."""
        return {
            "num_buffers": len(self._live),
            "num_bytes": sum(nbytes for _, nbytes in self._live.values()),
        }

    @contextmanager
    def scope(self) -> Iterator[BufferScope]:
        """Open a scope whose buffers are released on exit."""
        buffer_scope = BufferScope(self)
        try:
            yield buffer_scope
        finally:
            buffer_scope.close()


class BufferScope:
    """Buffers acquired within one lexical scope."""

    def __init__(self, tracker: BufferTracker):
        self.tracker = tracker
        self._ids: list[int] = []

    def track(self, buffer: Any) -> Any:
        """Register a buffer with this scope and hand it back."""
        self._ids.append(self.tracker.track(buffer))
        return buffer

    def close(self) -> None:
        for buffer_id in self._ids:
            self.tracker.release(buffer_id)
        self._ids = []
