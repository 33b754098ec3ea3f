"""Bounded in-memory log of recent order lifecycle events."""

from collections import deque


class ActivityLog:
    def __init__(self, maxlen: int = 500):
        self._events: deque[dict] = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._events)

    def record(self, message: dict) -> None:
        self._events.append(message)

    def recent(self, limit: int = 50) -> list[dict]:
        """Newest first."""
        if limit <= 0:
            return []
        items = list(self._events)[-limit:]
        items.reverse()
        return items
