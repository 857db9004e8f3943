"""
History Log

In-memory, capacity-bounded log of recent interaction checks.

Design choices
--------------
- In-memory only (no persistence across process restarts).
- Most-recent-first ordering; the oldest entries are evicted once the log
  exceeds its capacity.
- Thread-safe access using a re-entrant lock.
- Copy-on-read semantics (callers cannot mutate internal state).
- No module-level singleton: the application builds one instance at startup
  and injects it, so tests can create isolated logs.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from threading import RLock
from typing import List

from pydantic import BaseModel, Field, ConfigDict


class HistoryItem(BaseModel):
    """A single recorded interaction check."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    med_a: str
    med_b: str
    is_risky: bool
    reason: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(extra="forbid", frozen=True)


class BoundedHistoryLog:
    """
    Most-recent-first list of HistoryItem objects holding at most
    `max_items` entries.
    """

    def __init__(self, max_items: int = 10) -> None:
        """
        Parameters
        ----------
        max_items : int
            Capacity N. Must be at least 1.
        """
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._items: List[HistoryItem] = []
        self._lock = RLock()
        self.max_items = max_items

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def add(self, item: HistoryItem) -> None:
        """
        Insert `item` at the front, evicting the oldest entries beyond
        capacity.
        """
        with self._lock:
            self._items.insert(0, item)
            if len(self._items) > self.max_items:
                del self._items[self.max_items:]

    def record(self, med_a: str, med_b: str, is_risky: bool, reason: str) -> HistoryItem:
        """Build a HistoryItem for the given check, add it and return it."""
        item = HistoryItem(med_a=med_a, med_b=med_b, is_risky=is_risky, reason=reason)
        self.add(item)
        return item

    def list(self) -> List[HistoryItem]:
        """
        Return the entries, newest first.

        The returned list is a shallow copy; items themselves are immutable.
        """
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
