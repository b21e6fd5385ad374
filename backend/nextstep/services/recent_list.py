"""Capped, duplicate-free "most recent" lists used by the insight counters."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, TypeVar

T = TypeVar("T")


class InsertionPolicy(str, Enum):
    # Append at the tail only when absent; evict from the head.
    KEEP_EXISTING = "keep_existing"
    # Move (or insert) to the front; evict from the tail.
    PROMOTE = "promote"


@dataclass(frozen=True)
class RecentUniqueList:
    cap: int
    policy: InsertionPolicy

    def push(self, items: Sequence[T], value: T) -> List[T]:
        """Return a new list with `value` recorded; `items` is not modified."""
        current = list(items)
        if self.policy is InsertionPolicy.KEEP_EXISTING:
            if value not in current:
                current.append(value)
            return current[-self.cap:]

        current = [item for item in current if item != value]
        current.insert(0, value)
        return current[: self.cap]

    def push_all(self, items: Sequence[T], values: Iterable[T]) -> List[T]:
        current = list(items)
        for value in values:
            current = self.push(current, value)
        return current


BEST_COMPLETION_TIMES = RecentUniqueList(cap=5, policy=InsertionPolicy.KEEP_EXISTING)
MOST_COMPLETED_CATEGORIES = RecentUniqueList(cap=5, policy=InsertionPolicy.PROMOTE)
FREQUENT_TEMPLATES = RecentUniqueList(cap=10, policy=InsertionPolicy.PROMOTE)
