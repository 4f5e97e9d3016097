from __future__ import annotations

# Read-side statistics.
#
# Only the running totals (submitted / confirmed / cancelled / revenue) are
# kept incrementally by the Dispatcher. Queue size, per-priority counts and the
# number of requests sitting at counters are derived fresh from live state on
# every call.

from dataclasses import dataclass, field
from typing import Any, Iterable

from .models import Counter, PriorityClass
from .priority_queue import PriorityQueue


@dataclass
class Totals:
    """Counters the Dispatcher bumps directly on transitions."""

    submitted: int = 0
    confirmed: int = 0
    cancelled: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class QueueStats:
    size: int
    by_priority: dict[PriorityClass, int] = field(default_factory=dict)
    assigned: int = 0
    submitted: int = 0
    confirmed: int = 0
    cancelled: int = 0
    revenue: float = 0.0
    success_rate: float = 0.0

    def to_message(self) -> dict[str, Any]:
        return {
            "type": "stats",
            "size": self.size,
            "by_priority": {p.name: n for p, n in self.by_priority.items()},
            "assigned": self.assigned,
            "submitted": self.submitted,
            "confirmed": self.confirmed,
            "cancelled": self.cancelled,
            "revenue": self.revenue,
            "success_rate": self.success_rate,
        }


class StatsAggregator:
    """Computes `QueueStats` views. Never mutates what it reads."""

    def compute(self, *, queue: PriorityQueue, counters: Iterable[Counter], totals: Totals) -> QueueStats:
        assigned = sum(1 for c in counters if c.current is not None)
        submitted = totals.submitted
        return QueueStats(
            size=len(queue),
            by_priority=queue.count_by_priority(),
            assigned=assigned,
            submitted=submitted,
            confirmed=totals.confirmed,
            cancelled=totals.cancelled,
            revenue=totals.revenue,
            success_rate=(totals.confirmed / submitted) if submitted else 0.0,
        )
