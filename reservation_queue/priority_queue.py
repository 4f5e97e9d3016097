from __future__ import annotations

# The waiting line.
#
# Not a FIFO: entries are ordered by (priority desc, arrival asc). New entries
# are spliced in after the last entry of equal-or-higher priority, so existing
# entries are never re-sorted and ties keep submission order.
#
# This class is not locked on its own; the Dispatcher owns it and serializes
# every call.

import itertools
import math
from typing import Any, Iterator, Mapping

from .errors import InvalidInput, QueueEmpty, QueueFull
from .models import PriorityClass, Request, parse_priority
from .timing import estimate_wait_minutes


class PriorityQueue:
    """Bounded, stable priority queue of pending requests."""

    def __init__(
        self,
        *,
        capacity: int = 200,
        minutes_per_request: float = 4.0,
        first_request_id: int = 1001,
        categories: frozenset[str] | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.minutes_per_request = minutes_per_request
        self.categories = categories
        self._entries: list[Request] = []
        self._ids = itertools.count(first_request_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Request]:
        return iter(list(self._entries))

    def is_empty(self) -> bool:
        return not self._entries

    def is_full(self) -> bool:
        return len(self._entries) >= self.capacity

    # -------------------- admission --------------------

    def submit(
        self,
        *,
        category: str,
        priority: Any,
        quantity: int,
        amount: float,
        now: float,
        metadata: Mapping[str, Any] | None = None,
    ) -> Request:
        """Validate, estimate the wait and splice a new request into place.

        Raises `InvalidInput` or `QueueFull` before anything is touched, so a
        rejected submission does not consume an id.
        """
        prio = parse_priority(priority)
        self._validate(category=category, quantity=quantity, amount=amount, metadata=metadata)
        if self.is_full():
            raise QueueFull(f"queue is at capacity ({self.capacity})")

        ahead = self.count_at_or_above(prio)
        meta = dict(metadata or {})
        request = Request(
            request_id=next(self._ids),
            category=category,
            priority=prio,
            quantity=int(quantity),
            amount=float(amount),
            submitted_at=now,
            estimated_wait_minutes=estimate_wait_minutes(
                ahead=ahead, priority=prio, minutes_per_request=self.minutes_per_request
            ),
            metadata=meta,
        )
        self._entries.insert(self._insertion_index(prio), request)
        return request

    def _validate(self, *, category: str, quantity: int, amount: float, metadata: Any) -> None:
        if not isinstance(category, str) or not category:
            raise InvalidInput("category must be a non-empty string")
        if self.categories is not None and category not in self.categories:
            raise InvalidInput(f"unknown category {category!r}")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("quantity must be a positive integer")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidInput("amount must be a non-negative number")
        if not math.isfinite(amount) or amount < 0:
            raise InvalidInput("amount must be a finite, non-negative number")
        if metadata is not None and not isinstance(metadata, Mapping):
            raise InvalidInput("metadata must be a mapping")

    def _insertion_index(self, priority: PriorityClass) -> int:
        # First position whose priority is strictly lower; append otherwise.
        for i, entry in enumerate(self._entries):
            if entry.priority < priority:
                return i
        return len(self._entries)

    def count_at_or_above(self, priority: PriorityClass) -> int:
        return sum(1 for entry in self._entries if entry.priority >= priority)

    # -------------------- removal --------------------

    def take(self, *, specialization: str | None = None) -> Request:
        """Remove and return the next request for a counter.

        With a specialization, the first entry of that category wins; when
        nothing matches, the front entry is taken anyway so specialized
        counters never starve.
        """
        if not self._entries:
            raise QueueEmpty("no pending requests")

        index = 0
        if specialization is not None:
            for i, entry in enumerate(self._entries):
                if entry.category == specialization:
                    index = i
                    break
        return self._entries.pop(index)

    # -------------------- lookup --------------------

    def locate(self, request_id: int) -> tuple[int, Request] | None:
        """(1-based position, entry) for a queued request, or None."""
        for i, entry in enumerate(self._entries, start=1):
            if entry.request_id == request_id:
                return i, entry
        return None

    def position(self, request_id: int) -> int | None:
        """1-based position in service order, or None if not queued."""
        for i, entry in enumerate(self._entries, start=1):
            if entry.request_id == request_id:
                return i
        return None

    def count_by_priority(self) -> dict[PriorityClass, int]:
        counts = {p: 0 for p in PriorityClass}
        for entry in self._entries:
            counts[entry.priority] += 1
        return counts
