from __future__ import annotations

# The Dispatcher is the *authoritative brain* of the engine.
#
# It owns the waiting line, the counter pool and the running totals, and it is
# the only component that moves a request through its lifecycle:
#
#   PENDING -> ASSIGNED -> IN_SERVICE -> COMPLETED
#                    \            \----> CANCELLED
#                     \----------------> CANCELLED
#
# Every public method takes the same lock and validates everything before the
# first mutation, so a rejected call leaves state untouched.

import logging
import threading
import time
from typing import Any, Callable

from .config import EngineConfig
from .errors import (
    CannotDeactivateBusy,
    CapacityReached,
    CounterBusy,
    CounterInactive,
    InvalidInput,
    NoActiveAssignment,
    QueueEmpty,
    RequestNotFound,
    UnknownCounter,
)
from .models import (
    Announcement,
    Counter,
    CounterView,
    RequestStatus,
    RequestView,
)
from .priority_queue import PriorityQueue
from .stats import QueueStats, StatsAggregator, Totals

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Dispatcher:
    """Matches waiting requests to counters (testable without any driver)."""

    def __init__(self, *, config: EngineConfig | None = None, clock: Clock = time.time) -> None:
        self.config = config or EngineConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._aggregator = StatsAggregator()
        self._init_state()

    def _init_state(self) -> None:
        cfg = self.config
        self._queue = PriorityQueue(
            capacity=cfg.queue_capacity,
            minutes_per_request=cfg.minutes_per_request,
            first_request_id=cfg.first_request_id,
            categories=cfg.categories,
        )
        self._counters: dict[int, Counter] = {}
        self._next_counter_id = 1
        self._totals = Totals()

    # -------------------- counter pool --------------------

    def add_counter(self, label: str, operator: str = "", specialization: str | None = None) -> CounterView:
        with self._lock:
            if len(self._counters) >= self.config.max_counters:
                raise CapacityReached(f"counter limit reached ({self.config.max_counters})")
            if not label:
                raise InvalidInput("label required")
            if specialization is not None:
                if not specialization:
                    raise InvalidInput("specialization must be a non-empty category or None")
                cats = self.config.categories
                if cats is not None and specialization not in cats:
                    raise InvalidInput(f"unknown category {specialization!r}")

            counter = Counter(
                counter_id=self._next_counter_id,
                label=label,
                operator=operator,
                specialization=specialization,
                average_service_minutes=self.config.default_service_minutes,
            )
            self._counters[counter.counter_id] = counter
            self._next_counter_id += 1
            logger.info(
                "counter %d (%s) added, specialization=%s",
                counter.counter_id,
                label,
                specialization or "any",
            )
            return counter.view()

    def toggle_counter(self, counter_id: int) -> bool:
        """Flip the active flag; returns the new value."""
        with self._lock:
            counter = self._counter(counter_id)
            if counter.active and counter.current is not None:
                raise CannotDeactivateBusy(
                    f"counter {counter_id} is serving request {counter.current.request_id}"
                )
            counter.active = not counter.active
            logger.info("counter %d %s", counter_id, "activated" if counter.active else "deactivated")
            return counter.active

    def _counter(self, counter_id: int) -> Counter:
        counter = self._counters.get(counter_id)
        if counter is None:
            raise UnknownCounter(f"unknown counter {counter_id}")
        return counter

    # -------------------- admission --------------------

    def submit(
        self,
        category: str,
        priority: Any,
        quantity: int,
        amount: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> RequestView:
        with self._lock:
            request = self._queue.submit(
                category=category,
                priority=priority,
                quantity=quantity,
                amount=amount,
                now=self._clock(),
                metadata=metadata,
            )
            self._totals.submitted += 1
            logger.debug(
                "request %d submitted (%s, %s), est. wait %d min",
                request.request_id,
                request.priority.name,
                request.category,
                request.estimated_wait_minutes,
            )
            return request.view(position=self._queue.position(request.request_id))

    # -------------------- dispatch --------------------

    def pull_next(self, counter_id: int) -> RequestView:
        with self._lock:
            counter = self._counter(counter_id)
            if not counter.active:
                raise CounterInactive(f"counter {counter_id} is not active")
            if counter.current is not None:
                raise CounterBusy(
                    f"counter {counter_id} is processing request {counter.current.request_id}"
                )
            if self._queue.is_empty():
                raise QueueEmpty("no pending requests")

            request = self._queue.take(specialization=counter.specialization)
            request.status = RequestStatus.ASSIGNED
            request.assigned_at = self._clock()
            counter.current = request
            logger.debug("request %d assigned to counter %d", request.request_id, counter_id)
            return request.view(location="counter", counter_id=counter_id)

    def start_service(self, counter_id: int) -> RequestView:
        with self._lock:
            counter = self._counter(counter_id)
            request = counter.current
            if request is None or request.status is not RequestStatus.ASSIGNED:
                raise NoActiveAssignment(f"no assigned request waiting at counter {counter_id}")
            request.status = RequestStatus.IN_SERVICE
            request.started_at = self._clock()
            logger.debug("service started for request %d at counter %d", request.request_id, counter_id)
            return request.view(location="counter", counter_id=counter_id)

    def complete_service(self, counter_id: int) -> RequestView:
        with self._lock:
            counter = self._counter(counter_id)
            request = counter.current
            if request is None:
                raise NoActiveAssignment(f"no request being processed at counter {counter_id}")

            now = self._clock()
            if request.started_at is None:
                # Completed straight from ASSIGNED: service began at assignment.
                request.started_at = request.assigned_at
            started = request.started_at if request.started_at is not None else now
            elapsed_minutes = max(0.0, now - started) / 60.0

            counter.record_service(elapsed_minutes)
            counter.current = None
            request.status = RequestStatus.COMPLETED
            request.completed_at = now
            self._totals.confirmed += 1
            self._totals.revenue += request.amount
            logger.info(
                "request %d completed at counter %d in %.1f min (amount %.2f)",
                request.request_id,
                counter_id,
                elapsed_minutes,
                request.amount,
            )
            return request.view(location="retired", counter_id=counter_id)

    def cancel_service(self, counter_id: int) -> RequestView:
        with self._lock:
            counter = self._counter(counter_id)
            request = counter.current
            if request is None:
                raise NoActiveAssignment(f"no request being processed at counter {counter_id}")

            counter.current = None
            counter.total_cancelled += 1
            request.status = RequestStatus.CANCELLED
            request.completed_at = self._clock()
            self._totals.cancelled += 1
            logger.info("request %d cancelled at counter %d", request.request_id, counter_id)
            return request.view(location="retired", counter_id=counter_id)

    # -------------------- read side --------------------

    def stats(self) -> QueueStats:
        with self._lock:
            return self._aggregator.compute(
                queue=self._queue, counters=self._counters.values(), totals=self._totals
            )

    def find(self, request_id: int) -> RequestView:
        """Look a request up in the waiting line, then at the counters."""
        with self._lock:
            found = self._queue.locate(request_id)
            if found is not None:
                position, request = found
                return request.view(position=position)

            for counter in self._counters.values():
                cur = counter.current
                if cur is not None and cur.request_id == request_id:
                    return cur.view(location="counter", counter_id=counter.counter_id)

            raise RequestNotFound(f"request {request_id} is not queued or in service")

    def position(self, request_id: int) -> int:
        with self._lock:
            position = self._queue.position(request_id)
            if position is None:
                raise RequestNotFound(f"request {request_id} is not waiting")
            return position

    def waiting(self) -> list[RequestView]:
        """Waiting line snapshot, in service order."""
        with self._lock:
            return [r.view(position=i) for i, r in enumerate(self._queue, start=1)]

    def counters(self) -> list[CounterView]:
        with self._lock:
            return [c.view() for c in self._counters.values()]

    def announcements(self) -> list[Announcement]:
        """Who is being called to which counter, and who is being served."""
        with self._lock:
            board: list[Announcement] = []
            for counter in self._counters.values():
                cur = counter.current
                if cur is None:
                    continue
                kind = "calling" if cur.status is RequestStatus.ASSIGNED else "serving"
                board.append(
                    Announcement(
                        kind=kind,
                        counter_id=counter.counter_id,
                        counter_label=counter.label,
                        request_id=cur.request_id,
                        priority=cur.priority,
                    )
                )
            return board

    def reset(self) -> None:
        """Drop every request, counter and total; ids restart."""
        with self._lock:
            self._init_state()
            logger.info("dispatcher reset")
