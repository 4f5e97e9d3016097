from __future__ import annotations

# In-process simulation driver.
#
# Drives a Dispatcher with a simulated clock instead of real time:
# - requests arrive according to a Poisson process with rate λ (requests/minute)
# - each counter pulls the next request as soon as it is free, starts service
#   immediately and finishes after base + per-ticket minutes
# - a small share of services end in a cancellation instead of a completion
#
# Events are kept in a heap ordered by (time, sequence) so simultaneous events
# are processed in the order they were scheduled.

import heapq
import itertools
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any

from .config import EngineConfig
from .dispatcher import Dispatcher
from .errors import QueueEmpty, QueueFull
from .models import CounterView, PriorityClass
from .stats import QueueStats
from .timing import compute_service_minutes, sample_exponential_interarrival

logger = logging.getLogger(__name__)

# Per-ticket prices, taken from the reservation counter's sample bookings.
UNIT_PRICES: dict[str, float] = {
    "movie": 12.25,
    "flight": 750.0,
    "train": 90.0,
    "event": 80.0,
    "hotel": 450.0,
}

DEFAULT_PRIORITY_WEIGHTS: dict[PriorityClass, float] = {
    PriorityClass.NORMAL: 0.6,
    PriorityClass.PREMIUM: 0.25,
    PriorityClass.VIP: 0.1,
    PriorityClass.EMERGENCY: 0.05,
}


class SimClock:
    """Callable clock for the Dispatcher; simulated minutes, reported in seconds."""

    def __init__(self) -> None:
        self.minutes = 0.0

    def __call__(self) -> float:
        return self.minutes * 60.0


@dataclass(order=True)
class SimEvent:
    at: float
    seq: int
    kind: str = field(compare=False)  # "arrival" | "finish"
    counter_id: int | None = field(default=None, compare=False)


@dataclass
class SimulationReport:
    stats: QueueStats
    counters: list[CounterView]
    rejected: int
    waits_by_priority: dict[PriorityClass, list[float]]

    def mean_wait_minutes(self, priority: PriorityClass) -> float | None:
        waits = self.waits_by_priority.get(priority) or []
        if not waits:
            return None
        return sum(waits) / len(waits)

    def to_message(self) -> dict[str, Any]:
        return {
            "type": "simulation_report",
            "stats": self.stats.to_message(),
            "counters": [c.to_message() for c in self.counters],
            "rejected": self.rejected,
            "mean_wait_minutes": {p.name: self.mean_wait_minutes(p) for p in PriorityClass},
        }


def run_simulation(
    *,
    num_counters: int,
    arrival_rate_per_min: float,
    duration_minutes: float,
    seed: int | None = None,
    mean_quantity: float = 2.0,
    base_minutes: float = 2.0,
    per_unit_minutes: float = 0.5,
    cancel_probability: float = 0.05,
    priority_weights: dict[PriorityClass, float] | None = None,
    categories: list[str] | None = None,
    config: EngineConfig | None = None,
) -> SimulationReport:
    """Run one simulated shift and return the final statistics.

    Args:
        num_counters: counters to open. All but the last are specialized
            (one per category, in order); the last one serves any category.
        arrival_rate_per_min: λ, requests per minute.
        duration_minutes: no events are processed after this simulated time.
        seed: if provided, the whole run is deterministic.
        mean_quantity: average tickets per request (always at least 1).
        cancel_probability: chance that a service ends in a cancellation.
    """
    if num_counters <= 0:
        raise ValueError("num_counters must be > 0")
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be > 0")
    if not 0.0 <= cancel_probability <= 1.0:
        raise ValueError("cancel_probability must be within [0, 1]")

    rng = random.Random(seed)
    cats = list(categories or UNIT_PRICES.keys())
    weights = priority_weights or DEFAULT_PRIORITY_WEIGHTS
    classes = list(weights.keys())

    clock = SimClock()
    dispatcher = Dispatcher(config=config, clock=clock)
    for i in range(1, num_counters + 1):
        specialization = cats[i - 1] if i < num_counters and i - 1 < len(cats) else None
        dispatcher.add_counter(f"Counter {i}", operator=f"Operator {i}", specialization=specialization)

    events: list[SimEvent] = []
    seq = itertools.count()

    def schedule(at: float, kind: str, counter_id: int | None = None) -> None:
        heapq.heappush(events, SimEvent(at=at, seq=next(seq), kind=kind, counter_id=counter_id))

    rejected = 0
    waits: dict[PriorityClass, list[float]] = {p: [] for p in PriorityClass}

    def dispatch_idle() -> None:
        for counter in dispatcher.counters():
            if counter.state != "available":
                continue
            try:
                assigned = dispatcher.pull_next(counter.counter_id)
            except QueueEmpty:
                return
            dispatcher.start_service(counter.counter_id)
            waits[assigned.priority].append((clock() - assigned.submitted_at) / 60.0)
            service = compute_service_minutes(
                quantity=assigned.quantity,
                base_minutes=base_minutes,
                per_unit_minutes=per_unit_minutes,
            )
            schedule(clock.minutes + service, "finish", counter.counter_id)

    schedule(sample_exponential_interarrival(rate_per_min=arrival_rate_per_min, rng=rng), "arrival")

    while events and events[0].at <= duration_minutes:
        event = heapq.heappop(events)
        clock.minutes = event.at

        if event.kind == "arrival":
            category = rng.choice(cats)
            quantity = max(1, _sample_quantity(mean=mean_quantity, rng=rng))
            try:
                dispatcher.submit(
                    category=category,
                    priority=rng.choices(classes, weights=[weights[c] for c in classes])[0],
                    quantity=quantity,
                    amount=round(quantity * UNIT_PRICES.get(category, 25.0), 2),
                    metadata={"source": "simulation"},
                )
            except QueueFull:
                rejected += 1
            schedule(
                event.at + sample_exponential_interarrival(rate_per_min=arrival_rate_per_min, rng=rng),
                "arrival",
            )
        elif event.counter_id is not None:
            if rng.random() < cancel_probability:
                dispatcher.cancel_service(event.counter_id)
            else:
                dispatcher.complete_service(event.counter_id)

        dispatch_idle()

    report = SimulationReport(
        stats=dispatcher.stats(),
        counters=dispatcher.counters(),
        rejected=rejected,
        waits_by_priority=waits,
    )
    logger.info(
        "simulation finished: submitted=%d confirmed=%d cancelled=%d rejected=%d",
        report.stats.submitted,
        report.stats.confirmed,
        report.stats.cancelled,
        rejected,
    )
    return report


def _sample_quantity(*, mean: float, rng: random.Random) -> int:
    """Sample a non-negative ticket count.

    - For mean <= 30 we use Knuth's exact Poisson sampler.
    - For mean > 30 we approximate with a Gaussian N(mean, sqrt(mean)).
    """
    if mean <= 0:
        return 0

    if mean <= 30:
        limit = math.exp(-mean)
        k = 0
        p = 1.0
        while p > limit:
            k += 1
            p *= rng.random()
        return max(0, k - 1)

    return max(0, int(rng.gauss(mean, math.sqrt(mean))))
