"""Engine configuration.

Queue and counter limits plus the timing constants used for wait estimates.
Drivers (CLI, simulation, tests) build one and hand it to the Dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    queue_capacity: int = 200
    max_counters: int = 15
    minutes_per_request: float = 4.0
    default_service_minutes: float = 3.0
    # None means "any non-empty category is accepted".
    categories: frozenset[str] | None = None
    first_request_id: int = 1001

    def __post_init__(self) -> None:
        if self.queue_capacity <= 0:
            raise ValueError("queue_capacity must be > 0")
        if self.max_counters <= 0:
            raise ValueError("max_counters must be > 0")
        if self.minutes_per_request < 0:
            raise ValueError("minutes_per_request must be >= 0")
        if self.default_service_minutes < 0:
            raise ValueError("default_service_minutes must be >= 0")
