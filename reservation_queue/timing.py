from __future__ import annotations

# Timing helpers.
#
# Three small models, all in minutes:
# - the advisory wait estimate handed out at submission time
# - how long a counter takes to serve one request
#     service_minutes = base_minutes + per_unit_minutes * quantity
# - Poisson arrivals (exponential inter-arrival times) for the simulation

import random

from .models import PriorityClass

# Expedited handling per class. Advisory, not an SLA.
WAIT_MULTIPLIERS: dict[PriorityClass, float] = {
    PriorityClass.EMERGENCY: 0.2,
    PriorityClass.VIP: 0.5,
    PriorityClass.PREMIUM: 0.7,
    PriorityClass.NORMAL: 1.0,
}


def estimate_wait_minutes(*, ahead: int, priority: PriorityClass, minutes_per_request: float) -> int:
    """Estimate how long a new request will wait before being called.

    Args:
        ahead: waiting requests that will be served first (priority >= ours).
        priority: priority class of the new request.
        minutes_per_request: fixed service-time constant per request ahead.

    Returns:
        Whole minutes (truncated).
    """
    if ahead < 0:
        raise ValueError("ahead must be >= 0")
    if minutes_per_request < 0:
        raise ValueError("minutes_per_request must be >= 0")

    base = ahead * minutes_per_request
    return int(base * WAIT_MULTIPLIERS[priority])


def compute_service_minutes(*, quantity: int, base_minutes: float, per_unit_minutes: float) -> float:
    """Compute how long a counter should take for a single request.

    Args:
        quantity: number of tickets/items in the request (>= 0).
        base_minutes: fixed overhead per request (>= 0).
        per_unit_minutes: time per ticket (>= 0).
    """
    if quantity < 0:
        raise ValueError("quantity must be >= 0")
    if base_minutes < 0:
        raise ValueError("base_minutes must be >= 0")
    if per_unit_minutes < 0:
        raise ValueError("per_unit_minutes must be >= 0")

    return float(base_minutes + per_unit_minutes * quantity)


def sample_exponential_interarrival(*, rate_per_min: float, rng: random.Random | None = None) -> float:
    """Sample minutes until the next arrival of a Poisson process with rate λ.

    `rng` makes the draw deterministic in tests and seeded simulations.
    """
    if rate_per_min <= 0:
        raise ValueError("rate_per_min must be > 0")

    r = rng or random
    return float(r.expovariate(rate_per_min))
