from __future__ import annotations

# Sample counters and reservations for demos.
#
# Mirrors the reservation counter's built-in sample set: four specialized
# counters, one general counter and six bookings across all priority classes.

from .models import PriorityClass
from .service import DispatchService

SAMPLE_COUNTERS: list[dict] = [
    {"label": "Movie Tickets", "operator": "Alice Johnson", "specialization": "movie"},
    {"label": "Flight Booking", "operator": "Bob Smith", "specialization": "flight"},
    {"label": "Train Reservations", "operator": "Carol Davis", "specialization": "train"},
    {"label": "Event Tickets", "operator": "David Wilson", "specialization": "event"},
    {"label": "General Service", "operator": "Emma Brown", "specialization": None},
]

SAMPLE_REQUESTS: list[dict] = [
    {
        "category": "movie",
        "priority": PriorityClass.NORMAL,
        "quantity": 2,
        "amount": 24.50,
        "metadata": {"customer": "John Doe", "event": "Avengers: Endgame", "location": "Cinema City Mall"},
    },
    {
        "category": "flight",
        "priority": PriorityClass.PREMIUM,
        "quantity": 1,
        "amount": 750.00,
        "metadata": {"customer": "Sarah Johnson", "event": "Flight AA123", "location": "New York to London"},
    },
    {
        "category": "train",
        "priority": PriorityClass.NORMAL,
        "quantity": 2,
        "amount": 180.00,
        "metadata": {"customer": "Mike Chen", "event": "Express Train 456", "location": "Boston to Washington"},
    },
    {
        "category": "event",
        "priority": PriorityClass.VIP,
        "quantity": 4,
        "amount": 320.00,
        "metadata": {"customer": "Lisa Williams", "event": "Concert: Rock Legends", "location": "Madison Square Garden"},
    },
    {
        "category": "flight",
        "priority": PriorityClass.EMERGENCY,
        "quantity": 1,
        "amount": 1200.00,
        "metadata": {"customer": "Emergency Travel", "event": "Emergency Flight", "location": "Medical Emergency"},
    },
    {
        "category": "hotel",
        "priority": PriorityClass.NORMAL,
        "quantity": 1,
        "amount": 450.00,
        "metadata": {"customer": "Robert Garcia", "event": "Grand Hotel Suite", "location": "Downtown Manhattan"},
    },
]


def seed(service: DispatchService) -> list[dict]:
    """Load the sample set through the service; returns the replies."""
    replies = []
    for counter in SAMPLE_COUNTERS:
        replies.append(service.handle({"type": "add_counter", **counter}))
    for request in SAMPLE_REQUESTS:
        replies.append(service.handle({"type": "submit", **request}))
    return replies
