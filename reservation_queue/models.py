from __future__ import annotations

# Entities of the dispatch engine.
#
# `Request` and `Counter` are the mutable records owned by the Dispatcher.
# Callers never get them directly: they receive frozen `RequestView` /
# `CounterView` snapshots so nothing outside the Dispatcher lock can mutate
# live state.

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from .errors import InvalidInput


class PriorityClass(IntEnum):
    """Total order, EMERGENCY highest."""

    NORMAL = 1
    PREMIUM = 2
    VIP = 3
    EMERGENCY = 4

    # Bank and hospital token desks call the second tier "senior citizen".
    SENIOR = 2


class RequestStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_SERVICE = "in_service"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def parse_priority(value: Any) -> PriorityClass:
    """Accept a PriorityClass, its integer value or its (case-insensitive) name."""
    if isinstance(value, PriorityClass):
        return value
    if isinstance(value, bool):
        raise InvalidInput(f"unknown priority {value!r}")
    if isinstance(value, int):
        try:
            return PriorityClass(value)
        except ValueError:
            raise InvalidInput(f"unknown priority {value!r}") from None
    if isinstance(value, str):
        try:
            return PriorityClass[value.strip().upper()]
        except KeyError:
            raise InvalidInput(f"unknown priority {value!r}") from None
    raise InvalidInput(f"unknown priority {value!r}")


@dataclass
class Request:
    """One reservation/ticket moving through the lifecycle."""

    request_id: int
    category: str
    priority: PriorityClass
    quantity: int
    amount: float
    submitted_at: float
    estimated_wait_minutes: int
    metadata: dict[str, Any] = field(default_factory=dict)
    status: RequestStatus = RequestStatus.PENDING
    assigned_at: float | None = None
    started_at: float | None = None
    completed_at: float | None = None

    def view(self, *, location: str = "queue", position: int | None = None, counter_id: int | None = None) -> RequestView:
        return RequestView(
            request_id=self.request_id,
            category=self.category,
            priority=self.priority,
            quantity=self.quantity,
            amount=self.amount,
            status=self.status,
            submitted_at=self.submitted_at,
            assigned_at=self.assigned_at,
            started_at=self.started_at,
            completed_at=self.completed_at,
            estimated_wait_minutes=self.estimated_wait_minutes,
            metadata=dict(self.metadata),
            location=location,
            position=position,
            counter_id=counter_id,
        )


@dataclass(frozen=True)
class RequestView:
    """Read-only snapshot of a request plus where it currently sits."""

    request_id: int
    category: str
    priority: PriorityClass
    quantity: int
    amount: float
    status: RequestStatus
    submitted_at: float
    assigned_at: float | None
    started_at: float | None
    completed_at: float | None
    estimated_wait_minutes: int
    metadata: dict[str, Any]
    location: str  # "queue" | "counter" | "retired"
    position: int | None = None  # 1-based, only while queued
    counter_id: int | None = None

    def to_message(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "category": self.category,
            "priority": self.priority.name,
            "quantity": self.quantity,
            "amount": self.amount,
            "status": self.status.value,
            "submitted_at": self.submitted_at,
            "assigned_at": self.assigned_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "estimated_wait_minutes": self.estimated_wait_minutes,
            "metadata": dict(self.metadata),
            "location": self.location,
            "position": self.position,
            "counter_id": self.counter_id,
        }


@dataclass
class Counter:
    """In-memory state for one service counter."""

    counter_id: int
    label: str
    operator: str
    specialization: str | None = None  # None accepts any category
    active: bool = True
    current: Request | None = None
    total_served: int = 0
    total_cancelled: int = 0
    average_service_minutes: float = 3.0

    def record_service(self, elapsed_minutes: float) -> None:
        # Incremental mean; total_served is bumped first.
        self.total_served += 1
        self.average_service_minutes += (elapsed_minutes - self.average_service_minutes) / self.total_served

    def view(self) -> CounterView:
        cur = self.current
        return CounterView(
            counter_id=self.counter_id,
            label=self.label,
            operator=self.operator,
            specialization=self.specialization,
            active=self.active,
            current_request_id=cur.request_id if cur is not None else None,
            current_status=cur.status if cur is not None else None,
            total_served=self.total_served,
            total_cancelled=self.total_cancelled,
            average_service_minutes=self.average_service_minutes,
        )


@dataclass(frozen=True)
class CounterView:
    counter_id: int
    label: str
    operator: str
    specialization: str | None
    active: bool
    current_request_id: int | None
    current_status: RequestStatus | None
    total_served: int
    total_cancelled: int
    average_service_minutes: float

    @property
    def state(self) -> str:
        if not self.active:
            return "inactive"
        if self.current_request_id is None:
            return "available"
        return "busy"

    def to_message(self) -> dict[str, Any]:
        return {
            "counter_id": self.counter_id,
            "label": self.label,
            "operator": self.operator,
            "specialization": self.specialization,
            "active": self.active,
            "state": self.state,
            "current_request_id": self.current_request_id,
            "current_status": self.current_status.value if self.current_status is not None else None,
            "total_served": self.total_served,
            "total_cancelled": self.total_cancelled,
            "average_service_minutes": self.average_service_minutes,
        }


@dataclass(frozen=True)
class Announcement:
    """A "calling" (assigned) or "serving" (in service) board entry."""

    kind: str
    counter_id: int
    counter_label: str
    request_id: int
    priority: PriorityClass

    def to_message(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "counter_id": self.counter_id,
            "counter_label": self.counter_label,
            "request_id": self.request_id,
            "priority": self.priority.name,
        }
