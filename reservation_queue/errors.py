"""Error taxonomy and the shared error envelope.

The dispatch core raises `DispatchError` subclasses. The service facade turns
them into `ErrorResponse` envelopes so every caller sees the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class DispatchError(Exception):
    """Base class for every rejected dispatch operation."""

    code = "dispatch_error"


# -------------------- families --------------------


class CapacityExceeded(DispatchError):
    code = "capacity_exceeded"


class NotFound(DispatchError):
    code = "not_found"


class InvalidState(DispatchError):
    code = "invalid_state"


class InvalidInput(DispatchError):
    code = "invalid_input"


# -------------------- concrete errors --------------------


class QueueFull(CapacityExceeded):
    code = "queue_full"


class CapacityReached(CapacityExceeded):
    """The counter pool is at its configured limit."""

    code = "capacity_reached"


class UnknownCounter(NotFound):
    code = "unknown_counter"


class RequestNotFound(NotFound):
    code = "not_found"


class QueueEmpty(InvalidState):
    code = "queue_empty"


class CounterBusy(InvalidState):
    code = "counter_busy"


class CounterInactive(InvalidState):
    code = "counter_inactive"


class NoActiveAssignment(InvalidState):
    code = "no_active_assignment"


class CannotDeactivateBusy(InvalidState):
    code = "cannot_deactivate_busy"


@dataclass(frozen=True)
class ErrorResponse:
    code: str
    message: str

    @classmethod
    def from_error(cls, exc: DispatchError) -> ErrorResponse:
        return cls(exc.code, str(exc) or exc.code)

    def to_message(self, *, corr_id: str | None = None) -> dict[str, Any]:
        msg: dict[str, Any] = {"type": "error", "code": self.code, "message": self.message}
        if corr_id is not None:
            msg["corr_id"] = corr_id
        return msg
