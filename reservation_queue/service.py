from __future__ import annotations

# In-process request/response facade around the Dispatcher.
#
# IMPORTANT: This file contains two layers:
# 1) `Dispatcher` calls (pure logic, in dispatcher.py)
# 2) `DispatchService.handle()` which accepts dict messages and always replies
#    with a dict: either a typed success message or an error envelope.
#
# Drivers (CLI, simulation, tests) talk to the engine through plain messages so
# none of them needs to know about the exception hierarchy.

import logging
from typing import Any, Callable

from .dispatcher import Dispatcher
from .errors import DispatchError, ErrorResponse

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], dict[str, Any]]


class DispatchService:
    """Message adapter around the Dispatcher business logic."""

    def __init__(self, dispatcher: Dispatcher | None = None) -> None:
        self.dispatcher = dispatcher or Dispatcher()
        self._handlers: dict[str, Handler] = {
            "submit": self._submit,
            "pull_next": self._pull_next,
            "start_service": self._start_service,
            "complete_service": self._complete_service,
            "cancel_service": self._cancel_service,
            "add_counter": self._add_counter,
            "toggle_counter": self._toggle_counter,
            "find": self._find,
            "stats": self._stats,
            "counters": self._counters,
            "waiting": self._waiting,
            "announcements": self._announcements,
            "position": self._position,
            "reset": self._reset,
        }

    def handle(self, msg: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(msg, dict):
            return ErrorResponse("bad_request", "message must be a dict").to_message()
        mtype = msg.get("type")
        corr_id = msg.get("corr_id") if isinstance(msg.get("corr_id"), str) else None

        handler = self._handlers.get(mtype) if isinstance(mtype, str) else None
        if handler is None:
            return ErrorResponse("bad_request", f"unknown message type {mtype!r}").to_message(corr_id=corr_id)

        try:
            reply = handler(msg)
        except DispatchError as e:
            logger.warning("%s rejected: %s (%s)", mtype, e.code, e)
            return ErrorResponse.from_error(e).to_message(corr_id=corr_id)
        except (KeyError, TypeError, ValueError) as e:
            return ErrorResponse("bad_request", f"malformed {mtype} message: {e}").to_message(corr_id=corr_id)

        if corr_id is not None:
            reply["corr_id"] = corr_id
        return reply

    # -------------------- request handlers --------------------

    def _submit(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.submit(
            category=msg["category"],
            priority=msg.get("priority", "normal"),
            quantity=msg["quantity"],
            amount=msg.get("amount", 0.0),
            metadata=msg.get("metadata") or {},
        )
        return {"type": "submitted", "request": view.to_message()}

    def _pull_next(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.pull_next(int(msg["counter_id"]))
        return {"type": "assigned", "request": view.to_message()}

    def _start_service(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.start_service(int(msg["counter_id"]))
        return {"type": "service_started", "request": view.to_message()}

    def _complete_service(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.complete_service(int(msg["counter_id"]))
        return {"type": "completed", "request": view.to_message()}

    def _cancel_service(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.cancel_service(int(msg["counter_id"]))
        return {"type": "cancelled", "request": view.to_message()}

    def _add_counter(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.add_counter(
            label=str(msg["label"]),
            operator=str(msg.get("operator", "")),
            specialization=msg.get("specialization"),
        )
        return {"type": "counter_added", "counter": view.to_message()}

    def _toggle_counter(self, msg: dict[str, Any]) -> dict[str, Any]:
        counter_id = int(msg["counter_id"])
        active = self.dispatcher.toggle_counter(counter_id)
        return {"type": "counter_toggled", "counter_id": counter_id, "active": active}

    def _find(self, msg: dict[str, Any]) -> dict[str, Any]:
        view = self.dispatcher.find(int(msg["request_id"]))
        return {"type": "found", "request": view.to_message()}

    def _position(self, msg: dict[str, Any]) -> dict[str, Any]:
        request_id = int(msg["request_id"])
        position = self.dispatcher.position(request_id)
        return {"type": "position", "request_id": request_id, "position": position}

    def _stats(self, msg: dict[str, Any]) -> dict[str, Any]:
        return self.dispatcher.stats().to_message()

    def _counters(self, msg: dict[str, Any]) -> dict[str, Any]:
        return {"type": "counters", "counters": [c.to_message() for c in self.dispatcher.counters()]}

    def _waiting(self, msg: dict[str, Any]) -> dict[str, Any]:
        return {"type": "waiting", "requests": [r.to_message() for r in self.dispatcher.waiting()]}

    def _announcements(self, msg: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": "announcements",
            "announcements": [a.to_message() for a in self.dispatcher.announcements()],
        }

    def _reset(self, msg: dict[str, Any]) -> dict[str, Any]:
        self.dispatcher.reset()
        return {"type": "reset"}
