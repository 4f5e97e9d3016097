import pytest

from reservation_queue.config import EngineConfig
from reservation_queue.dispatcher import Dispatcher
from reservation_queue.errors import ErrorResponse, QueueFull
from reservation_queue.sample_data import SAMPLE_COUNTERS, SAMPLE_REQUESTS, seed
from reservation_queue.service import DispatchService


def test_submit_and_pull_round_trip_through_messages():
    s = DispatchService()
    added = s.handle({"type": "add_counter", "label": "Flights", "operator": "Bob", "specialization": "flight"})
    assert added["type"] == "counter_added"
    cid = added["counter"]["counter_id"]

    sub = s.handle({"type": "submit", "category": "flight", "priority": "vip", "quantity": 1, "amount": 750.0})
    assert sub["type"] == "submitted"
    assert sub["request"]["priority"] == "VIP"
    assert sub["request"]["status"] == "pending"
    assert sub["request"]["position"] == 1

    got = s.handle({"type": "pull_next", "counter_id": cid, "corr_id": "abc"})
    assert got["type"] == "assigned"
    assert got["corr_id"] == "abc"
    assert got["request"]["request_id"] == sub["request"]["request_id"]

    assert s.handle({"type": "start_service", "counter_id": cid})["type"] == "service_started"
    assert s.handle({"type": "complete_service", "counter_id": cid})["type"] == "completed"

    st = s.handle({"type": "stats"})
    assert st["confirmed"] == 1
    assert st["revenue"] == 750.0


def test_errors_become_envelopes():
    s = DispatchService(Dispatcher(config=EngineConfig(queue_capacity=1)))

    reply = s.handle({"type": "complete_service", "counter_id": 1, "corr_id": "x"})
    assert reply == {"type": "error", "code": "unknown_counter", "message": "unknown counter 1", "corr_id": "x"}

    s.handle({"type": "submit", "category": "movie", "quantity": 1})
    full = s.handle({"type": "submit", "category": "movie", "quantity": 1})
    assert full["type"] == "error"
    assert full["code"] == "queue_full"

    bad = s.handle({"type": "submit", "category": "movie", "quantity": 0})
    assert bad["code"] == "invalid_input"

    missing = s.handle({"type": "find", "request_id": 1})
    assert missing["code"] == "not_found"


def test_malformed_and_unknown_messages():
    s = DispatchService()
    assert s.handle({"type": "nope"})["code"] == "bad_request"
    assert s.handle({})["code"] == "bad_request"
    assert s.handle({"type": "pull_next"})["code"] == "bad_request"


def test_toggle_and_announcements_messages():
    s = DispatchService()
    s.handle({"type": "add_counter", "label": "General"})
    s.handle({"type": "submit", "category": "movie", "quantity": 2, "priority": 4})
    s.handle({"type": "pull_next", "counter_id": 1})

    busy = s.handle({"type": "toggle_counter", "counter_id": 1})
    assert busy["code"] == "cannot_deactivate_busy"

    board = s.handle({"type": "announcements"})["announcements"]
    assert board[0]["kind"] == "calling"
    assert board[0]["priority"] == "EMERGENCY"

    s.handle({"type": "cancel_service", "counter_id": 1})
    toggled = s.handle({"type": "toggle_counter", "counter_id": 1})
    assert toggled == {"type": "counter_toggled", "counter_id": 1, "active": False}


def test_error_response_from_error():
    err = ErrorResponse.from_error(QueueFull("queue is at capacity (1)"))
    assert err.to_message() == {"type": "error", "code": "queue_full", "message": "queue is at capacity (1)"}


def test_sample_data_seed_orders_by_priority():
    s = DispatchService()
    replies = seed(s)

    assert len(replies) == len(SAMPLE_COUNTERS) + len(SAMPLE_REQUESTS)
    assert all(r["type"] != "error" for r in replies)

    waiting = s.handle({"type": "waiting"})["requests"]
    assert [r["priority"] for r in waiting] == ["EMERGENCY", "VIP", "PREMIUM", "NORMAL", "NORMAL", "NORMAL"]
    assert [r["metadata"]["customer"] for r in waiting[3:]] == ["John Doe", "Mike Chen", "Robert Garcia"]

    # The movie counter finds its booking even though it sits behind higher priorities.
    got = s.handle({"type": "pull_next", "counter_id": 1})
    assert got["request"]["category"] == "movie"


@pytest.mark.parametrize("msg", ["oops", ["submit"], None, 42])
def test_non_dict_messages_are_bad_requests(msg):
    reply = DispatchService().handle(msg)
    assert reply["type"] == "error"
    assert reply["code"] == "bad_request"


def test_position_and_reset_messages():
    s = DispatchService()
    s.handle({"type": "add_counter", "label": "General"})
    first = s.handle({"type": "submit", "category": "movie", "quantity": 1})["request"]["request_id"]
    second = s.handle({"type": "submit", "category": "movie", "quantity": 1, "priority": "vip"})["request"]["request_id"]

    reply = s.handle({"type": "position", "request_id": first, "corr_id": "p1"})
    assert reply == {"type": "position", "request_id": first, "position": 2, "corr_id": "p1"}
    assert s.handle({"type": "position", "request_id": second})["position"] == 1
    assert s.handle({"type": "position", "request_id": 1})["code"] == "not_found"
    assert s.handle({"type": "position"})["code"] == "bad_request"

    assert s.handle({"type": "reset"}) == {"type": "reset"}
    assert s.handle({"type": "counters"})["counters"] == []
    assert s.handle({"type": "waiting"})["requests"] == []
    again = s.handle({"type": "submit", "category": "movie", "quantity": 1})
    assert again["request"]["request_id"] == 1001


def test_submit_with_bad_metadata_is_invalid_input():
    s = DispatchService()
    reply = s.handle({"type": "submit", "category": "movie", "quantity": 1, "metadata": "oops"})
    assert reply["code"] == "invalid_input"
    ok = s.handle({"type": "submit", "category": "movie", "quantity": 1})
    assert ok["request"]["request_id"] == 1001
