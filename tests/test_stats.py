from reservation_queue.models import Counter, PriorityClass
from reservation_queue.priority_queue import PriorityQueue
from reservation_queue.stats import StatsAggregator, Totals


def test_empty_stats_have_zero_success_rate():
    st = StatsAggregator().compute(queue=PriorityQueue(), counters=[], totals=Totals())

    assert st.size == 0
    assert st.submitted == 0
    assert st.success_rate == 0.0
    assert st.by_priority == {p: 0 for p in PriorityClass}


def test_stats_are_derived_from_live_queue():
    q = PriorityQueue()
    q.submit(category="movie", priority="vip", quantity=1, amount=1.0, now=0.0)
    q.submit(category="movie", priority="normal", quantity=1, amount=1.0, now=0.0)
    q.submit(category="movie", priority="normal", quantity=1, amount=1.0, now=0.0)
    held = q.take()

    busy = Counter(counter_id=1, label="A", operator="", current=held)
    idle = Counter(counter_id=2, label="B", operator="")
    totals = Totals(submitted=4, confirmed=1, cancelled=0, revenue=12.5)

    st = StatsAggregator().compute(queue=q, counters=[busy, idle], totals=totals)

    assert st.size == 2
    assert st.by_priority[PriorityClass.NORMAL] == 2
    assert st.by_priority[PriorityClass.VIP] == 0
    assert st.assigned == 1
    assert st.success_rate == 0.25

    msg = st.to_message()
    assert msg["type"] == "stats"
    assert msg["by_priority"]["NORMAL"] == 2
    assert msg["revenue"] == 12.5


def test_compute_does_not_mutate_inputs():
    q = PriorityQueue()
    q.submit(category="movie", priority="normal", quantity=1, amount=1.0, now=0.0)
    totals = Totals(submitted=1)

    StatsAggregator().compute(queue=q, counters=[], totals=totals)

    assert len(q) == 1
    assert totals == Totals(submitted=1)
