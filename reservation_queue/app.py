from __future__ import annotations

# Single-entrypoint runner.
#
#     python -m reservation_queue.app simulate --num-counters N --arrival-rate LAMBDA [--minutes M]
#     python -m reservation_queue.app demo
#
# `simulate` runs a seeded, in-process shift against the dispatch engine and
# prints the final statistics. `demo` loads the sample counters/bookings and
# walks through one dispatch round.

import argparse
import json

from .config import EngineConfig
from .log import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Reservation Queue (priority dispatch) - main entrypoint")
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--queue-capacity", type=int, default=200)
    parser.add_argument("--max-counters", type=int, default=15)
    parser.add_argument("--minutes-per-request", type=float, default=4.0)
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_sim = sub.add_parser("simulate", help="Run a simulated shift (Poisson arrivals)")
    p_sim.add_argument("--num-counters", type=int, required=True)
    p_sim.add_argument("--arrival-rate", type=float, required=True, help="λ requests/minute")
    p_sim.add_argument("--minutes", type=float, default=480.0, help="simulated shift length")
    p_sim.add_argument("--seed", type=int, default=None)
    p_sim.add_argument("--mean-quantity", type=float, default=2.0)
    p_sim.add_argument("--base-minutes", type=float, default=2.0)
    p_sim.add_argument("--per-unit-minutes", type=float, default=0.5)
    p_sim.add_argument("--cancel-probability", type=float, default=0.05)
    p_sim.add_argument("--json", action="store_true", help="print the report as JSON")

    sub.add_parser("demo", help="Load sample data and run one dispatch round")

    args = parser.parse_args()
    configure_logging(args.log_level)

    config = EngineConfig(
        queue_capacity=args.queue_capacity,
        max_counters=args.max_counters,
        minutes_per_request=args.minutes_per_request,
    )

    if args.cmd == "simulate":
        _simulate(args, config)
        return

    if args.cmd == "demo":
        _demo(config)
        return


def _simulate(args: argparse.Namespace, config: EngineConfig) -> None:
    from .simulation import run_simulation

    report = run_simulation(
        num_counters=args.num_counters,
        arrival_rate_per_min=args.arrival_rate,
        duration_minutes=args.minutes,
        seed=args.seed,
        mean_quantity=args.mean_quantity,
        base_minutes=args.base_minutes,
        per_unit_minutes=args.per_unit_minutes,
        cancel_probability=args.cancel_probability,
        config=config,
    )

    if args.json:
        print(json.dumps(report.to_message(), indent=2))
        return

    st = report.stats
    print(
        f"[simulate] submitted={st.submitted} confirmed={st.confirmed} cancelled={st.cancelled} "
        f"waiting={st.size} at_counters={st.assigned} rejected={report.rejected}"
    )
    print(f"[simulate] revenue={st.revenue:0.2f} success_rate={st.success_rate * 100:0.1f}%")
    for priority, _ in sorted(st.by_priority.items(), reverse=True):
        mean = report.mean_wait_minutes(priority)
        shown = f"{mean:0.1f} min" if mean is not None else "-"
        print(f"[simulate] mean wait {priority.name:<9} {shown}")
    for c in report.counters:
        print(
            f"[simulate] counter {c.counter_id} ({c.specialization or 'any'}): "
            f"served={c.total_served} cancelled={c.total_cancelled} avg={c.average_service_minutes:0.1f} min"
        )


def _demo(config: EngineConfig) -> None:
    from .dispatcher import Dispatcher
    from .sample_data import seed
    from .service import DispatchService

    service = DispatchService(Dispatcher(config=config))
    for reply in seed(service):
        if reply.get("type") == "submitted":
            req = reply["request"]
            print(
                f"[demo] request {req['request_id']} {req['priority']:<9} {req['category']:<6} "
                f"pos {req['position']} est. wait {req['estimated_wait_minutes']} min"
            )
        elif reply.get("type") == "error":
            print(f"[demo] error: {reply}")

    for counter in service.handle({"type": "counters"})["counters"]:
        reply = service.handle({"type": "pull_next", "counter_id": counter["counter_id"]})
        if reply.get("type") == "assigned":
            print(f"[demo] counter {counter['counter_id']} ({counter['label']}) <- request {reply['request']['request_id']}")
        else:
            print(f"[demo] counter {counter['counter_id']} ({counter['label']}): {reply['code']}")

    for a in service.handle({"type": "announcements"})["announcements"]:
        print(f"[demo] {a['kind'].upper()}: request {a['request_id']} ({a['priority']}) at counter {a['counter_id']}")

    for counter in service.handle({"type": "counters"})["counters"]:
        if counter["current_request_id"] is not None:
            service.handle({"type": "complete_service", "counter_id": counter["counter_id"]})

    st = service.handle({"type": "stats"})
    print(
        f"[demo] waiting={st['size']} confirmed={st['confirmed']} revenue={st['revenue']:0.2f} "
        f"success_rate={st['success_rate'] * 100:0.1f}%"
    )


if __name__ == "__main__":
    main()
