"""Generate a plan from a JSON input file (and optional CSV events)."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_planner.adapters import csv_adapter, json_adapter
from focus_planner.explain import explain_plan
from focus_planner.normalize import prepare_inputs
from focus_planner.planner import frozen_clock, generate_plan, utc_now


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the focus-planner scheduler")
    parser.add_argument("--data", required=True, help="Path to JSON input (tasks, events, settings, lockedBlocks)")
    parser.add_argument("--events", help="Optional CSV of extra calendar events")
    parser.add_argument("--now", help="ISO timestamp to plan from instead of the current time")
    parser.add_argument("--respect-dependencies", action="store_true", help="Order dependencies before dependents")
    parser.add_argument("--prepare", action="store_true", help="Normalise tasks and size settings before planning")
    parser.add_argument("--out", default="outputs/plan.json", help="Where to write the plan JSON")
    parser.add_argument("--explain", action="store_true", help="Print a plain-text explanation")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        plan_input = json_adapter.parse(args.data)
        events = plan_input.events
        if args.events:
            events = events + csv_adapter.parse(args.events)
        now = json_adapter.parse_datetime(args.now, "--now") if args.now else utc_now()
    except ValueError as exc:
        parser.error(str(exc))

    tasks, settings = plan_input.tasks, plan_input.settings
    if args.prepare:
        tasks, settings = prepare_inputs(tasks, settings, now)

    plan = generate_plan(
        tasks,
        events,
        settings,
        plan_input.locked_blocks,
        clock=frozen_clock(now),
        respect_dependencies=args.respect_dependencies,
    )

    print(json.dumps(json_adapter.plan_to_dict(plan), indent=2))
    if args.explain:
        print(explain_plan(plan, tasks, settings))

    out_path = json_adapter.dump_plan(plan, args.out)
    print(f"Saved plan to {out_path}")


if __name__ == "__main__":
    main()
