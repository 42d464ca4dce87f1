"""Demo script for focus-planner."""

import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_planner.adapters import csv_adapter, json_adapter
from focus_planner.explain import explain_plan
from focus_planner.metrics import compute_plan_metrics
from focus_planner.planner import frozen_clock, generate_plan


def main() -> None:
    plan_input = json_adapter.parse("examples/sample_plan.json")
    events = plan_input.events + csv_adapter.parse("examples/sample_events.csv")
    now = datetime.fromisoformat("2025-03-03T08:00:00+01:00")

    plan = generate_plan(
        plan_input.tasks,
        events,
        plan_input.settings,
        plan_input.locked_blocks,
        clock=frozen_clock(now),
    )
    print(explain_plan(plan, plan_input.tasks, plan_input.settings))
    print("Metrics:", compute_plan_metrics(plan, plan_input.tasks, plan_input.settings))


if __name__ == "__main__":
    main()
