from datetime import datetime, timezone

import pytest

from focus_planner.metrics import compute_plan_metrics
from focus_planner.planner import frozen_clock, generate_plan
from focus_planner.schema import PlanResult, Settings, Task

UTC = timezone.utc
NOW = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)
SETTINGS = Settings(
    timezone="UTC",
    planning_horizon_days=1,
    work_day_start="09:00",
    work_day_end="18:00",
    lunch_start="12:00",
    lunch_end="13:00",
    max_daily_minutes=360,
)


def make_task(task_id, minutes):
    return Task(
        id=task_id,
        title=task_id,
        estimated_minutes=minutes,
        priority=1,
        interruptible=True,
        min_block_minutes=30,
    )


def test_metrics_for_empty_plan():
    metrics = compute_plan_metrics(PlanResult([], [], [], NOW))
    assert metrics["total_blocks"] == 0
    assert metrics["scheduled_minutes"] == 0
    assert metrics["avg_confidence"] == 0.0


def test_metrics_summarise_blocks_and_shortfall():
    tasks = [make_task("a", 90), make_task("b", 600)]
    plan = generate_plan(tasks, [], SETTINGS, clock=frozen_clock(NOW))
    metrics = compute_plan_metrics(plan, tasks, SETTINGS)

    assert metrics["scheduled_minutes"] == 360
    assert metrics["minutes_by_day"] == {"2025-01-06": 360}
    assert metrics["minutes_by_task"] == {"a": 90, "b": 270}
    assert metrics["unscheduled_minutes"] == 330
    assert metrics["warning_counts"] == {"INSUFFICIENT_TIME": 1}
    assert metrics["completion_ratio"] == {"a": 1.0, "b": pytest.approx(0.45)}
    assert metrics["daily_utilization"] == {"2025-01-06": 1.0}
    assert 0.6 <= metrics["avg_confidence"] <= 0.65


def test_unscheduled_minutes_come_from_the_tasks():
    tasks = [make_task("a", 90), make_task("b", 600)]
    plan = generate_plan(tasks, [], SETTINGS, clock=frozen_clock(NOW))
    plan.warnings = []

    metrics = compute_plan_metrics(plan, tasks, SETTINGS)
    assert metrics["unscheduled_by_task"] == {"a": 0, "b": 330}
    assert metrics["unscheduled_minutes"] == 330
    assert compute_plan_metrics(plan)["unscheduled_minutes"] == 0
