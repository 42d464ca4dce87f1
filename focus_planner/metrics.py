"""Plan outcome metrics."""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Optional

from focus_planner.resolved import resolve_zone
from focus_planner.schema import PlanResult, Settings, Task
from focus_planner.timeutils import local_day, minutes_between


def compute_plan_metrics(
    plan: PlanResult,
    tasks: Optional[list[Task]] = None,
    settings: Optional[Settings] = None,
) -> dict:
    """Compute block, minute, confidence and warning metrics for a plan.

    Per-task completion and the unscheduled shortfall need ``tasks``; daily
    utilization needs ``settings``.
    """

    zone = resolve_zone(settings.timezone if settings else "UTC")
    by_day: dict[str, int] = defaultdict(int)
    by_task: dict[str, int] = defaultdict(int)
    for block in plan.blocks:
        minutes = minutes_between(block.start, block.end)
        by_day[local_day(block.start, zone).isoformat()] += minutes
        by_task[block.task_id] += minutes

    warning_counts = Counter(warning.code.value for warning in plan.warnings)
    confidences = [block.confidence for block in plan.blocks]

    metrics = {
        "total_blocks": len(plan.blocks),
        "locked_blocks": sum(1 for block in plan.blocks if block.locked),
        "scheduled_minutes": sum(by_task.values()),
        "minutes_by_day": dict(sorted(by_day.items())),
        "minutes_by_task": dict(sorted(by_task.items())),
        "avg_confidence": sum(confidences) / len(confidences) if confidences else 0.0,
        "warning_counts": dict(sorted(warning_counts.items())),
        "unscheduled_minutes": 0,
    }

    if tasks is not None:
        ratios = {}
        shortfall = {}
        for task in tasks:
            needed = max(0, task.estimated_minutes - (task.completed_minutes or 0))
            placed = by_task.get(task.id, 0)
            ratios[task.id] = min(1.0, placed / needed) if needed else 1.0
            shortfall[task.id] = max(0, needed - placed)
        metrics["completion_ratio"] = ratios
        metrics["unscheduled_by_task"] = shortfall
        metrics["unscheduled_minutes"] = sum(shortfall.values())

    if settings is not None and settings.max_daily_minutes > 0:
        metrics["daily_utilization"] = {
            day: minutes / settings.max_daily_minutes for day, minutes in metrics["minutes_by_day"].items()
        }

    return metrics
