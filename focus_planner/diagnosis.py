"""Explain why a task received no blocks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from focus_planner.resolved import resolve_settings
from focus_planner.schema import PlanWarning, Settings, Task, WarningCode
from focus_planner.timeutils import in_zone

COMPLETED = "COMPLETED"
DEADLINE_PASSED = "DEADLINE_PASSED"
DEADLINE_CONFLICT = "DEADLINE_CONFLICT"
NO_WORK_HOURS = "NO_WORK_HOURS"
DAILY_LIMIT = "DAILY_LIMIT"
HORIZON_TOO_SHORT = "HORIZON_TOO_SHORT"
NO_FREE_SLOTS = "NO_FREE_SLOTS"
WARNING = "WARNING"


@dataclass
class Diagnosis:
    code: str
    message: str


def _overlap_minutes(start_a: int, end_a: int, start_b: int, end_b: int) -> int:
    return max(0, min(end_a, end_b) - max(start_a, start_b))


def working_minutes(settings: Settings) -> int:
    """Minutes between start and end of the working day, lunch excluded."""

    resolved = resolve_settings(settings)
    if resolved.work_start is None or resolved.work_end is None:
        return 0
    total = max(0, resolved.work_end - resolved.work_start)
    if resolved.lunch_start is not None and resolved.lunch_end is not None:
        total -= _overlap_minutes(resolved.work_start, resolved.work_end, resolved.lunch_start, resolved.lunch_end)
    return max(0, total)


def daily_capacity(settings: Settings) -> int:
    return min(settings.max_daily_minutes, working_minutes(settings))


def diagnose_task(
    task: Task,
    settings: Settings,
    warnings: Iterable[PlanWarning],
    now: datetime,
) -> Diagnosis:
    """Return the most specific reason a task could not be placed.

    Checks run from structural causes (nothing left to do, a passed deadline,
    no working time) down to the task's own plan warning.
    """

    remaining = max(0, task.estimated_minutes - (task.completed_minutes or 0))
    if remaining <= 0:
        return Diagnosis(COMPLETED, f"{task.title} is already complete.")

    zone = resolve_settings(settings).zone
    deadline = in_zone(task.deadline, zone) if task.deadline else None
    if deadline is not None and deadline < in_zone(now, zone):
        return Diagnosis(DEADLINE_PASSED, f"The deadline of {task.title} has already passed.")

    if task.earliest_start is not None and deadline is not None:
        if in_zone(task.earliest_start, zone) > deadline:
            return Diagnosis(DEADLINE_CONFLICT, f"{task.title} cannot start before its deadline.")

    if working_minutes(settings) <= 0:
        return Diagnosis(NO_WORK_HOURS, "Working hours leave no time once lunch is removed.")

    capacity = daily_capacity(settings)
    if capacity < task.min_block_minutes:
        return Diagnosis(
            DAILY_LIMIT,
            f"A day offers at most {capacity} minutes but {task.title} needs blocks of "
            f"{task.min_block_minutes} minutes.",
        )

    horizon_capacity = capacity * settings.planning_horizon_days
    if horizon_capacity < remaining:
        return Diagnosis(
            HORIZON_TOO_SHORT,
            f"The planning horizon holds {horizon_capacity} minutes but {task.title} needs {remaining}.",
        )

    for warning in warnings:
        if warning.task_id != task.id:
            continue
        if warning.code == WarningCode.INSUFFICIENT_TIME:
            return Diagnosis(NO_FREE_SLOTS, f"No free slots were left for {task.title}.")
        if warning.code == WarningCode.DEADLINE_ALREADY_PASSED:
            return Diagnosis(DEADLINE_PASSED, f"The deadline of {task.title} has already passed.")
        return Diagnosis(WARNING, warning.message)

    return Diagnosis(NO_FREE_SLOTS, f"No free slots were left for {task.title}.")
