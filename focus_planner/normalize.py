"""Caller-side preparation of planner inputs.

None of this runs inside :func:`focus_planner.planner.generate_plan`; callers
that receive loosely validated tasks (for example from a text extractor)
use it to restore the task invariants and size the settings to the work.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable

from focus_planner.config import MIN_BLOCK_FLOOR_MINUTES
from focus_planner.resolved import resolve_zone
from focus_planner.schema import Settings, Task
from focus_planner.timeutils import format_hhmm, in_zone, minute_of_day, parse_hhmm


def unique_list(values: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-seen order."""

    seen = set()
    result = []
    for value in values:
        if not value or not value.strip() or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def merge_assumptions(
    base: Iterable[str],
    tasks: Iterable[Task] = (),
    extra: Iterable[str] = (),
) -> list[str]:
    task_assumptions = [item for task in tasks for item in (task.assumptions or [])]
    return unique_list([*base, *extra, *task_assumptions])


def normalize_task(task: Task) -> Task:
    """Clamp block sizes and progress so the task satisfies the planner invariants."""

    min_block = max(task.min_block_minutes, MIN_BLOCK_FLOOR_MINUTES)
    estimated = max(task.estimated_minutes, min_block)
    max_block = task.max_block_minutes
    if max_block is not None:
        max_block = max(max_block, min_block)
    completed = min(max(0, task.completed_minutes or 0), estimated)

    if (
        min_block == task.min_block_minutes
        and estimated == task.estimated_minutes
        and max_block == task.max_block_minutes
        and completed == task.completed_minutes
    ):
        return task
    return replace(
        task,
        min_block_minutes=min_block,
        estimated_minutes=estimated,
        max_block_minutes=max_block,
        completed_minutes=completed,
    )


def expand_planning_horizon(tasks: Iterable[Task], settings: Settings, now: datetime) -> Settings:
    """Grow the horizon so it reaches the latest start or deadline of any task."""

    zone = resolve_zone(settings.timezone)
    latest = None
    for task in tasks:
        for value in (task.earliest_start, task.deadline):
            if value is None:
                continue
            candidate = in_zone(value, zone)
            if latest is None or candidate > latest:
                latest = candidate
    if latest is None:
        return settings

    today = in_zone(now, zone).date()
    span = (latest.date() - today) / timedelta(days=1)
    required = max(1, math.ceil(span) + 1)
    horizon = max(settings.planning_horizon_days, required)
    if horizon == settings.planning_horizon_days:
        return settings
    return replace(settings, planning_horizon_days=horizon)


def extend_work_hours_for_tasks(tasks: Iterable[Task], settings: Settings) -> Settings:
    """Push the end of the working day late enough for every task's timing hints."""

    zone = resolve_zone(settings.timezone)
    base_end = parse_hhmm(settings.work_day_end)
    if base_end is None:
        return settings
    end = base_end

    for task in tasks:
        for window in task.preferred_time_windows or []:
            window_end = parse_hhmm(window.end)
            if window_end is not None and window_end > end:
                end = window_end
        if task.earliest_start is not None:
            needed = minute_of_day(in_zone(task.earliest_start, zone)) + task.min_block_minutes
            end = max(end, needed)
        if task.deadline is not None:
            end = max(end, minute_of_day(in_zone(task.deadline, zone)))

    adjusted = format_hhmm(end)
    if end == base_end or adjusted == settings.work_day_end:
        return settings
    return replace(settings, work_day_end=adjusted)


def prepare_inputs(tasks: Iterable[Task], settings: Settings, now: datetime) -> tuple[list[Task], Settings]:
    """Normalise tasks, then size the horizon and working day to them."""

    prepared = [normalize_task(task) for task in tasks]
    sized = expand_planning_horizon(prepared, settings, now)
    sized = extend_work_hours_for_tasks(prepared, sized)
    return prepared, sized
