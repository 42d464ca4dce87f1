"""Greedy multi-day block allocation."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from focus_planner.confidence import (
    confidence_for_block,
    deadline_is_near,
    is_preferred_window,
    reason_codes_for_block,
)
from focus_planner.intervals import Interval, clip, subtract
from focus_planner.resolved import ResolvedSettings, ResolvedTask, resolve_task
from focus_planner.schema import PlannedBlock, PlanWarning, Task, WarningCode
from focus_planner.timeutils import in_zone, local_day, minutes_between

logger = logging.getLogger(__name__)


def minutes_by_day(blocks: Iterable[PlannedBlock], zone: tzinfo) -> dict[date, int]:
    totals: dict[date, int] = defaultdict(int)
    for block in blocks:
        totals[local_day(block.start, zone)] += minutes_between(block.start, block.end)
    return totals


def minutes_by_task(blocks: Iterable[PlannedBlock]) -> dict[str, int]:
    totals: dict[str, int] = defaultdict(int)
    for block in blocks:
        totals[block.task_id] += minutes_between(block.start, block.end)
    return totals


def latest_dependency_end(task: Task, blocks: Iterable[PlannedBlock], zone: tzinfo) -> Optional[datetime]:
    """Latest end among blocks owned by the task's dependencies, if any."""

    if not task.dependencies:
        return None
    wanted = set(task.dependencies)
    ends = [in_zone(block.end, zone) for block in blocks if block.task_id in wanted]
    return max(ends) if ends else None


def _block_id(task_id: str, start: datetime) -> str:
    return f"{task_id}-{int(start.timestamp() * 1000)}"


def _make_block(resolved: ResolvedTask, start: datetime, minutes: int, first: bool, zone: tzinfo) -> PlannedBlock:
    preferred = is_preferred_window(resolved.task, start, zone)
    near = deadline_is_near(resolved.deadline, start)
    return PlannedBlock(
        id=_block_id(resolved.id, start),
        task_id=resolved.id,
        start=start,
        end=start + timedelta(minutes=minutes),
        confidence=confidence_for_block(preferred, near, first),
        reason_codes=reason_codes_for_block(preferred, near, first),
    )


def place_task(
    resolved: ResolvedTask,
    days: list[date],
    slots_by_day: dict[date, list[Interval]],
    daily_totals: dict[date, int],
    settings: ResolvedSettings,
) -> tuple[list[PlannedBlock], int]:
    """Carve blocks for one task out of the free slots.

    ``slots_by_day`` and ``daily_totals`` are updated in place. Returns the
    new blocks and the minutes that could not be placed.
    """

    task = resolved.task
    remaining = resolved.remaining
    earliest = resolved.earliest
    deadline = resolved.deadline
    min_block = resolved.min_block
    max_block = resolved.max_block
    blocks: list[PlannedBlock] = []

    for day in days:
        if remaining <= 0:
            break
        slots = slots_by_day.get(day) or []
        if not slots:
            continue

        day_start, day_end = settings.work_bounds(day)
        if earliest > day_end:
            continue
        if deadline is not None and deadline < day_start:
            break

        index = 0
        while index < len(slots) and remaining > 0:
            slot = slots[index]
            window = clip(slot, earliest, deadline if deadline is not None else slot.end)
            if window is None:
                index += 1
                continue

            cursor = window.start
            consumed_from = cursor
            while remaining > 0:
                available = minutes_between(cursor, window.end)
                daily_remaining = settings.max_daily_minutes - daily_totals.get(day, 0)
                can_fit = min(available, daily_remaining, max_block, remaining)
                if can_fit <= 0 or can_fit < min_block:
                    break

                block = _make_block(resolved, cursor, can_fit, not blocks, settings.zone)
                blocks.append(block)
                daily_totals[day] = daily_totals.get(day, 0) + can_fit
                remaining -= can_fit
                cursor = block.end

                if not task.interruptible:
                    remaining = 0
                    break
                if minutes_between(cursor, window.end) < min_block:
                    break

            if cursor > consumed_from:
                rest = subtract(slot, Interval(consumed_from, cursor))
                slots[index:index + 1] = rest
                index += len(rest)
            else:
                index += 1

    return blocks, remaining


def allocate(
    tasks: Iterable[Task],
    slots_by_day: dict[date, list[Interval]],
    settings: ResolvedSettings,
    now: datetime,
    start_day: date,
    locked_blocks: Iterable[PlannedBlock] = (),
) -> tuple[list[PlannedBlock], list[PlanWarning]]:
    """Place every task, in the given order, into the free slots.

    Returns the newly created blocks and the allocation warnings. Locked
    blocks count toward daily totals, task progress and dependency ends but
    are not part of the returned blocks.
    """

    zone = settings.zone
    locked = list(locked_blocks)
    daily_totals = dict(minutes_by_day(locked, zone))
    locked_minutes = minutes_by_task(locked)
    days = sorted(slots_by_day) or [start_day]

    placed: list[PlannedBlock] = []
    warnings: list[PlanWarning] = []

    for task in tasks:
        dependency_end = latest_dependency_end(task, locked + placed, zone)
        resolved = resolve_task(task, now, zone, locked_minutes.get(task.id, 0), dependency_end)
        if resolved.remaining == 0:
            logger.debug("Task %s has no remaining minutes", task.id)
            continue

        if resolved.deadline is not None and resolved.earliest > resolved.deadline:
            logger.debug("Task %s starts after its deadline", task.id)
            warnings.append(
                PlanWarning(
                    code=WarningCode.DEADLINE_ALREADY_PASSED,
                    message=f"{task.title} has an earliest start after its deadline.",
                    task_id=task.id,
                )
            )
            continue

        blocks, leftover = place_task(resolved, days, slots_by_day, daily_totals, settings)
        placed.extend(blocks)
        logger.debug("Task %s: %d block(s), %d minute(s) left", task.id, len(blocks), leftover)

        if leftover > 0:
            warnings.append(
                PlanWarning(
                    code=WarningCode.INSUFFICIENT_TIME,
                    message=f"{task.title} has {leftover} minutes unscheduled within the horizon.",
                    task_id=task.id,
                )
            )

    return placed, warnings
