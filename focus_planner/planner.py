"""Plan generation entry point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from focus_planner.allocator import allocate
from focus_planner.free_slots import build_free_slots
from focus_planner.normalize import merge_assumptions
from focus_planner.ordering import order_tasks
from focus_planner.resolved import resolve_settings
from focus_planner.schema import CalendarEvent, PlannedBlock, PlanResult, Settings, Task
from focus_planner.timeutils import in_zone
from focus_planner.validator import validate_blocks

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def frozen_clock(instant: datetime) -> Clock:
    """Clock that always returns ``instant``."""

    return lambda: instant


def base_assumptions(settings: Settings) -> list[str]:
    return [
        f"Working hours {settings.work_day_start}-{settings.work_day_end}",
        f"Lunch break {settings.lunch_start}-{settings.lunch_end}",
        f"Max daily focus {settings.max_daily_minutes} minutes",
    ]


def generate_plan(
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    settings: Settings,
    locked_blocks: Iterable[PlannedBlock] = (),
    *,
    clock: Optional[Clock] = None,
    respect_dependencies: bool = False,
    extra_assumptions: Iterable[str] = (),
) -> PlanResult:
    """Turn tasks into calendar blocks around events and locked blocks.

    The clock is read exactly once; that instant drives every default, the
    deadline scoring and ``generated_at``, so runs with a frozen clock are
    reproducible. Infeasible tasks never raise, they surface as warnings.
    """

    tasks = list(tasks)
    events = list(events)
    locked = list(locked_blocks)

    now = (clock or utc_now)()
    resolved = resolve_settings(settings)
    start_day = in_zone(now, resolved.zone).date()

    slots_by_day = build_free_slots(start_day, resolved, events, locked)
    ordered = order_tasks(tasks, respect_dependencies=respect_dependencies, zone=resolved.zone)
    placed, allocation_warnings = allocate(ordered, slots_by_day, resolved, now, start_day, locked)

    blocks = locked + placed
    validation_warnings = validate_blocks(blocks, events, resolved)

    logger.info(
        "Planned %d block(s) for %d task(s) with %d warning(s)",
        len(placed),
        len(tasks),
        len(allocation_warnings) + len(validation_warnings),
    )

    return PlanResult(
        blocks=blocks,
        warnings=allocation_warnings + validation_warnings,
        assumptions=merge_assumptions(base_assumptions(settings), tasks, extra_assumptions),
        generated_at=now,
    )
