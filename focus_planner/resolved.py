"""Fully-populated views of settings and tasks for one run.

Every optional field is defaulted here, once, so the allocation code only
ever sees complete records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from focus_planner.intervals import Interval, make_interval
from focus_planner.schema import Settings, Task
from focus_planner.timeutils import at_minutes, in_zone, parse_hhmm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSettings:
    source: Settings
    zone: tzinfo
    horizon_days: int
    work_start: Optional[int]
    work_end: Optional[int]
    lunch_start: Optional[int]
    lunch_end: Optional[int]
    max_daily_minutes: int

    def work_bounds(self, day: date) -> tuple[Optional[datetime], Optional[datetime]]:
        return at_minutes(day, self.work_start, self.zone), at_minutes(day, self.work_end, self.zone)

    def working_interval(self, day: date) -> Optional[Interval]:
        return make_interval(*self.work_bounds(day))

    def lunch_interval(self, day: date) -> Optional[Interval]:
        return make_interval(
            at_minutes(day, self.lunch_start, self.zone),
            at_minutes(day, self.lunch_end, self.zone),
        )


@dataclass(frozen=True)
class ResolvedTask:
    task: Task
    remaining: int
    earliest: datetime
    deadline: Optional[datetime]
    min_block: int
    max_block: int

    @property
    def id(self) -> str:
        return self.task.id


def resolve_zone(name: str | None) -> tzinfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return ZoneInfo("UTC")


def resolve_settings(settings: Settings) -> ResolvedSettings:
    return ResolvedSettings(
        source=settings,
        zone=resolve_zone(settings.timezone),
        horizon_days=max(1, int(settings.planning_horizon_days)),
        work_start=parse_hhmm(settings.work_day_start),
        work_end=parse_hhmm(settings.work_day_end),
        lunch_start=parse_hhmm(settings.lunch_start),
        lunch_end=parse_hhmm(settings.lunch_end),
        max_daily_minutes=int(settings.max_daily_minutes),
    )


def resolve_task(
    task: Task,
    now: datetime,
    zone: tzinfo,
    locked_minutes: int = 0,
    dependency_end: Optional[datetime] = None,
) -> ResolvedTask:
    """Apply defaults and derive block bounds for ``task``."""

    completed = task.completed_minutes or 0
    remaining = max(0, task.estimated_minutes - completed - locked_minutes)

    earliest = in_zone(task.earliest_start, zone) if task.earliest_start else in_zone(now, zone)
    if dependency_end is not None and dependency_end > earliest:
        earliest = in_zone(dependency_end, zone)

    deadline = in_zone(task.deadline, zone) if task.deadline else None
    min_block = task.min_block_minutes if task.interruptible else remaining
    max_block = task.max_block_minutes if task.max_block_minutes is not None else remaining

    return ResolvedTask(
        task=task,
        remaining=remaining,
        earliest=earliest,
        deadline=deadline,
        min_block=min_block,
        max_block=max_block,
    )
