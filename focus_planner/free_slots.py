"""Per-day free time inside working hours."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from focus_planner.intervals import Interval, clip, make_interval, sort_by_start, subtract_all
from focus_planner.resolved import ResolvedSettings
from focus_planner.schema import CalendarEvent, PlannedBlock
from focus_planner.timeutils import in_zone


def horizon_days(start_day: date, count: int) -> list[date]:
    return [start_day + timedelta(days=offset) for offset in range(count)]


def busy_intervals(
    events: Iterable[CalendarEvent],
    locked_blocks: Iterable[PlannedBlock],
    settings: ResolvedSettings,
) -> list[Interval]:
    """Busy events plus every locked block, expressed in the settings zone."""

    zone = settings.zone
    intervals = []
    for event in events:
        if not event.busy:
            continue
        interval = make_interval(in_zone(event.start, zone), in_zone(event.end, zone))
        if interval:
            intervals.append(interval)
    for block in locked_blocks:
        interval = make_interval(in_zone(block.start, zone), in_zone(block.end, zone))
        if interval:
            intervals.append(interval)
    return intervals


def build_free_slots(
    start_day: date,
    settings: ResolvedSettings,
    events: Iterable[CalendarEvent],
    locked_blocks: Iterable[PlannedBlock] = (),
) -> dict[date, list[Interval]]:
    """Map each horizon day to its ordered free intervals.

    The returned lists are the allocator's working set and get rewritten as
    time is consumed.
    """

    busy = busy_intervals(events, locked_blocks, settings)
    slots_by_day: dict[date, list[Interval]] = {}

    for day in horizon_days(start_day, settings.horizon_days):
        working = settings.working_interval(day)
        if working is None:
            slots_by_day[day] = []
            continue

        cuts = []
        lunch = settings.lunch_interval(day)
        if lunch:
            cuts.append(lunch)
        for interval in busy:
            clipped = clip(interval, working.start, working.end)
            if clipped:
                cuts.append(clipped)

        slots_by_day[day] = sort_by_start(subtract_all([working], cuts))

    return slots_by_day
