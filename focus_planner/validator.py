"""Post-hoc plan checks.

The allocator avoids all of these by construction, so a warning here points
at a caller-supplied locked block or an unusual configuration.
"""

from __future__ import annotations

from typing import Iterable

from focus_planner.intervals import Interval, make_interval, overlaps
from focus_planner.resolved import ResolvedSettings
from focus_planner.schema import CalendarEvent, PlannedBlock, PlanWarning, WarningCode
from focus_planner.timeutils import in_zone


def _interval(block: PlannedBlock, settings: ResolvedSettings) -> Interval:
    return Interval(in_zone(block.start, settings.zone), in_zone(block.end, settings.zone))


def check_work_hours(blocks: Iterable[PlannedBlock], settings: ResolvedSettings) -> list[PlanWarning]:
    warnings = []
    for block in blocks:
        interval = _interval(block, settings)
        work_start, work_end = settings.work_bounds(interval.start.date())
        if work_start is None or work_end is None or interval.start < work_start or interval.end > work_end:
            warnings.append(
                PlanWarning(
                    code=WarningCode.OUTSIDE_WORK_HOURS,
                    message=f"Block {block.id} sits outside working hours.",
                    task_id=block.task_id,
                )
            )
    return warnings


def check_busy_overlaps(
    blocks: Iterable[PlannedBlock],
    events: Iterable[CalendarEvent],
    settings: ResolvedSettings,
) -> list[PlanWarning]:
    busy = []
    for event in events:
        if not event.busy:
            continue
        interval = make_interval(in_zone(event.start, settings.zone), in_zone(event.end, settings.zone))
        if interval:
            busy.append((event, interval))

    warnings = []
    for block in blocks:
        interval = _interval(block, settings)
        for event, event_interval in busy:
            if overlaps(interval, event_interval):
                warnings.append(
                    PlanWarning(
                        code=WarningCode.OVERLAPS_BUSY,
                        message=f"Block {block.id} overlaps busy event {event.title or event.id}.",
                        task_id=block.task_id,
                    )
                )
    return warnings


def check_block_overlaps(blocks: Iterable[PlannedBlock], settings: ResolvedSettings) -> list[PlanWarning]:
    """Sweep blocks by start, comparing each to the furthest-reaching one so far."""

    ordered = sorted(
        ((_interval(block, settings), block) for block in blocks),
        key=lambda pair: (pair[0].start, pair[1].id),
    )
    warnings = []
    reach = None
    for interval, block in ordered:
        if reach is not None and overlaps(reach[0], interval):
            warnings.append(
                PlanWarning(
                    code=WarningCode.BLOCK_OVERLAP,
                    message=f"Blocks {reach[1].id} and {block.id} overlap.",
                )
            )
        if reach is None or interval.end > reach[0].end:
            reach = (interval, block)
    return warnings


def validate_blocks(
    blocks: Iterable[PlannedBlock],
    events: Iterable[CalendarEvent],
    settings: ResolvedSettings,
) -> list[PlanWarning]:
    blocks = list(blocks)
    events = list(events)
    return (
        check_work_hours(blocks, settings)
        + check_busy_overlaps(blocks, events, settings)
        + check_block_overlaps(blocks, settings)
    )
