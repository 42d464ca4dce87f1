"""Lock, move and re-plan workflow on top of generated plans."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Optional

from focus_planner.diagnosis import diagnose_task
from focus_planner.normalize import expand_planning_horizon, extend_work_hours_for_tasks, unique_list
from focus_planner.planner import Clock, frozen_clock, generate_plan, utc_now
from focus_planner.schema import CalendarEvent, PlannedBlock, PlanResult, Settings, Task

logger = logging.getLogger(__name__)


@dataclass
class AddTaskResult:
    plan: Optional[PlanResult]
    added_blocks: list[PlannedBlock]
    reason: Optional[str] = None


def locked_blocks(plan: Optional[PlanResult]) -> list[PlannedBlock]:
    if plan is None:
        return []
    return [block for block in plan.blocks if block.locked]


def _find(blocks: list[PlannedBlock], block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    raise ValueError(f"Unknown block '{block_id}'")


def lock_block(blocks: Iterable[PlannedBlock], block_id: str) -> list[PlannedBlock]:
    updated = list(blocks)
    index = _find(updated, block_id)
    updated[index] = replace(updated[index], locked=True)
    return updated


def toggle_lock(blocks: Iterable[PlannedBlock], block_id: str) -> list[PlannedBlock]:
    updated = list(blocks)
    index = _find(updated, block_id)
    updated[index] = replace(updated[index], locked=not updated[index].locked)
    return updated


def move_block(blocks: Iterable[PlannedBlock], block_id: str, start: datetime, end: datetime) -> list[PlannedBlock]:
    """Reposition a block; a moved block is pinned so the next run keeps it."""

    if end <= start:
        raise ValueError(f"Block '{block_id}': end must be after start")
    updated = list(blocks)
    index = _find(updated, block_id)
    updated[index] = replace(updated[index], start=start, end=end, locked=True)
    return updated


def clear_locks(blocks: Iterable[PlannedBlock]) -> list[PlannedBlock]:
    return [replace(block, locked=False) if block.locked else block for block in blocks]


def replan(
    plan: Optional[PlanResult],
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    settings: Settings,
    *,
    clock: Optional[Clock] = None,
    respect_dependencies: bool = False,
    extra_assumptions: Iterable[str] = (),
) -> PlanResult:
    """Regenerate everything except the blocks the user pinned."""

    return generate_plan(
        tasks,
        events,
        settings,
        locked_blocks(plan),
        clock=clock,
        respect_dependencies=respect_dependencies,
        extra_assumptions=extra_assumptions,
    )


def add_task_to_plan(
    plan: Optional[PlanResult],
    task: Task,
    events: Iterable[CalendarEvent],
    settings: Settings,
    *,
    clock: Optional[Clock] = None,
) -> AddTaskResult:
    """Fit one more task around every block already in ``plan``.

    Existing blocks are left untouched. The horizon and working day are first
    stretched to reach the task's start and deadline. When the task cannot be
    placed the previous plan is returned together with a diagnosis.
    """

    existing = list(plan.blocks) if plan else []
    if any(block.task_id == task.id for block in existing):
        return AddTaskResult(plan, [], f"{task.title} is already scheduled.")

    now = (clock or utc_now)()
    sized = expand_planning_horizon([task], settings, now)
    sized = extend_work_hours_for_tasks([task], sized)

    next_plan = generate_plan([task], events, sized, existing, clock=frozen_clock(now))
    added = [block for block in next_plan.blocks if block.task_id == task.id]
    if not added:
        diagnosis = diagnose_task(task, sized, next_plan.warnings, now)
        logger.info("Task %s not added: %s", task.id, diagnosis.code)
        return AddTaskResult(plan, [], diagnosis.message)

    if plan is not None:
        next_plan.assumptions = unique_list([*plan.assumptions, *next_plan.assumptions])
    return AddTaskResult(next_plan, added)
