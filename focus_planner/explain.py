"""Plain-text plan explanation."""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Optional

from focus_planner.resolved import resolve_zone
from focus_planner.schema import PlannedBlock, PlanResult, ReasonCode, Settings, Task
from focus_planner.timeutils import in_zone, minutes_between

_REASON_TEXT = {
    ReasonCode.PREFERRED_WINDOW: "inside a preferred window",
    ReasonCode.EARLIEST_SLOT: "earliest free slot",
    ReasonCode.NEAR_DEADLINE: "close to the deadline",
    ReasonCode.NORMAL_BUFFER: "comfortably before any deadline",
    ReasonCode.CHUNKED: "split across several blocks",
}


def _task_line(title: str, blocks: list[PlannedBlock], zone) -> str:
    ordered = sorted(blocks, key=lambda block: in_zone(block.start, zone))
    minutes = sum(minutes_between(block.start, block.end) for block in ordered)
    first = in_zone(ordered[0].start, zone)
    reasons = Counter(code for block in ordered for code in block.reason_codes)
    notes = [text for code, text in _REASON_TEXT.items() if reasons.get(code)]
    pinned = sum(1 for block in ordered if block.locked)
    line = (
        f"- {title}: {len(ordered)} block(s), {minutes} min, "
        f"starting {first.strftime('%a %Y-%m-%d %H:%M')}"
    )
    if notes:
        line += f" ({', '.join(notes)})"
    if pinned:
        line += f"; {pinned} pinned by the user"
    return line


def explain_plan(plan: PlanResult, tasks: list[Task], settings: Optional[Settings] = None) -> str:
    """Summarise where each task landed and what the planner could not do."""

    if not plan.blocks:
        return "The plan is empty. Add tasks or widen the working hours and generate again."

    zone = resolve_zone(settings.timezone if settings else "UTC")
    titles = {task.id: task.title for task in tasks}
    by_task: dict[str, list[PlannedBlock]] = defaultdict(list)
    for block in plan.blocks:
        by_task[block.task_id].append(block)

    def first_start(task_id):
        return min(in_zone(block.start, zone) for block in by_task[task_id])

    lines = ["Schedule:"]
    for task_id in sorted(by_task, key=first_start):
        lines.append(_task_line(titles.get(task_id, task_id), by_task[task_id], zone))

    if plan.warnings:
        lines.append("Warnings:")
        lines.extend(f"- {warning.message}" for warning in plan.warnings)

    if plan.assumptions:
        lines.append("Assumptions:")
        lines.extend(f"- {assumption}" for assumption in plan.assumptions)

    return "\n".join(lines)
