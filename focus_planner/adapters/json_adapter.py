"""JSON adapter for planner inputs and plans."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from focus_planner.config import DEFAULT_SETTINGS, settings_from_mapping
from focus_planner.schema import (
    CalendarEvent,
    PlannedBlock,
    PlanResult,
    PlanWarning,
    PreferredTimeWindow,
    ReasonCode,
    Settings,
    Task,
    WarningCode,
)

logger = logging.getLogger(__name__)

_TASK_FIELDS = {"id", "title", "estimatedMinutes", "priority", "minBlockMinutes"}
_EVENT_FIELDS = {"id", "start", "end"}
_BLOCK_FIELDS = {"id", "taskId", "start", "end"}
_ENERGY_LEVELS = {"low", "medium", "high"}


@dataclass
class PlanInput:
    tasks: list[Task] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)
    settings: Settings = DEFAULT_SETTINGS
    locked_blocks: list[PlannedBlock] = field(default_factory=list)


def parse_datetime(value: Any, label: str) -> datetime:
    try:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{label}: malformed timestamp") from exc


def _optional_datetime(value: Any, label: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return parse_datetime(value, label)


def _int(value: Any, label: str, name: str) -> int:
    try:
        return int(value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{label}: invalid {name}") from exc


def _missing(item: dict, required: set[str]) -> list[str]:
    return sorted(name for name in required if item.get(name) in (None, ""))


def _parse_window(item: Any, label: str) -> PreferredTimeWindow:
    if not isinstance(item, dict) or not item.get("start") or not item.get("end"):
        raise ValueError(f"{label}: preferred time window needs start and end")
    return PreferredTimeWindow(
        days=[str(day).strip() for day in item.get("days") or []],
        start=str(item["start"]).strip(),
        end=str(item["end"]).strip(),
    )


def _parse_task(item: dict, index: int) -> Task:
    label = f"Task {index}"
    missing = _missing(item, _TASK_FIELDS)
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")

    energy = item.get("energyLevel")
    if energy is not None and energy not in _ENERGY_LEVELS:
        raise ValueError(f"{label}: invalid energyLevel '{energy}'")

    max_block = item.get("maxBlockMinutes")
    return Task(
        id=str(item["id"]).strip(),
        title=str(item["title"]),
        description=item.get("description"),
        estimated_minutes=_int(item["estimatedMinutes"], label, "estimatedMinutes"),
        completed_minutes=_int(item.get("completedMinutes") or 0, label, "completedMinutes"),
        deadline=_optional_datetime(item.get("deadline"), label),
        earliest_start=_optional_datetime(item.get("earliestStart"), label),
        priority=_int(item["priority"], label, "priority"),
        energy_level=energy,
        interruptible=bool(item.get("interruptible", True)),
        min_block_minutes=_int(item["minBlockMinutes"], label, "minBlockMinutes"),
        max_block_minutes=None if max_block in (None, "") else _int(max_block, label, "maxBlockMinutes"),
        dependencies=[str(dep) for dep in item.get("dependencies") or []],
        preferred_time_windows=[_parse_window(w, label) for w in item.get("preferredTimeWindows") or []],
        assumptions=[str(a) for a in item.get("assumptions") or []],
    )


def parse_event(item: dict, index: int) -> CalendarEvent:
    label = f"Event {index}"
    missing = _missing(item, _EVENT_FIELDS)
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")
    return CalendarEvent(
        id=str(item["id"]).strip(),
        title=str(item.get("title") or ""),
        start=parse_datetime(item["start"], label),
        end=parse_datetime(item["end"], label),
        busy=bool(item.get("busy", True)),
    )


def _parse_block(item: dict, index: int) -> PlannedBlock:
    label = f"Block {index}"
    missing = _missing(item, _BLOCK_FIELDS)
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")
    try:
        reason_codes = [ReasonCode(code) for code in item.get("reasonCodes") or []]
    except ValueError as exc:
        raise ValueError(f"{label}: invalid reasonCodes") from exc
    try:
        confidence = float(item.get("confidence", 0.0))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{label}: invalid confidence") from exc
    return PlannedBlock(
        id=str(item["id"]),
        task_id=str(item["taskId"]),
        start=parse_datetime(item["start"], label),
        end=parse_datetime(item["end"], label),
        confidence=confidence,
        reason_codes=reason_codes,
        locked=bool(item.get("locked", False)),
    )


def _parse_warning(item: dict, index: int) -> PlanWarning:
    try:
        code = WarningCode(item.get("code"))
    except ValueError as exc:
        raise ValueError(f"Warning {index}: invalid code") from exc
    return PlanWarning(code=code, message=str(item.get("message") or ""), task_id=item.get("taskId"))


def _list(payload: dict, key: str) -> list:
    value = payload.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list of objects")
    return value


def _load(file_path: str) -> dict:
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object")
    return payload


def parse(file_path: str) -> PlanInput:
    """Parse a planner input file: tasks, events, settings and locked blocks."""

    payload = _load(file_path)
    settings_raw = payload.get("settings")
    if settings_raw is not None and not isinstance(settings_raw, dict):
        raise ValueError("'settings' must be an object")

    plan_input = PlanInput(
        tasks=[_parse_task(item, i) for i, item in enumerate(_list(payload, "tasks"), start=1)],
        events=[parse_event(item, i) for i, item in enumerate(_list(payload, "events"), start=1)],
        settings=settings_from_mapping(settings_raw),
        locked_blocks=[_parse_block(item, i) for i, item in enumerate(_list(payload, "lockedBlocks"), start=1)],
    )
    logger.debug(
        "Loaded %d task(s), %d event(s), %d locked block(s) from %s",
        len(plan_input.tasks),
        len(plan_input.events),
        len(plan_input.locked_blocks),
        file_path,
    )
    return plan_input


def parse_plan(file_path: str) -> PlanResult:
    """Read a plan previously written with :func:`dump_plan`."""

    payload = _load(file_path)
    if "generatedAt" not in payload:
        raise ValueError("Plan: missing required fields ['generatedAt']")
    return PlanResult(
        blocks=[_parse_block(item, i) for i, item in enumerate(_list(payload, "blocks"), start=1)],
        warnings=[_parse_warning(item, i) for i, item in enumerate(_list(payload, "warnings"), start=1)],
        assumptions=[str(a) for a in payload.get("assumptions") or []],
        generated_at=parse_datetime(payload["generatedAt"], "Plan"),
    )


def block_to_dict(block: PlannedBlock) -> dict:
    data = {
        "id": block.id,
        "taskId": block.task_id,
        "start": block.start.isoformat(),
        "end": block.end.isoformat(),
        "confidence": block.confidence,
        "reasonCodes": [code.value for code in block.reason_codes],
    }
    if block.locked:
        data["locked"] = True
    return data


def warning_to_dict(warning: PlanWarning) -> dict:
    data = {"code": warning.code.value, "message": warning.message}
    if warning.task_id is not None:
        data["taskId"] = warning.task_id
    return data


def plan_to_dict(plan: PlanResult) -> dict:
    return {
        "blocks": [block_to_dict(block) for block in plan.blocks],
        "warnings": [warning_to_dict(warning) for warning in plan.warnings],
        "assumptions": list(plan.assumptions),
        "generatedAt": plan.generated_at.isoformat(),
    }


def dump_plan(plan: PlanResult, file_path: str) -> Path:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(plan_to_dict(plan), indent=2), encoding="utf-8")
    return path
