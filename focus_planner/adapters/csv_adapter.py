"""CSV adapter for calendar events."""

from __future__ import annotations

import csv

from focus_planner.adapters.json_adapter import parse_datetime
from focus_planner.schema import CalendarEvent

_REQUIRED_FIELDS = {"id", "start", "end"}
_TRUE = {"true", "1", "yes", "y"}
_FALSE = {"false", "0", "no", "n"}


def _parse_busy(raw: str | None, row_number: int) -> bool:
    if raw is None or not raw.strip():
        return True
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"Row {row_number}: invalid busy flag '{raw}'")


def _parse_row(row: dict, row_number: int) -> CalendarEvent:
    missing = sorted(field for field in _REQUIRED_FIELDS if not row.get(field))
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    label = f"Row {row_number}"
    start = parse_datetime(row["start"], label)
    end = parse_datetime(row["end"], label)

    title_raw = row.get("title")
    return CalendarEvent(
        id=row["id"].strip(),
        title=title_raw.strip() if title_raw else "",
        start=start,
        end=end,
        busy=_parse_busy(row.get("busy"), row_number),
    )


def parse(file_path: str) -> list[CalendarEvent]:
    """Parse a CSV file into calendar events."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        events: list[CalendarEvent] = []
        for row_number, row in enumerate(reader, start=2):
            events.append(_parse_row(row, row_number))
        return events
