"""Wall-clock helpers shared by the planner modules."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
LAST_MINUTE = 23 * 60 + 59


def parse_hhmm(value: str | None) -> Optional[int]:
    """Return minutes after midnight for ``HH:MM``, or None when malformed.

    Hours run 00-23, so every time falls on the day it is combined with.
    """

    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= minutes < 60) or not (0 <= hours < 24):
        return None
    return hours * 60 + minutes


def format_hhmm(total_minutes: int) -> str:
    clamped = min(LAST_MINUTE, max(0, int(round(total_minutes))))
    return f"{clamped // 60:02d}:{clamped % 60:02d}"


def in_zone(value: datetime, zone: tzinfo) -> datetime:
    """Express ``value`` in ``zone``; naive values are taken as local to it."""

    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def local_day(value: datetime, zone: tzinfo) -> date:
    return in_zone(value, zone).date()


def at_minutes(day: date, minutes: Optional[int], zone: tzinfo) -> Optional[datetime]:
    """Combine a local date with minutes after midnight."""

    if minutes is None:
        return None
    midnight = datetime.combine(day, time(0, 0), tzinfo=zone)
    return midnight + timedelta(minutes=minutes)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored, never negative."""

    return max(0, int((end - start).total_seconds() // 60))


def minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def weekday_short(value: datetime) -> str:
    return _WEEKDAYS[value.weekday()]
