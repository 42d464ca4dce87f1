"""Block confidence scoring and reason codes."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from focus_planner import config
from focus_planner.schema import ReasonCode, Task
from focus_planner.timeutils import in_zone, minute_of_day, parse_hhmm, weekday_short


def is_preferred_window(task: Task, start: datetime, zone: tzinfo) -> bool:
    """True when ``start`` falls inside one of the task's preferred windows."""

    if not task.preferred_time_windows:
        return False
    local = in_zone(start, zone)
    day = weekday_short(local)
    minutes = minute_of_day(local)
    for window in task.preferred_time_windows:
        if day not in window.days:
            continue
        window_start = parse_hhmm(window.start)
        window_end = parse_hhmm(window.end)
        if window_start is None or window_end is None:
            continue
        if window_start <= minutes < window_end:
            return True
    return False


def deadline_is_near(deadline: Optional[datetime], start: datetime) -> bool:
    if deadline is None:
        return False
    diff = deadline - start
    return timedelta(0) <= diff <= timedelta(hours=config.NEAR_DEADLINE_HOURS)


def confidence_for_block(preferred: bool, near_deadline: bool, first_block: bool) -> float:
    score = config.BASE_CONFIDENCE
    if preferred:
        score += config.PREFERRED_WINDOW_BONUS
    if near_deadline:
        score += config.NEAR_DEADLINE_BONUS
    if first_block:
        score += config.FIRST_BLOCK_BONUS
    return round(min(config.MAX_CONFIDENCE, max(config.MIN_CONFIDENCE, score)), 2)


def reason_codes_for_block(preferred: bool, near_deadline: bool, first_block: bool) -> list[ReasonCode]:
    return [
        ReasonCode.FIRST_AVAILABLE if first_block else ReasonCode.CHUNKED,
        ReasonCode.PREFERRED_WINDOW if preferred else ReasonCode.EARLIEST_SLOT,
        ReasonCode.NEAR_DEADLINE if near_deadline else ReasonCode.NORMAL_BUFFER,
    ]
