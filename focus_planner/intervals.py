"""Half-open interval arithmetic over datetimes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from focus_planner.timeutils import minutes_between


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime


def make_interval(start: Optional[datetime], end: Optional[datetime]) -> Optional[Interval]:
    """Return an interval, or None when it would be empty or inverted."""

    if start is None or end is None or end <= start:
        return None
    return Interval(start, end)


def overlaps(a: Interval, b: Interval) -> bool:
    """Strict overlap test; touching endpoints do not overlap."""

    return a.start < b.end and b.start < a.end


def subtract(base: Interval, cut: Interval) -> list[Interval]:
    """Return the pieces of ``base`` left after removing ``cut``."""

    if not overlaps(base, cut):
        return [base]
    pieces = []
    if cut.start > base.start:
        pieces.append(Interval(base.start, cut.start))
    if cut.end < base.end:
        pieces.append(Interval(cut.end, base.end))
    return pieces


def subtract_all(bases: Iterable[Interval], cuts: Iterable[Interval]) -> list[Interval]:
    """Apply every cut, in order, to the shrinking set of bases."""

    current = list(bases)
    for cut in cuts:
        current = [piece for base in current for piece in subtract(base, cut)]
    return current


def clip(interval: Interval, lower: datetime, upper: datetime) -> Optional[Interval]:
    return make_interval(max(interval.start, lower), min(interval.end, upper))


def sort_by_start(intervals: Iterable[Interval]) -> list[Interval]:
    return sorted(intervals, key=lambda interval: (interval.start, interval.end))


def minutes_of(interval: Interval) -> int:
    return minutes_between(interval.start, interval.end)
