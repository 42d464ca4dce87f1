import re
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from focus_planner.intervals import Interval, overlaps
from focus_planner.planner import frozen_clock, generate_plan
from focus_planner.schema import CalendarEvent, PreferredTimeWindow, ReasonCode, Settings, Task, WarningCode

UTC = timezone.utc
NOW = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)


def at(hour, minute=0, day=6):
    return datetime(2025, 1, day, hour, minute, tzinfo=UTC)


def make_settings(**overrides):
    values = dict(
        timezone="UTC",
        planning_horizon_days=1,
        work_day_start="09:00",
        work_day_end="18:00",
        lunch_start="12:00",
        lunch_end="13:00",
        max_daily_minutes=360,
    )
    values.update(overrides)
    return Settings(**values)


def make_task(task_id="t1", **overrides):
    values = dict(
        id=task_id,
        title=task_id,
        estimated_minutes=90,
        priority=3,
        interruptible=True,
        min_block_minutes=30,
    )
    values.update(overrides)
    return Task(**values)


def plan(tasks, events=(), locked=(), settings=None, **kwargs):
    return generate_plan(tasks, events, settings or make_settings(), locked, clock=frozen_clock(NOW), **kwargs)


def sample_workload():
    tasks = [
        make_task("a", estimated_minutes=200, max_block_minutes=90, deadline=at(18, day=8), priority=2),
        make_task("b", estimated_minutes=120, interruptible=False, priority=5),
        make_task("c", estimated_minutes=900, min_block_minutes=60, priority=1),
        make_task(
            "d",
            estimated_minutes=45,
            preferred_time_windows=[PreferredTimeWindow(days=["Tue"], start="09:00", end="12:00")],
            earliest_start=at(9, day=7),
        ),
        make_task("e", estimated_minutes=60, deadline=at(7)),
    ]
    events = [
        CalendarEvent("m1", "Standup", at(10), at(11)),
        CalendarEvent("m2", "Workshop", at(14, day=7), at(15, 30, day=7)),
        CalendarEvent("m3", "Playlist", at(15), at(16), busy=False),
    ]
    return tasks, events, make_settings(planning_horizon_days=3, max_daily_minutes=300)


def test_single_task_scenario():
    result = plan([make_task(estimated_minutes=90)])
    assert len(result.blocks) == 1
    block = result.blocks[0]
    assert (block.start, block.end) == (at(9), at(10, 30))
    assert block.confidence == pytest.approx(0.65)
    assert block.reason_codes == [ReasonCode.FIRST_AVAILABLE, ReasonCode.EARLIEST_SLOT, ReasonCode.NORMAL_BUFFER]
    assert result.warnings == []


def test_daily_cap_scenario():
    result = plan([make_task(estimated_minutes=600)])
    assert sum((b.end - b.start) / timedelta(minutes=1) for b in result.blocks) == 360
    assert [(b.start, b.end) for b in result.blocks] == [(at(9), at(12)), (at(13), at(16))]
    assert [w.code for w in result.warnings] == [WarningCode.INSUFFICIENT_TIME]
    assert "240 minutes" in result.warnings[0].message


def test_past_deadline_scenario():
    result = plan([make_task(deadline=NOW - timedelta(days=1))])
    assert result.blocks == []
    assert [w.code for w in result.warnings] == [WarningCode.DEADLINE_ALREADY_PASSED]


def test_plan_properties_hold_for_a_mixed_workload():
    tasks, events, settings = sample_workload()
    result = generate_plan(tasks, events, settings, clock=frozen_clock(NOW))
    assert result.blocks

    per_day = defaultdict(int)
    for block in result.blocks:
        assert block.start < block.end
        assert block.start.date() == block.end.date()
        day = block.start.date()
        work = Interval(
            datetime.combine(day, datetime.min.time(), tzinfo=UTC) + timedelta(hours=9),
            datetime.combine(day, datetime.min.time(), tzinfo=UTC) + timedelta(hours=18),
        )
        lunch = Interval(work.start + timedelta(hours=3), work.start + timedelta(hours=4))
        assert work.start <= block.start and block.end <= work.end
        assert not overlaps(Interval(block.start, block.end), lunch)
        for event in events:
            if event.busy:
                assert not overlaps(Interval(block.start, block.end), Interval(event.start, event.end))
        per_day[day] += (block.end - block.start) // timedelta(minutes=1)

    assert all(total <= 300 for total in per_day.values())

    ordered = sorted(result.blocks, key=lambda b: b.start)
    for first, second in zip(ordered, ordered[1:]):
        assert first.end <= second.start

    b_blocks = [block for block in result.blocks if block.task_id == "b"]
    assert len(b_blocks) <= 1
    if b_blocks:
        assert b_blocks[0].end - b_blocks[0].start == timedelta(minutes=120)

    leftovers = {
        w.task_id: int(re.search(r"(\d+) minutes", w.message).group(1))
        for w in result.warnings
        if w.code == WarningCode.INSUFFICIENT_TIME
    }
    for task in tasks:
        if not task.interruptible or task.id == "e":
            continue
        scheduled = sum(
            (b.end - b.start) // timedelta(minutes=1) for b in result.blocks if b.task_id == task.id
        )
        assert scheduled + leftovers.get(task.id, 0) == task.estimated_minutes - task.completed_minutes

    assert not any(w.code in (WarningCode.OUTSIDE_WORK_HOURS, WarningCode.BLOCK_OVERLAP) for w in result.warnings)
    assert any(w.code == WarningCode.DEADLINE_ALREADY_PASSED and w.task_id == "e" for w in result.warnings)

    d_blocks = [block for block in result.blocks if block.task_id == "d"]
    assert d_blocks and ReasonCode.PREFERRED_WINDOW in d_blocks[0].reason_codes


def test_runs_are_deterministic_with_a_frozen_clock():
    tasks, events, settings = sample_workload()
    first = generate_plan(tasks, events, settings, clock=frozen_clock(NOW))
    second = generate_plan(list(reversed(tasks)), events, settings, clock=frozen_clock(NOW))
    assert first == second


def test_locking_a_plan_reproduces_it():
    tasks = [
        make_task("a", estimated_minutes=90),
        make_task("b", estimated_minutes=120, max_block_minutes=60, priority=1),
    ]
    first = plan(tasks)
    locked = [replace(block, locked=True) for block in first.blocks]
    second = plan(tasks, locked=locked)
    assert second.blocks == locked
    assert second.warnings == []


def test_locked_block_conflicting_with_busy_event_is_reported_not_moved():
    locked = [replace(plan([make_task()]).blocks[0], locked=True)]
    events = [CalendarEvent("m1", "Standup", at(9, 30), at(10))]
    result = plan([make_task()], events=events, locked=locked)
    assert result.blocks == locked
    assert [w.code for w in result.warnings] == [WarningCode.OVERLAPS_BUSY]


def test_clock_is_read_once_and_stamps_the_plan():
    calls = []

    def clock():
        calls.append(1)
        return NOW

    result = generate_plan([make_task(), make_task("t2")], [], make_settings(), clock=clock)
    assert len(calls) == 1
    assert result.generated_at == NOW


def test_assumptions_are_merged_without_duplicates():
    tasks = [
        make_task("a", assumptions=["Estimate from last sprint", " "]),
        make_task("b", assumptions=["Estimate from last sprint", "Needs VPN"]),
    ]
    result = plan(tasks, extra_assumptions=["Parsed from notes"])
    assert result.assumptions == [
        "Working hours 09:00-18:00",
        "Lunch break 12:00-13:00",
        "Max daily focus 360 minutes",
        "Parsed from notes",
        "Estimate from last sprint",
        "Needs VPN",
    ]


def test_working_hours_follow_the_settings_timezone():
    zone = ZoneInfo("America/New_York")
    now = datetime(2025, 1, 6, 8, 0, tzinfo=zone)
    result = generate_plan(
        [make_task(estimated_minutes=60)],
        [],
        make_settings(timezone="America/New_York"),
        clock=frozen_clock(now),
    )
    assert result.blocks[0].start == datetime(2025, 1, 6, 9, 0, tzinfo=zone)
    assert result.blocks[0].start == at(14)


def test_dependency_aware_ordering_is_opt_in():
    tasks = [
        make_task("draft", estimated_minutes=60, deadline=at(18, day=9)),
        make_task("publish", estimated_minutes=60, deadline=at(18, day=8), dependencies=["draft"]),
    ]
    default = plan(tasks, settings=make_settings(planning_horizon_days=3))
    ordered = plan(tasks, settings=make_settings(planning_horizon_days=3), respect_dependencies=True)

    def start_of(result, task_id):
        return next(b.start for b in result.blocks if b.task_id == task_id)

    assert start_of(default, "publish") < start_of(default, "draft")
    assert start_of(ordered, "draft") < start_of(ordered, "publish")
