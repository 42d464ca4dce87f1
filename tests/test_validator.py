from datetime import datetime, timezone

from focus_planner.resolved import resolve_settings
from focus_planner.schema import CalendarEvent, PlannedBlock, Settings, WarningCode
from focus_planner.validator import check_block_overlaps, validate_blocks

UTC = timezone.utc
SETTINGS = resolve_settings(
    Settings(
        timezone="UTC",
        planning_horizon_days=1,
        work_day_start="09:00",
        work_day_end="18:00",
        lunch_start="12:00",
        lunch_end="13:00",
        max_daily_minutes=360,
    )
)


def at(hour, minute=0):
    return datetime(2025, 1, 6, hour, minute, tzinfo=UTC)


def block(block_id, start, end, task_id="t1"):
    return PlannedBlock(block_id, task_id, start, end, 0.6, locked=True)


def test_block_outside_working_hours():
    warnings = validate_blocks([block("early", at(8), at(9, 30))], [], SETTINGS)
    assert [(w.code, w.task_id) for w in warnings] == [(WarningCode.OUTSIDE_WORK_HOURS, "t1")]


def test_block_overlapping_busy_event_only():
    events = [
        CalendarEvent("e1", "Meeting", at(10), at(11)),
        CalendarEvent("e2", "Playlist", at(10), at(11), busy=False),
    ]
    warnings = validate_blocks([block("b1", at(10, 30), at(11, 30))], events, SETTINGS)
    assert [w.code for w in warnings] == [WarningCode.OVERLAPS_BUSY]
    assert "Meeting" in warnings[0].message


def test_overlap_sweep_finds_non_adjacent_pairs():
    blocks = [
        block("a", at(9), at(12)),
        block("b", at(10), at(10, 30)),
        block("c", at(11), at(11, 30)),
    ]
    warnings = check_block_overlaps(blocks, SETTINGS)
    assert [w.message for w in warnings] == ["Blocks a and b overlap.", "Blocks a and c overlap."]
    assert all(w.code == WarningCode.BLOCK_OVERLAP for w in warnings)


def test_clean_plan_has_no_warnings():
    blocks = [block("a", at(9), at(10)), block("b", at(10), at(11)), block("c", at(13), at(18))]
    assert validate_blocks(blocks, [CalendarEvent("e1", "Meeting", at(11), at(12))], SETTINGS) == []
