from datetime import datetime, timezone

from focus_planner.normalize import (
    expand_planning_horizon,
    extend_work_hours_for_tasks,
    merge_assumptions,
    normalize_task,
    prepare_inputs,
    unique_list,
)
from focus_planner.schema import PreferredTimeWindow, Settings, Task

UTC = timezone.utc
NOW = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)


def make_task(**overrides):
    values = dict(
        id="t1",
        title="Task",
        estimated_minutes=90,
        priority=1,
        interruptible=True,
        min_block_minutes=30,
    )
    values.update(overrides)
    return Task(**values)


def test_normalize_task_restores_invariants():
    task = normalize_task(make_task(estimated_minutes=10, min_block_minutes=15, max_block_minutes=20, completed_minutes=50))
    assert task.min_block_minutes == 30
    assert task.estimated_minutes == 30
    assert task.max_block_minutes == 30
    assert task.completed_minutes == 30


def test_normalize_task_returns_valid_task_unchanged():
    task = make_task()
    assert normalize_task(task) is task


def test_expand_planning_horizon_reaches_latest_date():
    tasks = [make_task(deadline=datetime(2025, 1, 20, 17, 0, tzinfo=UTC))]
    expanded = expand_planning_horizon(tasks, Settings(planning_horizon_days=7), NOW)
    assert expanded.planning_horizon_days == 15

    unchanged = Settings(planning_horizon_days=30)
    assert expand_planning_horizon(tasks, unchanged, NOW) is unchanged
    assert expand_planning_horizon([make_task()], unchanged, NOW) is unchanged


def test_extend_work_hours_for_late_hints():
    settings = Settings(work_day_end="18:00")
    window_task = make_task(
        preferred_time_windows=[PreferredTimeWindow(days=["Mon"], start="19:00", end="20:30")]
    )
    assert extend_work_hours_for_tasks([window_task], settings).work_day_end == "20:30"

    start_task = make_task(earliest_start=datetime(2025, 1, 6, 20, 0, tzinfo=UTC), min_block_minutes=45)
    assert extend_work_hours_for_tasks([start_task], settings).work_day_end == "20:45"

    deadline_task = make_task(deadline=datetime(2025, 1, 7, 22, 15, tzinfo=UTC))
    assert extend_work_hours_for_tasks([deadline_task], settings).work_day_end == "22:15"

    assert extend_work_hours_for_tasks([make_task()], settings) is settings


def test_extend_work_hours_caps_at_the_last_minute_of_the_day():
    task = make_task(earliest_start=datetime(2025, 1, 6, 23, 50, tzinfo=UTC), min_block_minutes=60)
    assert extend_work_hours_for_tasks([task], Settings(work_day_end="18:00")).work_day_end == "23:59"


def test_unique_list_and_merge_assumptions():
    assert unique_list(["a", "", "b", "a", "  "]) == ["a", "b"]
    tasks = [make_task(assumptions=["from task"])]
    assert merge_assumptions(["base"], tasks, ["extra", "base"]) == ["base", "extra", "from task"]


def test_prepare_inputs_normalises_and_sizes():
    tasks, settings = prepare_inputs(
        [make_task(min_block_minutes=10, deadline=datetime(2025, 1, 8, 19, 0, tzinfo=UTC))],
        Settings(planning_horizon_days=1, work_day_end="18:00"),
        NOW,
    )
    assert tasks[0].min_block_minutes == 30
    assert settings.planning_horizon_days == 3
    assert settings.work_day_end == "19:00"
