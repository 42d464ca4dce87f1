"""Planner defaults and settings construction."""

from __future__ import annotations

from dataclasses import fields, replace

from focus_planner.schema import Settings

DEFAULT_SETTINGS = Settings(
    timezone="UTC",
    planning_horizon_days=14,
    work_day_start="09:00",
    work_day_end="21:00",
    lunch_start="12:00",
    lunch_end="13:00",
    max_daily_minutes=360,
)

MIN_BLOCK_FLOOR_MINUTES = 30

BASE_CONFIDENCE = 0.6
PREFERRED_WINDOW_BONUS = 0.2
NEAR_DEADLINE_BONUS = 0.1
FIRST_BLOCK_BONUS = 0.05
MIN_CONFIDENCE = 0.2
MAX_CONFIDENCE = 0.95
NEAR_DEADLINE_HOURS = 48

_CAMEL_KEYS = {
    "timezone": "timezone",
    "planningHorizonDays": "planning_horizon_days",
    "workDayStart": "work_day_start",
    "workDayEnd": "work_day_end",
    "lunchStart": "lunch_start",
    "lunchEnd": "lunch_end",
    "maxDailyMinutes": "max_daily_minutes",
}
_INT_FIELDS = {"planning_horizon_days", "max_daily_minutes"}


def settings_from_mapping(mapping: dict | None, base: Settings = DEFAULT_SETTINGS) -> Settings:
    """Merge camelCase or snake_case overrides over ``base``."""

    if not mapping:
        return base

    known = {f.name for f in fields(Settings)}
    overrides = {}
    for key, value in mapping.items():
        name = _CAMEL_KEYS.get(key, key)
        if name not in known:
            raise ValueError(f"Settings: unknown field '{key}'")
        if value is None:
            continue
        if name in _INT_FIELDS:
            try:
                value = int(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Settings: invalid {key}") from exc
        else:
            value = str(value).strip()
        overrides[name] = value

    if overrides.get("planning_horizon_days", base.planning_horizon_days) < 1:
        raise ValueError("Settings: planningHorizonDays must be at least 1")

    return replace(base, **overrides)
