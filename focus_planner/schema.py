"""Core data schema for planning runs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class WarningCode(str, Enum):
    """Diagnostic codes attached to plan warnings."""

    DEADLINE_ALREADY_PASSED = "DEADLINE_ALREADY_PASSED"
    INSUFFICIENT_TIME = "INSUFFICIENT_TIME"
    OUTSIDE_WORK_HOURS = "OUTSIDE_WORK_HOURS"
    OVERLAPS_BUSY = "OVERLAPS_BUSY"
    BLOCK_OVERLAP = "BLOCK_OVERLAP"


class ReasonCode(str, Enum):
    """Placement rationale tags attached to planned blocks."""

    FIRST_AVAILABLE = "FIRST_AVAILABLE"
    CHUNKED = "CHUNKED"
    PREFERRED_WINDOW = "PREFERRED_WINDOW"
    EARLIEST_SLOT = "EARLIEST_SLOT"
    NEAR_DEADLINE = "NEAR_DEADLINE"
    NORMAL_BUFFER = "NORMAL_BUFFER"


@dataclass
class PreferredTimeWindow:
    """Weekday set plus a half-open HH:MM range."""

    days: list[str]
    start: str
    end: str


@dataclass
class Task:
    """Abstract unit of work the planner turns into blocks."""

    id: str
    title: str
    estimated_minutes: int
    priority: int
    interruptible: bool
    min_block_minutes: int
    completed_minutes: int = 0
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    earliest_start: Optional[datetime] = None
    energy_level: Optional[str] = None
    max_block_minutes: Optional[int] = None
    dependencies: list[str] = field(default_factory=list)
    preferred_time_windows: list[PreferredTimeWindow] = field(default_factory=list)
    assumptions: list[str] = field(default_factory=list)


@dataclass
class CalendarEvent:
    """Pre-existing calendar entry; only busy events block allocation."""

    id: str
    title: str
    start: datetime
    end: datetime
    busy: bool = True


@dataclass
class PlannedBlock:
    """Concrete placement of part of a task."""

    id: str
    task_id: str
    start: datetime
    end: datetime
    confidence: float
    reason_codes: list[ReasonCode] = field(default_factory=list)
    locked: bool = False


@dataclass
class PlanWarning:
    code: WarningCode
    message: str
    task_id: Optional[str] = None


@dataclass
class PlanResult:
    blocks: list[PlannedBlock]
    warnings: list[PlanWarning]
    assumptions: list[str]
    generated_at: datetime


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot for one planning run."""

    timezone: str = "UTC"
    planning_horizon_days: int = 14
    work_day_start: str = "09:00"
    work_day_end: str = "21:00"
    lunch_start: str = "12:00"
    lunch_end: str = "13:00"
    max_daily_minutes: int = 360
