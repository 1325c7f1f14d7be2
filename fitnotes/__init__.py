"""FitNotes routine scheduling core.

Decides which workout routine is due on a given day, previews the next
occurrence of a schedule, warns about overlapping schedules and shifts
interval schedules by a day.

Usage:
    from fitnotes import ScheduleSpec, is_scheduled_for, next_occurrence

    spec = ScheduleSpec(schedule_type="weekly", days={1, 3, 5})
    next_occurrence(spec, dt_utils.dt_today_local())
"""

from .engines import (
    ConflictEngine,
    InvalidScheduleConfiguration,
    ScheduleConflict,
    ScheduleEngine,
    ScheduleSpec,
    UnsupportedShiftOperation,
    describe_schedule,
    detect_conflicts,
    is_scheduled_for,
    is_valid,
    next_occurrence,
    shift,
)
from .managers import RoutineScheduleManager
from .store import RoutineStore
from .utils import dt_utils

__all__ = [
    "ConflictEngine",
    "InvalidScheduleConfiguration",
    "RoutineScheduleManager",
    "RoutineStore",
    "ScheduleConflict",
    "ScheduleEngine",
    "ScheduleSpec",
    "UnsupportedShiftOperation",
    "describe_schedule",
    "detect_conflicts",
    "dt_utils",
    "is_scheduled_for",
    "is_valid",
    "next_occurrence",
    "shift",
]
