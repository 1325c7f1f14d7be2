"""Engine modules for FitNotes routine scheduling.

Contains pure computation engines:
- schedule_engine: Occurrence calculation, validation, shifting, descriptions
- conflict_engine: Overlap detection between routine schedules
"""

from .conflict_engine import ConflictEngine, ScheduleConflict, detect_conflicts
from .schedule_engine import (
    InvalidScheduleConfiguration,
    ScheduleEngine,
    ScheduleSpec,
    UnsupportedShiftOperation,
    describe_schedule,
    is_scheduled_for,
    is_valid,
    next_occurrence,
    shift,
)

__all__ = [
    "ConflictEngine",
    "InvalidScheduleConfiguration",
    "ScheduleConflict",
    "ScheduleEngine",
    "ScheduleSpec",
    "UnsupportedShiftOperation",
    "describe_schedule",
    "detect_conflicts",
    "is_scheduled_for",
    "is_valid",
    "next_occurrence",
    "shift",
]
