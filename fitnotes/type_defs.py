"""Type definitions for FitNotes scheduling data structures.

TypedDicts describe the dict shapes exchanged with the persistence layer
(stored routine records) and the presentation layer (raw schedule input).
Value types with behaviour (ScheduleSpec, ScheduleConflict) live next to the
engines that produce them.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (missing keys, bad
values) are done in data_builders.py.

IMPORTANT: This file must NOT import from engines, managers or store.
Only import from typing (type machinery).
"""

from datetime import date
from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

RoutineId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
WeekdayIndex = int  # 0 = Sunday .. 6 = Saturday


# =============================================================================
# Persisted Records
# =============================================================================


class RoutineData(TypedDict):
    """Type definition for a stored routine record.

    Only the fields the scheduling core reads or writes are listed; the
    persistence layer may carry more (exercises, colour, description).
    """

    internal_id: RoutineId
    name: str
    schedule_type: str  # SCHEDULE_TYPE_* constant
    schedule_days: str | None  # Sorted comma-separated indices, e.g. "1,3,5"
    schedule_interval_days: int | None
    schedule_start_date: ISODate | None
    created_at: NotRequired[ISODatetime]
    updated_at: NotRequired[ISODatetime]


class ScheduleFields(TypedDict):
    """The four schedule columns replaced together on every commit."""

    schedule_type: str
    schedule_days: str | None
    schedule_interval_days: int | None
    schedule_start_date: ISODate | None


# =============================================================================
# Raw Input
# =============================================================================


class ScheduleInput(TypedDict, total=False):
    """Raw schedule parameters collected by the routine editor.

    All fields are optional (total=False); the schema in data_builders.py
    applies defaults and coercion.
    """

    schedule_type: str
    schedule_days: list[int] | set[int] | str
    schedule_interval_days: int | str | None
    schedule_start_date: date | ISODate | None


# =============================================================================
# Collection Type Aliases
# =============================================================================

RoutinesCollection = dict[RoutineId, RoutineData]
