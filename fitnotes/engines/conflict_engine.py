"""Conflict Engine - Pure logic for overlapping routine schedules.

Scans a bounded lookahead window and reports which stored routines share at
least one due day with a candidate schedule. The result is advisory: it feeds
the "overlaps with X - save anyway?" prompt and never blocks a save.

ARCHITECTURE: This is a pure logic engine with NO persistence or UI
dependencies. All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_as_local_date, dt_iter_days
from .schedule_engine import ScheduleEngine, ScheduleSpec

if TYPE_CHECKING:
    from ..type_defs import RoutineData


# =============================================================================
# CONFLICT DATA STRUCTURE
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScheduleConflict:
    """A day on which the candidate schedule and another routine are both due.

    Attributes:
        date: Earliest shared due day inside the lookahead window
        routine: The other routine's stored record
    """

    date: date
    routine: RoutineData

    @property
    def routine_id(self) -> str | None:
        """Internal id of the conflicting routine."""
        return self.routine.get(const.DATA_ROUTINE_INTERNAL_ID)

    @property
    def routine_name(self) -> str:
        """Display name of the conflicting routine."""
        return self.routine.get(const.DATA_ROUTINE_NAME, "")


# =============================================================================
# CONFLICT ENGINE
# =============================================================================


class ConflictEngine:
    """Pure logic engine for schedule overlap detection.

    All methods are static - no instance state. Cost is
    O(horizon_days x routine count).
    """

    @staticmethod
    def detect_conflicts(
        candidate: ScheduleSpec,
        excluding_routine_id: str | None,
        other_routines: Iterable[RoutineData],
        today: date | datetime,
        horizon_days: int = const.CONFLICT_LOOKAHEAD_DAYS,
    ) -> list[ScheduleConflict]:
        """Find stored routines that share a due day with the candidate.

        Each conflicting routine is reported once, at its earliest shared day
        in [today, today + horizon_days). Results are ordered by date, then by
        the order of other_routines.

        Args:
            candidate: Schedule being created or edited.
            excluding_routine_id: Id of the routine being edited (skipped).
            other_routines: Stored routine records to compare against.
            today: First day of the window.
            horizon_days: Window length in days.

        Returns:
            List of conflicts (empty when nothing overlaps).

        Raises:
            InvalidScheduleConfiguration: If the candidate fails its invariants.
        """
        ScheduleEngine.ensure_valid(candidate)
        if candidate.schedule_type == const.SCHEDULE_TYPE_NONE or horizon_days <= 0:
            return []

        comparable: list[tuple[RoutineData, ScheduleSpec]] = []
        for routine in other_routines:
            routine_id = routine.get(const.DATA_ROUTINE_INTERNAL_ID)
            if excluding_routine_id is not None and routine_id == excluding_routine_id:
                continue

            spec = ScheduleEngine.spec_from_routine(routine)
            if spec.schedule_type == const.SCHEDULE_TYPE_NONE:
                continue
            if not ScheduleEngine.is_valid(spec):
                const.LOGGER.warning(
                    "ConflictEngine: Skipping routine %s with invalid schedule: %s",
                    routine_id,
                    ScheduleEngine.validate_schedule_spec(spec),
                )
                continue
            comparable.append((routine, spec))

        if not comparable:
            return []

        start = dt_as_local_date(today)
        conflicts: list[ScheduleConflict] = []
        reported: set[int] = set()

        for day in dt_iter_days(start, horizon_days):
            if not ScheduleEngine.is_scheduled_for(candidate, day):
                continue
            for index, (routine, spec) in enumerate(comparable):
                if index in reported:
                    continue
                if ScheduleEngine.is_scheduled_for(spec, day):
                    reported.add(index)
                    conflicts.append(ScheduleConflict(date=day, routine=routine))
            if len(reported) == len(comparable):
                break

        const.LOGGER.debug(
            "ConflictEngine: %s conflict(s) across %s routine(s) within %s days of %s",
            len(conflicts),
            len(comparable),
            horizon_days,
            start,
        )
        return conflicts

    @staticmethod
    def conflict_names(conflicts: Iterable[ScheduleConflict]) -> list[str]:
        """Return distinct conflicting routine names in first-seen order."""
        names: list[str] = []
        for conflict in conflicts:
            if conflict.routine_name not in names:
                names.append(conflict.routine_name)
        return names

    @staticmethod
    def describe_conflicts(conflicts: Iterable[ScheduleConflict]) -> str:
        """Build the save-confirmation warning text.

        Returns:
            "This schedule overlaps with Push Day, Legs Day on some days."
            or an empty string when there are no conflicts.
        """
        names = ConflictEngine.conflict_names(conflicts)
        if not names:
            return ""
        return f"This schedule overlaps with {', '.join(names)} on some days."


# =============================================================================
# Module-level convenience functions
# =============================================================================


def detect_conflicts(
    candidate: ScheduleSpec,
    excluding_routine_id: str | None,
    other_routines: Iterable[RoutineData],
    today: date | datetime,
    horizon_days: int = const.CONFLICT_LOOKAHEAD_DAYS,
) -> list[ScheduleConflict]:
    """Find stored routines that share a due day with the candidate."""
    return ConflictEngine.detect_conflicts(
        candidate, excluding_routine_id, other_routines, today, horizon_days
    )
