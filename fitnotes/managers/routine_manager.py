"""Routine Schedule Manager - Schedule reads and commits for routines.

This manager is the read/write API the routine editor and home screen call:
- Previewing the next occurrence of an in-progress schedule
- Advisory conflict checks before saving
- Committing, clearing and shifting routine schedules
- "What is due today?" and badge/description strings
- Event emission for schedule changes

ARCHITECTURE:
- RoutineScheduleManager = STATEFUL (owns the store, emits events)
- ScheduleEngine / ConflictEngine = Pure occurrence and overlap logic (STATELESS)

"Today" is always passed in by the caller; obtain it from
utils.dt_utils.dt_today_local().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.conflict_engine import ConflictEngine
from ..engines.schedule_engine import ScheduleEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import date, datetime

    from ..engines.conflict_engine import ScheduleConflict
    from ..engines.schedule_engine import ScheduleSpec
    from ..store import RoutineStore
    from ..type_defs import RoutineData, ScheduleInput


class RoutineScheduleManager(BaseManager):
    """Manager for routine schedule operations.

    Responsibilities:
    - Validate raw schedule input before it reaches the engines
    - Commit all four schedule columns together
    - Emit SIGNAL_SCHEDULE_UPDATED / SIGNAL_SCHEDULE_SHIFTED events

    NOT responsible for:
    - Blocking saves on conflicts (the caller decides after showing the warning)
    - Reading the clock
    """

    def __init__(self, store: RoutineStore) -> None:
        """Initialize the RoutineScheduleManager.

        Args:
            store: Routine store holding the routine records
        """
        super().__init__(store)

    def setup(self) -> None:
        """Set up the manager."""
        const.LOGGER.debug(
            "RoutineScheduleManager: Ready with %s routines",
            len(self.store.get_routines()),
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _stored_spec(self, routine: RoutineData) -> ScheduleSpec | None:
        """Decode a stored schedule, returning None when it fails validation."""
        spec = db.schedule_spec_from_routine(routine)
        if not ScheduleEngine.is_valid(spec):
            const.LOGGER.warning(
                "RoutineScheduleManager: Routine %s has an invalid stored schedule: %s",
                routine.get(const.DATA_ROUTINE_INTERNAL_ID),
                ScheduleEngine.validate_schedule_spec(spec),
            )
            return None
        return spec

    def _active_spec(self, routine_id: str) -> ScheduleSpec | None:
        """Return the stored spec when it is valid and actually schedules something."""
        spec = self._stored_spec(self.store.get_routine(routine_id))
        if spec is None or spec.schedule_type == const.SCHEDULE_TYPE_NONE:
            return None
        return spec

    # =========================================================================
    # Routine records
    # =========================================================================

    def create_routine(self, user_input: dict[str, Any]) -> RoutineData:
        """Create and store a routine from editor input.

        Raises:
            RoutineValidationError: If the name is blank.
            InvalidScheduleConfiguration: If supplied schedule input is invalid.
        """
        routine = self.store.add_routine(db.build_routine(user_input))
        const.LOGGER.info(
            "INFO: Created routine '%s' (%s)",
            routine[const.DATA_ROUTINE_NAME],
            routine[const.DATA_ROUTINE_INTERNAL_ID],
        )
        return routine

    # =========================================================================
    # Editor: preview, conflicts, commit
    # =========================================================================

    def preview_next_occurrence(
        self, user_input: ScheduleInput, today: date | datetime
    ) -> date | None:
        """Return the next due day for an unsaved schedule.

        Raises:
            InvalidScheduleConfiguration: If the input is not a valid schedule.
        """
        spec = db.build_schedule_spec(user_input)
        return ScheduleEngine.next_occurrence(spec, today)

    def get_schedule_conflicts(
        self,
        routine_id: str | None,
        user_input: ScheduleInput,
        today: date | datetime,
        horizon_days: int = const.CONFLICT_LOOKAHEAD_DAYS,
    ) -> list[ScheduleConflict]:
        """Check an unsaved schedule against every other stored routine.

        Args:
            routine_id: Routine being edited, or None for a new routine.
            user_input: Raw schedule input from the editor.
            today: First day of the lookahead window.
            horizon_days: Lookahead window length.

        Returns:
            Advisory conflicts; an empty list means no overlap.

        Raises:
            InvalidScheduleConfiguration: If the input is not a valid schedule.
        """
        spec = db.build_schedule_spec(user_input)
        return ConflictEngine.detect_conflicts(
            spec, routine_id, self.store.get_routines(), today, horizon_days
        )

    def update_routine_schedule(
        self, routine_id: str, user_input: ScheduleInput
    ) -> ScheduleSpec:
        """Validate and commit a full schedule replacement.

        All four schedule columns are written in one store commit.

        Raises:
            KeyError: If no routine has this id.
            InvalidScheduleConfiguration: If the input is not a valid schedule.
        """
        self.store.get_routine(routine_id)
        spec = db.build_schedule_spec(user_input)
        fields = db.build_schedule_fields(spec)
        self.store.update_routine_fields(routine_id, dict(fields))

        const.LOGGER.info(
            "INFO: Updated schedule for routine %s: %s",
            routine_id,
            ScheduleEngine.describe_schedule(spec),
        )
        self.emit(
            const.SIGNAL_SCHEDULE_UPDATED,
            routine_id=routine_id,
            schedule_type=spec.schedule_type,
        )
        return spec

    def clear_routine_schedule(self, routine_id: str) -> None:
        """Remove a routine's schedule (full replacement with type none)."""
        self.update_routine_schedule(
            routine_id, {const.DATA_ROUTINE_SCHEDULE_TYPE: const.SCHEDULE_TYPE_NONE}
        )

    def shift_routine_schedule(self, routine_id: str, forward: bool) -> date:
        """Move an interval routine's anchor one day and commit it.

        Returns:
            The new anchor date.

        Raises:
            KeyError: If no routine has this id.
            UnsupportedShiftOperation: If the routine is not on an interval schedule.
            InvalidScheduleConfiguration: If the stored interval schedule is invalid.
        """
        routine = self.store.get_routine(routine_id)
        spec = db.schedule_spec_from_routine(routine)
        new_anchor = ScheduleEngine.shift_anchor(spec, forward)

        self.store.update_routine_fields(
            routine_id,
            {const.DATA_ROUTINE_SCHEDULE_START_DATE: new_anchor.isoformat()},
        )
        const.LOGGER.info(
            "INFO: Shifted routine %s %s to anchor %s",
            routine_id,
            "forward" if forward else "backward",
            new_anchor,
        )
        self.emit(
            const.SIGNAL_SCHEDULE_SHIFTED,
            routine_id=routine_id,
            anchor_date=new_anchor.isoformat(),
            forward=forward,
        )
        return new_anchor

    # =========================================================================
    # Home screen and calendar queries
    # =========================================================================

    def get_scheduled_routines(self, day: date | datetime) -> list[RoutineData]:
        """Return every routine due on the given day, in store order.

        Routines whose stored schedule is invalid are skipped.
        """
        scheduled: list[RoutineData] = []
        for routine in self.store.get_routines():
            spec = self._stored_spec(routine)
            if spec is None or spec.schedule_type == const.SCHEDULE_TYPE_NONE:
                continue
            if ScheduleEngine.is_scheduled_for(spec, day):
                scheduled.append(routine)
        return scheduled

    def get_scheduled_routine(self, today: date | datetime) -> RoutineData | None:
        """Return the first routine due today, or None."""
        scheduled = self.get_scheduled_routines(today)
        return scheduled[0] if scheduled else None

    # =========================================================================
    # Display helpers
    # =========================================================================

    def get_schedule_description(self, routine_id: str) -> str | None:
        """Return the schedule summary.

        None when the routine is unscheduled or its stored schedule is invalid.
        """
        spec = self._active_spec(routine_id)
        if spec is None:
            return None
        return ScheduleEngine.describe_schedule(spec)

    def format_next_scheduled_date(
        self, routine_id: str, today: date | datetime
    ) -> str | None:
        """Return "Today", "Tomorrow" or "Wednesday, Jan 7" for the next due day.

        None when the routine is unscheduled or its stored schedule is invalid.
        """
        spec = self._active_spec(routine_id)
        if spec is None:
            return None
        return ScheduleEngine.format_next_occurrence(spec, today)

    def get_schedule_badge(self, routine_id: str, today: date | datetime) -> str | None:
        """Return the routine list badge: "Today" when due, else the next date."""
        spec = self._active_spec(routine_id)
        if spec is None:
            return None
        if ScheduleEngine.is_scheduled_for(spec, today):
            return const.DISPLAY_TODAY
        return ScheduleEngine.format_next_occurrence(spec, today)
