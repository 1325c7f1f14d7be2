"""Schedule Engine for FitNotes routines.

Pure occurrence calculation for routine schedules:
- Day-by-day evaluation for "is this routine due on D?" and "when is it next due?"
- `dateutil.rrule` for expanding a window of occurrences and for RRULE export
- One-day anchor shifting for interval schedules

Weekdays use the Sunday-based index (0 = Sunday .. 6 = Saturday) throughout.
Every date argument may be a `date` or a `datetime`; datetimes are reduced to
their local calendar day before any arithmetic.

ARCHITECTURE: This is a pure logic engine with NO persistence or UI
dependencies. All functions are static methods that operate on passed-in data.
"Today" is always a parameter, never read from the clock here.

IMPORTANT: This module must NOT import from managers or store.
Only import from const.py, utils and third-party libraries.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import TYPE_CHECKING, ClassVar

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

from .. import const
from ..utils.dt_utils import (
    dt_add_days,
    dt_as_local_date,
    dt_days_between,
    dt_format_day_label,
    dt_iter_days,
    dt_parse_date,
    weekday_index,
)

if TYPE_CHECKING:
    from ..type_defs import RoutineData


def _is_int_in_range(value: object, low: int, high: int) -> bool:
    """Return True for a real int (bools excluded) within [low, high]."""
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def _is_weekday_index(value: object) -> bool:
    """Return True for a Sunday-based weekday index (0-6)."""
    return _is_int_in_range(
        value, const.SUNDAY_WEEKDAY_INDEX, const.SATURDAY_WEEKDAY_INDEX
    )


# =============================================================================
# EXCEPTIONS
# =============================================================================


class InvalidScheduleConfiguration(Exception):
    """Raised when a schedule fails its invariants.

    Surfaced to the user as a blocking, correctable error. The field attribute
    lets the routine editor highlight the control that caused the failure.

    Attributes:
        field: The CFOP_ERROR_* constant identifying the failing field
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize InvalidScheduleConfiguration.

        Args:
            field: The CFOP_ERROR_* constant for the field that failed validation
            translation_key: The TRANS_KEY_* constant for error message
            placeholders: Optional dict for translation placeholders
        """
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(f"Invalid schedule configuration: {field}={translation_key}")


class UnsupportedShiftOperation(Exception):
    """Raised when a shift is requested for a non-interval schedule.

    Only interval schedules have an anchor to move; the UI must not offer
    shifting for anything else.
    """

    def __init__(self, schedule_type: str) -> None:
        """Initialize UnsupportedShiftOperation.

        Args:
            schedule_type: The schedule type the shift was attempted on
        """
        self.schedule_type = schedule_type
        super().__init__(
            f"Cannot shift a '{schedule_type}' schedule; "
            f"only '{const.SCHEDULE_TYPE_INTERVAL}' schedules can be shifted"
        )


# =============================================================================
# SCHEDULE SPEC DATA STRUCTURE
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScheduleSpec:
    """Recurrence configuration attached to one routine.

    Construction normalizes but does not validate, so an in-progress draft
    from the routine editor can be represented and checked with
    ScheduleEngine.is_valid().

    Attributes:
        schedule_type: SCHEDULE_TYPE_* constant
        days: Weekday indices (0 = Sunday), used only for weekly schedules
        interval_days: Cycle length in days, used only for interval schedules
        anchor_date: First due day of the cycle, used only for interval schedules
    """

    schedule_type: str = const.SCHEDULE_TYPE_NONE
    days: frozenset[int] = frozenset()
    interval_days: int | None = None
    anchor_date: date | None = None

    def __post_init__(self) -> None:
        """Normalize days to a frozenset and the anchor to a calendar day."""
        object.__setattr__(self, "days", frozenset(self.days or ()))
        if isinstance(self.anchor_date, datetime):
            object.__setattr__(
                self, "anchor_date", dt_as_local_date(self.anchor_date)
            )


# =============================================================================
# SCHEDULE ENGINE
# =============================================================================


class ScheduleEngine:
    """Pure logic engine for routine occurrences, descriptions and shifting.

    All methods are static - no instance state. Results depend only on the
    arguments, so the engine is safe to call from any number of readers.
    """

    # Sunday-based index -> rrule weekday
    RRULE_WEEKDAYS: ClassVar[tuple] = (SU, MO, TU, WE, TH, FR, SA)

    # =========================================================================
    # Stored record decoding
    # =========================================================================

    @staticmethod
    def decode_schedule_days(raw: str | None) -> frozenset[int]:
        """Decode the stored "1,3,5" day list.

        Blank or malformed entries are skipped; range checking is left to
        validation so a corrupt record is reported rather than silently fixed.
        """
        if not raw:
            return frozenset()
        days: set[int] = set()
        for part in str(raw).split(const.SCHEDULE_DAYS_SEPARATOR):
            part = part.strip()
            try:
                days.add(int(part))
            except ValueError:
                if part:
                    const.LOGGER.debug(
                        "ScheduleEngine: Ignoring malformed stored weekday: %s", part
                    )
        return frozenset(days)

    @staticmethod
    def spec_from_routine(routine: RoutineData) -> ScheduleSpec:
        """Build a ScheduleSpec from a stored routine record (no validation).

        Missing fields decode to the neutral value, so an unscheduled routine
        without schedule columns becomes a type-none spec.
        """
        start_raw = routine.get(const.DATA_ROUTINE_SCHEDULE_START_DATE)
        anchor = start_raw if isinstance(start_raw, date) else dt_parse_date(start_raw)
        return ScheduleSpec(
            schedule_type=routine.get(
                const.DATA_ROUTINE_SCHEDULE_TYPE, const.SCHEDULE_TYPE_NONE
            )
            or const.SCHEDULE_TYPE_NONE,
            days=ScheduleEngine.decode_schedule_days(
                routine.get(const.DATA_ROUTINE_SCHEDULE_DAYS)
            ),
            interval_days=routine.get(const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS),
            anchor_date=anchor,
        )

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate_schedule_spec(spec: ScheduleSpec) -> dict[str, str]:
        """Check a spec against its invariants.

        Returns:
            {field: translation_key} for the first failing rule, or an empty
            dict when the spec is valid.
        """
        schedule_type = spec.schedule_type

        if schedule_type not in const.SCHEDULE_TYPES:
            return {const.CFOP_ERROR_SCHEDULE_TYPE: const.TRANS_KEY_INVALID_SCHEDULE_TYPE}

        if schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            if not spec.days:
                return {const.CFOP_ERROR_SCHEDULE_DAYS: const.TRANS_KEY_NO_DAYS_SELECTED}
            if not all(_is_weekday_index(day) for day in spec.days):
                return {const.CFOP_ERROR_SCHEDULE_DAYS: const.TRANS_KEY_INVALID_WEEKDAY}

        if schedule_type == const.SCHEDULE_TYPE_INTERVAL:
            if not _is_int_in_range(
                spec.interval_days, const.MIN_INTERVAL_DAYS, const.MAX_INTERVAL_DAYS
            ):
                return {const.CFOP_ERROR_SCHEDULE_INTERVAL: const.TRANS_KEY_INVALID_INTERVAL}
            if spec.anchor_date is None:
                return {
                    const.CFOP_ERROR_SCHEDULE_START_DATE: const.TRANS_KEY_MISSING_START_DATE
                }
            if not isinstance(spec.anchor_date, date):
                return {
                    const.CFOP_ERROR_SCHEDULE_START_DATE: const.TRANS_KEY_INVALID_START_DATE
                }

        return {}

    @staticmethod
    def is_valid(spec: ScheduleSpec) -> bool:
        """Return True if the spec satisfies its invariants.

        Gates the editor's Save button and every commit.
        """
        return not ScheduleEngine.validate_schedule_spec(spec)

    @staticmethod
    def ensure_valid(spec: ScheduleSpec) -> None:
        """Raise InvalidScheduleConfiguration if the spec fails its invariants."""
        errors = ScheduleEngine.validate_schedule_spec(spec)
        if errors:
            field, translation_key = next(iter(errors.items()))
            raise InvalidScheduleConfiguration(
                field=field,
                translation_key=translation_key,
                placeholders={"schedule_type": str(spec.schedule_type)},
            )

    # =========================================================================
    # Occurrence calculation
    # =========================================================================

    @staticmethod
    def is_scheduled_for(spec: ScheduleSpec, day: date | datetime) -> bool:
        """Return True if the routine is due on the given day.

        Args:
            spec: A valid schedule spec.
            day: Day to check (datetimes are reduced to their local day).

        Raises:
            InvalidScheduleConfiguration: If the spec fails its invariants.
        """
        ScheduleEngine.ensure_valid(spec)
        check_day = dt_as_local_date(day)

        if spec.schedule_type == const.SCHEDULE_TYPE_NONE:
            return False

        if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            return weekday_index(check_day) in spec.days

        # Interval: anchor and interval are guaranteed by ensure_valid
        anchor = dt_as_local_date(spec.anchor_date)  # type: ignore[arg-type]
        if check_day < anchor:
            return False
        days_since = dt_days_between(anchor, check_day)
        return days_since % spec.interval_days == 0  # type: ignore[operator]

    @staticmethod
    def next_occurrence(spec: ScheduleSpec, from_day: date | datetime) -> date | None:
        """Return the first due day on or after from_day.

        The reference day itself counts: a routine due today returns today.

        Args:
            spec: A valid schedule spec.
            from_day: Reference day (datetimes are reduced to their local day).

        Returns:
            The next due day, or None for schedules that never fire.

        Raises:
            InvalidScheduleConfiguration: If the spec fails its invariants.

        Examples:
            Weekly {Mon, Wed, Fri}, from Tuesday → Wednesday
            Every 3 days from Jan 1, from Jan 5 → Jan 7
        """
        ScheduleEngine.ensure_valid(spec)
        start = dt_as_local_date(from_day)

        if spec.schedule_type == const.SCHEDULE_TYPE_NONE:
            const.LOGGER.debug("ScheduleEngine: Schedule type is none, no occurrence")
            return None

        if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            # Every weekday recurs within one week, so seven days always suffice
            for candidate in dt_iter_days(start, const.DAYS_PER_WEEK):
                if weekday_index(candidate) in spec.days:
                    return candidate
            return None

        anchor = dt_as_local_date(spec.anchor_date)  # type: ignore[arg-type]
        if start < anchor:
            return anchor

        interval = spec.interval_days
        remainder = dt_days_between(anchor, start) % interval  # type: ignore[operator]
        if remainder == 0:
            return start
        return dt_add_days(start, interval - remainder)  # type: ignore[operator]

    @staticmethod
    def get_occurrences(
        spec: ScheduleSpec, start: date | datetime, days: int
    ) -> list[date]:
        """List every due day in the window [start, start + days).

        Uses dateutil.rrule for the expansion; results agree day-for-day with
        is_scheduled_for().

        Args:
            spec: A valid schedule spec.
            start: First day of the window.
            days: Window length in days (<= 0 gives an empty list).

        Returns:
            Sorted list of due days inside the window.
        """
        ScheduleEngine.ensure_valid(spec)
        if spec.schedule_type == const.SCHEDULE_TYPE_NONE or days <= 0:
            return []

        window_start_day = dt_as_local_date(start)
        window_start = datetime.combine(window_start_day, time.min)
        window_end = datetime.combine(dt_add_days(window_start_day, days - 1), time.min)

        if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            rule = rrule(
                WEEKLY,
                dtstart=window_start,
                byweekday=[ScheduleEngine.RRULE_WEEKDAYS[d] for d in sorted(spec.days)],
                until=window_end,
            )
            return [occurrence.date() for occurrence in rule]

        anchor = dt_as_local_date(spec.anchor_date)  # type: ignore[arg-type]
        rule = rrule(
            DAILY,
            interval=spec.interval_days,  # type: ignore[arg-type]
            dtstart=datetime.combine(anchor, time.min),
        )
        return [
            occurrence.date()
            for occurrence in rule.between(window_start, window_end, inc=True)
        ]

    # =========================================================================
    # Shifting
    # =========================================================================

    @staticmethod
    def shift_anchor(spec: ScheduleSpec, forward: bool) -> date:
        """Return the interval anchor moved by one day.

        Moves the whole cycle one day later (forward=True) or earlier without
        touching interval_days. Nothing is persisted here; the caller commits
        the returned value.

        Raises:
            UnsupportedShiftOperation: If the spec is not an interval schedule.
            InvalidScheduleConfiguration: If the interval spec fails its invariants.
        """
        if spec.schedule_type != const.SCHEDULE_TYPE_INTERVAL:
            raise UnsupportedShiftOperation(spec.schedule_type)
        ScheduleEngine.ensure_valid(spec)

        step = const.SHIFT_STEP_DAYS if forward else -const.SHIFT_STEP_DAYS
        return dt_add_days(spec.anchor_date, step)  # type: ignore[arg-type]

    @staticmethod
    def shift_schedule(spec: ScheduleSpec, forward: bool) -> ScheduleSpec:
        """Return a copy of the spec carrying the shifted anchor."""
        return replace(spec, anchor_date=ScheduleEngine.shift_anchor(spec, forward))

    # =========================================================================
    # Descriptions
    # =========================================================================

    @staticmethod
    def describe_schedule(spec: ScheduleSpec) -> str:
        """Return a short human-readable summary for badges and previews.

        Never raises: drafts that are not valid yet still get a description.

        Examples:
            Weekly {1, 3, 5} → "Every Mon, Wed, Fri"
            Interval 3 → "Every 3 days"
        """
        if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            names = [
                const.WEEKDAY_SHORT_NAMES[day]
                for day in sorted(d for d in spec.days if _is_weekday_index(d))
            ]
            if not names:
                return const.DISPLAY_NO_DAYS_SELECTED
            return f"Every {', '.join(names)}"

        if spec.schedule_type == const.SCHEDULE_TYPE_INTERVAL:
            interval = spec.interval_days
            if interval is None:
                return const.DISPLAY_INTERVAL_NOT_SET
            if interval == 1:
                return const.DISPLAY_EVERY_DAY
            return f"Every {interval} days"

        return const.DISPLAY_NO_SCHEDULE

    @staticmethod
    def describe_interval(interval_days: int) -> str:
        """Caption for the interval picker (friendlier wording for whole weeks)."""
        if interval_days == 1:
            return const.DISPLAY_EVERY_DAY
        if interval_days == 7:
            return const.DISPLAY_ONCE_A_WEEK
        if interval_days == 14:
            return const.DISPLAY_EVERY_TWO_WEEKS
        return f"Every {interval_days} days"

    @staticmethod
    def format_next_occurrence(spec: ScheduleSpec, today: date | datetime) -> str:
        """Format the next due day relative to today.

        Returns:
            "Today", "Tomorrow", "Wednesday, Jan 7" or "Not scheduled".

        Raises:
            InvalidScheduleConfiguration: If the spec fails its invariants.
        """
        today_day = dt_as_local_date(today)
        upcoming = ScheduleEngine.next_occurrence(spec, today_day)

        if upcoming is None:
            return const.DISPLAY_NOT_SCHEDULED
        if upcoming == today_day:
            return const.DISPLAY_TODAY
        if upcoming == dt_add_days(today_day, 1):
            return const.DISPLAY_TOMORROW
        return dt_format_day_label(upcoming)

    @staticmethod
    def to_rrule_string(spec: ScheduleSpec) -> str:
        """Generate an RFC 5545 RRULE string for calendar export.

        The interval anchor is not part of the rule; exporters emit it as DTSTART.

        Returns:
            RRULE string (e.g., "FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE,FR"),
            or empty string for schedules that never fire.
        """
        ScheduleEngine.ensure_valid(spec)

        if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
            days = ",".join(const.WEEKDAY_RRULE_CODES[d] for d in sorted(spec.days))
            return f"FREQ=WEEKLY;INTERVAL=1;BYDAY={days}"
        if spec.schedule_type == const.SCHEDULE_TYPE_INTERVAL:
            return f"FREQ=DAILY;INTERVAL={spec.interval_days}"
        return ""


# =============================================================================
# Module-level convenience functions
# =============================================================================


def is_valid(spec: ScheduleSpec) -> bool:
    """Return True if the spec satisfies its invariants."""
    return ScheduleEngine.is_valid(spec)


def is_scheduled_for(spec: ScheduleSpec, day: date | datetime) -> bool:
    """Return True if the routine is due on the given day."""
    return ScheduleEngine.is_scheduled_for(spec, day)


def next_occurrence(spec: ScheduleSpec, from_day: date | datetime) -> date | None:
    """Return the first due day on or after from_day."""
    return ScheduleEngine.next_occurrence(spec, from_day)


def describe_schedule(spec: ScheduleSpec) -> str:
    """Return a short human-readable summary of the schedule."""
    return ScheduleEngine.describe_schedule(spec)


def shift(spec: ScheduleSpec, forward: bool) -> date:
    """Return the interval anchor moved one day forward or backward."""
    return ScheduleEngine.shift_anchor(spec, forward)
