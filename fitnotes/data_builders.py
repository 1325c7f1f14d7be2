"""Routine and schedule record building helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Coercion of raw schedule input from the routine editor
- Schedule validation results in the {field: translation_key} shape
- Conversion between ScheduleSpec values and the stored schedule columns
- Complete routine record building (ids, timestamps, name validation)

## Key Concepts

### Raw input
The editor hands over loosely typed values: weekday lists or "1,3,5" strings,
interval counts from a stepper (int or str), start dates as `date`, `datetime`
or a date string. `SCHEDULE_INPUT_SCHEMA` (voluptuous) coerces these into the
shapes ScheduleSpec expects. Values that cannot be coerced are rejected; they
are never replaced by a default.

### Storage columns
A schedule is stored as four columns (see const.SCHEDULE_FIELDS). Every commit
writes all four; columns that are not meaningful for the schedule type are
cleared to None so a stale interval never survives a switch to weekly.

Consumers:
- managers/routine_manager.py (preview, conflict check, commit)

See Also:
- engines/schedule_engine.py: invariants and occurrence maths
- type_defs.py: RoutineData / ScheduleFields / ScheduleInput
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, cast
import uuid

import voluptuous as vol

from . import const
from .engines.schedule_engine import (
    InvalidScheduleConfiguration,
    ScheduleEngine,
    ScheduleSpec,
)
from .type_defs import RoutineData, ScheduleFields, ScheduleInput
from .utils.dt_utils import dt_as_local_date, dt_now_iso, dt_parse_date

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class RoutineValidationError(Exception):
    """Validation error for routine fields outside the schedule.

    Attributes:
        field: The CFOP_ERROR_* constant identifying the form field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize RoutineValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


# ==============================================================================
# INPUT COERCION
# ==============================================================================


def _coerce_day_index(value: Any) -> int:
    """Coerce one weekday entry; range checking happens in the engine."""
    if isinstance(value, bool):
        raise vol.Invalid(f"invalid weekday: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned.lstrip("-").isdigit():
            return int(cleaned)
    raise vol.Invalid(f"invalid weekday: {value!r}")


def _coerce_schedule_days(value: Any) -> frozenset[int]:
    """Accept a list/set/tuple of indices or a comma-separated string."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        parts: list[Any] = [
            part for part in value.split(const.SCHEDULE_DAYS_SEPARATOR) if part.strip()
        ]
    elif isinstance(value, (list, tuple, set, frozenset)):
        parts = list(value)
    else:
        raise vol.Invalid("expected a list of weekdays or a comma-separated string")
    return frozenset(_coerce_day_index(part) for part in parts)


def _coerce_interval_days(value: Any) -> int | None:
    """Accept an int or a digit string; blank means "not set"."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise vol.Invalid(f"invalid interval: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise vol.Invalid(f"invalid interval: {value!r}")


def _coerce_start_date(value: Any) -> date | None:
    """Accept a date, a datetime (reduced to its local day) or a date string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, (date, datetime)):
        return dt_as_local_date(value)
    if isinstance(value, str):
        parsed = dt_parse_date(value)
        if parsed is not None:
            return parsed
    raise vol.Invalid(f"invalid start date: {value!r}")


SCHEDULE_INPUT_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.DATA_ROUTINE_SCHEDULE_TYPE, default=const.SCHEDULE_TYPE_NONE
        ): vol.In(const.SCHEDULE_TYPES),
        vol.Optional(
            const.DATA_ROUTINE_SCHEDULE_DAYS, default=frozenset
        ): _coerce_schedule_days,
        vol.Optional(
            const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS, default=None
        ): _coerce_interval_days,
        vol.Optional(
            const.DATA_ROUTINE_SCHEDULE_START_DATE, default=None
        ): _coerce_start_date,
    },
    extra=vol.REMOVE_EXTRA,
)

# Input key -> (error field, translation key) for schema failures
_SCHEMA_ERRORS: dict[str, tuple[str, str]] = {
    const.DATA_ROUTINE_SCHEDULE_TYPE: (
        const.CFOP_ERROR_SCHEDULE_TYPE,
        const.TRANS_KEY_INVALID_SCHEDULE_TYPE,
    ),
    const.DATA_ROUTINE_SCHEDULE_DAYS: (
        const.CFOP_ERROR_SCHEDULE_DAYS,
        const.TRANS_KEY_INVALID_WEEKDAY,
    ),
    const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS: (
        const.CFOP_ERROR_SCHEDULE_INTERVAL,
        const.TRANS_KEY_INVALID_INTERVAL,
    ),
    const.DATA_ROUTINE_SCHEDULE_START_DATE: (
        const.CFOP_ERROR_SCHEDULE_START_DATE,
        const.TRANS_KEY_INVALID_START_DATE,
    ),
}


def _schema_errors(err: vol.MultipleInvalid) -> dict[str, str]:
    """Translate voluptuous errors into {field: translation_key}."""
    errors: dict[str, str] = {}
    for error in err.errors:
        key = error.path[0] if error.path else const.DATA_ROUTINE_SCHEDULE_TYPE
        field, translation_key = _SCHEMA_ERRORS.get(
            key, _SCHEMA_ERRORS[const.DATA_ROUTINE_SCHEDULE_TYPE]
        )
        errors.setdefault(field, translation_key)
    return errors


def _parse_schedule_input(
    user_input: ScheduleInput,
) -> tuple[ScheduleSpec | None, dict[str, str]]:
    """Coerce and validate raw input; returns (spec, errors)."""
    try:
        cleaned = SCHEDULE_INPUT_SCHEMA(user_input)
    except vol.MultipleInvalid as err:
        return None, _schema_errors(err)

    spec = ScheduleSpec(
        schedule_type=cleaned[const.DATA_ROUTINE_SCHEDULE_TYPE],
        days=cleaned[const.DATA_ROUTINE_SCHEDULE_DAYS],
        interval_days=cleaned[const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS],
        anchor_date=cleaned[const.DATA_ROUTINE_SCHEDULE_START_DATE],
    )
    return spec, ScheduleEngine.validate_schedule_spec(spec)


# ==============================================================================
# SCHEDULES
# ==============================================================================


def validate_schedule_data(data: ScheduleInput) -> dict[str, str]:
    """Validate raw schedule input - SINGLE SOURCE OF TRUTH.

    Args:
        data: Raw editor input keyed by the DATA_ROUTINE_SCHEDULE_* constants

    Returns:
        Dict of errors: {error_field: translation_key}
        Empty dict means validation passed.

    Validation Rules:
        1. Every supplied value can be coerced (type, weekdays, interval, date)
        2. Weekly: at least one day, every day in 0-6
        3. Interval: 1-30 days and a start date
    """
    _spec, errors = _parse_schedule_input(data)
    return errors


def build_schedule_spec(user_input: ScheduleInput) -> ScheduleSpec:
    """Build a validated ScheduleSpec from raw editor input.

    Raises:
        InvalidScheduleConfiguration: On the first failing field.

    Examples:
        build_schedule_spec({"schedule_type": "weekly", "schedule_days": "1,3,5"})
        build_schedule_spec({
            "schedule_type": "interval",
            "schedule_interval_days": 3,
            "schedule_start_date": "2026-01-01",
        })
    """
    spec, errors = _parse_schedule_input(user_input)
    if errors or spec is None:
        field, translation_key = next(iter(errors.items()))
        const.LOGGER.debug(
            "Rejected schedule input for field '%s': %s", field, translation_key
        )
        raise InvalidScheduleConfiguration(
            field=field,
            translation_key=translation_key,
            placeholders={
                "schedule_type": str(
                    user_input.get(const.DATA_ROUTINE_SCHEDULE_TYPE, "")
                )
            },
        )
    return spec


def schedule_spec_from_routine(routine: RoutineData) -> ScheduleSpec:
    """Decode the stored schedule columns of a routine (no validation)."""
    return ScheduleEngine.spec_from_routine(routine)


def encode_schedule_days(days: frozenset[int] | set[int]) -> str | None:
    """Encode weekday indices as the stored "1,3,5" column (None when empty)."""
    if not days:
        return None
    return const.SCHEDULE_DAYS_SEPARATOR.join(str(day) for day in sorted(days))


def decode_schedule_days(raw: str | None) -> frozenset[int]:
    """Decode the stored "1,3,5" column; malformed entries are ignored."""
    return ScheduleEngine.decode_schedule_days(raw)


def build_schedule_fields(spec: ScheduleSpec) -> ScheduleFields:
    """Build the four stored schedule columns for a full replacement.

    Columns that do not apply to the schedule type are cleared to None.

    Raises:
        InvalidScheduleConfiguration: If the spec fails its invariants.
    """
    ScheduleEngine.ensure_valid(spec)

    fields = ScheduleFields(
        schedule_type=spec.schedule_type,
        schedule_days=None,
        schedule_interval_days=None,
        schedule_start_date=None,
    )
    if spec.schedule_type == const.SCHEDULE_TYPE_WEEKLY:
        fields[const.DATA_ROUTINE_SCHEDULE_DAYS] = encode_schedule_days(spec.days)
    elif spec.schedule_type == const.SCHEDULE_TYPE_INTERVAL:
        fields[const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS] = spec.interval_days
        fields[const.DATA_ROUTINE_SCHEDULE_START_DATE] = (
            spec.anchor_date.isoformat()  # type: ignore[union-attr]
        )
    return fields


# ==============================================================================
# ROUTINES
# ==============================================================================

# Bookkeeping fields set here, never taken from user_input
_MANAGED_ROUTINE_FIELDS: frozenset[str] = frozenset(
    {
        const.DATA_ROUTINE_INTERNAL_ID,
        const.DATA_ROUTINE_CREATED_AT,
        const.DATA_ROUTINE_UPDATED_AT,
    }
)


def build_routine(
    user_input: dict[str, Any],
    existing: RoutineData | None = None,
) -> RoutineData:
    """Build routine data for create or update operations.

    One function handles both create (existing=None) and update. Schedule keys
    in user_input replace all four schedule columns together; without them an
    update keeps the existing schedule and a create starts unscheduled. Keys
    the scheduling core does not know about are carried over unchanged.

    Raises:
        RoutineValidationError: If the name is missing or blank.
        InvalidScheduleConfiguration: If supplied schedule input is invalid.
    """
    is_create = existing is None

    raw_name = user_input.get(
        const.DATA_ROUTINE_NAME,
        "" if existing is None else existing.get(const.DATA_ROUTINE_NAME, ""),
    )
    name = str(raw_name).strip() if raw_name else ""
    if not name:
        raise RoutineValidationError(
            field=const.CFOP_ERROR_ROUTINE_NAME,
            translation_key=const.TRANS_KEY_INVALID_ROUTINE_NAME,
        )

    if any(key in user_input for key in const.SCHEDULE_FIELDS):
        schedule_fields = build_schedule_fields(build_schedule_spec(user_input))
    elif existing is not None:
        schedule_fields = ScheduleFields(
            schedule_type=existing.get(const.DATA_ROUTINE_SCHEDULE_TYPE)
            or const.SCHEDULE_TYPE_NONE,
            schedule_days=existing.get(const.DATA_ROUTINE_SCHEDULE_DAYS),
            schedule_interval_days=existing.get(
                const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS
            ),
            schedule_start_date=existing.get(const.DATA_ROUTINE_SCHEDULE_START_DATE),
        )
    else:
        schedule_fields = build_schedule_fields(ScheduleSpec())

    now_iso = dt_now_iso()
    record: dict[str, Any] = dict(existing) if existing is not None else {}
    record.update(
        {
            key: value
            for key, value in user_input.items()
            if key not in const.SCHEDULE_FIELDS and key not in _MANAGED_ROUTINE_FIELDS
        }
    )
    record.update(schedule_fields)
    record[const.DATA_ROUTINE_NAME] = name
    if is_create:
        record[const.DATA_ROUTINE_INTERNAL_ID] = str(uuid.uuid4())
        record[const.DATA_ROUTINE_CREATED_AT] = now_iso
    else:
        record.setdefault(const.DATA_ROUTINE_INTERNAL_ID, str(uuid.uuid4()))
        record.setdefault(const.DATA_ROUTINE_CREATED_AT, now_iso)
    record[const.DATA_ROUTINE_UPDATED_AT] = now_iso

    return cast(RoutineData, record)
