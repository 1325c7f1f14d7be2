# File: const.py
"""Constants for the FitNotes routine scheduling core.

This file centralizes schedule-type keys, storage keys, limits, error keys and
display strings for consistency across the engines, builders and managers.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Package Information
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Schedule Types
# ------------------------------------------------------------------------------------------------
# Raw values match the persisted schedule_type column
SCHEDULE_TYPE_NONE = "none"
SCHEDULE_TYPE_WEEKLY = "weekly"
SCHEDULE_TYPE_INTERVAL = "interval"

SCHEDULE_TYPES = (
    SCHEDULE_TYPE_NONE,
    SCHEDULE_TYPE_WEEKLY,
    SCHEDULE_TYPE_INTERVAL,
)

# ------------------------------------------------------------------------------------------------
# Weekdays (0 = Sunday .. 6 = Saturday)
# ------------------------------------------------------------------------------------------------
SUNDAY_WEEKDAY_INDEX = 0
SATURDAY_WEEKDAY_INDEX = 6
DAYS_PER_WEEK = 7

WEEKDAY_SHORT_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# RFC 5545 BYDAY codes, indexed the same way
WEEKDAY_RRULE_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")

# ------------------------------------------------------------------------------------------------
# Limits and Windows
# ------------------------------------------------------------------------------------------------
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 30

# Conflict lookahead: covers a full weekly cycle and the longest interval twice
CONFLICT_LOOKAHEAD_DAYS = 60

# Shift step for interval anchors
SHIFT_STEP_DAYS = 1

# ------------------------------------------------------------------------------------------------
# Storage Keys
# ------------------------------------------------------------------------------------------------
STORAGE_KEY = "fitnotes_routines"
STORAGE_VERSION = 1

DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_ROUTINES = "routines"

DATA_ROUTINE_INTERNAL_ID = "internal_id"
DATA_ROUTINE_NAME = "name"
DATA_ROUTINE_SCHEDULE_TYPE = "schedule_type"
DATA_ROUTINE_SCHEDULE_DAYS = "schedule_days"
DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS = "schedule_interval_days"
DATA_ROUTINE_SCHEDULE_START_DATE = "schedule_start_date"
DATA_ROUTINE_CREATED_AT = "created_at"
DATA_ROUTINE_UPDATED_AT = "updated_at"

# Fields replaced together on every schedule commit
SCHEDULE_FIELDS = (
    DATA_ROUTINE_SCHEDULE_TYPE,
    DATA_ROUTINE_SCHEDULE_DAYS,
    DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS,
    DATA_ROUTINE_SCHEDULE_START_DATE,
)

SCHEDULE_DAYS_SEPARATOR = ","

# ------------------------------------------------------------------------------------------------
# Signals
# ------------------------------------------------------------------------------------------------
SIGNAL_SCHEDULE_UPDATED = "schedule_updated"
SIGNAL_SCHEDULE_SHIFTED = "schedule_shifted"

# ------------------------------------------------------------------------------------------------
# Error Keys (field -> translation key)
# ------------------------------------------------------------------------------------------------
CFOP_ERROR_ROUTINE_NAME = "routine_name"
CFOP_ERROR_SCHEDULE_TYPE = "schedule_type"
CFOP_ERROR_SCHEDULE_DAYS = "schedule_days"
CFOP_ERROR_SCHEDULE_INTERVAL = "schedule_interval_days"
CFOP_ERROR_SCHEDULE_START_DATE = "schedule_start_date"

TRANS_KEY_INVALID_ROUTINE_NAME = "invalid_routine_name"
TRANS_KEY_INVALID_SCHEDULE_TYPE = "invalid_schedule_type"
TRANS_KEY_NO_DAYS_SELECTED = "no_days_selected"
TRANS_KEY_INVALID_WEEKDAY = "invalid_weekday"
TRANS_KEY_INVALID_INTERVAL = "invalid_interval"
TRANS_KEY_MISSING_START_DATE = "missing_start_date"
TRANS_KEY_INVALID_START_DATE = "invalid_start_date"

# ------------------------------------------------------------------------------------------------
# Display Strings
# ------------------------------------------------------------------------------------------------
DISPLAY_NO_SCHEDULE = "No schedule set"
DISPLAY_NO_DAYS_SELECTED = "No days selected"
DISPLAY_INTERVAL_NOT_SET = "Interval not set"
DISPLAY_EVERY_DAY = "Every day"
DISPLAY_ONCE_A_WEEK = "Once a week"
DISPLAY_EVERY_TWO_WEEKS = "Every two weeks"
DISPLAY_NOT_SCHEDULED = "Not scheduled"
DISPLAY_TODAY = "Today"
DISPLAY_TOMORROW = "Tomorrow"
