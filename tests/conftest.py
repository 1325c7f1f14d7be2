"""Shared fixtures for FitNotes scheduling tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from fitnotes import const
from fitnotes.managers import RoutineScheduleManager
from fitnotes.store import RoutineStore
from fitnotes.type_defs import RoutineData
from fitnotes.utils import dt_utils


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Keep timezone changes from leaking between tests."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def berlin_tz() -> ZoneInfo:
    """Set Europe/Berlin as the local zone."""
    tz = ZoneInfo("Europe/Berlin")
    dt_utils.set_default_timezone(tz)
    return tz


def _routine(
    internal_id: str,
    name: str,
    schedule_type: str = const.SCHEDULE_TYPE_NONE,
    schedule_days: str | None = None,
    schedule_interval_days: int | None = None,
    schedule_start_date: str | None = None,
) -> RoutineData:
    return RoutineData(
        internal_id=internal_id,
        name=name,
        schedule_type=schedule_type,
        schedule_days=schedule_days,
        schedule_interval_days=schedule_interval_days,
        schedule_start_date=schedule_start_date,
    )


@pytest.fixture
def make_routine() -> Callable[..., RoutineData]:
    """Factory for stored routine records."""
    return _routine


@pytest.fixture
def push_day() -> RoutineData:
    """Weekly routine on Mon, Wed, Fri."""
    return _routine("push", "Push Day", const.SCHEDULE_TYPE_WEEKLY, "1,3,5")


@pytest.fixture
def leg_day() -> RoutineData:
    """Every 3 days starting Jan 1, 2026."""
    return _routine(
        "legs",
        "Leg Day",
        const.SCHEDULE_TYPE_INTERVAL,
        schedule_interval_days=3,
        schedule_start_date="2026-01-01",
    )


@pytest.fixture
def rest_day() -> RoutineData:
    """Unscheduled routine."""
    return _routine("rest", "Mobility")


@pytest.fixture
def store(
    push_day: RoutineData, leg_day: RoutineData, rest_day: RoutineData
) -> RoutineStore:
    """Store holding Push Day, Leg Day and an unscheduled routine."""
    routine_store = RoutineStore()
    for routine in (push_day, leg_day, rest_day):
        routine_store.add_routine(routine)
    return routine_store


@pytest.fixture
def manager(store: RoutineStore) -> RoutineScheduleManager:
    """Routine schedule manager over the shared store."""
    routine_manager = RoutineScheduleManager(store)
    routine_manager.setup()
    return routine_manager


class FailingStore(RoutineStore):
    """Store whose backend rejects every write."""

    def save(self, data: dict[str, Any]) -> None:
        raise OSError("disk full")


@pytest.fixture
def failing_store(push_day: RoutineData, leg_day: RoutineData) -> FailingStore:
    """Failing store preloaded without going through save()."""
    return FailingStore(
        {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.STORAGE_VERSION},
            const.DATA_ROUTINES: {
                push_day[const.DATA_ROUTINE_INTERNAL_ID]: dict(push_day),
                leg_day[const.DATA_ROUTINE_INTERNAL_ID]: dict(leg_day),
            },
        }
    )
