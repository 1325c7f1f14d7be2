"""Tests for RoutineStore - cache reads and atomic commits."""

from __future__ import annotations

from typing import Any

import pytest

from fitnotes import const
from fitnotes.store import RoutineStore
from fitnotes.type_defs import RoutineData


class RecordingStore(RoutineStore):
    """Store that records every data set handed to save()."""

    def __init__(self) -> None:
        super().__init__()
        self.saved: list[dict[str, Any]] = []

    def save(self, data: dict[str, Any]) -> None:
        self.saved.append(data)


# =============================================================================
# TEST: STRUCTURE AND READS
# =============================================================================


class TestRoutineStoreReads:
    """Test default structure and lookups."""

    def test_default_structure(self) -> None:
        """Fresh stores have meta and an empty routines bucket."""
        store = RoutineStore()
        assert store.data == {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.STORAGE_VERSION},
            const.DATA_ROUTINES: {},
        }
        assert store.get_routines() == []

    def test_loaded_data_gets_routines_bucket(self) -> None:
        """Loaded data without routines is given an empty bucket."""
        store = RoutineStore({const.DATA_META: {}})
        assert store.get_routines() == []

    def test_loaded_data_is_copied(self) -> None:
        """Loading does not add keys to the caller's dict."""
        loaded: dict[str, Any] = {const.DATA_META: {}}
        RoutineStore(loaded)
        assert const.DATA_ROUTINES not in loaded

    def test_insertion_order(self, store: RoutineStore) -> None:
        """Routines come back in the order they were added."""
        assert [r[const.DATA_ROUTINE_INTERNAL_ID] for r in store.get_routines()] == [
            "push",
            "legs",
            "rest",
        ]

    def test_unknown_id_raises(self, store: RoutineStore) -> None:
        """Unknown ids raise KeyError."""
        with pytest.raises(KeyError):
            store.get_routine("missing")


# =============================================================================
# TEST: COMMITS
# =============================================================================


class TestRoutineStoreCommits:
    """Test add, update and remove."""

    def test_add_routine_copies_record(self, push_day: RoutineData) -> None:
        """The stored record is independent of the caller's dict."""
        store = RoutineStore()
        store.add_routine(push_day)
        push_day[const.DATA_ROUTINE_NAME] = "Changed"
        assert store.get_routine("push")[const.DATA_ROUTINE_NAME] == "Push Day"

    def test_add_duplicate_id_raises(
        self, store: RoutineStore, push_day: RoutineData
    ) -> None:
        """Adding over an existing id fails and keeps the stored record."""
        duplicate = {**push_day, const.DATA_ROUTINE_NAME: "Other"}
        with pytest.raises(ValueError):
            store.add_routine(duplicate)
        assert store.get_routine("push")[const.DATA_ROUTINE_NAME] == "Push Day"
        assert len(store.get_routines()) == 3

    def test_update_fields_together(self, store: RoutineStore) -> None:
        """All fields land in one new record with a fresh updated_at."""
        updated = store.update_routine_fields(
            "legs",
            {
                const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS: 4,
                const.DATA_ROUTINE_SCHEDULE_START_DATE: "2026-01-02",
            },
        )
        assert updated[const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS] == 4
        assert updated[const.DATA_ROUTINE_SCHEDULE_START_DATE] == "2026-01-02"
        assert updated[const.DATA_ROUTINE_NAME] == "Leg Day"
        assert const.DATA_ROUTINE_UPDATED_AT in updated
        assert store.get_routine("legs") is updated

    def test_update_does_not_mutate_previous_record(self, store: RoutineStore) -> None:
        """Readers holding the old record never see a half-applied update."""
        before = store.get_routine("legs")
        store.update_routine_fields("legs", {const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS: 5})
        assert before[const.DATA_ROUTINE_SCHEDULE_INTERVAL_DAYS] == 3

    def test_update_unknown_id_raises(self, store: RoutineStore) -> None:
        """Updating a missing routine raises KeyError."""
        with pytest.raises(KeyError):
            store.update_routine_fields("missing", {const.DATA_ROUTINE_NAME: "x"})

    def test_remove_routine(self, store: RoutineStore) -> None:
        """Removed routines disappear from reads."""
        removed = store.remove_routine("push")
        assert removed[const.DATA_ROUTINE_NAME] == "Push Day"
        with pytest.raises(KeyError):
            store.get_routine("push")

    def test_save_receives_complete_data(self, leg_day: RoutineData) -> None:
        """save() sees the full new data set before it becomes visible."""
        store = RecordingStore()
        store.add_routine(leg_day)
        store.update_routine_fields(
            "legs", {const.DATA_ROUTINE_SCHEDULE_START_DATE: "2026-01-02"}
        )

        assert len(store.saved) == 2
        last = store.saved[-1][const.DATA_ROUTINES]["legs"]
        assert last[const.DATA_ROUTINE_SCHEDULE_START_DATE] == "2026-01-02"
        assert store.saved[-1] is store.data

    def test_failed_save_leaves_cache_unchanged(
        self, failing_store: RoutineStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing backend aborts the commit and the error propagates."""
        before = failing_store.get_routine("legs")

        with pytest.raises(OSError, match="disk full"):
            failing_store.update_routine_fields(
                "legs", {const.DATA_ROUTINE_SCHEDULE_START_DATE: "2026-01-02"}
            )

        assert failing_store.get_routine("legs") is before
        assert before[const.DATA_ROUTINE_SCHEDULE_START_DATE] == "2026-01-01"
        assert "Failed to save routines" in caplog.text
