# File: store.py
"""In-memory routine storage with atomic record commits.

Holds the routine records the scheduling core reads and writes, keyed by
internal_id in insertion order. Persistence is delegated to the `save` hook,
which receives the complete new data set before the cache is swapped; a
failing save leaves the cache exactly as it was.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from . import const
from .utils.dt_utils import dt_now_iso

if TYPE_CHECKING:
    from .type_defs import RoutineData, RoutinesCollection


class RoutineStore:
    """Handles routine storage operations for the scheduling core.

    Thin cache around a persistence backend. Utilizes internal_id as the
    primary key for all routines. Subclasses override save() to write to
    real storage (database row, JSON file).
    """

    def __init__(
        self,
        data: dict[str, Any] | None = None,
        storage_key: str = const.STORAGE_KEY,
    ) -> None:
        """Initialize the store.

        Args:
            data: Previously loaded data, or None for a fresh structure.
            storage_key: Key to identify the storage location.
        """
        self._storage_key = storage_key
        self._data: dict[str, Any] = (
            dict(data) if data is not None else RoutineStore.get_default_structure()
        )
        self._data.setdefault(const.DATA_ROUTINES, {})

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.STORAGE_VERSION,
            },
            const.DATA_ROUTINES: {},
        }

    @property
    def storage_key(self) -> str:
        """Return the storage key."""
        return self._storage_key

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    @property
    def routines(self) -> RoutinesCollection:
        """Return the routines bucket keyed by internal_id."""
        return self._data[const.DATA_ROUTINES]

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure (no save)."""
        const.LOGGER.debug(
            "RoutineStore: set_data called with %s routines",
            len(new_data.get(const.DATA_ROUTINES, {})),
        )
        new_data.setdefault(const.DATA_ROUTINES, {})
        self._data = new_data

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_routines(self) -> list[RoutineData]:
        """Return all routines in insertion order."""
        return list(self.routines.values())

    def get_routine(self, routine_id: str) -> RoutineData:
        """Return one routine record.

        Raises:
            KeyError: If no routine has this id.
        """
        try:
            return self.routines[routine_id]
        except KeyError:
            const.LOGGER.warning("RoutineStore: Unknown routine id '%s'", routine_id)
            raise

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add_routine(self, routine: RoutineData) -> RoutineData:
        """Insert a complete routine record and persist it.

        Raises:
            ValueError: If a routine with this id already exists.
        """
        routine_id = routine[const.DATA_ROUTINE_INTERNAL_ID]
        if routine_id in self.routines:
            const.LOGGER.warning(
                "RoutineStore: Routine id '%s' already exists", routine_id
            )
            raise ValueError(f"Routine id '{routine_id}' already exists")
        self._commit(routine_id, dict(routine))
        const.LOGGER.debug(
            "RoutineStore: Added routine '%s' (%s)",
            routine.get(const.DATA_ROUTINE_NAME),
            routine_id,
        )
        return self.routines[routine_id]

    def remove_routine(self, routine_id: str) -> RoutineData:
        """Delete a routine and persist the change.

        Raises:
            KeyError: If no routine has this id.
        """
        removed = self.get_routine(routine_id)
        new_routines = {
            key: value for key, value in self.routines.items() if key != routine_id
        }
        self._save_and_swap({**self._data, const.DATA_ROUTINES: new_routines})
        const.LOGGER.debug("RoutineStore: Removed routine %s", routine_id)
        return removed

    def update_routine_fields(
        self, routine_id: str, fields: dict[str, Any]
    ) -> RoutineData:
        """Replace several fields of one routine in a single commit.

        The complete new record is built first and the cache is swapped only
        after save() succeeds, so readers never see a partially applied update.

        Raises:
            KeyError: If no routine has this id.
            Exception: Whatever save() raises; the cached record is unchanged.
        """
        current = self.get_routine(routine_id)
        updated: dict[str, Any] = {**current, **fields}
        updated[const.DATA_ROUTINE_UPDATED_AT] = dt_now_iso()
        self._commit(routine_id, updated)
        return self.routines[routine_id]

    def save(self, data: dict[str, Any]) -> None:
        """Persist the complete data set. No-op for the in-memory store.

        Called with the new data before it becomes visible; raising here
        aborts the commit.
        """

    def _commit(self, routine_id: str, record: dict[str, Any]) -> None:
        """Write one record through save() and swap the cache."""
        new_routines = dict(self.routines)
        new_routines[routine_id] = record
        self._save_and_swap({**self._data, const.DATA_ROUTINES: new_routines})

    def _save_and_swap(self, new_data: dict[str, Any]) -> None:
        try:
            self.save(new_data)
        except (OSError, TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save routines to '%s': %s. Cached data unchanged",
                self._storage_key,
                err,
            )
            raise
        self._data = new_data
