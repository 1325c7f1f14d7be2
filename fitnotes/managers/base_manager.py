"""Base manager class for FitNotes managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..store import RoutineStore


class BaseManager(ABC):
    """Base class for FitNotes managers with in-process event support.

    Provides:
    - Event emitting (emit)
    - Event listening (listen), returning an unsubscribe callable

    Listeners run synchronously in subscription order and receive the payload
    as a single dict argument.

    Subclasses must implement:
    - setup(): Subscribe to events, initialize state
    """

    def __init__(self, store: RoutineStore) -> None:
        """Initialize manager.

        Args:
            store: Routine store this manager reads from and commits to
        """
        self.store = store
        self._listeners: dict[str, list[Callable[[dict[str, Any]], Any]]] = {}

    def emit(self, signal: str, **payload: Any) -> None:
        """Emit an event to every listener of this manager.

        Args:
            signal: Signal constant (e.g., const.SIGNAL_SCHEDULE_UPDATED)
            **payload: Event data dict passed to listeners

        Example:
            self.emit(
                const.SIGNAL_SCHEDULE_SHIFTED,
                routine_id=routine_id,
                anchor_date="2026-01-06",
                forward=True,
            )
        """
        const.LOGGER.debug(
            "Emitting event '%s' from %s with payload keys: %s",
            signal,
            self.__class__.__name__,
            list(payload.keys()),
        )
        for callback in list(self._listeners.get(signal, [])):
            callback(payload)

    def listen(
        self, signal: str, callback: Callable[[dict[str, Any]], Any]
    ) -> Callable[[], None]:
        """Subscribe to an event.

        Args:
            signal: Signal constant to listen for
            callback: Function called with the payload dict when the event fires

        Returns:
            Callable that removes the subscription.

        Example:
            def _on_schedule_updated(payload: dict[str, Any]) -> None:
                refresh_badge(payload["routine_id"])

            unsub = manager.listen(const.SIGNAL_SCHEDULE_UPDATED, _on_schedule_updated)
        """
        callbacks = self._listeners.setdefault(signal, [])
        callbacks.append(callback)
        const.LOGGER.debug(
            "Manager %s listening to event '%s'",
            self.__class__.__name__,
            signal,
        )

        def _unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    @abstractmethod
    def setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once after construction.
        """
