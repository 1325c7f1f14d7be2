"""Manager modules for FitNotes routine scheduling.

Managers orchestrate workflows and coordinate between engines and the store.
"""

from .base_manager import BaseManager
from .routine_manager import RoutineScheduleManager

__all__ = [
    "BaseManager",
    "RoutineScheduleManager",
]
