# File: utils/__init__.py
"""Pure Python utilities for FitNotes scheduling.

Submodules:
    - dt_utils: Time zone configuration, day normalization, weekday indexing,
      day arithmetic, date parsing and formatting

Usage:
    from . import dt_utils
    from .dt_utils import dt_as_local_date
"""

from . import dt_utils

__all__ = ["dt_utils"]
