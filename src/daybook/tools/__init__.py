"""
Daybook - Shared utilities.
"""

from daybook.tools.dates import next_weekday, to_date, week_bounds, week_start
from daybook.tools.normalize import grocery_key, normalize_name, normalize_unit

__all__ = [
    "grocery_key",
    "next_weekday",
    "normalize_name",
    "normalize_unit",
    "to_date",
    "week_bounds",
    "week_start",
]
