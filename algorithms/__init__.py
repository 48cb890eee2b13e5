from .month_grid import (
    CalendarSystem,
    MonthGridBuilder,
    group_by_day,
    is_in_month,
    shift_month,
    start_of_day,
)
from .weight_converter import WeightConverter

__all__ = [
    "CalendarSystem",
    "MonthGridBuilder",
    "group_by_day",
    "is_in_month",
    "shift_month",
    "start_of_day",
    "WeightConverter",
]
