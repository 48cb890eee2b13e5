import calendar
import datetime
import logging
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from localization import translator

log = logging.getLogger("fitlog.calendar")

T = TypeVar("T")


class CalendarSystem:
    """Gregorian calendar with 1..7 weekday numbering (1 = Sunday)."""

    def __init__(self, language: str = "en") -> None:
        self.language = language

    def weekday(self, day: datetime.date) -> int:
        return day.isoweekday() % 7 + 1

    def days_in_month(self, year: int, month: int) -> int:
        return calendar.monthrange(year, month)[1]

    def weekday_symbols(self) -> List[str]:
        return translator.weekday_symbols(self.language)


class MonthGridBuilder:
    """Lay out a month as a 7-column grid of dates."""

    @staticmethod
    def _check_weekday(first_weekday: int) -> None:
        if not 1 <= first_weekday <= 7:
            raise ValueError("first_weekday must be between 1 and 7")

    @staticmethod
    def leading_empty(
        anchor: datetime.date,
        first_weekday: int = 1,
        calendar_system: Optional[CalendarSystem] = None,
    ) -> int:
        """Return the number of filler days shown before the 1st."""
        MonthGridBuilder._check_weekday(first_weekday)
        cal = calendar_system or CalendarSystem()
        first = datetime.date(anchor.year, anchor.month, 1)
        return (cal.weekday(first) - first_weekday + 7) % 7

    @staticmethod
    def build(
        anchor: datetime.date,
        first_weekday: int = 1,
        calendar_system: Optional[CalendarSystem] = None,
    ) -> List[datetime.date]:
        """Return the dates of the grid for the month containing ``anchor``.

        The result starts on ``first_weekday``, contains every day of the
        month once and is padded with days of the neighbouring months to a
        multiple of seven. An empty list is returned when the grid would
        leave the supported date range.
        """
        MonthGridBuilder._check_weekday(first_weekday)
        cal = calendar_system or CalendarSystem()
        if isinstance(anchor, datetime.datetime):
            anchor = anchor.date()
        one_day = datetime.timedelta(days=1)
        try:
            first = datetime.date(anchor.year, anchor.month, 1)
            leading = MonthGridBuilder.leading_empty(first, first_weekday, cal)
            days = [first - datetime.timedelta(days=i) for i in range(leading, 0, -1)]
            count = cal.days_in_month(anchor.year, anchor.month)
            days.extend(first + datetime.timedelta(days=i) for i in range(count))
            while len(days) % 7 != 0:
                days.append(days[-1] + one_day)
        except (OverflowError, ValueError) as e:
            log.warning("Cannot resolve month grid for %s: %s", anchor, e)
            return []
        return days

    @staticmethod
    def weekday_symbols(
        first_weekday: int = 1, calendar_system: Optional[CalendarSystem] = None
    ) -> List[str]:
        """Return header symbols in the grid's column order."""
        MonthGridBuilder._check_weekday(first_weekday)
        cal = calendar_system or CalendarSystem()
        symbols = cal.weekday_symbols()
        shift = (first_weekday - 1) % 7
        return symbols[shift:] + symbols[:shift]


def is_in_month(day: datetime.date, anchor: datetime.date) -> bool:
    return (day.year, day.month) == (anchor.year, anchor.month)


def shift_month(anchor: datetime.date, delta: int) -> datetime.date:
    """Move ``anchor`` by ``delta`` months, clamping the day."""
    index = anchor.year * 12 + (anchor.month - 1) + delta
    year, month = divmod(index, 12)
    month += 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return datetime.date(year, month, day)


def start_of_day(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.datetime.fromisoformat(str(value)).date()


def group_by_day(
    items: Iterable[T], key: Callable[[T], object]
) -> Dict[datetime.date, List[T]]:
    """Group ``items`` by the day of ``key(item)`` keeping input order."""
    grouped: Dict[datetime.date, List[T]] = {}
    for item in items:
        grouped.setdefault(start_of_day(key(item)), []).append(item)
    return grouped
