"""
Calendar flattening

Cozi returns a month as two maps: calendar day -> ordered item references,
and item id -> item. The helpers here turn that into (date, item) entries and
compute the date windows used by the week/day/year views. Everything in this
module is pure; fetching happens in ``CoziCalendarService``.
"""
import datetime as dt
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from dateutil.parser import isoparse

from .models import CalendarItem, CalendarMonth, Person

DateLike = Union[dt.date, dt.datetime]


@dataclass(frozen=True)
class CalendarEntry:
    """One calendar item on one calendar day"""
    date: dt.date
    item: CalendarItem


@dataclass(frozen=True)
class CalendarEntryWithAttendees:
    """A calendar entry together with the household members attending it"""
    date: dt.date
    item: CalendarItem
    attendees: Tuple[Person, ...] = ()


class FlattenedMonth:
    """
    Lazy, re-iterable view of a month's entries

    Iterates days in the month's own key order (not necessarily sorted) and,
    within a day, references in their listed order. Day keys that are not
    dates and references without a matching item are skipped.
    """

    def __init__(self, month: CalendarMonth):
        self.month = month

    def __iter__(self) -> Iterator[CalendarEntry]:
        items = self.month.items
        for day_key, refs in self.month.days.items():
            day = parse_day(day_key)
            if day is None:
                continue
            for ref in refs:
                if ref.id is None:
                    continue
                item = items.get(ref.id)
                if item is not None:
                    yield CalendarEntry(day, item)

    def __repr__(self) -> str:
        return f"FlattenedMonth(start={self.month.start_date}, days={len(self.month.days)})"


def flatten(month: CalendarMonth) -> FlattenedMonth:
    """Flatten a month into (date, item) entries"""
    return FlattenedMonth(month)


def parse_day(value: str) -> Optional[dt.date]:
    """Parse an ISO day key, returning None when it is not a date"""
    try:
        return isoparse(value).date()
    except (ValueError, OverflowError, TypeError):
        return None


def as_date(value: DateLike) -> dt.date:
    """Drop the time of day; bucketing is by calendar date only"""
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def week_window(date_in_week: DateLike) -> Tuple[dt.date, dt.date]:
    """Return ``(monday, next_monday)`` for the Monday-start week containing the date"""
    day = as_date(date_in_week)
    monday = day - dt.timedelta(days=day.weekday())
    return monday, monday + dt.timedelta(days=7)


def months_touched(start: dt.date, end_exclusive: dt.date) -> List[Tuple[int, int]]:
    """Distinct (year, month) pairs covering ``[start, end_exclusive)`` in order"""
    months: List[Tuple[int, int]] = []
    cursor = start.replace(day=1)
    while cursor < end_exclusive:
        months.append((cursor.year, cursor.month))
        if cursor.month == 12:
            cursor = cursor.replace(year=cursor.year + 1, month=1)
        else:
            cursor = cursor.replace(month=cursor.month + 1)
    return months
