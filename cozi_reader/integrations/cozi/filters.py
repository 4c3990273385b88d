"""
Filtering helpers for calendar entries

Small generator functions over iterables of ``CalendarEntry``. Substring
matches are case-insensitive unless ``ignore_case=False`` is passed.
"""
from typing import Callable, Iterable, Iterator, List, Optional

from .calendar import CalendarEntry, DateLike, as_date
from .models import CalendarItem


def _contains(haystack: Optional[str], needle: str, ignore_case: bool) -> bool:
    if haystack is None:
        return False
    if ignore_case:
        return needle.casefold() in haystack.casefold()
    return needle in haystack


def where(entries: Iterable[CalendarEntry], predicate: Callable[[CalendarItem], bool]) -> Iterator[CalendarEntry]:
    """Entries whose item satisfies ``predicate``"""
    return (entry for entry in entries if predicate(entry.item))


def where_id_equals(entries: Iterable[CalendarEntry], item_id: str) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: item.id == item_id)


def where_item_type_equals(
    entries: Iterable[CalendarEntry], item_type: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    if ignore_case:
        return where(entries, lambda item: item.item_type.casefold() == item_type.casefold())
    return where(entries, lambda item: item.item_type == item_type)


def where_item_type_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: _contains(item.item_type, text, ignore_case))


def where_description_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    """Match against the description or the short description"""
    return where(
        entries,
        lambda item: (
            _contains(item.description, text, ignore_case)
            or _contains(item.description_short, text, ignore_case)
        ),
    )


def where_item_source_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: _contains(item.item_source, text, ignore_case))


def where_item_source_not_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    """Entries without a source, or whose source does not mention ``text``"""
    return where(entries, lambda item: not _contains(item.item_source, text, ignore_case))


# ----- dates -----

def where_date_equals(entries: Iterable[CalendarEntry], day: DateLike) -> Iterator[CalendarEntry]:
    day = as_date(day)
    return (entry for entry in entries if entry.date == day)


def where_date_on_or_after(entries: Iterable[CalendarEntry], start: DateLike) -> Iterator[CalendarEntry]:
    start = as_date(start)
    return (entry for entry in entries if entry.date >= start)


def where_date_before(entries: Iterable[CalendarEntry], end_exclusive: DateLike) -> Iterator[CalendarEntry]:
    end_exclusive = as_date(end_exclusive)
    return (entry for entry in entries if entry.date < end_exclusive)


def where_date_between(
    entries: Iterable[CalendarEntry], start: DateLike, end_exclusive: DateLike
) -> Iterator[CalendarEntry]:
    """Entries dated in ``[start, end_exclusive)``"""
    start, end_exclusive = as_date(start), as_date(end_exclusive)
    return (entry for entry in entries if start <= entry.date < end_exclusive)


# ----- details -----

def where_location_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: item.details is not None and _contains(item.details.location, text, ignore_case))


def where_notes_contains(
    entries: Iterable[CalendarEntry], text: str, ignore_case: bool = True
) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: item.details is not None and _contains(item.details.notes, text, ignore_case))


def where_holiday(entries: Iterable[CalendarEntry]) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: item.is_holiday)


def where_not_holiday(entries: Iterable[CalendarEntry]) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: not item.is_holiday)


def where_read_only(entries: Iterable[CalendarEntry], read_only: bool = True) -> Iterator[CalendarEntry]:
    """Items without a detail block count as writable"""
    def is_read_only(item: CalendarItem) -> bool:
        return bool(item.details is not None and item.details.read_only)

    return where(entries, lambda item: is_read_only(item) == read_only)


def where_date_span_equals(entries: Iterable[CalendarEntry], span: int) -> Iterator[CalendarEntry]:
    return where(entries, lambda item: item.date_span == span)


def sorted_by_start(entries: Iterable[CalendarEntry]) -> List[CalendarEntry]:
    """Entries ordered by date, then start time"""
    return sorted(entries, key=lambda entry: (entry.date, entry.item.start_time))


__all__ = [
    "where",
    "where_id_equals",
    "where_item_type_equals",
    "where_item_type_contains",
    "where_description_contains",
    "where_item_source_contains",
    "where_item_source_not_contains",
    "where_date_equals",
    "where_date_on_or_after",
    "where_date_before",
    "where_date_between",
    "where_location_contains",
    "where_notes_contains",
    "where_holiday",
    "where_not_holiday",
    "where_read_only",
    "where_date_span_equals",
    "sorted_by_start",
]
