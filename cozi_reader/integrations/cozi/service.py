"""
Cozi Calendar Service - aggregation and enrichment on top of CoziClient

Builds day, week and year views from month documents and attaches
household members to calendar entries.

This service is used by:
- the command line (main.py)
- callers that want entries rather than Cozi's month documents

Architecture:
    CoziCalendarService → CoziClient → Cozi REST API
"""
import asyncio
from typing import Iterable, List, Optional, Sequence

from ...utils.logger import setup_logger
from .attendees import attendees_from_attendee_set
from .calendar import (
    CalendarEntry,
    CalendarEntryWithAttendees,
    DateLike,
    as_date,
    flatten,
    months_touched,
    week_window,
)
from .client import CoziClient
from .models import CalendarMonth, Person

logger = setup_logger(__name__)


class CoziCalendarService:
    """
    Calendar views and attendee enrichment

    Months are fetched one at a time. Attendee enrichment fans out one item
    detail request per non-holiday entry; the first failure cancels the rest
    and is re-raised.
    """

    def __init__(self, client: CoziClient):
        self.client = client

    # ===================================================================
    # AGGREGATION
    # ===================================================================

    async def get_month(self, year: int, month: int) -> List[CalendarEntry]:
        """Flattened entries of one month, in the month's day order"""
        return list(flatten(await self.client.get_calendar_month(year, month)))

    async def get_year(self, year: int) -> List[CalendarEntry]:
        """
        All entries of a year, January to December

        Any failing month aborts the whole call.
        """
        entries: List[CalendarEntry] = []
        for month in range(1, 13):
            entries.extend(await self.get_month(year, month))

        logger.info(f"[COZI_CALENDAR] {len(entries)} entries in {year}")
        return entries

    async def get_week(self, date_in_week: DateLike) -> List[CalendarEntry]:
        """
        Entries of the Monday-start week containing ``date_in_week``

        Fetches each month the week touches once (one or two months, across a
        year boundary if needed) and keeps entries in ``[monday, monday + 7)``.
        """
        monday, next_monday = week_window(date_in_week)

        entries: List[CalendarEntry] = []
        for year, month in months_touched(monday, next_monday):
            entries.extend(
                entry for entry in await self.get_month(year, month)
                if monday <= entry.date < next_monday
            )

        logger.debug(f"[COZI_CALENDAR] {len(entries)} entries in week of {monday.isoformat()}")
        return entries

    async def get_day(self, day: DateLike) -> List[CalendarEntry]:
        """Entries dated exactly ``day``"""
        day = as_date(day)
        return [entry for entry in await self.get_month(day.year, day.month) if entry.date == day]

    # ===================================================================
    # ATTENDEES
    # ===================================================================

    async def attendees_for(self, entry: CalendarEntry, roster: Sequence[Person]) -> CalendarEntryWithAttendees:
        """Resolve one entry's attendees against an already fetched roster"""
        attendees = await attendees_from_attendee_set(entry.item, roster, self.client.get_calendar_item)
        return CalendarEntryWithAttendees(entry.date, entry.item, attendees)

    async def entry_with_attendees(
        self,
        entry: CalendarEntry,
        roster: Optional[Sequence[Person]] = None
    ) -> CalendarEntryWithAttendees:
        """Single entry enrichment; the roster is fetched only when not supplied"""
        if roster is None:
            roster = await self.client.get_people()
        return await self.attendees_for(entry, roster)

    async def with_attendees(self, entries: Iterable[CalendarEntry]) -> List[CalendarEntryWithAttendees]:
        """
        Enrich many entries, fetching the people roster exactly once

        Detail lookups run concurrently; results keep the input order. When one
        lookup fails the others are cancelled and awaited before the error is
        re-raised, so no request outlives the call.
        """
        entries = list(entries)
        roster = await self.client.get_people()

        tasks = [asyncio.ensure_future(self.attendees_for(entry, roster)) for entry in entries]
        try:
            enriched = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.debug(f"[COZI_CALENDAR] Enriched {len(enriched)} entries with attendees")
        return list(enriched)

    async def flatten_with_attendees(self, month: CalendarMonth) -> List[CalendarEntryWithAttendees]:
        """Flatten a month and enrich every entry"""
        return await self.with_attendees(flatten(month))
