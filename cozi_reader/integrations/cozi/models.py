"""
Cozi API data models

Pydantic models for the JSON documents returned by the Cozi REST API. Wire
names are camelCase; attributes are snake_case. Every model keeps fields it
does not recognise in ``extra`` so that new upstream fields survive a
round-trip through the client.
"""
import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CoziModel(BaseModel):
    """Base model: accepts wire aliases or attribute names, keeps unknown fields"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def extra(self) -> Dict[str, Any]:
        """Unrecognised fields, keyed by their wire name"""
        return dict(self.model_extra or {})


def _from_unix_ms(value: Optional[int]) -> Optional[dt.datetime]:
    if value is None:
        return None
    return dt.datetime.fromtimestamp(value / 1000, tz=dt.timezone.utc)


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _day_refs(refs: Any) -> Any:
    if refs is None:
        return []
    if isinstance(refs, list):
        return [ref for ref in refs if ref is not None]
    return refs


# ============================================
# PEOPLE
# ============================================

class Person(CoziModel):
    """A household member on the Cozi account"""
    id: str = Field(
        "",
        validation_alias=AliasChoices("accountPersonId", "personId", "id"),
    )
    name: str = ""
    email: Optional[str] = None
    color: Optional[str] = None  # e.g. "#FF3366"
    initials: Optional[str] = None
    type: Optional[str] = None  # "adult" or "child"

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return _none_to_empty(value)


# ============================================
# LISTS
# ============================================

class ListItem(CoziModel):
    """A single shopping or to-do list line"""
    item_id: str = Field("", alias="itemId")
    text: str = ""
    checked_off: bool = Field(False, alias="checkedOff")

    version: Optional[int] = None
    category: Optional[str] = None
    quantity: Optional[str] = None
    who_added: Optional[str] = Field(None, alias="whoAdded")
    created_time: Optional[int] = Field(None, alias="createdTime")  # unix ms
    modified_time: Optional[int] = Field(None, alias="modifiedTime")  # unix ms

    @field_validator("item_id", "text", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @property
    def created_utc(self) -> Optional[dt.datetime]:
        return _from_unix_ms(self.created_time)

    @property
    def modified_utc(self) -> Optional[dt.datetime]:
        return _from_unix_ms(self.modified_time)


class ListRecord(CoziModel):
    """A Cozi shopping or to-do list"""
    list_id: str = Field("", alias="listId")
    title: str = ""
    list_type: str = Field("", alias="listType")
    version: int = 0
    items: List[ListItem] = Field(default_factory=list)

    @field_validator("list_id", "title", "list_type", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return [] if value is None else value


# ============================================
# CALENDAR
# ============================================

class Recurrence(CoziModel):
    """Recurrence block; rules are kept as raw JSON"""
    text: Optional[List[str]] = None  # e.g. ["Every year on July 4th"]
    rules: Optional[Any] = None


class ItemDetails(CoziModel):
    """Nested detail block of a calendar item"""
    location: Optional[str] = None
    notes: Optional[str] = None
    read_only: Optional[bool] = Field(None, alias="readOnly")
    recurrence_start_day: Optional[str] = Field(None, alias="recurrenceStartDay")
    recurrence: Optional[Recurrence] = None

    @property
    def recurrence_start_date(self) -> Optional[dt.date]:
        if not self.recurrence_start_day:
            return None
        return dt.date.fromisoformat(self.recurrence_start_day[:10])


class CalendarItem(CoziModel):
    """
    A calendar appointment

    ``day`` is the local calendar day (``YYYY-MM-DD``); ``start_time`` and
    ``end_time`` are local times of day (``HH:MM:SS``).
    """
    id: str = ""
    item_type: str = Field("", alias="itemType")  # usually "appointment"
    item_version: int = Field(0, alias="itemVersion")
    attendee_set: Optional[List[str]] = Field(None, alias="attendeeSet")

    description: str = ""
    description_short: Optional[str] = Field(None, alias="descriptionShort")
    item_source: Optional[str] = Field(None, alias="itemSource")  # "Holiday US - Cozi", etc.

    day: str = ""
    start_time: str = Field("00:00:00", alias="startTime")
    end_time: str = Field("00:00:00", alias="endTime")
    date_span: int = Field(1, alias="dateSpan")

    details: Optional[ItemDetails] = Field(None, alias="itemDetails")

    @field_validator("id", "item_type", "description", "day", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("item_version", mode="before")
    @classmethod
    def _null_version(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _null_time(cls, value: Any) -> Any:
        return "00:00:00" if not value else value

    @field_validator("date_span", mode="before")
    @classmethod
    def _at_least_one_day(cls, value: Any) -> Any:
        if value is None:
            return 1
        return max(int(value), 1)

    @field_validator("attendee_set", mode="before")
    @classmethod
    def _ids_as_strings(cls, value: Any) -> Any:
        if value is None:
            return None
        return [str(person_id) for person_id in value]

    # ----- derived values (not part of the wire format) -----

    @property
    def date(self) -> dt.date:
        return dt.date.fromisoformat(self.day[:10])

    @property
    def start(self) -> dt.time:
        return dt.time.fromisoformat(self.start_time)

    @property
    def end(self) -> dt.time:
        return dt.time.fromisoformat(self.end_time)

    @property
    def start_datetime(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start)

    @property
    def end_datetime(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.end)

    @property
    def is_holiday(self) -> bool:
        """True when the item source mentions "Holiday" (simple heuristic)"""
        return bool(self.item_source) and "holiday" in self.item_source.lower()


class DayRef(CoziModel):
    """Reference from a calendar day to an item in the month's item map"""
    id: Optional[str] = None  # references without an id are skipped when flattening

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        return None if value is None else str(value)


class CalendarMonth(CoziModel):
    """
    One month of calendar data in Cozi's normalized form

    ``days`` maps ``YYYY-MM-DD`` to ordered item references; ``items`` maps
    item id to the full item record.
    """
    start_date: Optional[dt.date] = Field(None, alias="startDate")
    end_date: Optional[dt.date] = Field(None, alias="endDate")
    days: Dict[str, List[DayRef]] = Field(default_factory=dict)
    items: Dict[str, CalendarItem] = Field(default_factory=dict)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("days", mode="before")
    @classmethod
    def _null_days(cls, value: Any) -> Any:
        """A null map or a null day list means no references"""
        if value is None:
            return {}
        if isinstance(value, dict):
            return {day: _day_refs(refs) for day, refs in value.items()}
        return value
