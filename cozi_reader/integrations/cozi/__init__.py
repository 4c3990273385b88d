"""
Cozi Integration Module

Read-only access to the Cozi REST API: lists, calendar and people.

Architecture:
    CoziCalendarService → CoziClient → CoziSession / CoziTransport → Cozi REST API

The client handles authentication, retries and API-version fallback; the
service builds calendar views and attaches attendees.
"""

from .attendees import (
    attendees_from_attendee_set,
    attendees_from_extension,
    household_member_ids,
    resolve_attendee_ids,
)
from .auth import AuthToken, CoziSession, Credentials
from .calendar import (
    CalendarEntry,
    CalendarEntryWithAttendees,
    FlattenedMonth,
    flatten,
    months_touched,
    week_window,
)
from .client import CoziClient, try_login
from .exceptions import (
    ApiError,
    AuthError,
    ConfigurationError,
    CoziServiceException,
    NotFoundError,
    ProtocolError,
    StateError,
    TransportError,
)
from .models import (
    CalendarItem,
    CalendarMonth,
    DayRef,
    ItemDetails,
    ListItem,
    ListRecord,
    Person,
    Recurrence,
)
from .service import CoziCalendarService
from .transport import CoziTransport

__all__ = [
    # Client and service
    'CoziClient',
    'CoziCalendarService',
    'CoziSession',
    'CoziTransport',
    'try_login',
    # Auth values
    'AuthToken',
    'Credentials',
    # Calendar
    'CalendarEntry',
    'CalendarEntryWithAttendees',
    'FlattenedMonth',
    'flatten',
    'months_touched',
    'week_window',
    # Attendees
    'attendees_from_attendee_set',
    'attendees_from_extension',
    'household_member_ids',
    'resolve_attendee_ids',
    # Models
    'CalendarItem',
    'CalendarMonth',
    'DayRef',
    'ItemDetails',
    'ListItem',
    'ListRecord',
    'Person',
    'Recurrence',
    # Exceptions
    'ApiError',
    'AuthError',
    'ConfigurationError',
    'CoziServiceException',
    'NotFoundError',
    'ProtocolError',
    'StateError',
    'TransportError',
]
