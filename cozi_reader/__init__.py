"""
cozi-reader - read-only async client for the Cozi Family Organizer API

Exposes household lists, calendar months, single calendar items and the
people on the account, plus calendar views (day/week/year) and attendee
resolution built on top of them.
"""

__version__ = "0.6.0"

from .integrations.cozi import (
    CoziCalendarService,
    CoziClient,
    CoziServiceException,
    try_login,
)

__all__ = [
    "__version__",
    "CoziCalendarService",
    "CoziClient",
    "CoziServiceException",
    "try_login",
]
