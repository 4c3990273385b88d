"""
Attendee resolution

Joins calendar items to household members. Two sources of attendee ids:

* the ``householdMembers`` array some items carry among their unrecognised
  fields (``attendees_from_extension``), and
* the authoritative ``attendeeSet`` of the full item record, which has to be
  fetched per item (``attendees_from_attendee_set``).

Resolution against a roster keeps roster order and ignores unknown ids.
"""
from typing import Any, Awaitable, Callable, Iterable, List, Sequence, Tuple

from ...utils.logger import setup_logger
from .exceptions import NotFoundError
from .models import CalendarItem, Person

logger = setup_logger(__name__)

HOUSEHOLD_MEMBERS_FIELD = "householdMembers"

ItemFetcher = Callable[[str], Awaitable[CalendarItem]]


def resolve_attendee_ids(person_ids: Iterable[str], roster: Sequence[Person]) -> Tuple[Person, ...]:
    """People from ``roster`` whose id is in ``person_ids``, in roster order"""
    wanted = set(person_ids)
    if not wanted:
        return ()
    return tuple(person for person in roster if person.id in wanted)


def household_member_ids(item: CalendarItem) -> List[str]:
    """Ids listed in the item's ``householdMembers`` extension field"""
    members: Any = item.extra.get(HOUSEHOLD_MEMBERS_FIELD)
    if not isinstance(members, list):
        return []

    ids = []
    for member in members:
        if isinstance(member, str):
            ids.append(member)
        elif isinstance(member, dict) and member.get('id') is not None:
            ids.append(str(member['id']))
    return ids


def attendees_from_extension(item: CalendarItem, roster: Sequence[Person]) -> Tuple[Person, ...]:
    """Resolve attendees from the item's ``householdMembers`` extension field"""
    return resolve_attendee_ids(household_member_ids(item), roster)


async def attendees_from_attendee_set(
    item: CalendarItem,
    roster: Sequence[Person],
    fetch_item: ItemFetcher
) -> Tuple[Person, ...]:
    """
    Resolve attendees from the full item record's attendee set

    Holiday items are system generated and have no attendees, so they are not
    fetched. An item that no API version knows about resolves to no attendees.
    When the full record carries no attendee set, its ``householdMembers``
    field is used instead.

    Args:
        item: Stub item as it appears in a month listing
        roster: Household members to resolve against
        fetch_item: Coroutine function returning the full item for an id
    """
    if item.is_holiday:
        return ()

    try:
        detail = await fetch_item(item.id)
    except NotFoundError:
        logger.info(f"[COZI_ATTENDEES] No detail record for item {item.id}, treating as no attendees")
        return ()

    if detail.attendee_set is None:
        return attendees_from_extension(detail, roster)
    return resolve_attendee_ids(detail.attendee_set, roster)
