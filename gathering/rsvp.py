# RSVP engine: (event, who, response) -> next event
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from .errors import InvalidContent, InvalidTarget
from .identity import identities_for, purge_by_name, require_identity
from .models import RESPONSE_FIELDS, Event, Response, Tally

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "date", "time", "location", "description")


def _as_response(response: Any) -> Response:
    try:
        return Response(response)
    except ValueError:
        raise InvalidTarget(f"unknown response {response!r}") from None


def new_event(
    title: str,
    date: date,
    time: Optional[str] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
    event_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Event:
    title = (title or "").strip()
    if not title:
        raise InvalidContent("event title must not be blank")
    return Event(
        id=event_id or str(uuid.uuid4()),
        title=title,
        date=date,
        time=time,
        location=location,
        description=description,
        created_at=now or datetime.now(timezone.utc),
    )


def edit_event(event: Event, changes: Dict[str, Any], now: Optional[datetime] = None) -> Event:
    """
    Update the descriptive fields of an event. Keys set to None are left as
    they are; RSVP membership is never touched.
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidTarget(f"not editable: {', '.join(sorted(unknown))}")

    update = {k: v for k, v in changes.items() if v is not None}
    if "title" in update:
        update["title"] = update["title"].strip()
        if not update["title"]:
            raise InvalidContent("event title must not be blank")
    update["updated_at"] = now or datetime.now(timezone.utc)
    return event.model_copy(update=update)


def cast_response(event: Event, identity: str, name: str, response: Any) -> Event:
    """
    Record `response` for the voter known as `name`, acting through `identity`.

    Re-casting the response the name already holds withdraws it. Any other
    call first drops every identity recorded under the name (and the acting
    identity itself) from all three sets, so a second device or a changed
    answer replaces the previous one instead of adding to it.
    """
    name = require_identity(identity, name)
    response = _as_response(response)
    field = RESPONSE_FIELDS[response]

    holders = identities_for(event.display_name_of, name)
    toggle_off = bool(holders & getattr(event, field))

    attending, not_attending, undecided, names = purge_by_name(
        [event.attending, event.not_attending, event.undecided, event.display_name_of],
        event.display_name_of,
        name,
        identity,
    )
    sets = {
        "attending": attending,
        "not_attending": not_attending,
        "undecided": undecided,
    }

    if toggle_off:
        logger.debug("event %s: %s withdrew %s", event.id, name, response.value)
    else:
        sets[field].add(identity)
        names[identity] = name
        logger.debug("event %s: %s -> %s via %s", event.id, name, response.value, identity)

    # drop index entries for identities that no longer hold any response
    present = attending | not_attending | undecided
    names = {i: n for i, n in names.items() if i in present}

    return event.model_copy(update={**sets, "display_name_of": names})


def response_of(event: Event, name: str) -> Optional[Response]:
    holders = identities_for(event.display_name_of, name.strip())
    for response, field in RESPONSE_FIELDS.items():
        if holders & getattr(event, field):
            return response
    return None


def tally(event: Event) -> Tally:
    counts = {}
    names = {}
    for response, field in RESPONSE_FIELDS.items():
        members = getattr(event, field)
        counts[response] = len(members)
        names[response] = sorted(event.display_name_of.get(i, "") for i in members)
    return Tally(event_id=event.id, counts=counts, names=names)
