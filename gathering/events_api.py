# event CRUD + RSVP endpoints (read snapshot -> engine -> write back)
import logging

from fastapi import APIRouter

from .config import GROUP_ID
from .models import EventIn, EventPatch, RsvpIn, Tally
from .rsvp import cast_response, edit_event, new_event, response_of, tally
from .state import delete_event, get_event, list_events, save_event

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.get("")
def events_index():
    return {"group": GROUP_ID, "events": list_events()}


@router.post("", status_code=201)
def create_event(body: EventIn):
    event = save_event(new_event(**body.model_dump()))
    logger.info("event %s created (%s)", event.id, event.date)
    return {"ok": True, "event": event}


@router.get("/{event_id}")
def read_event(event_id: str):
    return get_event(event_id)


@router.patch("/{event_id}")
def update_event(event_id: str, body: EventPatch):
    event = save_event(edit_event(get_event(event_id), body.model_dump()))
    logger.info("event %s edited", event.id)
    return {"ok": True, "event": event}


@router.delete("/{event_id}")
def remove_event(event_id: str):
    delete_event(event_id)
    logger.info("event %s deleted", event_id)
    return {"ok": True}


@router.post("/{event_id}/rsvp")
def rsvp(event_id: str, body: RsvpIn):
    event = cast_response(get_event(event_id), body.identity, body.display_name, body.response)
    save_event(event)
    mine = response_of(event, body.display_name)
    logger.info(
        "event %s: %s now %s",
        event_id,
        body.display_name,
        mine.value if mine else "not responded",
    )
    return {"ok": True, "response": mine, "event": event}


@router.get("/{event_id}/tally")
def event_tally(event_id: str) -> Tally:
    return tally(get_event(event_id))
