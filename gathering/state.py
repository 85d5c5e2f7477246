"""
In-memory document store (stand-in for the shared real-time store).

Documents are read as whole snapshots and written back wholesale. There is
no compare-and-swap: when two clients compute the next document from the
same snapshot, the later save replaces the earlier one and that user's
toggle is lost until they retry. The engines re-derive all counters from
the per-voter maps, so a lost update never leaves a document inconsistent.
"""
from typing import Dict, List

from .errors import InvalidTarget
from .models import Event, Poll

# events[event_id] = Event
events: Dict[str, Event] = {}
# polls[poll_id] = Poll
polls: Dict[str, Poll] = {}


def get_event(event_id: str) -> Event:
    try:
        return events[event_id]
    except KeyError:
        raise InvalidTarget(f"event {event_id!r} not found") from None


def save_event(event: Event) -> Event:
    events[event.id] = event
    return event


def delete_event(event_id: str) -> None:
    if events.pop(event_id, None) is None:
        raise InvalidTarget(f"event {event_id!r} not found")


def list_events() -> List[Event]:
    """
    Upcoming order: by date, then time (events without a time first).
    """
    return sorted(events.values(), key=lambda e: (e.date, e.time or "", e.created_at))


def get_poll(poll_id: str) -> Poll:
    try:
        return polls[poll_id]
    except KeyError:
        raise InvalidTarget(f"poll {poll_id!r} not found") from None


def save_poll(poll: Poll) -> Poll:
    polls[poll.id] = poll
    return poll


def delete_poll(poll_id: str) -> None:
    if polls.pop(poll_id, None) is None:
        raise InvalidTarget(f"poll {poll_id!r} not found")


def list_polls() -> List[Poll]:
    """
    Newest first.
    """
    return sorted(polls.values(), key=lambda p: p.created_at, reverse=True)


def reset() -> None:
    events.clear()
    polls.clear()
