"""Shared fixtures and invariant checks for gathering tests."""

import datetime as dt

import pytest
from fastapi.testclient import TestClient

from gathering import state
from gathering.models import Event, Poll, PollOption
from gathering.rsvp import new_event

NOW = dt.datetime(2026, 10, 1, 12, 0, tzinfo=dt.timezone.utc)


def make_poll(allow_multiple: bool = False, **fields) -> Poll:
    return Poll(
        id="p1",
        question="Lunch?",
        options=[
            PollOption(option_id="o1", text="A"),
            PollOption(option_id="o2", text="B"),
        ],
        allow_multiple=allow_multiple,
        created_at=NOW,
        **fields,
    )


def assert_event_consistent(event: Event) -> None:
    assert not event.attending & event.not_attending
    assert not event.attending & event.undecided
    assert not event.not_attending & event.undecided
    members = event.attending | event.not_attending | event.undecided
    assert set(event.display_name_of) == members
    # one membership per display name
    names = list(event.display_name_of.values())
    assert len(names) == len(set(names))


def assert_poll_consistent(poll: Poll) -> None:
    counted = sum(o.vote_count for o in poll.options)
    selected = sum(len(s) for s in poll.voter_selections.values())
    assert poll.total_votes == counted == selected
    assert poll.voters == {i for i, s in poll.voter_selections.items() if s}
    assert set(poll.display_name_of) == poll.voters
    assert all(o.vote_count >= 0 for o in poll.options)
    if not poll.allow_multiple:
        assert all(len(s) <= 1 for s in poll.voter_selections.values())


@pytest.fixture(autouse=True)
def empty_store():
    """Documents live in module-level dicts; start every test from nothing."""
    state.reset()
    yield
    state.reset()


@pytest.fixture
def event() -> Event:
    return new_event("정기 모임", dt.date(2026, 11, 7), event_id="ev1", now=NOW)


@pytest.fixture
def single_poll() -> Poll:
    return make_poll(allow_multiple=False)


@pytest.fixture
def multi_poll() -> Poll:
    return make_poll(allow_multiple=True)


@pytest.fixture
def client():
    from gathering.main import app

    with TestClient(app) as c:
        yield c
