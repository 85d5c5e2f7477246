# poll engine: (poll, who, option) -> next poll
import logging
import uuid
from collections import Counter
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from .errors import AddOptionsDisabled, ExpiredPoll, InvalidContent, InvalidTarget
from .identity import find_by_name, identities_for, purge_by_name, require_identity
from .models import OptionResult, Poll, PollOption, PollResults

logger = logging.getLogger(__name__)


def new_option_id() -> str:
    return f"opt-{uuid.uuid4().hex[:12]}"


def new_poll(
    question: str,
    option_texts: Iterable[str],
    allow_multiple: bool = False,
    is_anonymous: bool = False,
    allow_add_options: bool = False,
    end_date: Optional[date] = None,
    poll_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Poll:
    """
    Build an empty poll. Blank option texts are dropped; at least one
    option must remain.
    """
    question = (question or "").strip()
    if not question:
        raise InvalidContent("poll question must not be blank")

    texts = [t.strip() for t in option_texts if t and t.strip()]
    if not texts:
        raise InvalidContent("a poll needs at least one option")

    return Poll(
        id=poll_id or str(uuid.uuid4()),
        question=question,
        options=[PollOption(option_id=new_option_id(), text=t) for t in texts],
        allow_multiple=allow_multiple,
        is_anonymous=is_anonymous,
        allow_add_options=allow_add_options,
        end_date=end_date,
        created_at=now or datetime.now(timezone.utc),
    )


# ----------- internal helpers -----------

def _require_option(poll: Poll, option_id: str) -> None:
    if not any(o.option_id == option_id for o in poll.options):
        raise InvalidTarget(f"poll {poll.id} has no option {option_id!r}")


def _rebuild(poll: Poll, selections: Dict[str, Set[str]], names: Dict[str, str]) -> Poll:
    """
    Derive every counter from the per-voter map. Counts are never adjusted
    incrementally, so a drifted input document comes out consistent.
    """
    known = {o.option_id for o in poll.options}
    cleaned: Dict[str, Set[str]] = {}
    for identity, selected in selections.items():
        kept = {o for o in selected if o in known}
        if kept:
            cleaned[identity] = kept

    counts = Counter(o for selected in cleaned.values() for o in selected)
    options = [
        o.model_copy(update={"vote_count": counts.get(o.option_id, 0)})
        for o in poll.options
    ]
    voters = set(cleaned)

    return poll.model_copy(
        update={
            "options": options,
            "total_votes": sum(o.vote_count for o in options),
            "voter_selections": cleaned,
            "voters": voters,
            "display_name_of": {i: n for i, n in names.items() if i in voters},
        }
    )


def _current_selection(poll: Poll, name: str) -> Set[str]:
    holder = find_by_name(poll.display_name_of, name)
    if holder is None:
        return set()
    return set(poll.voter_selections.get(holder, set()))


# ----------- voting -----------

def toggle_option(poll: Poll, identity: str, name: str, option_id: str) -> Poll:
    """
    Multi-choice vote: flip `option_id` in the voter's selection.

    The voter's previous identities are purged first and their selections
    carried over to the acting identity, so a second device or a renamed
    session keeps the same votes instead of counting them twice.
    """
    name = require_identity(identity, name)
    if not poll.allow_multiple:
        raise InvalidTarget(f"poll {poll.id} is single-choice")
    _require_option(poll, option_id)

    carried: Set[str] = set()
    for stale in identities_for(poll.display_name_of, name, identity):
        carried |= poll.voter_selections.get(stale, set())

    selections, names = purge_by_name(
        [poll.voter_selections, poll.display_name_of],
        poll.display_name_of,
        name,
        identity,
    )

    selection = carried ^ {option_id}
    if selection:
        selections[identity] = selection
        names[identity] = name
    logger.debug(
        "poll %s: %s %s %s",
        poll.id,
        name,
        "unselected" if option_id in carried else "selected",
        option_id,
    )
    return _rebuild(poll, selections, names)


def select_option(poll: Poll, identity: str, name: str, option_id: str) -> Poll:
    """
    Single-choice vote. Picking the current choice again withdraws it;
    picking another moves the vote.
    """
    name = require_identity(identity, name)
    if poll.allow_multiple:
        raise InvalidTarget(f"poll {poll.id} is multi-choice")
    _require_option(poll, option_id)

    prev = _current_selection(poll, name)

    selections, names = purge_by_name(
        [poll.voter_selections, poll.display_name_of],
        poll.display_name_of,
        name,
        identity,
    )

    if prev == {option_id}:
        logger.debug("poll %s: %s withdrew %s", poll.id, name, option_id)
    else:
        selections[identity] = {option_id}
        names[identity] = name
        logger.debug("poll %s: %s %s -> %s", poll.id, name, sorted(prev) or "-", option_id)
    return _rebuild(poll, selections, names)


def vote(poll: Poll, identity: str, name: str, option_id: str) -> Poll:
    if poll.allow_multiple:
        return toggle_option(poll, identity, name, option_id)
    return select_option(poll, identity, name, option_id)


def add_option(poll: Poll, text: str, option_id: Optional[str] = None) -> Poll:
    """
    Append a zero-vote option. Existing counts and selections are untouched.
    """
    if not poll.allow_add_options:
        raise AddOptionsDisabled(f"poll {poll.id} does not accept new options")
    text = (text or "").strip()
    if not text:
        raise InvalidContent("option text must not be blank")
    if option_id is None:
        option_id = new_option_id()
    elif any(o.option_id == option_id for o in poll.options):
        raise InvalidTarget(f"poll {poll.id} already has option {option_id!r}")

    option = PollOption(option_id=option_id, text=text)
    return poll.model_copy(update={"options": [*poll.options, option]})


# ----------- expiry policy (applied by callers) -----------

def is_expired(poll: Poll, today: date) -> bool:
    return poll.end_date is not None and today > poll.end_date


def ensure_open(poll: Poll, today: date) -> None:
    if is_expired(poll, today):
        raise ExpiredPoll(f"poll {poll.id} closed on {poll.end_date.isoformat()}")


# ----------- read views -----------

def selection_of(poll: Poll, name: str) -> Set[str]:
    selected: Set[str] = set()
    for identity in identities_for(poll.display_name_of, name.strip()):
        selected |= poll.voter_selections.get(identity, set())
    return selected


def results(poll: Poll, today: Optional[date] = None) -> PollResults:
    """
    Per-option counts and shares. Voter names are left out of anonymous polls.
    """
    rows: List[OptionResult] = []
    for o in poll.options:
        voters = None
        if not poll.is_anonymous:
            voters = sorted(
                poll.display_name_of.get(i, "")
                for i, selected in poll.voter_selections.items()
                if o.option_id in selected
            )
        share = round(o.vote_count / poll.total_votes * 100, 1) if poll.total_votes else 0.0
        rows.append(
            OptionResult(
                option_id=o.option_id,
                text=o.text,
                vote_count=o.vote_count,
                percentage=share,
                voters=voters,
            )
        )

    return PollResults(
        poll_id=poll.id,
        question=poll.question,
        total_votes=poll.total_votes,
        participants=len(poll.voters),
        is_anonymous=poll.is_anonymous,
        closed=today is not None and is_expired(poll, today),
        options=rows,
    )
