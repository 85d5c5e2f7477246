# poll endpoints; expiry is checked here, before any engine call
import logging

from fastapi import APIRouter

from . import config
from .errors import InvalidContent
from .models import OptionIn, PollIn, PollResults, VoteIn
from .polls import add_option, ensure_open, new_poll, results, selection_of, vote
from .state import delete_poll, get_poll, list_polls, save_poll

router = APIRouter(prefix="/polls", tags=["polls"])
logger = logging.getLogger(__name__)


@router.get("")
def polls_index():
    return {"group": config.GROUP_ID, "polls": list_polls()}


@router.post("", status_code=201)
def create_poll(body: PollIn):
    poll = new_poll(
        body.question,
        body.options,
        allow_multiple=body.allow_multiple,
        is_anonymous=body.is_anonymous,
        allow_add_options=body.allow_add_options,
        end_date=body.end_date,
    )
    save_poll(poll)
    logger.info("poll %s created with %d options", poll.id, len(poll.options))
    return {"ok": True, "poll": poll}


@router.get("/{poll_id}")
def read_poll(poll_id: str):
    return get_poll(poll_id)


@router.delete("/{poll_id}")
def remove_poll(poll_id: str):
    delete_poll(poll_id)
    logger.info("poll %s deleted", poll_id)
    return {"ok": True}


@router.post("/{poll_id}/vote")
def cast_vote(poll_id: str, v: VoteIn):
    poll = get_poll(poll_id)
    ensure_open(poll, config.today())
    poll = save_poll(vote(poll, v.identity, v.display_name, v.option_id))
    mine = sorted(selection_of(poll, v.display_name))
    logger.info("poll %s: %s selection %s", poll_id, v.display_name, mine)
    return {"ok": True, "selection": mine, "poll": poll}


@router.post("/{poll_id}/options", status_code=201)
def append_option(poll_id: str, body: OptionIn):
    poll = get_poll(poll_id)
    ensure_open(poll, config.today())
    if len(poll.options) >= config.MAX_OPTIONS:
        raise InvalidContent(f"poll {poll_id} already has {config.MAX_OPTIONS} options")
    poll = save_poll(add_option(poll, body.text))
    logger.info("poll %s: option %s added", poll_id, poll.options[-1].option_id)
    return {"ok": True, "option": poll.options[-1], "poll": poll}


@router.get("/{poll_id}/results")
def poll_results(poll_id: str) -> PollResults:
    return results(get_poll(poll_id), config.today())
