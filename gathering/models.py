import datetime as dt
from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from .config import MAX_NAME_LENGTH, MAX_OPTIONS


class Response(str, Enum):
    ATTEND = "attend"
    NOT_ATTEND = "not_attend"
    UNDECIDED = "undecided"


# Response -> name of the Event field holding its members
RESPONSE_FIELDS: Dict[Response, str] = {
    Response.ATTEND: "attending",
    Response.NOT_ATTEND: "not_attending",
    Response.UNDECIDED: "undecided",
}


# ----------- shared documents -----------

class Event(BaseModel):
    """
    RSVP-bearing event.
    attending / not_attending / undecided are pairwise disjoint and
    display_name_of has exactly one entry per identity found in them.
    """
    id: str
    title: str
    date: dt.date
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    attending: Set[str] = Field(default_factory=set)
    not_attending: Set[str] = Field(default_factory=set)
    undecided: Set[str] = Field(default_factory=set)
    display_name_of: Dict[str, str] = Field(default_factory=dict)


class PollOption(BaseModel):
    option_id: str
    text: str
    vote_count: int = 0


class Poll(BaseModel):
    """
    Poll document. Counters are derived data:
    total_votes == sum(vote_count) == sum(len(s) for s in voter_selections.values())
    """
    id: str
    question: str
    options: List[PollOption]
    total_votes: int = 0
    allow_multiple: bool = False
    is_anonymous: bool = False
    allow_add_options: bool = False
    end_date: Optional[dt.date] = None
    created_at: dt.datetime
    voter_selections: Dict[str, Set[str]] = Field(default_factory=dict)
    voters: Set[str] = Field(default_factory=set)
    display_name_of: Dict[str, str] = Field(default_factory=dict)


# ----------- requests -----------

class EventIn(BaseModel):
    title: str = Field(..., examples=["정기 모임"])
    date: dt.date = Field(..., examples=["2026-11-07"])
    time: Optional[str] = Field(None, examples=["19:00"])
    location: Optional[str] = None
    description: Optional[str] = None


class EventPatch(BaseModel):
    title: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class RsvpIn(BaseModel):
    identity: str = Field(..., examples=["c0ffee-session"])
    display_name: str = Field(..., max_length=MAX_NAME_LENGTH, examples=["지운"])
    response: Response


class PollIn(BaseModel):
    question: str = Field(..., examples=["Where should we eat?"])
    options: List[str] = Field(..., max_length=MAX_OPTIONS, examples=[["Pizza", "Ramen"]])
    allow_multiple: bool = False
    is_anonymous: bool = False
    allow_add_options: bool = False
    end_date: Optional[dt.date] = None


class VoteIn(BaseModel):
    identity: str = Field(..., examples=["c0ffee-session"])
    display_name: str = Field(..., max_length=MAX_NAME_LENGTH, examples=["Kim"])
    option_id: str = Field(..., examples=["opt-1"])


class OptionIn(BaseModel):
    text: str = Field(..., examples=["Sushi"])


# ----------- read views -----------

class Tally(BaseModel):
    event_id: str
    counts: Dict[Response, int]
    names: Dict[Response, List[str]]


class OptionResult(BaseModel):
    option_id: str
    text: str
    vote_count: int
    percentage: float
    # None when the poll is anonymous
    voters: Optional[List[str]] = None


class PollResults(BaseModel):
    poll_id: str
    question: str
    total_votes: int
    participants: int
    is_anonymous: bool
    closed: bool = False
    options: List[OptionResult]
