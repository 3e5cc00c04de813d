"""
models/group_event.py
---------------------
Domain models for group events and member responses (RSVPs).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

RESPONSE_GOING = "going"
RESPONSE_NOT_GOING = "not_going"

RESPONSE_OPTIONS = (RESPONSE_GOING, RESPONSE_NOT_GOING)


@dataclass
class GroupEvent:
    """
    A scheduled event inside a group.

    Attributes:
        id: Text UUID primary key (None for new records).
        group_id: Owning group.
        creator_id: Member who created the event.
        title: Event title.
        event_time: When the event takes place.
        description: Optional details.
        created_at: Timestamp when the event was created.
        updated_at: Timestamp of the last edit.
    """
    group_id: str
    creator_id: str
    title: str
    event_time: datetime
    description: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class GroupEventResponse:
    """One member's going / not_going answer for an event."""
    event_id: str
    user_id: str
    response: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass
class GroupEventDetails:
    """An event together with its responses and tallies."""
    event: GroupEvent
    responses: list[GroupEventResponse] = field(default_factory=list)
    going_count: int = 0
    not_going_count: int = 0
