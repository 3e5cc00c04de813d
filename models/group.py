"""
models/group.py
---------------
Domain models for groups, their members, invitations and join requests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"


@dataclass
class Group:
    """
    Represents a user-created group.

    Attributes:
        id: Text UUID primary key (None for new records).
        creator_id: User who created the group; always an admin member.
        name: Display name.
        description: Optional description.
        avatar_url: Optional group image.
        created_at: Timestamp when the group was created.
        updated_at: Timestamp of the last edit.
    """
    creator_id: str
    name: str
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class GroupMember:
    """A user's membership row, joined with the user's display fields."""
    group_id: str
    user_id: str
    role: str = ROLE_MEMBER
    joined_at: Optional[datetime] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class GroupInvitation:
    """An invitation from a member to another user."""
    group_id: str
    inviter_id: str
    invitee_id: str
    status: str = STATUS_PENDING
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class GroupJoinRequest:
    """A user's request to be let into a group."""
    group_id: str
    requester_id: str
    status: str = STATUS_PENDING
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class GroupProfile:
    """
    A group as seen by one viewer.

    Non-members get `members` left empty; the counters and flags are
    always filled in.
    """
    group: Group
    member_count: int = 0
    is_member: bool = False
    is_admin: bool = False
    is_creator: bool = False
    members: list[GroupMember] = field(default_factory=list)
