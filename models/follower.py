"""
models/follower.py
------------------
Domain model for follow relationships.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

FOLLOW_PENDING = "pending"
FOLLOW_ACCEPTED = "accepted"


@dataclass
class Follower:
    """
    A directed follow edge from `follower_id` to `following_id`.

    Attributes:
        follower_id: The user who follows (or asked to).
        following_id: The user being followed.
        status: 'pending' | 'accepted'.
        created_at: When the request was made.
    """
    follower_id: str
    following_id: str
    status: str = FOLLOW_PENDING
    created_at: Optional[datetime] = None

    def is_accepted(self) -> bool:
        return self.status == FOLLOW_ACCEPTED

    def is_pending(self) -> bool:
        return self.status == FOLLOW_PENDING
