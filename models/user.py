"""
models/user.py
--------------
Domain models for user accounts and the profile views built from them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass
class User:
    """
    Represents a registered account.

    Attributes:
        id: Text UUID primary key (None for new records).
        username: Unique handle.
        email: Unique e-mail address.
        password_hash: bcrypt hash; never the plaintext password.
        first_name: Optional given name.
        last_name: Optional family name.
        avatar_url: Optional avatar image location.
        about_me: Optional free-text bio.
        birth_date: Optional date of birth.
        is_private: When True, only accepted followers see the full profile.
        created_at: Timestamp when the record was created.
        updated_at: Timestamp of the last profile change.
    """
    username: str
    email: str
    password_hash: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    about_me: Optional[str] = None
    birth_date: Optional[date] = None
    is_private: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        """First and last name joined, falling back to the username."""
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.username


# Values of UserProfile.follow_request_state
FOLLOW_REQUEST_SENT = "SENT"
FOLLOW_REQUEST_RECEIVED = "RECEIVED"


@dataclass
class UserProfile:
    """
    Profile as seen by a specific viewer.

    A private profile the viewer does not follow is returned with
    `is_restricted=True` and only the identity fields filled in.
    """
    user: User
    is_restricted: bool = False
    followers_count: int = 0
    following_count: int = 0
    is_followed: bool = False
    follow_request_state: Optional[str] = None  # 'SENT' | 'RECEIVED'
    latest_posts: list = field(default_factory=list)
    latest_followers: list = field(default_factory=list)
    latest_following: list = field(default_factory=list)
