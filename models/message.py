"""
models/message.py
-----------------
Domain models for direct and group chat.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class DirectMessage:
    """A one-to-one chat message."""
    sender_id: str
    receiver_id: str
    content: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class GroupMessage:
    """A message posted to a group chat."""
    group_id: str
    sender_id: str
    content: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    sender_username: Optional[str] = None


@dataclass
class ChatPartner:
    """
    A user the caller has exchanged direct messages with.

    Attributes:
        user_id: The counterpart.
        username: Counterpart's handle.
        first_name: Counterpart's given name.
        last_name: Counterpart's family name.
        avatar_url: Counterpart's avatar.
        last_message: Content of the most recent message in either direction.
        last_message_at: When that message was sent.
    """
    user_id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
