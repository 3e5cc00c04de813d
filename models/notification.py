"""
models/notification.py
----------------------
Domain model for per-user notifications.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

TYPE_FOLLOW_REQUEST = "follow_request"
TYPE_GROUP_INVITE = "group_invite"
TYPE_GROUP_JOIN_REQUEST = "group_join_request"
TYPE_NEW_GROUP_EVENT = "new_group_event"

ENTITY_USER = "user"
ENTITY_GROUP = "group"
ENTITY_EVENT = "event"


@dataclass
class Notification:
    """
    Represents a single inbox entry.

    Attributes:
        id: Text UUID primary key (None for new records).
        user_id: Recipient.
        type: 'follow_request' | 'group_invite' | 'group_join_request' | 'new_group_event'.
        entity_type: 'user' | 'group' | 'event'.
        entity_id: ID of the entity the notification points at.
        message: Human-readable text.
        is_read: Whether the recipient has seen it.
        created_at: Timestamp when the notification was created.
    """
    user_id: str
    type: str
    entity_type: str
    entity_id: str
    message: str
    is_read: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
