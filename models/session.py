"""
models/session.py
-----------------
Domain model for login sessions.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Session:
    """
    An opaque bearer token bound to one user until `expires_at`.

    Attributes:
        token: Random URL-safe token (primary key).
        user_id: Owner of the session.
        expires_at: Moment after which the token is rejected.
        created_at: Timestamp when the session was opened.
    """
    token: str
    user_id: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Returns True once `expires_at` has been reached."""
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now
