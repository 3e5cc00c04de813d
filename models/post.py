"""
models/post.py
--------------
Domain models for posts and comments.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

PRIVACY_PUBLIC = "public"
PRIVACY_ALMOST_PRIVATE = "almost_private"
PRIVACY_PRIVATE = "private"

PRIVACY_LEVELS = (PRIVACY_PUBLIC, PRIVACY_ALMOST_PRIVATE, PRIVACY_PRIVATE)


@dataclass
class Post:
    """
    Represents a timeline post or a group post.

    Attributes:
        id: Text UUID primary key (None for new records).
        user_id: Author.
        title: Short headline.
        content: Body text.
        privacy: 'public' | 'almost_private' | 'private'. Group posts are always public.
        group_id: Owning group, or None for a timeline post.
        image_url: Optional attached image.
        allowed_user_ids: Allow-list for private timeline posts (write-side only).
        created_at: Timestamp when the record was created.
    """
    user_id: str
    title: str
    content: str
    privacy: str = PRIVACY_PUBLIC
    group_id: Optional[str] = None
    image_url: Optional[str] = None
    allowed_user_ids: list[str] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_group_post(self) -> bool:
        """Returns True if the post belongs to a group."""
        return self.group_id is not None


@dataclass
class Comment:
    """A comment attached to a post."""
    post_id: str
    user_id: str
    content: str
    image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
