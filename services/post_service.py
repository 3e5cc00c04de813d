"""
services/post_service.py
-------------------------
Business logic for posts: validation on create, per-viewer visibility,
and ownership checks on delete.
"""

from typing import Optional

from models.post import Post, PRIVACY_ALMOST_PRIVATE, PRIVACY_LEVELS, PRIVACY_PRIVATE, PRIVACY_PUBLIC
from repositories.errors import PostNotFound
from repositories.follower_repo import FollowerRepository
from repositories.group_repo import GroupRepository
from repositories.post_repo import PostRepository
from services.errors import GroupMemberRequired, PostForbidden, ValidationError
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class PostService:
    """
    Handles all business logic for posts.

    Visibility of a single post for a viewer:
        - group post: viewer is a member of the group
        - own post: always
        - public: always
        - almost_private: viewer has an accepted follow of the author
        - private: viewer is on the post's allow-list
    """

    def __init__(
        self,
        post_repo: Optional[PostRepository] = None,
        group_repo: Optional[GroupRepository] = None,
        follower_repo: Optional[FollowerRepository] = None,
    ):
        self.post_repo = post_repo or PostRepository()
        self.group_repo = group_repo or GroupRepository()
        self.follower_repo = follower_repo or FollowerRepository()

    # ── CREATE ────────────────────────────────────────────

    def create(
        self,
        user_id: str,
        title: str,
        content: str,
        privacy: str = PRIVACY_PUBLIC,
        group_id: Optional[str] = None,
        image_url: Optional[str] = None,
        allowed_user_ids: Optional[list[str]] = None,
    ) -> Post:
        """
        Publish a post on the author's timeline or in a group.

        Raises:
            ValidationError: Missing title/content, unknown privacy, or a
                private post without an allow-list.
            GroupNotFound: `group_id` does not exist.
            GroupMemberRequired: The author is not a member of the group.
        """
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            raise ValidationError("title and content are required")

        allowed: list[str] = []
        if group_id:
            self.group_repo.get_by_id(group_id)
            if not self.group_repo.is_member(group_id, user_id):
                raise GroupMemberRequired()
            privacy = PRIVACY_PUBLIC
        else:
            group_id = None
            if privacy not in PRIVACY_LEVELS:
                raise ValidationError(f"invalid privacy '{privacy}'")
            if privacy == PRIVACY_PRIVATE:
                allowed = [uid for uid in (allowed_user_ids or []) if uid]
                if not allowed:
                    raise ValidationError("private posts need at least one allowed user")

        return self.post_repo.create(Post(
            user_id=user_id,
            title=title,
            content=content,
            privacy=privacy,
            group_id=group_id,
            image_url=image_url,
            allowed_user_ids=allowed,
        ))

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, post_id: str, viewer_id: str) -> Post:
        """
        Fetch a post the viewer is allowed to see.

        Raises:
            PostNotFound: The post does not exist or is hidden from the viewer.
        """
        post = self.post_repo.get_by_id(post_id)
        if not self.can_view(post, viewer_id):
            raise PostNotFound()
        return post

    def can_view(self, post: Post, viewer_id: str) -> bool:
        if post.is_group_post():
            return self.group_repo.is_member(post.group_id, viewer_id)
        if post.user_id == viewer_id or post.privacy == PRIVACY_PUBLIC:
            return True
        if post.privacy == PRIVACY_ALMOST_PRIVATE:
            follow = self.follower_repo.find_follow(viewer_id, post.user_id)
            return follow is not None and follow.is_accepted()
        if post.privacy == PRIVACY_PRIVATE:
            return self.post_repo.is_user_allowed(post.id, viewer_id)
        return False

    def list_feed(self, viewer_id: str, limit: int = 0, offset: int = 0) -> list[Post]:
        """Every timeline post visible to the viewer, newest first."""
        limit, offset = clamp_page(limit, offset)
        return self.post_repo.list(viewer_id, limit, offset)

    def list_followed_feed(self, viewer_id: str, limit: int = 0, offset: int = 0) -> list[Post]:
        """Visible timeline posts of people the viewer follows."""
        limit, offset = clamp_page(limit, offset)
        return self.post_repo.list_followed_by_user(viewer_id, limit, offset)

    def list_public(self, limit: int = 0, offset: int = 0) -> list[Post]:
        limit, offset = clamp_page(limit, offset)
        return self.post_repo.list_public(limit, offset)

    def list_by_user(
        self, target_user_id: str, viewer_id: str, limit: int = 0, offset: int = 0
    ) -> list[Post]:
        limit, offset = clamp_page(limit, offset)
        return self.post_repo.list_by_user(target_user_id, viewer_id, limit, offset)

    def list_group_posts(
        self, group_id: str, viewer_id: str, limit: int = 0, offset: int = 0
    ) -> list[Post]:
        """Posts of a group; a non-member gets an empty list."""
        if not self.group_repo.is_member(group_id, viewer_id):
            return []
        limit, offset = clamp_page(limit, offset)
        return self.post_repo.list_by_group(group_id, limit, offset)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, post_id: str, user_id: str) -> None:
        """
        Delete a post. Allowed for the author, and for group admins on group posts.

        Raises:
            PostNotFound: The post does not exist.
            PostForbidden: The caller may not delete it.
        """
        post = self.post_repo.get_by_id(post_id)
        if post.user_id != user_id and not (
            post.is_group_post() and self.group_repo.is_admin(post.group_id, user_id)
        ):
            logger.warning(f"User {user_id} tried to delete post {post_id} they do not control")
            raise PostForbidden()
        self.post_repo.remove_allowed_users(post_id)
        self.post_repo.delete(post_id)
