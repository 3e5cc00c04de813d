"""
services/comment_service.py
----------------------------
Business logic for comments. Commenting on and reading comments of a post
both require that the caller can see the post.
"""

from typing import Optional

from config import MAX_COMMENT_LENGTH
from models.post import Comment
from repositories.comment_repo import CommentRepository
from repositories.group_repo import GroupRepository
from repositories.post_repo import PostRepository
from services.errors import CommentForbidden, ValidationError
from services.post_service import PostService
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class CommentService:
    """Create, list and delete comments."""

    def __init__(
        self,
        comment_repo: Optional[CommentRepository] = None,
        post_service: Optional[PostService] = None,
        post_repo: Optional[PostRepository] = None,
        group_repo: Optional[GroupRepository] = None,
    ):
        self.comment_repo = comment_repo or CommentRepository()
        self.post_service = post_service or PostService()
        self.post_repo = post_repo or PostRepository()
        self.group_repo = group_repo or GroupRepository()

    def create(
        self, post_id: str, user_id: str, content: str, image_url: Optional[str] = None
    ) -> Comment:
        """
        Comment on a post the user can see.

        Raises:
            ValidationError: Empty content or longer than MAX_COMMENT_LENGTH.
            PostNotFound: The post does not exist or is hidden from the user.
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("comment cannot be empty")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValidationError(f"comment exceeds {MAX_COMMENT_LENGTH} characters")

        self.post_service.get_by_id(post_id, user_id)
        return self.comment_repo.create(Comment(
            post_id=post_id, user_id=user_id, content=content, image_url=image_url,
        ))

    def list_by_post(
        self, post_id: str, viewer_id: str, limit: int = 0, offset: int = 0
    ) -> list[Comment]:
        """Comments on a visible post, oldest first."""
        self.post_service.get_by_id(post_id, viewer_id)
        limit, offset = clamp_page(limit, offset)
        return self.comment_repo.list_by_post(post_id, limit, offset)

    def delete(self, comment_id: str, user_id: str) -> None:
        """
        Delete a comment. Allowed for its author, and for admins of the
        group a group post belongs to.

        Raises:
            CommentNotFound: The comment does not exist.
            CommentForbidden: The caller may not delete it.
        """
        comment = self.comment_repo.get_by_id(comment_id)
        if comment.user_id != user_id:
            post = self.post_repo.get_by_id(comment.post_id)
            if not post.is_group_post() or not self.group_repo.is_admin(post.group_id, user_id):
                logger.warning(f"User {user_id} tried to delete comment {comment_id}")
                raise CommentForbidden()
        self.comment_repo.delete(comment_id)
