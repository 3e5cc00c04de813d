"""
services/follower_service.py
-----------------------------
Business logic for the follow graph and the follow-request lifecycle.

A follow of a public account is accepted immediately. A follow of a
private account starts as a pending request that the target accepts
(pending -> accepted) or rejects (the request is deleted).
"""

from typing import Optional

from models.follower import Follower, FOLLOW_ACCEPTED, FOLLOW_PENDING
from models.notification import ENTITY_USER, TYPE_FOLLOW_REQUEST
from models.user import User
from repositories.follower_repo import FollowerRepository
from repositories.user_repo import UserRepository
from services.errors import (
    AlreadyFollowing,
    CannotFollowSelf,
    FollowRequestPending,
    NoPendingFollowRequest,
    NotFollowing,
)
from services.notification_service import NotificationService
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class FollowerService:
    """Follow requests, follows and follower listings."""

    def __init__(
        self,
        follower_repo: Optional[FollowerRepository] = None,
        user_repo: Optional[UserRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.follower_repo = follower_repo or FollowerRepository()
        self.user_repo = user_repo or UserRepository()
        self.notification_service = notification_service or NotificationService()

    def request_follow(self, follower_id: str, following_id: str) -> Follower:
        """
        Follow a user, or ask to if their account is private.

        Returns:
            The new edge; its status tells whether it was auto-accepted.

        Raises:
            CannotFollowSelf: follower and target are the same user.
            UserNotFound: The target does not exist.
            AlreadyFollowing: An accepted follow already exists.
            FollowRequestPending: A request is already waiting.
        """
        if follower_id == following_id:
            raise CannotFollowSelf()
        target = self.user_repo.get_by_id(following_id)

        existing = self.follower_repo.find_follow(follower_id, following_id)
        if existing is not None:
            if existing.is_accepted():
                raise AlreadyFollowing()
            raise FollowRequestPending()

        status = FOLLOW_PENDING if target.is_private else FOLLOW_ACCEPTED
        follow = self.follower_repo.create_follow_request(follower_id, following_id, status)

        if follow.is_pending():
            requester = self.user_repo.get_by_id(follower_id)
            self.notification_service.create(
                user_id=following_id,
                type=TYPE_FOLLOW_REQUEST,
                entity_type=ENTITY_USER,
                entity_id=follower_id,
                message=f"{requester.full_name} wants to follow you",
            )
        return follow

    def accept_follow(self, user_id: str, follower_id: str) -> None:
        """`user_id` accepts the pending request from `follower_id`."""
        self._require_pending(follower_id, user_id)
        self.follower_repo.update_follow_status(follower_id, user_id, FOLLOW_ACCEPTED)
        logger.info(f"User {user_id} accepted follow request from {follower_id}")

    def reject_follow(self, user_id: str, follower_id: str) -> None:
        """`user_id` rejects (deletes) the pending request from `follower_id`."""
        self._require_pending(follower_id, user_id)
        self.follower_repo.delete_follow(follower_id, user_id)
        logger.info(f"User {user_id} rejected follow request from {follower_id}")

    def cancel_request(self, follower_id: str, following_id: str) -> None:
        """The requester withdraws a pending request."""
        self._require_pending(follower_id, following_id)
        self.follower_repo.delete_follow(follower_id, following_id)

    def unfollow(self, follower_id: str, following_id: str) -> None:
        """Remove an accepted follow. Raises NotFollowing otherwise."""
        existing = self.follower_repo.find_follow(follower_id, following_id)
        if existing is None or not existing.is_accepted():
            raise NotFollowing()
        self.follower_repo.delete_follow(follower_id, following_id)
        logger.info(f"User {follower_id} unfollowed {following_id}")

    def list_followers(self, user_id: str, limit: int = 0, offset: int = 0) -> list[User]:
        limit, offset = clamp_page(limit, offset)
        return self.follower_repo.get_followers(user_id, limit, offset)

    def list_following(self, user_id: str, limit: int = 0, offset: int = 0) -> list[User]:
        limit, offset = clamp_page(limit, offset)
        return self.follower_repo.get_following(user_id, limit, offset)

    def list_pending_requests(self, user_id: str) -> dict:
        """
        Returns:
            {'received': [User, ...], 'sent': [User, ...]}
        """
        return {
            "received": self.follower_repo.get_pending_received_requests(user_id),
            "sent": self.follower_repo.get_pending_sent_requests(user_id),
        }

    def _require_pending(self, follower_id: str, following_id: str) -> None:
        existing = self.follower_repo.find_follow(follower_id, following_id)
        if existing is None or not existing.is_pending():
            raise NoPendingFollowRequest()
