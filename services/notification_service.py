"""
services/notification_service.py
---------------------------------
Creates and manages per-user notifications.

An optional real-time notifier (any callable taking a Notification) is
called after every successful insert, e.g. to push over a socket. The
stored notification is the source of truth, so notifier failures are
logged and never propagate.
"""

from typing import Callable, Optional

from models.notification import Notification
from repositories.notification_repo import NotificationRepository
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)

Notifier = Callable[[Notification], None]


class NotificationService:
    """Business logic for the notification inbox."""

    def __init__(
        self,
        repo: Optional[NotificationRepository] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.repo = repo or NotificationRepository()
        self.notifier = notifier

    def create(
        self, user_id: str, type: str, entity_type: str, entity_id: str, message: str
    ) -> Notification:
        """
        Persist a notification and push it to the real-time notifier.

        Args:
            user_id: Recipient.
            type: One of the TYPE_* constants in models.notification.
            entity_type: One of the ENTITY_* constants.
            entity_id: ID of the referenced entity.
            message: Human-readable text.

        Returns:
            The stored Notification.
        """
        notification = self.repo.create(Notification(
            user_id=user_id,
            type=type,
            entity_type=entity_type,
            entity_id=entity_id,
            message=message,
        ))
        if self.notifier is not None:
            try:
                self.notifier(notification)
            except Exception as e:
                logger.warning(f"Real-time push of notification {notification.id} to {user_id} failed: {e}")
        return notification

    def list_for_user(self, user_id: str, limit: int = 0, offset: int = 0) -> list[Notification]:
        limit, offset = clamp_page(limit, offset)
        return self.repo.list_by_user(user_id, limit, offset)

    def mark_as_read(self, notification_id: str, user_id: str) -> None:
        self.repo.mark_as_read(notification_id, user_id)

    def mark_all_as_read(self, user_id: str) -> int:
        return self.repo.mark_all_as_read(user_id)

    def get_unread_count(self, user_id: str) -> int:
        return self.repo.get_unread_count(user_id)
