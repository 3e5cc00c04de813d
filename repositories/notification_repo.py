"""
repositories/notification_repo.py
----------------------------------
Data access layer for user notifications.
"""

import uuid

from db.connection import get_connection, release_connection
from models.notification import Notification
from repositories.errors import NotificationNotFound
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, type, entity_type, entity_id, message, is_read, created_at"


class NotificationRepository:
    """Repository for the notifications table."""

    def create(self, notification: Notification) -> Notification:
        """Insert a notification and populate its `id` and `created_at`."""
        sql = """
            INSERT INTO notifications (id, user_id, type, entity_type, entity_id, message, is_read)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        notification.id = notification.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    notification.id, notification.user_id, notification.type,
                    notification.entity_type, notification.entity_id,
                    notification.message, notification.is_read,
                ))
                notification.created_at = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Notification {notification.type} for user {notification.user_id}")
            return notification
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create notification for user {notification.user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def list_by_user(self, user_id: str, limit: int, offset: int = 0) -> list[Notification]:
        """A user's notifications, newest first."""
        sql = f"""
            SELECT {_COLUMNS} FROM notifications
            WHERE user_id = %s
            ORDER BY created_at DESC
            LIMIT %s OFFSET %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, limit, offset))
                return [self._row_to_notification(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def mark_as_read(self, notification_id: str, user_id: str) -> None:
        """
        Mark one notification read, scoped to its owner.

        Raises:
            NotificationNotFound: If it does not exist or belongs to someone else.
        """
        sql = "UPDATE notifications SET is_read = TRUE WHERE id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (notification_id, user_id))
                updated = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to mark notification {notification_id} read: {e}")
            raise
        finally:
            release_connection(conn)
        if not updated:
            raise NotificationNotFound()

    def mark_all_as_read(self, user_id: str) -> int:
        """Returns the number of notifications that were unread."""
        sql = "UPDATE notifications SET is_read = TRUE WHERE user_id = %s AND is_read = FALSE;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                count = cur.rowcount
            conn.commit()
            return count
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to mark notifications read for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_unread_count(self, user_id: str) -> int:
        sql = "SELECT COUNT(*) FROM notifications WHERE user_id = %s AND is_read = FALSE;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return cur.fetchone()[0]
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_notification(row: tuple) -> Notification:
        return Notification(
            id=row[0],
            user_id=row[1],
            type=row[2],
            entity_type=row[3],
            entity_id=row[4],
            message=row[5],
            is_read=row[6],
            created_at=row[7],
        )
