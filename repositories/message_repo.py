"""
repositories/message_repo.py
-----------------------------
Data access layer for direct and group chat messages.
Both tables are append-only; there is no update or delete path.
"""

import uuid

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.message import ChatPartner, DirectMessage, GroupMessage
from repositories.errors import InvalidReference
from utils.logger import get_logger

logger = get_logger(__name__)


class MessageRepository:
    """Repository for the messages and group_messages tables."""

    # ── CREATE ────────────────────────────────────────────

    def save_direct_message(self, message: DirectMessage) -> DirectMessage:
        """Persist a one-to-one message and populate its `id` and `created_at`."""
        sql = """
            INSERT INTO messages (id, sender_id, receiver_id, content)
            VALUES (%s, %s, %s, %s)
            RETURNING created_at;
        """
        message.id = message.id or str(uuid.uuid4())
        self._insert(sql, (message.id, message.sender_id, message.receiver_id, message.content), message)
        logger.info(f"Stored message {message.id} from {message.sender_id} to {message.receiver_id}")
        return message

    def save_group_message(self, message: GroupMessage) -> GroupMessage:
        """Persist a group chat message and populate its `id` and `created_at`."""
        sql = """
            INSERT INTO group_messages (id, group_id, sender_id, content)
            VALUES (%s, %s, %s, %s)
            RETURNING created_at;
        """
        message.id = message.id or str(uuid.uuid4())
        self._insert(sql, (message.id, message.group_id, message.sender_id, message.content), message)
        logger.info(f"Stored group message {message.id} in group {message.group_id}")
        return message

    # ── READ ──────────────────────────────────────────────

    def get_direct_messages_between(
        self, user_a: str, user_b: str, limit: int, offset: int = 0
    ) -> tuple[list[DirectMessage], int]:
        """
        Conversation between two users, newest first.

        Returns:
            (page of messages, total number of messages in the conversation)
        """
        pair = """
            (sender_id = %s AND receiver_id = %s) OR (sender_id = %s AND receiver_id = %s)
        """
        pair_params = (user_a, user_b, user_b, user_a)
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"SELECT COUNT(*) FROM messages WHERE {pair};", pair_params)
                total = cur.fetchone()[0]
                cur.execute(
                    f"""
                    SELECT id, sender_id, receiver_id, content, created_at
                    FROM messages WHERE {pair}
                    ORDER BY created_at DESC
                    LIMIT %s OFFSET %s;
                    """,
                    pair_params + (limit, offset),
                )
                messages = [
                    DirectMessage(id=r[0], sender_id=r[1], receiver_id=r[2], content=r[3], created_at=r[4])
                    for r in cur.fetchall()
                ]
                return messages, total
        finally:
            release_connection(conn)

    def get_group_messages(self, group_id: str, limit: int, offset: int = 0) -> list[GroupMessage]:
        """Group chat history, newest first, with each sender's username."""
        sql = """
            SELECT m.id, m.group_id, m.sender_id, m.content, m.created_at, u.username
            FROM group_messages m
            JOIN users u ON u.id = m.sender_id
            WHERE m.group_id = %s
            ORDER BY m.created_at DESC
            LIMIT %s OFFSET %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (group_id, limit, offset))
                return [
                    GroupMessage(
                        id=r[0], group_id=r[1], sender_id=r[2], content=r[3],
                        created_at=r[4], sender_username=r[5],
                    )
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def get_chat_partners(self, user_id: str) -> list[ChatPartner]:
        """
        Everyone `user_id` has exchanged direct messages with, together with
        the latest message of each conversation, most recent conversation first.
        """
        sql = """
            SELECT u.id, u.username, u.first_name, u.last_name, u.avatar_url,
                   last.content, last.created_at
            FROM (
                SELECT DISTINCT ON (partner_id) partner_id, content, created_at
                FROM (
                    SELECT CASE WHEN sender_id = %s THEN receiver_id ELSE sender_id END AS partner_id,
                           content, created_at
                    FROM messages
                    WHERE sender_id = %s OR receiver_id = %s
                ) AS conv
                ORDER BY partner_id, created_at DESC
            ) AS last
            JOIN users u ON u.id = last.partner_id
            ORDER BY last.created_at DESC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, user_id, user_id))
                return [
                    ChatPartner(
                        user_id=r[0], username=r[1], first_name=r[2], last_name=r[3],
                        avatar_url=r[4], last_message=r[5], last_message_at=r[6],
                    )
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _insert(sql: str, params: tuple, message) -> None:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                message.created_at = cur.fetchone()[0]
            conn.commit()
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to store message: {e}")
            raise
        finally:
            release_connection(conn)
