"""
repositories/follower_repo.py
------------------------------
Data access layer for the follower graph.
All SQL queries related to the `followers` table live here.
"""

from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.follower import Follower, FOLLOW_PENDING
from models.user import User
from repositories.errors import FollowAlreadyExists, FollowNotFound, InvalidReference, InvalidValue
from repositories.user_repo import row_to_user_summary
from utils.logger import get_logger

logger = get_logger(__name__)


class FollowerRepository:
    """Repository for follow edges and follow requests."""

    # ── CREATE ────────────────────────────────────────────

    def create_follow_request(
        self, follower_id: str, following_id: str, status: str = FOLLOW_PENDING
    ) -> Follower:
        """
        Insert a follow edge.

        Args:
            follower_id: The user who follows.
            following_id: The user being followed.
            status: 'pending' for a request, 'accepted' for an immediate follow.

        Raises:
            FollowAlreadyExists: If an edge between the two users already exists.
            InvalidReference: If either user does not exist.
            InvalidValue: Self-follow or an unknown status.
        """
        sql = """
            INSERT INTO followers (follower_id, following_id, status)
            VALUES (%s, %s, %s)
            RETURNING created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (follower_id, following_id, status))
                created_at = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Follow {follower_id} -> {following_id} stored as {status}")
            return Follower(follower_id, following_id, status, created_at)
        except errors.UniqueViolation as e:
            conn.rollback()
            raise FollowAlreadyExists() from e
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except errors.CheckViolation as e:
            conn.rollback()
            raise InvalidValue() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create follow {follower_id} -> {following_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── UPDATE / DELETE ───────────────────────────────────

    def update_follow_status(self, follower_id: str, following_id: str, status: str) -> None:
        """Change an edge's status. Raises FollowNotFound, or InvalidValue for an unknown status."""
        sql = "UPDATE followers SET status = %s WHERE follower_id = %s AND following_id = %s;"
        self._write(sql, (status, follower_id, following_id), f"set follow status to {status}")

    def delete_follow(self, follower_id: str, following_id: str) -> None:
        """Remove an edge in any status. Raises FollowNotFound."""
        sql = "DELETE FROM followers WHERE follower_id = %s AND following_id = %s;"
        self._write(sql, (follower_id, following_id), "delete follow")

    # ── READ ──────────────────────────────────────────────

    def find_follow(self, follower_id: str, following_id: str) -> Optional[Follower]:
        """
        Look up the edge between two users.

        Returns:
            The Follower edge, or None if there is none.
        """
        sql = """
            SELECT follower_id, following_id, status, created_at
            FROM followers WHERE follower_id = %s AND following_id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (follower_id, following_id))
                row = cur.fetchone()
                return Follower(row[0], row[1], row[2], row[3]) if row else None
        finally:
            release_connection(conn)

    def get_followers(self, user_id: str, limit: int, offset: int = 0) -> list[User]:
        """Users with an accepted follow of `user_id`, most recent first."""
        sql = """
            SELECT u.id, u.username, u.first_name, u.last_name, u.avatar_url
            FROM followers f
            JOIN users u ON u.id = f.follower_id
            WHERE f.following_id = %s AND f.status = 'accepted'
            ORDER BY f.created_at DESC
            LIMIT %s OFFSET %s;
        """
        return self._fetch_users(sql, (user_id, limit, offset))

    def get_following(self, user_id: str, limit: int, offset: int = 0) -> list[User]:
        """Users that `user_id` follows (accepted), most recent first."""
        sql = """
            SELECT u.id, u.username, u.first_name, u.last_name, u.avatar_url
            FROM followers f
            JOIN users u ON u.id = f.following_id
            WHERE f.follower_id = %s AND f.status = 'accepted'
            ORDER BY f.created_at DESC
            LIMIT %s OFFSET %s;
        """
        return self._fetch_users(sql, (user_id, limit, offset))

    def get_pending_received_requests(self, user_id: str) -> list[User]:
        """Users waiting for `user_id` to accept their follow request."""
        sql = """
            SELECT u.id, u.username, u.first_name, u.last_name, u.avatar_url
            FROM followers f
            JOIN users u ON u.id = f.follower_id
            WHERE f.following_id = %s AND f.status = 'pending'
            ORDER BY f.created_at DESC;
        """
        return self._fetch_users(sql, (user_id,))

    def get_pending_sent_requests(self, user_id: str) -> list[User]:
        """Users `user_id` has asked to follow and who have not answered yet."""
        sql = """
            SELECT u.id, u.username, u.first_name, u.last_name, u.avatar_url
            FROM followers f
            JOIN users u ON u.id = f.following_id
            WHERE f.follower_id = %s AND f.status = 'pending'
            ORDER BY f.created_at DESC;
        """
        return self._fetch_users(sql, (user_id,))

    def count_followers(self, user_id: str) -> int:
        sql = "SELECT COUNT(*) FROM followers WHERE following_id = %s AND status = 'accepted';"
        return self._count(sql, user_id)

    def count_following(self, user_id: str) -> int:
        sql = "SELECT COUNT(*) FROM followers WHERE follower_id = %s AND status = 'accepted';"
        return self._count(sql, user_id)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _write(sql: str, params: tuple, action: str) -> None:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                changed = cur.rowcount > 0
            conn.commit()
        except errors.CheckViolation as e:
            conn.rollback()
            raise InvalidValue() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise
        finally:
            release_connection(conn)
        if not changed:
            raise FollowNotFound()

    @staticmethod
    def _fetch_users(sql: str, params: tuple) -> list[User]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [row_to_user_summary(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    @staticmethod
    def _count(sql: str, user_id: str) -> int:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return cur.fetchone()[0]
        finally:
            release_connection(conn)
