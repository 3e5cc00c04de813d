"""
repositories/session_repo.py
-----------------------------
Data access layer for login sessions.
"""

from db.connection import get_connection, release_connection
from models.session import Session
from repositories.errors import SessionNotFound
from utils.logger import get_logger

logger = get_logger(__name__)


class SessionRepository:
    """Repository for the sessions table."""

    def create(self, session: Session) -> Session:
        """
        Persist a new session.

        Returns:
            The Session with `created_at` populated.
        """
        sql = """
            INSERT INTO sessions (token, user_id, expires_at)
            VALUES (%s, %s, %s)
            RETURNING created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (session.token, session.user_id, session.expires_at))
                session.created_at = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Opened session for user {session.user_id}")
            return session
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create session for user {session.user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_token(self, token: str) -> Session:
        """
        Fetch an unexpired session.

        Raises:
            SessionNotFound: If the token is unknown or has expired.
        """
        sql = """
            SELECT token, user_id, expires_at, created_at
            FROM sessions
            WHERE token = %s AND expires_at > NOW();
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (token,))
                row = cur.fetchone()
        finally:
            release_connection(conn)
        if row is None:
            raise SessionNotFound()
        return Session(token=row[0], user_id=row[1], expires_at=row[2], created_at=row[3])

    def delete_by_token(self, token: str) -> None:
        """Remove a session. Deleting an unknown token is not an error."""
        self._delete("DELETE FROM sessions WHERE token = %s;", token)

    def delete_by_user(self, user_id: str) -> int:
        """Remove every session of a user. Returns the number removed."""
        return self._delete("DELETE FROM sessions WHERE user_id = %s;", user_id)

    def clean_expired(self) -> int:
        """
        Delete every session whose expiry has passed.

        Returns:
            Number of sessions removed.
        """
        removed = self._delete("DELETE FROM sessions WHERE expires_at <= NOW();")
        if removed:
            logger.info(f"Removed {removed} expired session(s)")
        return removed

    @staticmethod
    def _delete(sql: str, *params) -> int:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                count = cur.rowcount
            conn.commit()
            return count
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete sessions: {e}")
            raise
        finally:
            release_connection(conn)
