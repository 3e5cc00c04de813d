"""
repositories/user_repo.py
--------------------------
Data access layer for user accounts.
All SQL queries related to the `users` table live here.
"""

from __future__ import annotations

import uuid
from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.user import User
from repositories.errors import UserAlreadyExists, UserNotFound
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, username, email, password_hash, first_name, last_name,
    avatar_url, about_me, birth_date, is_private, created_at, updated_at
"""


class UserRepository:
    """Repository for CRUD operations on the users table."""

    # ── CREATE ────────────────────────────────────────────

    def create(self, user: User) -> User:
        """
        Insert a new user.

        Args:
            user: The User to persist; `password_hash` must already be set.

        Returns:
            The same User with `id`, `created_at` and `updated_at` populated.

        Raises:
            UserAlreadyExists: If the username or e-mail is taken.
        """
        sql = """
            INSERT INTO users (id, username, email, password_hash, first_name, last_name,
                               avatar_url, about_me, birth_date, is_private)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at, updated_at;
        """
        user.id = user.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    user.id, user.username, user.email, user.password_hash,
                    user.first_name, user.last_name, user.avatar_url,
                    user.about_me, user.birth_date, user.is_private,
                ))
                row = cur.fetchone()
                user.created_at, user.updated_at = row[0], row[1]
            conn.commit()
            logger.info(f"Created user {user.id} ({user.username})")
            return user
        except errors.UniqueViolation as e:
            conn.rollback()
            raise UserAlreadyExists() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create user {user.username}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, user_id: str) -> User:
        """
        Fetch a user by primary key.

        Raises:
            UserNotFound: If no such user exists.
        """
        return self._get_one("id", user_id)

    def get_by_username(self, username: str) -> User:
        """Fetch a user by username. Raises UserNotFound."""
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> User:
        """Fetch a user by e-mail. Raises UserNotFound."""
        return self._get_one("email", email)

    def exists(self, user_id: str) -> bool:
        sql = "SELECT 1 FROM users WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return cur.fetchone() is not None
        finally:
            release_connection(conn)

    def list(self, limit: int, offset: int = 0) -> list[User]:
        """
        List users, newest first.

        Args:
            limit: Page size.
            offset: Number of rows to skip.
        """
        sql = f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC LIMIT %s OFFSET %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (limit, offset))
                return [self._row_to_user(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def search(self, query: str, limit: int) -> list[User]:
        """
        Case-insensitive partial match on username, first name and last name.

        Returns:
            Matching users ordered by username.
        """
        pattern = contains_pattern(query)
        sql = f"""
            SELECT {_COLUMNS} FROM users
            WHERE username ILIKE %s ESCAPE '\\'
               OR first_name ILIKE %s ESCAPE '\\'
               OR last_name ILIKE %s ESCAPE '\\'
            ORDER BY username
            LIMIT %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (pattern, pattern, pattern, limit))
                return [self._row_to_user(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, user: User) -> User:
        """
        Overwrite every mutable column of an existing user.

        Raises:
            UserNotFound: If the row does not exist.
            UserAlreadyExists: If the new username or e-mail is taken.
        """
        sql = """
            UPDATE users
            SET username = %s, email = %s, password_hash = %s, first_name = %s,
                last_name = %s, avatar_url = %s, about_me = %s, birth_date = %s,
                is_private = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING updated_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    user.username, user.email, user.password_hash, user.first_name,
                    user.last_name, user.avatar_url, user.about_me, user.birth_date,
                    user.is_private, user.id,
                ))
                row = cur.fetchone()
                if row is None:
                    raise UserNotFound()
                user.updated_at = row[0]
            conn.commit()
            logger.info(f"Updated user {user.id}")
            return user
        except UserNotFound:
            conn.rollback()
            raise
        except errors.UniqueViolation as e:
            conn.rollback()
            raise UserAlreadyExists() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update user {user.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def update_privacy(self, user_id: str, is_private: bool) -> None:
        """Flip a user's profile visibility. Raises UserNotFound."""
        sql = "UPDATE users SET is_private = %s, updated_at = NOW() WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (is_private, user_id))
                updated = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update privacy for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)
        if not updated:
            raise UserNotFound()
        logger.info(f"User {user_id} privacy set to {'private' if is_private else 'public'}")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, user_id: str) -> None:
        """Delete a user and everything that cascades from it. Raises UserNotFound."""
        sql = "DELETE FROM users WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)
        if not deleted:
            raise UserNotFound()
        logger.info(f"Deleted user {user_id}")

    # ── HELPERS ───────────────────────────────────────────

    def _get_one(self, column: str, value: str) -> User:
        sql = f"SELECT {_COLUMNS} FROM users WHERE {column} = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (value,))
                row = cur.fetchone()
        finally:
            release_connection(conn)
        if row is None:
            raise UserNotFound()
        return self._row_to_user(row)

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        """Map a database row (in `_COLUMNS` order) to a User."""
        return User(
            id=row[0],
            username=row[1],
            email=row[2],
            password_hash=row[3],
            first_name=row[4],
            last_name=row[5],
            avatar_url=row[6],
            about_me=row[7],
            birth_date=row[8],
            is_private=row[9],
            created_at=row[10],
            updated_at=row[11],
        )


def row_to_user_summary(row: tuple) -> User:
    """Map a short (id, username, first_name, last_name, avatar_url) row."""
    return User(
        id=row[0],
        username=row[1],
        email="",
        first_name=row[2],
        last_name=row[3],
        avatar_url=row[4],
    )


def contains_pattern(text: str) -> str:
    """LIKE pattern matching `text` anywhere, with its wildcards escaped by backslash."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
