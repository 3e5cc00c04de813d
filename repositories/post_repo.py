"""
repositories/post_repo.py
--------------------------
Data access layer for posts and their private-post allow-lists.
All SQL queries related to the `posts` and `post_allowed_users` tables
live here, including the privacy-aware feed queries.
"""

from __future__ import annotations

import uuid

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.post import Post, PRIVACY_PRIVATE, PRIVACY_PUBLIC
from repositories.errors import InvalidReference, InvalidValue, PostNotFound
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "p.id, p.user_id, p.group_id, p.title, p.content, p.image_url, p.privacy, p.created_at"

# A timeline post is visible to the viewer when it is public, their own,
# almost_private with an accepted follow of the author, or private with the
# viewer on its allow-list. Parameters: viewer_id x3.
_VISIBLE_FROM = """
    FROM posts p
    LEFT JOIN followers f
           ON f.following_id = p.user_id AND f.follower_id = %s AND f.status = 'accepted'
    LEFT JOIN post_allowed_users pa
           ON pa.post_id = p.id AND pa.user_id = %s
    WHERE p.group_id IS NULL
      AND (
            p.privacy = 'public'
         OR p.user_id = %s
         OR (p.privacy = 'almost_private' AND f.follower_id IS NOT NULL)
         OR (p.privacy = 'private' AND pa.user_id IS NOT NULL)
      )
"""


class PostRepository:
    """Repository for CRUD operations on the posts table."""

    # ── CREATE ────────────────────────────────────────────

    def create(self, post: Post) -> Post:
        """
        Insert a post and, for a private timeline post, its allow-list.

        Group posts are always stored as public; the allow-list is ignored
        for anything that is not a private timeline post.

        Returns:
            The same Post with `id` and `created_at` populated.

        Raises:
            InvalidReference: If the author, group or an allowed user does not exist.
        """
        if post.group_id is not None:
            post.privacy = PRIVACY_PUBLIC
        post.id = post.id or str(uuid.uuid4())
        sql = """
            INSERT INTO posts (id, user_id, group_id, title, content, image_url, privacy)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        allowed = (
            list(dict.fromkeys(post.allowed_user_ids))
            if post.privacy == PRIVACY_PRIVATE and post.group_id is None
            else []
        )
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    post.id, post.user_id, post.group_id, post.title,
                    post.content, post.image_url, post.privacy,
                ))
                post.created_at = cur.fetchone()[0]
                if allowed:
                    cur.executemany(
                        "INSERT INTO post_allowed_users (post_id, user_id) VALUES (%s, %s) "
                        "ON CONFLICT DO NOTHING;",
                        [(post.id, uid) for uid in allowed],
                    )
            conn.commit()
            post.allowed_user_ids = allowed
            logger.info(f"Created {post.privacy} post {post.id} by user {post.user_id}")
            return post
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except errors.CheckViolation as e:
            conn.rollback()
            raise InvalidValue() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create post for user {post.user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, post_id: str) -> Post:
        """
        Fetch a post without any visibility filtering.

        Raises:
            PostNotFound: If no such post exists.
        """
        sql = f"SELECT {_COLUMNS} FROM posts p WHERE p.id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (post_id,))
                row = cur.fetchone()
        finally:
            release_connection(conn)
        if row is None:
            raise PostNotFound()
        return self._row_to_post(row)

    def list(self, requesting_user_id: str, limit: int, offset: int = 0) -> list[Post]:
        """
        Timeline feed: every non-group post the requester may see, newest first.
        """
        sql = f"SELECT {_COLUMNS} {_VISIBLE_FROM} ORDER BY p.created_at DESC LIMIT %s OFFSET %s;"
        params = (requesting_user_id,) * 3 + (limit, offset)
        return self._fetch_posts(sql, params)

    def list_by_user(
        self, target_user_id: str, requesting_user_id: str, limit: int, offset: int = 0
    ) -> list[Post]:
        """
        One author's timeline posts that the requester may see, newest first.
        """
        sql = (
            f"SELECT {_COLUMNS} {_VISIBLE_FROM} AND p.user_id = %s "
            "ORDER BY p.created_at DESC LIMIT %s OFFSET %s;"
        )
        params = (requesting_user_id,) * 3 + (target_user_id, limit, offset)
        return self._fetch_posts(sql, params)

    def list_followed_by_user(
        self, requesting_user_id: str, limit: int, offset: int = 0
    ) -> list[Post]:
        """
        Timeline posts of authors the requester follows (accepted), newest first.

        Public and almost_private posts are always included; private posts
        only when the requester is on the allow-list.
        """
        sql = f"""
            SELECT {_COLUMNS}
            FROM posts p
            JOIN followers f
              ON f.following_id = p.user_id AND f.follower_id = %s AND f.status = 'accepted'
            LEFT JOIN post_allowed_users pa
                   ON pa.post_id = p.id AND pa.user_id = %s
            WHERE p.group_id IS NULL
              AND (
                    p.privacy IN ('public', 'almost_private')
                 OR (p.privacy = 'private' AND pa.user_id IS NOT NULL)
              )
            ORDER BY p.created_at DESC
            LIMIT %s OFFSET %s;
        """
        return self._fetch_posts(sql, (requesting_user_id, requesting_user_id, limit, offset))

    def list_public(self, limit: int, offset: int = 0) -> list[Post]:
        """Public timeline posts only, newest first."""
        sql = f"""
            SELECT {_COLUMNS} FROM posts p
            WHERE p.group_id IS NULL AND p.privacy = 'public'
            ORDER BY p.created_at DESC
            LIMIT %s OFFSET %s;
        """
        return self._fetch_posts(sql, (limit, offset))

    def list_by_group(self, group_id: str, limit: int, offset: int = 0) -> list[Post]:
        """Every post in a group, newest first. Membership is checked by the caller."""
        sql = f"""
            SELECT {_COLUMNS} FROM posts p
            WHERE p.group_id = %s
            ORDER BY p.created_at DESC
            LIMIT %s OFFSET %s;
        """
        return self._fetch_posts(sql, (group_id, limit, offset))

    # ── DELETE ────────────────────────────────────────────

    def delete(self, post_id: str) -> None:
        """Delete a post (comments and allow-list cascade). Raises PostNotFound."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM posts WHERE id = %s;", (post_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete post {post_id}: {e}")
            raise
        finally:
            release_connection(conn)
        if not deleted:
            raise PostNotFound()
        logger.info(f"Deleted post {post_id}")

    # ── ALLOW-LIST ────────────────────────────────────────

    def add_allowed_users(self, post_id: str, user_ids: list[str]) -> None:
        """Grant users access to a private post. Existing grants are kept."""
        if not user_ids:
            return
        sql = "INSERT INTO post_allowed_users (post_id, user_id) VALUES (%s, %s) ON CONFLICT DO NOTHING;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.executemany(sql, [(post_id, uid) for uid in user_ids])
            conn.commit()
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add allowed users to post {post_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def remove_allowed_users(self, post_id: str, user_ids: list[str] | None = None) -> int:
        """
        Revoke access to a private post.

        Args:
            post_id: Target post.
            user_ids: Users to remove; None clears the whole allow-list.

        Returns:
            Number of grants removed.
        """
        if user_ids is None:
            sql, params = "DELETE FROM post_allowed_users WHERE post_id = %s;", (post_id,)
        else:
            if not user_ids:
                return 0
            sql = "DELETE FROM post_allowed_users WHERE post_id = %s AND user_id = ANY(%s);"
            params = (post_id, list(user_ids))
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                removed = cur.rowcount
            conn.commit()
            return removed
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to remove allowed users from post {post_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def is_user_allowed(self, post_id: str, user_id: str) -> bool:
        sql = "SELECT 1 FROM post_allowed_users WHERE post_id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (post_id, user_id))
                return cur.fetchone() is not None
        finally:
            release_connection(conn)

    def get_allowed_users(self, post_id: str) -> list[str]:
        sql = "SELECT user_id FROM post_allowed_users WHERE post_id = %s ORDER BY user_id;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (post_id,))
                return [r[0] for r in cur.fetchall()]
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    def _fetch_posts(self, sql: str, params: tuple) -> list[Post]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_post(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_post(row: tuple) -> Post:
        """Map a database row (in `_COLUMNS` order) to a Post."""
        return Post(
            id=row[0],
            user_id=row[1],
            group_id=row[2],
            title=row[3],
            content=row[4],
            image_url=row[5],
            privacy=row[6],
            created_at=row[7],
        )
