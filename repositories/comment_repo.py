"""
repositories/comment_repo.py
-----------------------------
Data access layer for post comments.
"""

import uuid

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.post import Comment
from repositories.errors import CommentNotFound, InvalidReference
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, post_id, user_id, content, image_url, created_at"


class CommentRepository:
    """Repository for CRUD operations on the comments table."""

    def create(self, comment: Comment) -> Comment:
        """
        Insert a comment.

        Raises:
            InvalidReference: If the post or author does not exist.
        """
        sql = """
            INSERT INTO comments (id, post_id, user_id, content, image_url)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING created_at;
        """
        comment.id = comment.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    comment.id, comment.post_id, comment.user_id,
                    comment.content, comment.image_url,
                ))
                comment.created_at = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Added comment {comment.id} on post {comment.post_id}")
            return comment
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add comment on post {comment.post_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, comment_id: str) -> Comment:
        """Fetch a comment. Raises CommentNotFound."""
        sql = f"SELECT {_COLUMNS} FROM comments WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (comment_id,))
                row = cur.fetchone()
        finally:
            release_connection(conn)
        if row is None:
            raise CommentNotFound()
        return self._row_to_comment(row)

    def list_by_post(self, post_id: str, limit: int, offset: int = 0) -> list[Comment]:
        """Comments on a post, oldest first."""
        sql = f"""
            SELECT {_COLUMNS} FROM comments
            WHERE post_id = %s
            ORDER BY created_at ASC
            LIMIT %s OFFSET %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (post_id, limit, offset))
                return [self._row_to_comment(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def delete(self, comment_id: str) -> None:
        """Delete a comment. Raises CommentNotFound."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM comments WHERE id = %s;", (comment_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete comment {comment_id}: {e}")
            raise
        finally:
            release_connection(conn)
        if not deleted:
            raise CommentNotFound()
        logger.info(f"Deleted comment {comment_id}")

    @staticmethod
    def _row_to_comment(row: tuple) -> Comment:
        return Comment(
            id=row[0],
            post_id=row[1],
            user_id=row[2],
            content=row[3],
            image_url=row[4],
            created_at=row[5],
        )
