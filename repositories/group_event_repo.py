"""
repositories/group_event_repo.py
---------------------------------
Data access layer for group events and their going / not_going responses.
"""

import uuid

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.group_event import GroupEvent, GroupEventResponse, RESPONSE_GOING
from repositories.errors import EventNotFound, InvalidReference, InvalidValue
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, group_id, creator_id, title, description, event_time, created_at, updated_at"


class GroupEventRepository:
    """Repository for the group_events and group_event_responses tables."""

    # ── EVENTS ────────────────────────────────────────────

    def create(self, event: GroupEvent) -> GroupEvent:
        """
        Insert an event.

        Returns:
            The same GroupEvent with `id`, `created_at` and `updated_at` populated.
        """
        sql = """
            INSERT INTO group_events (id, group_id, creator_id, title, description, event_time)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING created_at, updated_at;
        """
        event.id = event.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    event.id, event.group_id, event.creator_id,
                    event.title, event.description, event.event_time,
                ))
                event.created_at, event.updated_at = cur.fetchone()
            conn.commit()
            logger.info(f"Created event {event.id} in group {event.group_id}")
            return event
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create event in group {event.group_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, event_id: str) -> GroupEvent:
        """Fetch an event. Raises EventNotFound."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM group_events WHERE id = %s;", (event_id,))
                row = cur.fetchone()
        finally:
            release_connection(conn)
        if row is None:
            raise EventNotFound()
        return self._row_to_event(row)

    def list_by_group(
        self, group_id: str, limit: int, offset: int = 0, upcoming_only: bool = False
    ) -> list[GroupEvent]:
        """
        Events of a group in chronological order of `event_time`.

        Args:
            upcoming_only: Skip events whose time has already passed.
        """
        upcoming = "AND event_time >= NOW()" if upcoming_only else ""
        sql = f"""
            SELECT {_COLUMNS} FROM group_events
            WHERE group_id = %s {upcoming}
            ORDER BY event_time ASC
            LIMIT %s OFFSET %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (group_id, limit, offset))
                return [self._row_to_event(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def update(self, event: GroupEvent) -> GroupEvent:
        """Overwrite title, description and time. Raises EventNotFound."""
        sql = """
            UPDATE group_events
            SET title = %s, description = %s, event_time = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING updated_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (event.title, event.description, event.event_time, event.id))
                row = cur.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update event {event.id}: {e}")
            raise
        finally:
            release_connection(conn)
        if row is None:
            raise EventNotFound()
        event.updated_at = row[0]
        logger.info(f"Updated event {event.id}")
        return event

    def delete(self, event_id: str) -> None:
        """Delete an event and its responses. Raises EventNotFound."""
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM group_events WHERE id = %s;", (event_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete event {event_id}: {e}")
            raise
        finally:
            release_connection(conn)
        if not deleted:
            raise EventNotFound()
        logger.info(f"Deleted event {event_id}")

    # ── RESPONSES ─────────────────────────────────────────

    def upsert_response(self, event_id: str, user_id: str, response: str) -> GroupEventResponse:
        """
        Record a member's answer, replacing any earlier answer.

        Raises:
            InvalidReference: If the event or user does not exist.
            InvalidValue: The response is not going or not_going.
        """
        sql = """
            INSERT INTO group_event_responses (id, event_id, user_id, response)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (event_id, user_id) DO UPDATE
                SET response = EXCLUDED.response, updated_at = NOW()
            RETURNING id, created_at, updated_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (str(uuid.uuid4()), event_id, user_id, response))
                row = cur.fetchone()
            conn.commit()
            logger.info(f"User {user_id} answered {response} for event {event_id}")
            return GroupEventResponse(
                id=row[0], event_id=event_id, user_id=user_id, response=response,
                created_at=row[1], updated_at=row[2],
            )
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except errors.CheckViolation as e:
            conn.rollback()
            raise InvalidValue() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to store response for event {event_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def list_responses(self, event_id: str) -> list[GroupEventResponse]:
        """Every answer for an event with the responder's names, latest change first."""
        sql = """
            SELECT r.id, r.event_id, r.user_id, r.response, r.created_at, r.updated_at,
                   u.username, u.first_name, u.last_name
            FROM group_event_responses r
            JOIN users u ON u.id = r.user_id
            WHERE r.event_id = %s
            ORDER BY r.updated_at DESC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                return [
                    GroupEventResponse(
                        id=r[0], event_id=r[1], user_id=r[2], response=r[3],
                        created_at=r[4], updated_at=r[5],
                        username=r[6], first_name=r[7], last_name=r[8],
                    )
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def get_response_counts(self, event_id: str) -> tuple[int, int]:
        """
        Tally answers for an event.

        Returns:
            (going, not_going)
        """
        sql = """
            SELECT response, COUNT(*) FROM group_event_responses
            WHERE event_id = %s
            GROUP BY response;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                going = not_going = 0
                for response, count in cur.fetchall():
                    if response == RESPONSE_GOING:
                        going = count
                    else:
                        not_going = count
                return going, not_going
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_event(row: tuple) -> GroupEvent:
        return GroupEvent(
            id=row[0],
            group_id=row[1],
            creator_id=row[2],
            title=row[3],
            description=row[4],
            event_time=row[5],
            created_at=row[6],
            updated_at=row[7],
        )
