"""
repositories/group_repo.py
---------------------------
Data access layer for groups, memberships, invitations and join requests.
All SQL queries related to the `groups`, `group_members`,
`group_invitations` and `group_join_requests` tables live here.
"""

from __future__ import annotations

import uuid
from typing import Optional

from psycopg2 import errors

from db.connection import get_connection, release_connection
from models.group import (
    Group,
    GroupInvitation,
    GroupJoinRequest,
    GroupMember,
    ROLE_ADMIN,
    ROLE_MEMBER,
)
from repositories.errors import (
    AlreadyGroupMember,
    AlreadyInvited,
    AlreadyRequested,
    GroupNotFound,
    InvalidReference,
    InvitationNotFound,
    JoinRequestNotFound,
    NotGroupMember,
)
from repositories.user_repo import contains_pattern
from utils.logger import get_logger

logger = get_logger(__name__)

_GROUP_COLUMNS = "g.id, g.creator_id, g.name, g.description, g.avatar_url, g.created_at, g.updated_at"
_INVITATION_COLUMNS = "id, group_id, inviter_id, invitee_id, status, created_at, updated_at"
_JOIN_REQUEST_COLUMNS = "id, group_id, requester_id, status, created_at, updated_at"


class GroupRepository:
    """Repository for groups and everything hanging off a group."""

    # ── GROUPS ────────────────────────────────────────────

    def create(self, group: Group) -> Group:
        """
        Insert a group and make its creator an admin member, atomically.

        Returns:
            The same Group with `id`, `created_at` and `updated_at` populated.
        """
        group.id = group.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO groups (id, creator_id, name, description, avatar_url)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING created_at, updated_at;
                    """,
                    (group.id, group.creator_id, group.name, group.description, group.avatar_url),
                )
                group.created_at, group.updated_at = cur.fetchone()
                cur.execute(
                    "INSERT INTO group_members (group_id, user_id, role) VALUES (%s, %s, %s);",
                    (group.id, group.creator_id, ROLE_ADMIN),
                )
            conn.commit()
            logger.info(f"Created group {group.id} ({group.name}) by user {group.creator_id}")
            return group
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to create group {group.name}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_by_id(self, group_id: str) -> Group:
        """Fetch a group. Raises GroupNotFound."""
        row = self._fetch_one(f"SELECT {_GROUP_COLUMNS} FROM groups g WHERE g.id = %s;", (group_id,))
        if row is None:
            raise GroupNotFound()
        return self._row_to_group(row)

    def exists(self, group_id: str) -> bool:
        return self._fetch_one("SELECT 1 FROM groups WHERE id = %s;", (group_id,)) is not None

    def list(self, limit: int, offset: int = 0, search: Optional[str] = None) -> list[Group]:
        """
        List groups, newest first.

        Args:
            limit: Page size.
            offset: Rows to skip.
            search: Optional case-insensitive filter on name and description.
        """
        sql = f"SELECT {_GROUP_COLUMNS} FROM groups g"
        params: list = []
        if search:
            sql += " WHERE LOWER(g.name) LIKE %s ESCAPE '\\' OR LOWER(g.description) LIKE %s ESCAPE '\\'"
            pattern = contains_pattern(search.lower())
            params += [pattern, pattern]
        sql += " ORDER BY g.created_at DESC LIMIT %s OFFSET %s;"
        params += [limit, offset]
        return [self._row_to_group(r) for r in self._fetch_all(sql, tuple(params))]

    def list_groups_by_user(self, user_id: str, limit: int, offset: int = 0) -> list[Group]:
        """Groups `user_id` belongs to, most recently joined first."""
        sql = f"""
            SELECT {_GROUP_COLUMNS}
            FROM groups g
            JOIN group_members gm ON gm.group_id = g.id
            WHERE gm.user_id = %s
            ORDER BY gm.joined_at DESC
            LIMIT %s OFFSET %s;
        """
        return [self._row_to_group(r) for r in self._fetch_all(sql, (user_id, limit, offset))]

    def update(self, group: Group) -> Group:
        """Overwrite a group's editable fields. Raises GroupNotFound."""
        sql = """
            UPDATE groups
            SET name = %s, description = %s, avatar_url = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING updated_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (group.name, group.description, group.avatar_url, group.id))
                row = cur.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update group {group.id}: {e}")
            raise
        finally:
            release_connection(conn)
        if row is None:
            raise GroupNotFound()
        group.updated_at = row[0]
        logger.info(f"Updated group {group.id}")
        return group

    def delete(self, group_id: str) -> None:
        """Delete a group with its members, posts, events and chat. Raises GroupNotFound."""
        self._execute_expecting_row(
            "DELETE FROM groups WHERE id = %s;", (group_id,), GroupNotFound, f"delete group {group_id}"
        )
        logger.info(f"Deleted group {group_id}")

    # ── MEMBERS ───────────────────────────────────────────

    def add_member(self, group_id: str, user_id: str, role: str = ROLE_MEMBER) -> None:
        """
        Add a user to a group.

        Raises:
            AlreadyGroupMember: If the user is already a member.
            InvalidReference: If the group or user does not exist.
        """
        sql = "INSERT INTO group_members (group_id, user_id, role) VALUES (%s, %s, %s);"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (group_id, user_id, role))
            conn.commit()
            logger.info(f"User {user_id} joined group {group_id} as {role}")
        except errors.UniqueViolation as e:
            conn.rollback()
            raise AlreadyGroupMember() from e
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add user {user_id} to group {group_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def remove_member(self, group_id: str, user_id: str) -> None:
        """Remove a membership row. Raises NotGroupMember."""
        self._execute_expecting_row(
            "DELETE FROM group_members WHERE group_id = %s AND user_id = %s;",
            (group_id, user_id),
            NotGroupMember,
            f"remove user {user_id} from group {group_id}",
        )
        logger.info(f"User {user_id} left group {group_id}")

    def list_members(self, group_id: str) -> list[GroupMember]:
        """Members with their display fields, admins first then by join time."""
        sql = """
            SELECT gm.group_id, gm.user_id, gm.role, gm.joined_at,
                   u.username, u.first_name, u.last_name, u.avatar_url
            FROM group_members gm
            JOIN users u ON u.id = gm.user_id
            WHERE gm.group_id = %s
            ORDER BY (gm.role = 'admin') DESC, gm.joined_at ASC;
        """
        return [
            GroupMember(
                group_id=r[0], user_id=r[1], role=r[2], joined_at=r[3],
                username=r[4], first_name=r[5], last_name=r[6], avatar_url=r[7],
            )
            for r in self._fetch_all(sql, (group_id,))
        ]

    def list_member_ids(self, group_id: str) -> list[str]:
        return [r[0] for r in self._fetch_all(
            "SELECT user_id FROM group_members WHERE group_id = %s;", (group_id,)
        )]

    def get_member_role(self, group_id: str, user_id: str) -> Optional[str]:
        """Returns 'admin', 'member', or None for a non-member."""
        row = self._fetch_one(
            "SELECT role FROM group_members WHERE group_id = %s AND user_id = %s;",
            (group_id, user_id),
        )
        return row[0] if row else None

    def is_member(self, group_id: str, user_id: str) -> bool:
        return self.get_member_role(group_id, user_id) is not None

    def is_admin(self, group_id: str, user_id: str) -> bool:
        return self.get_member_role(group_id, user_id) == ROLE_ADMIN

    def count_members(self, group_id: str) -> int:
        row = self._fetch_one("SELECT COUNT(*) FROM group_members WHERE group_id = %s;", (group_id,))
        return row[0]

    # ── INVITATIONS ───────────────────────────────────────

    def create_invitation(self, invitation: GroupInvitation) -> GroupInvitation:
        """
        Store a pending invitation.

        An earlier accepted or rejected invitation for the same pair is
        reopened in place; a pending one is left untouched.

        Raises:
            AlreadyInvited: If a pending invitation already exists.
            InvalidReference: If the group or either user does not exist.
        """
        sql = f"""
            INSERT INTO group_invitations (id, group_id, inviter_id, invitee_id, status)
            VALUES (%s, %s, %s, %s, 'pending')
            ON CONFLICT (group_id, invitee_id) DO UPDATE
                SET inviter_id = EXCLUDED.inviter_id, status = 'pending', updated_at = NOW()
                WHERE group_invitations.status <> 'pending'
            RETURNING {_INVITATION_COLUMNS};
        """
        new_id = invitation.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (new_id, invitation.group_id, invitation.inviter_id, invitation.invitee_id))
                row = cur.fetchone()
            if row is None:
                conn.rollback()
                raise AlreadyInvited()
            conn.commit()
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except AlreadyInvited:
            raise
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to invite user {invitation.invitee_id} to group {invitation.group_id}: {e}")
            raise
        finally:
            release_connection(conn)
        logger.info(f"User {invitation.inviter_id} invited {invitation.invitee_id} to group {invitation.group_id}")
        return self._row_to_invitation(row)

    def get_invitation_by_id(self, invitation_id: str) -> GroupInvitation:
        """Fetch an invitation. Raises InvitationNotFound."""
        row = self._fetch_one(
            f"SELECT {_INVITATION_COLUMNS} FROM group_invitations WHERE id = %s;", (invitation_id,)
        )
        if row is None:
            raise InvitationNotFound()
        return self._row_to_invitation(row)

    def find_pending_invitation(self, group_id: str, invitee_id: str) -> Optional[GroupInvitation]:
        row = self._fetch_one(
            f"SELECT {_INVITATION_COLUMNS} FROM group_invitations "
            "WHERE group_id = %s AND invitee_id = %s AND status = 'pending';",
            (group_id, invitee_id),
        )
        return self._row_to_invitation(row) if row else None

    def update_invitation_status(self, invitation_id: str, status: str) -> None:
        """Set an invitation's status. Raises InvitationNotFound."""
        self._execute_expecting_row(
            "UPDATE group_invitations SET status = %s, updated_at = NOW() WHERE id = %s;",
            (status, invitation_id),
            InvitationNotFound,
            f"update invitation {invitation_id}",
        )

    def accept_invitation(self, invitation_id: str) -> None:
        """
        Mark a pending invitation accepted and add the invitee as a member,
        in one transaction.

        Raises:
            InvitationNotFound: If there is no pending invitation with that id.
        """
        self._accept_pending(
            "UPDATE group_invitations SET status = 'accepted', updated_at = NOW() "
            "WHERE id = %s AND status = 'pending' RETURNING group_id, invitee_id;",
            invitation_id,
            InvitationNotFound,
        )

    def list_pending_invitations_for_user(self, user_id: str) -> list[GroupInvitation]:
        sql = (
            f"SELECT {_INVITATION_COLUMNS} FROM group_invitations "
            "WHERE invitee_id = %s AND status = 'pending' ORDER BY created_at DESC;"
        )
        return [self._row_to_invitation(r) for r in self._fetch_all(sql, (user_id,))]

    def list_pending_invitations_for_group(self, group_id: str) -> list[GroupInvitation]:
        sql = (
            f"SELECT {_INVITATION_COLUMNS} FROM group_invitations "
            "WHERE group_id = %s AND status = 'pending' ORDER BY created_at DESC;"
        )
        return [self._row_to_invitation(r) for r in self._fetch_all(sql, (group_id,))]

    def delete_invitation(self, invitation_id: str) -> None:
        """Raises InvitationNotFound."""
        self._execute_expecting_row(
            "DELETE FROM group_invitations WHERE id = %s;",
            (invitation_id,),
            InvitationNotFound,
            f"delete invitation {invitation_id}",
        )

    # ── JOIN REQUESTS ─────────────────────────────────────

    def create_join_request(self, request: GroupJoinRequest) -> GroupJoinRequest:
        """
        Store a pending join request, reopening an earlier answered one.

        Raises:
            AlreadyRequested: If a pending request already exists.
            InvalidReference: If the group or user does not exist.
        """
        sql = f"""
            INSERT INTO group_join_requests (id, group_id, requester_id, status)
            VALUES (%s, %s, %s, 'pending')
            ON CONFLICT (group_id, requester_id) DO UPDATE
                SET status = 'pending', updated_at = NOW()
                WHERE group_join_requests.status <> 'pending'
            RETURNING {_JOIN_REQUEST_COLUMNS};
        """
        new_id = request.id or str(uuid.uuid4())
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (new_id, request.group_id, request.requester_id))
                row = cur.fetchone()
            if row is None:
                conn.rollback()
                raise AlreadyRequested()
            conn.commit()
        except errors.ForeignKeyViolation as e:
            conn.rollback()
            raise InvalidReference() from e
        except AlreadyRequested:
            raise
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to store join request of {request.requester_id} for group {request.group_id}: {e}")
            raise
        finally:
            release_connection(conn)
        logger.info(f"User {request.requester_id} asked to join group {request.group_id}")
        return self._row_to_join_request(row)

    def get_join_request_by_id(self, request_id: str) -> GroupJoinRequest:
        """Fetch a join request. Raises JoinRequestNotFound."""
        row = self._fetch_one(
            f"SELECT {_JOIN_REQUEST_COLUMNS} FROM group_join_requests WHERE id = %s;", (request_id,)
        )
        if row is None:
            raise JoinRequestNotFound()
        return self._row_to_join_request(row)

    def find_pending_join_request(self, group_id: str, requester_id: str) -> Optional[GroupJoinRequest]:
        row = self._fetch_one(
            f"SELECT {_JOIN_REQUEST_COLUMNS} FROM group_join_requests "
            "WHERE group_id = %s AND requester_id = %s AND status = 'pending';",
            (group_id, requester_id),
        )
        return self._row_to_join_request(row) if row else None

    def update_join_request_status(self, request_id: str, status: str) -> None:
        """Set a join request's status. Raises JoinRequestNotFound."""
        self._execute_expecting_row(
            "UPDATE group_join_requests SET status = %s, updated_at = NOW() WHERE id = %s;",
            (status, request_id),
            JoinRequestNotFound,
            f"update join request {request_id}",
        )

    def accept_join_request(self, request_id: str) -> None:
        """
        Mark a pending join request accepted and add the requester as a
        member, in one transaction.

        Raises:
            JoinRequestNotFound: If there is no pending request with that id.
        """
        self._accept_pending(
            "UPDATE group_join_requests SET status = 'accepted', updated_at = NOW() "
            "WHERE id = %s AND status = 'pending' RETURNING group_id, requester_id;",
            request_id,
            JoinRequestNotFound,
        )

    def list_pending_join_requests_for_group(self, group_id: str) -> list[GroupJoinRequest]:
        sql = (
            f"SELECT {_JOIN_REQUEST_COLUMNS} FROM group_join_requests "
            "WHERE group_id = %s AND status = 'pending' ORDER BY created_at ASC;"
        )
        return [self._row_to_join_request(r) for r in self._fetch_all(sql, (group_id,))]

    def delete_join_request(self, request_id: str) -> None:
        """Raises JoinRequestNotFound."""
        self._execute_expecting_row(
            "DELETE FROM group_join_requests WHERE id = %s;",
            (request_id,),
            JoinRequestNotFound,
            f"delete join request {request_id}",
        )

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _accept_pending(update_sql: str, row_id: str, not_found: type) -> None:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(update_sql, (row_id,))
                row = cur.fetchone()
                if row is None:
                    raise not_found()
                group_id, user_id = row
                cur.execute(
                    "INSERT INTO group_members (group_id, user_id, role) VALUES (%s, %s, %s) "
                    "ON CONFLICT (group_id, user_id) DO NOTHING;",
                    (group_id, user_id, ROLE_MEMBER),
                )
            conn.commit()
            logger.info(f"User {user_id} joined group {group_id}")
        except not_found:
            conn.rollback()
            raise
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to accept {row_id}: {e}")
            raise
        finally:
            release_connection(conn)

    @staticmethod
    def _execute_expecting_row(sql: str, params: tuple, not_found: type, action: str) -> None:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                changed = cur.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise
        finally:
            release_connection(conn)
        if not changed:
            raise not_found()

    @staticmethod
    def _fetch_one(sql: str, params: tuple) -> Optional[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()
        finally:
            release_connection(conn)

    @staticmethod
    def _fetch_all(sql: str, params: tuple) -> list[tuple]:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        finally:
            release_connection(conn)

    @staticmethod
    def _row_to_group(row: tuple) -> Group:
        return Group(
            id=row[0],
            creator_id=row[1],
            name=row[2],
            description=row[3],
            avatar_url=row[4],
            created_at=row[5],
            updated_at=row[6],
        )

    @staticmethod
    def _row_to_invitation(row: tuple) -> GroupInvitation:
        return GroupInvitation(
            id=row[0],
            group_id=row[1],
            inviter_id=row[2],
            invitee_id=row[3],
            status=row[4],
            created_at=row[5],
            updated_at=row[6],
        )

    @staticmethod
    def _row_to_join_request(row: tuple) -> GroupJoinRequest:
        return GroupJoinRequest(
            id=row[0],
            group_id=row[1],
            requester_id=row[2],
            status=row[3],
            created_at=row[4],
            updated_at=row[5],
        )
