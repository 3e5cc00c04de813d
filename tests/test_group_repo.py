"""GroupRepository against the fake connection pool."""

import pytest
from psycopg2 import errors

from models.group import Group, GroupInvitation, GroupJoinRequest
from repositories.errors import (
    AlreadyGroupMember,
    AlreadyInvited,
    AlreadyRequested,
    GroupNotFound,
    InvitationNotFound,
    JoinRequestNotFound,
    NotGroupMember,
)
from repositories.group_repo import GroupRepository


def test_create_adds_creator_as_admin_in_one_commit(conn, now):
    conn.script([(now, now)], 1)
    group = GroupRepository().create(Group(creator_id="u1", name="Hikers"))

    assert group.id and group.created_at == now
    member_sql, member_params = conn.executed[1]
    assert "INSERT INTO group_members" in member_sql
    assert member_params == (group.id, "u1", "admin")
    assert conn.commits == 1


def test_create_rolls_back_when_membership_insert_fails(conn, now):
    conn.script([(now, now)], RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        GroupRepository().create(Group(creator_id="u1", name="Hikers"))
    assert conn.commits == 0
    assert conn.rollbacks == 1


def test_get_by_id_not_found(conn):
    conn.script([])
    with pytest.raises(GroupNotFound):
        GroupRepository().get_by_id("missing")


def test_list_with_search_is_case_insensitive(conn, now):
    conn.script([("g1", "u1", "Hikers", "Trail lovers", None, now, now)])
    groups = GroupRepository().list(10, 0, "HIKE")

    assert groups[0].name == "Hikers"
    assert "LOWER(g.name) LIKE %s" in conn.last_sql
    assert conn.last_params == ("%hike%", "%hike%", 10, 0)


def test_list_search_escapes_wildcards(conn):
    conn.script([])
    GroupRepository().list(10, 0, "Top_10")

    assert conn.last_params == ("%top\\_10%", "%top\\_10%", 10, 0)
    assert "ESCAPE" in conn.last_sql


def test_update_missing_group(conn):
    conn.script([])
    with pytest.raises(GroupNotFound):
        GroupRepository().update(Group(id="nope", creator_id="u1", name="x"))


def test_add_member_twice(conn):
    conn.script(errors.UniqueViolation("dup"))
    with pytest.raises(AlreadyGroupMember):
        GroupRepository().add_member("g1", "u2")


def test_remove_non_member(conn):
    conn.script(0)
    with pytest.raises(NotGroupMember):
        GroupRepository().remove_member("g1", "u2")


def test_role_checks(conn):
    conn.script([("admin",)], [("member",)], [])
    repo = GroupRepository()
    assert repo.is_admin("g1", "u1") is True
    assert repo.is_admin("g1", "u2") is False
    assert repo.is_member("g1", "u3") is False


def test_create_invitation_returns_stored_row(conn, now):
    conn.script([("i1", "g1", "u1", "u2", "pending", now, now)])
    invitation = GroupRepository().create_invitation(
        GroupInvitation(group_id="g1", inviter_id="u1", invitee_id="u2")
    )
    assert invitation.id == "i1"
    assert invitation.status == "pending"
    assert "ON CONFLICT (group_id, invitee_id)" in conn.last_sql
    assert conn.commits == 1


def test_create_invitation_when_one_is_pending(conn):
    conn.script([])
    with pytest.raises(AlreadyInvited):
        GroupRepository().create_invitation(
            GroupInvitation(group_id="g1", inviter_id="u1", invitee_id="u2")
        )
    assert conn.commits == 0
    assert conn.rollbacks == 1


def test_create_join_request_when_one_is_pending(conn):
    conn.script([])
    with pytest.raises(AlreadyRequested):
        GroupRepository().create_join_request(GroupJoinRequest(group_id="g1", requester_id="u2"))


def test_accept_invitation_adds_member_atomically(conn):
    conn.script([("g1", "u2")], 1)
    GroupRepository().accept_invitation("i1")

    update_sql, _ = conn.executed[0]
    insert_sql, insert_params = conn.executed[1]
    assert "status = 'pending'" in update_sql
    assert "INSERT INTO group_members" in insert_sql
    assert insert_params == ("g1", "u2", "member")
    assert conn.commits == 1


def test_accept_invitation_that_is_not_pending(conn):
    conn.script([])
    with pytest.raises(InvitationNotFound):
        GroupRepository().accept_invitation("i1")
    assert len(conn.executed) == 1
    assert conn.rollbacks == 1


def test_accept_join_request_not_pending(conn):
    conn.script([])
    with pytest.raises(JoinRequestNotFound):
        GroupRepository().accept_join_request("r1")


def test_lookups_of_missing_invitation_and_request(conn):
    conn.script([], [])
    repo = GroupRepository()
    with pytest.raises(InvitationNotFound):
        repo.get_invitation_by_id("i1")
    with pytest.raises(JoinRequestNotFound):
        repo.get_join_request_by_id("r1")


def test_list_members_maps_user_fields(conn, now):
    conn.script([("g1", "u1", "admin", now, "alice", "Alice", None, None)])
    members = GroupRepository().list_members("g1")
    assert members[0].is_admin()
    assert members[0].username == "alice"
