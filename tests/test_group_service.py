"""GroupService: roles, invitations and join requests."""

from unittest.mock import MagicMock

import pytest

from models.group import Group, GroupInvitation, GroupJoinRequest
from models.user import User
from repositories.errors import AlreadyGroupMember
from services.errors import (
    CannotInviteSelf,
    CannotRequestToJoinOwnGroup,
    GroupAdminRequired,
    GroupCreatorCannotBeRemoved,
    GroupMemberRequired,
    InvalidInvitationStatus,
    InvalidJoinRequestStatus,
    NotGroupCreator,
    PermissionDenied,
    ValidationError,
)
from services.group_service import GroupService


@pytest.fixture()
def service():
    svc = GroupService(group_repo=MagicMock(), user_repo=MagicMock(), notification_service=MagicMock())
    svc.group_repo.get_by_id.return_value = Group(id="g1", creator_id="owner", name="Hikers")
    svc.user_repo.get_by_id.side_effect = lambda uid: User(id=uid, username=uid, email="")
    return svc


def test_create_requires_name(service):
    with pytest.raises(ValidationError):
        service.create("owner", "  ")
    service.group_repo.create.assert_not_called()


def test_profile_for_member_includes_members(service):
    service.group_repo.get_member_role.return_value = "admin"
    service.group_repo.count_members.return_value = 4
    service.group_repo.list_members.return_value = ["m"]

    profile = service.get_by_id("g1", "owner")

    assert profile.is_member and profile.is_admin and profile.is_creator
    assert profile.member_count == 4
    assert profile.members == ["m"]


def test_profile_for_outsider_hides_members(service):
    service.group_repo.get_member_role.return_value = None
    profile = service.get_by_id("g1", "outsider")
    assert not profile.is_member
    assert profile.members == []
    service.group_repo.list_members.assert_not_called()


def test_update_requires_admin(service):
    service.group_repo.is_admin.return_value = False
    with pytest.raises(GroupAdminRequired):
        service.update("g1", "member", name="New")


def test_only_creator_deletes(service):
    with pytest.raises(NotGroupCreator):
        service.delete("g1", "admin-but-not-creator")
    service.delete("g1", "owner")
    service.group_repo.delete.assert_called_once_with("g1")


def test_creator_cannot_be_removed(service):
    with pytest.raises(GroupCreatorCannotBeRemoved):
        service.remove_member("g1", "owner", "owner")


def test_member_may_leave_but_not_remove_others(service):
    service.group_repo.is_admin.return_value = False
    service.remove_member("g1", "u2", "u2")
    service.group_repo.remove_member.assert_called_once_with("g1", "u2")

    with pytest.raises(GroupAdminRequired):
        service.remove_member("g1", "u2", "u3")


def test_list_members_requires_membership(service):
    service.group_repo.is_member.return_value = False
    with pytest.raises(GroupMemberRequired):
        service.list_members("g1", "outsider")


# ── invitations ───────────────────────────────────────────

def test_invite_notifies_invitee(service):
    service.group_repo.is_member.side_effect = lambda gid, uid: uid == "u1"
    service.group_repo.create_invitation.side_effect = lambda inv: inv

    invitation = service.invite_user("g1", "u1", "u2")

    assert invitation.invitee_id == "u2"
    kwargs = service.notification_service.create.call_args.kwargs
    assert kwargs["user_id"] == "u2"
    assert kwargs["type"] == "group_invite"
    assert kwargs["entity_type"] == "group"
    assert kwargs["entity_id"] == "g1"


def test_invite_rules(service):
    with pytest.raises(CannotInviteSelf):
        service.invite_user("g1", "u1", "u1")

    service.group_repo.is_member.return_value = False
    with pytest.raises(GroupMemberRequired):
        service.invite_user("g1", "u1", "u2")

    service.group_repo.is_member.return_value = True
    with pytest.raises(AlreadyGroupMember):
        service.invite_user("g1", "u1", "u2")
    service.group_repo.create_invitation.assert_not_called()


def test_only_invitee_answers_pending_invitation(service):
    service.group_repo.get_invitation_by_id.return_value = GroupInvitation(
        id="i1", group_id="g1", inviter_id="u1", invitee_id="u2", status="pending"
    )
    with pytest.raises(PermissionDenied):
        service.accept_invitation("i1", "u3")

    service.accept_invitation("i1", "u2")
    service.group_repo.accept_invitation.assert_called_once_with("i1")


def test_answered_invitation_cannot_be_answered_again(service):
    service.group_repo.get_invitation_by_id.return_value = GroupInvitation(
        id="i1", group_id="g1", inviter_id="u1", invitee_id="u2", status="rejected"
    )
    with pytest.raises(InvalidInvitationStatus):
        service.accept_invitation("i1", "u2")
    with pytest.raises(InvalidInvitationStatus):
        service.reject_invitation("i1", "u2")


def test_reject_invitation(service):
    service.group_repo.get_invitation_by_id.return_value = GroupInvitation(
        id="i1", group_id="g1", inviter_id="u1", invitee_id="u2", status="pending"
    )
    service.reject_invitation("i1", "u2")
    service.group_repo.update_invitation_status.assert_called_once_with("i1", "rejected")


# ── join requests ─────────────────────────────────────────

def test_request_to_join_notifies_creator(service):
    service.group_repo.is_member.return_value = False
    service.group_repo.create_join_request.side_effect = lambda req: req

    request = service.request_to_join("g1", "u5")

    assert request.requester_id == "u5"
    kwargs = service.notification_service.create.call_args.kwargs
    assert kwargs["user_id"] == "owner"
    assert kwargs["type"] == "group_join_request"


def test_join_request_rules(service):
    with pytest.raises(CannotRequestToJoinOwnGroup):
        service.request_to_join("g1", "owner")
    service.group_repo.is_member.return_value = True
    with pytest.raises(AlreadyGroupMember):
        service.request_to_join("g1", "u2")


def test_join_request_answered_by_admin_only(service):
    service.group_repo.get_join_request_by_id.return_value = GroupJoinRequest(
        id="r1", group_id="g1", requester_id="u5", status="pending"
    )
    service.group_repo.is_admin.return_value = False
    with pytest.raises(GroupAdminRequired):
        service.accept_join_request("r1", "u2")

    service.group_repo.is_admin.return_value = True
    service.accept_join_request("r1", "owner")
    service.group_repo.accept_join_request.assert_called_once_with("r1")


def test_answered_join_request(service):
    service.group_repo.get_join_request_by_id.return_value = GroupJoinRequest(
        id="r1", group_id="g1", requester_id="u5", status="accepted"
    )
    service.group_repo.is_admin.return_value = True
    with pytest.raises(InvalidJoinRequestStatus):
        service.reject_join_request("r1", "owner")


def test_pending_join_requests_admin_only(service):
    service.group_repo.is_admin.return_value = False
    with pytest.raises(GroupAdminRequired):
        service.list_pending_join_requests("g1", "u2")
