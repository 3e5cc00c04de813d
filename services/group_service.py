"""
services/group_service.py
--------------------------
Business logic for groups: membership roles, invitations and join requests.

Roles:
    - creator: the user who created the group; always an admin, cannot be
      removed, and the only one who may delete the group.
    - admin: may edit the group, add or remove members and answer join requests.
    - member: may read members, invite others and use the group's content.
"""

from __future__ import annotations

from typing import Optional

from models.group import (
    Group,
    GroupInvitation,
    GroupJoinRequest,
    GroupMember,
    GroupProfile,
    ROLE_ADMIN,
    STATUS_PENDING,
    STATUS_REJECTED,
)
from models.notification import ENTITY_GROUP, TYPE_GROUP_INVITE, TYPE_GROUP_JOIN_REQUEST
from repositories.errors import AlreadyGroupMember
from repositories.group_repo import GroupRepository
from repositories.user_repo import UserRepository
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
from services.notification_service import NotificationService
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class GroupService:
    """Handles all business logic for groups."""

    def __init__(
        self,
        group_repo: Optional[GroupRepository] = None,
        user_repo: Optional[UserRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.group_repo = group_repo or GroupRepository()
        self.user_repo = user_repo or UserRepository()
        self.notification_service = notification_service or NotificationService()

    # ── GROUPS ────────────────────────────────────────────

    def create(
        self,
        creator_id: str,
        name: str,
        description: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Group:
        """Create a group; the creator becomes its first admin."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("group name is required")
        return self.group_repo.create(Group(
            creator_id=creator_id, name=name, description=description, avatar_url=avatar_url,
        ))

    def get_by_id(self, group_id: str, viewer_id: str) -> GroupProfile:
        """
        The group as `viewer_id` sees it. Members also get the member list.

        Raises:
            GroupNotFound: The group does not exist.
        """
        group = self.group_repo.get_by_id(group_id)
        role = self.group_repo.get_member_role(group_id, viewer_id)
        profile = GroupProfile(
            group=group,
            member_count=self.group_repo.count_members(group_id),
            is_member=role is not None,
            is_admin=role == ROLE_ADMIN,
            is_creator=group.creator_id == viewer_id,
        )
        if profile.is_member:
            profile.members = self.group_repo.list_members(group_id)
        return profile

    def list(self, limit: int = 0, offset: int = 0, search: Optional[str] = None) -> list[Group]:
        limit, offset = clamp_page(limit, offset)
        search = (search or "").strip() or None
        return self.group_repo.list(limit, offset, search)

    def list_groups_by_user(self, user_id: str, limit: int = 0, offset: int = 0) -> list[Group]:
        limit, offset = clamp_page(limit, offset)
        return self.group_repo.list_groups_by_user(user_id, limit, offset)

    def update(self, group_id: str, user_id: str, **changes) -> Group:
        """
        Edit name, description or avatar_url. Admins only.

        Raises:
            GroupNotFound, GroupAdminRequired, ValidationError
        """
        group = self.group_repo.get_by_id(group_id)
        self._require_admin(group_id, user_id)
        for key, value in changes.items():
            if key not in ("name", "description", "avatar_url"):
                raise ValidationError(f"field '{key}' cannot be updated")
            if key == "name":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("group name is required")
            setattr(group, key, value)
        return self.group_repo.update(group)

    def delete(self, group_id: str, user_id: str) -> None:
        """Delete a group. Only its creator may do this."""
        group = self.group_repo.get_by_id(group_id)
        if group.creator_id != user_id:
            logger.warning(f"User {user_id} tried to delete group {group_id}")
            raise NotGroupCreator()
        self.group_repo.delete(group_id)

    # ── MEMBERS ───────────────────────────────────────────

    def add_member(self, group_id: str, admin_id: str, user_id: str) -> None:
        """An admin adds a user directly."""
        self.group_repo.get_by_id(group_id)
        self._require_admin(group_id, admin_id)
        self.user_repo.get_by_id(user_id)
        self.group_repo.add_member(group_id, user_id)

    def remove_member(self, group_id: str, actor_id: str, user_id: str) -> None:
        """
        Remove `user_id` from the group. Admins may remove anyone; members
        may remove themselves. The creator is never removable.

        Raises:
            GroupNotFound, GroupCreatorCannotBeRemoved, GroupAdminRequired,
            NotGroupMember
        """
        group = self.group_repo.get_by_id(group_id)
        if user_id == group.creator_id:
            raise GroupCreatorCannotBeRemoved()
        if actor_id != user_id:
            self._require_admin(group_id, actor_id)
        self.group_repo.remove_member(group_id, user_id)

    def list_members(self, group_id: str, viewer_id: str) -> list[GroupMember]:
        self.group_repo.get_by_id(group_id)
        self._require_member(group_id, viewer_id)
        return self.group_repo.list_members(group_id)

    # ── INVITATIONS ───────────────────────────────────────

    def invite_user(self, group_id: str, inviter_id: str, invitee_id: str) -> GroupInvitation:
        """
        A member invites another user and the invitee is notified.

        Raises:
            CannotInviteSelf, GroupNotFound, GroupMemberRequired, UserNotFound,
            AlreadyGroupMember, AlreadyInvited
        """
        if inviter_id == invitee_id:
            raise CannotInviteSelf()
        group = self.group_repo.get_by_id(group_id)
        self._require_member(group_id, inviter_id)
        self.user_repo.get_by_id(invitee_id)
        if self.group_repo.is_member(group_id, invitee_id):
            raise AlreadyGroupMember()

        invitation = self.group_repo.create_invitation(GroupInvitation(
            group_id=group_id, inviter_id=inviter_id, invitee_id=invitee_id,
        ))
        inviter = self.user_repo.get_by_id(inviter_id)
        self.notification_service.create(
            user_id=invitee_id,
            type=TYPE_GROUP_INVITE,
            entity_type=ENTITY_GROUP,
            entity_id=group_id,
            message=f"{inviter.full_name} invited you to join {group.name}",
        )
        return invitation

    def accept_invitation(self, invitation_id: str, user_id: str) -> None:
        """The invitee accepts; they become a member in the same transaction."""
        self._pending_invitation_for(invitation_id, user_id)
        self.group_repo.accept_invitation(invitation_id)

    def reject_invitation(self, invitation_id: str, user_id: str) -> None:
        self._pending_invitation_for(invitation_id, user_id)
        self.group_repo.update_invitation_status(invitation_id, STATUS_REJECTED)

    def list_pending_invitations(self, user_id: str) -> list[GroupInvitation]:
        """Invitations waiting for `user_id` to answer."""
        return self.group_repo.list_pending_invitations_for_user(user_id)

    def list_group_pending_invitations(self, group_id: str, viewer_id: str) -> list[GroupInvitation]:
        """Outstanding invitations of a group, visible to its members."""
        self._require_member(group_id, viewer_id)
        return self.group_repo.list_pending_invitations_for_group(group_id)

    # ── JOIN REQUESTS ─────────────────────────────────────

    def request_to_join(self, group_id: str, user_id: str) -> GroupJoinRequest:
        """
        Ask to join a group; the group creator is notified.

        Raises:
            GroupNotFound, CannotRequestToJoinOwnGroup, AlreadyGroupMember,
            AlreadyRequested
        """
        group = self.group_repo.get_by_id(group_id)
        if group.creator_id == user_id:
            raise CannotRequestToJoinOwnGroup()
        if self.group_repo.is_member(group_id, user_id):
            raise AlreadyGroupMember()

        request = self.group_repo.create_join_request(GroupJoinRequest(
            group_id=group_id, requester_id=user_id,
        ))
        requester = self.user_repo.get_by_id(user_id)
        self.notification_service.create(
            user_id=group.creator_id,
            type=TYPE_GROUP_JOIN_REQUEST,
            entity_type=ENTITY_GROUP,
            entity_id=group_id,
            message=f"{requester.full_name} wants to join {group.name}",
        )
        return request

    def accept_join_request(self, request_id: str, admin_id: str) -> None:
        """An admin lets the requester in."""
        self._pending_join_request_for_admin(request_id, admin_id)
        self.group_repo.accept_join_request(request_id)

    def reject_join_request(self, request_id: str, admin_id: str) -> None:
        self._pending_join_request_for_admin(request_id, admin_id)
        self.group_repo.update_join_request_status(request_id, STATUS_REJECTED)

    def list_pending_join_requests(self, group_id: str, admin_id: str) -> list[GroupJoinRequest]:
        self.group_repo.get_by_id(group_id)
        self._require_admin(group_id, admin_id)
        return self.group_repo.list_pending_join_requests_for_group(group_id)

    # ── HELPERS ───────────────────────────────────────────

    def _require_member(self, group_id: str, user_id: str) -> None:
        if not self.group_repo.is_member(group_id, user_id):
            raise GroupMemberRequired()

    def _require_admin(self, group_id: str, user_id: str) -> None:
        if not self.group_repo.is_admin(group_id, user_id):
            logger.warning(f"User {user_id} needs admin rights in group {group_id}")
            raise GroupAdminRequired()

    def _pending_invitation_for(self, invitation_id: str, user_id: str) -> GroupInvitation:
        invitation = self.group_repo.get_invitation_by_id(invitation_id)
        if invitation.invitee_id != user_id:
            raise PermissionDenied("not_invitee")
        if invitation.status != STATUS_PENDING:
            raise InvalidInvitationStatus()
        return invitation

    def _pending_join_request_for_admin(self, request_id: str, admin_id: str) -> GroupJoinRequest:
        request = self.group_repo.get_join_request_by_id(request_id)
        self._require_admin(request.group_id, admin_id)
        if request.status != STATUS_PENDING:
            raise InvalidJoinRequestStatus()
        return request
