"""
services/errors.py
------------------
Business-rule exceptions raised by the service layer.
Not-found and already-exists conditions come from `repositories.errors`
and are passed through unchanged.
"""


class ServiceError(Exception):
    """Base class for service-layer errors."""

    reason: str = "service_error"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class ValidationError(ServiceError):
    """Input failed a business rule (missing field, bad enum value, too long)."""
    reason = "invalid_input"


class InvalidCredentials(ServiceError):
    reason = "invalid_credentials"


# ── Authorization ─────────────────────────────────────────

class PermissionDenied(ServiceError):
    reason = "forbidden"


class PostForbidden(PermissionDenied):
    reason = "post_forbidden"


class CommentForbidden(PermissionDenied):
    reason = "comment_forbidden"


class MessageForbidden(PermissionDenied):
    reason = "message_forbidden"


class GroupMemberRequired(PermissionDenied):
    reason = "group_member_required"


class GroupAdminRequired(PermissionDenied):
    reason = "group_admin_required"


class NotGroupCreator(PermissionDenied):
    reason = "group_creator_required"


class EventCreatorRequired(PermissionDenied):
    reason = "event_creator_required"


# ── Follow graph ──────────────────────────────────────────

class FollowConflict(ServiceError):
    reason = "follow_conflict"


class CannotFollowSelf(FollowConflict):
    reason = "cannot_follow_self"


class AlreadyFollowing(FollowConflict):
    reason = "already_following"


class FollowRequestPending(FollowConflict):
    reason = "follow_request_pending"


class NoPendingFollowRequest(FollowConflict):
    reason = "no_pending_follow_request"


class NotFollowing(FollowConflict):
    reason = "not_following"


# ── Groups ────────────────────────────────────────────────

class InvalidStatusTransition(ServiceError):
    reason = "invalid_status"


class InvalidInvitationStatus(InvalidStatusTransition):
    reason = "invalid_invitation_status"


class InvalidJoinRequestStatus(InvalidStatusTransition):
    reason = "invalid_join_request_status"


class CannotInviteSelf(ServiceError):
    reason = "cannot_invite_self"


class CannotRequestToJoinOwnGroup(ServiceError):
    reason = "cannot_request_own_group"


class GroupCreatorCannotBeRemoved(ServiceError):
    reason = "group_creator_cannot_be_removed"
