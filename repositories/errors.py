"""
repositories/errors.py
-----------------------
Sentinel exceptions raised by the data access layer.
Callers match on the class; `reason` is a stable machine-readable code.
"""


class RepositoryError(Exception):
    """Base class for data access errors."""

    reason: str = "repository_error"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class NotFoundError(RepositoryError):
    reason = "not_found"


class AlreadyExistsError(RepositoryError):
    reason = "already_exists"


class InvalidReference(RepositoryError):
    """A foreign key pointed at a row that does not exist."""
    reason = "invalid_reference"


class InvalidValue(RepositoryError):
    """A CHECK constraint rejected a column value."""
    reason = "invalid_value"


# ── Users & sessions ──────────────────────────────────────

class UserNotFound(NotFoundError):
    reason = "user_not_found"


class UserAlreadyExists(AlreadyExistsError):
    reason = "user_already_exists"


class SessionNotFound(NotFoundError):
    reason = "session_not_found"


# ── Posts & comments ──────────────────────────────────────

class PostNotFound(NotFoundError):
    reason = "post_not_found"


class CommentNotFound(NotFoundError):
    reason = "comment_not_found"


# ── Followers ─────────────────────────────────────────────

class FollowNotFound(NotFoundError):
    reason = "follow_not_found"


class FollowAlreadyExists(AlreadyExistsError):
    reason = "follow_already_exists"


# ── Groups ────────────────────────────────────────────────

class GroupNotFound(NotFoundError):
    reason = "group_not_found"


class AlreadyGroupMember(AlreadyExistsError):
    reason = "already_group_member"


class NotGroupMember(NotFoundError):
    reason = "not_group_member"


class InvitationNotFound(NotFoundError):
    reason = "invitation_not_found"


class AlreadyInvited(AlreadyExistsError):
    reason = "already_invited"


class JoinRequestNotFound(NotFoundError):
    reason = "join_request_not_found"


class AlreadyRequested(AlreadyExistsError):
    reason = "already_requested"


class EventNotFound(NotFoundError):
    reason = "event_not_found"


# ── Notifications ─────────────────────────────────────────

class NotificationNotFound(NotFoundError):
    reason = "notification_not_found"
