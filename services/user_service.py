"""
services/user_service.py
-------------------------
Business logic for accounts: registration, profile edits and the
viewer-dependent profile page.
"""

from __future__ import annotations

from typing import Optional

from config import MIN_PASSWORD_LENGTH, PROFILE_PREVIEW_LIMIT, USER_SEARCH_LIMIT
from models.follower import Follower
from models.user import FOLLOW_REQUEST_RECEIVED, FOLLOW_REQUEST_SENT, User, UserProfile
from repositories.follower_repo import FollowerRepository
from repositories.post_repo import PostRepository
from repositories.user_repo import UserRepository
from security.auth import hash_password
from services.errors import ValidationError
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)

# Fields a user may change through `update`; password is handled separately.
_EDITABLE_FIELDS = (
    "username", "email", "first_name", "last_name",
    "avatar_url", "about_me", "birth_date", "is_private",
)


class UserService:
    """
    Handles all business logic for user accounts.

    Responsibilities:
        - Validate and register new users with hashed passwords.
        - Apply partial profile updates.
        - Build profile views that respect account privacy.
    """

    def __init__(
        self,
        user_repo: Optional[UserRepository] = None,
        follower_repo: Optional[FollowerRepository] = None,
        post_repo: Optional[PostRepository] = None,
    ):
        self.user_repo = user_repo or UserRepository()
        self.follower_repo = follower_repo or FollowerRepository()
        self.post_repo = post_repo or PostRepository()

    # ── ACCOUNT ───────────────────────────────────────────

    def register(self, username: str, email: str, password: str, **profile) -> User:
        """
        Create a new account.

        Args:
            username: Required, unique.
            email: Required, unique.
            password: Plaintext, at least MIN_PASSWORD_LENGTH characters.
            **profile: Optional first_name, last_name, avatar_url, about_me,
                birth_date, is_private.

        Returns:
            The stored User.

        Raises:
            ValidationError: On a missing field or short password.
            UserAlreadyExists: If the username or e-mail is taken.
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        if not username or not email or not password:
            raise ValidationError("username, email and password are required")
        self._check_password(password)

        unknown = set(profile) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"unknown profile fields: {', '.join(sorted(unknown))}")

        user = User(username=username, email=email, password_hash=hash_password(password), **profile)
        return self.user_repo.create(user)

    def get_by_id(self, user_id: str) -> User:
        return self.user_repo.get_by_id(user_id)

    def get_by_username(self, username: str) -> User:
        return self.user_repo.get_by_username(username)

    def get_by_email(self, email: str) -> User:
        return self.user_repo.get_by_email(email.strip().lower())

    def update(self, user_id: str, changes: dict) -> User:
        """
        Apply a partial update. Only keys present in `changes` are touched;
        a `password` key is validated and re-hashed.

        Raises:
            ValidationError: On an unknown field, empty username/e-mail or short password.
            UserNotFound: If the user does not exist.
            UserAlreadyExists: If the new username or e-mail is taken.
        """
        user = self.user_repo.get_by_id(user_id)
        for key, value in changes.items():
            if key == "password":
                self._check_password(value)
                user.password_hash = hash_password(value)
            elif key in _EDITABLE_FIELDS:
                if key in ("username", "email"):
                    value = (value or "").strip()
                    if not value:
                        raise ValidationError(f"{key} cannot be empty")
                    if key == "email":
                        value = value.lower()
                setattr(user, key, value)
            else:
                raise ValidationError(f"field '{key}' cannot be updated")
        return self.user_repo.update(user)

    def delete(self, user_id: str) -> None:
        self.user_repo.delete(user_id)

    def list(self, limit: int = 0, offset: int = 0) -> list[User]:
        limit, offset = clamp_page(limit, offset)
        return self.user_repo.list(limit, offset)

    def update_privacy(self, user_id: str, is_private: bool) -> None:
        self.user_repo.update_privacy(user_id, is_private)

    def search(self, query: str) -> list[User]:
        """Search users by username or name; a blank query returns nothing."""
        query = (query or "").strip()
        if not query:
            return []
        return self.user_repo.search(query, USER_SEARCH_LIMIT)

    # ── PROFILE ───────────────────────────────────────────

    def get_profile(self, viewer_id: str, profile_user_id: str) -> UserProfile:
        """
        Build the profile of `profile_user_id` as `viewer_id` sees it.

        A private profile is restricted to identity fields unless the viewer
        is the owner or an accepted follower.

        Raises:
            UserNotFound: If the profile user does not exist.
        """
        user = self.user_repo.get_by_id(profile_user_id)
        is_own = viewer_id == profile_user_id

        outgoing: Optional[Follower] = None
        if not is_own:
            outgoing = self.follower_repo.find_follow(viewer_id, profile_user_id)
        is_followed = outgoing is not None and outgoing.is_accepted()

        if user.is_private and not is_own and not is_followed:
            return UserProfile(
                user=User(
                    id=user.id,
                    username=user.username,
                    email="",
                    first_name=user.first_name,
                    last_name=user.last_name,
                    avatar_url=user.avatar_url,
                    is_private=True,
                ),
                is_restricted=True,
                follow_request_state=FOLLOW_REQUEST_SENT if outgoing and outgoing.is_pending() else None,
            )

        state = None
        if outgoing is not None and outgoing.is_pending():
            state = FOLLOW_REQUEST_SENT
        elif not is_own:
            incoming = self.follower_repo.find_follow(profile_user_id, viewer_id)
            if incoming is not None and incoming.is_pending():
                state = FOLLOW_REQUEST_RECEIVED

        user.password_hash = ""
        return UserProfile(
            user=user,
            followers_count=self.follower_repo.count_followers(profile_user_id),
            following_count=self.follower_repo.count_following(profile_user_id),
            is_followed=is_followed,
            follow_request_state=state,
            latest_posts=self.post_repo.list_by_user(profile_user_id, viewer_id, PROFILE_PREVIEW_LIMIT, 0),
            latest_followers=self.follower_repo.get_followers(profile_user_id, PROFILE_PREVIEW_LIMIT, 0),
            latest_following=self.follower_repo.get_following(profile_user_id, PROFILE_PREVIEW_LIMIT, 0),
        )

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _check_password(password: str) -> None:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
