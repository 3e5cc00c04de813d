"""
services/auth_service.py
-------------------------
Sign-in, sign-out and session-token resolution.
"""

from datetime import datetime, timedelta, timezone
from email.utils import parseaddr
from typing import Optional

from config import SESSION_TTL_HOURS
from models.session import Session
from models.user import User
from repositories.errors import SessionNotFound, UserNotFound
from repositories.session_repo import SessionRepository
from repositories.user_repo import UserRepository
from security.auth import check_password, new_session_token
from services.errors import InvalidCredentials
from utils.logger import get_logger

logger = get_logger(__name__)


def _looks_like_email(identifier: str) -> bool:
    _, address = parseaddr(identifier)
    return address == identifier and "@" in address and "." in address.rsplit("@", 1)[-1]


class AuthService:
    """Session-based authentication."""

    def __init__(
        self,
        user_repo: Optional[UserRepository] = None,
        session_repo: Optional[SessionRepository] = None,
    ):
        self.user_repo = user_repo or UserRepository()
        self.session_repo = session_repo or SessionRepository()

    def sign_in(self, identifier: str, password: str) -> tuple[User, Session]:
        """
        Verify credentials and open a session.

        Args:
            identifier: E-mail address or username.
            password: Plaintext password.

        Returns:
            (user, session)

        Raises:
            InvalidCredentials: Unknown user or wrong password. The two cases
                are indistinguishable to the caller.
        """
        identifier = (identifier or "").strip()
        try:
            if _looks_like_email(identifier):
                user = self.user_repo.get_by_email(identifier.lower())
            else:
                user = self.user_repo.get_by_username(identifier)
        except UserNotFound:
            logger.warning(f"Sign-in failed: unknown identifier '{identifier}'")
            raise InvalidCredentials()

        if not check_password(password or "", user.password_hash):
            logger.warning(f"Sign-in failed: wrong password for user {user.id}")
            raise InvalidCredentials()

        session = Session(
            token=new_session_token(),
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=SESSION_TTL_HOURS),
        )
        self.session_repo.create(session)
        logger.info(f"User {user.id} signed in")
        return user, session

    def sign_out(self, token: str) -> None:
        """Invalidate a session. Unknown tokens are ignored."""
        self.session_repo.delete_by_token(token)

    def get_user_by_session_token(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            SessionNotFound: If the token is unknown or expired, or its user
                has been deleted (the orphaned session is removed).
        """
        session = self.session_repo.get_by_token(token)
        try:
            return self.user_repo.get_by_id(session.user_id)
        except UserNotFound:
            self.session_repo.delete_by_token(token)
            raise SessionNotFound()

    def clean_expired_sessions(self) -> int:
        """Delete expired sessions. Returns how many were removed."""
        return self.session_repo.clean_expired()
