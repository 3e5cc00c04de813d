"""
services/message_service.py
----------------------------
Business logic for direct and group chat.
"""

from typing import Optional

from models.message import ChatPartner, DirectMessage, GroupMessage
from repositories.group_repo import GroupRepository
from repositories.message_repo import MessageRepository
from repositories.user_repo import UserRepository
from services.errors import GroupMemberRequired, MessageForbidden, ValidationError
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class MessageService:
    """Sends and reads chat messages."""

    def __init__(
        self,
        message_repo: Optional[MessageRepository] = None,
        user_repo: Optional[UserRepository] = None,
        group_repo: Optional[GroupRepository] = None,
    ):
        self.message_repo = message_repo or MessageRepository()
        self.user_repo = user_repo or UserRepository()
        self.group_repo = group_repo or GroupRepository()

    # ── DIRECT ────────────────────────────────────────────

    def send_direct_message(self, sender_id: str, receiver_id: str, content: str) -> DirectMessage:
        """
        Raises:
            ValidationError: Empty content.
            MessageForbidden: Sending to oneself.
            UserNotFound: The receiver does not exist.
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("message cannot be empty")
        if sender_id == receiver_id:
            raise MessageForbidden("cannot_message_self")
        self.user_repo.get_by_id(receiver_id)
        return self.message_repo.save_direct_message(DirectMessage(
            sender_id=sender_id, receiver_id=receiver_id, content=content,
        ))

    def get_conversation(
        self, user_id: str, other_user_id: str, limit: int = 0, offset: int = 0
    ) -> dict:
        """
        A page of the conversation between two users, newest first.

        Returns:
            {'messages': [DirectMessage, ...], 'total': int}
        """
        limit, offset = clamp_page(limit, offset)
        messages, total = self.message_repo.get_direct_messages_between(
            user_id, other_user_id, limit, offset
        )
        return {"messages": messages, "total": total}

    def list_chat_partners(self, user_id: str) -> list[ChatPartner]:
        return self.message_repo.get_chat_partners(user_id)

    # ── GROUP ─────────────────────────────────────────────

    def send_group_message(self, group_id: str, sender_id: str, content: str) -> GroupMessage:
        """Post to a group chat. Members only."""
        content = (content or "").strip()
        if not content:
            raise ValidationError("message cannot be empty")
        self._require_member(group_id, sender_id)
        return self.message_repo.save_group_message(GroupMessage(
            group_id=group_id, sender_id=sender_id, content=content,
        ))

    def get_group_messages(
        self, group_id: str, user_id: str, limit: int = 0, offset: int = 0
    ) -> list[GroupMessage]:
        self._require_member(group_id, user_id)
        limit, offset = clamp_page(limit, offset)
        return self.message_repo.get_group_messages(group_id, limit, offset)

    def _require_member(self, group_id: str, user_id: str) -> None:
        if not self.group_repo.is_member(group_id, user_id):
            raise GroupMemberRequired()
