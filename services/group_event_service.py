"""
services/group_event_service.py
--------------------------------
Business logic for group events and RSVPs.
Everything here is restricted to members of the event's group.
"""

from datetime import datetime
from typing import Optional

from models.group_event import GroupEvent, GroupEventDetails, GroupEventResponse, RESPONSE_OPTIONS
from models.notification import ENTITY_EVENT, TYPE_NEW_GROUP_EVENT
from repositories.group_event_repo import GroupEventRepository
from repositories.group_repo import GroupRepository
from services.errors import EventCreatorRequired, GroupMemberRequired, ValidationError
from services.notification_service import NotificationService
from utils.logger import get_logger
from utils.pagination import clamp_page

logger = get_logger(__name__)


class GroupEventService:
    """Create, read, edit and answer group events."""

    def __init__(
        self,
        event_repo: Optional[GroupEventRepository] = None,
        group_repo: Optional[GroupRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.event_repo = event_repo or GroupEventRepository()
        self.group_repo = group_repo or GroupRepository()
        self.notification_service = notification_service or NotificationService()

    def create(
        self,
        group_id: str,
        creator_id: str,
        title: str,
        event_time: datetime,
        description: Optional[str] = None,
    ) -> GroupEvent:
        """
        Schedule an event and notify every other member of the group.

        Raises:
            GroupNotFound, GroupMemberRequired, ValidationError
        """
        group = self.group_repo.get_by_id(group_id)
        self._require_member(group_id, creator_id)
        title = (title or "").strip()
        if not title:
            raise ValidationError("event title is required")
        if not isinstance(event_time, datetime):
            raise ValidationError("event time is required")

        event = self.event_repo.create(GroupEvent(
            group_id=group_id,
            creator_id=creator_id,
            title=title,
            description=description,
            event_time=event_time,
        ))

        recipients = [uid for uid in self.group_repo.list_member_ids(group_id) if uid != creator_id]
        for member_id in recipients:
            try:
                self.notification_service.create(
                    user_id=member_id,
                    type=TYPE_NEW_GROUP_EVENT,
                    entity_type=ENTITY_EVENT,
                    entity_id=event.id,
                    message=f"New event in {group.name}: {title}",
                )
            except Exception as e:
                logger.warning(f"Could not notify user {member_id} about event {event.id}: {e}")
        logger.info(f"Event {event.id} announced to {len(recipients)} member(s) of group {group_id}")
        return event

    def get_by_id(self, event_id: str, viewer_id: str) -> GroupEventDetails:
        """An event with its responses and going / not_going tallies."""
        event = self.event_repo.get_by_id(event_id)
        self._require_member(event.group_id, viewer_id)
        going, not_going = self.event_repo.get_response_counts(event_id)
        return GroupEventDetails(
            event=event,
            responses=self.event_repo.list_responses(event_id),
            going_count=going,
            not_going_count=not_going,
        )

    def list_by_group(
        self,
        group_id: str,
        viewer_id: str,
        limit: int = 0,
        offset: int = 0,
        upcoming_only: bool = False,
    ) -> list[GroupEvent]:
        self._require_member(group_id, viewer_id)
        limit, offset = clamp_page(limit, offset)
        return self.event_repo.list_by_group(group_id, limit, offset, upcoming_only)

    def update(self, event_id: str, user_id: str, **changes) -> GroupEvent:
        """Edit title, description or event_time. Only the creator may, while still a member."""
        event = self.event_repo.get_by_id(event_id)
        if event.creator_id != user_id:
            logger.warning(f"User {user_id} tried to edit event {event_id}")
            raise EventCreatorRequired()
        self._require_member(event.group_id, user_id)
        for key, value in changes.items():
            if key == "title":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("event title is required")
            elif key == "event_time":
                if not isinstance(value, datetime):
                    raise ValidationError("event time is required")
            elif key != "description":
                raise ValidationError(f"field '{key}' cannot be updated")
            setattr(event, key, value)
        return self.event_repo.update(event)

    def delete(self, event_id: str, user_id: str) -> None:
        """Remove an event. Allowed for its creator and for group admins."""
        event = self.event_repo.get_by_id(event_id)
        if event.creator_id != user_id and not self.group_repo.is_admin(event.group_id, user_id):
            logger.warning(f"User {user_id} tried to delete event {event_id}")
            raise EventCreatorRequired()
        self.event_repo.delete(event_id)

    def respond(self, event_id: str, user_id: str, response: str) -> GroupEventResponse:
        """
        Record 'going' or 'not_going'; answering again replaces the old answer.

        Raises:
            ValidationError, EventNotFound, GroupMemberRequired
        """
        if response not in RESPONSE_OPTIONS:
            raise ValidationError(f"response must be one of {', '.join(RESPONSE_OPTIONS)}")
        event = self.event_repo.get_by_id(event_id)
        self._require_member(event.group_id, user_id)
        return self.event_repo.upsert_response(event_id, user_id, response)

    def get_response_counts(self, event_id: str, viewer_id: str) -> dict:
        """
        Returns:
            {'going': int, 'not_going': int}
        """
        event = self.event_repo.get_by_id(event_id)
        self._require_member(event.group_id, viewer_id)
        going, not_going = self.event_repo.get_response_counts(event_id)
        return {"going": going, "not_going": not_going}

    # ── HELPERS ───────────────────────────────────────────

    def _require_member(self, group_id: str, user_id: str) -> None:
        if not self.group_repo.is_member(group_id, user_id):
            raise GroupMemberRequired()
