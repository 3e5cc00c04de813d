"""GroupEventRepository, MessageRepository and NotificationRepository."""

from datetime import timedelta

import pytest
from psycopg2 import errors

from models.group_event import GroupEvent
from models.message import DirectMessage, GroupMessage
from models.notification import Notification
from repositories.errors import EventNotFound, InvalidValue, NotificationNotFound
from repositories.group_event_repo import GroupEventRepository
from repositories.message_repo import MessageRepository
from repositories.notification_repo import NotificationRepository


# ── Events ────────────────────────────────────────────────

def test_create_event(conn, now):
    conn.script([(now, now)])
    event = GroupEventRepository().create(GroupEvent(
        group_id="g1", creator_id="u1", title="Picnic", event_time=now + timedelta(days=3),
    ))
    assert event.id and event.created_at == now


def test_missing_event(conn):
    conn.script([], [], 0)
    repo = GroupEventRepository()
    with pytest.raises(EventNotFound):
        repo.get_by_id("e1")
    with pytest.raises(EventNotFound):
        repo.update(GroupEvent(id="e1", group_id="g1", creator_id="u1", title="x", event_time=None))
    with pytest.raises(EventNotFound):
        repo.delete("e1")


def test_upsert_response_replaces_earlier_answer(conn, now):
    conn.script([("r1", now, now)])
    response = GroupEventRepository().upsert_response("e1", "u2", "not_going")

    assert response.response == "not_going"
    assert "ON CONFLICT (event_id, user_id) DO UPDATE" in conn.last_sql


def test_unknown_response_value_is_invalid(conn):
    conn.script(errors.CheckViolation("check"))
    with pytest.raises(InvalidValue):
        GroupEventRepository().upsert_response("e1", "u2", "maybe")
    assert conn.rollbacks == 1


def test_list_by_group_can_skip_past_events(conn, now):
    conn.script([("e1", "g1", "u1", "Picnic", None, now, now, now)], [])
    repo = GroupEventRepository()

    events = repo.list_by_group("g1", 10, 0)
    assert events[0].title == "Picnic"
    assert "NOW()" not in conn.last_sql

    repo.list_by_group("g1", 10, 0, upcoming_only=True)
    assert "event_time >= NOW()" in conn.last_sql
    assert conn.last_params == ("g1", 10, 0)


def test_response_counts_default_to_zero(conn):
    conn.script([("going", 3)], [])
    repo = GroupEventRepository()
    assert repo.get_response_counts("e1") == (3, 0)
    assert repo.get_response_counts("e2") == (0, 0)


# ── Messages ──────────────────────────────────────────────

def test_save_direct_message(conn, now):
    conn.script([(now,)])
    message = MessageRepository().save_direct_message(
        DirectMessage(sender_id="a", receiver_id="b", content="hey")
    )
    assert message.id and message.created_at == now


def test_save_group_message(conn, now):
    conn.script([(now,)])
    message = MessageRepository().save_group_message(
        GroupMessage(group_id="g1", sender_id="a", content="hello all")
    )
    assert message.created_at == now
    assert conn.last_params[1:] == ("g1", "a", "hello all")


def test_conversation_returns_page_and_total(conn, now):
    conn.script([(5,)], [("m2", "b", "a", "yo", now), ("m1", "a", "b", "hey", now)])
    messages, total = MessageRepository().get_direct_messages_between("a", "b", 2, 0)

    assert total == 5
    assert [m.id for m in messages] == ["m2", "m1"]
    assert conn.last_params == ("a", "b", "b", "a", 2, 0)


def test_chat_partners(conn, now):
    conn.script([("b", "bob", "Bob", None, None, "latest", now)])
    partners = MessageRepository().get_chat_partners("a")

    assert partners[0].user_id == "b"
    assert partners[0].last_message == "latest"
    assert "DISTINCT ON (partner_id)" in conn.last_sql
    assert conn.last_params == ("a", "a", "a")


# ── Notifications ─────────────────────────────────────────

def test_create_notification_defaults_unread(conn, now):
    conn.script([(now,)])
    notification = NotificationRepository().create(Notification(
        user_id="u1", type="follow_request", entity_type="user", entity_id="u2", message="hi",
    ))
    assert notification.is_read is False
    assert notification.to_dict()["created_at"] == now.isoformat()


def test_mark_as_read_is_scoped_to_owner(conn):
    conn.script(0)
    with pytest.raises(NotificationNotFound):
        NotificationRepository().mark_as_read("n1", "someone-else")
    assert conn.last_params == ("n1", "someone-else")


def test_mark_all_and_unread_count(conn):
    conn.script(4, [(0,)])
    repo = NotificationRepository()
    assert repo.mark_all_as_read("u1") == 4
    assert repo.get_unread_count("u1") == 0
