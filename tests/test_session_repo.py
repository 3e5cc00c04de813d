"""SessionRepository against the fake connection pool."""

from datetime import timedelta

import pytest

from models.session import Session
from repositories.errors import SessionNotFound
from repositories.session_repo import SessionRepository


def test_create_and_get_by_token(conn, now):
    expires = now + timedelta(hours=24)
    conn.script([(now,)], [("tok", "u1", expires, now)])
    repo = SessionRepository()

    created = repo.create(Session(token="tok", user_id="u1", expires_at=expires))
    fetched = repo.get_by_token("tok")

    assert created.created_at == now
    assert fetched == Session(token="tok", user_id="u1", expires_at=expires, created_at=now)
    assert "expires_at > NOW()" in conn.last_sql


def test_expired_or_unknown_token_is_not_found(conn):
    conn.script([])
    with pytest.raises(SessionNotFound):
        SessionRepository().get_by_token("stale")


def test_delete_by_token_is_idempotent(conn):
    conn.script(0, 0)
    repo = SessionRepository()
    repo.delete_by_token("gone")
    repo.delete_by_token("gone")
    assert conn.commits == 2


def test_clean_expired_returns_removed_count(conn):
    conn.script(3)
    assert SessionRepository().clean_expired() == 3
    assert "expires_at <= NOW()" in conn.last_sql


def test_session_is_expired_at_boundary(now):
    session = Session(token="t", user_id="u", expires_at=now)
    assert session.is_expired(now)
    assert not session.is_expired(now - timedelta(seconds=1))
