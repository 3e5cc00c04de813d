"""UserRepository against the fake connection pool."""

from datetime import date

import pytest
from psycopg2 import errors

from models.user import User
from repositories.errors import UserAlreadyExists, UserNotFound
from repositories.user_repo import UserRepository


def _user_row(now, user_id="u1", username="alice", is_private=False):
    return (
        user_id, username, f"{username}@example.com", "hash", "Alice", "Smith",
        None, "hi", date(1990, 1, 2), is_private, now, now,
    )


def test_create_assigns_id_and_timestamps(conn, now):
    conn.script([(now, now)])
    user = UserRepository().create(User(username="alice", email="alice@example.com", password_hash="h"))

    assert user.id
    assert user.created_at == now and user.updated_at == now
    assert conn.commits == 1
    sql, params = conn.executed[0]
    assert "INSERT INTO users" in sql
    assert params[0] == user.id and params[1] == "alice"


def test_create_duplicate_raises_already_exists(conn):
    conn.script(errors.UniqueViolation("duplicate key value"))
    with pytest.raises(UserAlreadyExists):
        UserRepository().create(User(username="alice", email="a@example.com", password_hash="h"))
    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_get_by_id_maps_every_column(conn, now):
    conn.script([_user_row(now, is_private=True)])
    user = UserRepository().get_by_id("u1")

    assert user.id == "u1"
    assert user.username == "alice"
    assert user.email == "alice@example.com"
    assert user.first_name == "Alice" and user.last_name == "Smith"
    assert user.about_me == "hi"
    assert user.birth_date == date(1990, 1, 2)
    assert user.is_private is True
    assert conn.last_params == ("u1",)


@pytest.mark.parametrize("method", ["get_by_id", "get_by_username", "get_by_email"])
def test_lookups_raise_not_found(conn, method):
    conn.script([])
    with pytest.raises(UserNotFound):
        getattr(UserRepository(), method)("missing")


def test_update_missing_user_rolls_back(conn):
    conn.script([])
    user = User(id="ghost", username="ghost", email="g@example.com", password_hash="h")
    with pytest.raises(UserNotFound):
        UserRepository().update(user)
    assert conn.rollbacks == 1


def test_update_username_clash(conn):
    conn.script(errors.UniqueViolation("duplicate"))
    user = User(id="u1", username="bob", email="a@example.com", password_hash="h")
    with pytest.raises(UserAlreadyExists):
        UserRepository().update(user)


def test_update_privacy_and_delete_check_rowcount(conn):
    repo = UserRepository()
    conn.script(1)
    repo.update_privacy("u1", True)
    assert conn.last_params == (True, "u1")

    conn.script(0)
    with pytest.raises(UserNotFound):
        repo.update_privacy("nobody", True)

    conn.script(0)
    with pytest.raises(UserNotFound):
        repo.delete("nobody")


def test_search_uses_one_pattern_for_all_name_columns(conn, now):
    conn.script([_user_row(now), _user_row(now, "u2", "alicia")])
    users = UserRepository().search("ali", 20)

    assert [u.username for u in users] == ["alice", "alicia"]
    assert "ILIKE" in conn.last_sql
    assert conn.last_params == ("%ali%", "%ali%", "%ali%", 20)


def test_search_treats_wildcards_literally(conn):
    conn.script([])
    UserRepository().search("john_doe%", 5)

    assert conn.last_params[0] == "%john\\_doe\\%%"
    assert conn.last_sql.count("ESCAPE") == 3
