"""Shared fixtures: an in-memory stand-in for the psycopg2 connection pool."""

import os

# Cheap hashing in tests; must be set before config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timezone

import pytest

import db.connection


class FakeCursor:
    """
    Replays outcomes queued on its connection, one per `execute` call.

    An outcome is a list of row tuples, an int (rowcount for writes), or an
    exception instance to raise. `executemany` records its call but does
    not consume an outcome.
    """

    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        outcome = self.conn.outcomes.pop(0) if self.conn.outcomes else []
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int) and not isinstance(outcome, bool):
            self.rowcount = outcome
            self._rows = []
        else:
            self._rows = list(outcome)
            self.rowcount = len(self._rows)

    def executemany(self, sql, seq):
        self.conn.executed.append((sql, list(seq)))

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows


class FakeConnection:
    def __init__(self):
        self.outcomes = []
        self.executed = []
        self.commits = 0
        self.rollbacks = 0

    def script(self, *outcomes):
        """Queue outcomes for the next `execute` calls, in order."""
        self.outcomes.extend(outcomes)
        return self

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    @property
    def last_sql(self) -> str:
        return self.executed[-1][0]

    @property
    def last_params(self):
        return self.executed[-1][1]


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.borrowed = 0
        self.returned = 0

    def getconn(self):
        self.borrowed += 1
        return self.conn

    def putconn(self, conn):
        assert conn is self.conn
        self.returned += 1

    def closeall(self):
        pass


@pytest.fixture()
def fake_pool(monkeypatch):
    pool = FakePool(FakeConnection())
    monkeypatch.setattr(db.connection, "_pool", pool)
    yield pool
    # every borrowed connection must have been handed back
    assert pool.borrowed == pool.returned


@pytest.fixture()
def conn(fake_pool):
    return fake_pool.conn


@pytest.fixture()
def now():
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
