"""Scheduler wiring and the session sweep job."""

from unittest.mock import MagicMock

from main import build_scheduler, sweep_expired_sessions
from utils.pagination import clamp_page


def test_sweep_returns_removed_count():
    auth = MagicMock()
    auth.clean_expired_sessions.return_value = 5
    assert sweep_expired_sessions(auth) == 5


def test_sweep_survives_database_errors():
    auth = MagicMock()
    auth.clean_expired_sessions.side_effect = RuntimeError("db down")
    assert sweep_expired_sessions(auth) == 0


def test_scheduler_registers_session_sweep():
    scheduler = build_scheduler(MagicMock())
    job = scheduler.get_job("session_sweep")
    assert job is not None
    assert job.func is sweep_expired_sessions


def test_clamp_page():
    assert clamp_page(None, None) == (20, 0)
    assert clamp_page(0, 5) == (20, 5)
    assert clamp_page(500, -1) == (100, 0)
    assert clamp_page(7, 3) == (7, 3)
