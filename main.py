"""
main.py
-------
Entry point for the social network backend process.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Run the periodic expired-session sweep until interrupted.
"""

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import SESSION_CLEANUP_INTERVAL_MINUTES
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from services.auth_service import AuthService
from utils.logger import get_logger

logger = get_logger(__name__)


def sweep_expired_sessions(auth_service: AuthService) -> int:
    """Job: delete expired sessions. Failures are logged so the schedule keeps running."""
    try:
        removed = auth_service.clean_expired_sessions()
    except Exception as e:
        logger.error(f"Session sweep failed: {e}")
        return 0
    logger.info(f"Session sweep removed {removed} expired session(s)")
    return removed


def build_scheduler(auth_service: AuthService) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        sweep_expired_sessions,
        trigger=IntervalTrigger(minutes=SESSION_CLEANUP_INTERVAL_MINUTES),
        args=(auth_service,),
        id="session_sweep",
        replace_existing=True,
    )
    return scheduler


def main() -> None:
    """Initialize storage and run background jobs."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Schedule jobs ──────────────────────────────────
    auth_service = AuthService()
    sweep_expired_sessions(auth_service)
    scheduler = build_scheduler(auth_service)
    logger.info(f"Scheduled session sweep every {SESSION_CLEANUP_INTERVAL_MINUTES} minute(s)")

    # ── 3. Run until interrupted ──────────────────────────
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        close_pool()
        logger.info("Stopped.")


if __name__ == "__main__":
    main()
