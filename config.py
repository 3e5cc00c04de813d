"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "social_network")
DB_USER: str = os.getenv("DB_USER", "social_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))

# ── Sessions ──────────────────────────────────────────────
SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", "24"))
SESSION_CLEANUP_INTERVAL_MINUTES: int = int(
    os.getenv("SESSION_CLEANUP_INTERVAL_MINUTES", "60")
)

# ── Security ──────────────────────────────────────────────
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))

# ── Content limits ────────────────────────────────────────
MAX_COMMENT_LENGTH: int = int(os.getenv("MAX_COMMENT_LENGTH", "500"))

# ── Pagination ────────────────────────────────────────────
DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))
PROFILE_PREVIEW_LIMIT: int = int(os.getenv("PROFILE_PREVIEW_LIMIT", "10"))
USER_SEARCH_LIMIT: int = int(os.getenv("USER_SEARCH_LIMIT", "20"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
