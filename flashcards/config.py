"""
Configuration - environment-driven settings

Reads a .env file once (python-dotenv) and exposes small getters so tests
can monkeypatch the environment between calls.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_STORE_URL = "memory://"
DEFAULT_DATABASE_NAME = "flashcards"
TEST_DATABASE_NAME = "test_flashcards"


def is_test_mode() -> bool:
    """True when TEST_MODE=true, which points every backend at the test database."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_store_url() -> str:
    """
    Get the store URL from environment variables.

    FLASHCARD_STORE_URL selects the backend by scheme (memory://, sqlite://,
    postgresql://, mongodb://). In test mode the 'flashcards' database name
    is replaced with 'test_flashcards'.

    Returns:
        Store URL string
    """
    url = os.getenv("FLASHCARD_STORE_URL", DEFAULT_STORE_URL)
    if is_test_mode():
        url = url.replace(DEFAULT_DATABASE_NAME, TEST_DATABASE_NAME)
    return url


def get_mongo_database_name() -> str:
    name = os.getenv("FLASHCARD_MONGO_DB", DEFAULT_DATABASE_NAME)
    if is_test_mode() and name == DEFAULT_DATABASE_NAME:
        return TEST_DATABASE_NAME
    return name


def get_default_user_id() -> str:
    """User id used as the store namespace (DEFAULT_USER_ID, default 'default')."""
    return os.getenv("DEFAULT_USER_ID", "default")


def get_log_level() -> int:
    level_name = os.getenv("FLASHCARD_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | None = None) -> None:
    """Basic logging setup for the maintenance scripts."""
    logging.basicConfig(
        level=level if level is not None else get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
