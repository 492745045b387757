"""
Flashcard store backends.

Quick start:
    from flashcards.store import open_store, FlashcardRepository

    store = open_store("sqlite:///flashcards.db")
    repo = FlashcardRepository(store)
    cards = repo.load_cards()
"""

from __future__ import annotations

import logging
from typing import Optional

from flashcards import config
from flashcards.exceptions import StoreConfigurationError
from flashcards.store.base import STORE_KEYS, FlashcardStore
from flashcards.store.memory import MemoryStore
from flashcards.store.repository import FlashcardRepository

logger = logging.getLogger(__name__)

SQL_SCHEMES = ("sqlite", "postgresql", "postgres", "mysql")


def open_store(url: Optional[str] = None, namespace: Optional[str] = None) -> FlashcardStore:
    """
    Open a store from a URL, choosing the backend by scheme.

    Args:
        url: Store URL (defaults to FLASHCARD_STORE_URL)
        namespace: User id to scope documents (defaults to DEFAULT_USER_ID)

    Returns:
        FlashcardStore instance

    Raises:
        StoreConfigurationError: if the scheme is not supported
    """
    if url is None:
        url = config.get_store_url()
    if namespace is None:
        namespace = config.get_default_user_id()

    scheme = url.split(":", 1)[0].split("+", 1)[0].lower()
    logger.debug("Opening %s store for namespace %s", scheme, namespace)

    if scheme == "memory":
        return MemoryStore(namespace=namespace)
    if scheme in SQL_SCHEMES:
        from flashcards.store.sql import SqlStore
        return SqlStore(url, namespace=namespace)
    if scheme == "mongodb":
        from flashcards.store.mongo import MongoStore
        return MongoStore(url, namespace=namespace, database_name=config.get_mongo_database_name())

    raise StoreConfigurationError(f"Unsupported store URL scheme: {scheme!r}")


__all__ = [
    "STORE_KEYS",
    "FlashcardStore",
    "FlashcardRepository",
    "MemoryStore",
    "open_store",
]
