"""
Store contract for flashcard data.

A store keeps whole JSON-compatible documents under a few fixed keys.
Every set() replaces the document for that key atomically; there are no
partial updates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Final, Optional


# ---- Logical Keys ----

CARDS_KEY: Final[str] = "cards"
PACKS_KEY: Final[str] = "packs"
HISTORY_KEY: Final[str] = "history"
STATS_KEY: Final[str] = "stats"
SESSIONS_KEY: Final[str] = "sessions"
STREAK_KEY: Final[str] = "streak"

STORE_KEYS: Final[list[str]] = [
    CARDS_KEY,
    PACKS_KEY,
    HISTORY_KEY,
    STATS_KEY,
    SESSIONS_KEY,
    STREAK_KEY,
]


class FlashcardStore(ABC):
    """
    Key-value blob store scoped to one namespace (user id).
    """

    namespace: str

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Return the document stored under key, or None when absent.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the document under key with value.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove key. Missing keys are ignored.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Remove every key in this namespace.
        """
        pass
