"""
Typed access to the flashcard store.

Converts between pydantic models and the JSON documents kept under the
fixed store keys. Records that no longer validate are skipped with a
warning so one bad record never blocks loading the rest.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from flashcards.schemas import Card, Pack, ReviewHistoryEntry, ReviewSession, Stats, StreakHistory
from flashcards.store.base import (
    CARDS_KEY,
    HISTORY_KEY,
    PACKS_KEY,
    SESSIONS_KEY,
    STATS_KEY,
    STREAK_KEY,
    FlashcardStore,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse_list(raw: Any, model: Type[M], key: str) -> list[M]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring %s: expected a list, got %s", key, type(raw).__name__)
        return []

    records: list[M] = []
    for i, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s record #%d: %s", key, i, exc.errors()[0].get("msg"))
    return records


def _parse_one(raw: Any, model: Type[M], key: str) -> Optional[M]:
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Discarding invalid %s document: %s", key, exc.errors()[0].get("msg"))
        return None


def _dump_list(records: list[BaseModel]) -> list[dict]:
    return [r.model_dump(mode="json") for r in records]


class FlashcardRepository:
    """
    Load/save typed collections through a FlashcardStore.
    """

    def __init__(self, store: FlashcardStore):
        self.store = store

    # ---- Cards & Packs ----

    def load_cards(self) -> list[Card]:
        return _parse_list(self.store.get(CARDS_KEY), Card, CARDS_KEY)

    def save_cards(self, cards: list[Card]) -> None:
        self.store.set(CARDS_KEY, _dump_list(cards))

    def load_packs(self) -> list[Pack]:
        return _parse_list(self.store.get(PACKS_KEY), Pack, PACKS_KEY)

    def save_packs(self, packs: list[Pack]) -> None:
        self.store.set(PACKS_KEY, _dump_list(packs))

    # ---- History & Sessions ----

    def load_history(self) -> list[ReviewHistoryEntry]:
        return _parse_list(self.store.get(HISTORY_KEY), ReviewHistoryEntry, HISTORY_KEY)

    def append_history(self, entries: list[ReviewHistoryEntry]) -> None:
        """Append entries; existing history is never rewritten."""
        raw = self.store.get(HISTORY_KEY) or []
        self.store.set(HISTORY_KEY, list(raw) + _dump_list(entries))

    def load_sessions(self) -> list[ReviewSession]:
        return _parse_list(self.store.get(SESSIONS_KEY), ReviewSession, SESSIONS_KEY)

    def save_session(self, session: ReviewSession) -> None:
        """Insert or replace one session by id."""
        sessions = [s for s in self.load_sessions() if s.id != session.id]
        sessions.append(session)
        sessions.sort(key=lambda s: s.started_at)
        self.store.set(SESSIONS_KEY, _dump_list(sessions))

    # ---- Streak & Stats ----

    def load_streak(self) -> StreakHistory:
        return _parse_one(self.store.get(STREAK_KEY), StreakHistory, STREAK_KEY) or StreakHistory()

    def save_streak(self, streak: StreakHistory) -> None:
        self.store.set(STREAK_KEY, streak.model_dump(mode="json"))

    def load_stats(self) -> Optional[Stats]:
        return _parse_one(self.store.get(STATS_KEY), Stats, STATS_KEY)

    def save_stats(self, stats: Stats) -> None:
        self.store.set(STATS_KEY, stats.model_dump(mode="json"))

    def clear(self) -> None:
        self.store.clear()
