"""
Shared fixtures for flashcard tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from flashcards.schemas import Card, ReviewHistoryEntry, SourceType
from flashcards.service import FlashcardService
from flashcards.store import MemoryStore


NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for driving the service through several days."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryStore(namespace="tester")


@pytest.fixture
def service(memory_store, clock):
    svc = FlashcardService(memory_store, clock=clock)
    svc.initialize()
    return svc


def make_card(**overrides) -> Card:
    data = {
        "source_type": SourceType.MILESTONE,
        "source_id": "E2017_TRANSFORMER",
        "created_at": NOW - timedelta(days=30),
    }
    data.update(overrides)
    return Card(**data)


def make_entry(timestamp: datetime, quality: int = 4, card_id: str = "card-1", interval: int = 1) -> ReviewHistoryEntry:
    return ReviewHistoryEntry(timestamp=timestamp, card_id=card_id, quality=quality, interval=interval)
