"""
Tests for store backends and the typed repository.
"""

import logging

import pytest

from flashcards.exceptions import StoreConfigurationError
from flashcards.schemas import Stats, StreakHistory
from flashcards.store import FlashcardRepository, MemoryStore, open_store
from flashcards.store.base import CARDS_KEY, HISTORY_KEY, STREAK_KEY
from flashcards.store.mongo import MongoStore
from flashcards.store.sql import SqlStore, normalize_sql_url

from conftest import NOW, make_card, make_entry


class FakeDeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


class FakeCollection:
    """Tiny in-memory stand-in for a pymongo collection (only the calls MongoStore makes)."""

    name = "flashcard_store"

    def __init__(self):
        self.docs: dict[str, dict] = {}

    def find_one(self, query):
        return self.docs.get(query["_id"])

    def replace_one(self, query, doc, upsert=False):
        if query["_id"] in self.docs or upsert:
            self.docs[query["_id"]] = dict(doc)

    def delete_one(self, query):
        self.docs.pop(query["_id"], None)

    def delete_many(self, query):
        doomed = [k for k, d in self.docs.items() if d["namespace"] == query["namespace"]]
        for key in doomed:
            del self.docs[key]
        return FakeDeleteResult(len(doomed))


@pytest.fixture(params=["memory", "sqlite", "mongo"])
def store(request):
    if request.param == "memory":
        return MemoryStore(namespace="alice")
    if request.param == "sqlite":
        return SqlStore("sqlite://", namespace="alice")
    return MongoStore(namespace="alice", collection=FakeCollection())


class TestStoreContract:
    """Every backend behaves the same."""

    def test_missing_key_is_none(self, store):
        assert store.get(CARDS_KEY) is None

    def test_set_replaces_whole_document(self, store):
        store.set(CARDS_KEY, [{"id": "a"}, {"id": "b"}])
        store.set(CARDS_KEY, [{"id": "c"}])
        assert store.get(CARDS_KEY) == [{"id": "c"}]

    def test_delete_and_clear(self, store):
        store.set(CARDS_KEY, [1])
        store.set(STREAK_KEY, {"current_streak": 2})
        store.delete(CARDS_KEY)
        store.delete(CARDS_KEY)
        assert store.get(CARDS_KEY) is None
        assert store.get(STREAK_KEY) == {"current_streak": 2}
        store.clear()
        assert store.get(STREAK_KEY) is None


class TestNamespaces:
    """Documents are scoped per user."""

    def test_sql_namespaces_isolated(self):
        alice = SqlStore("sqlite://", namespace="alice")
        bob = SqlStore(namespace="bob", engine=alice.engine)
        alice.set(CARDS_KEY, ["a"])
        bob.set(CARDS_KEY, ["b"])
        bob.clear()
        assert alice.get(CARDS_KEY) == ["a"]
        assert bob.get(CARDS_KEY) is None

    def test_mongo_namespaces_isolated(self):
        collection = FakeCollection()
        alice = MongoStore(namespace="alice", collection=collection)
        bob = MongoStore(namespace="bob", collection=collection)
        alice.set(CARDS_KEY, ["a"])
        bob.set(CARDS_KEY, ["b"])
        bob.clear()
        assert alice.get(CARDS_KEY) == ["a"]

    def test_memory_store_copies_values(self):
        store = MemoryStore()
        value = [{"id": "a"}]
        store.set(CARDS_KEY, value)
        value.append({"id": "b"})
        assert store.get(CARDS_KEY) == [{"id": "a"}]


class TestOpenStore:
    """Backend selection by URL scheme."""

    def test_memory(self):
        store = open_store("memory://", namespace="x")
        assert isinstance(store, MemoryStore)
        assert store.namespace == "x"

    def test_sqlite(self):
        assert isinstance(open_store("sqlite://", namespace="x"), SqlStore)

    def test_env_defaults(self, monkeypatch):
        monkeypatch.setenv("FLASHCARD_STORE_URL", "memory://")
        monkeypatch.setenv("DEFAULT_USER_ID", "carol")
        store = open_store()
        assert isinstance(store, MemoryStore)
        assert store.namespace == "carol"

    def test_unknown_scheme(self):
        with pytest.raises(StoreConfigurationError):
            open_store("redis://localhost", namespace="x")

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u:p@db:5432/cards", "postgresql://u:p@db:5432/cards"),
            ("postgres+psycopg2://u:p@db/cards", "postgresql+psycopg2://u:p@db/cards"),
            ("postgresql://u:p@db/cards", "postgresql://u:p@db/cards"),
            ("sqlite:///cards.db", "sqlite:///cards.db"),
        ],
    )
    def test_legacy_postgres_scheme_rewritten(self, url, expected):
        assert normalize_sql_url(url) == expected


class TestRepository:
    """Typed load/save."""

    def test_round_trip_cards_and_streak(self, store):
        repo = FlashcardRepository(store)
        card = make_card(next_review_date=NOW, last_reviewed_at=NOW)
        repo.save_cards([card])
        repo.save_streak(StreakHistory(current_streak=3, longest_streak=5, last_study_date=NOW))

        assert repo.load_cards() == [card]
        assert repo.load_streak().longest_streak == 5
        assert repo.load_streak().last_study_date == NOW

    def test_history_is_appended(self, store):
        repo = FlashcardRepository(store)
        repo.append_history([make_entry(NOW)])
        repo.append_history([make_entry(NOW, quality=1)])
        assert [e.quality for e in repo.load_history()] == [4, 1]

    def test_invalid_records_skipped_with_warning(self, store, caplog):
        good = make_card().model_dump(mode="json")
        bad = dict(good, id="bad", ease_factor=9.0)
        store.set(CARDS_KEY, [good, bad, "garbage"])
        store.set(HISTORY_KEY, {"not": "a list"})
        repo = FlashcardRepository(store)

        with caplog.at_level(logging.WARNING, logger="flashcards.store.repository"):
            cards = repo.load_cards()
            history = repo.load_history()

        assert [c.id for c in cards] == [good["id"]]
        assert history == []
        assert "Skipping invalid cards record" in caplog.text

    def test_defaults_when_empty(self, store):
        repo = FlashcardRepository(store)
        assert repo.load_cards() == []
        assert repo.load_streak() == StreakHistory()
        assert repo.load_stats() is None
        repo.save_stats(Stats(total_cards=2))
        assert repo.load_stats().total_cards == 2
