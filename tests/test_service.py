"""
Tests for FlashcardService end to end over the in-memory store.
"""

import random

import pytest

from flashcards.exceptions import (
    CardNotFoundError,
    DefaultPackError,
    DuplicateCardError,
    InvalidQualityError,
    PackNotFoundError,
    SessionStateError,
)
from flashcards.service import FlashcardService
from flashcards.store.sql import SqlStore


class TestCards:
    """Adding, finding and removing cards."""

    def test_add_card_joins_system_packs(self, service, now):
        card = service.add_card("milestone", "E2017_TRANSFORMER")
        defaults = [p.id for p in service.list_packs() if p.is_default]
        assert card.pack_ids == defaults
        assert card.next_review_date == now
        assert service.is_card_saved("milestone", "E2017_TRANSFORMER")
        assert service.compute_stats().total_cards == 1

    def test_duplicate_rejected(self, service):
        service.add_card("concept", "attention")
        with pytest.raises(DuplicateCardError):
            service.add_card("concept", "attention")
        # same id under another source type is a different card
        service.add_card("custom", "attention")

    def test_add_to_user_pack(self, service):
        pack = service.create_pack("Favourites")
        card = service.add_card("concept", "backprop", pack_ids=[pack.id])
        assert pack.id in card.pack_ids
        assert [c.id for c in service.get_cards_by_pack(pack.id)] == [card.id]

    def test_add_to_missing_pack(self, service):
        with pytest.raises(PackNotFoundError):
            service.add_card("concept", "backprop", pack_ids=["missing"])

    def test_remove_card_keeps_history(self, service):
        card = service.add_card("concept", "backprop")
        service.record_review(card.id, 4)
        service.remove_card(card.id)
        with pytest.raises(CardNotFoundError):
            service.get_card(card.id)
        assert len(service.repo.load_history()) == 1


class TestReviews:
    """record_review boundary."""

    def test_quality_validated(self, service):
        card = service.add_card("concept", "backprop")
        with pytest.raises(InvalidQualityError):
            service.record_review(card.id, 7)
        assert service.repo.load_history() == []

    def test_unknown_card(self, service):
        with pytest.raises(CardNotFoundError):
            service.record_review("missing", 4)

    def test_review_schedules_and_logs(self, service, clock):
        card = service.add_card("concept", "backprop")
        updated = service.record_review(card.id, 4)
        assert updated.interval == 1
        assert service.get_card(card.id).interval == 1
        entry = service.repo.load_history()[0]
        assert (entry.card_id, entry.quality, entry.interval) == (card.id, 4, 1)
        assert service.get_due_cards() == []
        clock.advance(days=1)
        assert [c.id for c in service.get_due_cards()] == [card.id]


class TestPacks:
    """Pack protection through the service."""

    def test_system_packs_created_once(self, service):
        service.initialize()
        assert len(service.list_packs()) == 2
        assert service.get_default_pack().name == "All Cards"

    def test_system_packs_protected(self, service):
        card = service.add_card("concept", "backprop")
        default = service.get_default_pack()
        with pytest.raises(DefaultPackError):
            service.delete_pack(default.id)
        with pytest.raises(DefaultPackError):
            service.rename_pack(default.id, "Mine")
        with pytest.raises(DefaultPackError):
            service.remove_card_from_pack(card.id, default.id)

    def test_delete_user_pack(self, service):
        pack = service.create_pack("Eras")
        card = service.add_card("concept", "backprop")
        service.add_card_to_pack(card.id, pack.id)
        service.delete_pack(pack.id)
        assert pack.id not in service.get_card(card.id).pack_ids
        assert service.get_card(card.id) is not None

    def test_rename_and_membership(self, service):
        pack = service.create_pack("Old")
        assert service.rename_pack(pack.id, "New").name == "New"
        card = service.add_card("concept", "backprop")
        assert pack.id in service.add_card_to_pack(card.id, pack.id).pack_ids
        assert pack.id not in service.remove_card_from_pack(card.id, pack.id).pack_ids


class TestSessions:
    """Study sessions and streak updates."""

    def _add(self, service, n):
        return [service.add_card("milestone", f"E20{10 + i}_M{i}") for i in range(n)]

    def test_full_session(self, service, clock):
        cards = self._add(service, 3)
        tracker = service.start_session()
        assert tracker.card_ids == [c.id for c in cards]

        clock.advance(minutes=2)
        service.answer_current(4)
        service.answer_current(0)
        service.answer_current(5)
        session = service.complete_session()

        assert session.cards_reviewed == 3
        assert session.cards_correct == 2
        assert session.cards_to_review == 1
        assert service.active_session is None
        assert service.get_streak().current_streak == 1
        assert service.compute_stats().cards_reviewed_today == 3
        assert all(e.session_id == session.id for e in service.repo.load_history())

    def test_streak_over_days(self, service, clock):
        card = self._add(service, 1)[0]
        for _ in range(3):
            service.start_session(card_ids=[card.id])
            service.answer_current(5)
            service.complete_session()
            clock.advance(days=1)
        assert service.get_streak().current_streak == 3

        clock.advance(days=2)
        service.start_session(card_ids=[card.id])
        service.answer_current(5)
        service.complete_session()
        streak = service.get_streak()
        assert streak.current_streak == 1
        assert streak.longest_streak == 3
        assert service.rebuild_streak() == streak

    def test_empty_session_does_not_count(self, service):
        service.start_session()
        session = service.complete_session()
        assert session.cards_reviewed == 0
        assert service.get_streak().current_streak == 0

    def test_second_session_same_day_does_not_change_streak(self, service, clock):
        card = self._add(service, 1)[0]
        for _ in range(2):
            service.start_session(card_ids=[card.id])
            service.answer_current(4)
            service.complete_session()
            clock.advance(hours=1)
        assert service.get_streak().current_streak == 1

    def test_abandon_keeps_answers(self, service):
        self._add(service, 2)
        service.start_session()
        service.answer_current(4)
        session = service.abandon_session()
        assert session.cards_reviewed == 1
        assert session.completed_at is not None
        assert service.get_streak().current_streak == 1

    def test_session_state_errors(self, service):
        with pytest.raises(SessionStateError):
            service.answer_current(4)
        with pytest.raises(SessionStateError):
            service.complete_session()
        service.start_session()
        with pytest.raises(SessionStateError):
            service.start_session()
        with pytest.raises(SessionStateError):
            service.answer_current(4)  # nothing due

    def test_removed_card_is_skipped(self, service):
        first, second = self._add(service, 2)
        tracker = service.start_session()
        service.remove_card(first.id)

        answered = service.answer_current(4)
        assert answered.id == second.id
        assert tracker.skipped_card_ids == [first.id]
        assert tracker.is_finished
        session = service.complete_session()
        assert session.cards_reviewed == 1
        assert session.cards_correct == 1

    def test_skip_current(self, service):
        first, second = self._add(service, 2)
        tracker = service.start_session()
        assert service.skip_current() == first.id
        service.answer_current(5)
        assert tracker.skipped_card_ids == [first.id]
        with pytest.raises(SessionStateError):
            service.skip_current()
        assert service.complete_session().cards_reviewed == 1
        assert service.get_card(first.id).repetitions == 0

    def test_limit_and_shuffle(self, service):
        self._add(service, 5)
        tracker = service.start_session(limit=2, shuffle=True, rng=random.Random(1))
        assert len(tracker.card_ids) == 2

    def test_pack_session(self, service):
        pack = service.create_pack("Eras")
        in_pack = service.add_card("concept", "rnn", pack_ids=[pack.id])
        self._add(service, 2)
        tracker = service.start_session(pack_id=pack.id)
        assert tracker.card_ids == [in_pack.id]
        assert tracker.session.pack_id == pack.id


class TestDataManagement:
    """Export, summary and reset."""

    def test_export_document(self, service):
        card = service.add_card("concept", "rnn")
        service.record_review(card.id, 4)
        data = service.export_data()
        assert data["version"] == 1
        assert [c["id"] for c in data["cards"]] == [card.id]
        assert len(data["packs"]) == 2
        assert data["review_history"][0]["quality"] == 4
        assert data["stats"]["total_cards"] == 1
        assert set(data) == {
            "version", "exported_at", "cards", "packs", "stats",
            "review_history", "sessions", "streak_history",
        }

    def test_summary_and_reset(self, service, now):
        card = service.add_card("concept", "rnn")
        service.start_session(card_ids=[card.id])
        service.answer_current(3)
        service.complete_session()

        summary = service.data_summary()
        assert summary["total_cards"] == 1
        assert summary["total_reviews"] == 1
        assert summary["total_sessions"] == 1
        assert summary["oldest_card_date"] == now

        service.reset_all()
        summary = service.data_summary()
        assert summary["total_cards"] == 0
        assert summary["total_reviews"] == 0
        assert summary["total_packs"] == 2
        assert service.get_streak().current_streak == 0

    def test_runs_on_sql_store(self, clock):
        service = FlashcardService(SqlStore("sqlite://", namespace="sql-user"), clock=clock)
        card = service.add_card("milestone", "E2017_TRANSFORMER")
        service.record_review(card.id, 4)
        assert service.get_card(card.id).interval == 1
        assert service.compute_stats().total_cards == 1


class TestStreakMessage:
    """Encouragement line reflects today's study."""

    def test_message_before_and_after_studying(self, service, clock):
        assert service.streak_message() == "Start a streak today!"
        card = service.add_card("concept", "rnn")
        service.start_session(card_ids=[card.id])
        service.answer_current(4)
        service.complete_session()
        assert service.streak_message() == "6 days to 1 Week"
        clock.advance(days=1)
        assert service.streak_message() == "Study today to continue your 1 day streak!"
