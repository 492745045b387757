"""
Tests for the review session tracker.
"""

from datetime import timedelta

import pytest

from flashcards.exceptions import SessionStateError
from flashcards.sessions import SessionTracker, accuracy, session_minutes

from conftest import NOW


class TestSessionTracker:
    """Counters and ordering."""

    def test_counts_answers(self):
        tracker = SessionTracker.start(["a", "b", "c"], now=NOW)
        tracker.record_answer("a", 4)
        tracker.record_answer("b", 0)
        tracker.record_answer("c", 3)

        assert tracker.is_finished
        assert tracker.session.cards_reviewed == 3
        assert tracker.session.cards_correct == 2
        assert tracker.session.cards_to_review == 1
        assert tracker.again_card_ids == ["b"]

    def test_answer_must_match_current_card(self):
        tracker = SessionTracker.start(["a", "b"], now=NOW)
        with pytest.raises(SessionStateError):
            tracker.record_answer("b", 4)

    def test_closed_session_rejects_answers(self):
        tracker = SessionTracker.start(["a"], now=NOW)
        tracker.close(NOW + timedelta(minutes=5))
        assert tracker.current_card_id is None
        with pytest.raises(SessionStateError):
            tracker.record_answer("a", 4)
        with pytest.raises(SessionStateError):
            tracker.close(NOW)

    def test_remaining(self):
        tracker = SessionTracker.start(["a", "b"], pack_id="p1", now=NOW)
        assert tracker.remaining == 2
        assert tracker.session.pack_id == "p1"
        tracker.record_answer("a", 5)
        assert tracker.remaining == 1
        assert tracker.current_card_id == "b"

    def test_skip_advances_without_counting(self):
        tracker = SessionTracker.start(["a", "b"], now=NOW)
        assert tracker.skip_current() == "a"
        assert tracker.current_card_id == "b"
        assert tracker.skipped_card_ids == ["a"]
        assert tracker.session.cards_reviewed == 0
        tracker.record_answer("b", 4)
        assert tracker.is_finished
        with pytest.raises(SessionStateError):
            tracker.skip_current()


class TestSessionMetrics:
    """Derived session numbers."""

    def test_minutes_and_accuracy(self):
        tracker = SessionTracker.start(["a", "b"], now=NOW)
        tracker.record_answer("a", 5)
        tracker.record_answer("b", 1)
        session = tracker.close(NOW + timedelta(minutes=12))
        assert session_minutes(session) == pytest.approx(12.0)
        assert accuracy(session) == pytest.approx(0.5)

    def test_empty_session(self):
        session = SessionTracker.start([], now=NOW).session
        assert accuracy(session) is None
        assert session_minutes(session) == 0.0
