"""
Tests for the SM-2 scheduler.

Tests cover:
- Ease factor update and bounds
- Lapse reset
- Interval ladder (1, 6, then interval * ease)
- review_card history entries
- Quality validation
"""

from datetime import timedelta

import pytest

from flashcards.constants import MAX_INTERVAL_DAYS, QualityRating
from flashcards.exceptions import InvalidQualityError
from flashcards.sm2 import (
    calculate_next_review,
    initialize_new_card,
    review_card,
    round_half_up,
    update_ease_factor,
    validate_quality,
)

from conftest import NOW


class TestEaseFactor:
    """Ease factor formula and clamping."""

    def test_quality_four_is_fixed_point(self):
        assert update_ease_factor(2.5, 4) == 2.5

    def test_quality_five_raises_ease(self):
        assert update_ease_factor(2.5, 5) == pytest.approx(2.6)

    def test_quality_three_lowers_ease(self):
        assert update_ease_factor(2.5, 3) == pytest.approx(2.36)

    def test_quality_zero_lowers_ease(self):
        assert update_ease_factor(2.5, 0) == pytest.approx(1.7)

    def test_twenty_easy_answers_cap_at_three(self):
        ease, interval, reps = 2.5, 0, 0
        for _ in range(20):
            result = calculate_next_review(5, ease, interval, reps, NOW)
            ease, interval, reps = result.ease_factor, result.interval, result.repetitions
            assert 1.3 <= ease <= 3.0
        assert ease == 3.0

    def test_ten_blackouts_floor_at_one_point_three(self):
        ease = 2.5
        for _ in range(10):
            ease = calculate_next_review(0, ease, 0, 0, NOW).ease_factor
            assert 1.3 <= ease <= 3.0
        assert ease == 1.3

    @pytest.mark.parametrize("quality", range(6))
    def test_bounds_hold_from_both_ends(self, quality):
        for start in (1.3, 3.0):
            assert 1.3 <= update_ease_factor(start, quality) <= 3.0


class TestLongRunningCards:
    """Many consecutive successes."""

    def test_interval_saturates_at_cap(self):
        ease, interval, reps = 2.5, 0, 0
        intervals = []
        for _ in range(30):
            result = calculate_next_review(5, ease, interval, reps, NOW)
            ease, interval, reps = result.ease_factor, result.interval, result.repetitions
            intervals.append(interval)
            assert result.next_review_date == NOW + timedelta(days=interval)
        assert interval == MAX_INTERVAL_DAYS
        assert max(intervals) == MAX_INTERVAL_DAYS
        assert intervals == sorted(intervals)

    def test_capped_interval_stays_capped(self):
        result = calculate_next_review(4, 3.0, MAX_INTERVAL_DAYS, 25, NOW)
        assert result.interval == MAX_INTERVAL_DAYS
        assert result.next_review_date == NOW + timedelta(days=MAX_INTERVAL_DAYS)

    def test_twenty_easy_reviews_through_review_card(self):
        card = initialize_new_card("milestone", "E2017_TRANSFORMER", now=NOW)
        t = NOW
        for _ in range(20):
            card, entry = review_card(card, 5, t)
            assert 1.3 <= card.ease_factor <= 3.0
            assert entry.interval == card.interval <= MAX_INTERVAL_DAYS
            assert card.next_review_date == t + timedelta(days=card.interval)
        assert card.ease_factor == 3.0
        assert card.repetitions == 20
        assert card.interval == MAX_INTERVAL_DAYS


class TestLapse:
    """Answers below 3 reset progress."""

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_lapse_resets_repetitions_and_interval(self, quality):
        result = calculate_next_review(quality, 2.5, 15, 3, NOW)
        assert result.repetitions == 0
        assert result.interval == 0

    def test_lapse_is_due_immediately(self):
        result = calculate_next_review(0, 2.5, 15, 3, NOW)
        assert result.next_review_date == NOW

    def test_lapse_still_degrades_ease(self):
        result = calculate_next_review(2, 2.5, 15, 3, NOW)
        assert result.ease_factor < 2.5


class TestIntervalLadder:
    """Success intervals."""

    def test_first_success_is_one_day(self):
        result = calculate_next_review(4, 2.5, 0, 0, NOW)
        assert result.repetitions == 1
        assert result.interval == 1
        assert result.next_review_date == NOW + timedelta(days=1)

    def test_second_success_is_six_days(self):
        result = calculate_next_review(4, 2.5, 1, 1, NOW)
        assert result.repetitions == 2
        assert result.interval == 6

    def test_third_success_multiplies_by_ease(self):
        result = calculate_next_review(4, 2.5, 6, 2, NOW)
        assert result.repetitions == 3
        assert result.interval == 15
        assert result.ease_factor == 2.5

    def test_rounds_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(15.5) == 16
        assert round_half_up(15.49) == 15

    def test_growth_uses_ease_before_answer(self):
        # 6 * 2.6 would round to 16
        result = calculate_next_review(5, 2.5, 6, 2, NOW)
        assert result.interval == 15
        assert result.ease_factor == pytest.approx(2.6)


class TestReviewCard:
    """Applying answers to cards."""

    def test_end_to_end_sequence(self):
        card = initialize_new_card("milestone", "E2017_TRANSFORMER", now=NOW).model_copy(
            update={"next_review_date": None}
        )
        intervals = []
        ease = 2.5
        t = NOW
        for quality in [4, 4, 5, 2, 4]:
            card, entry = review_card(card, quality, t)
            ease = update_ease_factor(ease, quality)
            intervals.append(card.interval)
            assert entry.interval == card.interval
            assert entry.ease_factor == card.ease_factor
            t = t + timedelta(days=card.interval or 1)

        assert intervals == [1, 6, 15, 0, 1]
        assert card.repetitions == 1
        assert card.ease_factor == pytest.approx(ease)
        assert 1.3 <= card.ease_factor <= 3.0

    def test_review_does_not_mutate_input(self):
        card = initialize_new_card("concept", "attention", now=NOW)
        updated, _ = review_card(card, 5, NOW)
        assert card.repetitions == 0
        assert updated.repetitions == 1
        assert updated.last_reviewed_at == NOW

    def test_history_entry_carries_session(self):
        card = initialize_new_card("concept", "attention", now=NOW)
        _, entry = review_card(card, 3, NOW, session_id="s-1")
        assert entry.card_id == card.id
        assert entry.quality == 3
        assert entry.session_id == "s-1"
        assert entry.timestamp == NOW


class TestValidateQuality:
    """Boundary validation of quality ratings."""

    @pytest.mark.parametrize("quality", [0, 3, 5, QualityRating.GOOD])
    def test_accepts_scale(self, quality):
        assert validate_quality(quality) == int(quality)

    @pytest.mark.parametrize("quality", [-1, 6, 2.5, "4", None, True])
    def test_rejects_out_of_scale(self, quality):
        with pytest.raises(InvalidQualityError):
            validate_quality(quality)

    def test_ui_grades(self):
        assert [QualityRating.AGAIN, QualityRating.HARD, QualityRating.GOOD, QualityRating.EASY] == [0, 3, 4, 5]
