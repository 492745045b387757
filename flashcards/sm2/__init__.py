"""
SM-2 - SuperMemo 2 Spaced Repetition Scheduler

Main scheduling API for the flashcard study center.

This package implements the classic SM-2 algorithm with:
- Ease factor update on every answer, clamped to [1.3, 3.0]
- Lapse reset (quality < 3) of repetitions and interval
- Fixed 1 and 6 day steps, then interval * ease growth
- Due predicate and a fixed 21 day mastery threshold

Quick start:
    from flashcards import sm2

    # Create a card that is due now
    card = sm2.initialize_new_card("milestone", "E2017_TRANSFORMER")

    # Process an answer (algorithm only, no storage calls)
    card, history_entry = sm2.review_card(card, sm2.QualityRating.GOOD)

    # Check scheduling state
    sm2.is_card_due(card)
    sm2.is_card_mastered(card)
"""

# Core scheduler API (algorithm logic)
from flashcards.sm2.scheduler import (
    ReviewResult,
    calculate_next_review,
    next_review_date,
    review_card,
    round_half_up,
    update_ease_factor,
    validate_quality,
)

# Card state helpers
from flashcards.sm2.card_state import (
    classify_card,
    count_due,
    initialize_new_card,
    is_card_due,
    is_card_mastered,
    is_card_overdue,
    is_new_card,
)

# Constants and parameters
from flashcards.constants import (
    QualityRating,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MAX_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MASTERED_INTERVAL_DAYS,
)


__all__ = [
    # Core algorithm
    "ReviewResult",
    "calculate_next_review",
    "next_review_date",
    "review_card",
    "round_half_up",
    "update_ease_factor",
    "validate_quality",

    # Card state
    "classify_card",
    "count_due",
    "initialize_new_card",
    "is_card_due",
    "is_card_mastered",
    "is_card_overdue",
    "is_new_card",

    # Enums
    "QualityRating",

    # Parameters
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "MAX_EASE_FACTOR",
    "MAX_INTERVAL_DAYS",
    "MASTERED_INTERVAL_DAYS",
]
