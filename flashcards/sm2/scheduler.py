"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling and state updates (no storage calls).

Main workflow:
1. Load the card (caller's responsibility)
2. Update the ease factor from the quality rating
3. Apply the lapse or success interval rules
4. Return the updated card + history entry

This module handles ONLY the algorithm logic.
Persistence is handled by the store package.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from flashcards.constants import (
    FIRST_INTERVAL_DAYS,
    MAX_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from flashcards.dates import add_days, ensure_utc, utc_now
from flashcards.exceptions import InvalidQualityError
from flashcards.schemas import Card, ReviewHistoryEntry


@dataclass(frozen=True)
class ReviewResult:
    """Scheduling state produced by one answer."""
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime


def round_half_up(value: float) -> int:
    """Round .5 upward (the built-in round() would round 2.5 to 2)."""
    return int(math.floor(value + 0.5))


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Apply the SM-2 ease update and clamp to [1.3, 3.0].

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    Quality 4 is a fixed point: the delta is exactly 0.
    """
    miss = 5 - quality
    delta = 0.1 - miss * (0.08 + miss * 0.02)
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, ease_factor + delta))


def next_review_date(interval: int, now: Optional[datetime] = None) -> datetime:
    """Timestamp ``interval`` days after ``now``; interval 0 means due now."""
    if now is None:
        now = utc_now()
    return add_days(now, interval)


def calculate_next_review(
    quality: int,
    ease_factor: float,
    interval: int,
    repetitions: int,
    now: Optional[datetime] = None,
) -> ReviewResult:
    """
    Compute the next SM-2 state for one answer.

    The caller validates quality; any integer 0-5 is accepted here.
    Intervals never exceed MAX_INTERVAL_DAYS.

    Args:
        quality: Recall quality (0-5), < 3 is a lapse
        ease_factor: Current ease factor
        interval: Current interval in days
        repetitions: Consecutive successes so far
        now: Review time (defaults to now)

    Returns:
        ReviewResult with the new ease, interval, repetitions and due date
    """
    if now is None:
        now = utc_now()

    new_ease = update_ease_factor(ease_factor, quality)

    if quality < PASSING_QUALITY:
        # Lapse: start the learning ladder again
        new_repetitions = 0
        new_interval = 0
    else:
        new_repetitions = repetitions + 1
        if new_repetitions == 1:
            new_interval = FIRST_INTERVAL_DAYS
        elif new_repetitions == 2:
            new_interval = SECOND_INTERVAL_DAYS
        else:
            # Grows by the ease the card had going into this answer
            new_interval = min(round_half_up(interval * ease_factor), MAX_INTERVAL_DAYS)

    return ReviewResult(
        ease_factor=new_ease,
        interval=new_interval,
        repetitions=new_repetitions,
        next_review_date=next_review_date(new_interval, now),
    )


def review_card(
    card: Card,
    quality: int,
    now: Optional[datetime] = None,
    session_id: Optional[str] = None,
) -> Tuple[Card, ReviewHistoryEntry]:
    """
    Apply one answer to a card.

    This is the core SM-2 step. No storage calls.
    Caller is responsible for:
    1. Validating the quality
    2. Saving the updated card
    3. Appending the history entry

    Args:
        card: Card to update (not mutated)
        quality: Recall quality (0-5)
        now: Review timestamp (defaults to now)
        session_id: Study session the answer belongs to, if any

    Returns:
        Tuple of (updated_card, history_entry)
    """
    now = ensure_utc(now) if now is not None else utc_now()

    result = calculate_next_review(
        quality, card.ease_factor, card.interval, card.repetitions, now
    )
    updated = card.model_copy(update={
        "ease_factor": result.ease_factor,
        "interval": result.interval,
        "repetitions": result.repetitions,
        "next_review_date": result.next_review_date,
        "last_reviewed_at": now,
    })
    entry = ReviewHistoryEntry(
        timestamp=now,
        card_id=card.id,
        quality=quality,
        interval=result.interval,
        ease_factor=result.ease_factor,
        repetitions=result.repetitions,
        session_id=session_id,
    )
    return updated, entry


def validate_quality(quality: object) -> int:
    """
    Check a quality rating from outside the core.

    Raises:
        InvalidQualityError: if quality is not an integer in 0-5
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if not 0 <= quality <= 5:
        raise InvalidQualityError(quality)
    return int(quality)
