"""
Card state helpers: due predicate, mastery and lifecycle classification.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from flashcards.constants import MASTERED_INTERVAL_DAYS
from flashcards.dates import ensure_utc, utc_now
from flashcards.schemas import Card, SourceType


def is_card_due(card: Card, now: Optional[datetime] = None) -> bool:
    """A card is due when it has no review date or the date is not after now."""
    if card.next_review_date is None:
        return True
    if now is None:
        now = utc_now()
    return card.next_review_date <= ensure_utc(now)


def is_card_overdue(card: Card, now: Optional[datetime] = None) -> bool:
    """Strictly past due, or never scheduled."""
    if card.next_review_date is None:
        return True
    if now is None:
        now = utc_now()
    return card.next_review_date < ensure_utc(now)


def is_card_mastered(card: Card) -> bool:
    return card.interval > MASTERED_INTERVAL_DAYS


def is_new_card(card: Card) -> bool:
    """Never reviewed."""
    return card.last_reviewed_at is None


def classify_card(card: Card) -> str:
    """Return 'new', 'learning' or 'mastered'."""
    if is_card_mastered(card):
        return "mastered"
    if is_new_card(card):
        return "new"
    return "learning"


def count_due(cards: Iterable[Card], now: Optional[datetime] = None) -> int:
    if now is None:
        now = utc_now()
    return sum(1 for card in cards if is_card_due(card, now))


def initialize_new_card(
    source_type: SourceType | str,
    source_id: str,
    pack_ids: Optional[list[str]] = None,
    now: Optional[datetime] = None,
) -> Card:
    """
    Create a fresh card that is due immediately.

    Args:
        source_type: Kind of content the card comes from
        source_id: Reference into the content catalog
        pack_ids: Packs the card starts in
        now: Creation time (defaults to now)

    Returns:
        New Card with default SM-2 state
    """
    if now is None:
        now = utc_now()
    now = ensure_utc(now)
    return Card(
        source_type=SourceType(source_type),
        source_id=source_id,
        pack_ids=list(pack_ids or []),
        created_at=now,
        next_review_date=now,
    )
