"""
Study queue utilities.

Selects and orders due cards for a session without enforcing a single
presentation policy: oldest-due-first by default, optionally shuffled.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from flashcards.dates import ensure_utc, utc_now
from flashcards.packs import cards_in_pack
from flashcards.schemas import Card
from flashcards.sm2 import is_card_due, is_card_overdue


def _due_sort_key(card: Card) -> tuple:
    # Never-scheduled cards first, then by due date
    if card.next_review_date is None:
        return (0, 0.0)
    return (1, card.next_review_date.timestamp())


def get_due_cards(
    cards: list[Card],
    now: Optional[datetime] = None,
    pack_id: Optional[str] = None,
) -> list[Card]:
    """
    Filter and sort due cards from a snapshot (no storage calls).
    """
    now = ensure_utc(now) if now is not None else utc_now()
    due = [c for c in cards_in_pack(cards, pack_id) if is_card_due(c, now)]
    due.sort(key=_due_sort_key)
    return due


def get_overdue_cards(cards: list[Card], now: Optional[datetime] = None) -> list[Card]:
    """
    Cards strictly past due or never scheduled, most overdue first.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    overdue = [c for c in cards if is_card_overdue(c, now)]
    overdue.sort(key=_due_sort_key)
    return overdue


def build_study_queue(
    cards: list[Card],
    now: Optional[datetime] = None,
    pack_id: Optional[str] = None,
    limit: Optional[int] = None,
    shuffle: bool = False,
    rng: Optional[random.Random] = None,
) -> list[Card]:
    """
    Build the ordered list of cards for one study session.

    Args:
        cards: Full card snapshot
        now: Reference time (defaults to now)
        pack_id: Restrict to one pack (None = all cards)
        limit: Maximum queue length (None = no limit)
        shuffle: Shuffle the due cards instead of oldest-due-first
        rng: Random source for shuffling (defaults to the random module)

    Returns:
        Cards to present, in order
    """
    queue = get_due_cards(cards, now, pack_id)
    if shuffle:
        (rng or random).shuffle(queue)
    if limit is not None:
        queue = queue[:max(limit, 0)]
    return queue
