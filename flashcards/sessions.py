"""
Review session lifecycle.

A SessionTracker walks a fixed queue of card ids one answer at a time and
keeps the ReviewSession counters current. It does not schedule cards;
the caller runs the SM-2 step for each answer.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from flashcards.constants import PASSING_QUALITY
from flashcards.dates import ensure_utc, utc_now
from flashcards.exceptions import SessionStateError
from flashcards.schemas import ReviewSession

logger = logging.getLogger(__name__)


class SessionTracker:
    """
    In-progress study session.

    Attributes:
        session: The ReviewSession record being updated
        card_ids: Queue of card ids in presentation order
        position: Index of the card currently shown
        again_card_ids: Cards answered with a lapse, for a follow-up session
        skipped_card_ids: Cards passed over without an answer
    """

    def __init__(self, session: ReviewSession, card_ids: list[str]):
        self.session = session
        self.card_ids = list(card_ids)
        self.position = 0
        self.again_card_ids: list[str] = []
        self.skipped_card_ids: list[str] = []

    @classmethod
    def start(
        cls,
        card_ids: list[str],
        pack_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "SessionTracker":
        if now is None:
            now = utc_now()
        session = ReviewSession(pack_id=pack_id, started_at=now)
        logger.debug("Started session %s with %d cards", session.id, len(card_ids))
        return cls(session, card_ids)

    @property
    def is_closed(self) -> bool:
        return self.session.completed_at is not None

    @property
    def is_finished(self) -> bool:
        """Every queued card has been answered."""
        return self.position >= len(self.card_ids)

    @property
    def current_card_id(self) -> Optional[str]:
        if self.is_closed or self.is_finished:
            return None
        return self.card_ids[self.position]

    @property
    def remaining(self) -> int:
        return max(len(self.card_ids) - self.position, 0)

    def record_answer(self, card_id: str, quality: int) -> ReviewSession:
        """
        Count one answer and advance to the next card.

        Raises:
            SessionStateError: if the session is closed or card_id is not
                the card currently shown
        """
        if self.is_closed:
            raise SessionStateError(f"Session {self.session.id} is already closed")
        if card_id != self.current_card_id:
            raise SessionStateError(
                f"Expected answer for {self.current_card_id!r}, got {card_id!r}"
            )

        correct = quality >= PASSING_QUALITY
        if not correct:
            self.again_card_ids.append(card_id)
        self.session = self.session.model_copy(update={
            "cards_reviewed": self.session.cards_reviewed + 1,
            "cards_correct": self.session.cards_correct + (1 if correct else 0),
            "cards_to_review": self.session.cards_to_review + (0 if correct else 1),
        })
        self.position += 1
        return self.session

    def skip_current(self) -> str:
        """
        Advance past the current card without counting an answer.

        Raises:
            SessionStateError: if the session is closed or no card is left
        """
        card_id = self.current_card_id
        if card_id is None:
            raise SessionStateError(f"Session {self.session.id} has no card to skip")
        self.skipped_card_ids.append(card_id)
        self.position += 1
        return card_id

    def close(self, now: Optional[datetime] = None) -> ReviewSession:
        """Stamp completed_at. Used for both finished and abandoned runs."""
        if self.is_closed:
            raise SessionStateError(f"Session {self.session.id} is already closed")
        now = ensure_utc(now) if now is not None else utc_now()
        self.session = self.session.model_copy(update={"completed_at": now})
        logger.debug(
            "Closed session %s: %d reviewed, %d correct",
            self.session.id, self.session.cards_reviewed, self.session.cards_correct,
        )
        return self.session


def accuracy(session: ReviewSession) -> Optional[float]:
    """Fraction of correct answers, None when nothing was reviewed."""
    if session.cards_reviewed == 0:
        return None
    return session.cards_correct / session.cards_reviewed


def session_minutes(session: ReviewSession) -> float:
    """Wall-clock minutes between start and completion (0 while open)."""
    if session.completed_at is None:
        return 0.0
    seconds = (session.completed_at - session.started_at).total_seconds()
    return max(seconds, 0.0) / 60.0
