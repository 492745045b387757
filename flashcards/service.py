"""
Flashcard Service - study center orchestration

Owns an injected store and wires together:
- card and pack collection edits
- the SM-2 step for each answer plus the append-only review history
- study sessions and the day streak
- the cached Stats record and on-demand dashboards

The algorithm modules stay pure; all store I/O happens here.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from flashcards import packs as pack_ops
from flashcards.analytics import build_study_dashboard, compute_insights, compute_stats
from flashcards.analytics.types import ComputedInsights, StudyDashboardData
from flashcards.constants import ALL_CARDS_PACK, EXPORT_VERSION
from flashcards.dates import utc_now
from flashcards.exceptions import DuplicateCardError, PackNotFoundError, SessionStateError
from flashcards.schemas import Card, Pack, ReviewSession, SourceType, Stats, StreakHistory
from flashcards.sessions import SessionTracker
from flashcards.sm2 import initialize_new_card, review_card, validate_quality
from flashcards.store import FlashcardRepository, FlashcardStore, open_store
from flashcards.streaks import (
    counts_toward_streak,
    get_streak_message,
    rebuild_streak,
    streak_as_of,
    studied_on_day,
    update_streak,
)
from flashcards.study_queue import build_study_queue, get_due_cards

logger = logging.getLogger(__name__)


class FlashcardService:
    """
    Entry point for the study UI.

    Args:
        store: Backend to persist into (defaults to open_store())
        clock: Callable returning the current UTC time (tests pin it)
    """

    def __init__(
        self,
        store: Optional[FlashcardStore] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store if store is not None else open_store()
        self.repo = FlashcardRepository(self.store)
        self.clock = clock
        self._active: Optional[SessionTracker] = None

    # ---- Setup ----

    def initialize(self) -> list[Pack]:
        """Create the system packs if they are missing. Safe to call repeatedly."""
        packs = self.repo.load_packs()
        ensured = pack_ops.ensure_default_packs(packs, self.clock())
        if len(ensured) != len(packs):
            self.repo.save_packs(ensured)
            logger.info("Created %d system packs", len(ensured) - len(packs))
        return ensured

    def _packs(self) -> list[Pack]:
        return self.initialize()

    # ---- Cards ----

    def list_cards(self) -> list[Card]:
        return self.repo.load_cards()

    def get_card(self, card_id: str) -> Card:
        return pack_ops.find_card(self.repo.load_cards(), card_id)

    def get_card_by_source(self, source_type: SourceType | str, source_id: str) -> Optional[Card]:
        return pack_ops.find_card_by_source(self.repo.load_cards(), source_type, source_id)

    def is_card_saved(self, source_type: SourceType | str, source_id: str) -> bool:
        return self.get_card_by_source(source_type, source_id) is not None

    def add_card(
        self,
        source_type: SourceType | str,
        source_id: str,
        pack_ids: Optional[list[str]] = None,
    ) -> Card:
        """
        Save content as a new card, due immediately.

        The card joins both system packs plus any requested packs.

        Raises:
            DuplicateCardError: if a card for this source already exists
            PackNotFoundError: if a requested pack does not exist
        """
        packs = self._packs()
        cards = self.repo.load_cards()
        source_type = SourceType(source_type)

        if pack_ops.find_card_by_source(cards, source_type, source_id) is not None:
            raise DuplicateCardError(source_type.value, source_id)
        for pack_id in pack_ids or []:
            pack_ops.find_pack(packs, pack_id)

        card = initialize_new_card(
            source_type,
            source_id,
            pack_ops.default_pack_ids(packs) + list(pack_ids or []),
            self.clock(),
        )
        self.repo.save_cards(cards + [card])
        logger.info("Added card %s (%s/%s)", card.id, source_type.value, source_id)
        self.refresh_stats()
        return card

    def remove_card(self, card_id: str) -> None:
        """Delete a card. Its review history is kept."""
        cards = self.repo.load_cards()
        pack_ops.find_card(cards, card_id)
        self.repo.save_cards([c for c in cards if c.id != card_id])
        logger.info("Removed card %s", card_id)
        self.refresh_stats()

    def get_cards_by_pack(self, pack_id: str) -> list[Card]:
        pack_ops.find_pack(self._packs(), pack_id)
        return pack_ops.cards_in_pack(self.repo.load_cards(), pack_id)

    def get_due_cards(self, pack_id: Optional[str] = None) -> list[Card]:
        return get_due_cards(self.repo.load_cards(), self.clock(), pack_id)

    # ---- Reviews ----

    def record_review(self, card_id: str, quality: int, session_id: Optional[str] = None) -> Card:
        """
        Apply one answer: run SM-2, save the card, append history.

        Raises:
            InvalidQualityError: if quality is outside 0-5
            CardNotFoundError: if the card does not exist
        """
        quality = validate_quality(quality)
        cards = self.repo.load_cards()
        card = pack_ops.find_card(cards, card_id)

        updated, entry = review_card(card, quality, self.clock(), session_id=session_id)
        self.repo.save_cards([updated if c.id == card_id else c for c in cards])
        self.repo.append_history([entry])
        logger.debug(
            "Reviewed %s q=%d -> interval=%d ease=%.2f",
            card_id, quality, updated.interval, updated.ease_factor,
        )
        self.refresh_stats()
        return updated

    # ---- Packs ----

    def list_packs(self) -> list[Pack]:
        return self._packs()

    def get_default_pack(self, name: str = ALL_CARDS_PACK) -> Pack:
        pack = pack_ops.find_pack_by_name([p for p in self._packs() if p.is_default], name)
        if pack is None:
            raise PackNotFoundError(name, "No system pack named")
        return pack

    def create_pack(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Pack:
        packs = self._packs()
        pack = pack_ops.create_pack(packs, name, description, color, self.clock())
        self.repo.save_packs(packs + [pack])
        logger.info("Created pack %s (%s)", pack.id, pack.name)
        return pack

    def rename_pack(self, pack_id: str, name: str) -> Pack:
        packs = pack_ops.rename_pack(self._packs(), pack_id, name)
        self.repo.save_packs(packs)
        return pack_ops.find_pack(packs, pack_id)

    def delete_pack(self, pack_id: str) -> None:
        """Delete a user pack; its cards stay in the collection."""
        packs, cards = pack_ops.delete_pack(self._packs(), self.repo.load_cards(), pack_id)
        self.repo.save_packs(packs)
        self.repo.save_cards(cards)
        logger.info("Deleted pack %s", pack_id)

    def add_card_to_pack(self, card_id: str, pack_id: str) -> Card:
        cards = pack_ops.add_card_to_pack(self._packs(), self.repo.load_cards(), card_id, pack_id)
        self.repo.save_cards(cards)
        return pack_ops.find_card(cards, card_id)

    def remove_card_from_pack(self, card_id: str, pack_id: str) -> Card:
        cards = pack_ops.remove_card_from_pack(self._packs(), self.repo.load_cards(), card_id, pack_id)
        self.repo.save_cards(cards)
        return pack_ops.find_card(cards, card_id)

    # ---- Sessions ----

    @property
    def active_session(self) -> Optional[SessionTracker]:
        return self._active

    def start_session(
        self,
        pack_id: Optional[str] = None,
        card_ids: Optional[list[str]] = None,
        limit: Optional[int] = None,
        shuffle: bool = False,
        rng: Optional[random.Random] = None,
    ) -> SessionTracker:
        """
        Start a study session over due cards (or an explicit card list).

        Raises:
            SessionStateError: if another session is still open
            PackNotFoundError: if pack_id does not exist
        """
        if self._active is not None:
            raise SessionStateError(f"Session {self._active.session.id} is still open")
        if pack_id is not None:
            pack_ops.find_pack(self._packs(), pack_id)

        now = self.clock()
        if card_ids is None:
            queue = build_study_queue(
                self.repo.load_cards(), now, pack_id=pack_id, limit=limit, shuffle=shuffle, rng=rng
            )
            card_ids = [c.id for c in queue]
        else:
            cards = self.repo.load_cards()
            for card_id in card_ids:
                pack_ops.find_card(cards, card_id)
            if limit is not None:
                card_ids = card_ids[:max(limit, 0)]

        self._active = SessionTracker.start(card_ids, pack_id=pack_id, now=now)
        self.repo.save_session(self._active.session)
        logger.info("Started session %s with %d cards", self._active.session.id, len(card_ids))
        return self._active

    def _require_active(self) -> SessionTracker:
        if self._active is None:
            raise SessionStateError("No study session in progress")
        return self._active

    def answer_current(self, quality: int) -> Card:
        """
        Answer the card currently shown in the active session.

        Raises:
            SessionStateError: if there is no open session or no card left
        """
        tracker = self._require_active()
        self._skip_removed_cards(tracker)
        card_id = tracker.current_card_id
        if card_id is None:
            raise SessionStateError("No card left to answer in this session")
        updated = self.record_review(card_id, quality, session_id=tracker.session.id)
        tracker.record_answer(card_id, quality)
        self.repo.save_session(tracker.session)
        return updated

    def _skip_removed_cards(self, tracker: SessionTracker) -> None:
        # Cards deleted mid-session are passed over
        existing = {c.id for c in self.repo.load_cards()}
        while tracker.current_card_id is not None and tracker.current_card_id not in existing:
            skipped = tracker.skip_current()
            logger.info("Skipped removed card %s in session %s", skipped, tracker.session.id)

    def skip_current(self) -> str:
        """
        Pass over the card currently shown without answering it.

        Raises:
            SessionStateError: if there is no open session or no card left
        """
        return self._require_active().skip_current()

    def _close_session(self) -> ReviewSession:
        tracker = self._require_active()
        session = tracker.close(self.clock())
        self.repo.save_session(session)
        self._active = None

        if counts_toward_streak(session):
            streak = update_streak(self.repo.load_streak(), session.completed_at)
            self.repo.save_streak(streak)
        self.refresh_stats()
        return session

    def complete_session(self) -> ReviewSession:
        """Close the active session and count it toward the streak if any card was answered."""
        session = self._close_session()
        logger.info(
            "Completed session %s: %d reviewed, %d correct, %d to review again",
            session.id, session.cards_reviewed, session.cards_correct, session.cards_to_review,
        )
        return session

    def abandon_session(self) -> ReviewSession:
        """Close the active session early. Answers already given still count."""
        session = self._close_session()
        logger.info("Abandoned session %s after %d cards", session.id, session.cards_reviewed)
        return session

    def list_sessions(self) -> list[ReviewSession]:
        return self.repo.load_sessions()

    # ---- Stats ----

    def get_streak(self) -> StreakHistory:
        return self.repo.load_streak()

    def streak_message(self) -> str:
        streak = self.repo.load_streak()
        now = self.clock()
        return get_streak_message(streak_as_of(streak, now), studied_on_day(streak, now))

    def rebuild_streak(self) -> StreakHistory:
        """Recompute the streak from the session log and save it."""
        streak = rebuild_streak(self.repo.load_sessions())
        self.repo.save_streak(streak)
        self.refresh_stats()
        return streak

    def compute_stats(self) -> Stats:
        return compute_stats(
            self.repo.load_cards(), self.repo.load_history(), self.repo.load_streak(), self.clock()
        )

    def refresh_stats(self) -> Stats:
        """Recompute and replace the cached Stats record."""
        stats = self.compute_stats()
        self.repo.save_stats(stats)
        return stats

    def compute_insights(self) -> ComputedInsights:
        return compute_insights(
            self.repo.load_cards(),
            self.repo.load_history(),
            self.repo.load_streak(),
            self.repo.load_sessions(),
            self.clock(),
        )

    def build_dashboard(self, days: int = 30, forecast_days: int = 7) -> StudyDashboardData:
        return build_study_dashboard(
            self.repo.load_cards(),
            self.repo.load_history(),
            self.repo.load_streak(),
            self.repo.load_sessions(),
            self.clock(),
            days=days,
            forecast_days=forecast_days,
        )

    # ---- Data management ----

    def export_data(self) -> dict:
        """Full JSON-compatible backup of this user's flashcard data."""
        stats = self.repo.load_stats()
        return {
            "version": EXPORT_VERSION,
            "exported_at": self.clock().isoformat(),
            "cards": [c.model_dump(mode="json") for c in self.repo.load_cards()],
            "packs": [p.model_dump(mode="json") for p in self._packs()],
            "stats": stats.model_dump(mode="json") if stats is not None else None,
            "review_history": [e.model_dump(mode="json") for e in self.repo.load_history()],
            "sessions": [s.model_dump(mode="json") for s in self.repo.load_sessions()],
            "streak_history": self.repo.load_streak().model_dump(mode="json"),
        }

    def data_summary(self) -> dict:
        """Counts shown before an export or reset."""
        cards = self.repo.load_cards()
        return {
            "total_cards": len(cards),
            "total_packs": len(self._packs()),
            "total_reviews": len(self.repo.load_history()),
            "total_sessions": len(self.repo.load_sessions()),
            "streak_days": self.repo.load_streak().longest_streak,
            "oldest_card_date": min((c.created_at for c in cards), default=None),
        }

    def reset_all(self) -> None:
        """
        DANGEROUS: delete all cards, history, sessions and streak data.

        System packs are re-created afterwards.
        """
        self._active = None
        self.repo.clear()
        self.initialize()
        self.refresh_stats()
        logger.warning("All flashcard data reset for namespace %s", self.store.namespace)
