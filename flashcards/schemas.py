"""
Pydantic models for flashcards, packs, sessions, review history and streaks.

These models define the documents kept in the flashcard store. Timestamps
are normalised to timezone-aware UTC on the way in.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from flashcards.constants import (
    DEFAULT_EASE_FACTOR,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
    PACK_COLOR_PATTERN,
    PACK_DESCRIPTION_MAX_LENGTH,
    PACK_NAME_MAX_LENGTH,
)
from flashcards.dates import ensure_utc, ensure_utc_optional, utc_now


def new_id() -> str:
    return str(uuid.uuid4())


class SourceType(str, Enum):
    """Kind of content a flashcard was created from."""
    MILESTONE = "milestone"    # Timeline milestone, ids like E2017_TRANSFORMER
    CONCEPT = "concept"        # Glossary concept
    CUSTOM = "custom"          # User-written card
    FLASHCARD = "flashcard"    # Curated flashcard content


# ---- Cards ----

class Card(BaseModel):
    """A single schedulable flashcard with its SM-2 state."""
    id: str = Field(default_factory=new_id)
    source_type: SourceType
    source_id: str = Field(..., min_length=1, description="Opaque reference into the content catalog")
    pack_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    # SM-2 state
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR, le=MAX_EASE_FACTOR)
    interval: int = Field(default=0, ge=0, description="Days until the next review, 0 = new or lapsed")
    repetitions: int = Field(default=0, ge=0, description="Consecutive successes since the last lapse")
    next_review_date: Optional[datetime] = Field(default=None, description="None means due immediately")
    last_reviewed_at: Optional[datetime] = None

    @field_validator("pack_ids")
    @classmethod
    def dedupe_pack_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("created_at")
    @classmethod
    def normalise_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("next_review_date", "last_reviewed_at")
    @classmethod
    def normalise_optional_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc_optional(value)


# ---- Packs ----

class Pack(BaseModel):
    """A named group of cards. System packs have is_default set."""
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=PACK_NAME_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=PACK_DESCRIPTION_MAX_LENGTH)
    color: str = Field(..., pattern=PACK_COLOR_PATTERN)
    is_default: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def normalise_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ---- Sessions & History ----

class ReviewSession(BaseModel):
    """One bounded study run."""
    id: str = Field(default_factory=new_id)
    pack_id: Optional[str] = None  # None = all cards
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    cards_reviewed: int = Field(default=0, ge=0)
    cards_correct: int = Field(default=0, ge=0)
    cards_to_review: int = Field(default=0, ge=0, description="Lapsed answers to study again")

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @field_validator("started_at")
    @classmethod
    def normalise_started_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("completed_at")
    @classmethod
    def normalise_completed_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc_optional(value)


class ReviewHistoryEntry(BaseModel):
    """Append-only record of one answered card."""
    timestamp: datetime
    card_id: str
    quality: int = Field(..., ge=0, le=5)
    interval: int = Field(..., ge=0)
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR, le=MAX_EASE_FACTOR)
    repetitions: int = Field(default=0, ge=0)
    session_id: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def normalise_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ---- Streaks ----

class StreakAchievement(BaseModel):
    milestone: int = Field(..., gt=0)
    achieved_at: datetime

    @field_validator("achieved_at")
    @classmethod
    def normalise_achieved_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class StreakHistory(BaseModel):
    """Consecutive study-day tracking."""
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_date: Optional[datetime] = None
    achievements: list[StreakAchievement] = Field(default_factory=list)

    @field_validator("last_study_date")
    @classmethod
    def normalise_last_study_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc_optional(value)


# ---- Derived Stats ----

class Stats(BaseModel):
    """Cached summary numbers. Always recomputable from cards and history."""
    total_cards: int = 0
    cards_due_today: int = 0
    cards_reviewed_today: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    mastered_cards: int = 0
    last_study_date: Optional[datetime] = None
