"""
Flashcard Constants and Parameters

Fixed policy values for scheduling, packs and streaks in one place.
None of these are read from the environment.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


# ---- Quality Ratings ----

class QualityRating(IntEnum):
    """SM-2 recall quality reported by the learner."""
    AGAIN = 0     # Complete blackout
    WRONG = 1     # Incorrect, recognised once the answer was shown
    FAMILIAR = 2  # Incorrect, but the answer felt familiar
    HARD = 3      # Correct with serious difficulty
    GOOD = 4      # Correct after some hesitation
    EASY = 5      # Perfect recall


PASSING_QUALITY: Final[int] = 3  # quality < 3 is a lapse

# Buckets used by daily review records (again covers every lapse)
GRADE_BUCKETS: Final[list[str]] = ["again", "hard", "good", "easy"]


def grade_bucket(quality: int) -> str:
    """Map a 0-5 quality onto the again/hard/good/easy buckets."""
    if quality < PASSING_QUALITY:
        return "again"
    if quality == QualityRating.HARD:
        return "hard"
    if quality == QualityRating.GOOD:
        return "good"
    return "easy"


# ---- SM-2 Parameters ----

DEFAULT_EASE_FACTOR: Final[float] = 2.5
MIN_EASE_FACTOR: Final[float] = 1.3
MAX_EASE_FACTOR: Final[float] = 3.0

FIRST_INTERVAL_DAYS: Final[int] = 1   # after the first success
SECOND_INTERVAL_DAYS: Final[int] = 6  # after the second success
MAX_INTERVAL_DAYS: Final[int] = 36500  # intervals saturate at about 100 years

# Cards whose interval exceeds this many days count as mastered
MASTERED_INTERVAL_DAYS: Final[int] = 21


# ---- Packs ----

PACK_COLORS: Final[list[str]] = [
    "#3B82F6",  # Blue
    "#10B981",  # Green
    "#F59E0B",  # Amber
    "#EF4444",  # Red
    "#8B5CF6",  # Purple
    "#EC4899",  # Pink
    "#06B6D4",  # Cyan
    "#6B7280",  # Gray
]

ALL_CARDS_PACK: Final[str] = "All Cards"
RECENTLY_ADDED_PACK: Final[str] = "Recently Added"

# System packs created on first use, in display order
DEFAULT_PACKS: Final[list[tuple[str, str]]] = [
    (ALL_CARDS_PACK, PACK_COLORS[0]),
    (RECENTLY_ADDED_PACK, PACK_COLORS[1]),
]

PACK_NAME_MAX_LENGTH: Final[int] = 50
PACK_DESCRIPTION_MAX_LENGTH: Final[int] = 200
PACK_COLOR_PATTERN: Final[str] = r"^#[0-9A-Fa-f]{6}$"


# ---- Streaks ----

STREAK_MILESTONES: Final[list[int]] = [7, 14, 30, 60, 100, 180, 365]

MILESTONE_LABELS: Final[dict[int, str]] = {
    7: "1 Week",
    14: "2 Weeks",
    30: "1 Month",
    60: "2 Months",
    100: "100 Days",
    180: "6 Months",
    365: "1 Year",
}


# ---- Export ----

EXPORT_VERSION: Final[int] = 1
