"""
Streak Tracking

Consecutive-study-day streaks over UTC calendar days, plus the fixed
milestone ladder (1 week up to 1 year).

All functions are pure: they take a StreakHistory and return a new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from flashcards.constants import MILESTONE_LABELS, STREAK_MILESTONES
from flashcards.dates import day_gap, ensure_utc, utc_now
from flashcards.schemas import ReviewSession, StreakAchievement, StreakHistory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MilestoneProgress:
    next_milestone: Optional[int]
    progress: int          # 0-100
    days_remaining: int


# ---- Core update ----

def update_streak(streak: StreakHistory, study_time: datetime) -> StreakHistory:
    """
    Fold one study event into the streak.

    Day gap to the last study day:
    - no previous day: current = 1
    - 0 (same day): unchanged
    - 1 (next day): current + 1
    - >1: current = 1

    Study times on an earlier day than the last study day are ignored, so
    callers must feed events in order. longest_streak never decreases.
    New milestone achievements are appended.

    Args:
        streak: Current streak state
        study_time: When the study happened

    Returns:
        Updated StreakHistory
    """
    study_time = ensure_utc(study_time)
    last = streak.last_study_date

    if last is None:
        current = 1
    else:
        gap = day_gap(last, study_time)
        if gap < 0:
            logger.debug("Ignoring out-of-order study time %s", study_time.isoformat())
            return streak
        if gap == 0:
            return streak
        current = streak.current_streak + 1 if gap == 1 else 1

    new_achievements = check_for_new_milestones(current, streak.achievements, study_time)
    for achievement in new_achievements:
        logger.info("Streak milestone reached: %s", get_milestone_label(achievement.milestone))

    return StreakHistory(
        current_streak=current,
        longest_streak=max(streak.longest_streak, current),
        last_study_date=study_time,
        achievements=list(streak.achievements) + new_achievements,
    )


def fold_streak(
    dates: Iterable[datetime],
    initial: Optional[StreakHistory] = None,
) -> StreakHistory:
    """Apply update_streak over an ordered date log."""
    streak = initial if initial is not None else StreakHistory()
    for study_time in dates:
        streak = update_streak(streak, study_time)
    return streak


def counts_toward_streak(session: ReviewSession) -> bool:
    """Only completed sessions with at least one answer count."""
    return session.completed_at is not None and session.cards_reviewed > 0


def rebuild_streak(sessions: Iterable[ReviewSession]) -> StreakHistory:
    """Recompute the streak from scratch out of the session log."""
    completion_times = sorted(
        s.completed_at for s in sessions if counts_toward_streak(s)
    )
    return fold_streak(completion_times)


def streak_as_of(streak: StreakHistory, now: Optional[datetime] = None) -> int:
    """
    Current streak as it should be displayed at ``now``.

    A streak survives until the end of the day after the last study day;
    after that it shows as 0 even though the stored value is unchanged.
    """
    if streak.last_study_date is None:
        return 0
    if now is None:
        now = utc_now()
    if day_gap(streak.last_study_date, now) > 1:
        return 0
    return streak.current_streak


def studied_on_day(streak: StreakHistory, now: Optional[datetime] = None) -> bool:
    if streak.last_study_date is None:
        return False
    if now is None:
        now = utc_now()
    return day_gap(streak.last_study_date, now) == 0


# ---- Milestones ----

def check_for_new_milestones(
    current_streak: int,
    existing: Iterable[StreakAchievement],
    achieved_at: Optional[datetime] = None,
) -> list[StreakAchievement]:
    """Milestones reached by current_streak that are not yet recorded."""
    if achieved_at is None:
        achieved_at = utc_now()
    recorded = {a.milestone for a in existing}
    return [
        StreakAchievement(milestone=m, achieved_at=achieved_at)
        for m in STREAK_MILESTONES
        if current_streak >= m and m not in recorded
    ]


def get_next_milestone(current_streak: int) -> Optional[int]:
    """Next milestone above current_streak, or None when all are reached."""
    for milestone in STREAK_MILESTONES:
        if current_streak < milestone:
            return milestone
    return None


def get_milestone_progress(current_streak: int) -> MilestoneProgress:
    next_milestone = get_next_milestone(current_streak)
    if next_milestone is None:
        return MilestoneProgress(next_milestone=None, progress=100, days_remaining=0)

    previous = 0
    for milestone in STREAK_MILESTONES:
        if milestone < next_milestone and milestone <= current_streak:
            previous = milestone

    span = next_milestone - previous
    progress = int(((current_streak - previous) / span) * 100 + 0.5) if span > 0 else 0
    return MilestoneProgress(
        next_milestone=next_milestone,
        progress=progress,
        days_remaining=next_milestone - current_streak,
    )


def get_milestone_label(milestone: int) -> str:
    return MILESTONE_LABELS.get(milestone, f"{milestone} Days")


def get_streak_message(current_streak: int, studied_today: bool) -> str:
    """Short encouragement line for the streak widget."""
    if current_streak == 0:
        return "Great start! Keep it going!" if studied_today else "Start a streak today!"

    if not studied_today:
        return f"Study today to continue your {current_streak} day streak!"

    progress = get_milestone_progress(current_streak)
    if progress.next_milestone is None:
        return "Amazing! You've achieved all milestones!"

    label = get_milestone_label(progress.next_milestone)
    if progress.days_remaining == 1:
        return f"Just 1 more day to {label}!"
    if progress.days_remaining <= 3:
        return f"Only {progress.days_remaining} days to {label}!"
    return f"{progress.days_remaining} days to {label}"
