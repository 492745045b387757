"""
Metric computations for flashcard statistics.

Every function is total: empty inputs give zero-filled or empty outputs.
Rates are NaN (missing) on days without reviews, never 0.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from flashcards.analytics.constants import (
    AI_ERAS,
    CHALLENGING_CARD_LIMIT,
    MILESTONE_YEAR_PATTERN,
    RETENTION_SMOOTHING_HALF_WINDOW,
    SOURCE_TYPE_LABELS,
)
from flashcards.analytics.queries import load_cards_df, load_history_df, load_sessions_df
from flashcards.analytics.types import EraDefinition
from flashcards.constants import DEFAULT_EASE_FACTOR, GRADE_BUCKETS, PASSING_QUALITY, grade_bucket
from flashcards.dates import ensure_utc, utc_now
from flashcards.schemas import Card, ReviewHistoryEntry, ReviewSession, SourceType
from flashcards.sm2 import is_card_mastered, is_new_card
from flashcards.sessions import session_minutes
from flashcards.study_queue import get_overdue_cards


# ---- Day indexes ----

def today_utc(now: Optional[datetime] = None) -> pd.Timestamp:
    if now is None:
        now = utc_now()
    return pd.Timestamp(ensure_utc(now)).tz_convert("UTC").floor("D").as_unit("ns")


def build_window_index(days: int, now: Optional[datetime] = None) -> pd.DatetimeIndex:
    """
    Dense UTC day index of ``days`` entries ending today.
    """
    if days <= 0:
        return pd.DatetimeIndex([], tz="UTC").as_unit("ns")
    return pd.date_range(end=today_utc(now), periods=days, freq="D")


def build_forward_index(days: int, now: Optional[datetime] = None) -> pd.DatetimeIndex:
    """
    Dense UTC day index of ``days`` entries starting today.
    """
    if days <= 0:
        return pd.DatetimeIndex([], tz="UTC").as_unit("ns")
    return pd.date_range(start=today_utc(now), periods=days, freq="D")


def zero_series(day_index: pd.DatetimeIndex, dtype: str = "int64") -> pd.Series:
    """
    Convenience zero-valued series aligned to day index.
    """
    return pd.Series(0, index=day_index, dtype=dtype)


def _guarded_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    # NaN where the denominator is zero
    return (numerator / denominator.where(denominator > 0)).astype("float64")


# ---- Review history ----

def rolling_review_counts(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
) -> pd.Series:
    """
    Reviews per day for the last ``days`` days, zero-filled.
    """
    day_index = build_window_index(days, now)
    df = load_history_df(history)
    if df.empty:
        return zero_series(day_index)
    counts = df.groupby("day_utc").size()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def daily_review_records(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """
    Per-day again/hard/good/easy counts, total reviews and unique cards.
    """
    day_index = build_window_index(days, now)
    columns = GRADE_BUCKETS + ["total", "unique_cards"]
    df = load_history_df(history)
    if df.empty:
        return pd.DataFrame(0, index=day_index, columns=columns, dtype="int64")

    df["bucket"] = df["quality"].map(grade_bucket)
    buckets = (
        df.pivot_table(index="day_utc", columns="bucket", values="card_id", aggfunc="count")
        .reindex(columns=GRADE_BUCKETS)
    )
    buckets["total"] = df.groupby("day_utc").size()
    buckets["unique_cards"] = df.groupby("day_utc")["card_id"].nunique()
    records = buckets.reindex(day_index).fillna(0).astype("int64")
    records.columns.name = None
    return records[columns]


def _daily_correct_and_total(df: pd.DataFrame, day_index: pd.DatetimeIndex) -> tuple[pd.Series, pd.Series]:
    if df.empty:
        return zero_series(day_index), zero_series(day_index)
    correct = (df["quality"] >= PASSING_QUALITY).groupby(df["day_utc"]).sum()
    total = df.groupby("day_utc").size()
    return (
        correct.reindex(day_index, fill_value=0).astype("int64"),
        total.reindex(day_index, fill_value=0).astype("int64"),
    )


def rolling_retention_rates(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
) -> pd.Series:
    """
    Daily fraction of passing answers; NaN on days with no reviews.
    """
    day_index = build_window_index(days, now)
    correct, total = _daily_correct_and_total(load_history_df(history), day_index)
    return _guarded_ratio(correct, total)


def retention_trend(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
) -> pd.Series:
    """
    Rolling retention with empty days dropped (for plotting a line).
    """
    return rolling_retention_rates(history, days, now).dropna()


def smoothed_retention_rates(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
    half_window: int = RETENTION_SMOOTHING_HALF_WINDOW,
) -> pd.Series:
    """
    Retention over a centred window of half_window days either side.

    The window may reach past today; those days simply hold no reviews.
    NaN where the whole window is empty.
    """
    day_index = build_window_index(days, now)
    if len(day_index) == 0:
        return pd.Series(dtype="float64", index=day_index)

    padded_index = pd.date_range(
        start=day_index[0] - pd.Timedelta(days=half_window),
        end=day_index[-1] + pd.Timedelta(days=half_window),
        freq="D",
    )
    correct, total = _daily_correct_and_total(load_history_df(history), padded_index)
    width = 2 * half_window + 1
    correct_sum = correct.rolling(width, center=True, min_periods=1).sum()
    total_sum = total.rolling(width, center=True, min_periods=1).sum()
    return _guarded_ratio(correct_sum, total_sum).reindex(day_index)


def retention_rate(
    history: Iterable[ReviewHistoryEntry],
    days: int,
    now: Optional[datetime] = None,
) -> Optional[float]:
    """
    Fraction of passing answers over today and the previous days-1 days.

    The window is exactly ``days`` calendar days long, so days=7 means the
    last seven days including today (not eight).

    Returns:
        Rate in [0, 1], or None when the window holds no reviews
    """
    day_index = build_window_index(days, now)
    df = load_history_df(history)
    if df.empty or len(day_index) == 0:
        return None
    scoped = df[(df["day_utc"] >= day_index[0]) & (df["day_utc"] <= day_index[-1])]
    if scoped.empty:
        return None
    return float((scoped["quality"] >= PASSING_QUALITY).sum() / len(scoped))


def total_reviews(history: Iterable[ReviewHistoryEntry]) -> int:
    return sum(1 for _ in history)


def cards_reviewed_on_day(
    history: Iterable[ReviewHistoryEntry],
    now: Optional[datetime] = None,
) -> int:
    """Distinct cards answered on the UTC day of ``now``."""
    df = load_history_df(history)
    if df.empty:
        return 0
    return int(df.loc[df["day_utc"] == today_utc(now), "card_id"].nunique())


# ---- Card snapshots ----

def review_forecast(
    cards: Iterable[Card],
    days: int,
    now: Optional[datetime] = None,
) -> pd.Series:
    """
    Cards due per day for the next ``days`` days starting today.

    Today's bucket also holds overdue and never-scheduled cards. Later days
    count exact due-day matches. No answers are simulated.
    """
    day_index = build_forward_index(days, now)
    df = load_cards_df(cards)
    if df.empty or len(day_index) == 0:
        return zero_series(day_index)

    today = day_index[0]
    due_day = df["due_day"].where(df["due_day"] > today, today)
    due_day = due_day.fillna(today)
    counts = due_day.value_counts()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def category_breakdown(cards: Iterable[Card]) -> pd.DataFrame:
    """
    Per source type: display label, count, mastered, mastery ratio and share
    of all cards.

    Every source type appears; mastery_ratio is NaN for empty categories.
    """
    card_list = list(cards)
    index = pd.Index([t.value for t in SourceType], name="source_type")
    counts = pd.Series(
        [sum(1 for c in card_list if c.source_type == t) for t in SourceType],
        index=index, dtype="int64",
    )
    mastered = pd.Series(
        [sum(1 for c in card_list if c.source_type == t and is_card_mastered(c)) for t in SourceType],
        index=index, dtype="int64",
    )
    total = len(card_list) or 1
    return pd.DataFrame({
        "label": [SOURCE_TYPE_LABELS[t.value] for t in SourceType],
        "count": counts,
        "mastered": mastered,
        "mastery_ratio": _guarded_ratio(mastered, counts),
        "percentage": counts / total * 100.0,
    })


def milestone_year(source_id: str) -> Optional[int]:
    match = re.match(MILESTONE_YEAR_PATTERN, source_id)
    return int(match.group(1)) if match else None


def era_for_year(year: int) -> Optional[EraDefinition]:
    for era in AI_ERAS:
        if era.contains(year):
            return era
    return None


def era_breakdown(cards: Iterable[Card]) -> pd.DataFrame:
    """
    Milestone cards per AI era, by the year encoded in the milestone id.
    """
    counts = {era.id: 0 for era in AI_ERAS}
    mastered = {era.id: 0 for era in AI_ERAS}
    for card in cards:
        if card.source_type != SourceType.MILESTONE:
            continue
        year = milestone_year(card.source_id)
        era = era_for_year(year) if year is not None else None
        if era is None:
            continue
        counts[era.id] += 1
        if is_card_mastered(card):
            mastered[era.id] += 1

    return pd.DataFrame(
        {
            "name": [era.name for era in AI_ERAS],
            "start_year": [era.start_year for era in AI_ERAS],
            "end_year": pd.array([era.end_year for era in AI_ERAS], dtype="Int64"),
            "count": [counts[era.id] for era in AI_ERAS],
            "mastered": [mastered[era.id] for era in AI_ERAS],
        },
        index=pd.Index([era.id for era in AI_ERAS], name="era"),
    )


def coverage_gaps(cards: Iterable[Card]) -> list[str]:
    """Era ids with no milestone cards."""
    breakdown = era_breakdown(cards)
    return breakdown.index[breakdown["count"] == 0].tolist()


def most_challenging_cards(cards: Iterable[Card], limit: int = CHALLENGING_CARD_LIMIT) -> list[Card]:
    """Reviewed cards with the lowest ease factor."""
    reviewed = [c for c in cards if not is_new_card(c)]
    return sorted(reviewed, key=lambda c: c.ease_factor)[:limit]


def well_known_cards(cards: Iterable[Card], limit: int = CHALLENGING_CARD_LIMIT) -> list[Card]:
    """Cards with the longest intervals."""
    return sorted(cards, key=lambda c: c.interval, reverse=True)[:limit]


def overdue_card_ids(cards: Iterable[Card], now: Optional[datetime] = None) -> list[str]:
    return [c.id for c in get_overdue_cards(list(cards), now)]


def average_ease_factor(cards: Iterable[Card]) -> float:
    """Mean ease of reviewed cards, the default ease when none are reviewed."""
    reviewed = [c.ease_factor for c in cards if not is_new_card(c)]
    if not reviewed:
        return DEFAULT_EASE_FACTOR
    return sum(reviewed) / len(reviewed)


# ---- Study time ----

def daily_study_minutes(
    sessions: Iterable[ReviewSession],
    days: int,
    now: Optional[datetime] = None,
) -> pd.Series:
    """
    Minutes studied per day as the sum of completed session spans.
    """
    day_index = build_window_index(days, now)
    df = load_sessions_df(sessions)
    if df.empty:
        return zero_series(day_index, dtype="float64")
    df["minutes"] = (df["completed_at"] - df["started_at"]).dt.total_seconds().clip(lower=0) / 60.0
    daily = df.groupby("day_utc")["minutes"].sum()
    return daily.reindex(day_index, fill_value=0.0).astype("float64")


def total_minutes_studied(sessions: Iterable[ReviewSession]) -> float:
    return float(sum(session_minutes(s) for s in sessions))
