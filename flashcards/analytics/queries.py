"""
Dataframe builders for analytics.

Turn typed records into tidy frames with UTC day columns.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

import pandas as pd

from flashcards.schemas import Card, ReviewHistoryEntry, ReviewSession


HISTORY_COLUMNS = ["card_id", "timestamp", "quality", "interval", "session_id", "day_utc"]
CARD_COLUMNS = [
    "card_id", "source_type", "source_id", "interval", "ease_factor",
    "next_review_date", "last_reviewed_at", "due_day",
]
SESSION_COLUMNS = ["session_id", "started_at", "completed_at", "cards_reviewed", "day_utc"]

# Latest day a nanosecond timestamp can hold (2262-04-11)
LATEST_PANDAS_DAY = pd.Timestamp.max.floor("D").to_pydatetime().replace(tzinfo=timezone.utc)


def clamp_to_pandas_range(value: Optional[datetime]) -> Optional[datetime]:
    """Pull far-future dates back to the last representable day."""
    if value is None:
        return None
    return min(value, LATEST_PANDAS_DAY)


def to_utc_days(values: pd.Series) -> pd.Series:
    """Parse timestamps as UTC and floor to the calendar day."""
    return pd.to_datetime(values, utc=True).dt.floor("D").dt.as_unit("ns")


def load_history_df(history: Iterable[ReviewHistoryEntry]) -> pd.DataFrame:
    """
    Review history as a dataframe sorted by timestamp.
    """
    rows = [
        {
            "card_id": e.card_id,
            "timestamp": e.timestamp,
            "quality": e.quality,
            "interval": e.interval,
            "session_id": e.session_id,
        }
        for e in history
    ]
    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)

    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["day_utc"] = to_utc_days(df["timestamp"])
    return df.sort_values("timestamp").reset_index(drop=True)


def load_cards_df(cards: Iterable[Card]) -> pd.DataFrame:
    """
    Current card snapshots as a dataframe. due_day is NaT for unscheduled cards.
    """
    rows = [
        {
            "card_id": c.id,
            "source_type": c.source_type.value,
            "source_id": c.source_id,
            "interval": c.interval,
            "ease_factor": c.ease_factor,
            "next_review_date": clamp_to_pandas_range(c.next_review_date),
            "last_reviewed_at": clamp_to_pandas_range(c.last_reviewed_at),
        }
        for c in cards
    ]
    if not rows:
        return pd.DataFrame(columns=CARD_COLUMNS)

    df = pd.DataFrame(rows)
    df["next_review_date"] = pd.to_datetime(df["next_review_date"], utc=True)
    df["last_reviewed_at"] = pd.to_datetime(df["last_reviewed_at"], utc=True)
    df["due_day"] = df["next_review_date"].dt.floor("D").dt.as_unit("ns")
    return df


def load_sessions_df(sessions: Iterable[ReviewSession]) -> pd.DataFrame:
    """
    Completed sessions as a dataframe keyed by the day they started.
    """
    rows = [
        {
            "session_id": s.id,
            "started_at": s.started_at,
            "completed_at": s.completed_at,
            "cards_reviewed": s.cards_reviewed,
        }
        for s in sessions
        if s.completed_at is not None
    ]
    if not rows:
        return pd.DataFrame(columns=SESSION_COLUMNS)

    df = pd.DataFrame(rows)
    df["started_at"] = pd.to_datetime(df["started_at"], utc=True)
    df["completed_at"] = pd.to_datetime(df["completed_at"], utc=True)
    df["day_utc"] = to_utc_days(df["started_at"])
    return df
