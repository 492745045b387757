"""
Types for flashcard statistics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from flashcards.schemas import Stats


@dataclass(frozen=True)
class EraDefinition:
    """A named span of AI history. end_year None means open-ended."""
    id: str
    name: str
    start_year: int
    end_year: Optional[int]

    def contains(self, year: int) -> bool:
        if year < self.start_year:
            return False
        return self.end_year is None or year <= self.end_year


@dataclass(frozen=True)
class ComputedInsights:
    """
    Extended statistics for the stats page.
    """
    total_cards: int
    mastered_cards: int
    learning_cards: int
    new_cards: int

    current_streak: int
    longest_streak: int
    last_study_date: Optional[datetime]

    retention_rate_7d: Optional[float]
    retention_rate_30d: Optional[float]
    average_ease_factor: float
    total_reviews_all_time: int
    total_minutes_studied: float

    most_challenging_card_ids: list[str] = field(default_factory=list)
    overdue_card_ids: list[str] = field(default_factory=list)

    due_today: int = 0
    due_tomorrow: int = 0
    due_this_week: int = 0


@dataclass(frozen=True)
class StudyDashboardData:
    """
    Precomputed metrics and series for the study dashboard.
    """
    stats: Stats
    insights: ComputedInsights
    review_counts_daily: pd.Series
    daily_records: pd.DataFrame
    retention_daily: pd.Series
    retention_smoothed: pd.Series
    forecast_daily: pd.Series
    study_minutes_daily: pd.Series
    category_breakdown: pd.DataFrame
    era_breakdown: pd.DataFrame
    coverage_gaps: list[str]
    retention_target: float
    meets_retention_target: Optional[bool]  # None without reviews in the last 30 days
