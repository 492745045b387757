"""
Service layer to assemble flashcard statistics and dashboards.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from flashcards.analytics.constants import (
    DEFAULT_WINDOW_DAYS,
    FORECAST_DAYS,
    LONG_RETENTION_DAYS,
    SHORT_RETENTION_DAYS,
    TARGET_RETENTION_RATE,
)
from flashcards.analytics.metrics import (
    average_ease_factor,
    cards_reviewed_on_day,
    category_breakdown,
    coverage_gaps,
    daily_review_records,
    daily_study_minutes,
    era_breakdown,
    most_challenging_cards,
    overdue_card_ids,
    retention_rate,
    review_forecast,
    rolling_retention_rates,
    rolling_review_counts,
    smoothed_retention_rates,
    total_minutes_studied,
    total_reviews,
)
from flashcards.analytics.types import ComputedInsights, StudyDashboardData
from flashcards.dates import ensure_utc, utc_now
from flashcards.schemas import Card, ReviewHistoryEntry, ReviewSession, Stats, StreakHistory
from flashcards.sm2 import classify_card, count_due
from flashcards.streaks import streak_as_of


def compute_stats(
    cards: list[Card],
    history: list[ReviewHistoryEntry],
    streak: StreakHistory,
    now: Optional[datetime] = None,
) -> Stats:
    """
    Recompute the cached Stats record from scratch.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    return Stats(
        total_cards=len(cards),
        cards_due_today=count_due(cards, now),
        cards_reviewed_today=cards_reviewed_on_day(history, now),
        current_streak=streak_as_of(streak, now),
        longest_streak=streak.longest_streak,
        mastered_cards=sum(1 for c in cards if classify_card(c) == "mastered"),
        last_study_date=streak.last_study_date,
    )


def compute_insights(
    cards: list[Card],
    history: list[ReviewHistoryEntry],
    streak: StreakHistory,
    sessions: Optional[list[ReviewSession]] = None,
    now: Optional[datetime] = None,
) -> ComputedInsights:
    """
    Build the extended statistics shown on the stats page.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    sessions = sessions or []
    classes = [classify_card(c) for c in cards]
    forecast = review_forecast(cards, FORECAST_DAYS, now)

    return ComputedInsights(
        total_cards=len(cards),
        mastered_cards=classes.count("mastered"),
        learning_cards=classes.count("learning"),
        new_cards=classes.count("new"),
        current_streak=streak_as_of(streak, now),
        longest_streak=streak.longest_streak,
        last_study_date=streak.last_study_date,
        retention_rate_7d=retention_rate(history, SHORT_RETENTION_DAYS, now),
        retention_rate_30d=retention_rate(history, LONG_RETENTION_DAYS, now),
        average_ease_factor=average_ease_factor(cards),
        total_reviews_all_time=total_reviews(history),
        total_minutes_studied=total_minutes_studied(sessions),
        most_challenging_card_ids=[c.id for c in most_challenging_cards(cards)],
        overdue_card_ids=overdue_card_ids(cards, now),
        due_today=int(forecast.iloc[0]) if len(forecast) > 0 else 0,
        due_tomorrow=int(forecast.iloc[1]) if len(forecast) > 1 else 0,
        due_this_week=int(forecast.sum()),
    )


def build_study_dashboard(
    cards: list[Card],
    history: list[ReviewHistoryEntry],
    streak: StreakHistory,
    sessions: Optional[list[ReviewSession]] = None,
    now: Optional[datetime] = None,
    days: int = DEFAULT_WINDOW_DAYS,
    forecast_days: int = FORECAST_DAYS,
) -> StudyDashboardData:
    """
    Build all KPI values and series needed by the statistics page.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    sessions = sessions or []
    insights = compute_insights(cards, history, streak, sessions, now)
    recent_retention = insights.retention_rate_30d

    return StudyDashboardData(
        stats=compute_stats(cards, history, streak, now),
        insights=insights,
        review_counts_daily=rolling_review_counts(history, days, now),
        daily_records=daily_review_records(history, days, now),
        retention_daily=rolling_retention_rates(history, days, now),
        retention_smoothed=smoothed_retention_rates(history, days, now),
        forecast_daily=review_forecast(cards, forecast_days, now),
        study_minutes_daily=daily_study_minutes(sessions, days, now),
        category_breakdown=category_breakdown(cards),
        era_breakdown=era_breakdown(cards),
        coverage_gaps=coverage_gaps(cards),
        retention_target=TARGET_RETENTION_RATE,
        meets_retention_target=(
            recent_retention >= TARGET_RETENTION_RATE if recent_retention is not None else None
        ),
    )
