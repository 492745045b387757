"""
Analytics package exports.
"""

from flashcards.analytics.constants import AI_ERAS, SOURCE_TYPE_LABELS, TARGET_RETENTION_RATE
from flashcards.analytics.metrics import (
    category_breakdown,
    coverage_gaps,
    daily_review_records,
    era_breakdown,
    retention_rate,
    retention_trend,
    review_forecast,
    rolling_retention_rates,
    rolling_review_counts,
    smoothed_retention_rates,
)
from flashcards.analytics.service import build_study_dashboard, compute_insights, compute_stats
from flashcards.analytics.types import ComputedInsights, EraDefinition, StudyDashboardData

__all__ = [
    "AI_ERAS",
    "SOURCE_TYPE_LABELS",
    "TARGET_RETENTION_RATE",
    "category_breakdown",
    "coverage_gaps",
    "daily_review_records",
    "era_breakdown",
    "retention_rate",
    "retention_trend",
    "review_forecast",
    "rolling_retention_rates",
    "rolling_review_counts",
    "smoothed_retention_rates",
    "build_study_dashboard",
    "compute_insights",
    "compute_stats",
    "ComputedInsights",
    "EraDefinition",
    "StudyDashboardData",
]
