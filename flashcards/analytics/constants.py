"""
Constants for flashcard statistics: windows, source labels and AI eras.
"""

from __future__ import annotations

from typing import Final

from flashcards.analytics.types import EraDefinition


DEFAULT_WINDOW_DAYS: Final[int] = 30
FORECAST_DAYS: Final[int] = 7
SHORT_RETENTION_DAYS: Final[int] = 7
LONG_RETENTION_DAYS: Final[int] = 30

# Centred smoothing window: this many days either side of each day
RETENTION_SMOOTHING_HALF_WINDOW: Final[int] = 3

CHALLENGING_CARD_LIMIT: Final[int] = 5
TARGET_RETENTION_RATE: Final[float] = 0.85

SOURCE_TYPE_LABELS: Final[dict[str, str]] = {
    "milestone": "Milestones",
    "concept": "Concepts",
    "custom": "Custom",
    "flashcard": "Flashcards",
}

# Milestone ids encode their year, e.g. E2017_TRANSFORMER
MILESTONE_YEAR_PATTERN: Final[str] = r"^E(\d{4})_"

AI_ERAS: Final[list[EraDefinition]] = [
    EraDefinition("foundations", "Foundations", 1940, 1955),
    EraDefinition("birth_of_ai", "Birth of AI", 1956, 1969),
    EraDefinition("symbolic_expert", "Symbolic & Expert", 1970, 1987),
    EraDefinition("winters_statistical", "Statistical ML", 1988, 2011),
    EraDefinition("deep_learning", "Deep Learning", 2012, 2016),
    EraDefinition("transformers", "Transformers", 2017, 2019),
    EraDefinition("scaling_llms", "Scaling LLMs", 2020, 2021),
    EraDefinition("alignment", "Alignment Era", 2022, 2023),
    EraDefinition("multimodal", "Multimodal", 2024, None),  # open-ended
]
