"""
Spaced-repetition flashcard core for the AI timeline study center.

Packages:
- flashcards.sm2: SM-2 scheduling, due selection and mastery
- flashcards.analytics: statistics derived from cards and review history
- flashcards.store: whole-collection key-value persistence backends
"""

__version__ = "0.1.0"
