"""
Reset all flashcard data for one user.

DANGEROUS: This deletes all cards, review history, sessions and streaks!
System packs are re-created afterwards.

Usage:
    python -m scripts.reset_flashcard_data
    python -m scripts.reset_flashcard_data --user alice --yes
"""

from __future__ import annotations

import argparse

from flashcards.config import configure_logging
from flashcards.service import FlashcardService
from flashcards.store import open_store


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Reset all flashcard data")
    parser.add_argument("--user", default=None, help="User id (defaults to DEFAULT_USER_ID)")
    parser.add_argument("--store-url", default=None, help="Store URL (defaults to FLASHCARD_STORE_URL)")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args(argv)

    configure_logging()
    service = FlashcardService(open_store(args.store_url, namespace=args.user))
    summary = service.data_summary()

    print("=" * 60)
    print("WARNING: Reset Flashcard Data")
    print("=" * 60)
    print()
    print(f"This will DELETE all data for user '{service.store.namespace}':")
    print(f"  - {summary['total_cards']} cards")
    print(f"  - {summary['total_reviews']} review history entries")
    print(f"  - {summary['total_sessions']} study sessions")
    print(f"  - streak history (longest streak: {summary['streak_days']} days)")
    print()

    if args.yes:
        response = "yes"
    else:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting flashcard data...")
        service.reset_all()
        print("✓ Reset complete!")
        print("\nThe 'All Cards' and 'Recently Added' packs are ready for new cards.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
