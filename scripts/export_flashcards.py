"""
Export all flashcard data for one user as JSON.

Writes cards, packs, cached stats, review history, sessions and streak
history in a single versioned document.

Usage:
    python -m scripts.export_flashcards --output flashcards-backup.json
    python -m scripts.export_flashcards --user alice --store-url sqlite:///flashcards.db

Reads FLASHCARD_STORE_URL / DEFAULT_USER_ID from the environment when the
flags are omitted.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from flashcards.config import configure_logging
from flashcards.service import FlashcardService
from flashcards.store import open_store

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export flashcard data to JSON")
    parser.add_argument(
        "--output",
        "-o",
        default=f"ai-timeline-flashcards-{date.today().isoformat()}.json",
        help="Output file path ('-' for stdout)",
    )
    parser.add_argument("--user", default=None, help="User id (defaults to DEFAULT_USER_ID)")
    parser.add_argument("--store-url", default=None, help="Store URL (defaults to FLASHCARD_STORE_URL)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)

    service = FlashcardService(open_store(args.store_url, namespace=args.user))
    data = service.export_data()
    payload = json.dumps(data, indent=2)

    if args.output == "-":
        sys.stdout.write(payload + "\n")
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        summary = service.data_summary()
        print(f"✓ Exported {summary['total_cards']} cards, {summary['total_packs']} packs, "
              f"{summary['total_reviews']} reviews to {args.output}")
    logger.debug("Export finished for namespace %s", service.store.namespace)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
