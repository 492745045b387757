"""
Pack and collection helpers.

Pure list-in/list-out operations on cards and packs (no storage calls).
System packs ("All Cards", "Recently Added") are protected: they cannot be
deleted or renamed and cards cannot be removed from them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from flashcards.constants import DEFAULT_PACKS, PACK_COLORS
from flashcards.dates import utc_now
from flashcards.exceptions import CardNotFoundError, DefaultPackError, PackNotFoundError
from flashcards.schemas import Card, Pack, SourceType


def create_default_packs(now: Optional[datetime] = None) -> list[Pack]:
    if now is None:
        now = utc_now()
    return [
        Pack(name=name, color=color, is_default=True, created_at=now)
        for name, color in DEFAULT_PACKS
    ]


def ensure_default_packs(packs: list[Pack], now: Optional[datetime] = None) -> list[Pack]:
    """Return packs with any missing system pack prepended."""
    existing = {p.name for p in packs if p.is_default}
    missing = [p for p in create_default_packs(now) if p.name not in existing]
    return missing + list(packs)


def default_pack_ids(packs: list[Pack]) -> list[str]:
    return [p.id for p in packs if p.is_default]


def next_pack_color(packs: list[Pack]) -> str:
    """Cycle through the fixed palette by pack count."""
    return PACK_COLORS[len(packs) % len(PACK_COLORS)]


def find_pack(packs: list[Pack], pack_id: str) -> Pack:
    for pack in packs:
        if pack.id == pack_id:
            return pack
    raise PackNotFoundError(pack_id)


def find_pack_by_name(packs: list[Pack], name: str) -> Optional[Pack]:
    for pack in packs:
        if pack.name == name:
            return pack
    return None


def find_card(cards: list[Card], card_id: str) -> Card:
    for card in cards:
        if card.id == card_id:
            return card
    raise CardNotFoundError(card_id)


def find_card_by_source(
    cards: list[Card],
    source_type: SourceType | str,
    source_id: str,
) -> Optional[Card]:
    source_type = SourceType(source_type)
    for card in cards:
        if card.source_type == source_type and card.source_id == source_id:
            return card
    return None


def cards_in_pack(cards: list[Card], pack_id: Optional[str]) -> list[Card]:
    """Cards belonging to a pack, or every card when pack_id is None."""
    if pack_id is None:
        return list(cards)
    return [c for c in cards if pack_id in c.pack_ids]


def create_pack(
    packs: list[Pack],
    name: str,
    description: Optional[str] = None,
    color: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Pack:
    """Build a new user pack. The caller appends it to the collection."""
    if now is None:
        now = utc_now()
    return Pack(
        name=name.strip(),
        description=description,
        color=color or next_pack_color(packs),
        is_default=False,
        created_at=now,
    )


def rename_pack(packs: list[Pack], pack_id: str, name: str) -> list[Pack]:
    pack = find_pack(packs, pack_id)
    if pack.is_default:
        raise DefaultPackError(pack_id, "System packs cannot be renamed")
    renamed = Pack.model_validate({**pack.model_dump(), "name": name.strip()})
    return [renamed if p.id == pack_id else p for p in packs]


def delete_pack(
    packs: list[Pack],
    cards: list[Card],
    pack_id: str,
) -> Tuple[list[Pack], list[Card]]:
    """
    Remove a user pack and strip its id from every card.

    Cards themselves are never deleted.

    Returns:
        Tuple of (remaining_packs, updated_cards)
    """
    pack = find_pack(packs, pack_id)
    if pack.is_default:
        raise DefaultPackError(pack_id, "System packs cannot be deleted")
    remaining = [p for p in packs if p.id != pack_id]
    updated = [
        c.model_copy(update={"pack_ids": [pid for pid in c.pack_ids if pid != pack_id]})
        if pack_id in c.pack_ids else c
        for c in cards
    ]
    return remaining, updated


def add_card_to_pack(
    packs: list[Pack],
    cards: list[Card],
    card_id: str,
    pack_id: str,
) -> list[Card]:
    find_pack(packs, pack_id)
    card = find_card(cards, card_id)
    if pack_id in card.pack_ids:
        return list(cards)
    updated = card.model_copy(update={"pack_ids": card.pack_ids + [pack_id]})
    return [updated if c.id == card_id else c for c in cards]


def remove_card_from_pack(
    packs: list[Pack],
    cards: list[Card],
    card_id: str,
    pack_id: str,
) -> list[Card]:
    pack = find_pack(packs, pack_id)
    if pack.is_default:
        raise DefaultPackError(pack_id, "Cards cannot be removed from system packs")
    card = find_card(cards, card_id)
    updated = card.model_copy(update={"pack_ids": [pid for pid in card.pack_ids if pid != pack_id]})
    return [updated if c.id == card_id else c for c in cards]
