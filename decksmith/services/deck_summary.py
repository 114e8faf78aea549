"""
Saved deck summaries.

Lightweight view of a saved deck for deck listings, measured against the
player's current collection:

- owned_percentage: share of card lines the collection fully covers
  (enough copies owned), rounded to a whole percent; 0 for an empty deck
- colors: union of the colors of the cards that still resolve
- primary_type: main type (text before the em dash) with the most copies

Lines that no longer resolve count as not owned and contribute no colors or
types. Without a collection, only the record itself is summarized.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from decksmith.models.card import OwnedCard
from decksmith.models.records import SavedDeckRecord
from decksmith.services.analytics import COLOR_ORDER
from decksmith.services.card_resolution import InventoryIndex

TYPE_SEPARATOR = "—"


@dataclass
class DeckSummary:
    record: SavedDeckRecord
    owned_percentage: int | None = None
    colors: list[str] = field(default_factory=list)
    primary_type: str | None = None


def main_type(type_line: str) -> str:
    """'Creature — Goblin Warrior' -> 'Creature'."""
    return type_line.split(TYPE_SEPARATOR)[0].strip()


def summarize_saved_deck(
    record: SavedDeckRecord,
    inventory: Iterable[OwnedCard] | None = None,
) -> DeckSummary:
    """Summarize one saved deck, against `inventory` when given."""
    if inventory is None:
        return DeckSummary(record=record)

    index = inventory if isinstance(inventory, InventoryIndex) else InventoryIndex(inventory)
    owned_lines = 0
    colors: set[str] = set()
    type_counts: dict[str, int] = {}

    for line in record.cards:
        card = index.resolve(line.card_identifier, line.fallback_name)
        if card is None:
            continue
        if card.owned_count >= line.count:
            owned_lines += 1
        colors.update(card.colors)
        card_type = main_type(card.type_line)
        if card_type:
            type_counts[card_type] = type_counts.get(card_type, 0) + line.count

    owned_percentage = 0
    if record.cards:
        owned_percentage = math.floor(owned_lines * 100 / len(record.cards) + 0.5)

    # max() keeps the first type seen on ties
    primary_type = max(type_counts, key=type_counts.__getitem__) if type_counts else None
    return DeckSummary(
        record=record,
        owned_percentage=owned_percentage,
        colors=[color for color in COLOR_ORDER if color in colors],
        primary_type=primary_type,
    )
