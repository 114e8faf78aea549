"""
Availability tracking: owned copies not yet placed in the deck.
"""

from collections.abc import Iterable

from decksmith.models.card import OwnedCard, card_match_key
from decksmith.models.deck import Composition


def in_deck(card: OwnedCard, composition: Composition) -> int:
    """Copies of `card` currently in the deck (0 if absent)."""
    return composition.count_for_key(card_match_key(card))


def available(card: OwnedCard, composition: Composition) -> int:
    """
    Owned copies minus copies in the deck.

    Not clamped: callers may evaluate a hypothetical composition, and the
    mutator is what keeps real decks within ownership.
    """
    return card.owned_count - in_deck(card, composition)


def available_inventory(
    inventory: Iterable[OwnedCard],
    composition: Composition,
) -> list[tuple[OwnedCard, int]]:
    """Owned cards with at least one copy left, paired with that count."""
    result: list[tuple[OwnedCard, int]] = []
    for card in inventory:
        remaining = available(card, composition)
        if remaining > 0:
            result.append((card, remaining))
    return result
