"""
Format rules.

Pure policy answering two questions: how many copies of a card a deck may
hold, and whether a deck is legal. The shipped policy is the same for every
format: four copies per card, basic lands unbounded, 60-card minimum.
"""

from dataclasses import dataclass

from decksmith.config import DEFAULT_MAX_COPIES, MIN_DECK_SIZE, UNBOUNDED_COPIES
from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, DeckFormat


@dataclass(frozen=True, slots=True)
class FormatRules:
    """Copy limits and minimum deck size."""

    max_copies_per_card: int = DEFAULT_MAX_COPIES
    basic_land_copies: int = UNBOUNDED_COPIES
    min_deck_size: int = MIN_DECK_SIZE

    def max_copies(self, card: OwnedCard, deck_format: DeckFormat) -> int:
        """
        Maximum legal copies of `card` in a deck of `deck_format`.

        Basic lands are exempt from the copy limit.
        """
        if card.is_basic_land:
            return self.basic_land_copies
        return self.max_copies_per_card

    def is_legal(self, composition: Composition) -> bool:
        """True if the deck meets the minimum size."""
        return composition.total_count() >= self.min_deck_size


DEFAULT_RULES = FormatRules()


def max_copies(card: OwnedCard, deck_format: DeckFormat) -> int:
    return DEFAULT_RULES.max_copies(card, deck_format)


def is_legal(composition: Composition) -> bool:
    return DEFAULT_RULES.is_legal(composition)
