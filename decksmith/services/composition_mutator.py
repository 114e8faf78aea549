"""
Composition mutator.

The only code that changes a deck's entries.

INVARIANT: every entry satisfies 1 <= count <= min(max_copies, owned_count).
INVARIANT: at most one entry per card match key.

Requests are clamped, never rejected. Asking for more copies than owned or
than the format allows applies the largest legal amount; each operation
returns the resulting count so callers can report "requested N, applied M".

Each operation computes the new count first and then commits it with a
single dict assignment or deletion, so a deck is never observed half-updated.
"""

import logging

from decksmith.models.card import OwnedCard, card_match_key
from decksmith.models.deck import Composition, CompositionEntry
from decksmith.services.format_rules import DEFAULT_RULES, FormatRules

logger = logging.getLogger(__name__)


class CompositionMutator:
    """Add, remove, set-count and clear operations over a Composition."""

    def __init__(self, rules: FormatRules = DEFAULT_RULES) -> None:
        self.rules = rules

    def limit_for(self, card: OwnedCard, composition: Composition) -> int:
        """Largest count this card may reach in this deck."""
        return min(self.rules.max_copies(card, composition.format), card.owned_count)

    def add(self, composition: Composition, card: OwnedCard, requested: int = 1) -> int:
        """
        Add copies of a card, clamped to the copy limit and ownership.

        Adding a card whose identity is already in the deck updates that
        entry. A clamp to zero (e.g. nothing owned) is a silent no-op.

        Returns:
            The card's count in the deck after the operation.
        """
        key = card_match_key(card)
        existing = composition.entries.get(key)
        current = existing.count if existing is not None else 0

        if requested <= 0:
            return current

        new_count = min(current + requested, self.limit_for(card, composition))
        if new_count <= 0:
            return current

        composition.entries[key] = CompositionEntry(card=card, count=new_count)
        if new_count < current + requested:
            logger.debug(
                "Clamped %s: requested %d more, applied %d",
                card.display_name,
                requested,
                new_count - current,
            )
        return new_count

    def remove(self, composition: Composition, card: OwnedCard, requested: int = 1) -> int:
        """
        Remove copies of a card; the entry disappears when it reaches zero.

        Returns:
            The card's count in the deck after the operation.
        """
        key = card_match_key(card)
        existing = composition.entries.get(key)
        if existing is None:
            return 0
        if requested <= 0:
            return existing.count

        new_count = existing.count - requested
        if new_count <= 0:
            del composition.entries[key]
            return 0

        composition.entries[key] = CompositionEntry(card=existing.card, count=new_count)
        return new_count

    def set_count(self, composition: Composition, card: OwnedCard, count: int) -> int:
        """
        Set a card's count, clamped to the copy limit and ownership.

        A count <= 0 removes the entry.

        Returns:
            The card's count in the deck after the operation.
        """
        key = card_match_key(card)
        if count <= 0:
            composition.entries.pop(key, None)
            return 0

        clamped = min(count, self.limit_for(card, composition))
        if clamped <= 0:
            composition.entries.pop(key, None)
            return 0

        composition.entries[key] = CompositionEntry(card=card, count=clamped)
        return clamped

    def clear(self, composition: Composition) -> None:
        """
        Remove every entry.

        The saved-deck association (remote_id) is kept: discarding it is a
        separate action.
        """
        composition.entries = {}


DEFAULT_MUTATOR = CompositionMutator()
