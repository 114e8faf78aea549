"""Tests for Arena deck export."""

import pytest

from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, CompositionEntry
from decksmith.services.arena_formatter import (
    ExportError,
    _format_card_line,
    format_deck_for_arena,
)
from decksmith.services.composition_mutator import DEFAULT_MUTATOR


class TestFormatDeckForArena:
    def test_formats_deck(
        self,
        deck: Composition,
        lightning_bolt: OwnedCard,
        counterspell: OwnedCard,
        mountain: OwnedCard,
        sample_arena_export: str,
    ) -> None:
        """Set codes are upper-cased and collector numbers lose leading zeros."""
        DEFAULT_MUTATOR.add(deck, lightning_bolt, 4)
        DEFAULT_MUTATOR.add(deck, counterspell, 2)
        DEFAULT_MUTATOR.add(deck, mountain, 20)

        assert format_deck_for_arena(deck) == sample_arena_export

    def test_skips_cards_without_printing_data(
        self, deck: Composition, lightning_bolt: OwnedCard, unmatched_card: OwnedCard
    ) -> None:
        DEFAULT_MUTATOR.add(deck, lightning_bolt, 4)
        DEFAULT_MUTATOR.add(deck, unmatched_card, 2)

        lines = format_deck_for_arena(deck).split("\n")

        assert lines == ["Deck", "4 Lightning Bolt (M11) 149"]

    def test_all_zero_collector_number(self, deck: Composition, card_factory) -> None:
        card = card_factory("Promo Card", 1, set_code="pza", collector_number="000")
        DEFAULT_MUTATOR.add(deck, card, 1)

        assert format_deck_for_arena(deck).endswith("1 Promo Card (PZA) 0")

    def test_empty_deck_raises(self, deck: Composition) -> None:
        with pytest.raises(ExportError):
            format_deck_for_arena(deck)

    def test_nothing_exportable_raises(
        self, deck: Composition, unmatched_card: OwnedCard, card_factory
    ) -> None:
        """A deck of cards without set data cannot be exported."""
        no_set = card_factory("Token Maker", 2, set_code=None)
        DEFAULT_MUTATOR.add(deck, unmatched_card, 1)
        DEFAULT_MUTATOR.add(deck, no_set, 1)

        with pytest.raises(ExportError, match="No cards"):
            format_deck_for_arena(deck)

    def test_line_without_printing_data_raises(self, unmatched_card: OwnedCard) -> None:
        entry = CompositionEntry(card=unmatched_card, count=1)

        with pytest.raises(ExportError, match="Mystery Card"):
            _format_card_line(entry)
