"""Tests for format rules and availability."""

from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, DeckFormat
from decksmith.services.availability import available, available_inventory, in_deck
from decksmith.services.composition_mutator import DEFAULT_MUTATOR
from decksmith.services.format_rules import DEFAULT_RULES, FormatRules, is_legal, max_copies


class TestMaxCopies:
    def test_regular_card_limited_to_four(self, lightning_bolt: OwnedCard) -> None:
        assert max_copies(lightning_bolt, DeckFormat.STANDARD) == 4

    def test_basic_land_unbounded(self, mountain: OwnedCard) -> None:
        """Basic lands are exempt from the four-copy limit."""
        assert max_copies(mountain, DeckFormat.STANDARD) > 60

    def test_same_limit_in_every_format(self, lightning_bolt: OwnedCard) -> None:
        limits = {max_copies(lightning_bolt, deck_format) for deck_format in DeckFormat}

        assert limits == {4}

    def test_unmatched_card_is_not_basic_land(self, unmatched_card: OwnedCard) -> None:
        assert max_copies(unmatched_card, DeckFormat.STANDARD) == 4

    def test_custom_rules(self, lightning_bolt: OwnedCard) -> None:
        rules = FormatRules(max_copies_per_card=1)

        assert rules.max_copies(lightning_bolt, DeckFormat.CASUAL) == 1


class TestIsLegal:
    def test_empty_deck_not_legal(self, deck: Composition) -> None:
        assert is_legal(deck) is False

    def test_sixty_cards_is_legal(
        self, deck: Composition, lightning_bolt: OwnedCard, card_factory
    ) -> None:
        """Legality depends only on total size."""
        more_mountains = card_factory(
            "Mountain", 60, card_id="mountain", type_line="Basic Land — Mountain"
        )
        DEFAULT_MUTATOR.add(deck, lightning_bolt, 4)
        DEFAULT_MUTATOR.add(deck, more_mountains, 55)

        assert deck.total_count() == 59
        assert is_legal(deck) is False

        DEFAULT_MUTATOR.add(deck, more_mountains, 1)

        assert deck.total_count() == 60
        assert DEFAULT_RULES.is_legal(deck) is True


class TestAvailability:
    def test_available_is_owned_minus_in_deck(
        self, deck: Composition, lightning_bolt: OwnedCard
    ) -> None:
        DEFAULT_MUTATOR.add(deck, lightning_bolt, 3)

        assert in_deck(lightning_bolt, deck) == 3
        assert available(lightning_bolt, deck) == 1

    def test_absent_card_fully_available(
        self, deck: Composition, counterspell: OwnedCard
    ) -> None:
        assert in_deck(counterspell, deck) == 0
        assert available(counterspell, deck) == counterspell.owned_count

    def test_available_inventory_skips_exhausted_cards(
        self, deck: Composition, inventory: list[OwnedCard], counterspell: OwnedCard
    ) -> None:
        """Cards with every copy in the deck are not offered."""
        DEFAULT_MUTATOR.add(deck, counterspell, 2)

        remaining = {
            card.display_name: count for card, count in available_inventory(inventory, deck)
        }

        assert "Counterspell" not in remaining
        assert remaining["Lightning Bolt"] == 4
