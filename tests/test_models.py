"""Tests for card, deck and record models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from decksmith.models.card import OwnedCard, card_match_key, normalize_name
from decksmith.models.deck import Composition, CompositionEntry, DeckFormat
from decksmith.models.records import CardLine, SavedDeckRecord


class TestOwnedCard:
    def test_matched_card_uses_catalog_data(self, lightning_bolt: OwnedCard) -> None:
        assert lightning_bolt.display_name == "Lightning Bolt"
        assert lightning_bolt.card_identifier == "lightning-bolt"
        assert lightning_bolt.mana_value == 1
        assert lightning_bolt.colors == ("R",)

    def test_unmatched_card_defaults(self, unmatched_card: OwnedCard) -> None:
        """Unmatched cards fall back to their imported name and count as 0 mana."""
        assert unmatched_card.display_name == "Mystery Card"
        assert unmatched_card.card_identifier is None
        assert unmatched_card.mana_value == 0
        assert unmatched_card.type_line == ""
        assert unmatched_card.colors == ()

    def test_basic_land_detection(self, mountain: OwnedCard, card_factory) -> None:
        nonbasic = card_factory("Sacred Foundry", 4, type_line="Land — Mountain Plains")

        assert mountain.is_basic_land
        assert not nonbasic.is_basic_land

    def test_owned_card_is_frozen(self, lightning_bolt: OwnedCard) -> None:
        with pytest.raises(AttributeError):
            lightning_bolt.owned_count = 10  # type: ignore[misc]


class TestMatchKey:
    def test_identity_key(self, lightning_bolt: OwnedCard) -> None:
        assert card_match_key(lightning_bolt) == "id:lightning-bolt"

    def test_name_key_is_case_folded(self, unmatched_card: OwnedCard) -> None:
        assert card_match_key(unmatched_card) == "name:mystery card"

    def test_normalize_name(self) -> None:
        assert normalize_name("  Lightning BOLT ") == "lightning bolt"


class TestComposition:
    def test_defaults(self) -> None:
        deck = Composition()

        assert deck.name == "My Deck"
        assert deck.format == DeckFormat.STANDARD
        assert deck.total_count() == 0
        assert deck.remote_id is None

    def test_snapshot_is_detached(self, lightning_bolt: OwnedCard) -> None:
        deck = Composition()
        deck.entries["id:lightning-bolt"] = CompositionEntry(card=lightning_bolt, count=2)

        snapshot = deck.snapshot()
        deck.entries.clear()

        assert len(snapshot) == 1
        assert snapshot[0].count == 2


class TestRecords:
    def test_card_line_rejects_zero_quantity(self) -> None:
        with pytest.raises(ValidationError):
            CardLine(card_name="Lightning Bolt", quantity=0)

    def test_saved_record_json_round_trip(self) -> None:
        now = datetime(2024, 6, 1, tzinfo=UTC)
        record = SavedDeckRecord(
            id="local-1",
            name="Mono Red",
            format=DeckFormat.CASUAL,
            created_at=now,
            updated_at=now,
        )

        assert SavedDeckRecord.model_validate_json(record.model_dump_json()) == record
