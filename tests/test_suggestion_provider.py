"""Tests for the Claude suggestion provider."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest
from anthropic.types import TextBlock

from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, DeckFormat
from decksmith.models.failure import FailureKind, SuggestionProviderError
from decksmith.services.composition_mutator import DEFAULT_MUTATOR
from decksmith.services.suggestion_provider import (
    AnthropicSuggestionProvider,
    build_suggestion_prompt,
    parse_suggestions,
    request_suggestions,
)
from decksmith.services.suggestions import Suggestion

SUGGESTION_JSON = json.dumps(
    {
        "suggestions": [
            {"cardName": "Lightning Bolt", "count": 4, "reason": "Cheap removal"},
            {"cardName": "Goblin Guide", "count": 4, "reason": "Fast clock"},
        ]
    }
)


def make_message(text: str) -> MagicMock:
    message = MagicMock()
    message.content = [TextBlock(type="text", text=text)]
    return message


def make_client(create: AsyncMock) -> MagicMock:
    """An AsyncAnthropic stand-in usable as an async context manager."""
    client = MagicMock()
    client.messages.create = create
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestParseSuggestions:
    def test_parses_plain_json(self) -> None:
        suggestions = parse_suggestions(SUGGESTION_JSON)

        assert suggestions == [
            Suggestion("Lightning Bolt", 4, "Cheap removal"),
            Suggestion("Goblin Guide", 4, "Fast clock"),
        ]

    def test_parses_fenced_json(self) -> None:
        text = f"Here are my picks:\n```json\n{SUGGESTION_JSON}\n```\nEnjoy!"

        suggestions = parse_suggestions(text)

        assert len(suggestions) == 2

    def test_count_defaults_to_one(self) -> None:
        suggestions = parse_suggestions('{"suggestions": [{"cardName": "Opt"}]}')

        assert suggestions == [Suggestion("Opt", 1, "")]

    def test_parses_remove_action(self) -> None:
        text = '{"suggestions": [{"action": "remove", "cardName": "Counterspell", "count": 2}]}'

        suggestions = parse_suggestions(text)

        assert suggestions == [Suggestion("Counterspell", 2, "", action="remove")]

    def test_unknown_action_raises(self) -> None:
        with pytest.raises(SuggestionProviderError):
            parse_suggestions('{"suggestions": [{"action": "swap", "cardName": "Opt"}]}')

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(SuggestionProviderError, match="Could not read suggestions"):
            parse_suggestions("I think you should play more burn spells.")

    def test_wrong_shape_raises(self) -> None:
        with pytest.raises(SuggestionProviderError):
            parse_suggestions('{"suggestions": [{"count": 2}]}')


class TestBuildSuggestionPrompt:
    def test_includes_deck_and_available_cards(
        self, deck: Composition, lightning_bolt: OwnedCard, counterspell: OwnedCard
    ) -> None:
        DEFAULT_MUTATOR.add(deck, lightning_bolt, 2)

        prompt = build_suggestion_prompt(
            "aggressive red",
            deck,
            [(lightning_bolt, 2), (counterspell, 2)],
            DeckFormat.HISTORIC,
            inventory_limit=100,
        )

        assert "USER REQUEST: aggressive red" in prompt
        assert "historic format" in prompt
        assert "2x Lightning Bolt" in prompt
        assert "Counterspell (Instant, CMC 2, Available: 2)" in prompt
        assert 'with action "remove"' in prompt

    def test_truncates_available_list(self, deck: Composition, card_factory) -> None:
        available = [(card_factory(f"Card {i}", 1), 1) for i in range(5)]

        prompt = build_suggestion_prompt("anything", deck, available, DeckFormat.STANDARD, 3)

        assert "Card 2" in prompt
        assert "Card 3" not in prompt
        assert "...and 2 more cards" in prompt
        assert "Empty deck" in prompt


class TestAnthropicSuggestionProvider:
    async def test_missing_api_key(self, deck: Composition) -> None:
        provider = AnthropicSuggestionProvider(api_key="")

        with pytest.raises(SuggestionProviderError, match="API key not configured"):
            await provider.suggest("burn", deck, [], DeckFormat.STANDARD)

    async def test_returns_parsed_suggestions(
        self, deck: Composition, lightning_bolt: OwnedCard
    ) -> None:
        mock_client = make_client(AsyncMock(return_value=make_message(SUGGESTION_JSON)))

        with patch(
            "decksmith.services.suggestion_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = AnthropicSuggestionProvider(api_key="test-key", model="test-model")
            suggestions = await provider.suggest(
                "burn", deck, [(lightning_bolt, 4)], DeckFormat.STANDARD
            )

        assert [s.card_name for s in suggestions] == ["Lightning Bolt", "Goblin Guide"]
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Lightning Bolt" in kwargs["messages"][0]["content"]
        mock_client.__aexit__.assert_awaited_once()

    async def test_api_error_keeps_message(self, deck: Composition) -> None:
        """The upstream error message is surfaced unchanged."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = anthropic.APIConnectionError(message="Connection refused", request=request)
        mock_client = make_client(AsyncMock(side_effect=error))

        with patch(
            "decksmith.services.suggestion_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = AnthropicSuggestionProvider(api_key="test-key")
            with pytest.raises(SuggestionProviderError) as exc_info:
                await provider.suggest("burn", deck, [], DeckFormat.STANDARD)

        assert exc_info.value.message == "Connection refused"
        mock_client.__aexit__.assert_awaited_once()


class TestRequestSuggestions:
    async def test_filters_unowned_cards(
        self, deck: Composition, inventory: list[OwnedCard], fake_provider
    ) -> None:
        provider = fake_provider
        provider.suggestions = [
            Suggestion("Lightning Bolt", 4),
            Suggestion("Ragavan, Nimble Pilferer", 4),
        ]

        outcome = await request_suggestions(provider, "burn", deck, inventory)

        assert outcome.ok
        assert [s.card_name for s in outcome.suggestions] == ["Lightning Bolt"]
        assert outcome.filtered_count == 1

    async def test_offers_only_available_matched_cards(
        self,
        deck: Composition,
        inventory: list[OwnedCard],
        counterspell: OwnedCard,
        fake_provider,
    ) -> None:
        """Exhausted and unmatched cards are not sent to the provider."""
        DEFAULT_MUTATOR.add(deck, counterspell, 2)
        provider = fake_provider

        await request_suggestions(provider, "anything", deck, inventory)

        offered = [card.display_name for card, _ in provider.calls[0]["available"]]
        assert "Counterspell" not in offered
        assert "Mystery Card" not in offered
        assert "Lightning Bolt" in offered

    async def test_provider_failure_reported(
        self, deck: Composition, inventory: list[OwnedCard], fake_provider
    ) -> None:
        provider = fake_provider
        provider.error = SuggestionProviderError("rate limited")

        outcome = await request_suggestions(provider, "burn", deck, inventory)

        assert not outcome.ok
        assert outcome.failure is not None
        assert outcome.failure.kind == FailureKind.SUGGESTION_PROVIDER_ERROR
        assert outcome.failure.message == "rate limited"
        assert outcome.suggestions == []

    async def test_unexpected_error_reported(
        self, deck: Composition, inventory: list[OwnedCard], fake_provider
    ) -> None:
        provider = fake_provider
        provider.error = RuntimeError("boom")

        outcome = await request_suggestions(provider, "burn", deck, inventory)

        assert outcome.failure is not None
        assert outcome.failure.message == "boom"
