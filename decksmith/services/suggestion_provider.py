"""
Suggestion provider.

Asks Claude for cards to add to a deck, or to cut from it. The provider is opaque to deck
construction: it takes a free-text request plus deck context and returns
named-card suggestions, which are then resolved by the suggestion applier.

Provider failures are reported once and never retried.
"""

import json
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol

import anthropic
from anthropic.types import TextBlock
from pydantic import BaseModel, Field, ValidationError

from decksmith.config import settings
from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, DeckFormat
from decksmith.models.failure import FailureDetail, SuggestionProviderError
from decksmith.services.availability import available_inventory
from decksmith.services.suggestions import Suggestion, filter_suggestions

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n(.*?)\n```", re.DOTALL)


class SuggestionProvider(Protocol):
    """Anything that turns a deck request into card suggestions."""

    async def suggest(
        self,
        prompt: str,
        composition: Composition,
        available: Sequence[tuple[OwnedCard, int]],
        deck_format: DeckFormat,
    ) -> list[Suggestion]: ...


class _SuggestionItem(BaseModel):
    card_name: str = Field(..., alias="cardName", min_length=1)
    count: int = Field(default=1, ge=1)
    reason: str = ""
    action: Literal["add", "remove"] = "add"


class _SuggestionPayload(BaseModel):
    suggestions: list[_SuggestionItem] = Field(default_factory=list)


def _describe(card: OwnedCard) -> str:
    return f"{card.type_line or 'Unknown type'}, CMC {card.mana_value:g}"


def build_suggestion_prompt(
    prompt: str,
    composition: Composition,
    available: Sequence[tuple[OwnedCard, int]],
    deck_format: DeckFormat,
    inventory_limit: int,
) -> str:
    """Render the request text sent to the model."""
    deck_lines = [
        f"{entry.count}x {entry.card.display_name} ({_describe(entry.card)})"
        for entry in composition
    ]
    available_lines = [
        f"{card.display_name} ({_describe(card)}, Available: {remaining})"
        for card, remaining in available[:inventory_limit]
    ]
    if len(available) > inventory_limit:
        available_lines.append(f"...and {len(available) - inventory_limit} more cards")

    return f"""You are a Magic: The Gathering deck building expert. \
Help build a {deck_format.value} format deck.

USER REQUEST: {prompt}

CURRENT DECK ({composition.total_count()} cards):
{chr(10).join(deck_lines) if deck_lines else "Empty deck"}

AVAILABLE CARDS FROM COLLECTION:
{chr(10).join(available_lines)}

Suggest 5-10 changes based on the user's request: cards to add, and cards
from the current deck to remove.

Respond in JSON format:
{{"suggestions": [{{"action": "add", "cardName": "Exact card name", "count": 2, \
"reason": "Why it fits"}}]}}

IMPORTANT:
- Only add cards from the AVAILABLE CARDS list
- Only remove cards listed in the CURRENT DECK, with action "remove"
- Respect the 4-of limit (except basic lands)
- Consider mana curve and card synergies"""


def parse_suggestions(text: str) -> list[Suggestion]:
    """
    Parse the model's JSON reply, with or without a fenced code block.

    Raises:
        SuggestionProviderError: If the reply is not the expected JSON
    """
    match = _FENCED_JSON.search(text)
    json_text = match.group(1) if match else text.strip()
    try:
        payload = _SuggestionPayload.model_validate(json.loads(json_text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise SuggestionProviderError(
            "Could not read suggestions from the AI response.",
            detail=str(e),
        ) from e

    return [
        Suggestion(
            card_name=item.card_name,
            count=item.count,
            reason=item.reason,
            action=item.action,
        )
        for item in payload.suggestions
    ]


class AnthropicSuggestionProvider:
    """Suggestion provider backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        inventory_limit: int | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.max_tokens = max_tokens or settings.suggestion_max_tokens
        self.inventory_limit = inventory_limit or settings.suggestion_inventory_limit

    async def suggest(
        self,
        prompt: str,
        composition: Composition,
        available: Sequence[tuple[OwnedCard, int]],
        deck_format: DeckFormat,
    ) -> list[Suggestion]:
        """
        Request suggestions from Claude.

        Raises:
            SuggestionProviderError: If no API key is configured, the API call
                fails, or the response cannot be parsed
        """
        if not self.api_key:
            raise SuggestionProviderError("Anthropic API key not configured")

        content = build_suggestion_prompt(
            prompt, composition, available, deck_format, self.inventory_limit
        )
        try:
            async with anthropic.AsyncAnthropic(api_key=self.api_key) as client:
                response = await client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    messages=[{"role": "user", "content": content}],
                )
        except anthropic.APIError as e:
            raise SuggestionProviderError(e.message) from e

        text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
        return parse_suggestions(text)


@dataclass
class SuggestionRequestOutcome:
    """
    Suggestions ready to show, or why there are none.

    `filtered_count` counts provider suggestions dropped because the card
    is not in the collection.
    """

    suggestions: list[Suggestion] = field(default_factory=list)
    filtered_count: int = 0
    failure: FailureDetail | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


async def request_suggestions(
    provider: SuggestionProvider,
    prompt: str,
    composition: Composition,
    inventory: Iterable[OwnedCard],
) -> SuggestionRequestOutcome:
    """
    Ask a provider for suggestions and keep only cards the player owns.

    Only cards with copies still available are offered to the provider.
    A provider failure is returned in the outcome with its message intact.
    """
    cards = list(inventory)
    available = [
        (card, remaining)
        for card, remaining in available_inventory(cards, composition)
        if card.identity is not None
    ]

    try:
        raw = await provider.suggest(prompt, composition, available, composition.format)
    except SuggestionProviderError as e:
        logger.warning("Suggestion provider failed: %s", e.message)
        return SuggestionRequestOutcome(failure=e.to_detail())
    except Exception as e:
        logger.exception("Unexpected suggestion provider error")
        return SuggestionRequestOutcome(failure=SuggestionProviderError(str(e)).to_detail())

    suggestions, filtered = filter_suggestions(cards, raw)
    return SuggestionRequestOutcome(suggestions=suggestions, filtered_count=filtered)
