"""
Suggestion applier.

Maps named-card suggestions onto the inventory and feeds them through the
composition mutator exactly like a user-initiated add or remove.

A suggestion naming a card the player does not own is reported as
CARD_NOT_FOUND and changes nothing; so is a removal of a card that is not in
the deck (NOT_IN_DECK). It never raises.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition
from decksmith.models.failure import CardNotFoundError, FailureDetail, FailureKind, KnownError
from decksmith.services.availability import in_deck
from decksmith.services.card_resolution import InventoryIndex
from decksmith.services.composition_mutator import DEFAULT_MUTATOR, CompositionMutator

logger = logging.getLogger(__name__)

SuggestionAction = Literal["add", "remove"]


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A recommendation to add or remove `count` copies of a named card."""

    card_name: str
    count: int
    reason: str = ""
    action: SuggestionAction = "add"


class SuggestionStatus(str, Enum):
    APPLIED = "applied"
    CARD_NOT_FOUND = "card_not_found"
    NOT_IN_DECK = "not_in_deck"


@dataclass(frozen=True, slots=True)
class SuggestionResult:
    """
    Outcome of applying one suggestion.

    `applied` is the number of copies actually added or removed. For an add
    it is below `suggestion.count` when the copy limit or ownership clamped
    it; for a removal, when the deck held fewer copies.
    """

    suggestion: Suggestion
    status: SuggestionStatus
    card: OwnedCard | None = None
    applied: int = 0
    failure: FailureDetail | None = None

    @property
    def resolved(self) -> bool:
        return self.status == SuggestionStatus.APPLIED


@dataclass
class SuggestionReport:
    """Outcome of applying a batch of suggestions."""

    results: list[SuggestionResult] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        """Total copies added or removed across all suggestions."""
        return sum(result.applied for result in self.results)

    @property
    def unresolved_count(self) -> int:
        return sum(1 for result in self.results if not result.resolved)

    @property
    def unresolved(self) -> list[Suggestion]:
        return [result.suggestion for result in self.results if not result.resolved]


def _index(inventory: Iterable[OwnedCard]) -> InventoryIndex:
    if isinstance(inventory, InventoryIndex):
        return inventory
    return InventoryIndex(inventory)


def apply_suggestion(
    composition: Composition,
    inventory: Iterable[OwnedCard],
    suggestion: Suggestion,
    mutator: CompositionMutator = DEFAULT_MUTATOR,
) -> SuggestionResult:
    """
    Apply one suggestion to the deck.

    The card is found by exact, case-insensitive name (catalog or fallback),
    then added or removed through the mutator.
    """
    card = _index(inventory).by_name(suggestion.card_name)
    if card is None:
        logger.warning("Suggested card not in collection: %s", suggestion.card_name)
        return SuggestionResult(
            suggestion=suggestion,
            status=SuggestionStatus.CARD_NOT_FOUND,
            failure=CardNotFoundError(suggestion.card_name).to_detail(),
        )

    before = in_deck(card, composition)
    if suggestion.action == "remove":
        if before == 0:
            logger.warning("Suggested removal of a card not in the deck: %s", suggestion.card_name)
            return SuggestionResult(
                suggestion=suggestion,
                status=SuggestionStatus.NOT_IN_DECK,
                card=card,
                failure=KnownError(
                    kind=FailureKind.NOT_FOUND,
                    message=f"Card '{card.display_name}' is not in the deck.",
                    status_code=404,
                ).to_detail(),
            )
        after = mutator.remove(composition, card, suggestion.count)
        applied = before - after
    else:
        after = mutator.add(composition, card, suggestion.count)
        applied = after - before

    return SuggestionResult(
        suggestion=suggestion,
        status=SuggestionStatus.APPLIED,
        card=card,
        applied=applied,
    )


def apply_suggestions(
    composition: Composition,
    inventory: Iterable[OwnedCard],
    suggestions: Sequence[Suggestion],
    mutator: CompositionMutator = DEFAULT_MUTATOR,
) -> SuggestionReport:
    """Apply suggestions in order; unresolved ones are reported, not raised."""
    index = _index(inventory)
    report = SuggestionReport()
    for suggestion in suggestions:
        report.results.append(apply_suggestion(composition, index, suggestion, mutator))
    return report


def filter_suggestions(
    inventory: Iterable[OwnedCard],
    suggestions: Sequence[Suggestion],
) -> tuple[list[Suggestion], int]:
    """
    Drop suggestions for cards not in the collection.

    Returns:
        Tuple of (resolvable suggestions, number filtered out)
    """
    index = _index(inventory)
    valid = [s for s in suggestions if index.by_name(s.card_name) is not None]
    filtered = len(suggestions) - len(valid)
    if filtered:
        logger.warning("Filtered out %d suggestions not in the collection", filtered)
    return valid, filtered
