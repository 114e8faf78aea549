"""
DeckSmith services.

Business logic for deck building, analytics, suggestions and persistence.
"""

from decksmith.services.analytics import (
    DeckStatistics,
    cards_at_mana_value,
    color_distribution,
    deck_statistics,
    group_by_type,
    mana_curve,
)
from decksmith.services.arena_formatter import ExportError, format_deck_for_arena
from decksmith.services.availability import available, available_inventory, in_deck
from decksmith.services.card_resolution import InventoryIndex
from decksmith.services.composition_mutator import DEFAULT_MUTATOR, CompositionMutator
from decksmith.services.deck_summary import DeckSummary, summarize_saved_deck
from decksmith.services.format_rules import DEFAULT_RULES, FormatRules, is_legal, max_copies
from decksmith.services.reconciler import (
    DeleteOutcome,
    LoadOutcome,
    PersistenceReconciler,
    SaveOutcome,
)
from decksmith.services.suggestion_provider import (
    AnthropicSuggestionProvider,
    SuggestionProvider,
    request_suggestions,
)
from decksmith.services.suggestions import (
    Suggestion,
    SuggestionReport,
    SuggestionResult,
    SuggestionStatus,
    apply_suggestion,
    apply_suggestions,
    filter_suggestions,
)
from decksmith.services.workspace import DeckWorkspace, WorkspaceRegistry

__all__ = [
    "DEFAULT_MUTATOR",
    "DEFAULT_RULES",
    "AnthropicSuggestionProvider",
    "CompositionMutator",
    "DeckStatistics",
    "DeckSummary",
    "DeckWorkspace",
    "DeleteOutcome",
    "ExportError",
    "FormatRules",
    "InventoryIndex",
    "LoadOutcome",
    "PersistenceReconciler",
    "SaveOutcome",
    "Suggestion",
    "SuggestionProvider",
    "SuggestionReport",
    "SuggestionResult",
    "SuggestionStatus",
    "WorkspaceRegistry",
    "apply_suggestion",
    "apply_suggestions",
    "available",
    "available_inventory",
    "cards_at_mana_value",
    "color_distribution",
    "deck_statistics",
    "filter_suggestions",
    "format_deck_for_arena",
    "group_by_type",
    "in_deck",
    "is_legal",
    "mana_curve",
    "max_copies",
    "request_suggestions",
    "summarize_saved_deck",
]
