from decksmith.models.card import (
    BASIC_LAND_MARKER,
    CardIdentity,
    OwnedCard,
    card_match_key,
    normalize_name,
)
from decksmith.models.deck import Composition, CompositionEntry, DeckFormat
from decksmith.models.failure import (
    ApiResponse,
    CardNotFoundError,
    FailureDetail,
    FailureKind,
    KnownError,
    LocalStoreError,
    OutcomeType,
    RemoteStoreError,
    SuggestionProviderError,
)
from decksmith.models.records import CardLine, RemoteDeck, SavedCardLine, SavedDeckRecord

__all__ = [
    "ApiResponse",
    "BASIC_LAND_MARKER",
    "CardIdentity",
    "CardLine",
    "CardNotFoundError",
    "Composition",
    "CompositionEntry",
    "DeckFormat",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "LocalStoreError",
    "OutcomeType",
    "OwnedCard",
    "RemoteDeck",
    "RemoteStoreError",
    "SavedCardLine",
    "SavedDeckRecord",
    "SuggestionProviderError",
    "card_match_key",
    "normalize_name",
]
