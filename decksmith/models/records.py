"""
Serialized deck shapes.

CardLine is one card of a remote deck record; SavedDeckRecord is one deck in
the local fallback cache. Both are plain projections with no reference back
to a live Composition, and both round-trip losslessly through JSON.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from decksmith.models.deck import DeckFormat


class CardLine(BaseModel):
    """A card line as stored remotely."""

    model_config = ConfigDict(frozen=True)

    card_identifier: str | None = None
    card_name: str
    quantity: int = Field(..., ge=1)
    mana_cost: str | None = None
    cmc: float | None = None
    type_line: str | None = None
    colors: list[str] | None = None
    rarity: str | None = None
    set_code: str | None = None


class RemoteDeck(BaseModel):
    """A deck as fetched from the remote store."""

    id: str
    name: str
    format: DeckFormat
    cards: list[CardLine] = Field(default_factory=list)


class SavedCardLine(BaseModel):
    """A card line in the local fallback cache."""

    model_config = ConfigDict(frozen=True)

    card_identifier: str | None = None
    fallback_name: str
    count: int = Field(..., ge=1)


class SavedDeckRecord(BaseModel):
    """One deck snapshot in the local fallback cache."""

    id: str
    name: str
    format: DeckFormat
    cards: list[SavedCardLine] = Field(default_factory=list)
    total_count: int = 0
    created_at: datetime
    updated_at: datetime
