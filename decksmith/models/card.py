"""
Card models.

CardIdentity is the catalog's canonical key for a printing. OwnedCard is an
inventory line: a possibly-unmatched card with its owned quantity.

INVARIANTS:
- Both models are frozen (the inventory is read-only to deck construction)
- fallback_name is always present; it names the card when identity is None
"""

from dataclasses import dataclass

BASIC_LAND_MARKER = "Basic Land"


@dataclass(frozen=True, slots=True)
class CardIdentity:
    """
    Catalog-backed identity of a card printing.

    Attributes:
        id: Stable catalog identifier (Scryfall id)
        name: Canonical display name
        mana_cost: Mana cost string (e.g., "{2}{U}{U}")
        cmc: Converted mana cost
        type_line: Full type line (e.g., "Basic Land — Island")
        colors: Tuple of color letters (W, U, B, R, G)
        rarity: common, uncommon, rare or mythic
        set_code: Set code of the printing (e.g., "grn")
        collector_number: Collector number within the set
    """

    id: str
    name: str
    mana_cost: str | None = None
    cmc: float | None = None
    type_line: str | None = None
    colors: tuple[str, ...] = ()
    rarity: str | None = None
    set_code: str | None = None
    collector_number: str | None = None


@dataclass(frozen=True, slots=True)
class OwnedCard:
    """
    A card from the player's inventory.

    Attributes:
        identity: Catalog match, or None when matching failed
        fallback_name: Name as imported; used whenever identity is None
        owned_count: Total copies owned
    """

    identity: CardIdentity | None
    fallback_name: str
    owned_count: int = 0

    @property
    def display_name(self) -> str:
        """Catalog name when matched, otherwise the imported name."""
        if self.identity is not None:
            return self.identity.name
        return self.fallback_name

    @property
    def card_identifier(self) -> str | None:
        return self.identity.id if self.identity is not None else None

    @property
    def type_line(self) -> str:
        if self.identity is None:
            return ""
        return self.identity.type_line or ""

    @property
    def mana_value(self) -> float:
        """Converted mana cost; unknown counts as 0."""
        if self.identity is None or self.identity.cmc is None:
            return 0
        return self.identity.cmc

    @property
    def colors(self) -> tuple[str, ...]:
        return self.identity.colors if self.identity is not None else ()

    @property
    def is_basic_land(self) -> bool:
        return BASIC_LAND_MARKER in self.type_line


def normalize_name(name: str) -> str:
    """Normalize a card name for case-insensitive comparison."""
    return name.strip().casefold()


def card_match_key(card: OwnedCard) -> str:
    """
    Key identifying a card within a deck.

    The catalog id when the card is matched, otherwise the case-folded
    fallback name. Two owned cards with the same identity share a key.
    """
    if card.identity is not None:
        return f"id:{card.identity.id}"
    return f"name:{normalize_name(card.fallback_name)}"
