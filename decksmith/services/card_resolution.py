"""
Card reference resolution.

Every lookup of "which owned card is this?" goes through this module:
deck entry keys, suggestion names, and card lines of saved decks. Keeping
one resolution path is what guarantees a card identity never lands in a
deck twice.

Resolution order for persisted references: catalog identifier first, then
case-insensitive exact name (catalog name or imported fallback name).
There is no fuzzy matching.
"""

from collections.abc import Iterable

from decksmith.models.card import OwnedCard, card_match_key, normalize_name


class InventoryIndex:
    """
    Lookup tables over an inventory snapshot.

    When several owned cards share a name, the first one in inventory
    order wins.
    """

    def __init__(self, inventory: Iterable[OwnedCard]) -> None:
        self._cards: list[OwnedCard] = list(inventory)
        self._by_identifier: dict[str, OwnedCard] = {}
        self._by_name: dict[str, OwnedCard] = {}
        self._by_key: dict[str, OwnedCard] = {}

        for card in self._cards:
            if card.identity is not None:
                self._by_identifier.setdefault(card.identity.id, card)
                self._by_name.setdefault(normalize_name(card.identity.name), card)
            self._by_name.setdefault(normalize_name(card.fallback_name), card)
            self._by_key.setdefault(card_match_key(card), card)

    def __iter__(self):
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def by_identifier(self, identifier: str | None) -> OwnedCard | None:
        if not identifier:
            return None
        return self._by_identifier.get(identifier)

    def by_name(self, name: str | None) -> OwnedCard | None:
        if not name:
            return None
        return self._by_name.get(normalize_name(name))

    def by_key(self, key: str) -> OwnedCard | None:
        """Find a card by its deck match key."""
        return self._by_key.get(key)

    def resolve(self, identifier: str | None, name: str | None) -> OwnedCard | None:
        """Resolve a persisted reference: identifier first, then name."""
        card = self.by_identifier(identifier)
        if card is not None:
            return card
        return self.by_name(name)


def find_card_by_name(inventory: Iterable[OwnedCard], name: str) -> OwnedCard | None:
    """Find an owned card whose catalog or fallback name equals `name`."""
    return InventoryIndex(inventory).by_name(name)


def resolve_card_reference(
    inventory: Iterable[OwnedCard],
    identifier: str | None,
    name: str | None,
) -> OwnedCard | None:
    """Resolve a single persisted card reference against an inventory."""
    return InventoryIndex(inventory).resolve(identifier, name)
