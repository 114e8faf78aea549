"""
Deck-building workspaces.

A workspace pairs one player's inventory snapshot with the deck being built
from it. The registry is owned by the application instance; nothing here is
module-level state.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, DeckFormat
from decksmith.models.failure import CardNotFoundError
from decksmith.services.card_resolution import InventoryIndex


@dataclass
class DeckWorkspace:
    """An inventory plus the deck under construction."""

    id: str
    inventory: InventoryIndex
    composition: Composition

    def find_card(self, card_key: str | None = None, card_name: str | None = None) -> OwnedCard:
        """
        Find an owned card by deck match key or by name.

        Raises:
            CardNotFoundError: If neither reference resolves
        """
        card = None
        if card_key:
            card = self.inventory.by_key(card_key)
        if card is None and card_name:
            card = self.inventory.by_name(card_name)
        if card is None:
            raise CardNotFoundError(card_name or card_key or "")
        return card


class WorkspaceRegistry:
    """Open workspaces by id."""

    def __init__(self) -> None:
        self._workspaces: dict[str, DeckWorkspace] = {}

    def create(
        self,
        inventory: Iterable[OwnedCard],
        name: str = "My Deck",
        deck_format: DeckFormat = DeckFormat.STANDARD,
    ) -> DeckWorkspace:
        workspace = DeckWorkspace(
            id=uuid.uuid4().hex,
            inventory=InventoryIndex(inventory),
            composition=Composition(name=name, format=deck_format),
        )
        self._workspaces[workspace.id] = workspace
        return workspace

    def get(self, workspace_id: str) -> DeckWorkspace | None:
        return self._workspaces.get(workspace_id)

    def close(self, workspace_id: str) -> bool:
        return self._workspaces.pop(workspace_id, None) is not None

    def __len__(self) -> int:
        return len(self._workspaces)
