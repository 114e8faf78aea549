from dataclasses import dataclass, field
from enum import Enum

from decksmith.models.card import OwnedCard


class DeckFormat(str, Enum):
    """Constructed formats a deck can be built for."""

    STANDARD = "standard"
    HISTORIC = "historic"
    EXPLORER = "explorer"
    CASUAL = "casual"


@dataclass(frozen=True, slots=True)
class CompositionEntry:
    """A card placed in a deck with its copy count (always >= 1)."""

    card: OwnedCard
    count: int


@dataclass
class Composition:
    """
    The deck being built.

    Entries are keyed by card_match_key, so a card identity appears at
    most once. Only the composition mutator should change `entries`.

    Attributes:
        name: Deck name
        format: Format the deck is built for
        entries: Match key -> entry
        remote_id: Id assigned by the remote store on first save
        local_id: Key of the local fallback record when no remote id exists
    """

    name: str = "My Deck"
    format: DeckFormat = DeckFormat.STANDARD
    entries: dict[str, CompositionEntry] = field(default_factory=dict)
    remote_id: str | None = None
    local_id: str | None = None

    def total_count(self) -> int:
        """Total cards in the deck."""
        return sum(entry.count for entry in self.entries.values())

    def unique_count(self) -> int:
        """Number of distinct cards in the deck."""
        return len(self.entries)

    def count_for_key(self, key: str) -> int:
        entry = self.entries.get(key)
        return entry.count if entry is not None else 0

    def snapshot(self) -> tuple[CompositionEntry, ...]:
        """Immutable view of the current entries."""
        return tuple(self.entries.values())

    def __iter__(self):
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)
