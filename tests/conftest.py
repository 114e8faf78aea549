import uuid
from collections.abc import Sequence

import pytest

from decksmith.db.local_store import InMemoryDeckStore
from decksmith.models.card import CardIdentity, OwnedCard
from decksmith.models.deck import Composition, DeckFormat
from decksmith.models.failure import RemoteStoreError
from decksmith.models.records import CardLine, RemoteDeck
from decksmith.services.suggestions import Suggestion


def make_card(
    name: str,
    owned: int = 4,
    *,
    card_id: str | None = None,
    cmc: float | None = 1,
    type_line: str | None = "Instant",
    colors: tuple[str, ...] = (),
    set_code: str | None = "m11",
    collector_number: str | None = "149",
    matched: bool = True,
) -> OwnedCard:
    """Build an owned card; matched=False leaves it without a catalog identity."""
    if not matched:
        return OwnedCard(identity=None, fallback_name=name, owned_count=owned)
    identity = CardIdentity(
        id=card_id or name.lower().replace(" ", "-"),
        name=name,
        mana_cost=None,
        cmc=cmc,
        type_line=type_line,
        colors=colors,
        rarity="common",
        set_code=set_code,
        collector_number=collector_number,
    )
    return OwnedCard(identity=identity, fallback_name=name, owned_count=owned)


@pytest.fixture
def card_factory():
    """Factory for owned cards, see make_card."""
    return make_card


@pytest.fixture
def lightning_bolt() -> OwnedCard:
    return make_card("Lightning Bolt", 4, cmc=1, type_line="Instant", colors=("R",))


@pytest.fixture
def counterspell() -> OwnedCard:
    return make_card(
        "Counterspell",
        2,
        cmc=2,
        type_line="Instant",
        colors=("U",),
        set_code="dmr",
        collector_number="045",
    )


@pytest.fixture
def goblin_guide() -> OwnedCard:
    return make_card(
        "Goblin Guide",
        6,
        cmc=1,
        type_line="Creature — Goblin Scout",
        colors=("R",),
        set_code="zen",
        collector_number="126",
    )


@pytest.fixture
def mountain() -> OwnedCard:
    return make_card(
        "Mountain",
        30,
        cmc=0,
        type_line="Basic Land — Mountain",
        set_code="neo",
        collector_number="290",
    )


@pytest.fixture
def unmatched_card() -> OwnedCard:
    """Imported card the catalog could not match."""
    return make_card("Mystery Card", 3, matched=False)


@pytest.fixture
def inventory(
    lightning_bolt: OwnedCard,
    counterspell: OwnedCard,
    goblin_guide: OwnedCard,
    mountain: OwnedCard,
    unmatched_card: OwnedCard,
) -> list[OwnedCard]:
    return [lightning_bolt, counterspell, goblin_guide, mountain, unmatched_card]


@pytest.fixture
def deck() -> Composition:
    return Composition(name="Mono Red")


@pytest.fixture
def sample_arena_export() -> str:
    """Arena text for a deck of bolts, counterspells and mountains."""
    return """Deck
4 Lightning Bolt (M11) 149
2 Counterspell (DMR) 45
20 Mountain (NEO) 290"""


class FakeRemoteStore:
    """
    In-memory remote store.

    Set `fail` to simulate an outage, or `fail_cards` to fail only card list
    writes.
    """

    def __init__(self) -> None:
        self.decks: dict[str, RemoteDeck] = {}
        self.fail = False
        self.fail_cards = False
        self.created = 0

    def _check(self) -> None:
        if self.fail:
            raise RemoteStoreError("Deck service unavailable")

    async def create(self, name: str, deck_format: DeckFormat) -> str:
        self._check()
        deck_id = uuid.uuid4().hex
        self.decks[deck_id] = RemoteDeck(id=deck_id, name=name, format=deck_format)
        self.created += 1
        return deck_id

    async def update_metadata(self, deck_id: str, name: str, deck_format: DeckFormat) -> None:
        self._check()
        deck = self.decks[deck_id]
        self.decks[deck_id] = deck.model_copy(update={"name": name, "format": deck_format})

    async def replace_cards(self, deck_id: str, lines: Sequence[CardLine]) -> None:
        self._check()
        if self.fail_cards:
            raise RemoteStoreError("Failed to write deck cards")
        deck = self.decks[deck_id]
        self.decks[deck_id] = deck.model_copy(update={"cards": list(lines)})

    async def fetch(self, deck_id: str) -> RemoteDeck | None:
        self._check()
        return self.decks.get(deck_id)


class FakeProvider:
    """Suggestion provider returning canned suggestions, or raising `error`."""

    def __init__(self) -> None:
        self.suggestions: list[Suggestion] = []
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def suggest(self, prompt, composition, available, deck_format):
        self.calls.append(
            {"prompt": prompt, "available": list(available), "deck_format": deck_format}
        )
        if self.error is not None:
            raise self.error
        return self.suggestions


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def local() -> InMemoryDeckStore:
    return InMemoryDeckStore()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()
