"""
Persistence reconciler.

Keeps one deck consistent across the remote store and the local fallback
cache, and rebuilds decks from either source against the current inventory.

Save:
    remote_id set   -> update metadata, replace the full card list
    remote_id unset -> create, capture the new id, replace the card list
    then, whatever the remote outcome, mirror the deck into the local cache
    under the same id.

Load:
    card lines are resolved against the inventory (identifier first, then
    name). Lines that no longer resolve are dropped and counted.

The deck contents written by a save are captured before the first await.
Edits made while a save is in flight belong to the next save.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from decksmith.db.local_store import LocalDeckStore
from decksmith.db.remote_store import RemoteDeckStore
from decksmith.models.card import OwnedCard
from decksmith.models.deck import Composition, CompositionEntry, DeckFormat
from decksmith.models.failure import (
    FailureDetail,
    FailureKind,
    KnownError,
    LocalStoreError,
    RemoteStoreError,
)
from decksmith.models.records import CardLine, SavedCardLine, SavedDeckRecord
from decksmith.services.card_resolution import InventoryIndex
from decksmith.services.composition_mutator import DEFAULT_MUTATOR, CompositionMutator
from decksmith.services.deck_summary import DeckSummary, summarize_saved_deck

logger = logging.getLogger(__name__)

# Ids of local records written while the remote store was unreachable
LOCAL_ID_PREFIX = "local-"


def is_local_only_id(deck_id: str) -> bool:
    return deck_id.startswith(LOCAL_ID_PREFIX)


@dataclass
class SaveOutcome:
    """
    Result of a save.

    `deck_id` is the remote id whenever a remote record exists, including
    when a later step of the save failed and the remote card list is stale.
    `local_id` is the key of the local mirror, which may exist even when the
    remote write failed.
    """

    deck_id: str | None = None
    local_id: str | None = None
    local_saved: bool = False
    failure: FailureDetail | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class LoadOutcome:
    """Rebuilt deck plus the card lines that no longer resolve."""

    composition: Composition | None = None
    unresolved: list[str] = field(default_factory=list)
    failure: FailureDetail | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)


@dataclass
class DeleteOutcome:
    deleted: bool = False
    association_cleared: bool = False
    failure: FailureDetail | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True, slots=True)
class _CardReference:
    identifier: str | None
    name: str
    count: int


def to_card_line(entry: CompositionEntry) -> CardLine:
    """Project a deck entry onto the remote card line shape."""
    card = entry.card
    identity = card.identity
    return CardLine(
        card_identifier=card.card_identifier,
        card_name=card.display_name,
        quantity=entry.count,
        mana_cost=identity.mana_cost if identity else None,
        cmc=identity.cmc if identity else None,
        type_line=identity.type_line if identity else None,
        colors=list(identity.colors) if identity else None,
        rarity=identity.rarity if identity else None,
        set_code=identity.set_code if identity else None,
    )


def to_saved_line(entry: CompositionEntry) -> SavedCardLine:
    """Project a deck entry onto the local cache line shape."""
    return SavedCardLine(
        card_identifier=entry.card.card_identifier,
        fallback_name=entry.card.display_name,
        count=entry.count,
    )


def _not_found(deck_id: str) -> FailureDetail:
    return KnownError(
        kind=FailureKind.NOT_FOUND,
        message=f"Saved deck '{deck_id}' not found",
        status_code=404,
    ).to_detail()


class PersistenceReconciler:
    """
    Saves and loads decks against a remote store and a local fallback cache.

    Both stores are supplied by the caller; the reconciler keeps no state of
    its own between calls.
    """

    def __init__(
        self,
        remote: RemoteDeckStore,
        local: LocalDeckStore,
        mutator: CompositionMutator = DEFAULT_MUTATOR,
    ) -> None:
        self.remote = remote
        self.local = local
        self.mutator = mutator

    async def save(self, composition: Composition) -> SaveOutcome:
        """
        Save a deck remotely and mirror it locally.

        Saving twice without edits in between writes the same contents.
        """
        name = composition.name
        deck_format = composition.format
        entries = composition.snapshot()
        lines = [to_card_line(entry) for entry in entries]

        outcome = SaveOutcome()
        remote_id = composition.remote_id
        try:
            if remote_id is None:
                remote_id = await self.remote.create(name, deck_format)
                composition.remote_id = remote_id
            else:
                await self.remote.update_metadata(remote_id, name, deck_format)
            outcome.deck_id = remote_id
            await self.remote.replace_cards(remote_id, lines)
            logger.info("Saved deck %s (%d cards) remotely", remote_id, len(lines))
        except KnownError as e:
            logger.warning("Remote save of '%s' failed: %s", name, e.message)
            outcome.failure = e.to_detail()
        except Exception as e:
            logger.exception("Unexpected remote store error saving '%s'", name)
            outcome.failure = RemoteStoreError("Failed to save deck", detail=str(e)).to_detail()

        local_id = remote_id or composition.local_id or f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"
        outcome.local_id = local_id
        try:
            await self._mirror(local_id, name, deck_format, entries)
            outcome.local_saved = True
            if composition.local_id and composition.local_id != local_id:
                # The deck now lives under its remote id
                await self.local.delete(composition.local_id)
            composition.local_id = local_id
        except LocalStoreError as e:
            logger.warning("Local mirror of '%s' failed: %s", name, e.message)

        return outcome

    async def _mirror(
        self,
        local_id: str,
        name: str,
        deck_format: DeckFormat,
        entries: tuple[CompositionEntry, ...],
    ) -> None:
        now = datetime.now(UTC)
        existing = await self.local.get(local_id)
        record = SavedDeckRecord(
            id=local_id,
            name=name,
            format=deck_format,
            cards=[to_saved_line(entry) for entry in entries],
            total_count=sum(entry.count for entry in entries),
            created_at=existing.created_at if existing is not None else now,
            updated_at=now,
        )
        await self.local.put(record)

    def _rebuild(
        self,
        name: str,
        deck_format: DeckFormat,
        references: Iterable[_CardReference],
        inventory: Iterable[OwnedCard],
    ) -> tuple[Composition, list[str]]:
        """
        Rebuild a deck from persisted references.

        Counts go through the mutator, so a reloaded deck never holds more
        copies than are owned today.
        """
        index = inventory if isinstance(inventory, InventoryIndex) else InventoryIndex(inventory)
        composition = Composition(name=name, format=deck_format)
        unresolved: list[str] = []

        for reference in references:
            card = index.resolve(reference.identifier, reference.name)
            if card is None or self.mutator.add(composition, card, reference.count) == 0:
                unresolved.append(reference.name)

        if unresolved:
            logger.warning(
                "%d card(s) of '%s' not found in collection: %s",
                len(unresolved),
                name,
                ", ".join(unresolved),
            )
        return composition, unresolved

    async def load_remote(self, deck_id: str, inventory: Iterable[OwnedCard]) -> LoadOutcome:
        """Load a deck from the remote store."""
        try:
            deck = await self.remote.fetch(deck_id)
        except KnownError as e:
            return LoadOutcome(failure=e.to_detail())
        except Exception as e:
            logger.exception("Unexpected remote store error loading %s", deck_id)
            return LoadOutcome(
                failure=RemoteStoreError("Failed to load deck", detail=str(e)).to_detail()
            )

        if deck is None:
            return LoadOutcome(failure=_not_found(deck_id))

        references = [
            _CardReference(line.card_identifier, line.card_name, line.quantity)
            for line in deck.cards
        ]
        composition, unresolved = self._rebuild(deck.name, deck.format, references, inventory)
        composition.remote_id = deck.id
        composition.local_id = deck.id
        return LoadOutcome(composition=composition, unresolved=unresolved)

    async def load_local(self, deck_id: str, inventory: Iterable[OwnedCard]) -> LoadOutcome:
        """Load a deck from the local fallback cache."""
        try:
            record = await self.local.get(deck_id)
        except LocalStoreError as e:
            return LoadOutcome(failure=e.to_detail())

        if record is None:
            return LoadOutcome(failure=_not_found(deck_id))

        references = [
            _CardReference(line.card_identifier, line.fallback_name, line.count)
            for line in record.cards
        ]
        composition, unresolved = self._rebuild(record.name, record.format, references, inventory)
        composition.remote_id = None if is_local_only_id(record.id) else record.id
        composition.local_id = record.id
        return LoadOutcome(composition=composition, unresolved=unresolved)

    async def delete(self, deck_id: str, active: Composition | None = None) -> DeleteOutcome:
        """
        Delete a deck from the local cache.

        The remote record is left alone. If `active` was saved under this
        id, its association is dropped so its next save creates a new
        remote deck.
        """
        try:
            deleted = await self.local.delete(deck_id)
        except LocalStoreError as e:
            return DeleteOutcome(failure=e.to_detail())

        cleared = False
        if active is not None and deck_id in (active.remote_id, active.local_id):
            active.remote_id = None
            active.local_id = None
            cleared = True
        return DeleteOutcome(deleted=deleted, association_cleared=cleared)

    async def list_saved(self) -> list[SavedDeckRecord]:
        """
        Saved decks in the local cache, most recently updated first.

        Raises:
            LocalStoreError: If the cache cannot be read
        """
        records = await self.local.list()
        return sorted(records, key=lambda record: record.updated_at, reverse=True)

    async def list_summaries(
        self, inventory: Iterable[OwnedCard] | None = None
    ) -> list[DeckSummary]:
        """
        Saved deck summaries, most recently updated first.

        Ownership, colors and primary type are filled in only when an
        inventory is given.

        Raises:
            LocalStoreError: If the cache cannot be read
        """
        records = await self.list_saved()
        if inventory is not None and not isinstance(inventory, InventoryIndex):
            inventory = InventoryIndex(inventory)
        return [summarize_saved_deck(record, inventory) for record in records]
