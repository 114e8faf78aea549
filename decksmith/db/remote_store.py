"""
Remote deck stores.

The remote store is the persistent home of saved decks. Two backends share
one protocol: a SQL database reached through async SQLAlchemy, and a REST
deck service reached through httpx. Both raise RemoteStoreError for any
failure except "no such deck" on fetch, which returns None.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from decksmith.config import settings
from decksmith.db.operations import (
    create_deck,
    deck_to_remote,
    get_deck,
    replace_deck_cards,
    update_deck_metadata,
)
from decksmith.models.deck import DeckFormat
from decksmith.models.failure import RemoteStoreError
from decksmith.models.records import CardLine, RemoteDeck

logger = logging.getLogger(__name__)


class RemoteDeckStore(Protocol):
    """Persistent store of saved decks."""

    async def create(self, name: str, deck_format: DeckFormat) -> str: ...

    async def update_metadata(self, deck_id: str, name: str, deck_format: DeckFormat) -> None: ...

    async def replace_cards(self, deck_id: str, lines: Sequence[CardLine]) -> None: ...

    async def fetch(self, deck_id: str) -> RemoteDeck | None: ...


class SqlRemoteDeckStore:
    """Remote store backed by the decks / deck_cards tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def create(self, name: str, deck_format: DeckFormat) -> str:
        try:
            async with self.session_factory() as session:
                deck = await create_deck(session, name, deck_format)
                deck_id = deck.id
                await session.commit()
        except SQLAlchemyError as e:
            raise RemoteStoreError("Failed to create deck", detail=str(e)) from e
        logger.info("Created remote deck %s (%s)", deck_id, name)
        return deck_id

    async def update_metadata(self, deck_id: str, name: str, deck_format: DeckFormat) -> None:
        try:
            async with self.session_factory() as session:
                deck = await update_deck_metadata(session, deck_id, name, deck_format)
                if deck is None:
                    raise RemoteStoreError(f"Deck '{deck_id}' not found")
                await session.commit()
        except SQLAlchemyError as e:
            raise RemoteStoreError("Failed to update deck", detail=str(e)) from e

    async def replace_cards(self, deck_id: str, lines: Sequence[CardLine]) -> None:
        try:
            async with self.session_factory() as session:
                deck = await replace_deck_cards(session, deck_id, lines)
                if deck is None:
                    raise RemoteStoreError(f"Deck '{deck_id}' not found")
                await session.commit()
        except SQLAlchemyError as e:
            raise RemoteStoreError("Failed to save deck cards", detail=str(e)) from e

    async def fetch(self, deck_id: str) -> RemoteDeck | None:
        try:
            async with self.session_factory() as session:
                deck = await get_deck(session, deck_id)
                if deck is None:
                    return None
                return deck_to_remote(deck)
        except SQLAlchemyError as e:
            raise RemoteStoreError("Failed to load deck", detail=str(e)) from e


class HttpRemoteDeckStore:
    """
    Client for a REST deck service.

    Endpoints:
        POST  /decks             -> {"id": ...}
        PATCH /decks/{id}
        PUT   /decks/{id}/cards
        GET   /decks/{id}        -> RemoteDeck (404 when missing)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        """
        Initialize the deck service client.

        Args:
            base_url: Service base URL. Defaults to settings.remote_store_url.
            timeout: Request timeout in seconds.
        """
        self.base_url = (base_url or settings.remote_store_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.remote_store_timeout

    async def create(self, name: str, deck_format: DeckFormat) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/decks",
                    json={"name": name, "format": deck_format.value},
                )
                response.raise_for_status()
                deck_id = response.json().get("id")
        except httpx.HTTPError as e:
            raise RemoteStoreError("Failed to create deck", detail=str(e)) from e

        if not deck_id:
            raise RemoteStoreError("Deck service returned no deck id")
        return str(deck_id)

    async def update_metadata(self, deck_id: str, name: str, deck_format: DeckFormat) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.patch(
                    f"{self.base_url}/decks/{deck_id}",
                    json={"name": name, "format": deck_format.value},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteStoreError("Failed to update deck", detail=str(e)) from e

    async def replace_cards(self, deck_id: str, lines: Sequence[CardLine]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.put(
                    f"{self.base_url}/decks/{deck_id}/cards",
                    json={"cards": [line.model_dump(mode="json") for line in lines]},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteStoreError("Failed to save deck cards", detail=str(e)) from e

    async def fetch(self, deck_id: str) -> RemoteDeck | None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/decks/{deck_id}")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                return RemoteDeck.model_validate(response.json())
        except httpx.HTTPError as e:
            raise RemoteStoreError("Failed to load deck", detail=str(e)) from e
        except ValidationError as e:
            raise RemoteStoreError("Deck service returned a malformed deck", detail=str(e)) from e
