"""
Database CRUD operations.

Provides async functions for creating, reading and updating saved decks
in the remote deck database.
"""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from decksmith.config import MIN_DECK_SIZE
from decksmith.models.db import DeckCardDB, DeckDB
from decksmith.models.deck import DeckFormat
from decksmith.models.records import CardLine, RemoteDeck


async def get_deck(session: AsyncSession, deck_id: str) -> DeckDB | None:
    """
    Get a deck with its cards.

    Returns None if no deck has this id.
    """
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id).options(selectinload(DeckDB.cards))
    )
    return result.scalar_one_or_none()


async def create_deck(session: AsyncSession, name: str, deck_format: DeckFormat) -> DeckDB:
    """Create an empty deck and return it with its assigned id."""
    deck = DeckDB(name=name, format=deck_format.value, total_cards=0, is_valid=False)
    session.add(deck)
    await session.flush()
    return deck


async def update_deck_metadata(
    session: AsyncSession,
    deck_id: str,
    name: str,
    deck_format: DeckFormat,
) -> DeckDB | None:
    """
    Update a deck's name and format.

    Returns None if the deck does not exist.
    """
    deck = await get_deck(session, deck_id)
    if deck is None:
        return None

    deck.name = name
    deck.format = deck_format.value
    await session.flush()
    return deck


async def replace_deck_cards(
    session: AsyncSession,
    deck_id: str,
    lines: Sequence[CardLine],
) -> DeckDB | None:
    """
    Replace a deck's card list.

    Deletes existing card rows and creates new ones, so saving the same
    list twice leaves identical contents. Returns None if the deck does
    not exist.
    """
    deck = await get_deck(session, deck_id)
    if deck is None:
        return None

    # Delete existing cards from database first
    await session.execute(delete(DeckCardDB).where(DeckCardDB.deck_id == deck.id))
    # Clear the ORM list to stay in sync
    deck.cards.clear()

    for line in lines:
        deck.cards.append(
            DeckCardDB(
                card_identifier=line.card_identifier,
                card_name=line.card_name,
                quantity=line.quantity,
                mana_cost=line.mana_cost,
                cmc=line.cmc,
                type_line=line.type_line,
                colors=line.colors,
                rarity=line.rarity,
                set_code=line.set_code,
            )
        )

    deck.total_cards = sum(line.quantity for line in lines)
    deck.is_valid = deck.total_cards >= MIN_DECK_SIZE
    await session.flush()
    return deck


def deck_to_remote(deck: DeckDB) -> RemoteDeck:
    """Convert a database deck to the remote record shape."""
    return RemoteDeck(
        id=deck.id,
        name=deck.name,
        format=DeckFormat(deck.format),
        cards=[
            CardLine(
                card_identifier=card.card_identifier,
                card_name=card.card_name,
                quantity=card.quantity,
                mana_cost=card.mana_cost,
                cmc=card.cmc,
                type_line=card.type_line,
                colors=card.colors,
                rarity=card.rarity,
                set_code=card.set_code,
            )
            for card in sorted(deck.cards, key=lambda c: c.id)
        ],
    )
