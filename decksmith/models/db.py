"""
SQLAlchemy ORM models for the remote deck store.

One row per deck plus one row per card line. Card lines carry enough
catalog data (mana cost, type line, colors...) to describe the deck without
the player's inventory.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _new_deck_id() -> str:
    return str(uuid.uuid4())


class DeckDB(Base):
    """
    A saved deck.

    total_cards and is_valid are recomputed whenever the card list is
    replaced.
    """

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_deck_id)
    name: Mapped[str] = mapped_column(String(255))
    format: Mapped[str] = mapped_column(String(50), index=True)
    total_cards: Mapped[int] = mapped_column(Integer, default=0)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    """One card line of a saved deck."""

    __tablename__ = "deck_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_identifier: Mapped[str | None] = mapped_column(String(64), nullable=True)
    card_name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    mana_cost: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cmc: Mapped[float | None] = mapped_column(Float, nullable=True)
    type_line: Mapped[str | None] = mapped_column(String(255), nullable=True)
    colors: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    set_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckCardDB(card={self.card_name}, qty={self.quantity})>"
