from decksmith.db.database import drop_db, init_db, make_engine, make_session_factory
from decksmith.db.local_store import InMemoryDeckStore, JsonFileDeckStore, LocalDeckStore
from decksmith.db.operations import (
    create_deck,
    deck_to_remote,
    get_deck,
    replace_deck_cards,
    update_deck_metadata,
)
from decksmith.db.remote_store import HttpRemoteDeckStore, RemoteDeckStore, SqlRemoteDeckStore

__all__ = [
    "HttpRemoteDeckStore",
    "InMemoryDeckStore",
    "JsonFileDeckStore",
    "LocalDeckStore",
    "RemoteDeckStore",
    "SqlRemoteDeckStore",
    "create_deck",
    "deck_to_remote",
    "drop_db",
    "get_deck",
    "init_db",
    "make_engine",
    "make_session_factory",
    "replace_deck_cards",
    "update_deck_metadata",
]
