from decksmith.api.health import router as health_router
from decksmith.api.saved_decks import router as saved_decks_router
from decksmith.api.workspaces import router as workspaces_router

__all__ = [
    "health_router",
    "saved_decks_router",
    "workspaces_router",
]
