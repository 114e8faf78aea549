"""
FastAPI dependencies.

Collaborators live on app.state (set by decksmith.main.configure_app), so
tests can install in-memory stores and fake providers per app instance.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from decksmith.services.reconciler import PersistenceReconciler
from decksmith.services.suggestion_provider import SuggestionProvider
from decksmith.services.workspace import DeckWorkspace, WorkspaceRegistry


def get_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.registry


def get_reconciler(request: Request) -> PersistenceReconciler:
    return request.app.state.reconciler


def get_suggestion_provider(request: Request) -> SuggestionProvider:
    return request.app.state.suggestion_provider


def get_workspace(
    workspace_id: str,
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
) -> DeckWorkspace:
    """Resolve the workspace in the path; 404 if it is not open."""
    workspace = registry.get(workspace_id)
    if workspace is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Workspace '{workspace_id}' not found",
        )
    return workspace
