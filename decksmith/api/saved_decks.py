"""
Saved deck endpoints.

Lists and deletes decks in the local fallback cache.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from decksmith.api.dependencies import get_reconciler, get_registry
from decksmith.models.deck import DeckFormat
from decksmith.models.failure import LocalStoreError
from decksmith.services.reconciler import PersistenceReconciler, is_local_only_id
from decksmith.services.workspace import WorkspaceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/saved-decks", tags=["saved-decks"])


class SavedDeckSummary(BaseModel):
    """
    Summary of a saved deck.

    owned_percentage, colors and primary_type are only filled in when the
    listing is measured against a workspace inventory.
    """

    id: str
    name: str
    format: DeckFormat
    total_count: int
    local_only: bool
    created_at: datetime
    updated_at: datetime
    owned_percentage: int | None = None
    colors: list[str] = Field(default_factory=list)
    primary_type: str | None = None


class SavedDeckListResponse(BaseModel):
    decks: list[SavedDeckSummary] = Field(default_factory=list)
    total: int = 0


class DeleteResponse(BaseModel):
    deleted: bool
    association_cleared: bool = False


@router.get("", response_model=SavedDeckListResponse)
async def list_saved_decks(
    reconciler: Annotated[PersistenceReconciler, Depends(get_reconciler)],
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
    workspace_id: str | None = None,
) -> SavedDeckListResponse:
    """
    Saved decks, most recently updated first.

    Pass the workspace_id of an open workspace to measure each deck against
    its inventory.
    """
    inventory = None
    if workspace_id is not None:
        workspace = registry.get(workspace_id)
        if workspace is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Workspace '{workspace_id}' not found",
            )
        inventory = workspace.inventory

    try:
        summaries = await reconciler.list_summaries(inventory)
    except LocalStoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    decks = [
        SavedDeckSummary(
            id=summary.record.id,
            name=summary.record.name,
            format=summary.record.format,
            total_count=summary.record.total_count,
            local_only=is_local_only_id(summary.record.id),
            created_at=summary.record.created_at,
            updated_at=summary.record.updated_at,
            owned_percentage=summary.owned_percentage,
            colors=summary.colors,
            primary_type=summary.primary_type,
        )
        for summary in summaries
    ]
    return SavedDeckListResponse(decks=decks, total=len(decks))


@router.delete("/{deck_id}", response_model=DeleteResponse)
async def delete_saved_deck(
    deck_id: str,
    reconciler: Annotated[PersistenceReconciler, Depends(get_reconciler)],
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
    workspace_id: str | None = None,
) -> DeleteResponse:
    """
    Delete a saved deck from the local cache.

    Pass the workspace_id of an open workspace to drop its association with
    the deleted deck, so its next save creates a new one.
    """
    active = None
    if workspace_id is not None:
        workspace = registry.get(workspace_id)
        if workspace is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Workspace '{workspace_id}' not found",
            )
        active = workspace.composition

    outcome = await reconciler.delete(deck_id, active)
    if outcome.failure is not None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=outcome.failure.message,
        )
    if not outcome.deleted and not outcome.association_cleared:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Saved deck '{deck_id}' not found",
        )

    logger.info("Deleted saved deck %s", deck_id)
    return DeleteResponse(deleted=outcome.deleted, association_cleared=outcome.association_cleared)
