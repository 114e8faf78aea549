"""
Workspace API endpoints.

A workspace holds an inventory snapshot and the deck being built from it.
Endpoints cover deck edits, analytics, Arena export, AI suggestions, and
saving / loading through the persistence reconciler.
"""

import logging
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from decksmith.api.dependencies import (
    get_reconciler,
    get_registry,
    get_suggestion_provider,
    get_workspace,
)
from decksmith.models.card import CardIdentity, OwnedCard, card_match_key
from decksmith.models.deck import DeckFormat
from decksmith.models.failure import ApiResponse, CardNotFoundError
from decksmith.services.analytics import deck_statistics
from decksmith.services.arena_formatter import ExportError, format_deck_for_arena
from decksmith.services.availability import available
from decksmith.services.composition_mutator import DEFAULT_MUTATOR
from decksmith.services.format_rules import DEFAULT_RULES
from decksmith.services.reconciler import PersistenceReconciler
from decksmith.services.suggestion_provider import SuggestionProvider, request_suggestions
from decksmith.services.suggestions import Suggestion, apply_suggestion
from decksmith.services.workspace import DeckWorkspace, WorkspaceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


# =============================================================================
# REQUEST MODELS
# =============================================================================


class CardIdentityPayload(BaseModel):
    """Catalog data for an owned card."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    mana_cost: str | None = None
    cmc: float | None = None
    type_line: str | None = None
    colors: list[str] = Field(default_factory=list)
    rarity: str | None = None
    set_code: str | None = None
    collector_number: str | None = None


class OwnedCardPayload(BaseModel):
    """One inventory line."""

    identity: CardIdentityPayload | None = None
    fallback_name: str = Field(..., min_length=1)
    owned_count: int = Field(..., ge=0)

    def to_model(self) -> OwnedCard:
        identity = None
        if self.identity is not None:
            identity = CardIdentity(
                id=self.identity.id,
                name=self.identity.name,
                mana_cost=self.identity.mana_cost,
                cmc=self.identity.cmc,
                type_line=self.identity.type_line,
                colors=tuple(self.identity.colors),
                rarity=self.identity.rarity,
                set_code=self.identity.set_code,
                collector_number=self.identity.collector_number,
            )
        return OwnedCard(
            identity=identity,
            fallback_name=self.fallback_name,
            owned_count=self.owned_count,
        )


class CreateWorkspaceRequest(BaseModel):
    """Request body for opening a workspace."""

    name: str = Field(default="My Deck", min_length=1)
    format: DeckFormat = DeckFormat.STANDARD
    inventory: list[OwnedCardPayload] = Field(default_factory=list)


class CardRequest(BaseModel):
    """Reference to an owned card plus a count."""

    card_key: str | None = Field(default=None, description="Deck match key from a workspace view")
    card_name: str | None = Field(default=None, description="Catalog or imported card name")
    count: int = Field(default=1, description="Copies to add/remove, or the target count")


class MetadataRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    format: DeckFormat | None = None


class SuggestionsRequest(BaseModel):
    prompt: str = Field(..., min_length=1)


class SuggestionPayload(BaseModel):
    card_name: str = Field(..., min_length=1)
    count: int = Field(default=1, ge=1)
    reason: str = ""
    action: Literal["add", "remove"] = "add"


class LoadRequest(BaseModel):
    deck_id: str = Field(..., min_length=1)
    source: Literal["remote", "local"] = "remote"


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class EntryView(BaseModel):
    card_key: str
    name: str
    count: int
    owned: int
    available: int
    max_copies: int
    mana_value: float
    type_line: str


class CurveBucketView(BaseModel):
    bucket: int
    count: int


class StatisticsView(BaseModel):
    total_cards: int
    unique_cards: int
    is_legal: bool
    average_mana_value: float
    land_count: int
    mana_curve: list[CurveBucketView]
    colors: dict[str, int]
    types: dict[str, int]


class WorkspaceView(BaseModel):
    id: str
    name: str
    format: DeckFormat
    remote_id: str | None = None
    local_id: str | None = None
    entries: list[EntryView] = Field(default_factory=list)
    statistics: StatisticsView


class MutationResponse(BaseModel):
    """Deck state after an edit, with how much of the request was applied."""

    requested: int
    applied: int
    count: int
    workspace: WorkspaceView


class SuggestionsView(BaseModel):
    suggestions: list[SuggestionPayload] = Field(default_factory=list)
    filtered_count: int = 0


class AppliedSuggestionView(BaseModel):
    card_name: str
    action: Literal["add", "remove"]
    requested: int
    applied: int
    workspace: WorkspaceView


class SaveView(BaseModel):
    deck_id: str | None = None
    local_id: str | None = None
    local_saved: bool = False


class LoadView(BaseModel):
    workspace: WorkspaceView
    unresolved_count: int = 0
    unresolved: list[str] = Field(default_factory=list)


def _view(workspace: DeckWorkspace) -> WorkspaceView:
    composition = workspace.composition
    stats = deck_statistics(composition, DEFAULT_RULES)
    entries = [
        EntryView(
            card_key=card_match_key(entry.card),
            name=entry.card.display_name,
            count=entry.count,
            owned=entry.card.owned_count,
            available=available(entry.card, composition),
            max_copies=DEFAULT_RULES.max_copies(entry.card, composition.format),
            mana_value=entry.card.mana_value,
            type_line=entry.card.type_line,
        )
        for entry in composition
    ]
    return WorkspaceView(
        id=workspace.id,
        name=composition.name,
        format=composition.format,
        remote_id=composition.remote_id,
        local_id=composition.local_id,
        entries=entries,
        statistics=StatisticsView(
            total_cards=stats.total_cards,
            unique_cards=stats.unique_cards,
            is_legal=stats.is_legal,
            average_mana_value=stats.average_mana_value,
            land_count=stats.land_count,
            mana_curve=[CurveBucketView(bucket=b.bucket, count=b.count) for b in stats.mana_curve],
            colors=stats.colors,
            types=stats.types,
        ),
    )


def _find_card(workspace: DeckWorkspace, request: CardRequest) -> OwnedCard:
    if not request.card_key and not request.card_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either card_key or card_name is required",
        )
    try:
        return workspace.find_card(request.card_key, request.card_name)
    except CardNotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


WorkspaceDep = Annotated[DeckWorkspace, Depends(get_workspace)]


# =============================================================================
# WORKSPACE LIFECYCLE
# =============================================================================


@router.post("", response_model=WorkspaceView, status_code=status.HTTP_201_CREATED)
async def create_workspace(
    request: CreateWorkspaceRequest,
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
) -> WorkspaceView:
    """Open a workspace over the given inventory with an empty deck."""
    workspace = registry.create(
        [card.to_model() for card in request.inventory],
        name=request.name,
        deck_format=request.format,
    )
    logger.info("Opened workspace %s with %d cards", workspace.id, len(workspace.inventory))
    return _view(workspace)


@router.get("/{workspace_id}", response_model=WorkspaceView)
async def get_workspace_view(workspace: WorkspaceDep) -> WorkspaceView:
    """Current deck with statistics."""
    return _view(workspace)


@router.patch("/{workspace_id}", response_model=WorkspaceView)
async def update_metadata(request: MetadataRequest, workspace: WorkspaceDep) -> WorkspaceView:
    """Rename the deck or change its format."""
    if request.name is not None:
        workspace.composition.name = request.name
    if request.format is not None:
        workspace.composition.format = request.format
    return _view(workspace)


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_workspace(
    workspace_id: str,
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
) -> None:
    """Discard a workspace (saved decks are unaffected)."""
    if not registry.close(workspace_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Workspace '{workspace_id}' not found",
        )


# =============================================================================
# DECK EDITS
# =============================================================================


@router.post("/{workspace_id}/cards/add", response_model=MutationResponse)
async def add_card(request: CardRequest, workspace: WorkspaceDep) -> MutationResponse:
    """Add copies of a card; over-requests are clamped."""
    card = _find_card(workspace, request)
    before = workspace.composition.count_for_key(card_match_key(card))
    after = DEFAULT_MUTATOR.add(workspace.composition, card, request.count)
    return MutationResponse(
        requested=request.count,
        applied=after - before,
        count=after,
        workspace=_view(workspace),
    )


@router.post("/{workspace_id}/cards/remove", response_model=MutationResponse)
async def remove_card(request: CardRequest, workspace: WorkspaceDep) -> MutationResponse:
    """Remove copies of a card."""
    card = _find_card(workspace, request)
    before = workspace.composition.count_for_key(card_match_key(card))
    after = DEFAULT_MUTATOR.remove(workspace.composition, card, request.count)
    return MutationResponse(
        requested=request.count,
        applied=before - after,
        count=after,
        workspace=_view(workspace),
    )


@router.post("/{workspace_id}/cards/set", response_model=MutationResponse)
async def set_card_count(request: CardRequest, workspace: WorkspaceDep) -> MutationResponse:
    """Set a card's count; 0 removes it."""
    card = _find_card(workspace, request)
    after = DEFAULT_MUTATOR.set_count(workspace.composition, card, request.count)
    return MutationResponse(
        requested=request.count,
        applied=after,
        count=after,
        workspace=_view(workspace),
    )


@router.post("/{workspace_id}/clear", response_model=WorkspaceView)
async def clear_deck(workspace: WorkspaceDep) -> WorkspaceView:
    """Remove every card; the saved-deck association is kept."""
    DEFAULT_MUTATOR.clear(workspace.composition)
    return _view(workspace)


@router.get("/{workspace_id}/export", response_class=PlainTextResponse)
async def export_deck(workspace: WorkspaceDep) -> str:
    """Deck as MTG Arena import text."""
    try:
        return format_deck_for_arena(workspace.composition)
    except ExportError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


# =============================================================================
# SUGGESTIONS
# =============================================================================


@router.post("/{workspace_id}/suggestions", response_model=ApiResponse[SuggestionsView])
async def get_suggestions(
    request: SuggestionsRequest,
    workspace: WorkspaceDep,
    provider: Annotated[SuggestionProvider, Depends(get_suggestion_provider)],
) -> ApiResponse[Any]:
    """
    Ask the suggestion provider for cards to add or remove.

    Suggestions for cards not in the collection are filtered out; a provider
    failure comes back as a known failure with the provider's message.
    """
    outcome = await request_suggestions(
        provider, request.prompt, workspace.composition, workspace.inventory
    )
    if outcome.failure is not None:
        return ApiResponse.known_failure(
            kind=outcome.failure.kind,
            message=outcome.failure.message,
            detail=outcome.failure.detail,
            suggestion=outcome.failure.suggestion,
        )
    return ApiResponse.success(
        SuggestionsView(
            suggestions=[
                SuggestionPayload(
                    card_name=s.card_name, count=s.count, reason=s.reason, action=s.action
                )
                for s in outcome.suggestions
            ],
            filtered_count=outcome.filtered_count,
        )
    )


@router.post(
    "/{workspace_id}/suggestions/apply",
    response_model=ApiResponse[AppliedSuggestionView],
)
async def apply_suggestion_to_deck(
    request: SuggestionPayload,
    workspace: WorkspaceDep,
) -> ApiResponse[Any]:
    """Add or remove a suggested card exactly as a manual edit would."""
    suggestion = Suggestion(
        card_name=request.card_name,
        count=request.count,
        reason=request.reason,
        action=request.action,
    )
    result = apply_suggestion(workspace.composition, workspace.inventory, suggestion)
    if result.failure is not None:
        return ApiResponse.known_failure(
            kind=result.failure.kind,
            message=result.failure.message,
            suggestion=result.failure.suggestion,
        )
    return ApiResponse.success(
        AppliedSuggestionView(
            card_name=request.card_name,
            action=request.action,
            requested=request.count,
            applied=result.applied,
            workspace=_view(workspace),
        )
    )


# =============================================================================
# PERSISTENCE
# =============================================================================


@router.post("/{workspace_id}/save", response_model=ApiResponse[SaveView])
async def save_deck(
    workspace: WorkspaceDep,
    reconciler: Annotated[PersistenceReconciler, Depends(get_reconciler)],
) -> ApiResponse[Any]:
    """
    Save the deck remotely and mirror it to the local cache.

    A remote failure is a known failure whose data still reports whether
    the local mirror was written.
    """
    outcome = await reconciler.save(workspace.composition)
    view = SaveView(
        deck_id=outcome.deck_id,
        local_id=outcome.local_id,
        local_saved=outcome.local_saved,
    )
    if outcome.failure is not None:
        return ApiResponse.known_failure(
            kind=outcome.failure.kind,
            message=outcome.failure.message,
            detail=outcome.failure.detail,
            suggestion=outcome.failure.suggestion,
            data=view,
        )
    return ApiResponse.success(view)


@router.post("/{workspace_id}/load", response_model=ApiResponse[LoadView])
async def load_deck(
    request: LoadRequest,
    workspace: WorkspaceDep,
    reconciler: Annotated[PersistenceReconciler, Depends(get_reconciler)],
) -> ApiResponse[Any]:
    """
    Replace the workspace deck with a saved one.

    Cards that are no longer in the inventory are dropped and reported.
    """
    if request.source == "remote":
        outcome = await reconciler.load_remote(request.deck_id, workspace.inventory)
    else:
        outcome = await reconciler.load_local(request.deck_id, workspace.inventory)

    if outcome.failure is not None:
        return ApiResponse.known_failure(
            kind=outcome.failure.kind,
            message=outcome.failure.message,
            detail=outcome.failure.detail,
            suggestion=outcome.failure.suggestion,
        )

    if outcome.composition is None:
        msg = f"Load of '{request.deck_id}' succeeded without a deck"
        raise RuntimeError(msg)
    workspace.composition = outcome.composition
    return ApiResponse.success(
        LoadView(
            workspace=_view(workspace),
            unresolved_count=outcome.unresolved_count,
            unresolved=outcome.unresolved,
        )
    )
