import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from decksmith.api import health_router, saved_decks_router, workspaces_router
from decksmith.config import settings
from decksmith.db.database import init_db, make_engine, make_session_factory
from decksmith.db.local_store import InMemoryDeckStore, JsonFileDeckStore, LocalDeckStore
from decksmith.db.remote_store import HttpRemoteDeckStore, RemoteDeckStore, SqlRemoteDeckStore
from decksmith.models.failure import KnownError
from decksmith.services.reconciler import PersistenceReconciler
from decksmith.services.suggestion_provider import (
    AnthropicSuggestionProvider,
    SuggestionProvider,
)
from decksmith.services.workspace import WorkspaceRegistry

logger = logging.getLogger(__name__)


def configure_app(
    app: FastAPI,
    *,
    remote: RemoteDeckStore,
    local: LocalDeckStore,
    suggestion_provider: SuggestionProvider,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """Install the stores and providers the endpoints depend on."""
    app.state.registry = WorkspaceRegistry()
    app.state.reconciler = PersistenceReconciler(remote, local)
    app.state.suggestion_provider = suggestion_provider
    app.state.session_factory = session_factory


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    local: LocalDeckStore
    if settings.local_store_path:
        local = JsonFileDeckStore(settings.local_store_path)
    else:
        local = InMemoryDeckStore()

    if settings.remote_store_url:
        logger.info("Using deck service at %s", settings.remote_store_url)
        configure_app(
            app,
            remote=HttpRemoteDeckStore(),
            local=local,
            suggestion_provider=AnthropicSuggestionProvider(),
        )
        yield
        return

    engine = make_engine()
    await init_db(engine)
    session_factory = make_session_factory(engine)
    configure_app(
        app,
        remote=SqlRemoteDeckStore(session_factory),
        local=local,
        suggestion_provider=AnthropicSuggestionProvider(),
        session_factory=session_factory,
    )
    try:
        yield
    finally:
        await engine.dispose()


async def known_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render an uncaught KnownError as a known-failure envelope."""
    if not isinstance(exc, KnownError):
        raise exc
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Build the application.

    Tests pass use_lifespan=False and call configure_app with in-memory
    stores instead.
    """
    app = FastAPI(
        title=settings.app_name,
        version=pkg_version("decksmith"),
        lifespan=lifespan if use_lifespan else None,
    )

    app.include_router(health_router)
    app.include_router(saved_decks_router)
    app.include_router(workspaces_router)

    app.add_exception_handler(KnownError, known_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
