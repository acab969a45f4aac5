"""RPC Starter API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Registry built and frozen once in create_app(), injected via app.state
    - Global error handlers map DomainError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - FastAPI's own OpenAPI/docs are disabled: the Registry's document is the contract

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Registry built at app construction, not in lifespan: test clients that skip
      lifespan events still see a ready app
    - RPC router included before REST: POST {rpc_path} wins over the REST catch-all
      when both share the same prefix
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rpc_starter.api.error_handlers import register_error_handlers
from rpc_starter.api.routes import docs, health, openapi, rest, rpc
from rpc_starter.config import Settings, get_settings
from rpc_starter.infrastructure.observability import setup_logging
from rpc_starter.services.dispatcher import Dispatcher
from rpc_starter.services.router import build_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(
        f"RPC Starter API started with {len(app.state.registry)} procedures",
    )
    yield
    logger.info("RPC Starter API shutting down")


def _prefix(path: str) -> str:
    return "" if path == "/" else path


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_title, version=settings.app_version,
        lifespan=lifespan, openapi_url=None, docs_url=None, redoc_url=None,
    )
    registry = build_registry(settings)
    app.state.settings = settings
    app.state.registry = registry
    app.state.dispatcher = Dispatcher(registry, settings.request_timeout_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes — explicit registration
    app.include_router(health.router)
    app.include_router(openapi.router, prefix=settings.openapi_path)
    app.include_router(docs.router, prefix=settings.docs_path)
    app.include_router(rpc.router, prefix=_prefix(settings.rpc_path))
    app.include_router(rest.router, prefix=_prefix(settings.rest_prefix))

    register_error_handlers(app)
    return app


app = create_app()
