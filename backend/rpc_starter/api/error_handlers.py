"""Error Handlers — global exception handlers for the API.

Invariants:
    - DomainError → structured JSON with error code, message, severity
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Two-layer handler: domain (DomainError), catch-all (Exception)
    - The transports render their own results; these handlers cover errors raised
      outside the Dispatcher (malformed bodies, framework-level failures)
    - Routes read their bodies by hand, so FastAPI's RequestValidationError never
      fires and has no handler here
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from rpc_starter.core.errors import DomainError, InternalError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    """Register classified domain error handler."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Handle all classified errors raised outside the Dispatcher."""
        logger.warning(
            f"DomainError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        exc.context.path = request.url.path
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        error = InternalError()
        error.context.path = request.url.path
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.to_response(),
        )
