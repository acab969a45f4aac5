"""Request Dependencies — startup-built objects handed to routes via FastAPI Depends.

Invariants:
    - Registry, Dispatcher and Settings live on app.state, set once in create_app()
    - read_json_body() returns None for an empty body, never guesses at malformed JSON
    - NaN and Infinity tokens are not JSON: rejected at parse time like any other
      malformed body
"""

import json
from typing import Any

from fastapi import Request

from rpc_starter.config import Settings
from rpc_starter.core.errors import ValidationError
from rpc_starter.core.registry import Registry
from rpc_starter.services.dispatcher import Dispatcher


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_registry(request: Request) -> Registry:
    return request.app.state.registry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not a valid JSON value")


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON. Empty body → None."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        raise ValidationError(
            [{"field": "body", "message": f"Malformed JSON: {e}", "type": "json_invalid"}],
            message="Request body is not valid JSON",
        ) from e
