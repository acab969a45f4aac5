"""OpenAPI Document — GET {openapi_path} serves the exporter's output as JSON.

Invariants:
    - Built from the app's Registry on every request: always in sync, deterministic
    - Advertises the REST prefix as the server URL and a bearer security scheme
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rpc_starter.api.dependencies import get_app_settings, get_registry
from rpc_starter.config import Settings
from rpc_starter.core.openapi import generate_openapi
from rpc_starter.core.registry import Registry

router = APIRouter(tags=["docs"])

BEARER_SCHEME = "bearerAuth"


def build_openapi(registry: Registry, settings: Settings) -> dict:
    return generate_openapi(
        registry,
        title=settings.app_title,
        version=settings.app_version,
        description=settings.app_description,
        servers=[{"url": settings.rest_prefix, "description": "RPC endpoint"}],
        security_schemes={BEARER_SCHEME: {"type": "http", "scheme": "bearer"}},
        default_security=[BEARER_SCHEME],
    )


@router.get("", include_in_schema=False)
async def openapi_document(
    registry: Registry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
):
    return JSONResponse(content=build_openapi(registry, settings))
