"""API Reference Page — GET {docs_path} serves HTML loading the Scalar viewer.

Invariants:
    - The viewer is pointed at the OpenAPI path from settings
    - Values embedded in the page are escaped (HTML attribute / JSON in <script>)
"""

import html
import json

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from rpc_starter.api.dependencies import get_app_settings
from rpc_starter.api.routes.openapi import BEARER_SCHEME
from rpc_starter.config import Settings

router = APIRouter(tags=["docs"])

_PAGE = """<!doctype html>
<html>
  <head>
    <title>API Documentation</title>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
  </head>
  <body>
    <div id="app"></div>

    <script src="{script_url}"></script>
    <script>
      Scalar.createApiReference('#app', {config})
    </script>
  </body>
</html>
"""


def render_docs_page(settings: Settings) -> str:
    config = {
        "url": settings.openapi_path,
        "authentication": {
            "securitySchemes": {
                BEARER_SCHEME: {"token": settings.docs_default_token},
            },
        },
    }
    return _PAGE.format(
        script_url=html.escape(settings.docs_script_url, quote=True),
        config=json.dumps(config).replace("</", "<\\/"),
    )


@router.get("", include_in_schema=False)
async def docs_page(settings: Settings = Depends(get_app_settings)):
    return HTMLResponse(content=render_docs_page(settings))
