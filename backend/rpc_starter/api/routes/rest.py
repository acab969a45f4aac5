"""REST Transport — catch-all under the REST prefix, routed by the Registry.

Invariants:
    - Method + path (relative to the prefix) select the procedure
    - Query and path values are strings; the Dispatcher coerces them per schema
    - Success body is the bare output; errors use the {"error": {...}} envelope
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from rpc_starter.api.dependencies import get_dispatcher, read_json_body
from rpc_starter.services.dispatcher import CallEnvelope, Dispatcher

router = APIRouter(tags=["rest"])

REST_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/{path:path}", methods=REST_METHODS, include_in_schema=False)
async def rest_call(
    path: str, request: Request, dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Dispatch one REST request."""
    body = await read_json_body(request)
    envelope = CallEnvelope.rest(
        request.method, "/" + path, body, dict(request.query_params),
    )
    result = await dispatcher.dispatch(envelope)
    return JSONResponse(status_code=result.status_code, content=result.to_rest_body())
