"""RPC Transport — one endpoint, procedure named in the body.

Invariants:
    - POST {rpc_path} with {"procedure": name, "input": ...}
    - Response is always the envelope {"ok": true, "value"} | {"ok": false, "error"}
    - HTTP status mirrors the error kind (400/404/500/504), 200 on success
    - Input is passed to the Dispatcher as-is: no string coercion on this transport
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from rpc_starter.api.dependencies import get_dispatcher, read_json_body
from rpc_starter.core.errors import DomainError, ValidationError, validation_issues
from rpc_starter.schemas.rpc import RpcRequest
from rpc_starter.services.dispatcher import CallEnvelope, Dispatcher, ResultEnvelope

router = APIRouter(tags=["rpc"])


@router.post("", include_in_schema=False)
async def rpc_call(
    request: Request, dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Dispatch one RPC envelope."""
    try:
        call = RpcRequest.model_validate(await read_json_body(request))
    except PydanticValidationError as e:
        result = _rejected(ValidationError(validation_issues(e.errors())))
    except DomainError as e:
        result = _rejected(e)
    else:
        result = await dispatcher.dispatch(CallEnvelope.rpc(call.procedure, call.input))
    return JSONResponse(status_code=result.status_code, content=result.to_rpc_body())


def _rejected(error: DomainError) -> ResultEnvelope:
    return ResultEnvelope(ok=False, status_code=error.http_status, error=error)
