"""Hello — fixed greeting. RPC only: no REST route, absent from the OpenAPI document."""

from rpc_starter.core.procedure import Procedure, define_procedure
from rpc_starter.core.result import HandlerResult, success
from rpc_starter.schemas.procedures import MessageOutput

HELLO_MESSAGE = "Hello from oRPC!"


def hello() -> HandlerResult[MessageOutput]:
    return success(MessageOutput(message=HELLO_MESSAGE))


def define() -> Procedure:
    return define_procedure(
        "hello", hello,
        output=MessageOutput,
        summary="Say hello",
    )
