"""Greet — personalized greeting; the schema rejects empty names."""

from rpc_starter.core.procedure import Procedure, define_procedure
from rpc_starter.core.result import HandlerResult, success
from rpc_starter.schemas.procedures import GreetInput, MessageOutput


def greet(data: GreetInput) -> HandlerResult[MessageOutput]:
    return success(MessageOutput(message=f"Hello, {data.name}!"))


def define() -> Procedure:
    return define_procedure(
        "greet", greet,
        input=GreetInput,
        output=MessageOutput,
        method="POST", path="/greet",
        summary="Greet someone by name",
    )
