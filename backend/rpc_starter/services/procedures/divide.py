"""Divide — floating-point division with explicit failures for unusable operands.

Invariants:
    - b == 0 → BAD_REQUEST "Cannot divide by zero" (returned, not raised)
    - a result that overflows to infinity → BAD_REQUEST, never a non-finite output
    - otherwise result == a / b with float semantics
"""

import math

from rpc_starter.core.domain_types import ErrorKind
from rpc_starter.core.procedure import Procedure, define_procedure
from rpc_starter.core.result import HandlerResult, failure, success
from rpc_starter.schemas.procedures import DivideInput, DivideOutput

DIVIDE_BY_ZERO_MESSAGE = "Cannot divide by zero"
OVERFLOW_MESSAGE = "Result is too large to represent"


def divide(data: DivideInput) -> HandlerResult[DivideOutput]:
    if data.b == 0:
        return failure(ErrorKind.BAD_REQUEST, DIVIDE_BY_ZERO_MESSAGE)
    result = data.a / data.b
    if not math.isfinite(result):
        return failure(ErrorKind.BAD_REQUEST, OVERFLOW_MESSAGE)
    return success(DivideOutput(result=result))


def define() -> Procedure:
    return define_procedure(
        "divide", divide,
        input=DivideInput,
        output=DivideOutput,
        method="POST", path="/divide",
        summary="Divide a by b",
        errors=(ErrorKind.BAD_REQUEST,),
    )
