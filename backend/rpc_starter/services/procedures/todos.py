"""Get Todos — fixed two-item list behind simulated I/O latency.

Invariants:
    - Always the same two todos, same order; each call builds fresh objects
    - The sleep is cooperative (asyncio), never a blocking thread wait
"""

import asyncio
from functools import partial

from rpc_starter.core.procedure import Procedure, define_procedure
from rpc_starter.core.result import HandlerResult, success
from rpc_starter.schemas.procedures import Todo, TodoList

DEFAULT_LATENCY_SECONDS = 0.1


def fixed_todos() -> list[Todo]:
    return [
        Todo(id=1, text="Learn oRPC", completed=True),
        Todo(id=2, text="Build something awesome", completed=False),
    ]


async def get_todos(
    latency_seconds: float = DEFAULT_LATENCY_SECONDS,
) -> HandlerResult[list[Todo]]:
    # Stand-in for a database round trip
    await asyncio.sleep(latency_seconds)
    return success(fixed_todos())


def define(latency_seconds: float = DEFAULT_LATENCY_SECONDS) -> Procedure:
    return define_procedure(
        "getTodos", partial(get_todos, latency_seconds=latency_seconds),
        output=TodoList,
        method="GET", path="/todos",
        summary="List todos",
    )
