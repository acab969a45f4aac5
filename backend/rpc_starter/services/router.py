"""Router — assembles the application Registry from the procedure modules.

Invariants:
    - Every procedure is registered here by name: adding one requires editing this file
    - The returned Registry is frozen

Design Decisions:
    - Settings passed in, not read globally: tests build registries with any config
"""

from rpc_starter.config import Settings
from rpc_starter.core.registry import Registry
from rpc_starter.services.procedures import current_time, divide, greet, hello, todos


def build_registry(settings: Settings) -> Registry:
    registry = Registry()
    registry.register("hello", hello.define())
    registry.register("greet", greet.define())
    registry.register("divide", divide.define())
    registry.register(
        "getTodos", todos.define(latency_seconds=settings.todos_latency_ms / 1000),
    )
    registry.register("getCurrentTime", current_time.define(zone=settings.timezone))
    return registry.freeze()
