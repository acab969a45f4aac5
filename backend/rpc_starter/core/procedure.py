"""Procedure Definition — explicit configuration struct per procedure.

Invariants:
    - Procedure and Route are frozen: immutable after registration
    - Route paths start with "/" and carry no trailing slash (except "/" itself)
    - Input/output TypeAdapters are built once, at definition time
    - A procedure without input_schema is called with no arguments

Design Decisions:
    - Plain dataclass + define_procedure() over a chainable builder: every
      field of a procedure is visible in one call
    - output_schema accepts any pydantic-adaptable type (models, list[Model]),
      input_schema only BaseModel subclasses: inputs are always named-field objects
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, TypeAdapter

from rpc_starter.core.domain_types import ErrorKind, HttpMethod

_PARAM_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

Handler = Callable[..., Any]


def normalize_path(path: str) -> str:
    """Collapse a trailing slash so /todos and /todos/ match the same route."""
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


@dataclass(frozen=True)
class Route:
    method: HttpMethod
    path: str
    param_names: tuple[str, ...] = field(init=False, compare=False)
    pattern: re.Pattern | None = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {self.path!r}")
        object.__setattr__(self, "method", HttpMethod(self.method.upper()))
        object.__setattr__(self, "path", normalize_path(self.path))
        names = tuple(_PARAM_RE.findall(self.path))
        object.__setattr__(self, "param_names", names)
        object.__setattr__(self, "pattern", _compile(self.path) if names else None)

    @property
    def is_static(self) -> bool:
        return not self.param_names


def _compile(path: str) -> re.Pattern:
    parts = _PARAM_RE.split(path)
    # split() alternates literal text and captured names
    regex = "".join(
        re.escape(part) if i % 2 == 0 else f"(?P<{part}>[^/]+)"
        for i, part in enumerate(parts)
    )
    return re.compile(f"^{regex}$")


@dataclass(frozen=True)
class Procedure:
    name: str
    handler: Handler
    output_schema: Any
    input_schema: type[BaseModel] | None = None
    route: Route | None = None
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    errors: tuple[ErrorKind, ...] = ()
    security: tuple[str, ...] | None = None
    input_adapter: TypeAdapter | None = field(init=False, repr=False, compare=False)
    output_adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Procedure name cannot be empty")
        if self.input_schema is not None and not (
            isinstance(self.input_schema, type) and issubclass(self.input_schema, BaseModel)
        ):
            raise TypeError(
                f"input_schema of '{self.name}' must be a pydantic BaseModel subclass",
            )
        object.__setattr__(
            self, "input_adapter",
            TypeAdapter(self.input_schema) if self.input_schema else None,
        )
        object.__setattr__(self, "output_adapter", TypeAdapter(self.output_schema))


def define_procedure(
    name: str,
    handler: Handler,
    *,
    output: Any,
    input: type[BaseModel] | None = None,
    method: HttpMethod | str | None = None,
    path: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    tags: tuple[str, ...] = (),
    errors: tuple[ErrorKind, ...] = (),
    security: tuple[str, ...] | None = None,
) -> Procedure:
    """Assemble a Procedure. method and path must be given together."""
    if (method is None) != (path is None):
        raise ValueError(f"Procedure '{name}': method and path must be given together")
    route = Route(method, path) if path is not None else None
    return Procedure(
        name=name, handler=handler, output_schema=output, input_schema=input,
        route=route, summary=summary, description=description,
        tags=tuple(tags), errors=tuple(errors), security=security,
    )
