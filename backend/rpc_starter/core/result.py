"""Tagged Result — handlers report expected outcomes as values, not exceptions.

Invariants:
    - A handler result is exactly one of Success or Failure
    - Failure always wraps a DomainError (kind + message), never a bare string

Design Decisions:
    - Frozen dataclasses over exceptions for business outcomes (divide by zero):
      control flow stays visible in the handler's return statements
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from rpc_starter.core.domain_types import ErrorKind
from rpc_starter.core.errors import DomainError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: DomainError


HandlerResult = Union[Success[T], Failure]


def success(value: T) -> Success[T]:
    return Success(value)


def failure(kind: ErrorKind, message: str) -> Failure:
    return Failure(DomainError(kind, message))
