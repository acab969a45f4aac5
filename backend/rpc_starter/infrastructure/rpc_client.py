"""RPC Client — typed caller-side facade over the RPC transport.

Invariants:
    - Every failure surfaces as RpcCallError: server errors keep their kind and
      message, transport faults and malformed responses become INTERNAL
    - ProcedureStub validates the returned value into its declared output type
    - QueryCache keys are (procedure, canonical JSON of input); errors are never cached
    - Concurrent identical queries share one in-flight request

Design Decisions:
    - httpx.AsyncClient injected, not created: callers own connection pooling,
      base URL and timeouts; tests pass an ASGITransport client
    - ApiClient lists one typed stub per procedure: every mapping visible in one place
    - Invalidation bumps a generation counter (global for invalidate(), per name
      for invalidate(name)) so a fetch that started before it cannot repopulate
      the cache with a stale value; other procedures' fetches are unaffected
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from rpc_starter.core.domain_types import ErrorKind
from rpc_starter.schemas.procedures import (
    CurrentTime,
    DivideInput,
    DivideOutput,
    GreetInput,
    MessageOutput,
    TodoList,
)

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class RpcCallError(Exception):
    """Client-side representation of a failed call."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
        details: list[dict] | None = None,
    ):
        super().__init__(f"[{kind.value}] {message}")
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.details = details or []


def _kind(code: Any) -> ErrorKind:
    try:
        return ErrorKind(code)
    except ValueError:
        return ErrorKind.INTERNAL


class RpcClient:
    """Posts {"procedure", "input"} envelopes and unwraps {"ok", ...} replies."""

    def __init__(self, http: httpx.AsyncClient, rpc_path: str = "/api/rpc"):
        self._http = http
        self._rpc_path = rpc_path

    async def call(self, procedure: str, input: Any = None) -> Any:
        payload = {"procedure": procedure, "input": to_jsonable_python(input)}
        try:
            response = await self._http.post(self._rpc_path, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"RPC transport failure calling '{procedure}': {e}")
            raise RpcCallError(ErrorKind.INTERNAL, f"Transport failure: {e}") from e
        try:
            body = response.json()
        except ValueError as e:
            raise RpcCallError(
                ErrorKind.INTERNAL,
                f"Malformed response (HTTP {response.status_code})",
                response.status_code,
            ) from e
        if not isinstance(body, dict) or "ok" not in body:
            raise RpcCallError(
                ErrorKind.INTERNAL,
                f"Unexpected response shape (HTTP {response.status_code})",
                response.status_code,
            )
        if body["ok"]:
            return body.get("value")
        error = body.get("error") or {}
        raise RpcCallError(
            _kind(error.get("code")),
            error.get("message", ""),
            response.status_code,
            error.get("details"),
        )


class ProcedureStub(Generic[InputT, OutputT]):
    """One callable per procedure: input in, validated output out."""

    def __init__(self, rpc: RpcClient, name: str, output: Any):
        self.name = name
        self._rpc = rpc
        self._adapter: TypeAdapter = TypeAdapter(output)

    async def __call__(self, input: InputT | None = None) -> OutputT:
        value = await self._rpc.call(self.name, input)
        try:
            return self._adapter.validate_python(value)
        except PydanticValidationError as e:
            raise RpcCallError(
                ErrorKind.INTERNAL, f"Response of '{self.name}' does not match its schema",
            ) from e


class ApiClient:
    """Typed facade mirroring the server registry."""

    def __init__(self, rpc: RpcClient):
        self.rpc = rpc
        self.hello: ProcedureStub[None, MessageOutput] = ProcedureStub(
            rpc, "hello", MessageOutput,
        )
        self.greet: ProcedureStub[GreetInput, MessageOutput] = ProcedureStub(
            rpc, "greet", MessageOutput,
        )
        self.divide: ProcedureStub[DivideInput, DivideOutput] = ProcedureStub(
            rpc, "divide", DivideOutput,
        )
        self.getTodos: ProcedureStub[None, TodoList] = ProcedureStub(
            rpc, "getTodos", TodoList,
        )
        self.getCurrentTime: ProcedureStub[None, CurrentTime] = ProcedureStub(
            rpc, "getCurrentTime", CurrentTime,
        )

    @classmethod
    def from_http(cls, http: httpx.AsyncClient, rpc_path: str = "/api/rpc") -> "ApiClient":
        return cls(RpcClient(http, rpc_path))


CacheKey = tuple[str, str]


class QueryCache:
    """Caller-side query cache with de-duplication and invalidation hooks."""

    def __init__(
        self,
        rpc: RpcClient,
        stale_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._rpc = rpc
        self._stale_seconds = stale_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, Any]] = {}
        self._inflight: dict[CacheKey, asyncio.Task] = {}
        self._generation = 0
        self._procedure_generations: dict[str, int] = {}

    @staticmethod
    def key(procedure: str, input: Any = None) -> CacheKey:
        canonical = json.dumps(
            to_jsonable_python(input), sort_keys=True, separators=(",", ":"),
        )
        return procedure, canonical

    async def query(self, procedure: str, input: Any = None) -> Any:
        key = self.key(procedure, input)
        cached = self._entries.get(key)
        if cached is not None and self._clock() - cached[0] < self._stale_seconds:
            return cached[1]
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._fetch(key, procedure, input, self._stamp(procedure)),
            )
            self._inflight[key] = task
        # shield: one cancelled caller must not cancel the shared request
        return await asyncio.shield(task)

    async def mutate(
        self, procedure: str, input: Any = None, invalidates: Iterable[str] = (),
    ) -> Any:
        result = await self._rpc.call(procedure, input)
        for name in invalidates:
            self.invalidate(name)
        return result

    def invalidate(self, procedure: str | None = None) -> None:
        """Drop cached results for one procedure, or for all when None."""
        if procedure is None:
            self._generation += 1
        else:
            self._procedure_generations[procedure] = (
                self._procedure_generations.get(procedure, 0) + 1
            )
        for store in (self._entries, self._inflight):
            for key in [k for k in store if procedure is None or k[0] == procedure]:
                del store[key]

    def __len__(self) -> int:
        return len(self._entries)

    def _stamp(self, procedure: str) -> tuple[int, int]:
        return self._generation, self._procedure_generations.get(procedure, 0)

    async def _fetch(
        self, key: CacheKey, procedure: str, input: Any, stamp: tuple[int, int],
    ) -> Any:
        try:
            value = await self._rpc.call(procedure, input)
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
        if stamp == self._stamp(procedure):
            self._entries[key] = (self._clock(), value)
        return value
