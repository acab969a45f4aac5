"""Dispatcher — resolves, validates, invokes and serializes one procedure call.

Invariants:
    - dispatch() never raises for expected failures: every DomainError becomes a
      ResultEnvelope with ok=False and the kind's status code
    - REST path/query strings are coerced before validation; RPC input never is
    - Input and output are validated in pydantic strict mode (JSON semantics)
    - An output that fails its schema, or a handler that returns something other
      than Success/Failure, is INTERNAL: logged server-side, opaque to the client
    - asyncio.CancelledError propagates untouched (client went away)
    - Holds no mutable state: safe to share across concurrent requests

Design Decisions:
    - Expected outcomes come back as Failure values; raised DomainErrors are
      still honoured so helpers deep in a handler can bail out
    - Per-call timeout is optional and owned here, not by each handler
    - Strict validation via validate_json(to_json(value)): JSON-mode strictness
      accepts objects for models and ints for floats, rejects "3" for a number
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json

from rpc_starter.core.coercion import coerce_url_values
from rpc_starter.core.domain_types import Transport
from rpc_starter.core.errors import (
    DomainError,
    ErrorContext,
    InternalError,
    ProcedureTimeoutError,
    ValidationError,
    validation_issues,
)
from rpc_starter.core.procedure import Procedure
from rpc_starter.core.registry import Registry
from rpc_starter.core.result import Failure, Success

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallEnvelope:
    """One incoming call, before resolution."""
    transport: Transport
    raw_input: Any = None
    procedure_name: str | None = None
    method: str | None = None
    path: str | None = None
    query: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def rpc(cls, procedure_name: str, raw_input: Any = None) -> "CallEnvelope":
        return cls(Transport.RPC, raw_input, procedure_name=procedure_name)

    @classmethod
    def rest(
        cls, method: str, path: str,
        body: Any = None, query: Mapping[str, str] | None = None,
    ) -> "CallEnvelope":
        return cls(
            Transport.REST, body, method=method, path=path, query=dict(query or {}),
        )


@dataclass(frozen=True)
class ResultEnvelope:
    """Outcome of one dispatch, ready for either transport to serialize."""
    ok: bool
    status_code: int
    value: Any = None
    error: DomainError | None = None
    procedure_name: str | None = None

    def to_rpc_body(self) -> dict:
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "error": self.error.to_rpc_error()}

    def to_rest_body(self) -> Any:
        if self.ok:
            return self.value
        return self.error.to_response()


class Dispatcher:
    """Executes calls against a read-only Registry."""

    def __init__(self, registry: Registry, timeout_seconds: float | None = None):
        self._registry = registry
        self._timeout = timeout_seconds

    @property
    def registry(self) -> Registry:
        return self._registry

    async def dispatch(self, envelope: CallEnvelope) -> ResultEnvelope:
        started = time.perf_counter()
        procedure: Procedure | None = None
        try:
            procedure, path_params = self._resolve(envelope)
            validated = self._prepare_input(procedure, envelope, path_params)
            outcome = await self._invoke(procedure, validated)
            value = self._unwrap(procedure, outcome)
            result = ResultEnvelope(
                ok=True, status_code=200, value=value, procedure_name=procedure.name,
            )
        except DomainError as e:
            result = self._failed(e, envelope, procedure)
        except Exception as e:
            name = procedure.name if procedure else envelope.procedure_name
            logger.error(
                f"Unhandled exception in procedure '{name}': {e}",
                exc_info=True,
                extra={"procedure": name, "transport": envelope.transport.value},
            )
            result = self._failed(InternalError(), envelope, procedure)

        logger.info(
            f"{envelope.transport.value} {result.procedure_name or envelope.path} "
            f"-> {result.status_code}",
            extra={
                "procedure": result.procedure_name,
                "transport": envelope.transport.value,
                "path": envelope.path,
                "status_code": result.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            },
        )
        return result

    def _resolve(self, envelope: CallEnvelope) -> tuple[Procedure, dict[str, str]]:
        if envelope.transport is Transport.RPC:
            return self._registry.lookup(envelope.procedure_name or ""), {}
        return self._registry.match_route(envelope.method or "", envelope.path or "")

    def _prepare_input(
        self, procedure: Procedure, envelope: CallEnvelope,
        path_params: dict[str, str],
    ) -> Any:
        if procedure.input_adapter is None:
            return None
        raw = envelope.raw_input
        if envelope.transport is Transport.REST:
            url_values = coerce_url_values(
                {**envelope.query, **path_params}, procedure.input_schema,
            )
            if raw is None:
                raw = url_values
            elif isinstance(raw, dict):
                raw = {**raw, **url_values}
        try:
            return procedure.input_adapter.validate_json(to_json(raw), strict=True)
        except PydanticValidationError as e:
            raise ValidationError(validation_issues(e.errors())) from e
        except PydanticSerializationError as e:
            raise ValidationError(
                [{"field": "input", "message": str(e), "type": "not_serializable"}],
            ) from e

    async def _invoke(self, procedure: Procedure, validated: Any) -> Any:
        if procedure.input_adapter is None:
            outcome = procedure.handler()
        else:
            outcome = procedure.handler(validated)
        if not inspect.isawaitable(outcome):
            return outcome
        if self._timeout is None:
            return await outcome
        try:
            return await asyncio.wait_for(outcome, self._timeout)
        except asyncio.TimeoutError:
            raise ProcedureTimeoutError(self._timeout) from None

    def _unwrap(self, procedure: Procedure, outcome: Any) -> Any:
        if isinstance(outcome, Failure):
            raise outcome.error
        if not isinstance(outcome, Success):
            raise InternalError(
                f"handler returned {type(outcome).__name__}, expected Success or Failure",
            )
        try:
            checked = procedure.output_adapter.validate_json(
                to_json(outcome.value), strict=True,
            )
        except (PydanticValidationError, PydanticSerializationError) as e:
            raise InternalError(f"output violates its schema: {e}") from e
        return procedure.output_adapter.dump_python(checked, mode="json")

    def _failed(
        self, error: DomainError, envelope: CallEnvelope,
        procedure: Procedure | None,
    ) -> ResultEnvelope:
        name = procedure.name if procedure else envelope.procedure_name
        error.context = ErrorContext(
            timestamp=error.context.timestamp,
            procedure_name=name,
            path=envelope.path,
            transport=envelope.transport.value,
            debug_info=error.context.debug_info,
        )
        if isinstance(error, InternalError) and error.cause:
            logger.error(
                f"Internal error in procedure '{name}': {error.cause}",
                extra={"procedure": name, "error_code": error.code},
            )
        return ResultEnvelope(
            ok=False, status_code=error.http_status, error=error, procedure_name=name,
        )

