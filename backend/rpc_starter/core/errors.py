"""Error Hierarchy — typed, classified failures for the dispatch contract.

Invariants:
    - Every DomainError has a kind (ErrorKind), category (ErrorCategory), severity (ErrorSeverity)
    - http_status always derives from kind (BAD_REQUEST→400, NOT_FOUND→404, TIMEOUT→504, INTERNAL→500)
    - to_response() produces the REST envelope; to_rpc_error() the RPC error body
    - InternalError never carries the underlying cause to the client

Design Decisions:
    - Single hierarchy with DomainError base: one FastAPI handler catches all
    - Registration errors are ValueErrors, not DomainErrors: they are programming
      errors raised at startup and never reach a client
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from rpc_starter.core.domain_types import ErrorKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    procedure_name: str | None = None
    path: str | None = None
    transport: str | None = None
    debug_info: dict[str, Any] | None = None


class DomainError(Exception):
    """Base exception for all classified failures a client may see."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        category: ErrorCategory = ErrorCategory.BUSINESS_RULE,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: list[dict[str, Any]] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details
        self.context = context or ErrorContext()

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def http_status(self) -> int:
        return self.kind.http_status

    def to_rpc_error(self) -> dict:
        """Error body shared by both transports."""
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
        }
        if self.details:
            body["details"] = self.details
        return body

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = self.to_rpc_error()
        body["timestamp"] = self.context.timestamp.isoformat()
        body["context"] = {
            "procedure": self.context.procedure_name,
            "path": self.context.path,
        }
        return {"error": body}


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(DomainError):
    """Input failed its declared schema."""
    def __init__(
        self,
        details: list[dict[str, Any]],
        message: str = "Invalid request data",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            ErrorKind.BAD_REQUEST, message, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, details, context,
        )


class NotFoundError(DomainError):
    """Unknown procedure name or unmatched route."""
    def __init__(self, resource_type: str, resource_id: str, context: ErrorContext | None = None):
        super().__init__(
            ErrorKind.NOT_FOUND, f"{resource_type} '{resource_id}' not found",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.ERROR, None, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Server Errors (500-level) ──────────────────────────────────

class ProcedureTimeoutError(DomainError):
    """Handler exceeded the per-call timeout."""
    def __init__(self, timeout_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            ErrorKind.TIMEOUT, f"Procedure did not complete within {timeout_seconds:g}s",
            ErrorCategory.TIMEOUT, ErrorSeverity.CRITICAL, None, context,
        )
        self.timeout_seconds = timeout_seconds


class InternalError(DomainError):
    """Handler bug or contract violation. The cause is logged, never sent."""
    def __init__(self, cause: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            ErrorKind.INTERNAL, "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL, None, context,
        )
        self.cause = cause


# ─── Registration Errors (startup only) ─────────────────────────

class RegistryError(ValueError):
    """Registry was populated incorrectly."""


class DuplicateNameError(RegistryError):
    def __init__(self, name: str):
        super().__init__(f"Procedure '{name}' is already registered")
        self.name = name


class DuplicateRouteError(RegistryError):
    def __init__(self, method: str, path: str, existing: str):
        super().__init__(f"Route {method} {path} is already bound to '{existing}'")
        self.method = method
        self.path = path
        self.existing = existing


class RegistryFrozenError(RegistryError):
    def __init__(self, name: str):
        super().__init__(f"Cannot register '{name}': registry is frozen")
        self.name = name


def validation_issues(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Field-level details from pydantic's errors() list."""
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in errors
    ]
