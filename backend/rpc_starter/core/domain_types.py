"""Domain Types — enums shared by the dispatch contract.

Invariants:
    - ErrorKind.http_status is the single source for kind → transport status
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure kinds visible to clients."""
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.INTERNAL: 500,
}


class HttpMethod(str, Enum):
    """Route methods. ANY matches every incoming method."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    ANY = "ANY"

    @property
    def has_body(self) -> bool:
        return self not in (HttpMethod.GET, HttpMethod.DELETE)


class Transport(str, Enum):
    """How a call reached the Dispatcher."""
    RPC = "rpc"
    REST = "rest"
