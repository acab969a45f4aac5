"""RPC Wire Schemas — the call envelope posted to the RPC endpoint.

Invariants:
    - procedure: non-empty; dotted names address mounted namespaces
    - input: any JSON value (validated later against the procedure's schema)
"""

from typing import Any

from pydantic import BaseModel, Field


class RpcRequest(BaseModel):
    procedure: str = Field(min_length=1)
    input: Any = None
