"""Pydantic Schemas — procedure input/output models and the RPC wire envelope.

Invariants:
    - Schemas validate at the system boundary (procedure input and output)
    - Field constraints here are the single source for the OpenAPI document
"""
