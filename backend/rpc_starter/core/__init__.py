"""Core Layer — pure dispatch contract: types, errors, registry, schema export.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - No IO, no async: everything here is deterministic given its inputs

Design Decisions:
    - Functional core separated from imperative shell: the Dispatcher (which
      awaits handlers) lives in services/, the Registry it reads lives here
"""
