"""Infrastructure Layer — logging setup and the HTTP client facade.

Invariants:
    - External calls wrapped with error mapping (transport faults become RpcCallError)

Design Decisions:
    - Client lives here, not in core/: it performs network IO
"""
