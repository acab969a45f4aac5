"""Route Modules — one file per concern (transports, schema document, docs page, health).

Invariants:
    - Each module defines its own APIRouter
    - Routes never contain procedure logic
"""
