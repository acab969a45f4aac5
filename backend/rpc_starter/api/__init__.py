"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes translate HTTP to CallEnvelope and back; the Dispatcher decides

Design Decisions:
    - Thin routes delegate to services
"""
