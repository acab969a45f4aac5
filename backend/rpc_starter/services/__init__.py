"""Services Layer — dispatcher, procedure handlers, and registry assembly.

Invariants:
    - Handlers return tagged results (success/failure), never raw values
    - Registry assembled explicitly in router.py (no auto-discovery)
"""
