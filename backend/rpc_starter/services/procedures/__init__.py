"""Procedures — one module per procedure: handler + its configuration struct.

To add a procedure: create a module here exposing define(), then register it
in services/router.py.
"""
