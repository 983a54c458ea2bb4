"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured camelCase JSON responses

Design Decisions:
    - Thin routes delegate to services; services raise RemitError, handlers render it
"""
