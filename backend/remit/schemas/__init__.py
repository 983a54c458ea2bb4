"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - JSON is camelCase on the wire; Python attributes stay snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Rounding for display happens in response builders, never in ranking or pricing
"""
