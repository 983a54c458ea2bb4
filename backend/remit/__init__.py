"""Remit Core Package — quote, route recommendation and transfer orchestration.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
