"""Core Layer — pure domain logic: pricing, ranking, state machine, request rules.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Functions are pure and deterministic, except reference code generation (secrets)

Design Decisions:
    - Functional core separated from the imperative shell: services/ do the IO
      and call into core/ for every decision
"""
