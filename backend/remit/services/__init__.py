"""Services Layer — quoting, recommendation, transfer orchestration and collaborators.

Invariants:
    - Services raise RemitError subclasses; HTTP mapping lives in api/error_handlers.py
    - Collaborators (rates, payouts, notifier, audit, alerts) are injected, never imported ad hoc
    - Side effects run after commit and never fail the primary operation

Design Decisions:
    - One file per service; collaborator implementations live beside the service using them
    - Factories in api/dependencies.py wire services per request (no module-level state)
"""
