"""Audit Log — append-only audit_log rows, written in their own session.

Invariants:
    - One row per append; rows are never updated
    - Uses its own transaction from the database manager: a failed audit write
      cannot roll back the change it describes

Design Decisions:
    - Manager resolved at call time (get_db_manager), so tests that swap the
      singleton also capture audit rows
"""

import logging

from remit.core.collaborator_protocols import AuditEntry
from remit.infrastructure.database import get_db_manager
from remit.models.audit_log_entry import AuditLogEntry

logger = logging.getLogger(__name__)


class SqlAuditLog:
    async def append(self, entry: AuditEntry) -> None:
        async with get_db_manager().transaction() as db:
            db.add(AuditLogEntry(
                actor=entry.actor,
                action=entry.action.value,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                details=dict(entry.metadata),
            ))
        logger.debug(f"Audit {entry.action.value} {entry.entity_type}:{entry.entity_id}")
