"""
Audit trail notifiers.

Responsibility:
    Defines the ``AuditNotifier`` port through which services report
    lifecycle transitions, and its three implementations:

    * NullAuditNotifier     -- discards records (default when none is wired).
    * LoggingAuditNotifier  -- writes one structured log line per record.
    * AuditLogService       -- persists an AuditLog row.

Architecture position:
    Kernel > Services.  Services never call a notifier directly; they go
    through ``BaseService._emit_audit``, which swallows notifier failures.

Invariants enforced:
    - AuditLogService inserts inside a SAVEPOINT: a failed insert is rolled
      back to the savepoint and re-raised, leaving the caller's pending
      changes intact.
    - Audit rows are append-only; nothing here updates or deletes them.
"""

from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import AuditLogInfo, AuditRecord
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.audit_log import AuditLog

logger = get_logger("services.audit")


@runtime_checkable
class AuditNotifier(Protocol):
    """Receives one AuditRecord per lifecycle transition."""

    def notify(self, record: AuditRecord) -> None:
        ...


class NullAuditNotifier:
    """Discards every record."""

    def notify(self, record: AuditRecord) -> None:
        return None


class LoggingAuditNotifier:
    """Writes each record as an ``audit_recorded`` structured log line."""

    def notify(self, record: AuditRecord) -> None:
        logger.info(
            "audit_recorded",
            extra={
                "action": record.action,
                "actor_id": record.actor_id,
                "inventory_id": record.inventory_id,
                "sector_id": record.sector_id,
                "description": record.description,
                "audit_metadata": record.metadata,
                "occurred_at": record.occurred_at,
            },
        )


class AuditLogService:
    """
    Persists audit records as AuditLog rows in the caller's transaction.

    Contract:
        ``notify()`` flushes the new row inside ``session.begin_nested()``.
        On failure the savepoint is rolled back and the error re-raised so
        the service-level helper can log it.
    """

    def __init__(self, session: Session):
        self.session = session

    def notify(self, record: AuditRecord) -> None:
        self.record(record)

    def record(self, record: AuditRecord) -> AuditLogInfo:
        if not record.action or not record.action.strip():
            raise ValueError("Audit action is required")

        row = AuditLog(
            action=record.action,
            description=record.description,
            actor_id=record.actor_id,
            actor_name=record.actor_name,
            inventory_id=record.inventory_id,
            sector_id=record.sector_id,
            metadata_=record.metadata,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            created_at=record.occurred_at,
        )

        savepoint = self.session.begin_nested()
        try:
            self.session.add(row)
            self.session.flush()
        except Exception:
            savepoint.rollback()
            raise
        savepoint.commit()

        logger.debug(
            "audit_log_persisted",
            extra={"audit_log_id": row.id, "action": record.action},
        )
        return AuditLogInfo.from_model(row)
