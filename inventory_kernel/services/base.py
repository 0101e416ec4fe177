"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer, plus the single best-effort path
    through which services hand audit records to the configured
    AuditNotifier.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Every service in ``inventory_kernel/services/`` that performs write
    operations extends this class.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (``session_scope`` in the use-case layer, or the test harness) owns
      commit/rollback.
    - Audit isolation: a failing notifier never propagates out of a
      service and never undoes the change it describes.

Failure modes:
    - If a subclass calls ``session.commit()`` the use case loses its
      atomicity (a later failure can no longer roll back earlier steps).
"""

from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import Actor, AuditRecord
from inventory_kernel.logging_config import get_logger
from inventory_kernel.services.audit_service import AuditNotifier, NullAuditNotifier

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.  Time comes from the injected ``Clock``; audit
        records go to the injected notifier (a no-op when none is given).

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only (read) methods -- those belong
          in ``inventory_kernel/selectors/``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        notifier: AuditNotifier | None = None,
    ):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            clock: Time source; defaults to SystemClock.
            notifier: AuditNotifier; defaults to NullAuditNotifier.
        """
        self.session = session
        self._clock = clock or SystemClock()
        self._notifier = notifier or NullAuditNotifier()

    def _emit_audit(
        self,
        action: str,
        actor: Actor,
        description: str | None = None,
        inventory_id: int | None = None,
        sector_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Hand an audit record to the notifier, best effort.

        Called after the primary change has been flushed.  Any exception
        raised by the notifier is logged at WARNING and discarded.
        """
        record = AuditRecord(
            action=action,
            actor_id=actor.id,
            occurred_at=self._clock.now(),
            description=description,
            actor_name=actor.name,
            inventory_id=inventory_id,
            sector_id=sector_id,
            metadata=metadata,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
        )
        try:
            self._notifier.notify(record)
        except Exception as exc:
            logger.warning(
                "audit_notification_failed",
                extra={
                    "action": action,
                    "inventory_id": inventory_id,
                    "sector_id": sector_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
