"""
Module: inventory_kernel.models.audit_log
Responsibility: ORM persistence for the audit trail of lifecycle transitions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: rows are inserted by AuditLogService and never updated.
    - No foreign keys to inventories or sectors, so the trail outlives the
      rows it describes.

Audit relevance:
    AuditLog IS the audit trail.  Every inventory close/finalize/reopen,
    every sector open/finalize/reopen and every product reconciliation
    produces one row when AuditLogService is the configured notifier.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, UTCDateTime, UUIDString



class AuditAction(str, Enum):
    """Auditable actions, stored with their public API names."""

    # Inventory lifecycle
    FECHAMENTO_INVENTARIO = "FECHAMENTO_INVENTARIO"
    FINALIZACAO_INVENTARIO = "FINALIZACAO_INVENTARIO"
    REABERTURA_INVENTARIO = "REABERTURA_INVENTARIO"

    # Sector lifecycle
    ABERTURA_SETOR = "ABERTURA_SETOR"
    FINALIZACAO_SETOR = "FINALIZACAO_SETOR"
    REABERTURA_SETOR = "REABERTURA_SETOR"

    # Counting
    RECONFERENCIA_PRODUTO = "RECONFERENCIA_PRODUTO"


class AuditLog(Base):
    """One audit trail entry."""

    __tablename__ = "audit_logs"

    __table_args__ = (
        Index("idx_audit_log_action", "action"),
        Index("idx_audit_log_actor", "actor_id"),
        Index("idx_audit_log_inventory", "inventory_id"),
        Index("idx_audit_log_created", "created_at"),
    )

    action: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    actor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    inventory_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    sector_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.id} {self.action} actor={self.actor_id}>"
