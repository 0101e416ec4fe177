"""
Module: inventory_kernel.selectors.audit_selector
Responsibility: Filtered, paginated read access to the audit trail.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import AuditLogInfo
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.models.audit_log import AuditLog
from inventory_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AuditLogFilter:
    """Every field is optional; set fields are combined with AND."""

    action: str | None = None
    actor_id: UUID | None = None
    inventory_id: int | None = None
    sector_id: int | None = None
    start: datetime | None = None
    end: datetime | None = None


class AuditLogSelector(BaseSelector[AuditLog]):
    """Read-only queries over the audit trail."""

    def find(self, filters: AuditLogFilter, request: PageRequest) -> Page[AuditLogInfo]:
        """Matching audit rows, newest first."""
        stmt = select(AuditLog)
        if filters.action:
            stmt = stmt.where(AuditLog.action == filters.action)
        if filters.actor_id is not None:
            stmt = stmt.where(AuditLog.actor_id == filters.actor_id)
        if filters.inventory_id is not None:
            stmt = stmt.where(AuditLog.inventory_id == filters.inventory_id)
        if filters.sector_id is not None:
            stmt = stmt.where(AuditLog.sector_id == filters.sector_id)
        if filters.start is not None:
            stmt = stmt.where(AuditLog.created_at >= filters.start)
        if filters.end is not None:
            stmt = stmt.where(AuditLog.created_at <= filters.end)
        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        return self._paginate(stmt, request, AuditLogInfo.from_model)

    def for_inventory(self, inventory_id: int) -> list[AuditLogInfo]:
        """Whole trail of one inventory, oldest first."""
        rows = self.session.scalars(
            select(AuditLog)
            .where(AuditLog.inventory_id == inventory_id)
            .order_by(AuditLog.created_at, AuditLog.id)
        ).all()
        return [AuditLogInfo.from_model(r) for r in rows]
