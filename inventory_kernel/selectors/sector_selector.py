"""
Module: inventory_kernel.selectors.sector_selector
Responsibility: Read access to counting sectors, including the per-inventory
    snapshot the closing gate is evaluated on.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from sqlalchemy import select

from inventory_kernel.domain.dtos import SectorInfo
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.domain.workflow import SectorStatus
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.base import BaseSelector


class SectorSelector(BaseSelector[Sector]):
    """Read-only queries over sectors."""

    def get(self, sector_id: int) -> SectorInfo | None:
        sector = self.session.get(Sector, sector_id)
        if sector is None:
            return None
        return SectorInfo.from_model(sector)

    def for_inventory(self, inventory_id: int) -> list[SectorInfo]:
        """Every sector of the inventory, in creation order."""
        sectors = self.session.scalars(
            select(Sector)
            .where(Sector.inventory_id == inventory_id)
            .order_by(Sector.id)
        ).all()
        return [SectorInfo.from_model(s) for s in sectors]

    def list(
        self,
        inventory_id: int,
        request: PageRequest,
        status: SectorStatus | None = None,
    ) -> Page[SectorInfo]:
        stmt = select(Sector).where(Sector.inventory_id == inventory_id)
        if status is not None:
            stmt = stmt.where(Sector.status == SectorStatus(status).value)
        stmt = stmt.order_by(Sector.id)
        return self._paginate(stmt, request, SectorInfo.from_model)
