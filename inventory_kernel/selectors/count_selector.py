"""
Module: inventory_kernel.selectors.count_selector
Responsibility: Read access to physical counts and their per-inventory totals.
Architecture position: Kernel > Selectors.
"""

from decimal import Decimal

from sqlalchemy import func, select

from inventory_kernel.domain.dtos import CountInfo
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.models.count import Count
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.base import BaseSelector


class CountSelector(BaseSelector[Count]):
    """Read-only queries over counts."""

    def get(self, count_id: int) -> CountInfo | None:
        count = self.session.get(Count, count_id)
        if count is None:
            return None
        return CountInfo.from_model(count)

    def list(
        self,
        request: PageRequest,
        sector_id: int | None = None,
        product_id: int | None = None,
        divergent: bool | None = None,
    ) -> Page[CountInfo]:
        stmt = select(Count)
        if sector_id is not None:
            stmt = stmt.where(Count.sector_id == sector_id)
        if product_id is not None:
            stmt = stmt.where(Count.product_id == product_id)
        if divergent is not None:
            stmt = stmt.where(Count.divergent.is_(divergent))
        stmt = stmt.order_by(Count.counted_at.desc(), Count.id.desc())
        return self._paginate(stmt, request, CountInfo.from_model)

    def total_for_inventory(self, inventory_id: int) -> int:
        """Number of counts recorded in any sector of the inventory."""
        return self.session.scalar(
            select(func.count(Count.id))
            .join(Sector, Sector.id == Count.sector_id)
            .where(Sector.inventory_id == inventory_id)
        ) or 0

    def counted_quantity(self, product_id: int) -> Decimal:
        """Sum of every count of the product, across all sectors."""
        total = self.session.scalar(
            select(func.sum(Count.quantity)).where(Count.product_id == product_id)
        )
        return Decimal(str(total)) if total is not None else Decimal("0")
