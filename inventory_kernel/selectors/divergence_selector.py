"""
Module: inventory_kernel.selectors.divergence_selector
Responsibility: Divergence accounting -- compares what was counted against
    the expected balance of each product line.
Architecture position: Kernel > Selectors.  Pure read; no mutation.

Invariants enforced:
    - Counts are aggregated in SQL; the comparison against the expected
      balance is done on Decimal values, never floats.
    - A product with no counts is never a divergence.
    - A product (or product/sector pair) is reconciled when ANY of its
      counts carries the reconciled flag.

Two granularities exist:
    * ``pending_divergences`` aggregates per product across every sector of
      the inventory.  This is the closing gate's third condition.
    * ``list_divergences`` reports per (product, sector) pair, which is what
      supervisors review and re-count.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import case, func, select

from inventory_kernel.domain.dtos import DivergenceLine
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.count import Count
from inventory_kernel.models.product import Product
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.divergence")

STATUS_PENDING = "pendente"
STATUS_RECONCILED = "reconferido"
STATUS_ALL = "todos"


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class _CountAggregate:
    product_id: int
    sector_id: int | None
    counted: Decimal
    reconciled: bool


class DivergenceSelector(BaseSelector[Count]):
    """Read-only divergence queries for one inventory."""

    def _reconciled_flag(self):
        return func.max(case((Count.reconciled.is_(True), 1), else_=0))

    def _aggregate(
        self,
        inventory_id: int,
        per_sector: bool,
        sector_id: int | None = None,
    ) -> list[_CountAggregate]:
        columns = [Count.product_id]
        if per_sector:
            columns.append(Count.sector_id)
        stmt = (
            select(
                *columns,
                func.sum(Count.quantity).label("counted"),
                self._reconciled_flag().label("reconciled"),
            )
            .join(Sector, Sector.id == Count.sector_id)
            .where(Sector.inventory_id == inventory_id)
            .group_by(*columns)
        )
        if sector_id is not None:
            stmt = stmt.where(Sector.id == sector_id)

        aggregates = []
        for row in self.session.execute(stmt):
            aggregates.append(
                _CountAggregate(
                    product_id=row.product_id,
                    sector_id=row.sector_id if per_sector else None,
                    counted=_to_decimal(row.counted),
                    reconciled=bool(row.reconciled),
                )
            )
        return aggregates

    def _products(self, inventory_id: int, product_ids: set[int]) -> dict[int, Product]:
        if not product_ids:
            return {}
        products = self.session.scalars(
            select(Product).where(
                Product.inventory_id == inventory_id,
                Product.id.in_(product_ids),
            )
        ).all()
        return {p.id: p for p in products}

    def pending_divergences(self, inventory_id: int) -> int:
        """
        Number of product lines whose total count differs from the expected
        balance and that have not been reconciled.
        """
        aggregates = self._aggregate(inventory_id, per_sector=False)
        products = self._products(inventory_id, {a.product_id for a in aggregates})

        pending = 0
        for agg in aggregates:
            product = products.get(agg.product_id)
            if product is None:
                continue
            if agg.counted != _to_decimal(product.expected_balance) and not agg.reconciled:
                pending += 1

        logger.debug(
            "pending_divergences_computed",
            extra={"inventory_id": inventory_id, "pending": pending},
        )
        return pending

    def list_divergences(
        self,
        inventory_id: int,
        request: PageRequest,
        sector_id: int | None = None,
        status: str = STATUS_ALL,
    ) -> Page[DivergenceLine]:
        """
        Divergent (product, sector) pairs, largest absolute difference first.

        ``status`` is ``pendente`` (not reconciled), ``reconferido``
        (reconciled) or ``todos``.
        """
        if status not in (STATUS_PENDING, STATUS_RECONCILED, STATUS_ALL):
            raise ValueError(f"Unknown divergence status: {status!r}")

        aggregates = self._aggregate(inventory_id, per_sector=True, sector_id=sector_id)
        if not aggregates:
            return Page.empty(request)

        products = self._products(inventory_id, {a.product_id for a in aggregates})
        sector_ids = {a.sector_id for a in aggregates}
        sectors = {
            s.id: s
            for s in self.session.scalars(
                select(Sector).where(Sector.id.in_(sector_ids))
            ).all()
        }

        lines: list[DivergenceLine] = []
        for agg in aggregates:
            product = products.get(agg.product_id)
            if product is None:
                continue
            expected = _to_decimal(product.expected_balance)
            if agg.counted == expected:
                continue
            if status == STATUS_PENDING and agg.reconciled:
                continue
            if status == STATUS_RECONCILED and not agg.reconciled:
                continue
            sector = sectors.get(agg.sector_id)
            lines.append(
                DivergenceLine(
                    product_id=agg.product_id,
                    sector_id=agg.sector_id,
                    description=product.description,
                    expected=expected,
                    counted=agg.counted,
                    reconciled=agg.reconciled,
                    barcode=product.barcode,
                    sector_description=sector.description if sector else None,
                )
            )

        lines.sort(key=lambda line: (-abs(line.difference), line.product_id, line.sector_id))
        return Page.slice(lines, request)
