"""
CountService -- recording physical counts and reconciling divergences.

Responsibility:
    Records and corrects the quantities counted by handheld operators, keeps
    each product line's ``counted_balance``/``divergent`` in step with its
    counts, and marks products as reconciled (reconferido) after a
    supervisor re-check.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - quantity >= 0.
    - No count is recorded or changed in a finalized sector or in a
      finalized inventory.
    - After any count change, the product's counted_balance equals the sum
      of its counts and divergent is ``counted_balance != expected_balance``.
    - Flush-only: never commits or rolls back the session.

Audit relevance:
    reconcile_product -> RECONFERENCIA_PRODUTO.  The first count in a sector
    that was never opened also opens it (ABERTURA_SETOR).
"""

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update

from inventory_kernel.domain.dtos import Actor, CountInfo, ProductInfo
from inventory_kernel.exceptions import (
    CountNotFoundError,
    DomainValidationError,
    InventoryNotFoundError,
    ProductNotFoundError,
    SectorFinalizedError,
    SectorNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.audit_log import AuditAction
from inventory_kernel.models.count import Count
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.models.product import Product
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.count_selector import CountSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.count")

_UPDATABLE_FIELDS = frozenset({"quantity", "lot", "expires_on", "divergent"})


class CountService(BaseService[Count]):
    """Service for physical counts."""

    def _open_sector(self, sector_id: int) -> Sector:
        """Load a sector that accepts counts."""
        sector = self.session.get(Sector, sector_id)
        if sector is None:
            raise SectorNotFoundError(sector_id)
        inventory = self.session.get(Inventory, sector.inventory_id)
        if sector.is_finalized or inventory is None or inventory.is_finalized:
            logger.warning(
                "count_rejected_sector_closed",
                extra={"sector_id": sector_id, "inventory_id": sector.inventory_id},
            )
            raise SectorFinalizedError(sector_id)
        return sector

    @staticmethod
    def _check_quantity(quantity: Decimal) -> None:
        if quantity < 0:
            raise DomainValidationError("contagem", "quantity cannot be negative")

    def _recompute_product(self, product: Product) -> None:
        product.counted_balance = CountSelector(self.session).counted_quantity(product.id)
        product.divergent = product.counted_balance != product.expected_balance

    def record_count(
        self,
        sector_id: int,
        product_id: int,
        quantity: Decimal,
        actor: Actor,
        lot: str | None = None,
        expires_on: date | None = None,
        divergent: bool = False,
    ) -> CountInfo:
        """
        Record one count of a product in a sector.

        Raises:
            SectorNotFoundError, ProductNotFoundError,
            DomainValidationError (negative quantity, or product from
            another inventory), SectorFinalizedError.
        """
        self._check_quantity(quantity)
        sector = self._open_sector(sector_id)
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.inventory_id != sector.inventory_id:
            raise DomainValidationError(
                "contagem", "product and sector belong to different inventories",
            )

        now = self._clock.now()
        first_opening = sector.mark_opened(now)

        count = Count(
            sector_id=sector_id,
            product_id=product_id,
            quantity=quantity,
            lot=lot,
            expires_on=expires_on,
            counted_at=now,
            divergent=divergent,
            reconciled=False,
            counted_by_id=actor.id,
            created_by_id=actor.id,
        )
        self.session.add(count)
        self.session.flush()
        self._recompute_product(product)
        self.session.flush()

        logger.info(
            "count_recorded",
            extra={
                "count_id": count.id,
                "sector_id": sector_id,
                "product_id": product_id,
                "quantity": quantity,
            },
        )
        if first_opening:
            self._emit_audit(
                AuditAction.ABERTURA_SETOR.value,
                actor,
                description=f"Sector {sector.description or sector.id} opened",
                inventory_id=sector.inventory_id,
                sector_id=sector.id,
            )
        return CountInfo.from_model(count)

    def update_count(self, count_id: int, actor: Actor, **changes: Any) -> CountInfo:
        """
        Correct a count; only ``quantity``, ``lot``, ``expires_on`` and
        ``divergent`` may change.

        Raises:
            CountNotFoundError, DomainValidationError, SectorFinalizedError.
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise DomainValidationError(
                "contagem", f"unknown fields: {', '.join(sorted(unknown))}",
            )
        if "quantity" in changes:
            if changes["quantity"] is None:
                raise DomainValidationError("contagem", "quantity is required")
            self._check_quantity(changes["quantity"])

        count = self.session.get(Count, count_id)
        if count is None:
            raise CountNotFoundError(count_id)
        self._open_sector(count.sector_id)

        for name, value in changes.items():
            setattr(count, name, value)
        count.updated_by_id = actor.id
        self.session.flush()

        product = self.session.get(Product, count.product_id)
        self._recompute_product(product)
        self.session.flush()

        logger.info(
            "count_updated",
            extra={"count_id": count_id, "fields": sorted(changes)},
        )
        return CountInfo.from_model(count)

    def reconcile_product(
        self,
        inventory_id: int,
        product_id: int,
        actor: Actor,
    ) -> ProductInfo:
        """
        Mark every count of the product in the inventory as reconciled, so
        its divergence no longer blocks closing.

        Raises:
            InventoryNotFoundError, ProductNotFoundError.
        """
        if self.session.get(Inventory, inventory_id) is None:
            raise InventoryNotFoundError(inventory_id)
        product = self.session.get(Product, product_id)
        if product is None or product.inventory_id != inventory_id:
            raise ProductNotFoundError(product_id)

        sector_ids = select(Sector.id).where(Sector.inventory_id == inventory_id)
        result = self.session.execute(
            update(Count)
            .where(Count.product_id == product_id, Count.sector_id.in_(sector_ids))
            .values(reconciled=True, updated_by_id=actor.id)
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()

        logger.info(
            "product_reconciled",
            extra={
                "inventory_id": inventory_id,
                "product_id": product_id,
                "counts": result.rowcount,
            },
        )
        self._emit_audit(
            AuditAction.RECONFERENCIA_PRODUTO.value,
            actor,
            description=f"Product #{product_id} reconciled",
            inventory_id=inventory_id,
            metadata={
                "product_id": product_id,
                "counted": str(product.counted_balance),
                "expected": str(product.expected_balance),
            },
        )
        return ProductInfo.from_model(product)
