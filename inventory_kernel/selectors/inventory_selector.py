"""
Module: inventory_kernel.selectors.inventory_selector
Responsibility: Read access to inventories -- find by id, find the active
    inventory of a store, and paginated listing.
Architecture position: Kernel > Selectors.
"""

from sqlalchemy import select

from inventory_kernel.domain.dtos import InventoryInfo
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.selectors.base import BaseSelector


class InventorySelector(BaseSelector[Inventory]):
    """Read-only queries over inventories."""

    def get(self, inventory_id: int) -> InventoryInfo | None:
        inventory = self.session.get(Inventory, inventory_id)
        if inventory is None:
            return None
        return InventoryInfo.from_model(inventory)

    def find_active_for_store(
        self,
        store_id: int,
        exclude_id: int | None = None,
    ) -> InventoryInfo | None:
        """The active inventory of ``store_id``, ignoring ``exclude_id``."""
        stmt = select(Inventory).where(
            Inventory.store_id == store_id,
            Inventory.active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(Inventory.id != exclude_id)
        inventory = self.session.scalars(stmt.order_by(Inventory.id)).first()
        if inventory is None:
            return None
        return InventoryInfo.from_model(inventory)

    def list(
        self,
        request: PageRequest,
        store_id: int | None = None,
        company_id: int | None = None,
        active: bool | None = None,
    ) -> Page[InventoryInfo]:
        """Inventories newest first, optionally filtered."""
        stmt = select(Inventory)
        if store_id is not None:
            stmt = stmt.where(Inventory.store_id == store_id)
        if company_id is not None:
            stmt = stmt.where(Inventory.company_id == company_id)
        if active is not None:
            stmt = stmt.where(Inventory.active.is_(active))
        stmt = stmt.order_by(Inventory.started_at.desc(), Inventory.id.desc())
        return self._paginate(stmt, request, InventoryInfo.from_model)
