"""
ProductService -- product lines of an inventory.

Responsibility:
    Creates the product lines (expected stock) that counts are compared
    against.

Invariants enforced:
    - Barcode is unique per inventory when present.
    - Description is 1..500 characters; expected balance and unit cost are
      non-negative.
    - Flush-only: never commits or rolls back the session.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from inventory_kernel.domain.dtos import ProductInfo
from inventory_kernel.exceptions import (
    DomainValidationError,
    DuplicateProductError,
    InventoryNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.models.product import Product
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.product")

DESCRIPTION_MAX_LENGTH = 500


class ProductService(BaseService[Product]):
    """Service for inventory product lines."""

    def create_product(
        self,
        inventory_id: int,
        description: str,
        actor_id: UUID,
        barcode: str | None = None,
        internal_code: str | None = None,
        lot: str | None = None,
        expires_on: date | None = None,
        expected_balance: Decimal = Decimal("0"),
        unit_cost: Decimal = Decimal("0"),
    ) -> ProductInfo:
        """
        Add a product line to an inventory.

        Raises:
            InventoryNotFoundError: inventory absent.
            DomainValidationError: description or amounts out of range.
            DuplicateProductError: barcode already used in the inventory.
        """
        if self.session.get(Inventory, inventory_id) is None:
            raise InventoryNotFoundError(inventory_id)
        if not description or not description.strip():
            raise DomainValidationError("produto", "description is required")
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise DomainValidationError(
                "produto",
                f"description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            )
        if expected_balance < 0:
            raise DomainValidationError("produto", "balance cannot be negative")
        if unit_cost < 0:
            raise DomainValidationError("produto", "cost cannot be negative")

        if barcode and ProductSelector(self.session).find_by_barcode(inventory_id, barcode):
            raise DuplicateProductError(inventory_id, barcode)

        product = Product(
            inventory_id=inventory_id,
            description=description,
            barcode=barcode,
            internal_code=internal_code,
            lot=lot,
            expires_on=expires_on,
            expected_balance=expected_balance,
            unit_cost=unit_cost,
            counted_balance=Decimal("0"),
            divergent=False,
            created_by_id=actor_id,
        )
        self.session.add(product)
        self.session.flush()

        logger.info(
            "product_created",
            extra={
                "product_id": product.id,
                "inventory_id": inventory_id,
                "barcode": barcode,
            },
        )
        return ProductInfo.from_model(product)
