"""
Module: inventory_kernel.selectors.product_selector
Responsibility: Read access to inventory product lines.
Architecture position: Kernel > Selectors.
"""

from sqlalchemy import or_, select

from inventory_kernel.domain.dtos import ProductInfo
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.models.product import Product
from inventory_kernel.selectors.base import BaseSelector


class ProductSelector(BaseSelector[Product]):
    """Read-only queries over product lines."""

    def get(self, product_id: int) -> ProductInfo | None:
        product = self.session.get(Product, product_id)
        if product is None:
            return None
        return ProductInfo.from_model(product)

    def find_by_barcode(self, inventory_id: int, barcode: str) -> ProductInfo | None:
        product = self.session.scalars(
            select(Product).where(
                Product.inventory_id == inventory_id,
                Product.barcode == barcode,
            )
        ).first()
        if product is None:
            return None
        return ProductInfo.from_model(product)

    def list(
        self,
        inventory_id: int,
        request: PageRequest,
        search: str | None = None,
        divergent: bool | None = None,
    ) -> Page[ProductInfo]:
        """Products by description; ``search`` matches description or codes."""
        stmt = select(Product).where(Product.inventory_id == inventory_id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Product.description.ilike(pattern),
                    Product.barcode.ilike(pattern),
                    Product.internal_code.ilike(pattern),
                )
            )
        if divergent is not None:
            stmt = stmt.where(Product.divergent.is_(divergent))
        stmt = stmt.order_by(Product.description, Product.id)
        return self._paginate(stmt, request, ProductInfo.from_model)
