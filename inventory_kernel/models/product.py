"""
Module: inventory_kernel.models.product
Responsibility: ORM persistence for inventory product lines -- the expected
    stock (``expected_balance``) a count is compared against.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Barcode is unique per inventory when present (uq_product_barcode).
    - ``counted_balance`` and ``divergent`` are derived: CountService
      recomputes them whenever a count of the product changes.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class Product(TrackedBase):
    """Product line of one inventory."""

    __tablename__ = "inventarios_produtos"

    __table_args__ = (
        UniqueConstraint("inventory_id", "barcode", name="uq_product_barcode"),
        Index("idx_product_inventory", "inventory_id"),
        Index("idx_product_internal_code", "internal_code"),
    )

    inventory_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("inventarios.id"),
        nullable=False,
    )

    barcode: Mapped[str | None] = mapped_column(String(50), nullable=True)

    internal_code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    lot: Mapped[str | None] = mapped_column(String(50), nullable=True)

    expires_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Stock on record (saldo)
    expected_balance: Mapped[Decimal] = mapped_column(
        default=Decimal("0"),
        nullable=False,
    )

    unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(18, 4),
        default=Decimal("0"),
        nullable=False,
    )

    counted_balance: Mapped[Decimal] = mapped_column(
        default=Decimal("0"),
        nullable=False,
    )

    divergent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Product {self.id} inventory={self.inventory_id}: {self.description!r}>"
