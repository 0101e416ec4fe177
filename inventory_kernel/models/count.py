"""
Module: inventory_kernel.models.count
Responsibility: ORM persistence for physical counts -- one quantity of one
    product observed in one sector.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - quantity >= 0 (checked by validation and CountService).
    - ``reconciled`` (reconferido) marks a product as re-checked; once any
      count of a product is reconciled, its divergence is no longer pending.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UTCDateTime, UUIDString



class Count(TrackedBase):
    """A physical count recorded by a handheld operator."""

    __tablename__ = "inventarios_contagens"

    __table_args__ = (
        Index("idx_count_sector", "sector_id"),
        Index("idx_count_product", "product_id"),
    )

    sector_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("setores.id"),
        nullable=False,
    )

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("inventarios_produtos.id"),
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(nullable=False)

    lot: Mapped[str | None] = mapped_column(String(50), nullable=True)

    expires_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    counted_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    # Flag raised by the counting client
    divergent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    reconciled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    counted_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Count {self.id} sector={self.sector_id} "
            f"product={self.product_id}: {self.quantity}>"
        )
