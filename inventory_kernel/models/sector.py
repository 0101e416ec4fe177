"""
Module: inventory_kernel.models.sector
Responsibility: ORM persistence for counting sectors -- a numbered range of
    shelf locations inside one inventory.
Architecture position: Kernel > Models.  May import from db/base.py and pure
    domain value objects only.

Invariants enforced:
    - ``status`` is a SECTOR_WORKFLOW state (aberto / finalizado).
    - finalize() and reopen() are inverses: reopen restores status and clears
      exactly the fields finalize set.
    - ``opened_at`` is set once, the first time counting starts.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UTCDateTime, UUIDString

from inventory_kernel.domain.workflow import SectorStatus


class Sector(TrackedBase):
    """
    Counting sector.

    Contract:
        Transitions take the timestamp from the caller's clock.  The service
        checks the workflow before calling finalize()/reopen(); the model
        re-checks and raises ValueError on an illegal move.
    """

    __tablename__ = "setores"

    __table_args__ = (
        Index("idx_sector_inventory", "inventory_id"),
        Index("idx_sector_status", "status"),
    )

    inventory_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("inventarios.id"),
        nullable=False,
    )

    prefix: Mapped[str | None] = mapped_column(String(10), nullable=True)

    range_start: Mapped[int] = mapped_column(Integer, nullable=False)

    range_end: Mapped[int] = mapped_column(Integer, nullable=False)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[SectorStatus] = mapped_column(
        String(20),
        default=SectorStatus.ABERTO.value,
        nullable=False,
    )

    # First time the handheld app opened the sector for counting
    opened_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    finalized_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    finalized_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Sector {self.id} inventory={self.inventory_id}: {self.status}>"

    @property
    def is_finalized(self) -> bool:
        return self.status == SectorStatus.FINALIZADO

    def mark_opened(self, opened_at: datetime) -> bool:
        """Record the first opening.  Returns False if already opened."""
        if self.opened_at is not None:
            return False
        self.opened_at = opened_at
        return True

    def finalize(self, actor_id: UUID, finalized_at: datetime) -> None:
        if self.is_finalized:
            raise ValueError(f"Sector {self.id} is already finalized")
        self.status = SectorStatus.FINALIZADO.value
        self.finalized_at = finalized_at
        self.finalized_by_id = actor_id

    def reopen(self) -> None:
        if not self.is_finalized:
            raise ValueError(f"Sector {self.id} is not finalized")
        self.status = SectorStatus.ABERTO.value
        self.finalized_at = None
        self.finalized_by_id = None
