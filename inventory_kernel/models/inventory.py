"""
Module: inventory_kernel.models.inventory
Responsibility: ORM persistence for inventories -- one stock-counting campaign
    for one store of one company.
Architecture position: Kernel > Models.  May import from db/base.py and pure
    domain value objects only.

Invariants enforced:
    - At most one active inventory per store (checked by InventoryService on
      create, update-to-active and reopen; backed by a partial unique index).
    - ``active`` is False exactly when the inventory is finalized; closing
      stamps ``ended_at``/``closed_at``, reopening clears ``ended_at``.

Failure modes:
    - ValueError from close()/reopen() when called in the wrong state.  The
      service checks state first and raises the typed error instead.

Audit relevance:
    Closing and reopening produce FECHAMENTO_INVENTARIO /
    FINALIZACAO_INVENTARIO / REABERTURA_INVENTARIO audit records.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UTCDateTime, UUIDString
from inventory_kernel.domain.workflow import INVENTORY_ATIVO, INVENTORY_FINALIZADO


class Inventory(TrackedBase):
    """
    Stock-counting campaign.

    Contract:
        State changes go through close() and reopen(); both take timestamps
        from the caller's injected clock and never call ``datetime.now()``.

    Non-goals:
        - Does NOT check the closing gate; InventoryService does that.
    """

    __tablename__ = "inventarios"

    __table_args__ = (
        Index("idx_inventory_store", "store_id"),
        Index("idx_inventory_company", "company_id"),
        Index(
            "uq_inventory_active_store",
            "store_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

    store_id: Mapped[int] = mapped_column(Integer, nullable=False)

    company_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Minimum number of counts expected per product
    min_counts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    track_lot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    track_expiry: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    started_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    ended_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    closed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    closed_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    # Set only when an admin closed over pending blockers
    closing_justification: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Inventory {self.id} store={self.store_id}: {self.lifecycle_state}>"

    @property
    def is_finalized(self) -> bool:
        return not self.active

    @property
    def lifecycle_state(self) -> str:
        """INVENTORY_WORKFLOW state derived from the ``active`` flag."""
        return INVENTORY_FINALIZADO if self.is_finalized else INVENTORY_ATIVO

    def close(
        self,
        actor_id: UUID,
        closed_at: datetime,
        justification: str | None = None,
    ) -> None:
        """Finalize the inventory.

        Preconditions: inventory is active.
        Postconditions: active is False; ended_at and closed_at are
            ``closed_at``; closed_by_id and justification are recorded.
        """
        if not self.active:
            raise ValueError(f"Inventory {self.id} is already finalized")

        self.active = False
        self.ended_at = closed_at
        self.closed_at = closed_at
        self.closed_by_id = actor_id
        self.closing_justification = justification
        self.updated_by_id = actor_id

    def reopen(self, actor_id: UUID) -> None:
        """Make a finalized inventory active again and clear its end date."""
        if self.active:
            raise ValueError(f"Inventory {self.id} is not finalized")

        self.active = True
        self.ended_at = None
        self.updated_by_id = actor_id
