"""
SectorService -- counting sector creation and the sector state machine.

Responsibility:
    Creates sectors inside an inventory and drives them through
    SECTOR_WORKFLOW: finalize (aberto -> finalizado) and reopen
    (finalizado -> aberto).  Also records the first time a sector is opened
    for counting, which the closing gate depends on.

Architecture position:
    Kernel > Services -- imperative shell.  Legal transitions come from
    ``domain.workflow.SECTOR_WORKFLOW``; this service never compares status
    strings to decide legality.

Invariants enforced:
    - A sector cannot be finalized twice without being reopened.
    - Only a finalized sector can be reopened; anything else raises
      InvalidSectorTransitionError (distinct from SectorNotFoundError).
    - finalize then reopen leaves every persisted field as it was before
      finalize (the ``updated_at`` timestamp aside).
    - Flush-only: never commits or rolls back the session.

Audit relevance:
    ABERTURA_SETOR (first opening only), FINALIZACAO_SETOR, REABERTURA_SETOR.
"""

from uuid import UUID

from inventory_kernel.domain.closing import sector_number
from inventory_kernel.domain.dtos import Actor, SectorInfo
from inventory_kernel.domain.workflow import SECTOR_WORKFLOW, SectorStatus
from inventory_kernel.exceptions import (
    DomainValidationError,
    InventoryNotFoundError,
    InvalidSectorTransitionError,
    SectorNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.audit_log import AuditAction
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.models.sector import Sector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.sector")

PREFIX_MAX_LENGTH = 10


class SectorService(BaseService[Sector]):
    """
    Service for counting sectors.

    Contract:
        Lifecycle methods take an ``Actor`` and return the updated
        ``SectorInfo``.  Each successful transition emits exactly one audit
        record through the best-effort helper.
    """

    def _get_for_update(self, sector_id: int) -> Sector:
        sector = self.session.get(Sector, sector_id, with_for_update=True)
        if sector is None:
            raise SectorNotFoundError(sector_id)
        return sector

    def _transition(self, sector: Sector, action: str):
        current = SectorStatus(sector.status).value
        transition = SECTOR_WORKFLOW.transition_for(current, action)
        if transition is None:
            logger.warning(
                "sector_transition_rejected",
                extra={
                    "sector_id": sector.id,
                    "current_status": current,
                    "action": action,
                },
            )
            raise InvalidSectorTransitionError(sector.id, current, action)
        return transition

    def _label(self, sector: Sector) -> str:
        return sector.description or str(sector.id)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_sector(
        self,
        inventory_id: int,
        range_start: int,
        range_end: int,
        actor_id: UUID,
        prefix: str | None = None,
        description: str | None = None,
    ) -> SectorInfo:
        """
        Create a sector in status ``aberto``, not yet opened for counting.

        Raises:
            InventoryNotFoundError: inventory absent.
            DomainValidationError: negative bounds, end before start, or a
                prefix longer than 10 characters.
        """
        if self.session.get(Inventory, inventory_id) is None:
            raise InventoryNotFoundError(inventory_id)
        if range_start < 0 or range_end < 0:
            raise DomainValidationError("setor", "range bounds must be non-negative")
        if range_end < range_start:
            raise DomainValidationError("setor", "range end cannot be less than range start")
        if prefix and len(prefix) > PREFIX_MAX_LENGTH:
            raise DomainValidationError(
                "setor", f"prefix must be at most {PREFIX_MAX_LENGTH} characters",
            )

        sector = Sector(
            inventory_id=inventory_id,
            range_start=range_start,
            range_end=range_end,
            prefix=prefix,
            description=description,
            status=SECTOR_WORKFLOW.initial_state,
            created_by_id=actor_id,
        )
        self.session.add(sector)
        self.session.flush()

        logger.info(
            "sector_created",
            extra={
                "sector_id": sector.id,
                "inventory_id": inventory_id,
                "range_start": range_start,
                "range_end": range_end,
            },
        )
        return SectorInfo.from_model(sector)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open_for_counting(self, sector_id: int, actor: Actor) -> SectorInfo:
        """
        Record that counting started in the sector.

        Idempotent: only the first call stamps ``opened_at`` and emits
        ABERTURA_SETOR.
        """
        sector = self._get_for_update(sector_id)
        if not sector.mark_opened(self._clock.now()):
            return SectorInfo.from_model(sector)

        self.session.flush()
        logger.info(
            "sector_opened",
            extra={"sector_id": sector_id, "inventory_id": sector.inventory_id},
        )
        self._emit_audit(
            AuditAction.ABERTURA_SETOR.value,
            actor,
            description=f"Sector {self._label(sector)} opened",
            inventory_id=sector.inventory_id,
            sector_id=sector.id,
        )
        return SectorInfo.from_model(sector)

    def finalize(self, sector_id: int, actor: Actor) -> SectorInfo:
        """
        Transition a sector aberto -> finalizado.

        Raises:
            SectorNotFoundError: sector absent.
            InvalidSectorTransitionError: sector already finalized.
        """
        sector = self._get_for_update(sector_id)
        transition = self._transition(sector, "finalize")

        sector.finalize(actor.id, self._clock.now())
        self.session.flush()

        logger.info(
            "sector_finalized",
            extra={"sector_id": sector_id, "inventory_id": sector.inventory_id},
        )
        self._emit_audit(
            transition.audit_action,
            actor,
            description=f"Sector {self._label(sector)} finalized",
            inventory_id=sector.inventory_id,
            sector_id=sector.id,
        )
        return SectorInfo.from_model(sector)

    def reopen(self, sector_id: int, actor: Actor) -> SectorInfo:
        """
        Transition a sector finalizado -> aberto, clearing the finalize
        metadata.

        Raises:
            SectorNotFoundError: sector absent.
            InvalidSectorTransitionError: sector is not finalized.
        """
        sector = self._get_for_update(sector_id)
        transition = self._transition(sector, "reopen")

        sector.reopen()
        self.session.flush()

        logger.info(
            "sector_reopened",
            extra={"sector_id": sector_id, "inventory_id": sector.inventory_id},
        )
        self._emit_audit(
            transition.audit_action,
            actor,
            description=f"Sector {self._label(sector)} reopened",
            inventory_id=sector.inventory_id,
            sector_id=sector.id,
        )
        return SectorInfo.from_model(sector)

    # =========================================================================
    # Numbering
    # =========================================================================

    def sector_number(self, sector_id: int, number: int) -> str:
        """
        Location label for ``number`` inside the sector's range.

        Raises:
            SectorNotFoundError, DomainValidationError (number outside range).
        """
        sector = self.session.get(Sector, sector_id)
        if sector is None:
            raise SectorNotFoundError(sector_id)
        try:
            return sector_number(sector.prefix, sector.range_start, sector.range_end, number)
        except ValueError as exc:
            raise DomainValidationError("setor", str(exc)) from exc
