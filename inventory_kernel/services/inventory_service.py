"""
InventoryService -- inventory lifecycle and the closing gate.

Responsibility:
    Creates, updates and deletes inventories, and drives their lifecycle:
    ``close`` (guarded by the three-part closing gate, with an admin
    bypass), ``finalize`` (guarded by sector state only, with a force flag)
    and ``reopen``.  ``closing_status`` answers the gate question without
    changing anything.

Architecture position:
    Kernel > Services -- imperative shell.
    Reads sector state and pending divergences through selectors, evaluates
    the gate with the pure ``domain.closing`` functions, then mutates the
    Inventory row and emits an audit record.

Invariants enforced:
    - Existence is checked first: a missing inventory is always NotFound,
      never Blocked.
    - can_close iff no unopened sector, no unfinished sector and zero
      pending divergences.
    - At most one active inventory per store (create, update, reopen).
    - Inventories with counts are never physically deleted.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - InventoryNotFoundError, InventoryAlreadyFinalizedError,
      InventoryNotFinalizedError, InventoryClosingBlockedError,
      JustificationRequiredError, SectorsStillOpenError,
      InventoryAlreadyActiveError, InventoryHasCountsError,
      DomainValidationError.

Audit relevance:
    close -> FECHAMENTO_INVENTARIO (with bypass metadata when an admin
    overrode blockers), finalize -> FINALIZACAO_INVENTARIO, reopen ->
    REABERTURA_INVENTARIO.  Audit failures are logged and swallowed.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, ensure_utc
from inventory_kernel.domain.closing import evaluate_closing, justification_is_sufficient
from inventory_kernel.domain.dtos import (
    Actor,
    ClosingResult,
    ClosingStatus,
    InventoryInfo,
)
from inventory_kernel.domain.workflow import INVENTORY_WORKFLOW, Transition
from inventory_kernel.exceptions import (
    DomainValidationError,
    InventoryAlreadyActiveError,
    InventoryAlreadyFinalizedError,
    InventoryClosingBlockedError,
    InventoryHasCountsError,
    InventoryNotFinalizedError,
    InventoryNotFoundError,
    JustificationRequiredError,
    SectorsStillOpenError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.models.product import Product
from inventory_kernel.models.sector import Sector
from inventory_kernel.selectors.count_selector import CountSelector
from inventory_kernel.selectors.divergence_selector import DivergenceSelector
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.sector_selector import SectorSelector
from inventory_kernel.services.audit_service import AuditNotifier
from inventory_kernel.services.base import BaseService

logger = get_logger("services.inventory")

DEFAULT_MIN_JUSTIFICATION_LENGTH = 10

_UPDATABLE_FIELDS = frozenset({
    "store_id",
    "company_id",
    "min_counts",
    "started_at",
    "ended_at",
    "track_lot",
    "track_expiry",
    "active",
})


class InventoryService(BaseService[Inventory]):
    """
    Service for the inventory lifecycle.

    Contract:
        Every public method returns frozen DTOs and flushes within the
        caller's transaction.  ``actor`` arguments carry the identity
        recorded on the row and in the audit trail.

    Non-goals:
        - Does NOT authenticate or authorize; ``is_admin`` is supplied by
          the caller.
        - Does NOT serialize concurrent closes of the same inventory beyond
          the row lock taken on PostgreSQL.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        notifier: AuditNotifier | None = None,
        min_justification_length: int = DEFAULT_MIN_JUSTIFICATION_LENGTH,
    ):
        super().__init__(session, clock, notifier)
        self._min_justification_length = min_justification_length
        self._inventories = InventorySelector(session)
        self._sectors = SectorSelector(session)
        self._divergences = DivergenceSelector(session)
        self._counts = CountSelector(session)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _get_for_update(self, inventory_id: int) -> Inventory:
        inventory = self.session.get(Inventory, inventory_id, with_for_update=True)
        if inventory is None:
            raise InventoryNotFoundError(inventory_id)
        return inventory

    def _ensure_store_free(self, store_id: int, exclude_id: int | None = None) -> None:
        active = self._inventories.find_active_for_store(store_id, exclude_id=exclude_id)
        if active is not None:
            logger.warning(
                "store_already_has_active_inventory",
                extra={"store_id": store_id, "active_inventory_id": active.id},
            )
            raise InventoryAlreadyActiveError(store_id, active.id)

    def _transition(self, inventory: Inventory, action: str) -> Transition:
        """Look up ``action`` in INVENTORY_WORKFLOW or raise the typed error."""
        current = inventory.lifecycle_state
        transition = INVENTORY_WORKFLOW.transition_for(current, action)
        if transition is None:
            logger.warning(
                "inventory_transition_rejected",
                extra={
                    "inventory_id": inventory.id,
                    "current_state": current,
                    "action": action,
                    "allowed_actions": list(INVENTORY_WORKFLOW.actions_from(current)),
                },
            )
            if inventory.is_finalized:
                raise InventoryAlreadyFinalizedError(inventory.id)
            raise InventoryNotFinalizedError(inventory.id)
        return transition

    @staticmethod
    def _check_rules(min_counts: int, started_at: datetime, ended_at: datetime | None) -> None:
        if min_counts < 1:
            raise DomainValidationError("inventario", "min_counts must be at least 1")
        if ended_at is not None and ensure_utc(ended_at) < ensure_utc(started_at):
            raise DomainValidationError(
                "inventario", "end date cannot be earlier than the start date",
            )

    # =========================================================================
    # CRUD
    # =========================================================================

    def create_inventory(
        self,
        store_id: int,
        company_id: int,
        started_at: datetime,
        actor_id: UUID,
        min_counts: int = 1,
        ended_at: datetime | None = None,
        track_lot: bool = False,
        track_expiry: bool = False,
        active: bool = True,
    ) -> InventoryInfo:
        """
        Create an inventory for a store.

        Raises:
            DomainValidationError: min_counts < 1 or end before start.
            InventoryAlreadyActiveError: an active inventory already exists
                for the store and the new one is active.
        """
        self._check_rules(min_counts, started_at, ended_at)
        if active:
            self._ensure_store_free(store_id)

        inventory = Inventory(
            store_id=store_id,
            company_id=company_id,
            started_at=started_at,
            ended_at=ended_at,
            min_counts=min_counts,
            track_lot=track_lot,
            track_expiry=track_expiry,
            active=active,
            created_by_id=actor_id,
        )
        self.session.add(inventory)
        self.session.flush()

        logger.info(
            "inventory_created",
            extra={
                "inventory_id": inventory.id,
                "store_id": store_id,
                "company_id": company_id,
                "active": active,
            },
        )
        return InventoryInfo.from_model(inventory)

    def update_inventory(
        self,
        inventory_id: int,
        actor_id: UUID,
        **changes: Any,
    ) -> InventoryInfo:
        """
        Apply field changes to an inventory.

        Only the fields in ``changes`` are touched.  Setting ``active=True``
        (or moving an active inventory to another store) re-checks the
        one-active-per-store rule.

        Raises:
            InventoryNotFoundError, DomainValidationError,
            InventoryAlreadyActiveError.
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise DomainValidationError(
                "inventario", f"unknown fields: {', '.join(sorted(unknown))}",
            )

        inventory = self._get_for_update(inventory_id)

        min_counts = changes.get("min_counts", inventory.min_counts)
        started_at = changes.get("started_at", inventory.started_at)
        ended_at = changes.get("ended_at", inventory.ended_at)
        self._check_rules(min_counts, started_at, ended_at)

        will_be_active = changes.get("active", inventory.active)
        store_id = changes.get("store_id", inventory.store_id)
        if will_be_active and (not inventory.active or store_id != inventory.store_id):
            self._ensure_store_free(store_id, exclude_id=inventory.id)

        for name, value in changes.items():
            setattr(inventory, name, value)
        inventory.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "inventory_updated",
            extra={"inventory_id": inventory_id, "fields": sorted(changes)},
        )
        return InventoryInfo.from_model(inventory)

    def delete_inventory(self, inventory_id: int, actor_id: UUID) -> None:
        """
        Physically delete an inventory with no counts, with its sectors and
        product lines.

        Raises:
            InventoryNotFoundError, InventoryHasCountsError.
        """
        inventory = self._get_for_update(inventory_id)

        count_total = self._counts.total_for_inventory(inventory_id)
        if count_total > 0:
            logger.warning(
                "inventory_delete_refused",
                extra={"inventory_id": inventory_id, "count_total": count_total},
            )
            raise InventoryHasCountsError(inventory_id, count_total)

        self.session.execute(delete(Sector).where(Sector.inventory_id == inventory_id))
        self.session.execute(delete(Product).where(Product.inventory_id == inventory_id))
        self.session.delete(inventory)
        self.session.flush()

        logger.info(
            "inventory_deleted",
            extra={"inventory_id": inventory_id, "actor_id": str(actor_id)},
        )

    # =========================================================================
    # Closing gate
    # =========================================================================

    def _evaluate(self, inventory_id: int) -> ClosingStatus:
        sectors = self._sectors.for_inventory(inventory_id)
        pending = self._divergences.pending_divergences(inventory_id)
        return evaluate_closing(sectors, pending)

    def closing_status(self, inventory_id: int) -> ClosingStatus:
        """
        Report whether the inventory can be closed right now.

        Pure read.  Raises InventoryNotFoundError if the inventory is absent.
        """
        if self._inventories.get(inventory_id) is None:
            raise InventoryNotFoundError(inventory_id)
        return self._evaluate(inventory_id)

    def close(
        self,
        inventory_id: int,
        actor: Actor,
        justification: str | None = None,
        is_admin: bool = False,
    ) -> ClosingResult:
        """
        Close (finalize) an inventory through the closing gate.

        Preconditions:
            - The inventory exists and is active.
            - The gate is clear, or ``is_admin`` is True and
              ``justification`` has at least ``min_justification_length``
              characters.

        Postconditions:
            - ``active`` is False; ``ended_at`` and ``closed_at`` are the
              clock's now; ``closed_by_id`` is the actor.
            - One FECHAMENTO_INVENTARIO audit record was emitted.

        Raises:
            InventoryNotFoundError: inventory absent (checked first).
            InventoryAlreadyFinalizedError: inventory already finalized.
            InventoryClosingBlockedError: gate not clear, non-admin actor.
            JustificationRequiredError: admin bypass without justification.
        """
        inventory = self._get_for_update(inventory_id)
        transition = self._transition(inventory, "close")

        status = self._evaluate(inventory_id)
        blockers = status.blockers
        bypassed = False

        if not status.can_close:
            if not is_admin:
                logger.warning(
                    "inventory_close_blocked",
                    extra={
                        "inventory_id": inventory_id,
                        "guard": transition.guard.name,
                        **blockers.as_metadata(),
                    },
                )
                raise InventoryClosingBlockedError(
                    inventory_id,
                    list(blockers.unopened_sectors),
                    list(blockers.unfinished_sectors),
                    blockers.pending_divergences,
                )
            if not justification_is_sufficient(
                justification, self._min_justification_length
            ):
                raise JustificationRequiredError(self._min_justification_length)
            bypassed = True

        inventory.close(
            actor_id=actor.id,
            closed_at=self._clock.now(),
            justification=justification if bypassed else None,
        )
        self.session.flush()

        if bypassed:
            logger.warning(
                "inventory_closed_with_bypass",
                extra={"inventory_id": inventory_id, **blockers.as_metadata()},
            )
        else:
            logger.info("inventory_closed", extra={"inventory_id": inventory_id})

        self._emit_audit(
            transition.audit_action,
            actor,
            description=(
                f"Inventory #{inventory_id} closed"
                + (" (admin bypass)" if bypassed else "")
            ),
            inventory_id=inventory_id,
            metadata=(
                {
                    "bypass": True,
                    "justification": justification,
                    "blockers": blockers.as_metadata(),
                }
                if bypassed
                else None
            ),
        )

        return ClosingResult(
            can_close=True,
            blockers=blockers,
            inventory=InventoryInfo.from_model(inventory),
            bypassed=bypassed,
        )

    def finalize(
        self,
        inventory_id: int,
        actor: Actor,
        forced: bool = False,
    ) -> InventoryInfo:
        """
        Finalize an inventory checking only that every sector is finalized.

        With ``forced=True`` unfinished sectors are ignored and their number
        is recorded in the audit metadata.

        Raises:
            InventoryNotFoundError, InventoryAlreadyFinalizedError,
            SectorsStillOpenError.
        """
        inventory = self._get_for_update(inventory_id)
        transition = self._transition(inventory, "finalize")

        unfinished = [
            s for s in self._sectors.for_inventory(inventory_id) if not s.is_finalized
        ]
        if unfinished and not forced:
            logger.warning(
                "inventory_finalize_blocked",
                extra={
                    "inventory_id": inventory_id,
                    "guard": transition.guard.name,
                    "unfinished_sectors": len(unfinished),
                },
            )
            raise SectorsStillOpenError(
                inventory_id,
                [
                    {"id": s.id, "description": s.label, "status": s.status.value}
                    for s in unfinished
                ],
            )

        inventory.close(actor_id=actor.id, closed_at=self._clock.now())
        self.session.flush()

        logger.info(
            "inventory_finalized",
            extra={
                "inventory_id": inventory_id,
                "forced": forced,
                "unfinished_sectors": len(unfinished),
            },
        )
        self._emit_audit(
            transition.audit_action,
            actor,
            description=(
                f"Inventory #{inventory_id} finalized" + (" (forced)" if forced else "")
            ),
            inventory_id=inventory_id,
            metadata=(
                {"forced": True, "unfinished_sectors": len(unfinished)}
                if forced
                else None
            ),
        )
        return InventoryInfo.from_model(inventory)

    def reopen(self, inventory_id: int, actor: Actor) -> InventoryInfo:
        """
        Reopen a finalized inventory.

        Postconditions: ``active`` is True and ``ended_at`` is cleared; the
        closing metadata is kept as history.

        Raises:
            InventoryNotFoundError, InventoryNotFinalizedError,
            InventoryAlreadyActiveError (another inventory of the store
            became active meanwhile).
        """
        inventory = self._get_for_update(inventory_id)
        transition = self._transition(inventory, "reopen")

        self._ensure_store_free(inventory.store_id, exclude_id=inventory.id)

        inventory.reopen(actor_id=actor.id)
        self.session.flush()

        logger.info("inventory_reopened", extra={"inventory_id": inventory_id})
        self._emit_audit(
            transition.audit_action,
            actor,
            description=f"Inventory #{inventory_id} reopened",
            inventory_id=inventory_id,
        )
        return InventoryInfo.from_model(inventory)
