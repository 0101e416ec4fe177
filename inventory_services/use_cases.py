"""
inventory_services.use_cases -- Request-level entry points.

Responsibility:
    The outer surface of the inventory backend.  Each method takes the
    plain values an HTTP handler would have (path ids, a JSON body as a
    ``dict``, the authenticated ``Actor``), validates the body, runs the
    kernel service inside one transaction and returns a response dict
    keyed by the public API field names.

Architecture position:
    Services -- composes kernel services and selectors; owns the
    transaction boundary (``session_scope``).  Kernel services only flush.

Invariants enforced:
    - Invalid payloads never reach a kernel service; they raise
      ``InputValidationError`` carrying every field error.
    - One use-case call is one transaction: all writes and the audit rows
      they produce commit together or roll back together.
    - Every call binds a fresh ``correlation_id`` (plus actor and
      inventory ids) into ``LogContext`` for the duration of the call.

Failure modes:
    - ``InputValidationError`` for malformed payloads.
    - Any ``InventoryKernelError`` raised by the kernel propagates after
      rollback; callers map ``error.http_status`` / ``error.to_dict()``.

Audit relevance:
    By default the audit notifier is an ``AuditLogService`` bound to the
    call's session, so audit rows share the business transaction.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session, sessionmaker

from inventory_config import Settings
from inventory_kernel.db.engine import session_scope
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import Actor, ValidationResult
from inventory_kernel.domain.pagination import PageRequest
from inventory_kernel.domain.validation import (
    validate_close_inventory,
    validate_create_inventory,
    validate_create_product,
    validate_create_sector,
    validate_list_audit_logs,
    validate_list_divergences,
    validate_record_count,
    validate_update_count,
    validate_update_inventory,
)
from inventory_kernel.exceptions import InputValidationError, InventoryNotFoundError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.audit_selector import AuditLogFilter, AuditLogSelector
from inventory_kernel.selectors.divergence_selector import DivergenceSelector
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.sector_selector import SectorSelector
from inventory_kernel.services.audit_service import AuditLogService, AuditNotifier
from inventory_kernel.services.count_service import CountService
from inventory_kernel.services.inventory_service import InventoryService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.sector_service import SectorService
from inventory_services.responses import (
    audit_log_response,
    closing_result_response,
    closing_status_response,
    count_response,
    divergence_response,
    inventory_response,
    page_response,
    product_response,
    sector_response,
)

logger = get_logger("services.use_cases")

NotifierFactory = Callable[[Session], AuditNotifier]


def _require(input_name: str, result: ValidationResult) -> Any:
    if not result.is_valid:
        raise InputValidationError(
            input_name, [error.to_dict() for error in result.errors],
        )
    return result.value


class InventoryUseCases:
    """
    Transactional facade over the inventory kernel.

    Contract:
        Receives the session factory, clock, audit notifier factory and
        settings via constructor injection.  Holds no session between
        calls.
    Guarantees:
        - Every write method commits on success and rolls back on error.
        - Responses are plain dicts of JSON-friendly values.
    Non-goals:
        - Authentication and authorization; ``is_admin`` is supplied by
          the caller.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
        notifier_factory: NotifierFactory | None = None,
        settings: Settings | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._notifier_factory = notifier_factory or AuditLogService
        self._settings = settings or Settings()

    # =========================================================================
    # Plumbing
    # =========================================================================

    @contextmanager
    def _scope(
        self,
        actor: Actor | None = None,
        inventory_id: int | None = None,
        sector_id: int | None = None,
    ) -> Generator[Session, None, None]:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor.id) if actor else None,
            inventory_id=inventory_id,
            sector_id=sector_id,
            ip_address=actor.ip_address if actor else None,
        ):
            with session_scope(self._session_factory) as session:
                yield session

    def _inventories(self, session: Session) -> InventoryService:
        return InventoryService(
            session,
            clock=self._clock,
            notifier=self._notifier_factory(session),
            min_justification_length=self._settings.closing.min_justification_length,
        )

    def _sectors(self, session: Session) -> SectorService:
        return SectorService(session, self._clock, self._notifier_factory(session))

    def _products(self, session: Session) -> ProductService:
        return ProductService(session, self._clock, self._notifier_factory(session))

    def _counts(self, session: Session) -> CountService:
        return CountService(session, self._clock, self._notifier_factory(session))

    @property
    def _max_limit(self) -> int:
        return self._settings.pagination.max_limit

    @property
    def _default_limit(self) -> int:
        return self._settings.pagination.default_limit

    # =========================================================================
    # Inventory
    # =========================================================================

    def create_inventory(self, payload: dict[str, Any], actor: Actor) -> dict[str, Any]:
        data = _require("create_inventory", validate_create_inventory(payload))
        with self._scope(actor) as session:
            info = self._inventories(session).create_inventory(
                store_id=data.store_id,
                company_id=data.company_id,
                started_at=data.started_at,
                actor_id=actor.id,
                min_counts=data.min_counts,
                ended_at=data.ended_at,
                track_lot=data.track_lot,
                track_expiry=data.track_expiry,
                active=data.active,
            )
        return inventory_response(info)

    def get_inventory(self, inventory_id: int) -> dict[str, Any]:
        with self._scope(inventory_id=inventory_id) as session:
            info = InventorySelector(session).get(inventory_id)
        if info is None:
            raise InventoryNotFoundError(inventory_id)
        return inventory_response(info)

    def update_inventory(
        self, inventory_id: int, payload: dict[str, Any], actor: Actor,
    ) -> dict[str, Any]:
        data = _require("update_inventory", validate_update_inventory(payload))
        with self._scope(actor, inventory_id=inventory_id) as session:
            info = self._inventories(session).update_inventory(
                inventory_id, actor.id, **data.changes,
            )
        return inventory_response(info)

    def delete_inventory(self, inventory_id: int, actor: Actor) -> None:
        with self._scope(actor, inventory_id=inventory_id) as session:
            self._inventories(session).delete_inventory(inventory_id, actor.id)

    def closing_status(self, inventory_id: int) -> dict[str, Any]:
        with self._scope(inventory_id=inventory_id) as session:
            status = self._inventories(session).closing_status(inventory_id)
        return closing_status_response(status)

    def close_inventory(
        self,
        inventory_id: int,
        actor: Actor,
        payload: dict[str, Any] | None = None,
        is_admin: bool = False,
    ) -> dict[str, Any]:
        data = _require("close_inventory", validate_close_inventory(payload))
        with self._scope(actor, inventory_id=inventory_id) as session:
            result = self._inventories(session).close(
                inventory_id,
                actor,
                justification=data.justification,
                is_admin=is_admin,
            )
        return closing_result_response(result)

    def finalize_inventory(
        self, inventory_id: int, actor: Actor, forced: bool = False,
    ) -> dict[str, Any]:
        with self._scope(actor, inventory_id=inventory_id) as session:
            info = self._inventories(session).finalize(inventory_id, actor, forced=forced)
        return inventory_response(info)

    def reopen_inventory(self, inventory_id: int, actor: Actor) -> dict[str, Any]:
        with self._scope(actor, inventory_id=inventory_id) as session:
            info = self._inventories(session).reopen(inventory_id, actor)
        return inventory_response(info)

    # =========================================================================
    # Sectors
    # =========================================================================

    def create_sector(self, payload: dict[str, Any], actor: Actor) -> dict[str, Any]:
        data = _require("create_sector", validate_create_sector(payload))
        with self._scope(actor, inventory_id=data.inventory_id) as session:
            info = self._sectors(session).create_sector(
                inventory_id=data.inventory_id,
                range_start=data.range_start,
                range_end=data.range_end,
                actor_id=actor.id,
                prefix=data.prefix,
                description=data.description,
            )
        return sector_response(info)

    def list_sectors(self, inventory_id: int) -> list[dict[str, Any]]:
        with self._scope(inventory_id=inventory_id) as session:
            if InventorySelector(session).get(inventory_id) is None:
                raise InventoryNotFoundError(inventory_id)
            sectors = SectorSelector(session).for_inventory(inventory_id)
        return [sector_response(s) for s in sectors]

    def open_sector(self, sector_id: int, actor: Actor) -> dict[str, Any]:
        with self._scope(actor, sector_id=sector_id) as session:
            info = self._sectors(session).open_for_counting(sector_id, actor)
        return sector_response(info)

    def finalize_sector(self, sector_id: int, actor: Actor) -> dict[str, Any]:
        with self._scope(actor, sector_id=sector_id) as session:
            info = self._sectors(session).finalize(sector_id, actor)
        return sector_response(info)

    def reopen_sector(self, sector_id: int, actor: Actor) -> dict[str, Any]:
        with self._scope(actor, sector_id=sector_id) as session:
            info = self._sectors(session).reopen(sector_id, actor)
        return sector_response(info)

    def sector_number(self, sector_id: int, number: int) -> str:
        with self._scope(sector_id=sector_id) as session:
            return self._sectors(session).sector_number(sector_id, number)

    # =========================================================================
    # Products and counts
    # =========================================================================

    def create_product(self, payload: dict[str, Any], actor: Actor) -> dict[str, Any]:
        data = _require("create_product", validate_create_product(payload))
        with self._scope(actor, inventory_id=data.inventory_id) as session:
            info = self._products(session).create_product(
                inventory_id=data.inventory_id,
                description=data.description,
                actor_id=actor.id,
                barcode=data.barcode,
                internal_code=data.internal_code,
                lot=data.lot,
                expires_on=data.expires_on,
                expected_balance=data.expected_balance,
                unit_cost=data.unit_cost,
            )
        return product_response(info)

    def record_count(self, payload: dict[str, Any], actor: Actor) -> dict[str, Any]:
        data = _require("record_count", validate_record_count(payload))
        with self._scope(actor, sector_id=data.sector_id) as session:
            info = self._counts(session).record_count(
                sector_id=data.sector_id,
                product_id=data.product_id,
                quantity=data.quantity,
                actor=actor,
                lot=data.lot,
                expires_on=data.expires_on,
                divergent=data.divergent,
            )
        return count_response(info)

    def update_count(
        self, count_id: int, payload: dict[str, Any], actor: Actor,
    ) -> dict[str, Any]:
        data = _require("update_count", validate_update_count(payload))
        with self._scope(actor) as session:
            info = self._counts(session).update_count(count_id, actor, **data.changes)
        return count_response(info)

    def reconcile_product(
        self, inventory_id: int, product_id: int, actor: Actor,
    ) -> dict[str, Any]:
        with self._scope(actor, inventory_id=inventory_id) as session:
            info = self._counts(session).reconcile_product(inventory_id, product_id, actor)
        return product_response(info)

    # =========================================================================
    # Listings
    # =========================================================================

    def list_divergences(
        self, inventory_id: int, query: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        data = _require(
            "list_divergences",
            validate_list_divergences(query, self._max_limit, self._default_limit),
        )
        with self._scope(inventory_id=inventory_id) as session:
            if InventorySelector(session).get(inventory_id) is None:
                raise InventoryNotFoundError(inventory_id)
            page = DivergenceSelector(session).list_divergences(
                inventory_id,
                PageRequest(page=data.page, limit=data.limit),
                sector_id=data.sector_id,
                status=data.status,
            )
        return page_response(page, divergence_response)

    def list_audit_logs(self, query: dict[str, Any] | None = None) -> dict[str, Any]:
        data = _require(
            "list_audit_logs",
            validate_list_audit_logs(query, self._max_limit, self._default_limit),
        )
        filters = AuditLogFilter(
            action=data.action,
            actor_id=data.actor_id,
            inventory_id=data.inventory_id,
            sector_id=data.sector_id,
            start=data.start,
            end=data.end,
        )
        scope = self._scope(inventory_id=data.inventory_id, sector_id=data.sector_id)
        with scope as session:
            page = AuditLogSelector(session).find(
                filters, PageRequest(page=data.page, limit=data.limit),
            )
        return page_response(page, audit_log_response)


def actor_from_request(
    user_id: UUID | str,
    name: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Actor:
    """Build the acting user from request-level values."""
    return Actor(
        id=user_id if isinstance(user_id, UUID) else UUID(str(user_id)),
        name=name,
        ip_address=ip_address,
        user_agent=user_agent,
    )
