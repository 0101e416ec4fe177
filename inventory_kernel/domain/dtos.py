"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow between services,
    selectors and the use-case layer: entity snapshots (InventoryInfo,
    SectorInfo, ProductInfo, CountInfo), the closing gate report
    (ClosingBlockers, ClosingStatus, ClosingResult), divergence rows,
    audit records, and validation results.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of database access and external services.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers (never from domain logic).

Invariants enforced:
    - Domain logic accepts/returns DTOs, never ORM entities.
    - Quantities are Decimal, never float.
    - Blocker lists are tuples so a report cannot be mutated after the
      gate has been evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from inventory_kernel.domain.workflow import SectorStatus

if TYPE_CHECKING:
    from inventory_kernel.models.audit_log import AuditLog as AuditLogModel
    from inventory_kernel.models.count import Count as CountModel
    from inventory_kernel.models.inventory import Inventory as InventoryModel
    from inventory_kernel.models.product import Product as ProductModel
    from inventory_kernel.models.sector import Sector as SectorModel


# =============================================================================
# Actor
# =============================================================================


@dataclass(frozen=True)
class Actor:
    """
    The authenticated user performing an operation.

    Contract:
        Identity comes from the external auth provider; the kernel only
        records it.  ``ip_address`` and ``user_agent`` are copied into the
        audit trail when present.
    """

    id: UUID
    name: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


# =============================================================================
# Entity snapshots
# =============================================================================


@dataclass(frozen=True)
class InventoryInfo:
    """
    Immutable snapshot of an inventory (stock-counting campaign).

    Guarantees:
        - ``active`` is False exactly when the inventory is finalized.
    """

    id: int
    store_id: int
    company_id: int
    min_counts: int
    track_lot: bool
    track_expiry: bool
    started_at: datetime
    active: bool
    ended_at: datetime | None = None
    closed_at: datetime | None = None
    closed_by_id: UUID | None = None
    closing_justification: str | None = None

    @property
    def is_finalized(self) -> bool:
        return not self.active

    @classmethod
    def from_model(cls, model: InventoryModel) -> InventoryInfo:
        return cls(
            id=model.id,
            store_id=model.store_id,
            company_id=model.company_id,
            min_counts=model.min_counts,
            track_lot=model.track_lot,
            track_expiry=model.track_expiry,
            started_at=model.started_at,
            active=model.active,
            ended_at=model.ended_at,
            closed_at=model.closed_at,
            closed_by_id=model.closed_by_id,
            closing_justification=model.closing_justification,
        )


@dataclass(frozen=True)
class SectorInfo:
    """
    Immutable snapshot of a counting sector.

    Contract:
        ``status`` is one of the SECTOR_WORKFLOW states.  A sector is
        *opened* once the handheld app has started counting in it
        (``opened_at`` set) or once it has been finalized.
    """

    id: int
    inventory_id: int
    range_start: int
    range_end: int
    status: SectorStatus
    prefix: str | None = None
    description: str | None = None
    opened_at: datetime | None = None
    finalized_at: datetime | None = None
    finalized_by_id: UUID | None = None

    @property
    def label(self) -> str:
        from inventory_kernel.domain.closing import sector_label

        return sector_label(
            self.prefix, self.range_start, self.range_end, self.description
        )

    @property
    def is_finalized(self) -> bool:
        return self.status == SectorStatus.FINALIZADO

    @property
    def is_opened(self) -> bool:
        return self.opened_at is not None or self.is_finalized

    @classmethod
    def from_model(cls, model: SectorModel) -> SectorInfo:
        return cls(
            id=model.id,
            inventory_id=model.inventory_id,
            range_start=model.range_start,
            range_end=model.range_end,
            status=SectorStatus(model.status),
            prefix=model.prefix,
            description=model.description,
            opened_at=model.opened_at,
            finalized_at=model.finalized_at,
            finalized_by_id=model.finalized_by_id,
        )


@dataclass(frozen=True)
class ProductInfo:
    """Immutable snapshot of an inventory product line."""

    id: int
    inventory_id: int
    description: str
    expected_balance: Decimal
    unit_cost: Decimal
    counted_balance: Decimal
    divergent: bool
    barcode: str | None = None
    internal_code: str | None = None
    lot: str | None = None
    expires_on: date | None = None

    @classmethod
    def from_model(cls, model: ProductModel) -> ProductInfo:
        return cls(
            id=model.id,
            inventory_id=model.inventory_id,
            description=model.description,
            expected_balance=model.expected_balance,
            unit_cost=model.unit_cost,
            counted_balance=model.counted_balance,
            divergent=model.divergent,
            barcode=model.barcode,
            internal_code=model.internal_code,
            lot=model.lot,
            expires_on=model.expires_on,
        )


@dataclass(frozen=True)
class CountInfo:
    """Immutable snapshot of one physical count."""

    id: int
    sector_id: int
    product_id: int
    quantity: Decimal
    counted_at: datetime
    divergent: bool
    reconciled: bool
    counted_by_id: UUID
    lot: str | None = None
    expires_on: date | None = None

    @classmethod
    def from_model(cls, model: CountModel) -> CountInfo:
        return cls(
            id=model.id,
            sector_id=model.sector_id,
            product_id=model.product_id,
            quantity=model.quantity,
            counted_at=model.counted_at,
            divergent=model.divergent,
            reconciled=model.reconciled,
            counted_by_id=model.counted_by_id,
            lot=model.lot,
            expires_on=model.expires_on,
        )


# =============================================================================
# Closing gate
# =============================================================================


@dataclass(frozen=True)
class ClosingBlockers:
    """
    The three independent conditions that keep an inventory open.

    Guarantees:
        - ``is_clear`` is True iff both sector lists are empty and
          ``pending_divergences`` is zero.
    """

    unopened_sectors: tuple[str, ...] = ()
    unfinished_sectors: tuple[str, ...] = ()
    pending_divergences: int = 0

    @property
    def is_clear(self) -> bool:
        return (
            not self.unopened_sectors
            and not self.unfinished_sectors
            and self.pending_divergences == 0
        )

    def as_metadata(self) -> dict[str, Any]:
        return {
            "unopened_sectors": list(self.unopened_sectors),
            "unfinished_sectors": list(self.unfinished_sectors),
            "pending_divergences": self.pending_divergences,
        }


@dataclass(frozen=True)
class ClosingStatus:
    """Read-only answer to "can this inventory be closed right now?"."""

    can_close: bool
    blockers: ClosingBlockers


@dataclass(frozen=True)
class ClosingResult:
    """
    Outcome of a successful close.

    ``bypassed`` is True when an admin closed over non-empty blockers; the
    blockers that were overridden are kept for the audit trail.
    """

    can_close: bool
    blockers: ClosingBlockers
    inventory: InventoryInfo
    bypassed: bool = False


# =============================================================================
# Divergences
# =============================================================================


@dataclass(frozen=True)
class DivergenceLine:
    """One product counted in one sector whose total differs from the balance."""

    product_id: int
    sector_id: int
    description: str
    expected: Decimal
    counted: Decimal
    reconciled: bool
    barcode: str | None = None
    sector_description: str | None = None

    @property
    def difference(self) -> Decimal:
        return self.counted - self.expected


# =============================================================================
# Audit
# =============================================================================


@dataclass(frozen=True)
class AuditRecord:
    """
    A lifecycle transition to be written to the audit trail.

    Contract:
        Built by services after the primary change has been flushed and
        handed to an AuditNotifier.  ``metadata`` must be JSON-serializable.
    """

    action: str
    actor_id: UUID
    occurred_at: datetime
    description: str | None = None
    actor_name: str | None = None
    inventory_id: int | None = None
    sector_id: int | None = None
    metadata: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuditLogInfo:
    """Immutable snapshot of a persisted audit log row."""

    id: int
    action: str
    actor_id: UUID
    created_at: datetime
    description: str | None = None
    actor_name: str | None = None
    inventory_id: int | None = None
    sector_id: int | None = None
    metadata: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def from_model(cls, model: AuditLogModel) -> AuditLogInfo:
        return cls(
            id=model.id,
            action=model.action,
            actor_id=model.actor_id,
            created_at=model.created_at,
            description=model.description,
            actor_name=model.actor_name,
            inventory_id=model.inventory_id,
            sector_id=model.sector_id,
            metadata=model.metadata_,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
        )


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional field
        path, and optional details dict.

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "field": self.field}


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validation.

    Contract:
        Aggregates zero or more ValidationErrors. is_valid is True only when
        there are no errors.  ``value`` carries the parsed input on success.

    Guarantees:
        - Immutable (frozen dataclass)
        - errors is always a tuple (never None)
        - bool(result) == result.is_valid for convenience
    """

    is_valid: bool
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> ValidationResult:
        """Create a successful validation result."""
        return cls(is_valid=True, errors=(), value=value)

    @classmethod
    def failure(cls, *errors: ValidationError) -> ValidationResult:
        """Create a failed validation result."""
        return cls(is_valid=False, errors=tuple(errors))

    def __bool__(self) -> bool:
        return self.is_valid
