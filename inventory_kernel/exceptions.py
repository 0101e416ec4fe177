"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (use-case entry points, HTTP adapters, the handheld sync endpoint)
must react to failures without parsing message strings:
  - every error has a TYPED exception class (catch by type, not message)
  - every exception has a ``code`` class attribute (machine-readable)
  - every exception has an ``http_status`` class attribute for adapters
  - exceptions carry structured DATA as attributes

Example:
    try:
        inventory_service.close(inventory_id, actor)
    except InventoryClosingBlockedError as e:
        return response(e.http_status, e.to_dict())  # includes blockers

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError and are grouped by KIND,
so adapters can map a whole category to one response:

    InventoryKernelError (base)
    |
    +-- NotFoundError (404)
    |   +-- InventoryNotFoundError
    |   +-- SectorNotFoundError
    |   +-- ProductNotFoundError
    |   +-- CountNotFoundError
    |
    +-- ValidationFailedError (400)
    |   +-- InputValidationError
    |   +-- DomainValidationError
    |   +-- JustificationRequiredError
    |
    +-- ConflictError (409)
    |   +-- InventoryAlreadyActiveError
    |   +-- InventoryAlreadyFinalizedError
    |   +-- InventoryNotFinalizedError
    |   +-- DuplicateProductError
    |
    +-- BlockedError (422)
    |   +-- InventoryClosingBlockedError
    |   +-- SectorsStillOpenError
    |   +-- InvalidSectorTransitionError
    |   +-- SectorFinalizedError
    |
    +-- ForbiddenError (403)
        +-- InventoryHasCountsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Kind        | Code                         | When Raised
------------|------------------------------|-----------------------------------
NotFound    | INVENTARIO_NOT_FOUND         | Inventory id doesn't exist
            | SETOR_NOT_FOUND              | Sector id doesn't exist
            | PRODUTO_NOT_FOUND            | Product line id doesn't exist
            | CONTAGEM_NOT_FOUND           | Count id doesn't exist
------------|------------------------------|-----------------------------------
Validation  | VALIDATION_ERROR             | Input failed field rules
            | INVALID_<ENTITY>             | Entity rule broken (ranges, dates)
            | JUSTIFICATIVA_OBRIGATORIA    | Admin bypass without justification
------------|------------------------------|-----------------------------------
Conflict    | INVENTARIO_ALREADY_ACTIVE    | Store already has active inventory
            | INVENTARIO_JA_FINALIZADO     | Closing a finalized inventory
            | INVENTARIO_NAO_FINALIZADO    | Reopening an active inventory
            | PRODUTO_DUPLICADO            | Barcode already in the inventory
------------|------------------------------|-----------------------------------
Blocked     | INVENTARIO_NAO_PODE_FECHAR   | Closing gate not clear
            | SETORES_EM_ABERTO            | Finalizing with open sectors
            | TRANSICAO_SETOR_INVALIDA     | Sector not in required state
            | SETOR_FINALIZADO             | Counting in a finalized sector
------------|------------------------------|-----------------------------------
Forbidden   | INVENTARIO_COM_CONTAGENS     | Deleting inventory with counts
"""

from typing import Any


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"
    http_status: int = 500

    def to_dict(self) -> dict[str, Any]:
        """Serializable view: code, message and public context attributes."""
        data: dict[str, Any] = {"code": self.code, "message": str(self)}
        for key, value in vars(self).items():
            if not key.startswith("_"):
                data[key] = value
        return data


# =============================================================================
# Kinds
# =============================================================================


class NotFoundError(InventoryKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"
    http_status: int = 404


class ValidationFailedError(InventoryKernelError):
    """Base exception for input or entity rule violations."""

    code: str = "VALIDATION_FAILED"
    http_status: int = 400


class ConflictError(InventoryKernelError):
    """Base exception for state or uniqueness conflicts."""

    code: str = "CONFLICT"
    http_status: int = 409


class BlockedError(InventoryKernelError):
    """Base exception for unmet business-rule preconditions."""

    code: str = "BLOCKED"
    http_status: int = 422


class ForbiddenError(InventoryKernelError):
    """Base exception for operations on protected records."""

    code: str = "FORBIDDEN"
    http_status: int = 403


# =============================================================================
# Not found
# =============================================================================


class InventoryNotFoundError(NotFoundError):
    """Inventory with given ID was not found."""

    code: str = "INVENTARIO_NOT_FOUND"

    def __init__(self, inventory_id: int):
        self.inventory_id = inventory_id
        super().__init__(f"Inventory not found: {inventory_id}")


class SectorNotFoundError(NotFoundError):
    """Sector with given ID was not found."""

    code: str = "SETOR_NOT_FOUND"

    def __init__(self, sector_id: int):
        self.sector_id = sector_id
        super().__init__(f"Sector not found: {sector_id}")


class ProductNotFoundError(NotFoundError):
    """Product line with given ID was not found."""

    code: str = "PRODUTO_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class CountNotFoundError(NotFoundError):
    """Count with given ID was not found."""

    code: str = "CONTAGEM_NOT_FOUND"

    def __init__(self, count_id: int):
        self.count_id = count_id
        super().__init__(f"Count not found: {count_id}")


# =============================================================================
# Validation
# =============================================================================


class InputValidationError(ValidationFailedError):
    """
    Input failed schema constraints before any domain logic ran.

    ``field_errors`` is a list of ``{"code", "message", "field"}`` dicts.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, input_name: str, field_errors: list[dict]):
        self.input_name = input_name
        self.field_errors = field_errors
        super().__init__(
            f"Invalid {input_name}: {len(field_errors)} error(s)"
        )


class DomainValidationError(ValidationFailedError):
    """An entity rule was broken (e.g. range end before range start)."""

    code: str = "INVALID_ENTITY"

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        self.code = f"INVALID_{entity.upper()}"
        super().__init__(f"Invalid {entity}: {reason}")


class JustificationRequiredError(ValidationFailedError):
    """An admin closing bypass needs a justification of minimum length."""

    code: str = "JUSTIFICATIVA_OBRIGATORIA"

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(
            f"Justification of at least {min_length} characters is required "
            "to close an inventory with pending blockers"
        )


# =============================================================================
# Conflict
# =============================================================================


class InventoryAlreadyActiveError(ConflictError):
    """The store already has an active inventory."""

    code: str = "INVENTARIO_ALREADY_ACTIVE"

    def __init__(self, store_id: int, active_inventory_id: int | None = None):
        self.store_id = store_id
        self.active_inventory_id = active_inventory_id
        super().__init__(f"Store {store_id} already has an active inventory")


class InventoryAlreadyFinalizedError(ConflictError):
    """The inventory is already finalized."""

    code: str = "INVENTARIO_JA_FINALIZADO"

    def __init__(self, inventory_id: int):
        self.inventory_id = inventory_id
        super().__init__(f"Inventory {inventory_id} is already finalized")


class InventoryNotFinalizedError(ConflictError):
    """The inventory is active; only finalized inventories can be reopened."""

    code: str = "INVENTARIO_NAO_FINALIZADO"

    def __init__(self, inventory_id: int):
        self.inventory_id = inventory_id
        super().__init__(f"Inventory {inventory_id} is not finalized")


class DuplicateProductError(ConflictError):
    """A product with the same barcode already exists in the inventory."""

    code: str = "PRODUTO_DUPLICADO"

    def __init__(self, inventory_id: int, barcode: str):
        self.inventory_id = inventory_id
        self.barcode = barcode
        super().__init__(
            f"Inventory {inventory_id} already has a product with barcode {barcode}"
        )


# =============================================================================
# Blocked
# =============================================================================


class InventoryClosingBlockedError(BlockedError):
    """
    The closing gate is not clear.

    Attributes mirror the blockers report: only non-empty blockers are set
    to a non-None value.
    """

    code: str = "INVENTARIO_NAO_PODE_FECHAR"

    def __init__(
        self,
        inventory_id: int,
        unopened_sectors: list[str],
        unfinished_sectors: list[str],
        pending_divergences: int,
    ):
        self.inventory_id = inventory_id
        self.unopened_sectors = unopened_sectors
        self.unfinished_sectors = unfinished_sectors
        self.pending_divergences = pending_divergences
        reasons = []
        if unopened_sectors:
            reasons.append(f"{len(unopened_sectors)} sector(s) not opened")
        if unfinished_sectors:
            reasons.append(f"{len(unfinished_sectors)} sector(s) not finalized")
        if pending_divergences:
            reasons.append(f"{pending_divergences} pending divergence(s)")
        super().__init__(
            f"Inventory {inventory_id} cannot be closed: " + "; ".join(reasons)
        )


class SectorsStillOpenError(BlockedError):
    """Finalizing an inventory while some sectors are not finalized."""

    code: str = "SETORES_EM_ABERTO"

    def __init__(self, inventory_id: int, sectors: list[dict]):
        self.inventory_id = inventory_id
        self.sectors = sectors
        super().__init__(
            f"Inventory {inventory_id} has {len(sectors)} sector(s) not finalized"
        )


class InvalidSectorTransitionError(BlockedError):
    """The sector is not in the state the requested transition requires."""

    code: str = "TRANSICAO_SETOR_INVALIDA"

    def __init__(self, sector_id: int, current_status: str, action: str):
        self.sector_id = sector_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} sector {sector_id} in status '{current_status}'"
        )


class SectorFinalizedError(BlockedError):
    """Counting into a finalized sector (or a finalized inventory)."""

    code: str = "SETOR_FINALIZADO"

    def __init__(self, sector_id: int):
        self.sector_id = sector_id
        super().__init__(f"Sector {sector_id} does not accept counts")


# =============================================================================
# Forbidden
# =============================================================================


class InventoryHasCountsError(ForbiddenError):
    """Inventories with recorded counts are never physically deleted."""

    code: str = "INVENTARIO_COM_CONTAGENS"

    def __init__(self, inventory_id: int, count_total: int):
        self.inventory_id = inventory_id
        self.count_total = count_total
        super().__init__(
            f"Inventory {inventory_id} has {count_total} count(s) and cannot be deleted"
        )
