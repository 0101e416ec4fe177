"""
Input validation -- pure boundary checks for use-case payloads.

Responsibility:
    Parses the plain ``dict`` payloads received by the use-case layer
    (public API key names: ``idLoja``, ``dataInicio``, ``quantidade``...)
    into typed, frozen input dataclasses.  Every ``validate_*`` function
    returns a ValidationResult: on success ``result.value`` is the typed
    input, on failure ``result.errors`` lists every field problem found.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Runs before any service is called; services assume typed inputs.

Failure modes:
    - Never raises for bad input; the caller turns a failed result into
      InputValidationError.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from inventory_kernel.domain.dtos import ValidationError, ValidationResult
from inventory_kernel.logging_config import get_logger

logger = get_logger("domain.validation")

PREFIX_MAX_LENGTH = 10
CODE_MAX_LENGTH = 50
SECTOR_DESCRIPTION_MAX_LENGTH = 255
PRODUCT_DESCRIPTION_MAX_LENGTH = 500
ACTION_MAX_LENGTH = 100

DIVERGENCE_STATUSES = frozenset({"pendente", "reconferido", "todos"})

_MISSING = object()


# =============================================================================
# Typed inputs
# =============================================================================


@dataclass(frozen=True)
class CreateInventoryInput:
    store_id: int
    company_id: int
    started_at: datetime
    min_counts: int = 1
    ended_at: datetime | None = None
    track_lot: bool = False
    track_expiry: bool = False
    active: bool = True


@dataclass(frozen=True)
class UpdateInventoryInput:
    """Only the keys present in the payload; absent keys are left untouched."""

    changes: dict[str, Any]


@dataclass(frozen=True)
class CreateSectorInput:
    inventory_id: int
    range_start: int
    range_end: int
    prefix: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class CreateProductInput:
    inventory_id: int
    description: str
    barcode: str | None = None
    internal_code: str | None = None
    lot: str | None = None
    expires_on: date | None = None
    expected_balance: Decimal = Decimal("0")
    unit_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class RecordCountInput:
    sector_id: int
    product_id: int
    quantity: Decimal
    lot: str | None = None
    expires_on: date | None = None
    divergent: bool = False


@dataclass(frozen=True)
class UpdateCountInput:
    changes: dict[str, Any]


@dataclass(frozen=True)
class CloseInventoryInput:
    justification: str | None = None


@dataclass(frozen=True)
class ListDivergencesInput:
    sector_id: int | None = None
    status: str = "todos"
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class ListAuditLogsInput:
    page: int = 1
    limit: int = 20
    inventory_id: int | None = None
    sector_id: int | None = None
    actor_id: UUID | None = None
    action: str | None = None
    start: datetime | None = None
    end: datetime | None = None


# =============================================================================
# Field reader
# =============================================================================


class _FieldReader:
    """Reads typed fields out of a payload, collecting errors as it goes."""

    def __init__(self, data: dict[str, Any] | None):
        self.data = data or {}
        self.errors: list[ValidationError] = []

    def has(self, key: str) -> bool:
        return key in self.data

    def _error(self, code: str, message: str, key: str) -> None:
        self.errors.append(ValidationError(code=code, message=message, field=key))

    def _raw(self, key: str, required: bool) -> Any:
        value = self.data.get(key, _MISSING)
        if value is _MISSING or value is None:
            if required:
                self._error("REQUIRED", f"{key} is required", key)
            return _MISSING
        return value

    def positive_int(self, key: str, required: bool = True) -> int | None:
        value = self._raw(key, required)
        if value is _MISSING:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            self._error("INVALID_INTEGER", f"{key} must be an integer", key)
            return None
        if value <= 0:
            self._error("NOT_POSITIVE", f"{key} must be positive", key)
            return None
        return value

    def int_at_least(
        self, key: str, minimum: int, required: bool = True, default: int | None = None,
    ) -> int | None:
        value = self._raw(key, required and default is None)
        if value is _MISSING:
            return default
        if isinstance(value, bool) or not isinstance(value, int):
            self._error("INVALID_INTEGER", f"{key} must be an integer", key)
            return None
        if value < minimum:
            self._error("TOO_SMALL", f"{key} must be at least {minimum}", key)
            return None
        return value

    def int_between(
        self, key: str, minimum: int, maximum: int, default: int,
    ) -> int | None:
        value = self.int_at_least(key, minimum, required=False, default=default)
        if value is not None and value > maximum:
            self._error("TOO_LARGE", f"{key} must be at most {maximum}", key)
            return None
        return value

    def string(
        self,
        key: str,
        max_length: int,
        required: bool = False,
        min_length: int = 0,
    ) -> str | None:
        value = self._raw(key, required)
        if value is _MISSING:
            return None
        if not isinstance(value, str):
            self._error("INVALID_STRING", f"{key} must be a string", key)
            return None
        if len(value) < min_length:
            self._error("TOO_SHORT", f"{key} is required", key)
            return None
        if len(value) > max_length:
            self._error(
                "TOO_LONG", f"{key} must be at most {max_length} characters", key,
            )
            return None
        return value

    def boolean(self, key: str, default: bool | None = None) -> bool | None:
        value = self._raw(key, required=False)
        if value is _MISSING:
            return default
        if not isinstance(value, bool):
            self._error("INVALID_BOOLEAN", f"{key} must be a boolean", key)
            return default
        return value

    def non_negative_decimal(
        self, key: str, required: bool = False, default: Decimal | None = None,
    ) -> Decimal | None:
        value = self._raw(key, required)
        if value is _MISSING:
            return default
        if isinstance(value, bool):
            self._error("INVALID_DECIMAL", f"{key} must be a number", key)
            return None
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            self._error("INVALID_DECIMAL", f"{key} must be a number", key)
            return None
        if not number.is_finite():
            self._error("INVALID_DECIMAL", f"{key} must be a number", key)
            return None
        if number < 0:
            self._error("NEGATIVE", f"{key} cannot be negative", key)
            return None
        return number

    def timestamp(self, key: str, required: bool = False) -> datetime | None:
        value = self._raw(key, required)
        if value is _MISSING:
            return None
        parsed = None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                parsed = None
        if parsed is None:
            self._error(
                "INVALID_DATETIME", f"{key} must be an ISO-8601 datetime", key,
            )
            return None
        # Naive timestamps are taken as UTC
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    def day(self, key: str) -> date | None:
        value = self._raw(key, required=False)
        if value is _MISSING:
            return None
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError:
                pass
        self._error("INVALID_DATE", f"{key} must be a date (YYYY-MM-DD)", key)
        return None

    def uuid(self, key: str) -> UUID | None:
        value = self._raw(key, required=False)
        if value is _MISSING:
            return None
        if isinstance(value, UUID):
            return value
        try:
            return UUID(str(value))
        except ValueError:
            self._error("INVALID_UUID", f"{key} must be a UUID", key)
            return None

    def result(self, name: str, build) -> ValidationResult:
        if self.errors:
            logger.info(
                "input_validation_failed",
                extra={
                    "input": name,
                    "error_count": len(self.errors),
                    "error_codes": [e.code for e in self.errors],
                },
            )
            return ValidationResult.failure(*self.errors)
        return ValidationResult.success(build())


def _check_date_order(
    reader: _FieldReader,
    start: datetime | None,
    end: datetime | None,
    end_key: str,
) -> None:
    if start is not None and end is not None and end < start:
        reader.errors.append(
            ValidationError(
                code="END_BEFORE_START",
                message=f"{end_key} cannot be earlier than the start",
                field=end_key,
            )
        )


# =============================================================================
# Inventory
# =============================================================================


def validate_create_inventory(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    store_id = r.positive_int("idLoja")
    company_id = r.positive_int("idEmpresa")
    min_counts = r.int_at_least("minimoContagem", 1, required=False, default=1)
    started_at = r.timestamp("dataInicio", required=True)
    ended_at = r.timestamp("dataTermino")
    track_lot = r.boolean("lote", default=False)
    track_expiry = r.boolean("validade", default=False)
    active = r.boolean("ativo", default=True)
    _check_date_order(r, started_at, ended_at, "dataTermino")

    return r.result(
        "create_inventory",
        lambda: CreateInventoryInput(
            store_id=store_id,
            company_id=company_id,
            started_at=started_at,
            min_counts=min_counts,
            ended_at=ended_at,
            track_lot=track_lot,
            track_expiry=track_expiry,
            active=active,
        ),
    )


_INVENTORY_UPDATE_FIELDS = {
    "idLoja": "store_id",
    "idEmpresa": "company_id",
    "minimoContagem": "min_counts",
    "dataInicio": "started_at",
    "dataTermino": "ended_at",
    "lote": "track_lot",
    "validade": "track_expiry",
    "ativo": "active",
}


def validate_update_inventory(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    parsed: dict[str, Any] = {
        "idLoja": r.positive_int("idLoja", required=False),
        "idEmpresa": r.positive_int("idEmpresa", required=False),
        "minimoContagem": r.int_at_least("minimoContagem", 1, required=False),
        "dataInicio": r.timestamp("dataInicio"),
        "dataTermino": r.timestamp("dataTermino"),
        "lote": r.boolean("lote"),
        "validade": r.boolean("validade"),
        "ativo": r.boolean("ativo"),
    }
    _check_date_order(r, parsed["dataInicio"], parsed["dataTermino"], "dataTermino")
    for key in _INVENTORY_UPDATE_FIELDS:
        if key != "dataTermino" and r.has(key) and r.data.get(key) is None:
            r.errors.append(
                ValidationError(
                    code="REQUIRED",
                    message=f"{key} cannot be null",
                    field=key,
                )
            )

    changes = {
        attr: parsed[key]
        for key, attr in _INVENTORY_UPDATE_FIELDS.items()
        if r.has(key)
    }
    return r.result("update_inventory", lambda: UpdateInventoryInput(changes=changes))


def validate_close_inventory(data: dict[str, Any] | None) -> ValidationResult:
    r = _FieldReader(data)
    justification = r.string("justificativa", max_length=2000)
    return r.result(
        "close_inventory",
        lambda: CloseInventoryInput(justification=justification),
    )


# =============================================================================
# Sector
# =============================================================================


def validate_create_sector(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    inventory_id = r.positive_int("idInventario")
    prefix = r.string("prefixo", max_length=PREFIX_MAX_LENGTH)
    range_start = r.int_at_least("inicio", 0)
    range_end = r.int_at_least("termino", 0)
    description = r.string("descricao", max_length=SECTOR_DESCRIPTION_MAX_LENGTH)
    if range_start is not None and range_end is not None and range_end < range_start:
        r.errors.append(
            ValidationError(
                code="END_BEFORE_START",
                message="termino cannot be less than inicio",
                field="termino",
            )
        )

    return r.result(
        "create_sector",
        lambda: CreateSectorInput(
            inventory_id=inventory_id,
            range_start=range_start,
            range_end=range_end,
            prefix=prefix,
            description=description,
        ),
    )


# =============================================================================
# Product
# =============================================================================


def validate_create_product(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    inventory_id = r.positive_int("idInventario")
    barcode = r.string("codigoBarras", max_length=CODE_MAX_LENGTH)
    internal_code = r.string("codigoInterno", max_length=CODE_MAX_LENGTH)
    description = r.string(
        "descricao",
        max_length=PRODUCT_DESCRIPTION_MAX_LENGTH,
        required=True,
        min_length=1,
    )
    lot = r.string("lote", max_length=CODE_MAX_LENGTH)
    expires_on = r.day("validade")
    expected_balance = r.non_negative_decimal("saldo", default=Decimal("0"))
    unit_cost = r.non_negative_decimal("custo", default=Decimal("0"))

    return r.result(
        "create_product",
        lambda: CreateProductInput(
            inventory_id=inventory_id,
            description=description,
            barcode=barcode,
            internal_code=internal_code,
            lot=lot,
            expires_on=expires_on,
            expected_balance=expected_balance,
            unit_cost=unit_cost,
        ),
    )


# =============================================================================
# Count
# =============================================================================


def validate_record_count(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    sector_id = r.positive_int("idInventarioSetor")
    product_id = r.positive_int("idProduto")
    lot = r.string("lote", max_length=CODE_MAX_LENGTH)
    expires_on = r.day("validade")
    quantity = r.non_negative_decimal("quantidade", required=True)
    divergent = r.boolean("divergente", default=False)

    return r.result(
        "record_count",
        lambda: RecordCountInput(
            sector_id=sector_id,
            product_id=product_id,
            quantity=quantity,
            lot=lot,
            expires_on=expires_on,
            divergent=divergent,
        ),
    )


_COUNT_UPDATE_FIELDS = {
    "quantidade": "quantity",
    "lote": "lot",
    "validade": "expires_on",
    "divergente": "divergent",
}


def validate_update_count(data: dict[str, Any]) -> ValidationResult:
    r = _FieldReader(data)
    parsed = {
        "quantidade": r.non_negative_decimal("quantidade"),
        "lote": r.string("lote", max_length=CODE_MAX_LENGTH),
        "validade": r.day("validade"),
        "divergente": r.boolean("divergente"),
    }
    if r.has("quantidade") and r.data.get("quantidade") is None:
        r.errors.append(
            ValidationError(
                code="REQUIRED",
                message="quantidade cannot be null",
                field="quantidade",
            )
        )
    changes = {
        attr: parsed[key] for key, attr in _COUNT_UPDATE_FIELDS.items() if r.has(key)
    }
    return r.result("update_count", lambda: UpdateCountInput(changes=changes))


# =============================================================================
# Listings
# =============================================================================


def validate_list_divergences(
    data: dict[str, Any] | None, max_limit: int = 100, default_limit: int = 20,
) -> ValidationResult:
    r = _FieldReader(data)
    sector_id = r.positive_int("idSetor", required=False)
    status = r.string("status", max_length=20) or "todos"
    if status not in DIVERGENCE_STATUSES:
        r.errors.append(
            ValidationError(
                code="INVALID_CHOICE",
                message=f"status must be one of {sorted(DIVERGENCE_STATUSES)}",
                field="status",
            )
        )
    page = r.int_at_least("page", 1, required=False, default=1)
    limit = r.int_between("limit", 1, max_limit, default=default_limit)

    return r.result(
        "list_divergences",
        lambda: ListDivergencesInput(
            sector_id=sector_id, status=status, page=page, limit=limit,
        ),
    )


def validate_list_audit_logs(
    data: dict[str, Any] | None, max_limit: int = 100, default_limit: int = 20,
) -> ValidationResult:
    r = _FieldReader(data)
    page = r.int_at_least("page", 1, required=False, default=1)
    limit = r.int_between("limit", 1, max_limit, default=default_limit)
    inventory_id = r.positive_int("idInventario", required=False)
    sector_id = r.positive_int("idSetor", required=False)
    actor_id = r.uuid("idUsuario")
    action = r.string("acao", max_length=ACTION_MAX_LENGTH)
    start = r.timestamp("dataInicio")
    end = r.timestamp("dataFim")
    _check_date_order(r, start, end, "dataFim")

    return r.result(
        "list_audit_logs",
        lambda: ListAuditLogsInput(
            page=page,
            limit=limit,
            inventory_id=inventory_id,
            sector_id=sector_id,
            actor_id=actor_id,
            action=action,
            start=start,
            end=end,
        ),
    )
