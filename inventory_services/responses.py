"""
inventory_services.responses -- Public API response shapes.

Responsibility:
    Maps kernel DTOs onto plain dicts keyed by the public API field names
    (``idLoja``, ``podeFechar``, ``bloqueios``...).  Pure functions; no
    session, no I/O.

Conversions:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date / datetime -> ISO format string
    - Enum -> .value
    - Tuples -> lists
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from inventory_kernel.domain.dtos import (
    AuditLogInfo,
    ClosingBlockers,
    ClosingResult,
    ClosingStatus,
    CountInfo,
    DivergenceLine,
    InventoryInfo,
    ProductInfo,
    SectorInfo,
)
from inventory_kernel.domain.pagination import Page


def plain(value: Any) -> Any:
    """Convert a scalar or container to JSON-friendly primitives."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [plain(item) for item in value]
    if isinstance(value, dict):
        return {str(k): plain(v) for k, v in value.items()}
    return value


def inventory_response(info: InventoryInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "idLoja": info.store_id,
        "idEmpresa": info.company_id,
        "minimoContagem": info.min_counts,
        "dataInicio": plain(info.started_at),
        "dataTermino": plain(info.ended_at),
        "lote": info.track_lot,
        "validade": info.track_expiry,
        "ativo": info.active,
        "fechadoEm": plain(info.closed_at),
        "fechadoPor": plain(info.closed_by_id),
        "justificativaFechamento": info.closing_justification,
    }


def blockers_response(blockers: ClosingBlockers) -> dict[str, Any]:
    return {
        "setoresNaoAbertos": list(blockers.unopened_sectors),
        "setoresNaoFechados": list(blockers.unfinished_sectors),
        "divergenciasPendentes": blockers.pending_divergences,
    }


def closing_status_response(status: ClosingStatus) -> dict[str, Any]:
    return {
        "podeFechar": status.can_close,
        "bloqueios": blockers_response(status.blockers),
    }


def closing_result_response(result: ClosingResult) -> dict[str, Any]:
    """Closing status plus the closed inventory."""
    return {
        "podeFechar": result.can_close,
        "bloqueios": blockers_response(result.blockers),
        "liberadoPorAdmin": result.bypassed,
        "inventario": inventory_response(result.inventory),
    }


def sector_response(info: SectorInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "idInventario": info.inventory_id,
        "prefixo": info.prefix,
        "inicio": info.range_start,
        "termino": info.range_end,
        "descricao": info.description,
        "rotulo": info.label,
        "status": plain(info.status),
        "abertoEm": plain(info.opened_at),
        "finalizadoEm": plain(info.finalized_at),
        "finalizadoPor": plain(info.finalized_by_id),
    }


def product_response(info: ProductInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "idInventario": info.inventory_id,
        "codigoBarras": info.barcode,
        "codigoInterno": info.internal_code,
        "descricao": info.description,
        "lote": info.lot,
        "validade": plain(info.expires_on),
        "saldo": plain(info.expected_balance),
        "custo": plain(info.unit_cost),
        "saldoContado": plain(info.counted_balance),
        "divergente": info.divergent,
    }


def count_response(info: CountInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "idInventarioSetor": info.sector_id,
        "idProduto": info.product_id,
        "quantidade": plain(info.quantity),
        "lote": info.lot,
        "validade": plain(info.expires_on),
        "dataContagem": plain(info.counted_at),
        "divergente": info.divergent,
        "reconferido": info.reconciled,
        "idUsuario": plain(info.counted_by_id),
    }


def divergence_response(line: DivergenceLine) -> dict[str, Any]:
    return {
        "idProduto": line.product_id,
        "codigoBarras": line.barcode,
        "descricao": line.description,
        "idSetor": line.sector_id,
        "descricaoSetor": line.sector_description,
        "qtdEsperada": plain(line.expected),
        "qtdContada": plain(line.counted),
        "diferenca": plain(line.difference),
        "reconferido": line.reconciled,
    }


def audit_log_response(info: AuditLogInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "acao": info.action,
        "descricao": info.description,
        "idUsuario": plain(info.actor_id),
        "nomeUsuario": info.actor_name,
        "idInventario": info.inventory_id,
        "idSetor": info.sector_id,
        "metadata": plain(info.metadata),
        "ip": info.ip_address,
        "userAgent": info.user_agent,
        "createdAt": plain(info.created_at),
    }


def page_response(page: Page, render: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
    return {
        "data": [render(item) for item in page.items],
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "totalPages": page.total_pages,
    }
