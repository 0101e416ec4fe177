"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.  Time enters only
through an injected Clock.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.closing import (
    evaluate_closing,
    justification_is_sufficient,
    sector_label,
    sector_number,
)
from inventory_kernel.domain.dtos import (
    Actor,
    AuditLogInfo,
    AuditRecord,
    ClosingBlockers,
    ClosingResult,
    ClosingStatus,
    CountInfo,
    DivergenceLine,
    InventoryInfo,
    ProductInfo,
    SectorInfo,
    ValidationError,
    ValidationResult,
)
from inventory_kernel.domain.pagination import Page, PageRequest
from inventory_kernel.domain.workflow import (
    INVENTORY_WORKFLOW,
    SECTOR_WORKFLOW,
    Guard,
    SectorStatus,
    Transition,
    Workflow,
)

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # DTOs
    "Actor",
    "InventoryInfo",
    "SectorInfo",
    "ProductInfo",
    "CountInfo",
    "ClosingBlockers",
    "ClosingStatus",
    "ClosingResult",
    "DivergenceLine",
    "AuditRecord",
    "AuditLogInfo",
    "ValidationError",
    "ValidationResult",
    # Closing gate
    "evaluate_closing",
    "justification_is_sufficient",
    "sector_label",
    "sector_number",
    # Pagination
    "Page",
    "PageRequest",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
    "SectorStatus",
    "SECTOR_WORKFLOW",
    "INVENTORY_WORKFLOW",
]
