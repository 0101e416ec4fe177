"""Services for the inventory kernel (write side)."""

from inventory_kernel.services.audit_service import (
    AuditLogService,
    AuditNotifier,
    LoggingAuditNotifier,
    NullAuditNotifier,
)
from inventory_kernel.services.count_service import CountService
from inventory_kernel.services.inventory_service import InventoryService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.sector_service import SectorService

__all__ = [
    "AuditLogService",
    "AuditNotifier",
    "CountService",
    "InventoryService",
    "LoggingAuditNotifier",
    "NullAuditNotifier",
    "ProductService",
    "SectorService",
]
