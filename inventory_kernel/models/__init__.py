"""Domain models for the inventory kernel."""

from inventory_kernel.models.audit_log import AuditAction, AuditLog
from inventory_kernel.models.count import Count
from inventory_kernel.models.inventory import Inventory
from inventory_kernel.models.product import Product
from inventory_kernel.models.sector import Sector, SectorStatus

__all__ = [
    "Inventory",
    "Sector",
    "SectorStatus",
    "Product",
    "Count",
    "AuditLog",
    "AuditAction",
]
