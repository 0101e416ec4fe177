"""Read-only query selectors."""

from inventory_kernel.selectors.audit_selector import AuditLogFilter, AuditLogSelector
from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.count_selector import CountSelector
from inventory_kernel.selectors.divergence_selector import DivergenceSelector
from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.selectors.sector_selector import SectorSelector

__all__ = [
    "BaseSelector",
    "InventorySelector",
    "SectorSelector",
    "ProductSelector",
    "CountSelector",
    "DivergenceSelector",
    "AuditLogSelector",
    "AuditLogFilter",
]
