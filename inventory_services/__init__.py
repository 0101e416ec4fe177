"""Request-level use cases and response mapping over the inventory kernel."""

from inventory_services.use_cases import InventoryUseCases, actor_from_request

__all__ = ["InventoryUseCases", "actor_from_request"]
