"""
inventory_services -- Package init and public API.

Responsibility:
    Stateful orchestration over inventory_kernel and inventory_engines.
    This is the only layer that wires configuration, clock, engine and
    sessions together, and the canonical import surface for callers.

Dependency direction:
    inventory_services -> inventory_kernel, inventory_engines, inventory_config
    inventory_kernel / inventory_engines -> inventory_services (FORBIDDEN)
"""

from inventory_kernel.logging_config import get_logger

logger = get_logger("services")

from inventory_services.bootstrap import bootstrap  # noqa: E402
from inventory_services.order_management import OrderManagementService  # noqa: E402

__all__ = ["OrderManagementService", "bootstrap"]
