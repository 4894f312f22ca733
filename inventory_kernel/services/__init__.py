"""Kernel write services. All flush-only except TransactionRunner, which commits."""

from inventory_kernel.services.movement_coordinator import MovementCoordinator
from inventory_kernel.services.order_service import OrderService
from inventory_kernel.services.party_service import PartyService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.transaction_runner import (
    TransactionOutcome,
    TransactionRunner,
    is_retryable_error,
)

__all__ = [
    "MovementCoordinator",
    "OrderService",
    "PartyService",
    "ProductService",
    "TransactionOutcome",
    "TransactionRunner",
    "is_retryable_error",
]
