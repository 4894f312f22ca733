"""
Process start-up wiring: configuration, logging, engine, tables, service.
"""

from __future__ import annotations

import logging

from inventory_config import get_active_config
from inventory_config.schema import InventorySettings
from inventory_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from inventory_kernel.domain.clock import Clock
from inventory_kernel.logging_config import configure_logging, get_logger
from inventory_services.order_management import OrderManagementService

logger = get_logger("services.bootstrap")


def bootstrap(
    settings: InventorySettings | None = None,
    clock: Clock | None = None,
    create_schema: bool = True,
) -> OrderManagementService:
    """
    Build a ready-to-use OrderManagementService.

    Reads settings through ``get_active_config()`` when none are given,
    configures structured logging at the configured level, initializes the
    engine and (optionally) creates missing tables.
    """
    settings = settings or get_active_config()
    configure_logging(level=getattr(logging, settings.log_level))
    init_engine_from_url(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )
    if create_schema:
        create_tables()
    logger.info("inventory_service_ready", extra={"currency": settings.currency})
    return OrderManagementService(get_session_factory(), clock=clock, settings=settings)
