"""Database layer - engine, base classes, column types, immutability."""

from inventory_kernel.db.base import UUID, Base, PortableDecimal, TrackedBase, UUIDString
from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from inventory_kernel.db.types import round_amount, round_cost

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "PortableDecimal",
    "UUID",
    "round_cost",
    "round_amount",
]
