"""
Module: inventory_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel exceptions, db/types and logging.
    MUST NOT import inventory_services.

Invariants enforced:
    - Engines never read the clock; timestamps are supplied by callers.
    - Decimal-only arithmetic; floats are forbidden.
    - Determinism: identical inputs always produce identical outputs.
"""

from inventory_engines.costing import (
    MovingAverageCostEngine,
    ReceiptLine,
    ReceiptResult,
    ShipmentLine,
    ShipmentResult,
    StockPosition,
    reconstruct_stock,
)
from inventory_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "MovingAverageCostEngine",
    "StockPosition",
    "ReceiptLine",
    "ReceiptResult",
    "ShipmentLine",
    "ShipmentResult",
    "reconstruct_stock",
    "traced_engine",
    "compute_input_fingerprint",
]
