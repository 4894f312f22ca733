"""
inventory_engines.costing -- Moving-average (weighted-average) unit costing.

Responsibility:
    Compute the effect of one receipt line or one shipment line on a
    product's stock position: the new on-hand quantity, the new average
    unit cost, and (for shipments) the cost of goods sold per unit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel exceptions, db/types rounding helpers
    and logging.  Called by the movement coordinator, once per order line.

Invariants enforced:
    - Weighted average: after a receipt of ``q`` units at ``c`` into a
      position of ``s`` units at average ``a``,
      ``new_avg = (s*a + q*c) / (s + q)``, rounded with the configured rule.
      With ``s + q == 0`` (unreachable for q > 0) the receipt cost is used.
    - Shipments never change the average and never clamp: a quantity above
      stock raises InsufficientStockError.
    - cost_at_sale equals the average at the moment of shipment.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - InvalidQuantityError if quantity is not a positive integer.
    - InvalidCostError if a receipt unit cost is negative.
    - InsufficientStockError if a shipment exceeds on-hand stock.
    - ValueError if a StockPosition is itself invalid (negative stock/cost).

Usage:
    engine = MovingAverageCostEngine(decimal_places=4)
    result = engine.apply_receipt(
        StockPosition(product_id, stock=10, average_cost=Decimal("100")),
        ReceiptLine(quantity=5, unit_cost=Decimal("130")),
    )
    assert result.new_average_cost == Decimal("110.0000")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from uuid import UUID

from inventory_engines.tracer import traced_engine
from inventory_kernel.db.types import COST_DECIMAL_PLACES, round_cost
from inventory_kernel.exceptions import (
    InsufficientStockError,
    InvalidCostError,
    InvalidQuantityError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.costing")

ENGINE_NAME = "moving_average_cost"
ENGINE_VERSION = "1.0"


@dataclass(frozen=True, slots=True)
class StockPosition:
    """On-hand quantity and average unit cost of one product."""

    product_id: UUID
    stock: int
    average_cost: Decimal
    product_name: str | None = None

    def __post_init__(self) -> None:
        if self.stock < 0:
            logger.error("stock_position_negative_stock", extra={
                "product_id": str(self.product_id),
                "stock": self.stock,
            })
            raise ValueError(f"Stock cannot be negative, got {self.stock}")
        if self.average_cost < 0:
            logger.error("stock_position_negative_cost", extra={
                "product_id": str(self.product_id),
                "average_cost": str(self.average_cost),
            })
            raise ValueError(f"Average cost cannot be negative, got {self.average_cost}")

    @property
    def value(self) -> Decimal:
        return self.average_cost * self.stock


@dataclass(frozen=True, slots=True)
class ReceiptLine:
    quantity: int
    unit_cost: Decimal


@dataclass(frozen=True, slots=True)
class ShipmentLine:
    quantity: int


@dataclass(frozen=True, slots=True)
class ReceiptResult:
    """Outcome of applying one receipt line."""

    new_stock: int
    new_average_cost: Decimal
    old_average_cost: Decimal
    cost_changed: bool


@dataclass(frozen=True, slots=True)
class ShipmentResult:
    """Outcome of applying one shipment line."""

    new_stock: int
    cost_at_sale: Decimal


def _require_positive_quantity(quantity: int, product_id: UUID) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        logger.error("movement_invalid_quantity", extra={
            "product_id": str(product_id),
            "quantity": repr(quantity),
        })
        raise InvalidQuantityError(quantity, str(product_id))


class MovingAverageCostEngine:
    """
    Pure moving-average costing calculator.

    Contract:
        Holds only the rounding rule.  Each call takes a StockPosition and a
        line and returns the resulting position data; nothing is persisted.

    Guarantees:
        - Returned averages are rounded to ``decimal_places`` with
          ``rounding``.
        - ``cost_changed`` compares the rounded old and new averages.
    """

    def __init__(
        self,
        decimal_places: int = COST_DECIMAL_PLACES,
        rounding: str = ROUND_HALF_EVEN,
    ):
        if decimal_places < 0:
            raise ValueError(f"decimal_places must be >= 0, got {decimal_places}")
        self.decimal_places = decimal_places
        self.rounding = rounding

    def _round(self, value: Decimal) -> Decimal:
        return round_cost(value, self.decimal_places, self.rounding)

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("position", "line"))
    def apply_receipt(self, position: StockPosition, line: ReceiptLine) -> ReceiptResult:
        """
        Bring ``line.quantity`` units at ``line.unit_cost`` into stock.

        Raises:
            InvalidQuantityError: quantity <= 0.
            InvalidCostError: unit_cost < 0.
        """
        _require_positive_quantity(line.quantity, position.product_id)
        if line.unit_cost < 0:
            logger.error("receipt_negative_cost", extra={
                "product_id": str(position.product_id),
                "unit_cost": str(line.unit_cost),
            })
            raise InvalidCostError(line.unit_cost, str(position.product_id))

        new_stock = position.stock + line.quantity
        if new_stock > 0:
            raw = (
                Decimal(position.stock) * position.average_cost
                + Decimal(line.quantity) * line.unit_cost
            ) / Decimal(new_stock)
        else:
            raw = line.unit_cost

        old_average = self._round(position.average_cost)
        new_average = self._round(raw)

        logger.debug("receipt_costed", extra={
            "product_id": str(position.product_id),
            "stock_before": position.stock,
            "quantity": line.quantity,
            "unit_cost": str(line.unit_cost),
            "old_average_cost": str(old_average),
            "new_average_cost": str(new_average),
        })

        return ReceiptResult(
            new_stock=new_stock,
            new_average_cost=new_average,
            old_average_cost=old_average,
            cost_changed=new_average != old_average,
        )

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("position", "line"))
    def apply_shipment(self, position: StockPosition, line: ShipmentLine) -> ShipmentResult:
        """
        Take ``line.quantity`` units out of stock at the current average.

        Raises:
            InvalidQuantityError: quantity <= 0.
            InsufficientStockError: quantity > stock.  Never clamped.
        """
        _require_positive_quantity(line.quantity, position.product_id)
        if position.stock < line.quantity:
            logger.warning("shipment_insufficient_stock", extra={
                "product_id": str(position.product_id),
                "requested": line.quantity,
                "available": position.stock,
            })
            raise InsufficientStockError(
                product_id=str(position.product_id),
                requested=line.quantity,
                available=position.stock,
                product_name=position.product_name,
            )

        return ShipmentResult(
            new_stock=position.stock - line.quantity,
            cost_at_sale=position.average_cost,
        )


def reconstruct_stock(changes: Iterable[int]) -> int:
    """Replay signed ledger changes from zero. Equals current stock for a consistent ledger."""
    return sum(changes, 0)
