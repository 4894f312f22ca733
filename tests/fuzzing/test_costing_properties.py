"""
Property-based tests for moving-average costing.

Properties:
- After any sequence of receipts the stored average is within rounding
  tolerance of the exact weighted average of every receipt.
- The average always lies between the cheapest and dearest receipt cost.
- Shipments never change the average and never drive stock negative.
- Replaying the signed ledger changes reproduces the final stock.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from inventory_engines.costing import (
    MovingAverageCostEngine,
    ReceiptLine,
    ShipmentLine,
    StockPosition,
    reconstruct_stock,
)
from inventory_kernel.exceptions import InsufficientStockError

PID = uuid4()
TOLERANCE_PER_STEP = Decimal("0.00005")

quantities = st.integers(min_value=1, max_value=10_000)
unit_costs = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("100000"),
    places=4, allow_nan=False, allow_infinity=False,
)
receipts = st.lists(st.tuples(quantities, unit_costs), min_size=1, max_size=25)


class TestWeightedAverageProperties:

    @given(receipts)
    @settings(max_examples=200)
    def test_average_tracks_exact_weighted_average(self, lines):
        engine = MovingAverageCostEngine()
        pos = StockPosition(PID, 0, Decimal("0"))
        for qty, cost in lines:
            result = engine.apply_receipt(pos, ReceiptLine(qty, cost))
            pos = StockPosition(PID, result.new_stock, result.new_average_cost)

        total_qty = sum(q for q, _ in lines)
        exact = sum(Decimal(q) * c for q, c in lines) / Decimal(total_qty)
        assert pos.stock == total_qty
        assert abs(pos.average_cost - exact) <= TOLERANCE_PER_STEP * len(lines)

    @given(receipts)
    def test_average_within_cost_range(self, lines):
        engine = MovingAverageCostEngine()
        pos = StockPosition(PID, 0, Decimal("0"))
        for qty, cost in lines:
            result = engine.apply_receipt(pos, ReceiptLine(qty, cost))
            pos = StockPosition(PID, result.new_stock, result.new_average_cost)

        low = min(c for _, c in lines)
        high = max(c for _, c in lines)
        slack = TOLERANCE_PER_STEP * len(lines)
        assert low - slack <= pos.average_cost <= high + slack

    @given(receipts)
    def test_cost_changed_iff_rounded_average_moved(self, lines):
        engine = MovingAverageCostEngine()
        pos = StockPosition(PID, 0, Decimal("0"))
        for qty, cost in lines:
            result = engine.apply_receipt(pos, ReceiptLine(qty, cost))
            assert result.cost_changed == (result.new_average_cost != result.old_average_cost)
            pos = StockPosition(PID, result.new_stock, result.new_average_cost)


movements = st.lists(
    st.one_of(
        st.tuples(st.just("in"), quantities, unit_costs),
        st.tuples(st.just("out"), quantities, st.just(None)),
    ),
    min_size=1,
    max_size=40,
)


class TestLedgerReplay:

    @given(movements)
    @settings(max_examples=200)
    def test_replay_reproduces_stock(self, moves):
        engine = MovingAverageCostEngine()
        pos = StockPosition(PID, 0, Decimal("0"))
        changes: list[int] = []

        for kind, qty, cost in moves:
            if kind == "in":
                result = engine.apply_receipt(pos, ReceiptLine(qty, cost))
                pos = StockPosition(PID, result.new_stock, result.new_average_cost)
                changes.append(qty)
            else:
                try:
                    shipped = engine.apply_shipment(pos, ShipmentLine(qty))
                except InsufficientStockError as exc:
                    assert exc.shortfall == qty - pos.stock > 0
                    continue
                assert shipped.cost_at_sale == pos.average_cost
                pos = StockPosition(PID, shipped.new_stock, pos.average_cost)
                changes.append(-qty)

            assert pos.stock >= 0
            assert reconstruct_stock(changes) == pos.stock
