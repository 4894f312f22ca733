"""
Order-entry value objects validate themselves on construction.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_kernel.domain.dtos import (
    CostLogEntry,
    MovementLine,
    MovementType,
    PurchaseLineSpec,
    SalesLineSpec,
    SalesOrderLineInfo,
    StockReconciliation,
)
from inventory_kernel.exceptions import InvalidCostError, InvalidQuantityError


class TestPurchaseLineSpec:

    def test_valid(self):
        spec = PurchaseLineSpec(uuid4(), 3, Decimal("1.50"))
        assert spec.quantity == 3

    @pytest.mark.parametrize("qty", [0, -5, False])
    def test_bad_quantity(self, qty):
        with pytest.raises(InvalidQuantityError):
            PurchaseLineSpec(uuid4(), qty, Decimal("1"))

    def test_negative_cost(self):
        with pytest.raises(InvalidCostError):
            PurchaseLineSpec(uuid4(), 1, Decimal("-1"))

    def test_zero_cost_allowed(self):
        assert PurchaseLineSpec(uuid4(), 1, Decimal("0")).unit_cost == 0

    def test_cost_optional(self):
        assert PurchaseLineSpec(uuid4(), 2).unit_cost is None


class TestSalesLineSpec:

    def test_price_optional(self):
        assert SalesLineSpec(uuid4(), 2).unit_price is None

    def test_negative_price(self):
        with pytest.raises(InvalidCostError):
            SalesLineSpec(uuid4(), 2, Decimal("-3"))


class TestDerivedValues:

    def test_sales_line_cogs_unknown_until_shipped(self):
        line = SalesOrderLineInfo(1, uuid4(), "A", 4, Decimal("20"))
        assert line.amount == Decimal("80")
        assert line.cost_of_goods_sold is None

    def test_movement_line_cost_changed(self):
        line = MovementLine(1, uuid4(), "A", 5, 10, 15, Decimal("100"), Decimal("110"))
        assert line.cost_changed

    def test_reconciliation_discrepancy(self):
        recon = StockReconciliation(uuid4(), recorded_stock=12, ledger_stock=10, entry_count=2)
        assert recon.discrepancy == 2
        assert not recon.is_consistent

    def test_cost_log_delta(self):
        entry = CostLogEntry(
            id=uuid4(), product_id=uuid4(), product_name="A",
            movement_type=MovementType.IN,
            old_avg_cost=Decimal("100.0000"), new_avg_cost=Decimal("110.0000"),
            related_doc="PO-1", line_no=1, timestamp=None, actor_id=uuid4(),
        )
        assert entry.delta == Decimal("10.0000")
