"""
Receiving purchase orders into stock.

Covers the weighted-average cost update, ledger entries, the cost log
written only on a change, line compounding within one order and the
rejection of a second receipt.
"""

from decimal import Decimal

import pytest

from inventory_kernel.domain.dtos import MovementType, PurchaseLineSpec
from inventory_kernel.exceptions import (
    OrderNotFoundError,
    OrderNotReceivableError,
    ProductNotFoundError,
)
from inventory_kernel.models.product import ProductModel


class TestReceiveOrder:

    def test_first_receipt(self, service, make_product, test_actor_id):
        product = make_product()
        po = service.create_purchase_order(
            "Supplier", [PurchaseLineSpec(product.id, 10, Decimal("100"))], test_actor_id
        )

        result = service.receive_order(po.id, test_actor_id)

        assert result.movement_type is MovementType.IN
        assert result.status == "received"
        assert result.attempts == 1
        after = service.get_product(product.id)
        assert after.stock == 10
        assert after.average_cost == Decimal("100.0000")
        assert after.last_cost == Decimal("100")

        order = service.get_purchase_order(po.id)
        assert order.status == "received"
        assert order.received_at is not None

    def test_weighted_average_across_receipts(self, service, make_product, receive):
        product = make_product()
        receive(product.id, 10, "100")
        result = receive(product.id, 5, "130")

        line = result.lines[0]
        assert (line.stock_before, line.stock_after) == (10, 15)
        assert line.average_cost_before == Decimal("100.0000")
        assert line.average_cost_after == Decimal("110.0000")
        assert service.get_product(product.id).average_cost == Decimal("110.0000")

    def test_ledger_entries(self, service, make_product, receive, test_actor_id):
        product = make_product()
        first = receive(product.id, 10, "100")
        second = receive(product.id, 5, "130")

        log = service.inventory_log(product.id)
        assert [e.change for e in log] == [5, 10]  # newest first
        assert [e.new_stock for e in log] == [15, 10]
        assert log[0].related_doc == second.order_number
        assert log[1].related_doc == first.order_number
        assert all(e.movement_type is MovementType.IN for e in log)
        assert all(e.actor_id == test_actor_id for e in log)

        costs = service.cost_log(product.id)
        assert [(c.old_avg_cost, c.new_avg_cost) for c in costs] == [
            (Decimal("100.0000"), Decimal("110.0000")),
            (Decimal("0.0000"), Decimal("100.0000")),
        ]

    def test_no_cost_entry_when_average_unchanged(self, service, make_product, receive):
        product = make_product()
        receive(product.id, 10, "100")
        result = receive(product.id, 10, "100")

        assert result.cost_log_count == 0
        assert result.inventory_log_count == 1
        assert len(service.cost_log(product.id)) == 1
        assert len(service.inventory_log(product.id)) == 2

    def test_lines_for_same_product_compound(self, service, make_product, test_actor_id):
        product = make_product()
        po = service.create_purchase_order("Supplier", [
            PurchaseLineSpec(product.id, 10, Decimal("100")),
            PurchaseLineSpec(product.id, 5, Decimal("130")),
        ], test_actor_id)

        result = service.receive_order(po.id, test_actor_id)

        assert [l.stock_after for l in result.lines] == [10, 15]
        assert result.lines[1].average_cost_before == Decimal("100.0000")
        after = service.get_product(product.id)
        assert (after.stock, after.average_cost) == (15, Decimal("110.0000"))

    def test_all_entries_share_one_timestamp(self, service, make_product, test_actor_id):
        a, b = make_product(), make_product()
        po = service.create_purchase_order("Supplier", [
            PurchaseLineSpec(a.id, 1, Decimal("1")),
            PurchaseLineSpec(b.id, 2, Decimal("2")),
        ], test_actor_id)
        result = service.receive_order(po.id, test_actor_id)

        stamps = {e.timestamp for e in service.inventory_log(a.id) + service.inventory_log(b.id)}
        assert stamps == {result.timestamp}

    def test_second_receipt_rejected(self, service, make_product, receive, test_actor_id):
        product = make_product()
        first = receive(product.id, 10, "100")

        with pytest.raises(OrderNotReceivableError) as exc_info:
            service.receive_order(first.order_id, test_actor_id)

        assert exc_info.value.status == "received"
        assert service.get_product(product.id).stock == 10
        assert len(service.inventory_log(product.id)) == 1

    def test_unknown_order(self, service, test_actor_id):
        from uuid import uuid4

        with pytest.raises(OrderNotFoundError):
            service.receive_order(uuid4(), test_actor_id)

    def test_deleted_product_aborts_whole_receipt(
        self, service, session, make_product, test_actor_id
    ):
        kept, doomed = make_product(), make_product()
        po = service.create_purchase_order("Supplier", [
            PurchaseLineSpec(kept.id, 4, Decimal("10")),
            PurchaseLineSpec(doomed.id, 4, Decimal("10")),
        ], test_actor_id)
        session.delete(session.get(ProductModel, doomed.id))
        session.commit()

        with pytest.raises(ProductNotFoundError) as exc_info:
            service.receive_order(po.id, test_actor_id)

        assert exc_info.value.related_doc == po.order_number
        assert service.get_product(kept.id).stock == 0
        assert service.inventory_log(kept.id) == ()
        assert service.get_purchase_order(po.id).status == "pending"

    def test_logs_committed_movement(self, service, make_product, receive, captured_logs):
        product = make_product()
        receive(product.id, 3, "7")
        messages = [r["message"] for r in captured_logs()]
        assert "receipt_line_applied" in messages
        assert "movement_committed" in messages
        committed = next(r for r in captured_logs() if r["message"] == "movement_committed")
        assert committed["operation"] == "receive_order"
        assert committed["actor_id"]
