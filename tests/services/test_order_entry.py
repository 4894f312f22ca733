"""
Order entry: numbering, tier pricing, totals, approval and remarks.
"""

from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from inventory_kernel.domain.dtos import PurchaseLineSpec, SalesLineSpec
from inventory_kernel.exceptions import (
    InvalidOrderError,
    OrderNotFoundError,
    OrderNotPendingApprovalError,
    PartyInactiveError,
    PartyNotFoundError,
    ProductNotFoundError,
)


class TestPurchaseOrderEntry:

    def test_create(self, service, make_product, test_actor_id):
        product = make_product(name="Widget")
        po = service.create_purchase_order("Acme", [
            PurchaseLineSpec(product.id, 3, Decimal("2.50")),
            PurchaseLineSpec(product.id, 1, Decimal("1.005")),
        ], test_actor_id, remarks="rush")

        assert po.order_number.startswith("PO-")
        assert po.status == "pending"
        assert po.currency == "USD"
        assert po.total_amount == Decimal("8.50")  # 7.50 + 1.005 -> 8.505 -> 8.50
        assert [l.line_no for l in po.lines] == [1, 2]
        assert po.lines[0].product_name == "Widget"
        assert po.remarks == "rush"

    def test_creation_does_not_move_stock(self, service, make_product, test_actor_id):
        product = make_product()
        service.create_purchase_order(
            "Acme", [PurchaseLineSpec(product.id, 3, Decimal("1"))], test_actor_id
        )
        assert service.get_product(product.id).stock == 0
        assert service.inventory_log(product.id) == ()

    def test_order_numbers_unique(self, service, make_product, test_actor_id):
        product = make_product()
        numbers = {
            service.create_purchase_order(
                "Acme", [PurchaseLineSpec(product.id, 1, Decimal("1"))], test_actor_id
            ).order_number
            for _ in range(5)
        }
        assert len(numbers) == 5

    def test_same_millisecond_numbers_carry_full_uuid_suffix(
        self, service, make_product, test_actor_id
    ):
        product = make_product()
        line = [PurchaseLineSpec(product.id, 1, Decimal("1"))]
        first = service.create_purchase_order("Acme", line, test_actor_id).order_number
        second = service.create_purchase_order("Acme", line, test_actor_id).order_number

        prefix, millis, suffix = first.split("-")
        assert (prefix, millis) == tuple(second.split("-")[:2])
        assert UUID(hex=suffix).hex == suffix.lower()
        assert first != second

    def test_empty_order_rejected(self, service, test_actor_id):
        with pytest.raises(InvalidOrderError):
            service.create_purchase_order("Acme", [], test_actor_id)

    def test_blank_supplier_rejected(self, service, make_product, test_actor_id):
        product = make_product()
        with pytest.raises(InvalidOrderError):
            service.create_purchase_order(
                "  ", [PurchaseLineSpec(product.id, 1, Decimal("1"))], test_actor_id
            )

    def test_unknown_product_rejected(self, service, test_actor_id):
        with pytest.raises(ProductNotFoundError):
            service.create_purchase_order(
                "Acme", [PurchaseLineSpec(uuid4(), 1, Decimal("1"))], test_actor_id
            )

    def test_line_limit(self, session_factory, deterministic_clock, make_product, test_actor_id):
        from inventory_config.schema import InventorySettings
        from inventory_services.order_management import OrderManagementService

        limited = OrderManagementService(
            session_factory, clock=deterministic_clock,
            settings=InventorySettings(max_order_lines=2), sleep=lambda s: None,
        )
        product = make_product()
        lines = [PurchaseLineSpec(product.id, 1, Decimal("1"))] * 3
        with pytest.raises(InvalidOrderError, match="limit"):
            limited.create_purchase_order("Acme", lines, test_actor_id)


class TestSalesOrderEntry:

    def test_tier_price_default(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00", "gold": "15.50"})
        order = service.create_sales_order(
            "Cafe", [SalesLineSpec(product.id, 2)], test_actor_id, price_tier="gold"
        )
        assert order.price_tier == "gold"
        assert order.lines[0].unit_price == Decimal("15.50")
        assert order.total_amount == Decimal("31.00")
        assert order.status == "pending_approval"
        assert order.order_number.startswith("SO-")

    def test_default_tier_from_settings(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00"})
        order = service.create_sales_order("Cafe", [SalesLineSpec(product.id, 1)], test_actor_id)
        assert order.price_tier == "retail"
        assert order.lines[0].unit_price == Decimal("20.00")

    def test_explicit_price_wins(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00"})
        order = service.create_sales_order(
            "Cafe", [SalesLineSpec(product.id, 1, Decimal("18.00"))], test_actor_id
        )
        assert order.lines[0].unit_price == Decimal("18.00")

    def test_missing_tier_price(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00"})
        with pytest.raises(InvalidOrderError, match="no silver price"):
            service.create_sales_order(
                "Cafe", [SalesLineSpec(product.id, 1)], test_actor_id, price_tier="silver"
            )

    def test_unknown_tier(self, service, make_product, test_actor_id):
        product = make_product()
        with pytest.raises(ValueError):
            service.create_sales_order(
                "Cafe", [SalesLineSpec(product.id, 1)], test_actor_id, price_tier="platinum"
            )

    def test_entry_does_not_check_stock(self, service, make_product, test_actor_id):
        product = make_product()
        order = service.create_sales_order(
            "Cafe", [SalesLineSpec(product.id, 500)], test_actor_id
        )
        assert order.lines[0].quantity == 500


class TestRegisteredParties:

    def test_customer_tier_is_the_default(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00", "gold": "15.50"})
        customer = service.create_customer("C001", "Harbour Hotel", test_actor_id, price_tier="gold")
        order = service.create_sales_order(customer.id, [SalesLineSpec(product.id, 2)], test_actor_id)
        assert order.customer_id == customer.id
        assert order.customer_name == "Harbour Hotel"
        assert order.price_tier == "gold"
        assert order.total_amount == Decimal("31.00")

    def test_explicit_tier_overrides_customer_tier(self, service, make_product, test_actor_id):
        product = make_product(prices={"retail": "20.00", "gold": "15.50"})
        customer = service.create_customer("C001", "Harbour Hotel", test_actor_id, price_tier="gold")
        order = service.create_sales_order(
            customer.id, [SalesLineSpec(product.id, 1)], test_actor_id, price_tier="retail"
        )
        assert order.price_tier == "retail"
        assert order.lines[0].unit_price == Decimal("20.00")

    def test_walk_in_order_has_no_customer_id(self, service, make_product, test_actor_id):
        product = make_product()
        order = service.create_sales_order("Cafe", [SalesLineSpec(product.id, 1)], test_actor_id)
        assert order.customer_id is None

    def test_supplier_linked_on_purchase_order(self, service, make_product, test_actor_id):
        product = make_product()
        supplier = service.create_supplier("S001", "Acme Wholesale", test_actor_id)
        po = service.create_purchase_order(
            supplier.id, [PurchaseLineSpec(product.id, 1, Decimal("2"))], test_actor_id
        )
        assert po.supplier_id == supplier.id
        assert po.supplier_name == "Acme Wholesale"

    def test_inactive_customer_rejected(self, service, make_product, test_actor_id):
        product = make_product()
        customer = service.create_customer("C001", "Closed Diner", test_actor_id)
        service.deactivate_party(customer.id, test_actor_id)
        with pytest.raises(PartyInactiveError):
            service.create_sales_order(customer.id, [SalesLineSpec(product.id, 1)], test_actor_id)
        assert service.sales_orders() == ()

    def test_supplier_id_is_not_a_customer(self, service, make_product, test_actor_id):
        product = make_product()
        supplier = service.create_supplier("S001", "Acme", test_actor_id)
        with pytest.raises(PartyNotFoundError):
            service.create_sales_order(supplier.id, [SalesLineSpec(product.id, 1)], test_actor_id)

    def test_unknown_supplier_id(self, service, make_product, test_actor_id):
        product = make_product()
        with pytest.raises(PartyNotFoundError):
            service.create_purchase_order(
                uuid4(), [PurchaseLineSpec(product.id, 1, Decimal("1"))], test_actor_id
            )


class TestDefaultUnitCost:

    def test_never_received_product_costs_zero(self, service, make_product, test_actor_id):
        product = make_product()
        po = service.create_purchase_order("Acme", [PurchaseLineSpec(product.id, 4)], test_actor_id)
        assert po.lines[0].unit_cost == Decimal("0")
        assert po.total_amount == Decimal("0.00")

    def test_last_received_cost_is_used(self, service, make_product, receive, test_actor_id):
        product = make_product()
        receive(product.id, 10, "4")
        receive(product.id, 10, "6")
        po = service.create_purchase_order("Acme", [PurchaseLineSpec(product.id, 3)], test_actor_id)
        assert po.lines[0].unit_cost == Decimal("6")
        assert po.total_amount == Decimal("18.00")


class TestApproval:

    def test_approve(self, service, make_product, test_actor_id):
        product = make_product()
        order = service.create_sales_order("Cafe", [SalesLineSpec(product.id, 1)], test_actor_id)
        approved = service.approve_order(order.id, test_actor_id)
        assert approved.status == "pending_shipment"
        assert approved.approved_at is not None
        assert service.get_product(product.id).stock == 0

    def test_approve_twice(self, service, make_product, test_actor_id):
        product = make_product()
        order = service.create_sales_order("Cafe", [SalesLineSpec(product.id, 1)], test_actor_id)
        service.approve_order(order.id, test_actor_id)
        with pytest.raises(OrderNotPendingApprovalError):
            service.approve_order(order.id, test_actor_id)

    def test_approve_unknown(self, service, test_actor_id):
        with pytest.raises(OrderNotFoundError):
            service.approve_order(uuid4(), test_actor_id)


class TestRemarks:

    def test_save_and_clear(self, service, make_product, test_actor_id):
        product = make_product()
        order = service.create_sales_order("Cafe", [SalesLineSpec(product.id, 1)], test_actor_id)
        assert service.save_remarks(order.id, "leave at door", test_actor_id).remarks == "leave at door"
        assert service.save_remarks(order.id, None, test_actor_id).remarks is None
        assert service.get_sales_order(order.id).remarks is None
