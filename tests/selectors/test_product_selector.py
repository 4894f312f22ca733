"""
Product reads: search, low-stock report, inventory value.
"""

from decimal import Decimal

from inventory_kernel.selectors import ProductSelector


class TestProductSearch:

    def test_search_matches_name_sku_and_brand(self, service, test_actor_id):
        service.create_product("TEA-1", "Green Tea", test_actor_id, brand="Leafworks")
        service.create_product("MUG-1", "Mug", test_actor_id, brand="Kilnhouse")

        assert [p.sku for p in service.list_products("green")] == ["TEA-1"]
        assert [p.sku for p in service.list_products("mug-")] == ["MUG-1"]
        assert [p.sku for p in service.list_products("kiln")] == ["MUG-1"]
        assert len(service.list_products()) == 2

    def test_get_by_sku(self, session, make_product):
        product = make_product(sku="X-9")
        assert ProductSelector(session).get_by_sku("X-9").id == product.id
        assert ProductSelector(session).get_by_sku("nope") is None


class TestLowStock:

    def test_at_or_below_threshold(self, service, make_product, receive):
        empty = make_product(low_stock_threshold=0)
        at_threshold = make_product(low_stock_threshold=5)
        healthy = make_product(low_stock_threshold=5)
        receive(at_threshold.id, 5, "1")
        receive(healthy.id, 6, "1")

        low = service.low_stock_products()
        assert [p.id for p in low] == [empty.id, at_threshold.id]
        assert all(p.is_low_stock for p in low)


class TestInventoryValue:

    def test_sum_of_stock_times_average(self, service, make_product, receive):
        a, b = make_product(), make_product()
        receive(a.id, 10, "100")
        receive(a.id, 5, "130")
        receive(b.id, 3, "0.3333")

        assert service.inventory_value() == Decimal("1650.9999")

    def test_empty_catalogue(self, service):
        assert service.inventory_value() == Decimal("0")
