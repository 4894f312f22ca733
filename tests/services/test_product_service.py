"""
Product catalogue maintenance.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from threading import Barrier
from uuid import uuid4

import pytest

from inventory_config.schema import InventorySettings
from inventory_kernel.exceptions import (
    DuplicateSkuError,
    InvalidCostError,
    ProductNotFoundError,
)
from inventory_services.order_management import OrderManagementService


class TestCreateProduct:

    def test_new_product_has_empty_position(self, service, test_actor_id):
        product = service.create_product(
            "MUG-01", "Mug", test_actor_id, brand="Kiln", variant="350ml",
            prices={"retail": "14.00", "gold": Decimal("11.00")},
        )
        assert product.stock == 0
        assert product.average_cost == Decimal("0")
        assert product.last_cost is None
        assert product.price_for("retail") == Decimal("14.00")
        assert product.price_for("gold") == Decimal("11.00")
        assert product.price_for("bronze") is None
        assert product.version == 1

    def test_default_low_stock_threshold_from_settings(self, service, test_actor_id):
        product = service.create_product("MUG-02", "Mug", test_actor_id)
        assert product.low_stock_threshold == service.settings.default_low_stock_threshold

    def test_duplicate_sku(self, service, test_actor_id):
        service.create_product("MUG-01", "Mug", test_actor_id)
        with pytest.raises(DuplicateSkuError):
            service.create_product("MUG-01", "Other mug", test_actor_id)

    def test_blank_name(self, service, test_actor_id):
        with pytest.raises(ValueError):
            service.create_product("MUG-01", "  ", test_actor_id)

    def test_negative_price(self, service, test_actor_id):
        with pytest.raises(InvalidCostError):
            service.create_product("MUG-01", "Mug", test_actor_id, prices={"retail": "-1"})

    def test_float_price_rejected(self, service, test_actor_id):
        with pytest.raises(TypeError):
            service.create_product("MUG-01", "Mug", test_actor_id, prices={"retail": 1.5})


class TestUpdateProduct:

    def test_update_descriptive_fields(self, service, make_product, test_actor_id):
        product = make_product()
        updated = service.update_product(
            product.id, test_actor_id, name="Renamed", prices={"silver": "9.99"}
        )
        assert updated.name == "Renamed"
        assert dict(updated.prices) == {"silver": Decimal("9.99")}
        assert updated.version == product.version + 1

    def test_stock_not_editable(self, service, make_product, test_actor_id):
        product = make_product()
        with pytest.raises(ValueError, match="not editable"):
            service.update_product(product.id, test_actor_id, stock=100)
        assert service.get_product(product.id).stock == 0

    def test_average_cost_not_editable(self, service, make_product, test_actor_id):
        product = make_product()
        with pytest.raises(ValueError):
            service.update_product(product.id, test_actor_id, average_cost=Decimal("5"))

    def test_unknown_product(self, service, test_actor_id):
        with pytest.raises(ProductNotFoundError):
            service.update_product(uuid4(), test_actor_id, name="x")


@pytest.mark.slow_locks
class TestConcurrentCreate:

    def test_racing_duplicate_skus_report_duplicate(
        self, session_factory, deterministic_clock, database_url, test_actor_id
    ):
        service = OrderManagementService(
            session_factory,
            clock=deterministic_clock,
            settings=InventorySettings(
                database_url=database_url, max_commit_attempts=25, retry_backoff_seconds=0.01,
            ),
        )
        barrier = Barrier(4)

        def do_create(n):
            barrier.wait()
            try:
                service.create_product("DUP", f"Racer {n}", test_actor_id)
                return "created"
            except DuplicateSkuError:
                return "duplicate"

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = sorted(pool.map(do_create, range(4), timeout=60))

        assert outcomes == ["created", "duplicate", "duplicate", "duplicate"]
        assert [p.sku for p in service.list_products()] == ["DUP"]
