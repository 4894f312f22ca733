"""
ProductService -- catalogue maintenance.

Creates products with an empty stock position and edits descriptive fields.
Stock, average cost and last cost are owned by the movement coordinator and
cannot be set here.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from inventory_kernel.db.types import to_decimal
from inventory_kernel.domain.dtos import PriceTier, ProductInfo
from inventory_kernel.exceptions import DuplicateSkuError, InvalidCostError, ProductNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.product import ProductModel
from inventory_kernel.services.base import BaseService

logger = get_logger("services.product_service")

_EDITABLE_FIELDS = frozenset({
    "name", "brand", "variant", "description", "low_stock_threshold", "prices",
})


def _normalize_prices(prices: Mapping[str, Decimal | int | str] | None) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for tier, amount in (prices or {}).items():
        tier_key = PriceTier(tier).value
        value = to_decimal(amount)
        if value < 0:
            raise InvalidCostError(value)
        normalized[tier_key] = str(value)
    return normalized


class ProductService(BaseService):

    def create_product(
        self,
        sku: str,
        name: str,
        actor_id: UUID,
        brand: str | None = None,
        variant: str | None = None,
        description: str | None = None,
        low_stock_threshold: int = 0,
        prices: Mapping[str, Decimal | int | str] | None = None,
    ) -> ProductInfo:
        """
        Register a product with stock 0 and average cost 0.

        Raises:
            DuplicateSkuError: If the SKU is already registered.
            ValueError: On a blank SKU/name or negative threshold.
            InvalidCostError: On a negative tier price.
        """
        sku = (sku or "").strip()
        name = (name or "").strip()
        if not sku or not name:
            raise ValueError("Product SKU and name are required")
        if low_stock_threshold < 0:
            raise ValueError(f"low_stock_threshold must be >= 0, got {low_stock_threshold}")

        existing = self.session.scalars(
            select(ProductModel.id).where(ProductModel.sku == sku)
        ).first()
        if existing is not None:
            raise DuplicateSkuError(sku)

        product = ProductModel(
            sku=sku,
            name=name,
            brand=brand,
            variant=variant,
            description=description,
            stock=0,
            average_cost=Decimal("0"),
            last_cost=None,
            low_stock_threshold=low_stock_threshold,
            prices=_normalize_prices(prices),
            created_by_id=actor_id,
        )
        self.session.add(product)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # A concurrent create committed the same SKU after our check
            logger.warning("concurrent_sku_conflict", extra={"sku": sku})
            raise DuplicateSkuError(sku) from exc

        logger.info("product_created", extra={
            "product_id": str(product.id),
            "sku": sku,
        })
        return ProductInfo.from_model(product)

    def update_product(self, product_id: UUID, actor_id: UUID, **changes) -> ProductInfo:
        """
        Edit descriptive fields (name, brand, variant, description,
        low_stock_threshold, prices).

        Raises:
            ProductNotFoundError: Unknown product.
            ValueError: If a non-editable field (e.g. stock) is passed.
        """
        illegal = set(changes) - _EDITABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not editable here: {sorted(illegal)}")

        product = self.session.get(ProductModel, product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))

        if "prices" in changes:
            changes["prices"] = _normalize_prices(changes["prices"])
        if changes.get("low_stock_threshold", 0) < 0:
            raise ValueError("low_stock_threshold must be >= 0")

        for field_name, value in changes.items():
            setattr(product, field_name, value)
        product.updated_by_id = actor_id
        self.session.flush()

        logger.info("product_updated", extra={
            "product_id": str(product_id),
            "fields": sorted(changes),
        })
        return ProductInfo.from_model(product)
