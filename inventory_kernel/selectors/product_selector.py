"""
ProductSelector -- read access to the product catalogue and stock positions.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_, select

from inventory_kernel.domain.dtos import ProductInfo
from inventory_kernel.models.product import ProductModel
from inventory_kernel.selectors.base import BaseSelector


class ProductSelector(BaseSelector):
    """Product lookups, low-stock queue and inventory valuation."""

    def get(self, product_id: UUID) -> ProductInfo | None:
        model = self.session.get(ProductModel, product_id)
        return ProductInfo.from_model(model) if model is not None else None

    def get_by_sku(self, sku: str) -> ProductInfo | None:
        model = self.session.scalars(
            select(ProductModel).where(ProductModel.sku == sku)
        ).first()
        return ProductInfo.from_model(model) if model is not None else None

    def list_products(self, search: str | None = None) -> tuple[ProductInfo, ...]:
        """All products ordered by name, optionally filtered on name, SKU or brand."""
        stmt = select(ProductModel)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.sku.ilike(pattern),
                    ProductModel.brand.ilike(pattern),
                )
            )
        stmt = stmt.order_by(ProductModel.name, ProductModel.sku)
        return tuple(ProductInfo.from_model(m) for m in self.session.scalars(stmt))

    def low_stock(self) -> tuple[ProductInfo, ...]:
        """Products at or below their low-stock threshold, lowest stock first."""
        stmt = (
            select(ProductModel)
            .where(ProductModel.stock <= ProductModel.low_stock_threshold)
            .order_by(ProductModel.stock, ProductModel.name)
        )
        return tuple(ProductInfo.from_model(m) for m in self.session.scalars(stmt))

    def inventory_value(self) -> Decimal:
        """
        Total value of stock on hand: sum of stock * average_cost.

        Summed in Python so the result stays exact on backends that store
        decimals as text.
        """
        rows = self.session.execute(
            select(ProductModel.stock, ProductModel.average_cost)
        ).all()
        return sum((avg * stock for stock, avg in rows), Decimal("0"))
