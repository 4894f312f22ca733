"""
Module: inventory_kernel.models.product
Responsibility: ORM persistence for the product catalogue and its mutable
    stock position (on-hand quantity and moving-average unit cost).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - stock >= 0 at every committed state (CHECK constraint backs up the
      costing engine, which never lets a shipment go below zero).
    - average_cost >= 0, rounded by the costing engine before it lands here.
    - version_id is a compare-and-commit counter: every UPDATE is issued as
      ``... WHERE id = :id AND version_id = :seen`` and a concurrent commit
      makes the flush fail with StaleDataError.
    - Only the movement coordinator writes stock / average_cost / last_cost.
"""

from decimal import Decimal

from sqlalchemy import JSON, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import PortableDecimal, TrackedBase


class ProductModel(TrackedBase):
    """
    A stocked product.

    ``prices`` maps a price tier (retail, bronze, silver, gold) to a decimal
    string.  Tier prices feed sales-order entry only; the costing core never
    reads or writes them.
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        Index("idx_products_sku", "sku", unique=True),
        Index("idx_products_name", "name"),
    )

    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(255), nullable=True)
    variant: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_cost: Mapped[Decimal] = mapped_column(
        PortableDecimal(), nullable=False, default=Decimal("0")
    )
    # Unit cost of the most recent receipt
    last_cost: Mapped[Decimal | None] = mapped_column(PortableDecimal(), nullable=True)

    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prices: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<ProductModel {self.sku} stock={self.stock} "
            f"avg={self.average_cost} v{self.version_id}>"
        )
