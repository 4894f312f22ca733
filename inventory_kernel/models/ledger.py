"""
Module: inventory_kernel.models.ledger
Responsibility: ORM persistence for the append-only stock ledger
    (inventory_logs) and cost ledger (cost_logs).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: no UPDATE or DELETE through the ORM (db/immutability.py).
    - Every row is written in the same transaction as the product update it
      describes, so the ledgers never disagree with the product table.
    - For each product, the sum of inventory_logs.change equals
      products.stock.
    - cost_logs only holds receipts whose rounded average actually moved.

related_doc carries the order number (denormalized, no foreign key).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, PortableDecimal, UUIDString


class InventoryLogModel(Base):
    """One stock movement of one product."""

    __tablename__ = "inventory_logs"

    __table_args__ = (
        Index("idx_inventory_logs_product_ts", "product_id", "timestamp"),
        Index("idx_inventory_logs_related_doc", "related_doc"),
    )

    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(8), nullable=False)
    # Signed: positive on receipt, negative on shipment
    change: Mapped[int] = mapped_column(Integer, nullable=False)
    new_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    related_doc: Mapped[str] = mapped_column(String(64), nullable=False)
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<InventoryLogModel {self.related_doc} {self.product_name} "
            f"{self.change:+d} -> {self.new_stock}>"
        )


class CostLogModel(Base):
    """A receipt that moved a product's moving-average cost."""

    __tablename__ = "cost_logs"

    __table_args__ = (
        Index("idx_cost_logs_product_ts", "product_id", "timestamp"),
        Index("idx_cost_logs_related_doc", "related_doc"),
    )

    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(8), nullable=False)
    old_avg_cost: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)
    new_avg_cost: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)
    related_doc: Mapped[str] = mapped_column(String(64), nullable=False)
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<CostLogModel {self.related_doc} {self.product_name} "
            f"{self.old_avg_cost} -> {self.new_avg_cost}>"
        )
