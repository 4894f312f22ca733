"""
Module: inventory_kernel.models.order
Responsibility: ORM persistence for purchase orders, sales orders and their
    ordered line items.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - order_number is unique per order kind.
    - Lines are loaded in line_no order; movements apply them in that order.
    - status only moves forward along the order lifecycle; version_id makes
      two concurrent transitions of the same order conflict at commit.
    - A sales line with cost_at_sale stamped is immutable (db/immutability.py).

Orders point at a registered party when one was chosen (supplier_id /
customer_id) and always carry the party name as entered.  Walk-in orders
have no party id.  Lines reference products by id without a foreign key.
The product name is snapshotted at order entry; a line whose product has
gone missing is reported by the movement coordinator as
ProductNotFoundError.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base, PortableDecimal, TrackedBase, UUIDString


class PurchaseOrderModel(TrackedBase):
    """Supplier purchase order. Receiving it brings its lines into stock."""

    __tablename__ = "purchase_orders"

    __table_args__ = (
        Index("idx_po_order_number", "order_number", unique=True),
        Index("idx_po_status", "status"),
    )

    order_number: Mapped[str] = mapped_column(String(64), nullable=False)
    supplier_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("parties.id"), nullable=True
    )
    supplier_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)
    remarks: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    received_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    received_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    lines: Mapped[list["PurchaseOrderLineModel"]] = relationship(
        back_populates="order",
        order_by="PurchaseOrderLineModel.line_no",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.order_number} {self.status}>"


class PurchaseOrderLineModel(Base):
    __tablename__ = "purchase_order_lines"

    __table_args__ = (
        UniqueConstraint("order_id", "line_no", name="uq_po_line_no"),
        CheckConstraint("quantity > 0", name="ck_po_line_quantity_positive"),
        Index("idx_po_line_product", "product_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("purchase_orders.id"), nullable=False
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)

    order: Mapped[PurchaseOrderModel] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<PurchaseOrderLineModel #{self.line_no} {self.product_name} x{self.quantity}>"


class SalesOrderModel(TrackedBase):
    """Customer sales order. Approval gates shipment; shipment draws stock."""

    __tablename__ = "sales_orders"

    __table_args__ = (
        Index("idx_so_order_number", "order_number", unique=True),
        Index("idx_so_status", "status"),
        Index("idx_so_order_date", "order_date"),
        Index("idx_so_customer", "customer_id"),
    )

    order_number: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("parties.id"), nullable=True
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    price_tier: Mapped[str] = mapped_column(String(16), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)
    remarks: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    shipped_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    lines: Mapped[list["SalesOrderLineModel"]] = relationship(
        back_populates="order",
        order_by="SalesOrderLineModel.line_no",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<SalesOrderModel {self.order_number} {self.status}>"


class SalesOrderLineModel(Base):
    __tablename__ = "sales_order_lines"

    __table_args__ = (
        UniqueConstraint("order_id", "line_no", name="uq_so_line_no"),
        CheckConstraint("quantity > 0", name="ck_so_line_quantity_positive"),
        Index("idx_so_line_product", "product_id"),
    )

    order_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("sales_orders.id"), nullable=False
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(PortableDecimal(), nullable=False)
    # Average cost at the moment of shipment; None until shipped
    cost_at_sale: Mapped[Decimal | None] = mapped_column(PortableDecimal(), nullable=True)

    order: Mapped[SalesOrderModel] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<SalesOrderLineModel #{self.line_no} {self.product_name} x{self.quantity}>"
