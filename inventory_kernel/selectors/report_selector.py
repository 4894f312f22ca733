"""
ReportSelector -- sales performance figures and customer statements.

Computation only: revenue, cost of goods sold (from the cost stamped on each
line at shipment), gross profit and margin over completed sales orders whose
order date falls in an inclusive date range, and the completed orders of one
customer over such a range.  Formatting is left to callers.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.db.types import AMOUNT_DECIMAL_PLACES, round_amount
from inventory_kernel.domain.dtos import (
    CustomerStatement,
    PartyType,
    ProductSalesSummary,
    SalesOrderInfo,
    SalesPerformance,
)
from inventory_kernel.domain.order_lifecycle import SalesOrderStatus
from inventory_kernel.exceptions import PartyNotFoundError
from inventory_kernel.models.order import SalesOrderModel
from inventory_kernel.models.party import PartyModel
from inventory_kernel.selectors.base import BaseSelector

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class ReportSelector(BaseSelector):

    def sales_performance(
        self,
        start_date: date,
        end_date: date,
        decimal_places: int = AMOUNT_DECIMAL_PLACES,
    ) -> SalesPerformance:
        """
        Aggregate completed sales orders with ``start_date <= order_date <= end_date``.

        Raises:
            ValueError: If start_date is after end_date.
        """
        if start_date > end_date:
            raise ValueError(f"start_date {start_date} is after end_date {end_date}")

        orders = self.session.scalars(
            select(SalesOrderModel)
            .where(SalesOrderModel.status == SalesOrderStatus.COMPLETED.value)
            .where(SalesOrderModel.order_date >= start_date)
            .where(SalesOrderModel.order_date <= end_date)
        ).all()

        revenue = _ZERO
        cogs = _ZERO
        per_product: dict[UUID, dict] = defaultdict(
            lambda: {"name": "", "quantity": 0, "revenue": _ZERO, "cogs": _ZERO}
        )
        for order in orders:
            for line in order.lines:
                line_revenue = line.unit_price * line.quantity
                line_cogs = (line.cost_at_sale or _ZERO) * line.quantity
                revenue += line_revenue
                cogs += line_cogs
                bucket = per_product[line.product_id]
                bucket["name"] = line.product_name
                bucket["quantity"] += line.quantity
                bucket["revenue"] += line_revenue
                bucket["cogs"] += line_cogs

        gross = revenue - cogs
        margin = (gross / revenue * _HUNDRED) if revenue else _ZERO

        summaries = sorted(
            (
                ProductSalesSummary(
                    product_id=pid,
                    product_name=b["name"],
                    quantity=b["quantity"],
                    revenue=round_amount(b["revenue"], decimal_places),
                    cost_of_goods_sold=round_amount(b["cogs"], decimal_places),
                )
                for pid, b in per_product.items()
            ),
            key=lambda s: (-s.revenue, s.product_name),
        )

        return SalesPerformance(
            start_date=start_date,
            end_date=end_date,
            order_count=len(orders),
            revenue=round_amount(revenue, decimal_places),
            cost_of_goods_sold=round_amount(cogs, decimal_places),
            gross_profit=round_amount(gross, decimal_places),
            margin_percent=round_amount(margin, 2),
            by_product=tuple(summaries),
        )

    def customer_statement(
        self,
        customer: UUID | str,
        start_date: date,
        end_date: date,
        decimal_places: int = AMOUNT_DECIMAL_PLACES,
    ) -> CustomerStatement:
        """
        Completed sales orders of one customer, oldest first.

        ``customer`` is a registered customer's id (matched on the order's
        customer reference) or a name (matched on the name recorded on the
        order, which also covers walk-in orders).

        Raises:
            ValueError: If start_date is after end_date.
            PartyNotFoundError: Unknown customer id.
        """
        if start_date > end_date:
            raise ValueError(f"start_date {start_date} is after end_date {end_date}")

        stmt = (
            select(SalesOrderModel)
            .where(SalesOrderModel.status == SalesOrderStatus.COMPLETED.value)
            .where(SalesOrderModel.order_date >= start_date)
            .where(SalesOrderModel.order_date <= end_date)
        )
        if isinstance(customer, UUID):
            party = self.session.get(PartyModel, customer)
            if party is None or party.party_type != PartyType.CUSTOMER.value:
                raise PartyNotFoundError(str(customer), PartyType.CUSTOMER.value)
            customer_id, customer_name = party.id, party.name
            stmt = stmt.where(SalesOrderModel.customer_id == customer_id)
        else:
            customer_id, customer_name = None, customer.strip()
            stmt = stmt.where(SalesOrderModel.customer_name == customer_name)

        orders = self.session.scalars(
            stmt.order_by(SalesOrderModel.order_date, SalesOrderModel.order_number)
        ).all()
        total = sum((order.total_amount for order in orders), _ZERO)

        return CustomerStatement(
            customer_name=customer_name,
            start_date=start_date,
            end_date=end_date,
            orders=tuple(SalesOrderInfo.from_model(order) for order in orders),
            total_amount=round_amount(total, decimal_places),
            customer_id=customer_id,
        )
