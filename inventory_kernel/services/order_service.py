"""
OrderService -- order entry and the non-stock order transitions.

Responsibility:
    Creates purchase orders and sales orders (numbering, product-name
    snapshot, default tier pricing, totals), approves sales orders and
    records remarks.  Stock never moves here: receipt and shipment belong
    to the MovementCoordinator.

Invariants enforced:
    - Orders are non-empty and have at most ``max_order_lines`` lines.
    - Every line references an existing product at entry time.
    - An order entered against a registered party references an active
      party of the right type; the party name is snapshotted on the order.
    - ``total_amount`` is the rounded sum of line amounts.
    - Approval only fires from ``pending_approval`` (order lifecycle).
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID, uuid4

from inventory_kernel.db.types import (
    AMOUNT_DECIMAL_PLACES,
    DEFAULT_ROUNDING,
    round_amount,
    validate_currency,
)
from inventory_kernel.domain.dtos import (
    PartyType,
    PriceTier,
    PurchaseLineSpec,
    PurchaseOrderInfo,
    SalesLineSpec,
    SalesOrderInfo,
)
from inventory_kernel.domain.order_lifecycle import (
    PURCHASE_ORDER_WORKFLOW,
    SALES_ORDER_WORKFLOW,
    OrderAction,
)
from inventory_kernel.exceptions import (
    InvalidOrderError,
    OrderNotFoundError,
    OrderNotPendingApprovalError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.order import (
    PurchaseOrderLineModel,
    PurchaseOrderModel,
    SalesOrderLineModel,
    SalesOrderModel,
)
from inventory_kernel.models.party import PartyModel
from inventory_kernel.models.product import ProductModel
from inventory_kernel.services.base import BaseService
from inventory_kernel.services.party_service import PartyService

logger = get_logger("services.order_service")

DEFAULT_MAX_ORDER_LINES = 200


class OrderService(BaseService):
    """
    Order entry and approval.  Flush-only.

    Args:
        session: Caller-owned session.
        clock: Source of order dates, numbers and approval timestamps.
        currency: ISO 4217 code stamped on new orders.
        max_order_lines: Upper bound on lines per order.
        amount_decimal_places: Rounding of order totals.
        default_price_tier: Tier for walk-in sales orders with no explicit tier.
    """

    def __init__(
        self,
        session,
        clock=None,
        currency: str = "USD",
        max_order_lines: int = DEFAULT_MAX_ORDER_LINES,
        amount_decimal_places: int = AMOUNT_DECIMAL_PLACES,
        rounding: str = DEFAULT_ROUNDING,
        default_price_tier: PriceTier | str = PriceTier.RETAIL,
    ):
        super().__init__(session, clock)
        self._default_price_tier = PriceTier(default_price_tier)
        self._currency = validate_currency(currency)
        self._max_order_lines = max_order_lines
        self._amount_places = amount_decimal_places
        self._rounding = rounding

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_order_number(self, prefix: str) -> str:
        millis = int(self.clock.now_utc().timestamp() * 1000)
        return f"{prefix}-{millis}-{uuid4().hex.upper()}"

    def _check_line_count(self, lines: Sequence) -> None:
        if not lines:
            raise InvalidOrderError("order must have at least one line")
        if len(lines) > self._max_order_lines:
            raise InvalidOrderError(
                f"order has {len(lines)} lines, the limit is {self._max_order_lines}"
            )

    def _require_product(self, product_id: UUID) -> ProductModel:
        product = self.session.get(ProductModel, product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))
        return product

    def _total(self, amounts: Sequence[Decimal]) -> Decimal:
        return round_amount(sum(amounts, Decimal("0")), self._amount_places, self._rounding)

    def _resolve_party(
        self, party: UUID | str, party_type: PartyType
    ) -> tuple[PartyModel | None, str]:
        """A registered party by id, or a walk-in party by name."""
        if isinstance(party, UUID):
            model = PartyService(self.session, self.clock).require_for_order(party, party_type)
            return model, model.name
        name = (party or "").strip()
        if not name:
            raise InvalidOrderError(f"{party_type.value} name is required")
        return None, name

    # ------------------------------------------------------------------
    # Purchase orders
    # ------------------------------------------------------------------

    def create_purchase_order(
        self,
        supplier: UUID | str,
        lines: Sequence[PurchaseLineSpec],
        actor_id: UUID,
        remarks: str | None = None,
    ) -> PurchaseOrderInfo:
        """
        Create a purchase order in status ``pending``.

        ``supplier`` is a registered supplier's id or a free-text name.
        Lines without a unit cost take the product's last received cost.

        Raises:
            InvalidOrderError: Empty order, too many lines or blank supplier.
            PartyNotFoundError / PartyInactiveError: Unusable supplier id.
            ProductNotFoundError: A line references an unknown product.
        """
        party, supplier_name = self._resolve_party(supplier, PartyType.SUPPLIER)
        self._check_line_count(lines)

        order = PurchaseOrderModel(
            order_number=self._next_order_number("PO"),
            supplier_id=party.id if party is not None else None,
            supplier_name=supplier_name,
            status=PURCHASE_ORDER_WORKFLOW.initial_state,
            order_date=self.clock.now().date(),
            currency=self._currency,
            total_amount=Decimal("0"),
            remarks=remarks,
            created_by_id=actor_id,
        )
        amounts: list[Decimal] = []
        for line_no, spec in enumerate(lines, start=1):
            product = self._require_product(spec.product_id)
            unit_cost = spec.unit_cost
            if unit_cost is None:
                unit_cost = product.last_cost if product.last_cost is not None else Decimal("0")
            amounts.append(unit_cost * spec.quantity)
            order.lines.append(PurchaseOrderLineModel(
                line_no=line_no,
                product_id=product.id,
                product_name=product.name,
                quantity=spec.quantity,
                unit_cost=unit_cost,
            ))
        order.total_amount = self._total(amounts)
        self.session.add(order)
        self.session.flush()

        logger.info("purchase_order_created", extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "line_count": len(lines),
            "total_amount": str(order.total_amount),
        })
        return PurchaseOrderInfo.from_model(order)

    # ------------------------------------------------------------------
    # Sales orders
    # ------------------------------------------------------------------

    def create_sales_order(
        self,
        customer: UUID | str,
        lines: Sequence[SalesLineSpec],
        actor_id: UUID,
        price_tier: PriceTier | str | None = None,
        remarks: str | None = None,
    ) -> SalesOrderInfo:
        """
        Create a sales order in status ``pending_approval``.

        ``customer`` is a registered customer's id or a free-text name.
        The order's tier is ``price_tier`` if given, else the customer's
        tier, else the service default.  Lines without an explicit unit
        price take the product's price for that tier.  Stock is not checked
        here; shipment checks it.

        Raises:
            InvalidOrderError: Empty order, too many lines, blank customer,
                or no price available for the tier.
            PartyNotFoundError / PartyInactiveError: Unusable customer id.
            ProductNotFoundError: A line references an unknown product.
        """
        party, customer_name = self._resolve_party(customer, PartyType.CUSTOMER)
        self._check_line_count(lines)
        tier = PriceTier(
            price_tier
            or (party.price_tier if party is not None else None)
            or self._default_price_tier
        )

        order_number = self._next_order_number("SO")
        order = SalesOrderModel(
            order_number=order_number,
            customer_id=party.id if party is not None else None,
            customer_name=customer_name,
            status=SALES_ORDER_WORKFLOW.initial_state,
            order_date=self.clock.now().date(),
            currency=self._currency,
            price_tier=tier.value,
            total_amount=Decimal("0"),
            remarks=remarks,
            created_by_id=actor_id,
        )
        amounts: list[Decimal] = []
        for line_no, spec in enumerate(lines, start=1):
            product = self._require_product(spec.product_id)
            unit_price = spec.unit_price
            if unit_price is None:
                tier_price = (product.prices or {}).get(tier.value)
                if tier_price is None:
                    raise InvalidOrderError(
                        f"product {product.sku} has no {tier.value} price", order_number
                    )
                unit_price = Decimal(tier_price)
            amounts.append(unit_price * spec.quantity)
            order.lines.append(SalesOrderLineModel(
                line_no=line_no,
                product_id=product.id,
                product_name=product.name,
                quantity=spec.quantity,
                unit_price=unit_price,
                cost_at_sale=None,
            ))
        order.total_amount = self._total(amounts)
        self.session.add(order)
        self.session.flush()

        logger.info("sales_order_created", extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "customer_id": str(order.customer_id) if order.customer_id else None,
            "line_count": len(lines),
            "price_tier": tier.value,
            "total_amount": str(order.total_amount),
        })
        return SalesOrderInfo.from_model(order)

    def approve_sales_order(self, order_id: UUID, actor_id: UUID) -> SalesOrderInfo:
        """
        Move a sales order from ``pending_approval`` to ``pending_shipment``.

        No stock effect.

        Raises:
            OrderNotFoundError: Unknown order.
            OrderNotPendingApprovalError: Order is past approval.
        """
        order = self.session.get(SalesOrderModel, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id), "sales order")

        transition = SALES_ORDER_WORKFLOW.transition_for(order.status, OrderAction.APPROVE.value)
        if transition is None:
            raise OrderNotPendingApprovalError(order.order_number, order.status)

        order.status = transition.to_state
        order.approved_at = self.clock.now()
        order.approved_by_id = actor_id
        order.updated_by_id = actor_id
        self.session.flush()

        logger.info("sales_order_approved", extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
        })
        return SalesOrderInfo.from_model(order)

    def save_remarks(self, order_id: UUID, remarks: str | None, actor_id: UUID) -> SalesOrderInfo:
        """Replace the free-text remarks of a sales order (any status)."""
        order = self.session.get(SalesOrderModel, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id), "sales order")
        order.remarks = remarks
        order.updated_by_id = actor_id
        self.session.flush()
        logger.info("sales_order_remarks_saved", extra={
            "order_number": order.order_number,
        })
        return SalesOrderInfo.from_model(order)
