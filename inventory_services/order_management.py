"""
OrderManagementService -- the public surface of the inventory system.

Responsibility:
    Each public method is one atomic operation.  It opens a fresh session
    through TransactionRunner, delegates to the flush-only kernel services
    and selectors, commits, and returns frozen DTOs.  Concurrency conflicts
    are retried transparently up to ``max_commit_attempts``.

Architecture position:
    Services -- stateful orchestration over inventory_kernel and
    inventory_engines.  This is the only layer that wires settings, clock
    and engine together.

Invariants enforced:
    - Each method owns its transaction boundary; callers never see a
      partially applied order.
    - All timestamps come from one MonotonicClock per service instance.
    - Every call runs inside a LogContext carrying actor, operation and a
      fresh correlation id.

Usage:
    service = OrderManagementService(get_session_factory(), settings=settings)
    po = service.create_purchase_order("Acme", [PurchaseLineSpec(pid, 10, Decimal("100"))], actor)
    service.receive_order(po.id, actor)
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal
from typing import Mapping
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from inventory_config.schema import InventorySettings
from inventory_engines.costing import MovingAverageCostEngine
from inventory_kernel.domain.clock import Clock, MonotonicClock, SystemClock
from inventory_kernel.domain.dtos import (
    CostLogEntry,
    CustomerStatement,
    InventoryLogEntry,
    MovementResult,
    PartyInfo,
    PartyType,
    PriceTier,
    ProductInfo,
    PurchaseLineSpec,
    PurchaseOrderInfo,
    SalesLineSpec,
    SalesOrderInfo,
    SalesPerformance,
    StockReconciliation,
)
from inventory_kernel.exceptions import (
    OrderNotFoundError,
    PartyNotFoundError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.selectors.ledger_selector import LedgerSelector
from inventory_kernel.selectors.order_selector import OrderSelector
from inventory_kernel.selectors.party_selector import PartySelector
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.selectors.report_selector import ReportSelector
from inventory_kernel.services.movement_coordinator import MovementCoordinator
from inventory_kernel.services.order_service import OrderService
from inventory_kernel.services.party_service import PartyService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.transaction_runner import TransactionRunner

logger = get_logger("services.order_management")


class OrderManagementService:
    """
    Facade over products, orders, movements and read models.

    Args:
        session_factory: Returns a new Session per attempt.
        clock: Time source; wrapped in a MonotonicClock unless it already is one.
        settings: Validated settings (defaults when omitted).
        sleep: Backoff sleep, injectable for tests.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        settings: InventorySettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._session_factory = session_factory
        self._settings = settings or InventorySettings()
        clock = clock or SystemClock()
        self._clock = clock if isinstance(clock, MonotonicClock) else MonotonicClock(clock)
        self._cost_engine = MovingAverageCostEngine(
            decimal_places=self._settings.cost_decimal_places,
            rounding=self._settings.cost_rounding,
        )
        self._runner = TransactionRunner(
            session_factory,
            max_attempts=self._settings.max_commit_attempts,
            backoff_seconds=self._settings.retry_backoff_seconds,
            sleep=sleep,
        )

    @property
    def settings(self) -> InventorySettings:
        return self._settings

    @property
    def clock(self) -> MonotonicClock:
        return self._clock

    @property
    def cost_engine(self) -> MovingAverageCostEngine:
        return self._cost_engine

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _order_service(self, session: Session) -> OrderService:
        return OrderService(
            session,
            self._clock,
            currency=self._settings.currency,
            max_order_lines=self._settings.max_order_lines,
            amount_decimal_places=self._settings.amount_decimal_places,
            default_price_tier=self._settings.default_price_tier,
        )

    def _coordinator(self, session: Session) -> MovementCoordinator:
        return MovementCoordinator(session, self._clock, self._cost_engine)

    def _read(self, query: Callable[[Session], object]):
        session = self._session_factory()
        try:
            return query(session)
        finally:
            session.close()

    @staticmethod
    def _context(operation: str, actor_id: UUID):
        return LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor_id),
            operation=operation,
        )

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def create_product(
        self,
        sku: str,
        name: str,
        actor_id: UUID,
        brand: str | None = None,
        variant: str | None = None,
        description: str | None = None,
        low_stock_threshold: int | None = None,
        prices: Mapping[str, Decimal | int | str] | None = None,
    ) -> ProductInfo:
        """Register a product with stock 0 and average cost 0."""
        threshold = (
            self._settings.default_low_stock_threshold
            if low_stock_threshold is None else low_stock_threshold
        )
        with self._context("create_product", actor_id):
            return self._runner.run(
                "create_product", sku,
                lambda s: ProductService(s, self._clock).create_product(
                    sku, name, actor_id,
                    brand=brand, variant=variant, description=description,
                    low_stock_threshold=threshold, prices=prices,
                ),
            ).value

    def update_product(self, product_id: UUID, actor_id: UUID, **changes) -> ProductInfo:
        """Edit descriptive product fields; stock and cost are not editable."""
        with self._context("update_product", actor_id):
            return self._runner.run(
                "update_product", product_id,
                lambda s: ProductService(s, self._clock).update_product(
                    product_id, actor_id, **changes
                ),
            ).value

    # ------------------------------------------------------------------
    # Customers and suppliers
    # ------------------------------------------------------------------

    def create_customer(
        self,
        party_code: str,
        name: str,
        actor_id: UUID,
        price_tier: PriceTier | str | None = None,
    ) -> PartyInfo:
        """Register a customer; the tier defaults to retail."""
        with self._context("create_customer", actor_id):
            return self._runner.run(
                "create_customer", party_code,
                lambda s: PartyService(s, self._clock).create_party(
                    party_code, PartyType.CUSTOMER, name, actor_id, price_tier=price_tier
                ),
            ).value

    def create_supplier(self, party_code: str, name: str, actor_id: UUID) -> PartyInfo:
        with self._context("create_supplier", actor_id):
            return self._runner.run(
                "create_supplier", party_code,
                lambda s: PartyService(s, self._clock).create_party(
                    party_code, PartyType.SUPPLIER, name, actor_id
                ),
            ).value

    def update_party(self, party_id: UUID, actor_id: UUID, **changes) -> PartyInfo:
        """Edit name, price_tier or is_active of a customer or supplier."""
        with self._context("update_party", actor_id):
            return self._runner.run(
                "update_party", party_id,
                lambda s: PartyService(s, self._clock).update_party(
                    party_id, actor_id, **changes
                ),
            ).value

    def deactivate_party(self, party_id: UUID, actor_id: UUID) -> PartyInfo:
        return self.update_party(party_id, actor_id, is_active=False)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create_purchase_order(
        self,
        supplier: UUID | str,
        lines: Sequence[PurchaseLineSpec],
        actor_id: UUID,
        remarks: str | None = None,
    ) -> PurchaseOrderInfo:
        """Enter a purchase order against a supplier id or a free-text supplier name."""
        with self._context("create_purchase_order", actor_id):
            return self._runner.run(
                "create_purchase_order", supplier,
                lambda s: self._order_service(s).create_purchase_order(
                    supplier, lines, actor_id, remarks=remarks
                ),
            ).value

    def create_sales_order(
        self,
        customer: UUID | str,
        lines: Sequence[SalesLineSpec],
        actor_id: UUID,
        price_tier: PriceTier | str | None = None,
        remarks: str | None = None,
    ) -> SalesOrderInfo:
        """
        Enter a sales order against a customer id or a free-text customer name.

        Without ``price_tier`` a registered customer's own tier is used, and
        walk-in orders use ``settings.default_price_tier``.
        """
        with self._context("create_sales_order", actor_id):
            return self._runner.run(
                "create_sales_order", customer,
                lambda s: self._order_service(s).create_sales_order(
                    customer, lines, actor_id, price_tier=price_tier, remarks=remarks
                ),
            ).value

    def approve_order(self, order_id: UUID, actor_id: UUID) -> SalesOrderInfo:
        """
        Approve a sales order (pending_approval -> pending_shipment).

        Raises:
            OrderNotFoundError, OrderNotPendingApprovalError.
        """
        with self._context("approve_order", actor_id):
            return self._runner.run(
                "approve_order", order_id,
                lambda s: self._order_service(s).approve_sales_order(order_id, actor_id),
            ).value

    def save_remarks(self, order_id: UUID, remarks: str | None, actor_id: UUID) -> SalesOrderInfo:
        with self._context("save_remarks", actor_id):
            return self._runner.run(
                "save_remarks", order_id,
                lambda s: self._order_service(s).save_remarks(order_id, remarks, actor_id),
            ).value

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    def receive_order(self, order_id: UUID, actor_id: UUID) -> MovementResult:
        """
        Receive a pending purchase order into stock, atomically.

        Raises:
            OrderNotFoundError, OrderNotReceivableError, ProductNotFoundError,
            InvalidQuantityError, ConcurrencyConflictError.
        """
        with self._context("receive_order", actor_id):
            outcome = self._runner.run(
                "receive_order", order_id,
                lambda s: self._coordinator(s).receive(order_id, actor_id),
            )
            return self._committed(outcome.value, outcome.attempts)

    def ship_order(self, order_id: UUID, actor_id: UUID) -> MovementResult:
        """
        Ship an approved sales order out of stock, atomically.

        Raises:
            OrderNotFoundError, OrderNotShippableError, ProductNotFoundError,
            InsufficientStockError, ConcurrencyConflictError.
        """
        with self._context("ship_order", actor_id):
            outcome = self._runner.run(
                "ship_order", order_id,
                lambda s: self._coordinator(s).ship(order_id, actor_id),
            )
            return self._committed(outcome.value, outcome.attempts)

    @staticmethod
    def _committed(result: MovementResult, attempts: int) -> MovementResult:
        result = dataclasses.replace(result, attempts=attempts)
        logger.info("movement_committed", extra={
            "order_number": result.order_number,
            "movement_type": result.movement_type.value,
            "status": result.status,
            "line_count": len(result.lines),
            "attempts": attempts,
        })
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_product(self, product_id: UUID) -> ProductInfo:
        product = self._read(lambda s: ProductSelector(s).get(product_id))
        if product is None:
            raise ProductNotFoundError(str(product_id))
        return product

    def list_products(self, search: str | None = None) -> tuple[ProductInfo, ...]:
        return self._read(lambda s: ProductSelector(s).list_products(search))

    def low_stock_products(self) -> tuple[ProductInfo, ...]:
        return self._read(lambda s: ProductSelector(s).low_stock())

    def inventory_value(self) -> Decimal:
        return self._read(lambda s: ProductSelector(s).inventory_value())

    def get_purchase_order(self, order_id: UUID) -> PurchaseOrderInfo:
        order = self._read(lambda s: OrderSelector(s).get_purchase_order(order_id))
        if order is None:
            raise OrderNotFoundError(str(order_id), "purchase order")
        return order

    def get_sales_order(self, order_id: UUID) -> SalesOrderInfo:
        order = self._read(lambda s: OrderSelector(s).get_sales_order(order_id))
        if order is None:
            raise OrderNotFoundError(str(order_id), "sales order")
        return order

    def find_order(self, order_number: str) -> PurchaseOrderInfo | SalesOrderInfo | None:
        return self._read(lambda s: OrderSelector(s).find_by_number(order_number))

    def purchase_orders(self, status: str | None = None) -> tuple[PurchaseOrderInfo, ...]:
        """Purchase orders, newest first, optionally one status only."""
        return self._read(lambda s: OrderSelector(s).purchase_orders(status))

    def sales_orders(self, status: str | None = None) -> tuple[SalesOrderInfo, ...]:
        """Sales orders, newest first; ``pending_approval`` is the approval queue."""
        return self._read(lambda s: OrderSelector(s).sales_orders(status))

    def inventory_log(self, product_id: UUID, limit: int | None = None) -> tuple[InventoryLogEntry, ...]:
        return self._read(lambda s: LedgerSelector(s).inventory_log(product_id, limit))

    def cost_log(self, product_id: UUID, limit: int | None = None) -> tuple[CostLogEntry, ...]:
        return self._read(lambda s: LedgerSelector(s).cost_log(product_id, limit))

    def reconcile_stock(self, product_id: UUID) -> StockReconciliation:
        return self._read(lambda s: LedgerSelector(s).reconcile_stock(product_id))

    def sales_performance(self, start_date: date, end_date: date) -> SalesPerformance:
        return self._read(
            lambda s: ReportSelector(s).sales_performance(
                start_date, end_date, self._settings.amount_decimal_places
            )
        )

    def customer_statement(
        self, customer: UUID | str, start_date: date, end_date: date
    ) -> CustomerStatement:
        """Completed orders of one customer (id or recorded name) in a date range."""
        return self._read(
            lambda s: ReportSelector(s).customer_statement(
                customer, start_date, end_date, self._settings.amount_decimal_places
            )
        )

    def get_party(self, party_id: UUID) -> PartyInfo:
        party = self._read(lambda s: PartySelector(s).get(party_id))
        if party is None:
            raise PartyNotFoundError(str(party_id))
        return party

    def customers(self, search: str | None = None, active_only: bool = True) -> tuple[PartyInfo, ...]:
        return self._read(
            lambda s: PartySelector(s).list_parties(PartyType.CUSTOMER, active_only, search)
        )

    def suppliers(self, search: str | None = None, active_only: bool = True) -> tuple[PartyInfo, ...]:
        return self._read(
            lambda s: PartySelector(s).list_parties(PartyType.SUPPLIER, active_only, search)
        )
