"""Read-only selectors returning frozen DTOs."""

from inventory_kernel.selectors.ledger_selector import LedgerSelector
from inventory_kernel.selectors.order_selector import OrderSelector
from inventory_kernel.selectors.party_selector import PartySelector
from inventory_kernel.selectors.product_selector import ProductSelector
from inventory_kernel.selectors.report_selector import ReportSelector

__all__ = ["LedgerSelector", "OrderSelector", "PartySelector", "ProductSelector", "ReportSelector"]
