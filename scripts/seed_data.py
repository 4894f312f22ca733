#!/usr/bin/env python3
"""
Seed the database with a small catalogue and a few orders.

Drops all tables, recreates them, registers five products, a supplier and
a customer, receives two purchase orders, then approves and ships one sales order so that every
ledger (stock, cost, cost at sale) has rows to look at.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config site.yaml
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

PRODUCTS = [
    # sku, name, brand, retail price
    ("TEA-GRN-100", "Green Tea 100g", "Leafworks", Decimal("8.50")),
    ("TEA-BLK-100", "Black Tea 100g", "Leafworks", Decimal("7.90")),
    ("MUG-CER-350", "Ceramic Mug 350ml", "Kilnhouse", Decimal("14.00")),
    ("KET-STL-1L", "Steel Kettle 1L", "Kilnhouse", Decimal("39.00")),
    ("FLT-PAP-100", "Paper Filters x100", "Leafworks", Decimal("3.20")),
]


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the inventory database")
    parser.add_argument("--config", help="Site YAML layered over the defaults")
    args = parser.parse_args()

    logging.disable(logging.INFO)

    from inventory_config import get_active_config
    from inventory_kernel.db.engine import create_tables, drop_tables
    from inventory_kernel.domain.dtos import PurchaseLineSpec, SalesLineSpec
    from inventory_kernel.exceptions import InventoryKernelError
    from inventory_services.bootstrap import bootstrap

    settings = get_active_config(args.config)
    actor = uuid4()

    print()
    print(f"  [1/5] Connecting to {settings.database_url} ...")
    try:
        service = bootstrap(settings, create_schema=False)
        drop_tables()
        create_tables()
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    print(f"  [2/5] Registering {len(PRODUCTS)} products...")
    products = {}
    for sku, name, brand, price in PRODUCTS:
        products[sku] = service.create_product(
            sku, name, actor, brand=brand, prices={"retail": price},
        )

    print("  [3/5] Registering a supplier and a customer...")
    supplier = service.create_supplier("S-HARBOUR", "Harbour Imports", actor)
    cafe = service.create_customer("C-CORNER", "Corner Cafe", actor)

    print("  [4/5] Receiving purchase orders...")
    try:
        first = service.create_purchase_order(supplier.id, [
            PurchaseLineSpec(products["TEA-GRN-100"].id, 40, Decimal("3.10")),
            PurchaseLineSpec(products["TEA-BLK-100"].id, 60, Decimal("2.75")),
            PurchaseLineSpec(products["MUG-CER-350"].id, 24, Decimal("5.40")),
        ], actor)
        service.receive_order(first.id, actor)

        second = service.create_purchase_order(supplier.id, [
            PurchaseLineSpec(products["TEA-GRN-100"].id, 20),
            PurchaseLineSpec(products["KET-STL-1L"].id, 8, Decimal("17.00")),
        ], actor)
        service.receive_order(second.id, actor)

        print("  [5/5] Approving and shipping a sales order...")
        sale = service.create_sales_order(cafe.id, [
            SalesLineSpec(products["TEA-GRN-100"].id, 15),
            SalesLineSpec(products["MUG-CER-350"].id, 6),
        ], actor)
        service.approve_order(sale.id, actor)
        service.ship_order(sale.id, actor)
    except InventoryKernelError as exc:
        print(f"  ERROR: [{exc.code}] {exc}", file=sys.stderr)
        return 1

    print()
    print("  Done.")
    for info in service.list_products():
        print(f"    {info.sku:<14} stock {info.stock:>4}  avg {info.average_cost}")
    print(f"  Inventory value: {service.inventory_value()}")
    print()
    print("  Next: python3 scripts/view_ledger.py")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
