#!/usr/bin/env python3
"""
View the stock ledger and cost ledger of every product, newest first.

Usage:
    python3 scripts/view_ledger.py
    python3 scripts/view_ledger.py --sku TEA-GRN-100 --limit 10
"""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

W = 80


def main() -> int:
    parser = argparse.ArgumentParser(description="Print inventory ledgers")
    parser.add_argument("--config", help="Site YAML layered over the defaults")
    parser.add_argument("--sku", help="Only this product")
    parser.add_argument("--limit", type=int, default=None, help="Rows per ledger")
    args = parser.parse_args()

    logging.disable(logging.CRITICAL)

    from inventory_config import get_active_config
    from inventory_kernel.db.engine import get_session, init_engine_from_url
    from inventory_kernel.selectors import LedgerSelector, ProductSelector

    settings = get_active_config(args.config)
    try:
        init_engine_from_url(settings.database_url, echo=False)
    except Exception as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    session = get_session()
    try:
        products = ProductSelector(session)
        ledger = LedgerSelector(session)
        if args.sku:
            product = products.get_by_sku(args.sku)
            if product is None:
                print(f"  ERROR: unknown SKU {args.sku}", file=sys.stderr)
                return 1
            selected = (product,)
        else:
            selected = products.list_products()

        for product in selected:
            print("=" * W)
            print(f"  {product.sku}  {product.name}")
            print(f"  stock {product.stock}   average cost {product.average_cost}")
            print("-" * W)
            print("  STOCK LEDGER")
            for e in ledger.inventory_log(product.id, args.limit):
                print(
                    f"    {e.timestamp:%Y-%m-%d %H:%M:%S}  {e.movement_type.value:<3}"
                    f"  {e.change:>+6}  -> {e.new_stock:>6}  {e.related_doc}#{e.line_no}"
                )
            print("  COST LEDGER")
            for c in ledger.cost_log(product.id, args.limit):
                print(
                    f"    {c.timestamp:%Y-%m-%d %H:%M:%S}  {c.old_avg_cost:>12}"
                    f" -> {c.new_avg_cost:<12}  {c.related_doc}#{c.line_no}"
                )
            recon = ledger.reconcile_stock(product.id)
            flag = "OK" if recon.is_consistent else f"MISMATCH ({recon.discrepancy:+d})"
            print(f"  Reconciliation: {flag}")
        print("=" * W)
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
