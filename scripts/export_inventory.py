#!/usr/bin/env python3
"""Export the current inventory to a spreadsheet and/or PDF.

Usage
-----
Point the client at the backend and run::

    export ESTOQUE_BASE_URL="http://localhost:5000"
    export ESTOQUE_USERNAME="admin"
    export ESTOQUE_PASSWORD="admin"
    python scripts/export_inventory.py --format xlsx --format pdf -o exports/

Options::

    --format {xlsx,pdf}  Output format, repeatable (default: xlsx)
    --title TITLE        Document title (default: "Relatório de Estoque")
    --low-stock          Only export products at or under their minimum
    --search TEXT        Code or name contains TEXT (case-insensitive)
    --category ID        Only products of this category
    --supplier ID        Only products of this supplier
    --stock STATUS       low, normal or out_of_stock
    --output DIR         Directory for the files (default: ESTOQUE_EXPORT_DIR)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from pyestoque import EstoqueClient, EstoqueConfig, EstoqueError, get_exporter
from pyestoque.formatting import format_currency, stock_status_label
from pyestoque.models import Product
from pyestoque.reports import filter_products

HEADERS = ["Código", "Produto", "Categoria", "Fornecedor", "Quantidade", "Mínimo", "Custo", "Preço", "Status"]
COLUMNS = [
    "code",
    "name",
    lambda p: p.category or "",
    lambda p: p.supplier or "",
    "quantity",
    "min_quantity",
    lambda p: format_currency(p.buy_price),
    lambda p: format_currency(p.sell_price),
    lambda p: stock_status_label(p.quantity, p.min_quantity),
]


async def _fetch(client: EstoqueClient, *, low_stock: bool) -> list[Product]:
    username = os.environ.get("ESTOQUE_USERNAME")
    password = os.environ.get("ESTOQUE_PASSWORD")
    if username and password and not await client.auth.login(username, password):
        raise EstoqueError("Login rejected for ESTOQUE_USERNAME")
    if low_stock:
        return await client.get_low_stock_products()
    return await client.get_products()


async def main() -> int:
    parser = argparse.ArgumentParser(description="Export inventory products to xlsx/pdf.")
    parser.add_argument("--format", action="append", choices=["xlsx", "pdf"], dest="formats")
    parser.add_argument("--title", default="Relatório de Estoque")
    parser.add_argument("--low-stock", action="store_true", help="Only products at or under their minimum")
    parser.add_argument("--search", help="Code or name substring")
    parser.add_argument("--category", type=int, help="Category id")
    parser.add_argument("--supplier", type=int, help="Supplier id")
    parser.add_argument("--stock", choices=["low", "normal", "out_of_stock"])
    parser.add_argument("--output", "-o", help="Directory for the generated files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    overrides = {"export_dir": Path(args.output)} if args.output else {}
    config = EstoqueConfig.from_env(**overrides)

    try:
        async with EstoqueClient(config) as client:
            products = await _fetch(client, low_stock=args.low_stock)
        products = filter_products(
            products,
            text=args.search,
            category_id=args.category,
            supplier_id=args.supplier,
            stock=args.stock,
        )
    except EstoqueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    status = 0
    for kind in args.formats or ["xlsx"]:
        result = get_exporter(kind, config.export_dir).export(products, args.title, HEADERS, COLUMNS)
        if result.ok:
            print(result.path)
        else:
            print(f"{kind}: {result.reason}", file=sys.stderr)
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
