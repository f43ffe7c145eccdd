"""Local inventory aggregates.

Mirrors what ``/api/dashboard`` computes server side so reports can be
built from an already fetched product list.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from pyestoque.exceptions import EstoqueValidationError
from pyestoque.formatting import StockStatus
from pyestoque.models.catalog import Product
from pyestoque.models.dashboard import CategorySummary, DashboardSummary
from pyestoque.models.sales import Sale

UNCATEGORIZED = "Sem categoria"
RECENT_SALES_LIMIT = 5

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def recent_sales(sales: Iterable[Sale], limit: int = RECENT_SALES_LIMIT) -> list[Sale]:
    """Most recent sales first; undated sales sort last."""
    ordered = sorted(sales, key=lambda sale: sale.date or sale.created_at or _EPOCH, reverse=True)
    return ordered[:limit]


def _matches_stock(product: Product, stock: StockStatus) -> bool:
    if stock is StockStatus.LOW:
        return product.is_low_stock
    if stock is StockStatus.NORMAL:
        return not product.is_low_stock
    return product.stock_status is StockStatus.OUT_OF_STOCK


def filter_products(
    products: Iterable[Product],
    *,
    text: str | None = None,
    category_id: int | None = None,
    supplier_id: int | None = None,
    stock: StockStatus | str | None = None,
) -> list[Product]:
    """Inventory list filters, all combined with AND.

    Parameters
    ----------
    text
        Case-insensitive substring of the product code or name.
    category_id, supplier_id
        Exact id match.
    stock
        ``"low"`` keeps products at or under their minimum (out of stock
        included), ``"normal"`` keeps the rest, ``"out_of_stock"`` keeps
        empty ones.

    Empty values disable their filter. Input order is preserved.

    Raises
    ------
    EstoqueValidationError
        For an unknown *stock* value.
    """
    needle = (text or "").strip().casefold()
    try:
        wanted_stock = StockStatus(stock) if stock else None
    except ValueError as exc:
        raise EstoqueValidationError(f"Unknown stock filter {stock!r}", field="stock") from exc
    return [
        product
        for product in products
        if (not needle or needle in product.code.casefold() or needle in product.name.casefold())
        and (category_id is None or product.category_id == category_id)
        and (supplier_id is None or product.supplier_id == supplier_id)
        and (wanted_stock is None or _matches_stock(product, wanted_stock))
    ]


def summarize_inventory(
    products: Iterable[Product],
    sales: Iterable[Sale] | None = None,
) -> DashboardSummary:
    """Aggregate stock metrics.

    Parameters
    ----------
    products
        Products to aggregate. Products without a category name are grouped
        under ``"Sem categoria"``.
    sales
        Optional sales; the five most recent end up in ``recent_sales``.

    Returns
    -------
    DashboardSummary
        Categories appear in first-seen order.
    """
    total_stock = 0
    purchase_value = 0.0
    potential_sales = 0.0
    low_stock_items = 0
    by_category: dict[str, dict[str, float]] = {}

    for product in products:
        total_stock += product.quantity
        purchase_value += product.purchase_value
        potential_sales += product.potential_value
        if product.is_low_stock:
            low_stock_items += 1

        bucket = by_category.setdefault(
            product.category or UNCATEGORIZED,
            {"item_count": 0, "total_value": 0.0, "potential_value": 0.0},
        )
        bucket["item_count"] += 1
        bucket["total_value"] += product.purchase_value
        bucket["potential_value"] += product.potential_value

    categories = [
        CategorySummary(
            name=name,
            item_count=int(bucket["item_count"]),
            total_value=bucket["total_value"],
            potential_value=bucket["potential_value"],
        )
        for name, bucket in by_category.items()
    ]
    return DashboardSummary(
        total_stock=total_stock,
        purchase_value=purchase_value,
        potential_sales=potential_sales,
        low_stock_items=low_stock_items,
        categories=categories,
        recent_sales=recent_sales(sales) if sales is not None else [],
    )
