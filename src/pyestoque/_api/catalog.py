"""Catalog endpoints: categories, suppliers and products.

Endpoints:
  - /api/categories, /api/categories/{id}
  - /api/suppliers, /api/suppliers/{id}
  - /api/products, /api/products/{id}, /api/products/low-stock

Mutations echo the stored record; deletes answer 204.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyestoque._api._common import fetch_list, resource_path, send_model
from pyestoque._transport import Transport
from pyestoque.models._base import EstoqueBaseModel
from pyestoque.models.catalog import Category, Product, Supplier

_logger = logging.getLogger(__name__)

CATEGORIES_ENDPOINT = "/api/categories"
SUPPLIERS_ENDPOINT = "/api/suppliers"
PRODUCTS_ENDPOINT = "/api/products"
LOW_STOCK_ENDPOINT = "/api/products/low-stock"

#: Server-managed fields never sent on create/update.
_READ_ONLY_FIELDS: frozenset[str] = frozenset({"id", "createdAt", "updatedAt", "category", "supplier"})


def build_body(data: Mapping[str, Any] | EstoqueBaseModel) -> dict[str, Any]:
    """Normalize a model or mapping into a camelCase request body."""
    if isinstance(data, EstoqueBaseModel):
        payload = data.to_payload()
    else:
        payload = dict(data)
    return {key: value for key, value in payload.items() if key not in _READ_ONLY_FIELDS}


# ------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------


async def fetch_categories(transport: Transport) -> list[Category]:
    return await fetch_list(transport, CATEGORIES_ENDPOINT, Category)


async def create_category(transport: Transport, data: Mapping[str, Any] | Category) -> Category:
    return await send_model(transport, "POST", CATEGORIES_ENDPOINT, build_body(data), Category)


async def update_category(transport: Transport, category_id: int, data: Mapping[str, Any] | Category) -> Category:
    endpoint = resource_path(CATEGORIES_ENDPOINT, category_id)
    return await send_model(transport, "PUT", endpoint, build_body(data), Category)


async def delete_category(transport: Transport, category_id: int) -> None:
    """Delete a category.

    The server refuses (400) while products still reference it; that
    surfaces as :class:`~pyestoque.exceptions.EstoqueApiError`.
    """
    await transport.request_json("DELETE", resource_path(CATEGORIES_ENDPOINT, category_id))


# ------------------------------------------------------------------
# Suppliers
# ------------------------------------------------------------------


async def fetch_suppliers(transport: Transport) -> list[Supplier]:
    return await fetch_list(transport, SUPPLIERS_ENDPOINT, Supplier)


async def create_supplier(transport: Transport, data: Mapping[str, Any] | Supplier) -> Supplier:
    return await send_model(transport, "POST", SUPPLIERS_ENDPOINT, build_body(data), Supplier)


async def update_supplier(transport: Transport, supplier_id: int, data: Mapping[str, Any] | Supplier) -> Supplier:
    endpoint = resource_path(SUPPLIERS_ENDPOINT, supplier_id)
    return await send_model(transport, "PUT", endpoint, build_body(data), Supplier)


async def delete_supplier(transport: Transport, supplier_id: int) -> None:
    await transport.request_json("DELETE", resource_path(SUPPLIERS_ENDPOINT, supplier_id))


# ------------------------------------------------------------------
# Products
# ------------------------------------------------------------------


async def fetch_products(transport: Transport) -> list[Product]:
    return await fetch_list(transport, PRODUCTS_ENDPOINT, Product)


async def fetch_low_stock_products(transport: Transport) -> list[Product]:
    return await fetch_list(transport, LOW_STOCK_ENDPOINT, Product)


async def create_product(transport: Transport, data: Mapping[str, Any] | Product) -> Product:
    product = await send_model(transport, "POST", PRODUCTS_ENDPOINT, build_body(data), Product)
    _logger.debug("Created product %s (%s)", product.id, product.code)
    return product


async def update_product(transport: Transport, product_id: int, data: Mapping[str, Any] | Product) -> Product:
    endpoint = resource_path(PRODUCTS_ENDPOINT, product_id)
    return await send_model(transport, "PUT", endpoint, build_body(data), Product)


async def delete_product(transport: Transport, product_id: int) -> None:
    await transport.request_json("DELETE", resource_path(PRODUCTS_ENDPOINT, product_id))
