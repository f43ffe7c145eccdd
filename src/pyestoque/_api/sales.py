"""Sale endpoints.

Endpoints:
  - GET /api/sales (sales with items)
  - GET /api/sales/{id}
  - POST /api/sales with body ``{"sale": {...}, "items": [...]}``

The server checks stock for every item and answers 400 with a message
such as ``Estoque insuficiente para o produto X`` when short.
"""

from __future__ import annotations

import logging

from pyestoque._api._common import fetch_list, fetch_one, resource_path, send_model
from pyestoque._transport import Transport
from pyestoque.models.requests import CreateSaleRequest
from pyestoque.models.sales import Sale

_logger = logging.getLogger(__name__)

SALES_ENDPOINT = "/api/sales"


async def fetch_sales(transport: Transport) -> list[Sale]:
    return await fetch_list(transport, SALES_ENDPOINT, Sale)


async def fetch_sale(transport: Transport, sale_id: int) -> Sale:
    """Fetch one sale; unknown ids raise :class:`~pyestoque.exceptions.EstoqueNotFoundError`."""
    return await fetch_one(transport, resource_path(SALES_ENDPOINT, sale_id), Sale)


async def create_sale(transport: Transport, request: CreateSaleRequest) -> Sale:
    sale = await send_model(transport, "POST", SALES_ENDPOINT, request.to_payload(), Sale)
    _logger.debug("Registered sale %s with %d item(s)", sale.id, len(request.items))
    return sale
