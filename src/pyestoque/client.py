"""High-level async client for the Estoque Inteligente API."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

import aiohttp

from pyestoque._api import catalog as _catalog_api
from pyestoque._api import company as _company_api
from pyestoque._api import dashboard as _dashboard_api
from pyestoque._api import sales as _sales_api
from pyestoque._api._common import resource_path
from pyestoque._transport import HttpTransport, Transport
from pyestoque.auth import AuthProvider
from pyestoque.cep import CepLookup
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import EstoqueError
from pyestoque.models.address import Address
from pyestoque.models.catalog import Category, Product, Supplier
from pyestoque.models.company import Company
from pyestoque.models.dashboard import DashboardSummary
from pyestoque.models.requests import CreateSaleRequest, SaleInput, SaleItemInput
from pyestoque.models.sales import Sale
from pyestoque.query_cache import CachedQuery, QueryCache, query_key
from pyestoque.storage import MemoryStorage, StoragePort

_logger = logging.getLogger(__name__)

T = TypeVar("T")

#: Queries to refetch after each kind of mutation. Prefix matches, so
#: ``/api/products`` also covers ``/api/products/low-stock``.
_AFFECTED_BY: dict[str, tuple[str, ...]] = {
    "category": (_catalog_api.CATEGORIES_ENDPOINT, _catalog_api.PRODUCTS_ENDPOINT, _dashboard_api.DASHBOARD_ENDPOINT),
    "supplier": (_catalog_api.SUPPLIERS_ENDPOINT, _catalog_api.PRODUCTS_ENDPOINT),
    "product": (_catalog_api.PRODUCTS_ENDPOINT, _dashboard_api.DASHBOARD_ENDPOINT),
    "sale": (_sales_api.SALES_ENDPOINT, _catalog_api.PRODUCTS_ENDPOINT, _dashboard_api.DASHBOARD_ENDPOINT),
    "company": (_company_api.COMPANY_ENDPOINT,),
}


class EstoqueClient:
    """Async client for the Estoque Inteligente REST backend.

    Reads go through a shared :class:`~pyestoque.query_cache.QueryCache`;
    mutations invalidate the queries they affect.

    Usage::

        async with EstoqueClient(config) as client:
            await client.auth.login("admin", "admin")
            summary = await client.get_dashboard()
    """

    def __init__(
        self,
        config: EstoqueConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: StoragePort | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = transport is None
        self._cep: CepLookup | None = None
        self._cache = QueryCache(
            stale_time=config.query_stale_time,
            timeout=config.request_timeout,
        )
        self._auth = AuthProvider(
            self,
            storage if storage is not None else MemoryStorage(),
            inactivity_timeout=config.inactivity_timeout,
            inactivity_warning=config.inactivity_warning,
            clock=clock,
        )
        self._auth.add_logout_listener(self._on_logout)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EstoqueClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._owns_transport:
            self._transport = HttpTransport(self._config, self._http_session)
        self._cep = CepLookup(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._cache.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None
        self._cep = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def auth(self) -> AuthProvider:
        return self._auth

    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def cep(self) -> CepLookup:
        if self._cep is None:
            raise EstoqueError("Client not initialized. Use 'async with EstoqueClient(...) as client:'")
        return self._cep

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise EstoqueError("Client not initialized. Use 'async with EstoqueClient(...) as client:'")
        return self._transport

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Raw request through the active transport (uncached)."""
        return await self._require_transport().request_json(method, path, params=params, body=body)

    async def _cached(self, key: str, fetch: Callable[[Transport], Awaitable[T]]) -> T:
        transport = self._require_transport()

        async def _call() -> T:
            return await fetch(transport)

        return await self._cache.get_data(key, fetcher=_call)

    def _on_logout(self) -> None:
        # Cached rows belong to the previous tenant.
        _logger.debug("Session ended, dropping cached queries")
        self._cache.clear()

    def _invalidate(self, kind: str) -> None:
        prefixes = _AFFECTED_BY[kind]
        for prefix in prefixes:
            self._cache.invalidate(prefix=prefix)

    def query_state(self, path: str, params: Mapping[str, Any] | None = None) -> CachedQuery | None:
        """Current cache entry for a read, without fetching."""
        return self._cache.peek(query_key(path, params))

    def invalidate(self, *paths: str) -> None:
        """Force the next read of each path (and its sub-paths) to refetch."""
        for path in paths:
            self._cache.invalidate(prefix=path)

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_dashboard(self) -> DashboardSummary:
        """Fetch stock totals, per-category values and recent sales."""
        return await self._cached(query_key(_dashboard_api.DASHBOARD_ENDPOINT), _dashboard_api.fetch_dashboard)

    async def get_products(self) -> list[Product]:
        return await self._cached(query_key(_catalog_api.PRODUCTS_ENDPOINT), _catalog_api.fetch_products)

    async def get_low_stock_products(self) -> list[Product]:
        """Products at or under their minimum quantity."""
        return await self._cached(query_key(_catalog_api.LOW_STOCK_ENDPOINT), _catalog_api.fetch_low_stock_products)

    async def get_categories(self) -> list[Category]:
        return await self._cached(query_key(_catalog_api.CATEGORIES_ENDPOINT), _catalog_api.fetch_categories)

    async def get_suppliers(self) -> list[Supplier]:
        return await self._cached(query_key(_catalog_api.SUPPLIERS_ENDPOINT), _catalog_api.fetch_suppliers)

    async def get_sales(self) -> list[Sale]:
        return await self._cached(query_key(_sales_api.SALES_ENDPOINT), _sales_api.fetch_sales)

    async def get_sale(self, sale_id: int) -> Sale:
        key = query_key(resource_path(_sales_api.SALES_ENDPOINT, sale_id))

        async def _fetch(transport: Transport) -> Sale:
            return await _sales_api.fetch_sale(transport, sale_id)

        return await self._cached(key, _fetch)

    async def get_company(self) -> Company | None:
        """Company profile, or ``None`` before onboarding."""
        return await self._cached(query_key(_company_api.COMPANY_ENDPOINT), _company_api.fetch_company)

    async def lookup_cep(self, cep: str) -> Address:
        """Resolve a Brazilian postal code (uncached)."""
        return await self.cep.lookup(cep)

    # ------------------------------------------------------------------
    # Catalog mutations
    # ------------------------------------------------------------------

    async def create_category(self, data: Mapping[str, Any] | Category) -> Category:
        category = await _catalog_api.create_category(self._require_transport(), data)
        self._invalidate("category")
        return category

    async def update_category(self, category_id: int, data: Mapping[str, Any] | Category) -> Category:
        category = await _catalog_api.update_category(self._require_transport(), category_id, data)
        self._invalidate("category")
        return category

    async def delete_category(self, category_id: int) -> None:
        await _catalog_api.delete_category(self._require_transport(), category_id)
        self._invalidate("category")

    async def create_supplier(self, data: Mapping[str, Any] | Supplier) -> Supplier:
        supplier = await _catalog_api.create_supplier(self._require_transport(), data)
        self._invalidate("supplier")
        return supplier

    async def update_supplier(self, supplier_id: int, data: Mapping[str, Any] | Supplier) -> Supplier:
        supplier = await _catalog_api.update_supplier(self._require_transport(), supplier_id, data)
        self._invalidate("supplier")
        return supplier

    async def delete_supplier(self, supplier_id: int) -> None:
        await _catalog_api.delete_supplier(self._require_transport(), supplier_id)
        self._invalidate("supplier")

    async def create_product(self, data: Mapping[str, Any] | Product) -> Product:
        product = await _catalog_api.create_product(self._require_transport(), data)
        self._invalidate("product")
        return product

    async def update_product(self, product_id: int, data: Mapping[str, Any] | Product) -> Product:
        product = await _catalog_api.update_product(self._require_transport(), product_id, data)
        self._invalidate("product")
        return product

    async def delete_product(self, product_id: int) -> None:
        await _catalog_api.delete_product(self._require_transport(), product_id)
        self._invalidate("product")

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    async def create_sale(
        self,
        sale: SaleInput | Mapping[str, Any],
        items: Sequence[SaleItemInput | Mapping[str, Any]],
    ) -> Sale:
        """Register a sale and decrement stock.

        Parameters
        ----------
        sale
            Header fields: ``payment_method``, ``total`` and optionally
            ``user_id``/``company_id`` (filled from the logged-in user).
        items
            At least one line item with ``product_id``, ``quantity``,
            ``price`` and ``total``.

        Raises
        ------
        EstoqueValidationError
            If the sale has no items or a field is out of range.
        EstoqueApiError
            If the server rejects it, e.g. insufficient stock.
        """
        request = CreateSaleRequest.build(sale, items, user=self._auth.user)
        created = await _sales_api.create_sale(self._require_transport(), request)
        self._invalidate("sale")
        return created

    async def save_company(self, data: Mapping[str, Any] | Company) -> Company:
        """Save the company profile and complete onboarding."""
        company = await self._auth.save_company(data)
        self._invalidate("company")
        return company
