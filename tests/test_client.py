from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from pyestoque._api._common import resource_path
from pyestoque.auth import InactivityState
from pyestoque.client import EstoqueClient
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import EstoqueApiError, EstoqueError, EstoqueNotFoundError, EstoqueValidationError
from pyestoque.models import PaymentMethod, SaleInput, SaleItemInput


@dataclass
class FakeEstoqueBackend:
    """In-memory stand-in for the REST backend, recording every call."""

    categories: list[dict[str, Any]] = field(
        default_factory=lambda: [{"id": 1, "name": "Roupas", "hasSize": True}, {"id": 2, "name": "Acessórios"}]
    )
    products: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {
                "id": 1,
                "code": "CAM-01",
                "name": "Camiseta",
                "categoryId": 1,
                "category": "Roupas",
                "quantity": 10,
                "minQuantity": 3,
                "buyPrice": 20.0,
                "sellPrice": 49.9,
            },
            {
                "id": 2,
                "code": "BON-01",
                "name": "Boné",
                "categoryId": 2,
                "category": "Acessórios",
                "quantity": 2,
                "minQuantity": 5,
                "buyPrice": 15.0,
                "sellPrice": 35.0,
            },
        ]
    )
    sales: list[dict[str, Any]] = field(default_factory=list)
    calls: dict[str, int] = field(default_factory=dict)
    bodies: list[Any] = field(default_factory=list)

    def _record_call(self, method: str, path: str) -> None:
        key = f"{method} {path}"
        self.calls[key] = self.calls.get(key, 0) + 1

    def count(self, method: str, path: str) -> int:
        return self.calls.get(f"{method} {path}", 0)

    def _product(self, product_id: int) -> dict[str, Any] | None:
        return next((p for p in self.products if p["id"] == product_id), None)

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        body: Any = None,
    ) -> Any:
        self._record_call(method, path)
        if body is not None:
            self.bodies.append(body)

        if path == "/api/login" and method == "POST":
            return {"id": 5, "companyId": 3, "name": "Caixa", "username": body["username"], "role": "user"}
        if path == "/api/company":
            raise EstoqueNotFoundError("Empresa não encontrada", endpoint=path)
        if path == "/api/categories":
            if method == "POST":
                created = {**body, "id": len(self.categories) + 1}
                self.categories.append(created)
                return created
            return list(self.categories)
        if path.startswith("/api/categories/") and method == "DELETE":
            category_id = int(path.rsplit("/", 1)[-1])
            if any(p["categoryId"] == category_id for p in self.products):
                raise EstoqueApiError(
                    "Não é possível excluir esta categoria porque existem produtos associados a ela",
                    status_code=400,
                    endpoint=path,
                )
            self.categories = [c for c in self.categories if c["id"] != category_id]
            return None
        if path == "/api/products":
            return list(self.products)
        if path == "/api/products/low-stock":
            return [p for p in self.products if p["quantity"] <= p["minQuantity"]]
        if path == "/api/dashboard":
            return {
                "totalStock": sum(p["quantity"] for p in self.products),
                "lowStockItems": sum(1 for p in self.products if p["quantity"] <= p["minQuantity"]),
                "recentSales": self.sales[-5:],
            }
        if path == "/api/sales" and method == "GET":
            return list(self.sales)
        if path == "/api/sales" and method == "POST":
            for item in body["items"]:
                product = self._product(item["productId"])
                if product is None or product["quantity"] < item["quantity"]:
                    raise EstoqueApiError("Estoque insuficiente", status_code=400, endpoint=path)
            for item in body["items"]:
                self._product(item["productId"])["quantity"] -= item["quantity"]  # type: ignore[index]
            sale = {**body["sale"], "id": len(self.sales) + 1, "items": body["items"]}
            self.sales.append(sale)
            return sale
        if path.startswith("/api/sales/"):
            sale_id = int(path.rsplit("/", 1)[-1])
            for sale in self.sales:
                if sale["id"] == sale_id:
                    return sale
            raise EstoqueNotFoundError("Venda não encontrada", endpoint=path)

        raise AssertionError(f"Unexpected request in fake backend: {method} {path}")


@pytest.fixture
def config() -> EstoqueConfig:
    return EstoqueConfig(base_url="http://backend.test", query_stale_time=60)


@pytest.fixture
def backend() -> FakeEstoqueBackend:
    return FakeEstoqueBackend()


@pytest.mark.asyncio
async def test_reads_are_cached_within_stale_time(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        first = await client.get_products()
        second = await client.get_products()

    assert first is second
    assert [p.code for p in first] == ["CAM-01", "BON-01"]
    assert first[1].is_low_stock is True
    assert backend.count("GET", "/api/products") == 1


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_create_sale_invalidates_affected_queries(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        assert await client.auth.login("caixa", "123") is True
        await client.get_products()
        await client.get_low_stock_products()
        await client.get_categories()
        await client.get_sales()
        before = await client.get_dashboard()

        sale = await client.create_sale(
            SaleInput(payment_method=PaymentMethod.PIX, total=99.8),
            [SaleItemInput(product_id=1, quantity=2, price=49.9, total=99.8)],
        )

        products = await client.get_products()
        await client.get_low_stock_products()
        await client.get_categories()
        sales = await client.get_sales()
        after = await client.get_dashboard()

    assert sale.id == 1
    assert sale.user_id == 5
    assert sale.company_id == 3
    assert products[0].quantity == 8
    assert [s.id for s in sales] == [1]
    assert before.total_stock == 12
    assert after.total_stock == 10
    assert backend.count("GET", "/api/products") == 2
    assert backend.count("GET", "/api/products/low-stock") == 2
    assert backend.count("GET", "/api/sales") == 2
    assert backend.count("GET", "/api/dashboard") == 2
    assert backend.count("GET", "/api/categories") == 1


@pytest.mark.asyncio
async def test_create_sale_requires_items(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        with pytest.raises(EstoqueValidationError) as exc_info:
            await client.create_sale({"payment_method": "cash", "total": 10}, [])

    assert exc_info.value.field == "items"
    assert backend.count("POST", "/api/sales") == 0


@pytest.mark.asyncio
async def test_rejected_sale_surfaces_server_message(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        with pytest.raises(EstoqueApiError, match="Estoque insuficiente"):
            await client.create_sale(
                {"paymentMethod": "cash", "total": 350},
                [{"productId": 2, "quantity": 10, "price": 35, "total": 350}],
            )


@pytest.mark.asyncio
async def test_get_sale_unknown_id(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        with pytest.raises(EstoqueNotFoundError):
            await client.get_sale(42)
        state = client.query_state(resource_path("/api/sales", 42))

    assert state is not None
    assert isinstance(state.error, EstoqueNotFoundError)


@pytest.mark.asyncio
async def test_category_mutations(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        await client.get_categories()
        created = await client.create_category({"name": "Calçados", "hasSize": True})
        categories = await client.get_categories()

        with pytest.raises(EstoqueApiError, match="produtos associados"):
            await client.delete_category(1)
        await client.delete_category(created.id)  # type: ignore[arg-type]
        remaining = await client.get_categories()

    assert created.has_size is True
    assert [c.name for c in categories] == ["Roupas", "Acessórios", "Calçados"]
    assert [c.name for c in remaining] == ["Roupas", "Acessórios"]
    assert backend.bodies[0] == {"name": "Calçados", "hasSize": True}


@pytest.mark.asyncio
async def test_company_absent_before_onboarding(config: EstoqueConfig, backend: FakeEstoqueBackend) -> None:
    async with EstoqueClient(config, transport=backend) as client:
        assert await client.get_company() is None


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: EstoqueConfig) -> None:
    client = EstoqueClient(config)
    with pytest.raises(EstoqueError, match="not initialized"):
        await client.get_products()


@dataclass
class _TenantBackend:
    """Each login switches the company whose products are served."""

    products_by_user: dict[str, list[dict[str, Any]]]
    current: str = ""

    async def request_json(self, method: str, path: str, *, params: Any = None, body: Any = None) -> Any:
        if path == "/api/login":
            self.current = body["username"]
            user_id = sorted(self.products_by_user).index(self.current) + 1
            return {"id": user_id, "companyId": user_id, "name": self.current, "username": self.current}
        if path == "/api/company":
            return None
        if path == "/api/products":
            return list(self.products_by_user[self.current])
        raise AssertionError(f"Unexpected request in fake backend: {method} {path}")


def _tenant_product(code: str) -> dict[str, Any]:
    return {"code": code, "name": code, "categoryId": 1, "buyPrice": 1, "sellPrice": 2}


@pytest.fixture
def tenants() -> _TenantBackend:
    return _TenantBackend({"alice": [_tenant_product("A-1")], "bob": [_tenant_product("B-1")]})


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_logout_drops_previous_tenant_data(tenants: _TenantBackend) -> None:
    async with EstoqueClient(EstoqueConfig(), transport=tenants) as client:
        await client.auth.login("alice", "pw")
        assert [p.code for p in await client.get_products()] == ["A-1"]

        client.auth.logout()
        assert client.query_state("/api/products") is None

        await client.auth.login("bob", "pw")
        assert [p.code for p in await client.get_products()] == ["B-1"]


@pytest.mark.asyncio
async def test_switching_user_without_logout_drops_cached_data(tenants: _TenantBackend) -> None:
    async with EstoqueClient(EstoqueConfig(query_stale_time=600), transport=tenants) as client:
        await client.auth.login("alice", "pw")
        await client.get_products()
        await client.auth.login("bob", "pw")
        assert [p.code for p in await client.get_products()] == ["B-1"]


@pytest.mark.asyncio
async def test_inactivity_expiry_drops_cached_data(tenants: _TenantBackend) -> None:
    now = [0.0]
    config = EstoqueConfig(query_stale_time=600, inactivity_timeout=60, inactivity_warning=10)
    async with EstoqueClient(config, transport=tenants, clock=lambda: now[0]) as client:
        await client.auth.login("alice", "pw")
        await client.get_products()

        now[0] = 100
        assert client.auth.check_inactivity() is InactivityState.EXPIRED
        assert client.query_state("/api/products") is None
