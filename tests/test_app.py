from __future__ import annotations

import json
from typing import Any

import pytest

from pyestoque.app import AppContext
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import EstoqueNotFoundError
from pyestoque.routing import RouteDecision
from pyestoque.storage import MemoryStorage

STAFF_USER = {"id": 2, "companyId": 10, "name": "Vendedor", "username": "vendas", "role": "user"}


class _FakeTransport:
    async def request_json(self, method: str, path: str, *, params: Any = None, body: Any = None) -> Any:
        if path == "/api/login":
            return dict(STAFF_USER)
        if path == "/api/company":
            raise EstoqueNotFoundError("Empresa não encontrada", endpoint=path)
        raise AssertionError(f"Unexpected request: {method} {path}")


def test_logged_out_navigation_goes_to_login() -> None:
    app = AppContext.create(EstoqueConfig(), MemoryStorage(), transport=_FakeTransport())
    app.activate()

    assert app.client is None
    assert app.navigate("/estoque") == RouteDecision.redirect("/login")
    assert app.navigate("/login") == RouteDecision.render("/login")


def test_narrow_viewport_closes_sidebar() -> None:
    app = AppContext.create(EstoqueConfig(), MemoryStorage(), viewport_width=500, transport=_FakeTransport())
    app.activate()
    assert app.sidebar.is_open is False


def test_activate_restores_language_and_session() -> None:
    storage = MemoryStorage(
        {
            "preferred-language": "en-US",
            "auth_user": json.dumps(STAFF_USER),
        }
    )
    app = AppContext.create(EstoqueConfig(), storage, viewport_width=1440, transport=_FakeTransport())
    app.activate()

    assert app.language.language == "en-US"
    assert app.sidebar.is_open is True
    assert app.auth.user is not None and app.auth.user.id == 2
    assert app.navigate("/vendas") == RouteDecision.render("/vendas")
    assert app.navigate("/configuracoes") == RouteDecision.redirect("/")


@pytest.mark.asyncio
async def test_login_through_context() -> None:
    async with AppContext.create(EstoqueConfig(), MemoryStorage(), transport=_FakeTransport()) as app:
        assert await app.auth.login("vendas", "123") is True
        assert app.navigate("/") == RouteDecision.render("/")


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_navigation_after_long_idle_expires_the_session() -> None:
    clock = _Clock()
    storage = MemoryStorage({"auth_user": json.dumps(STAFF_USER)})
    app = AppContext.create(EstoqueConfig(), storage, transport=_FakeTransport(), clock=clock)
    app.activate()
    assert app.navigate("/estoque") == RouteDecision.render("/estoque")

    clock.now += 10 * 3600

    assert app.navigate("/estoque") == RouteDecision.redirect("/login")
    assert app.auth.session is None
    assert storage.get_item("auth_user") is None


def test_navigation_inside_warning_window_keeps_session() -> None:
    clock = _Clock()
    config = EstoqueConfig(inactivity_timeout=60, inactivity_warning=30)
    app = AppContext.create(
        config, MemoryStorage({"auth_user": json.dumps(STAFF_USER)}), transport=_FakeTransport(), clock=clock
    )
    app.activate()

    clock.now = 75
    assert app.navigate("/vendas") == RouteDecision.render("/vendas")
    clock.now = 130
    assert app.navigate("/vendas") == RouteDecision.render("/vendas")
