from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyestoque.auth import AuthProvider, InactivityState
from pyestoque.exceptions import EstoqueAuthenticationError, EstoqueNotFoundError, EstoqueValidationError
from pyestoque.storage import MemoryStorage

ADMIN_USER = {"id": 1, "name": "Admin", "username": "admin", "role": "admin", "isAdmin": True}
STAFF_USER = {"id": 2, "companyId": 10, "name": "Vendedor", "username": "vendas", "role": "user"}
COMPANY_FORM = {
    "name": "Loja Modelo",
    "cnpj": "12.345.678/0001-90",
    "legalName": "Loja Modelo LTDA",
    "cep": "01001-000",
    "street": "Praça da Sé",
    "number": "100",
    "city": "São Paulo",
    "state": "SP",
}


@dataclass
class FakeAuthBackend:
    user: Any = field(default_factory=lambda: dict(ADMIN_USER))
    company: dict[str, Any] | None = None
    reject_login: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        body: Any = None,
    ) -> Any:
        self.calls.append((method, path))
        if (method, path) == ("POST", "/api/login"):
            if self.reject_login:
                raise EstoqueAuthenticationError("Credenciais inválidas", status_code=401, endpoint=path)
            return self.user
        if (method, path) == ("GET", "/api/company"):
            if self.company is None:
                raise EstoqueNotFoundError("Empresa não encontrada", endpoint=path)
            return self.company
        if (method, path) == ("POST", "/api/company"):
            self.company = {**body, "id": 10}
            return self.company
        raise AssertionError(f"Unexpected request in fake backend: {method} {path}")


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _provider(backend: FakeAuthBackend, storage: MemoryStorage | None = None, clock: _Clock | None = None) -> AuthProvider:
    return AuthProvider(
        backend,
        storage if storage is not None else MemoryStorage(),
        inactivity_timeout=60,
        inactivity_warning=10,
        clock=clock or _Clock(),
    )


def test_restore_without_stored_session() -> None:
    auth = _provider(FakeAuthBackend())
    assert auth.is_loading is True
    auth.restore()
    assert auth.is_loading is False
    assert auth.session is None


@pytest.mark.asyncio
async def test_admin_without_company_needs_onboarding() -> None:
    storage = MemoryStorage()
    backend = FakeAuthBackend()
    auth = _provider(backend, storage)

    assert await auth.login("admin", "admin") is True

    session = auth.session
    assert session is not None
    assert session.is_admin is True
    assert session.onboarding_complete is False
    assert auth.company is None
    assert backend.calls == [("POST", "/api/login"), ("GET", "/api/company")]
    assert json.loads(storage.get_item("auth_user") or "{}")["username"] == "admin"


@pytest.mark.asyncio
async def test_staff_user_never_needs_onboarding() -> None:
    auth = _provider(FakeAuthBackend(user=dict(STAFF_USER)))
    assert await auth.login("vendas", "123") is True
    assert auth.needs_onboarding is False
    assert auth.session is not None
    assert auth.session.is_admin is False


@pytest.mark.asyncio
async def test_login_accepts_wrapped_user() -> None:
    auth = _provider(FakeAuthBackend(user={"user": dict(STAFF_USER)}))
    assert await auth.login("vendas", "123") is True
    assert auth.user is not None
    assert auth.user.username == "vendas"


@pytest.mark.asyncio
async def test_rejected_login_returns_false() -> None:
    storage = MemoryStorage()
    auth = _provider(FakeAuthBackend(reject_login=True), storage)
    assert await auth.login("admin", "wrong") is False
    assert auth.session is None
    assert storage.snapshot() == {}


@pytest.mark.asyncio
async def test_blank_credentials_are_rejected_locally() -> None:
    backend = FakeAuthBackend()
    auth = _provider(backend)
    with pytest.raises(EstoqueValidationError):
        await auth.login("  ", "admin")
    assert backend.calls == []


@pytest.mark.asyncio
async def test_save_company_completes_onboarding_and_survives_restore() -> None:
    storage = MemoryStorage()
    auth = _provider(FakeAuthBackend(), storage)
    await auth.login("admin", "admin")

    company = await auth.save_company(COMPANY_FORM)

    assert company.is_configured is True
    assert company.legal_name == "Loja Modelo LTDA"
    assert auth.needs_onboarding is False
    assert auth.user is not None
    assert auth.user.company_id == 10

    restored = _provider(FakeAuthBackend(), storage)
    restored.restore()
    assert restored.session is not None
    assert restored.session.onboarding_complete is True
    assert restored.company is not None
    assert restored.company.cnpj == "12.345.678/0001-90"


@pytest.mark.asyncio
async def test_save_company_requires_login() -> None:
    auth = _provider(FakeAuthBackend())
    with pytest.raises(EstoqueAuthenticationError):
        await auth.save_company(COMPANY_FORM)


def test_restore_discards_corrupt_entries() -> None:
    storage = MemoryStorage({"auth_user": "{broken", "company": "[]"})
    auth = _provider(FakeAuthBackend(), storage)
    auth.restore()
    assert auth.session is None
    assert storage.get_item("auth_user") is None


def test_restore_discards_invalid_user_shape() -> None:
    storage = MemoryStorage({"auth_user": json.dumps({"name": "no id"})})
    auth = _provider(FakeAuthBackend(), storage)
    auth.restore()
    assert auth.session is None
    assert storage.get_item("auth_user") is None


@pytest.mark.asyncio
async def test_logout_clears_state_and_returns_login_path() -> None:
    storage = MemoryStorage({"preferred-language": "en-US"})
    auth = _provider(FakeAuthBackend(), storage)
    await auth.login("admin", "admin")

    assert auth.logout() == "/login"
    assert auth.session is None
    assert storage.snapshot() == {"preferred-language": "en-US"}


@pytest.mark.asyncio
async def test_inactivity_warning_then_expiry() -> None:
    clock = _Clock()
    auth = _provider(FakeAuthBackend(user=dict(STAFF_USER)), clock=clock)
    await auth.login("vendas", "123")

    clock.now = 59
    assert auth.check_inactivity() is InactivityState.ACTIVE
    clock.now = 60
    assert auth.check_inactivity() is InactivityState.WARNING

    auth.touch()
    assert auth.check_inactivity() is InactivityState.ACTIVE
    assert auth.check_inactivity(now=clock.now + 70) is InactivityState.EXPIRED
    assert auth.session is None


@pytest.mark.asyncio
async def test_keep_session_active_disables_expiry() -> None:
    clock = _Clock()
    auth = _provider(FakeAuthBackend(user=dict(STAFF_USER)), clock=clock)
    await auth.login("vendas", "123")
    auth.keep_session_active()

    clock.now = 10_000
    assert auth.check_inactivity() is InactivityState.ACTIVE
    assert auth.session is not None


def test_corrupt_stored_company_sends_any_role_to_onboarding() -> None:
    storage = MemoryStorage({"auth_user": json.dumps(STAFF_USER), "company": "{broken"})
    auth = _provider(FakeAuthBackend(), storage)
    auth.restore()

    assert auth.session is not None
    assert auth.session.onboarding_complete is False
    assert auth.company is None
    assert storage.get_item("company") is None


def test_restore_staff_without_stored_company_skips_onboarding() -> None:
    storage = MemoryStorage({"auth_user": json.dumps(STAFF_USER)})
    auth = _provider(FakeAuthBackend(), storage)
    auth.restore()
    assert auth.needs_onboarding is False


@pytest.mark.asyncio
async def test_logout_listeners_run_on_logout_expiry_and_user_switch() -> None:
    clock = _Clock()
    backend = FakeAuthBackend(user=dict(STAFF_USER))
    auth = _provider(backend, clock=clock)
    ended: list[int | None] = []
    auth.add_logout_listener(lambda: ended.append(auth.user.id if auth.user else None))

    await auth.login("vendas", "123")
    auth.logout()
    assert ended == [None]

    await auth.login("vendas", "123")
    assert auth.check_inactivity(now=clock.now + 70) is InactivityState.EXPIRED
    assert ended == [None, None]

    await auth.login("vendas", "123")
    await auth.login("vendas", "123")
    assert len(ended) == 2

    backend.user = dict(ADMIN_USER)
    await auth.login("admin", "admin")
    assert len(ended) == 3
    assert auth.user is not None and auth.user.id == 1
