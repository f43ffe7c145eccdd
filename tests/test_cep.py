from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import pytest

from pyestoque.cep import (
    INVALID_FORMAT_MESSAGE,
    LOOKUP_FAILED_MESSAGE,
    NOT_FOUND_MESSAGE,
    CepLookup,
    normalize_cep,
)
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import EstoqueNotFoundError, EstoqueTransportError, EstoqueValidationError

SE_ADDRESS = {
    "cep": "01001-000",
    "logradouro": "Praça da Sé",
    "complemento": "lado ímpar",
    "bairro": "Sé",
    "localidade": "São Paulo",
    "uf": "SP",
    "ibge": "3550308",
}


class _FakeResponse:
    def __init__(self, status: int, text: str, gate: asyncio.Event | None = None) -> None:
        self.status = status
        self._text = text
        self._gate = gate

    async def text(self) -> str:
        if self._gate is not None:
            await self._gate.wait()
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeHttpSession:
    """Serves canned bodies per CEP; unknown CEPs answer ``{"erro": true}``."""

    def __init__(self, bodies: dict[str, Any] | None = None) -> None:
        self.bodies = bodies or {}
        self.gates: dict[str, asyncio.Event] = {}
        self.error: BaseException | None = None
        self.status = 200
        self.urls: list[str] = []

    def get(self, url: str, **_kwargs: Any) -> _FakeResponse:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        cep = url.rstrip("/").split("/")[-2]
        body = self.bodies.get(cep, {"erro": True})
        text = body if isinstance(body, str) else json.dumps(body)
        return _FakeResponse(self.status, text, self.gates.get(cep))


def _lookup(session: _FakeHttpSession) -> CepLookup:
    return CepLookup(EstoqueConfig(cep_base_url="https://cep.test/ws"), session)  # type: ignore[arg-type]


@pytest.mark.parametrize("text", ["", "123", "0100100", "010010001", "abc-defgh", "０１００１０００", "٠١٠٠١٠٠٠"])
def test_normalize_rejects_wrong_digit_count(text: str) -> None:
    with pytest.raises(EstoqueValidationError, match=INVALID_FORMAT_MESSAGE):
        normalize_cep(text)


def test_normalize_strips_punctuation() -> None:
    assert normalize_cep(" 01001-000 ") == "01001000"


@pytest.mark.asyncio
async def test_lookup_returns_address() -> None:
    session = _FakeHttpSession({"01001000": SE_ADDRESS})
    address = await _lookup(session).lookup("01001-000")

    assert session.urls == ["https://cep.test/ws/01001000/json/"]
    assert address.street == "Praça da Sé"
    assert address.city == "São Paulo"
    assert address.state == "SP"


@pytest.mark.asyncio
@pytest.mark.parametrize("erro", [True, "true"])
async def test_lookup_maps_erro_flag_to_not_found(erro: Any) -> None:
    session = _FakeHttpSession({"99999999": {"erro": erro}})
    with pytest.raises(EstoqueNotFoundError, match=NOT_FOUND_MESSAGE):
        await _lookup(session).lookup("99999-999")


@pytest.mark.asyncio
async def test_lookup_maps_network_failure() -> None:
    session = _FakeHttpSession()
    session.error = aiohttp.ClientConnectionError("offline")
    with pytest.raises(EstoqueTransportError, match=LOOKUP_FAILED_MESSAGE):
        await _lookup(session).lookup("01001000")


@pytest.mark.asyncio
async def test_lookup_maps_bad_status_and_bad_json() -> None:
    session = _FakeHttpSession({"01001000": "not json"})
    with pytest.raises(EstoqueTransportError):
        await _lookup(session).lookup("01001000")

    session.status = 500
    with pytest.raises(EstoqueTransportError) as exc_info:
        await _lookup(session).lookup("01001000")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["123", "123456789", "cep", "０１００１０００"])
async def test_fetch_address_invalid_input_sets_error_without_request(text: str) -> None:
    session = _FakeHttpSession()
    lookup = _lookup(session)

    assert await lookup.fetch_address(text) is None

    assert lookup.error == INVALID_FORMAT_MESSAGE
    assert lookup.address is None
    assert lookup.loading is False
    assert session.urls == []


@pytest.mark.asyncio
async def test_fetch_address_records_outcome() -> None:
    session = _FakeHttpSession({"01001000": SE_ADDRESS})
    lookup = _lookup(session)

    address = await lookup.fetch_address("01001-000")
    assert address is not None
    assert lookup.address == address
    assert lookup.error is None

    assert await lookup.fetch_address("99999999") is None
    assert lookup.error == NOT_FOUND_MESSAGE
    assert lookup.address is None


@pytest.mark.asyncio
async def test_superseded_response_does_not_overwrite_newer_one() -> None:
    session = _FakeHttpSession({"01001000": SE_ADDRESS, "20040002": {**SE_ADDRESS, "localidade": "Rio de Janeiro"}})
    slow = asyncio.Event()
    session.gates["01001000"] = slow
    lookup = _lookup(session)

    first = asyncio.create_task(lookup.fetch_address("01001000"))
    await asyncio.sleep(0)
    second = await lookup.fetch_address("20040-002")
    slow.set()

    assert await first is None
    assert second is not None
    assert lookup.address is not None
    assert lookup.address.city == "Rio de Janeiro"
    assert lookup.loading is False
