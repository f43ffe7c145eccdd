"""Shared helpers for Estoque API endpoint modules.

This module centralizes the most repeated patterns:
- building resource paths
- validating list and object responses into models

It is internal to pyestoque and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyestoque._transport import Transport
from pyestoque.exceptions import EstoqueTransportError

M = TypeVar("M", bound=BaseModel)


def resource_path(collection: str, item_id: int | str) -> str:
    """``/api/products`` + ``5`` -> ``/api/products/5``."""
    return f"{collection.rstrip('/')}/{item_id}"


def parse_model(model: type[M], payload: Any, *, endpoint: str) -> M:
    """Validate one JSON object into *model*."""
    if not isinstance(payload, dict):
        raise EstoqueTransportError(
            f"{endpoint} returned {type(payload).__name__}, expected an object",
            endpoint=endpoint,
        )
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise EstoqueTransportError(f"{endpoint} returned an invalid payload: {exc}", endpoint=endpoint) from exc


def parse_model_list(model: type[M], payload: Any, *, endpoint: str) -> list[M]:
    """Validate a JSON array into a list of *model*."""
    if not isinstance(payload, list):
        raise EstoqueTransportError(
            f"{endpoint} returned {type(payload).__name__}, expected a list",
            endpoint=endpoint,
        )
    return [parse_model(model, item, endpoint=endpoint) for item in payload]


async def fetch_list(
    transport: Transport,
    endpoint: str,
    model: type[M],
    *,
    params: Mapping[str, Any] | None = None,
) -> list[M]:
    payload = await transport.request_json("GET", endpoint, params=params)
    return parse_model_list(model, payload, endpoint=endpoint)


async def fetch_one(transport: Transport, endpoint: str, model: type[M]) -> M:
    payload = await transport.request_json("GET", endpoint)
    return parse_model(model, payload, endpoint=endpoint)


async def send_model(
    transport: Transport,
    method: str,
    endpoint: str,
    body: Mapping[str, Any],
    model: type[M],
) -> M:
    """POST/PUT *body* and validate the echoed record."""
    payload = await transport.request_json(method, endpoint, body=dict(body))
    return parse_model(model, payload, endpoint=endpoint)
