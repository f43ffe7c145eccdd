"""Company profile and login endpoints.

Endpoints:
  - POST /api/login
  - GET /api/company (404 until onboarding created one)
  - POST /api/company
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyestoque._api._common import parse_model, send_model
from pyestoque._transport import Transport
from pyestoque.exceptions import EstoqueNotFoundError
from pyestoque.models.company import AuthUser, Company
from pyestoque.models.requests import LoginRequest

LOGIN_ENDPOINT = "/api/login"
COMPANY_ENDPOINT = "/api/company"


async def post_login(transport: Transport, request: LoginRequest) -> AuthUser:
    """Authenticate and return the user record.

    Some backends wrap the record as ``{"user": {...}}``; both shapes are
    accepted.
    """
    response = await transport.request_json("POST", LOGIN_ENDPOINT, body=request.to_payload())
    if isinstance(response, dict) and isinstance(response.get("user"), dict):
        response = response["user"]
    return parse_model(AuthUser, response, endpoint=LOGIN_ENDPOINT)


async def fetch_company(transport: Transport) -> Company | None:
    """Return the company profile, or ``None`` when none exists yet."""
    try:
        payload = await transport.request_json("GET", COMPANY_ENDPOINT)
    except EstoqueNotFoundError:
        return None
    if payload is None:
        return None
    return parse_model(Company, payload, endpoint=COMPANY_ENDPOINT)


async def save_company(transport: Transport, body: Mapping[str, Any]) -> Company:
    return await send_model(transport, "POST", COMPANY_ENDPOINT, body, Company)
