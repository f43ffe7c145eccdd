"""HTTP transport for the Estoque REST backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyestoque._constants import USER_AGENT
from pyestoque._redact import redact_for_log
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import (
    EstoqueApiError,
    EstoqueAuthenticationError,
    EstoqueNotFoundError,
    EstoqueTransportError,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        ...


def _server_message(text: str) -> str:
    """Extract the ``message`` field of a JSON error body, if any."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text[:200]
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return text[:200]


def raise_for_status(status: int, text: str, *, endpoint: str) -> None:
    """Map a non-2xx status to the pyestoque exception hierarchy."""
    if 200 <= status < 300:
        return
    message = _server_message(text)
    if status == 404:
        raise EstoqueNotFoundError(message or f"{endpoint} not found", endpoint=endpoint)
    if status in (401, 403):
        raise EstoqueAuthenticationError(message, status_code=status, endpoint=endpoint)
    if 400 <= status < 500:
        raise EstoqueApiError(message, status_code=status, endpoint=endpoint)
    raise EstoqueTransportError(
        f"HTTP {status} from {endpoint}: {message}",
        status_code=status,
        endpoint=endpoint,
    )


class HttpTransport:
    """JSON-over-HTTP transport backed by an :class:`aiohttp.ClientSession`."""

    def __init__(self, config: EstoqueConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        ``204 No Content`` and empty bodies return ``None``.
        """
        url = f"{self._config.base_url}{path}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        data: str | None = None
        if body is not None:
            headers["content-type"] = "application/json; charset=UTF-8"
            data = json.dumps(body, separators=(",", ":"))

        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled:
            _logger.debug("request %s %s params=%s body=%s", method, path, params, redact_for_log(body))

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                data=data,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except TimeoutError as exc:
            raise EstoqueTransportError(
                f"Request to {path} timed out after {self._config.request_timeout}s",
                endpoint=path,
            ) from exc
        except aiohttp.ClientError as exc:
            raise EstoqueTransportError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
            ) from exc

        raise_for_status(status, text, endpoint=path)

        if status == 204 or not text.strip():
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise EstoqueTransportError(
                f"Invalid JSON from {path}: {text[:200]}",
                status_code=status,
                endpoint=path,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("response %s %s: %s", method, path, redact_for_log(result))
        return result
