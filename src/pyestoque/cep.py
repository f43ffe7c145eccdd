"""Brazilian postal code (CEP) address lookup.

Talks to a ViaCEP-compatible service: ``GET {base}/{cep}/json/`` returns
either an address record or ``{"erro": true}``.
"""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any

import aiohttp

from pyestoque._constants import CEP_LENGTH, USER_AGENT
from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import (
    EstoqueError,
    EstoqueNotFoundError,
    EstoqueTransportError,
    EstoqueValidationError,
)
from pyestoque.formatting import only_digits
from pyestoque.models.address import Address

_logger = logging.getLogger(__name__)

INVALID_FORMAT_MESSAGE = "CEP deve conter 8 dígitos"
NOT_FOUND_MESSAGE = "CEP não encontrado"
LOOKUP_FAILED_MESSAGE = "Erro ao buscar o CEP"


def normalize_cep(text: str) -> str:
    """Strip non-digits and require exactly eight digits.

    Raises
    ------
    EstoqueValidationError
        If the remaining digit count is not 8.
    """
    digits = only_digits(text or "")
    if len(digits) != CEP_LENGTH:
        raise EstoqueValidationError(INVALID_FORMAT_MESSAGE, field="cep")
    return digits


def _is_not_found(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return True
    flag = payload.get("erro")
    # The service has sent both true and "true".
    return flag is True or str(flag).lower() == "true"


class CepLookup:
    """Address lookup with hook-style state.

    :meth:`lookup` is the plain request/raise API. :meth:`fetch_address`
    wraps it for form code: it keeps ``address``, ``loading`` and ``error``
    up to date and only lets the most recent call write them.
    """

    def __init__(self, config: EstoqueConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        self._request_ids = itertools.count(1)
        self._latest_request = 0
        self.address: Address | None = None
        self.loading: bool = False
        self.error: str | None = None

    async def lookup(self, cep: str) -> Address:
        """Resolve *cep* to an :class:`Address`.

        Raises
        ------
        EstoqueValidationError
            Malformed input; no request is sent.
        EstoqueNotFoundError
            The service does not know the code.
        EstoqueTransportError
            Network failure, timeout, non-200 status or invalid JSON.
        """
        digits = normalize_cep(cep)
        url = f"{self._config.cep_base_url}/{digits}/json/"
        _logger.debug("GET %s", url)
        try:
            async with self._http.get(url, headers={"user-agent": USER_AGENT}, timeout=self._timeout) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise EstoqueTransportError(LOOKUP_FAILED_MESSAGE, endpoint=url) from exc

        if status != 200:
            raise EstoqueTransportError(LOOKUP_FAILED_MESSAGE, status_code=status, endpoint=url)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise EstoqueTransportError(LOOKUP_FAILED_MESSAGE, status_code=status, endpoint=url) from exc

        if _is_not_found(payload):
            raise EstoqueNotFoundError(NOT_FOUND_MESSAGE, endpoint=url)
        return Address.model_validate(payload)

    async def fetch_address(self, cep: str) -> Address | None:
        """Look up *cep* and record the outcome on this instance.

        Returns the address, or ``None`` when the call failed or was
        superseded by a newer call before it completed.
        """
        request_id = next(self._request_ids)
        self._latest_request = request_id

        try:
            normalize_cep(cep)
        except EstoqueValidationError as exc:
            self.error = str(exc)
            self.address = None
            self.loading = False
            return None

        self.loading = True
        self.error = None
        try:
            address = await self.lookup(cep)
        except EstoqueError as exc:
            if request_id != self._latest_request:
                _logger.debug("Dropping superseded CEP lookup #%d", request_id)
                return None
            self.error = str(exc)
            self.address = None
            self.loading = False
            return None

        if request_id != self._latest_request:
            _logger.debug("Dropping superseded CEP lookup #%d", request_id)
            return None
        self.address = address
        self.loading = False
        return address
