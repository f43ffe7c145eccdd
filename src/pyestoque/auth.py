"""Authentication, onboarding and inactivity tracking."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from pyestoque._api import company as _company_api
from pyestoque._constants import (
    AUTH_USER_STORAGE_KEY,
    COMPANY_STORAGE_KEY,
    INACTIVITY_TIMEOUT_S,
    INACTIVITY_WARNING_S,
    LOGIN_PATH,
)
from pyestoque._transport import Transport
from pyestoque.exceptions import EstoqueAuthenticationError, EstoqueValidationError
from pyestoque.models.company import AuthUser, Company
from pyestoque.models.requests import LoginRequest
from pyestoque.session import Session
from pyestoque.storage import StoragePort

_logger = logging.getLogger(__name__)


class InactivityState(StrEnum):
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


def _needs_onboarding(user: AuthUser, company: Company | None) -> bool:
    """Admins must configure a company before using the app."""
    if not user.is_admin_role:
        return False
    return company is None or not company.is_configured


class AuthProvider:
    """Current user, company and onboarding flag.

    ``is_loading`` stays ``True`` until :meth:`restore` has run, which the
    route guard renders as a loading indicator.

    Usage::

        auth = AuthProvider(transport, storage)
        auth.restore()
        if await auth.login("admin", "secret"):
            ...
    """

    def __init__(
        self,
        transport: Transport,
        storage: StoragePort,
        *,
        inactivity_timeout: float = INACTIVITY_TIMEOUT_S,
        inactivity_warning: float = INACTIVITY_WARNING_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._storage = storage
        self._inactivity_timeout = inactivity_timeout
        self._inactivity_warning = inactivity_warning
        self._clock = clock
        self.user: AuthUser | None = None
        self.company: Company | None = None
        self.is_loading = True
        self.needs_onboarding = False
        self.infinite_session = False
        self._last_activity: float | None = None
        self._logout_listeners: list[Callable[[], None]] = []

    def add_logout_listener(self, listener: Callable[[], None]) -> None:
        """Call *listener* whenever the session ends (logout or expiry).

        Owners of per-user state, such as the client's query cache, use
        this to drop it before another user logs in.
        """
        self._logout_listeners.append(listener)

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        if self.user is None:
            return None
        return Session(
            user_id=self.user.id,
            is_admin=self.user.is_admin_role,
            onboarding_complete=not self.needs_onboarding,
        )

    def _load_json(self, key: str) -> dict[str, Any] | None:
        stored = self._storage.get_item(key)
        if stored is None:
            return None
        try:
            data = json.loads(stored)
        except json.JSONDecodeError:
            _logger.warning("Discarding corrupt %s entry in storage", key)
            self._storage.remove_item(key)
            return None
        if not isinstance(data, dict):
            _logger.warning("Discarding malformed %s entry in storage", key)
            self._storage.remove_item(key)
            return None
        return data

    def restore(self) -> None:
        """Rehydrate user and company from storage and finish loading."""
        try:
            user_data = self._load_json(AUTH_USER_STORAGE_KEY)
            if user_data is None:
                return
            try:
                user = AuthUser.model_validate(user_data)
            except ValidationError:
                _logger.warning("Discarding invalid stored user")
                self._storage.remove_item(AUTH_USER_STORAGE_KEY)
                return

            company: Company | None = None
            has_stored_company = self._storage.get_item(COMPANY_STORAGE_KEY) is not None
            company_data = self._load_json(COMPANY_STORAGE_KEY)
            if company_data is not None:
                try:
                    company = Company.model_validate(company_data)
                except ValidationError:
                    _logger.warning("Discarding invalid stored company")
                    self._storage.remove_item(COMPANY_STORAGE_KEY)

            self.user = user
            self.company = company
            # An unreadable stored company sends every role back through setup.
            company_lost = has_stored_company and company is None
            self.needs_onboarding = company_lost or _needs_onboarding(user, company)
            self._last_activity = self._clock()
        finally:
            self.is_loading = False

    def _persist(self) -> None:
        if self.user is not None:
            self._storage.set_item(AUTH_USER_STORAGE_KEY, json.dumps(self.user.to_payload()))
        if self.company is not None:
            self._storage.set_item(COMPANY_STORAGE_KEY, json.dumps(self.company.to_payload()))

    # ------------------------------------------------------------------
    # Login / logout
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> bool:
        """Authenticate and load the user's company.

        Returns ``False`` for rejected credentials. Transport failures
        propagate so the caller can offer a retry.
        """
        try:
            request = LoginRequest(username=username, password=password)
        except ValidationError as exc:
            raise EstoqueValidationError("Usuário e senha são obrigatórios", field="username") from exc

        try:
            user = await _company_api.post_login(self._transport, request)
        except EstoqueAuthenticationError:
            _logger.info("Login rejected for %s", request.username)
            return False
        user = user.model_copy(update={"last_active": datetime.now(UTC)})
        if self.user is not None and self.user.id != user.id:
            self.logout()

        self.user = user
        self.company = await _company_api.fetch_company(self._transport)
        self.needs_onboarding = _needs_onboarding(user, self.company)
        self.infinite_session = False
        self._last_activity = self._clock()
        self._persist()
        _logger.debug("Logged in user %s (onboarding=%s)", user.id, self.needs_onboarding)
        return True

    def logout(self) -> str:
        """Drop the session and return the path to redirect to."""
        self.user = None
        self.company = None
        self.needs_onboarding = False
        self.infinite_session = False
        self._last_activity = None
        self._storage.remove_item(AUTH_USER_STORAGE_KEY)
        self._storage.remove_item(COMPANY_STORAGE_KEY)
        for listener in self._logout_listeners:
            listener()
        return LOGIN_PATH

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------

    async def save_company(self, data: Mapping[str, Any] | Company) -> Company:
        """Create or update the company and complete onboarding."""
        if self.user is None:
            raise EstoqueAuthenticationError("Not logged in", status_code=401, endpoint=_company_api.COMPANY_ENDPOINT)
        payload = data.to_payload() if isinstance(data, Company) else dict(data)
        if self.company is not None:
            payload = {**self.company.to_payload(), **payload}

        saved = await _company_api.save_company(self._transport, payload)
        company = saved.model_copy(update={"is_configured": True})

        self.company = company
        if company.id is not None and self.user.company_id != company.id:
            self.user = self.user.model_copy(update={"company_id": company.id})
        self.needs_onboarding = False
        self._persist()
        return company

    # ------------------------------------------------------------------
    # Inactivity
    # ------------------------------------------------------------------

    def touch(self) -> None:
        """Record user activity (restarts the inactivity window)."""
        if self.user is None:
            return
        self._last_activity = self._clock()
        self.user = self.user.model_copy(update={"last_active": datetime.now(UTC)})
        self._persist()

    def keep_session_active(self) -> None:
        """Disable inactivity expiry until the next logout."""
        self.infinite_session = True

    def check_inactivity(self, now: float | None = None) -> InactivityState:
        """Evaluate the inactivity timers; logs out once expired.

        *now* defaults to the provider clock.
        """
        if self.user is None or self._last_activity is None or self.infinite_session:
            return InactivityState.ACTIVE
        idle = (self._clock() if now is None else now) - self._last_activity
        if idle >= self._inactivity_timeout + self._inactivity_warning:
            _logger.info("Session expired after %.0fs of inactivity", idle)
            self.logout()
            return InactivityState.EXPIRED
        if idle >= self._inactivity_timeout:
            return InactivityState.WARNING
        return InactivityState.ACTIVE
