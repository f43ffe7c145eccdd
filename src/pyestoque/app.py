"""Application context: every provider constructed once and passed down."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pyestoque._transport import Transport
from pyestoque.auth import AuthProvider, InactivityState
from pyestoque.client import EstoqueClient
from pyestoque.config import EstoqueConfig
from pyestoque.language import LanguageProvider
from pyestoque.preferences import SidebarState, ThemeProvider
from pyestoque.routing import RouteDecision, RouteGuard
from pyestoque.storage import StoragePort

_logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide state for one application session.

    Usage::

        async with AppContext.create(EstoqueConfig.from_env(), JsonFileStorage(path)) as app:
            decision = app.navigate("/estoque")
    """

    config: EstoqueConfig
    storage: StoragePort
    language: LanguageProvider
    theme: ThemeProvider
    sidebar: SidebarState
    auth: AuthProvider
    guard: RouteGuard
    client: EstoqueClient | None = None
    viewport_width: int | None = None

    @classmethod
    def create(
        cls,
        config: EstoqueConfig,
        storage: StoragePort,
        *,
        viewport_width: int | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> AppContext:
        """Wire the providers together.

        Without *transport* an :class:`EstoqueClient` is created and owns
        the HTTP session; it is opened by ``async with``.
        """
        client: EstoqueClient | None = None
        if transport is None:
            client = EstoqueClient(config, storage=storage, clock=clock)
            auth = client.auth
        else:
            auth = AuthProvider(
                transport,
                storage,
                inactivity_timeout=config.inactivity_timeout,
                inactivity_warning=config.inactivity_warning,
                clock=clock,
            )
        return cls(
            config=config,
            storage=storage,
            language=LanguageProvider(storage, default_language=config.default_language),
            theme=ThemeProvider(storage),
            sidebar=SidebarState(storage, breakpoint=config.sidebar_breakpoint),
            auth=auth,
            guard=RouteGuard(auth),
            client=client,
            viewport_width=viewport_width,
        )

    def activate(self) -> None:
        """Rehydrate preferences and the persisted session."""
        self.language.activate()
        self.sidebar.activate(self.viewport_width)
        self.auth.restore()
        _logger.debug(
            "Context ready: language=%s sidebar_open=%s user=%s",
            self.language.language,
            self.sidebar.is_open,
            self.auth.user.id if self.auth.user else None,
        )

    def navigate(self, path: str) -> RouteDecision:
        """Resolve *path*, counting the navigation as user activity.

        An idle session is expired first, so it cannot be revived by
        navigating.
        """
        if self.auth.check_inactivity() is not InactivityState.EXPIRED:
            self.auth.touch()
        return self.guard.resolve(path)

    async def __aenter__(self) -> AppContext:
        if self.client is not None:
            await self.client.__aenter__()
        self.activate()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self.client is not None:
            await self.client.__aexit__(*exc)
