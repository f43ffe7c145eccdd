"""Route table and the authentication guard in front of it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pyestoque._constants import HOME_PATH, LOGIN_PATH, ONBOARDING_PATH
from pyestoque.exceptions import EstoqueAuthorizationError
from pyestoque.session import Session

if TYPE_CHECKING:
    from pyestoque.auth import AuthProvider

_logger = logging.getLogger(__name__)


class RouteOutcome(StrEnum):
    LOADING = "loading"
    REDIRECT = "redirect"
    RENDER = "render"
    NOT_FOUND = "not-found"


@dataclass(frozen=True, slots=True)
class RouteDecision:
    """What the shell should do for a requested path.

    ``target`` is the redirect destination for ``REDIRECT`` and the view
    path for ``RENDER``; it is empty otherwise.
    """

    outcome: RouteOutcome
    target: str = ""

    @classmethod
    def loading(cls) -> RouteDecision:
        return cls(RouteOutcome.LOADING)

    @classmethod
    def redirect(cls, target: str) -> RouteDecision:
        return cls(RouteOutcome.REDIRECT, target)

    @classmethod
    def render(cls, path: str) -> RouteDecision:
        return cls(RouteOutcome.RENDER, path)

    @classmethod
    def not_found(cls) -> RouteDecision:
        return cls(RouteOutcome.NOT_FOUND)

    @property
    def is_redirect(self) -> bool:
        return self.outcome is RouteOutcome.REDIRECT


@dataclass(frozen=True, slots=True)
class Route:
    path: str
    name: str
    admin_only: bool = False


ROUTES: tuple[Route, ...] = (
    Route(HOME_PATH, "dashboard"),
    Route("/estoque", "inventory"),
    Route("/vendas", "sales"),
    Route("/fornecedores", "suppliers"),
    Route("/relatorios", "reports"),
    Route("/configuracoes", "settings", admin_only=True),
    Route(ONBOARDING_PATH, "onboarding"),
)


def require_role(session: Session, path: str, *, admin_only: bool) -> None:
    """Raise :class:`EstoqueAuthorizationError` if *session* may not open *path*."""
    if admin_only and not session.is_admin:
        raise EstoqueAuthorizationError(f"User {session.user_id} is not allowed to open {path}")


def guard_route(
    *,
    is_loading: bool,
    session: Session | None,
    path: str,
    admin_only: bool = False,
) -> RouteDecision:
    """Decide how to handle *path* for the given session.

    Checks run in a fixed order and the first match wins:

    1. session still loading: show a loading indicator;
    2. no session: redirect to the login page;
    3. admin-only route for a non-admin: redirect home;
    4. onboarding incomplete: redirect to onboarding (unless already there);
    5. otherwise render *path*.
    """
    if is_loading:
        return RouteDecision.loading()
    if session is None:
        return RouteDecision.redirect(LOGIN_PATH)
    try:
        require_role(session, path, admin_only=admin_only)
    except EstoqueAuthorizationError as exc:
        _logger.debug("%s, redirecting home", exc)
        return RouteDecision.redirect(HOME_PATH)
    if not session.onboarding_complete and path != ONBOARDING_PATH:
        return RouteDecision.redirect(ONBOARDING_PATH)
    return RouteDecision.render(path)


class RouteGuard:
    """Resolve navigation requests against :data:`ROUTES` and an auth provider."""

    def __init__(self, auth: AuthProvider, routes: tuple[Route, ...] = ROUTES) -> None:
        self._auth = auth
        self._routes = {route.path: route for route in routes}

    def resolve(self, path: str) -> RouteDecision:
        if path == LOGIN_PATH:
            # Public page; signed-in users go home instead.
            if not self._auth.is_loading and self._auth.session is not None:
                return RouteDecision.redirect(HOME_PATH)
            return RouteDecision.render(LOGIN_PATH)

        normalized = path.rstrip("/") or HOME_PATH
        route = self._routes.get(normalized)
        decision = guard_route(
            is_loading=self._auth.is_loading,
            session=self._auth.session,
            path=normalized,
            admin_only=route.admin_only if route is not None else False,
        )
        if route is None and decision.outcome is RouteOutcome.RENDER:
            _logger.debug("No route for %s", path)
            return RouteDecision.not_found()
        if decision.is_redirect:
            _logger.debug("Redirecting %s -> %s", path, decision.target)
        return decision
