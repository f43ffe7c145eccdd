"""Custom exception hierarchy for pyestoque."""

from __future__ import annotations


class EstoqueError(Exception):
    """Base exception for all pyestoque errors."""


class EstoqueConfigError(EstoqueError):
    """Invalid or missing configuration."""


class EstoqueValidationError(EstoqueError):
    """Malformed user input (e.g. a postal code without 8 digits).

    Shown inline next to the offending field; never fatal.
    """

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class EstoqueTransportError(EstoqueError):
    """HTTP-level failure (network, timeout, 5xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether the failure is transient (network error or 5xx)."""
        return self.status_code is None or self.status_code >= 500


class EstoqueNotFoundError(EstoqueError):
    """Remote record absent (HTTP 404 or lookup service ``erro`` flag)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class EstoqueApiError(EstoqueError):
    """API rejected the request with a 4xx status.

    ``message`` carries the server supplied ``message`` field when present
    so it can be surfaced to the user as-is.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class EstoqueAuthenticationError(EstoqueApiError):
    """Login failed or the session is no longer accepted (401/403)."""


class EstoqueAuthorizationError(EstoqueError):
    """Authenticated user lacks the role required for a route.

    The route guard resolves this with a silent redirect home; it is never
    rendered as an error message.
    """


class EstoqueMissingDependencyError(EstoqueError):
    """Optional export backend library is not installed."""

    def __init__(self, message: str, *, dependency: str = "") -> None:
        self.dependency = dependency
        super().__init__(message)
