"""Client configuration for pyestoque."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyestoque._constants import (
    CEP_BASE_URL,
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    INACTIVITY_TIMEOUT_S,
    INACTIVITY_WARNING_S,
    SIDEBAR_BREAKPOINT_PX,
)
from pyestoque.exceptions import EstoqueConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[float] | type[int]) -> float | int:
    try:
        return cast(value)
    except ValueError as exc:
        raise EstoqueConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class EstoqueConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Root URL of the Estoque Inteligente REST backend. Endpoints live
        under ``/api/*``.
    cep_base_url : str
        Root URL of the postal-code lookup service. Requests are sent to
        ``{cep_base_url}/{cep}/json/``.
    request_timeout : float
        Upper bound in seconds for any single network call. Also bounds
        query-cache fetches so a view can never stay loading forever.
    default_language : str
        Locale used when no valid preference has been persisted.
    query_stale_time : float
        Seconds a cached query stays fresh. ``0`` marks data stale as soon
        as it lands, so the next read revalidates in the background.
    inactivity_timeout : float
        Seconds without activity before the session shows the expiry
        warning.
    inactivity_warning : float
        Seconds the warning stays up before the session is logged out.
    sidebar_breakpoint : int
        Viewport width (px) under which the sidebar is forced closed.
    export_dir : Path
        Directory generated xlsx/pdf files are written to.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    """

    base_url: str = DEFAULT_BASE_URL
    cep_base_url: str = CEP_BASE_URL
    request_timeout: float = 15.0
    default_language: str = DEFAULT_LANGUAGE
    query_stale_time: float = 0.0
    inactivity_timeout: float = INACTIVITY_TIMEOUT_S
    inactivity_warning: float = INACTIVITY_WARNING_S
    sidebar_breakpoint: int = SIDEBAR_BREAKPOINT_PX
    export_dir: Path = dataclasses.field(default_factory=Path.cwd)
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise EstoqueConfigError("request_timeout must be positive")
        if self.query_stale_time < 0:
            raise EstoqueConfigError("query_stale_time must not be negative")
        # Trailing slashes would produce "//api" paths.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "cep_base_url", self.cep_base_url.rstrip("/"))
        object.__setattr__(self, "export_dir", Path(self.export_dir))

    @classmethod
    def from_env(cls, **overrides: Any) -> EstoqueConfig:
        """Create configuration from environment variables.

        Reads optional ``ESTOQUE_*`` variables. Explicit keyword arguments
        override environment values.

        Raises
        ------
        EstoqueConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "ESTOQUE_BASE_URL": "base_url",
            "ESTOQUE_CEP_BASE_URL": "cep_base_url",
            "ESTOQUE_DEFAULT_LANGUAGE": "default_language",
        }
        _ENV_NUM_MAP: dict[str, tuple[str, type[float] | type[int]]] = {
            "ESTOQUE_REQUEST_TIMEOUT": ("request_timeout", float),
            "ESTOQUE_QUERY_STALE_TIME": ("query_stale_time", float),
            "ESTOQUE_INACTIVITY_TIMEOUT": ("inactivity_timeout", float),
            "ESTOQUE_INACTIVITY_WARNING": ("inactivity_warning", float),
            "ESTOQUE_SIDEBAR_BREAKPOINT": ("sidebar_breakpoint", int),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, cast) in _ENV_NUM_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        export_dir = env.get("ESTOQUE_EXPORT_DIR")
        if export_dir is not None:
            config_kwargs["export_dir"] = Path(export_dir)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("ESTOQUE_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
