from __future__ import annotations

from pathlib import Path

import pytest

from pyestoque.config import EstoqueConfig
from pyestoque.exceptions import EstoqueConfigError


def test_defaults() -> None:
    config = EstoqueConfig()
    assert config.base_url == "http://localhost:5000"
    assert config.cep_base_url == "https://viacep.com.br/ws"
    assert config.default_language == "pt-BR"
    assert config.inactivity_timeout == 15 * 60
    assert config.inactivity_warning == 30
    assert config.sidebar_breakpoint == 768


def test_from_env_reads_variables_and_overrides_win(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ESTOQUE_BASE_URL", "https://estoque.example.com/")
    monkeypatch.setenv("ESTOQUE_REQUEST_TIMEOUT", "3.5")
    monkeypatch.setenv("ESTOQUE_SIDEBAR_BREAKPOINT", "1024")
    monkeypatch.setenv("ESTOQUE_EXPORT_DIR", str(tmp_path))
    monkeypatch.setenv("ESTOQUE_API_TRACE_ENABLED", "yes")

    config = EstoqueConfig.from_env(request_timeout=9.0)

    assert config.base_url == "https://estoque.example.com"
    assert config.request_timeout == 9.0
    assert config.sidebar_breakpoint == 1024
    assert config.export_dir == tmp_path
    assert config.api_trace_enabled is True


def test_from_env_rejects_non_numeric(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ESTOQUE_QUERY_STALE_TIME", "soon")
    with pytest.raises(EstoqueConfigError, match="ESTOQUE_QUERY_STALE_TIME"):
        EstoqueConfig.from_env()


def test_invalid_timeout_rejected() -> None:
    with pytest.raises(EstoqueConfigError):
        EstoqueConfig(request_timeout=0)
