"""UI string tables for the supported languages.

Tables ship as JSON resources under ``pyestoque/locales``; every table
carries the same key set as the Brazilian Portuguese baseline.
"""

from __future__ import annotations

import functools
import json
from collections.abc import Mapping
from importlib import resources
from types import MappingProxyType

from pyestoque._constants import DEFAULT_LANGUAGE

Translation = Mapping[str, str]

#: Supported languages in display order: ``(code, native name)``.
AVAILABLE_LANGUAGES: tuple[tuple[str, str], ...] = (
    ("pt-BR", "Português (Brasil)"),
    ("en-US", "English (US)"),
    ("es-ES", "Español"),
    ("fr-FR", "Français"),
    ("it-IT", "Italiano"),
    ("de-DE", "Deutsch"),
    ("zh-CN", "中文 (简体)"),
    ("ja-JP", "日本語"),
)

SUPPORTED_LANGUAGE_CODES: frozenset[str] = frozenset(code for code, _ in AVAILABLE_LANGUAGES)


def is_supported(code: str | None) -> bool:
    return code in SUPPORTED_LANGUAGE_CODES


@functools.cache
def _load(code: str) -> Translation:
    text = resources.files("pyestoque.locales").joinpath(f"{code}.json").read_text(encoding="utf-8")
    return MappingProxyType(json.loads(text))


def get_translation(code: str) -> Translation:
    """Return the table for *code*, falling back to the baseline language."""
    if not is_supported(code):
        code = DEFAULT_LANGUAGE
    return _load(code)
