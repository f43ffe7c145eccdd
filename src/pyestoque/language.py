"""Locale provider.

Holds the active UI language for the process. The preference is read from
client storage once, on first use, and written back on every change.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pyestoque._constants import DEFAULT_LANGUAGE, LANGUAGE_STORAGE_KEY
from pyestoque.storage import StoragePort
from pyestoque.translations import (
    AVAILABLE_LANGUAGES,
    Translation,
    get_translation,
    is_supported,
)

_logger = logging.getLogger(__name__)


class ProviderState(StrEnum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class LanguageProvider:
    """Active language, its translation table and the supported catalog.

    Never raises: storage failures fall back to the default language.
    """

    def __init__(self, storage: StoragePort, *, default_language: str = DEFAULT_LANGUAGE) -> None:
        self._storage = storage
        self._default = default_language if is_supported(default_language) else DEFAULT_LANGUAGE
        self._language = self._default
        self._state = ProviderState.UNINITIALIZED

    @property
    def state(self) -> ProviderState:
        return self._state

    def activate(self) -> None:
        """Load the persisted preference (first call only)."""
        if self._state is ProviderState.READY:
            return
        try:
            stored = self._storage.get_item(LANGUAGE_STORAGE_KEY)
        except Exception:  # noqa: BLE001 - unreadable storage means "no preference"
            _logger.warning("Could not read language preference", exc_info=True)
            stored = None
        if stored is not None and not is_supported(stored):
            _logger.warning("Ignoring unsupported persisted language %r", stored)
            stored = None
        self._language = stored or self._default
        self._state = ProviderState.READY

    @property
    def language(self) -> str:
        self.activate()
        return self._language

    @property
    def translation(self) -> Translation:
        return get_translation(self.language)

    @property
    def available_languages(self) -> list[tuple[str, str]]:
        return list(AVAILABLE_LANGUAGES)

    def set_language(self, code: str) -> None:
        """Switch language. Unsupported codes are ignored and not persisted."""
        self.activate()
        if not is_supported(code):
            _logger.debug("Ignoring unsupported language %r", code)
            return
        self._language = code
        try:
            self._storage.set_item(LANGUAGE_STORAGE_KEY, code)
        except Exception:  # noqa: BLE001
            _logger.warning("Could not persist language preference", exc_info=True)

    def t(self, key: str) -> str:
        """Translate *key*, falling back to the baseline table, then the key."""
        value = self.translation.get(key)
        if value is None:
            value = get_translation(DEFAULT_LANGUAGE).get(key, key)
        return value
