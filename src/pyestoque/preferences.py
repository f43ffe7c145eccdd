"""Sidebar and theme preferences persisted to client storage."""

from __future__ import annotations

import logging
from enum import StrEnum

from pyestoque._constants import SIDEBAR_BREAKPOINT_PX, SIDEBAR_STORAGE_KEY, THEME_STORAGE_KEY
from pyestoque.storage import StoragePort

_logger = logging.getLogger(__name__)


class SidebarState:
    """Open/closed state of the navigation sidebar.

    User actions (:meth:`toggle`, :meth:`open`, :meth:`close`) persist the
    new state as ``"true"``/``"false"``. A narrow viewport forces the
    sidebar closed without touching the persisted value.
    """

    def __init__(self, storage: StoragePort, *, breakpoint: int = SIDEBAR_BREAKPOINT_PX) -> None:
        self._storage = storage
        self._breakpoint = breakpoint
        self._is_open = True

    @property
    def is_open(self) -> bool:
        return self._is_open

    def activate(self, viewport_width: int | None = None) -> None:
        """Rehydrate the persisted state, then apply the viewport rule."""
        stored = self._storage.get_item(SIDEBAR_STORAGE_KEY)
        if stored is not None:
            self._is_open = stored == "true"
        if viewport_width is not None:
            self.on_resize(viewport_width)

    def on_resize(self, viewport_width: int) -> None:
        """Close on narrow viewports. Widening never reopens."""
        if viewport_width < self._breakpoint and self._is_open:
            _logger.debug("Viewport %dpx below %dpx, closing sidebar", viewport_width, self._breakpoint)
            self._is_open = False

    def _set(self, value: bool) -> None:
        self._is_open = value
        self._storage.set_item(SIDEBAR_STORAGE_KEY, "true" if value else "false")

    def toggle(self) -> None:
        self._set(not self._is_open)

    def open(self) -> None:
        self._set(True)

    def close(self) -> None:
        self._set(False)


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class ThemeProvider:
    def __init__(self, storage: StoragePort, *, default: Theme = Theme.SYSTEM) -> None:
        self._storage = storage
        self._default = default
        self._theme: Theme | None = None

    @property
    def theme(self) -> Theme:
        if self._theme is None:
            stored = self._storage.get_item(THEME_STORAGE_KEY)
            try:
                self._theme = Theme(stored) if stored is not None else self._default
            except ValueError:
                _logger.warning("Ignoring unknown persisted theme %r", stored)
                self._theme = self._default
        return self._theme

    def set_theme(self, theme: Theme | str) -> None:
        value = Theme(theme)
        self._theme = value
        self._storage.set_item(THEME_STORAGE_KEY, value.value)

    def resolved(self, *, prefers_dark: bool = False) -> Theme:
        """Concrete theme to render, resolving ``system`` via *prefers_dark*."""
        if self.theme is Theme.SYSTEM:
            return Theme.DARK if prefers_dark else Theme.LIGHT
        return self.theme
