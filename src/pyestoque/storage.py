"""Persisted client storage.

Providers only depend on :class:`StoragePort`, a string key/value store
shaped like the browser's ``localStorage``. Values are plain strings; JSON
encoding is the caller's business.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

_logger = logging.getLogger(__name__)


class StoragePort(Protocol):
    """Structural storage interface injected into providers."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage, used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)


class JsonFileStorage:
    """Durable storage backed by a single JSON object on disk.

    The file is read once and rewritten atomically on every change.
    Concurrent writers are not coordinated: the last writer wins.
    A corrupt or unreadable file is logged and treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._items = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            _logger.warning("Could not read storage file %s", self._path, exc_info=True)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Ignoring corrupt storage file %s", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Ignoring storage file %s: top level is not an object", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._items, handle, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()
