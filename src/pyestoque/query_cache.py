"""Keyed read cache with in-flight de-duplication and stale-while-revalidate.

Every GET-style read goes through :class:`QueryCache`. Entries are keyed by
an opaque string (see :func:`query_key`). The cache guarantees:

* at most one fetch in flight per key and invalidation generation; callers
  arriving while a fetch runs await the same task and observe the same
  data object;
* results are tagged with a per-key sequence number and a result older
  than the last applied one is discarded;
* a failed fetch records the error but keeps the last good data;
* an invalidated key is never served from cache: the next read blocks on
  a fresh fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import urlencode

from pyestoque.exceptions import EstoqueError, EstoqueTransportError

_logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
KeyFetcher = Callable[[str], Awaitable[Any]]


def query_key(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a cache key from a request path and optional query params.

    Params are sorted and ``None`` values dropped so equivalent requests
    share a key.
    """
    if not params:
        return path
    items = sorted((str(k), str(v)) for k, v in params.items() if v is not None)
    if not items:
        return path
    return f"{path}?{urlencode(items)}"


class QueryStatus(StrEnum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CachedQuery:
    """Point-in-time view of a cache entry."""

    key: str
    data: Any
    status: QueryStatus
    error: BaseException | None
    has_data: bool
    updated_at: float | None
    stale_at: float | None
    is_fetching: bool


@dataclass(slots=True)
class _Entry:
    key: str
    data: Any = None
    has_data: bool = False
    status: QueryStatus = QueryStatus.PENDING
    error: BaseException | None = None
    updated_at: float | None = None
    stale_at: float | None = None
    task: asyncio.Task[None] | None = None
    task_seq: int = 0
    issued_seq: int = 0
    # Last successful result, and last result of any kind.
    applied_seq: int = 0
    settled_seq: int = 0
    # Fetches with a sequence <= this value were issued before the last
    # invalidation and cannot clear it.
    invalidated_seq: int = -1

    @property
    def invalidated(self) -> bool:
        return self.invalidated_seq >= self.applied_seq and self.invalidated_seq >= 0

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()


class QueryCache:
    """In-memory query cache.

    Parameters
    ----------
    fetcher : callable, optional
        Default ``async fetcher(key)`` used when :meth:`get` is called without
        a per-call fetcher.
    stale_time : float
        Seconds a successful result stays fresh. ``0`` means every read after
        the first revalidates in the background.
    timeout : float or None
        Upper bound for a single fetch. Expiry records an
        :class:`~pyestoque.exceptions.EstoqueTransportError`.
    clock : callable
        Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        fetcher: KeyFetcher | None = None,
        *,
        stale_time: float = 0.0,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._stale_time = stale_time
        self._timeout = timeout
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(
        self,
        key: str,
        *,
        fetcher: Fetcher | None = None,
        stale_time: float | None = None,
        block_on_stale: bool = False,
    ) -> CachedQuery:
        """Return the entry for *key*, fetching when needed.

        * fresh data: returned as-is, no fetch;
        * no data or invalidated: waits for a (shared) fetch;
        * stale data: starts a background refetch and returns the stale
          entry immediately, unless ``block_on_stale`` is set.

        Never raises fetch errors; inspect ``status`` and ``error``.
        """
        entry = self._entry(key)
        if self._is_fresh(entry):
            return self._snapshot(entry)

        if entry.has_data and not entry.invalidated and not block_on_stale:
            self._ensure_fetch(entry, fetcher, stale_time)
            return self._snapshot(entry)

        task = self._ensure_fetch(entry, fetcher, stale_time)
        # Shielded so a caller that goes away does not abort the shared fetch.
        await asyncio.shield(task)
        return self._snapshot(entry)

    async def get_data(
        self,
        key: str,
        *,
        fetcher: Fetcher | None = None,
        stale_time: float | None = None,
        block_on_stale: bool = False,
    ) -> Any:
        """Like :meth:`get` but return the data.

        Raises the fetch error when there is no usable data: nothing cached,
        or the cached data was invalidated and the refetch failed.
        """
        result = await self.get(key, fetcher=fetcher, stale_time=stale_time, block_on_stale=block_on_stale)
        entry = self._entries.get(key)
        dirty = entry is not None and entry.invalidated
        if result.error is not None and (not result.has_data or dirty):
            raise result.error
        if not result.has_data:
            raise EstoqueError(f"No data for query {key}")
        return result.data

    def peek(self, key: str) -> CachedQuery | None:
        """Return the current entry without fetching."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._snapshot(entry)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def invalidate(self, *keys: str, prefix: str | None = None) -> list[str]:
        """Mark keys dirty so the next :meth:`get` refetches.

        ``prefix`` matches every key starting with it (e.g. ``"/api/products"``
        also hits ``"/api/products/low-stock"``). Returns the keys marked.
        """
        marked: list[str] = []
        for key, entry in self._entries.items():
            if key in keys or (prefix is not None and key.startswith(prefix)):
                entry.invalidated_seq = entry.issued_seq
                marked.append(key)
        if marked:
            _logger.debug("Invalidated queries: %s", marked)
        return marked

    def set_data(self, key: str, data: Any, *, stale_time: float | None = None) -> None:
        """Seed or overwrite an entry with known-good data."""
        entry = self._entry(key)
        # Counts as the newest result; in-flight fetches become outdated.
        entry.issued_seq += 1
        self._apply_success(entry, entry.issued_seq, data, stale_time)

    def remove(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None and entry.task is not None and not entry.task.done():
            entry.task.cancel()

    def clear(self) -> None:
        for key in list(self._entries):
            self.remove(key)

    async def close(self) -> None:
        """Cancel in-flight fetches and drop all entries."""
        tasks = [e.task for e in self._entries.values() if e.task is not None and not e.task.done()]
        self.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _entry(self, key: str) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key=key)
            self._entries[key] = entry
        return entry

    def _is_fresh(self, entry: _Entry) -> bool:
        if not entry.has_data or entry.invalidated or entry.stale_at is None:
            return False
        return self._clock() < entry.stale_at

    def _snapshot(self, entry: _Entry) -> CachedQuery:
        return CachedQuery(
            key=entry.key,
            data=entry.data,
            status=entry.status,
            error=entry.error,
            has_data=entry.has_data,
            updated_at=entry.updated_at,
            stale_at=entry.stale_at,
            is_fetching=entry.is_fetching,
        )

    def _resolve_fetcher(self, key: str, fetcher: Fetcher | None) -> Fetcher:
        if fetcher is not None:
            return fetcher
        default = self._fetcher
        if default is None:
            raise EstoqueError(f"No fetcher registered for query {key}")

        async def _fetch() -> Any:
            return await default(key)

        return _fetch

    def _ensure_fetch(self, entry: _Entry, fetcher: Fetcher | None, stale_time: float | None) -> asyncio.Task[None]:
        """Return the running fetch for *entry*, starting one if needed.

        A fetch issued before the latest invalidation does not count: its
        result may predate the mutation, so a new one is started.
        """
        task = entry.task
        if task is not None and not task.done() and entry.task_seq > entry.invalidated_seq:
            return task

        fetch = self._resolve_fetcher(entry.key, fetcher)
        entry.issued_seq += 1
        seq = entry.issued_seq
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(entry, seq, fetch, stale_time),
            name=f"query:{entry.key}#{seq}",
        )
        entry.task = task
        entry.task_seq = seq
        _logger.debug("Fetching query %s (seq=%d)", entry.key, seq)
        return task

    async def _run_fetch(
        self,
        entry: _Entry,
        seq: int,
        fetch: Fetcher,
        stale_time: float | None,
    ) -> None:
        try:
            if self._timeout is None:
                data = await fetch()
            else:
                async with asyncio.timeout(self._timeout):
                    data = await fetch()
        except TimeoutError as exc:
            error: BaseException = EstoqueTransportError(
                f"Query {entry.key} timed out after {self._timeout}s",
                endpoint=entry.key,
            )
            error.__cause__ = exc
            self._apply_error(entry, seq, error)
        except Exception as exc:  # noqa: BLE001 - recorded on the entry for readers
            self._apply_error(entry, seq, exc)
        else:
            self._apply_success(entry, seq, data, stale_time)

    def _apply_success(self, entry: _Entry, seq: int, data: Any, stale_time: float | None) -> None:
        if seq < entry.settled_seq:
            _logger.debug("Discarding outdated result for %s (seq=%d < %d)", entry.key, seq, entry.settled_seq)
            return
        now = self._clock()
        ttl = self._stale_time if stale_time is None else stale_time
        entry.applied_seq = seq
        entry.settled_seq = seq
        entry.data = data
        entry.has_data = True
        entry.status = QueryStatus.SUCCESS
        entry.error = None
        entry.updated_at = now
        entry.stale_at = now + ttl

    def _apply_error(self, entry: _Entry, seq: int, error: BaseException) -> None:
        if seq < entry.settled_seq:
            _logger.debug("Discarding outdated error for %s (seq=%d < %d)", entry.key, seq, entry.settled_seq)
            return
        _logger.debug("Query %s failed: %s", entry.key, error)
        entry.settled_seq = seq
        # Previous data is kept for readers that show it next to the error.
        # Freshness and invalidation are untouched so the next read retries.
        entry.status = QueryStatus.ERROR
        entry.error = error
