"""
Stale-while-revalidate cache for the read endpoints.

Each key (e.g. "projects", "profile") maps to a fetcher. ``get`` answers from
memory when it can and revalidates in the background:

- the first access blocks on a fetch;
- values older than the refresh interval are served marked stale while a
  refresh runs, and every key is refreshed on a timer at that interval;
- callers within the dedupe window of a fetch share that fetch's result;
- a failed fetch keeps the last good value (marked stale) and retries with
  exponential backoff;
- a network failure followed by a success is treated as a reconnection and
  refreshes every key immediately.

There is no refresh-on-focus. Locks guard only in-memory state;
fetchers always run outside them.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NamedTuple, Optional

from portfolio.client import NETWORK_ERRORS, PortfolioApiClient
from portfolio.config import Settings, get_settings
from shared.constants import (
    CACHE_DEDUPE_INTERVAL_SECONDS,
    CACHE_REFRESH_INTERVAL_SECONDS,
    CACHE_RETRY_BASE_SECONDS,
    CACHE_RETRY_MAX_SECONDS,
)

logger = logging.getLogger(__name__)


class CacheResult(NamedTuple):
    value: Any
    is_stale: bool


def _start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    value: Any = None
    has_value: bool = False
    fetched_at: Optional[float] = None
    started_at: Optional[float] = None
    inflight: Optional[Future] = None
    error: Optional[BaseException] = None
    failed: bool = False
    failures: int = 0
    timer: Any = None


class StaleWhileRevalidateCache:
    def __init__(
        self,
        fetchers: Mapping[str, Callable[[], Any]],
        *,
        refresh_interval: float = CACHE_REFRESH_INTERVAL_SECONDS,
        dedupe_interval: float = CACHE_DEDUPE_INTERVAL_SECONDS,
        retry_base: float = CACHE_RETRY_BASE_SECONDS,
        retry_max: float = CACHE_RETRY_MAX_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        executor: Any = None,
        scheduler: Optional[Callable[[float, Callable[[], None]], Any]] = _start_timer,
        network_errors: tuple = NETWORK_ERRORS,
    ):
        self._fetchers = dict(fetchers)
        self.refresh_interval = refresh_interval
        self.dedupe_interval = dedupe_interval
        self.retry_base = retry_base
        self.retry_max = retry_max
        self._clock = clock
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(2, len(self._fetchers)),
            thread_name_prefix="portfolio-cache",
        )
        self._scheduler = scheduler
        self._network_errors = network_errors
        # Guards the entry map and the offline flag only.
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
        self._offline = False
        self._closed = False

    def _entry(self, key: str) -> _Entry:
        if key not in self._fetchers:
            raise KeyError(f"No fetcher registered for {key!r}")
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            return entry

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return entry.fetched_at is None or now - entry.fetched_at >= self.refresh_interval

    def _claim_fetch_locked(
        self, entry: _Entry, *, force: bool
    ) -> tuple[Optional[Future], bool]:
        """
        Returns (future, start). ``start`` is True when the caller must launch
        the fetch for the returned future.
        """
        if entry.inflight is not None:
            return entry.inflight, False
        now = self._clock()
        if not force:
            within_dedupe = (
                entry.started_at is not None
                and now - entry.started_at < self.dedupe_interval
            )
            if within_dedupe:
                return None, False
            if entry.has_value and not entry.failed and not self._is_expired(entry, now):
                return None, False
        entry.started_at = now
        entry.inflight = Future()
        return entry.inflight, True

    def get(self, key: str) -> CacheResult:
        """
        Returns (value, is_stale). Blocks only when no value has ever been
        fetched for ``key``; raises the fetch error in that case if it fails.
        """
        entry = self._entry(key)
        with entry.lock:
            future, start = self._claim_fetch_locked(entry, force=False)
            if entry.has_value:
                stale = entry.failed or self._is_expired(entry, self._clock())
                result = CacheResult(entry.value, stale)
            else:
                result = None
                if future is None and entry.error is not None:
                    # A fetch for this key failed inside the dedupe window.
                    raise entry.error
        if start:
            self._executor.submit(self._run_fetch, key, entry, future)
        if result is not None:
            return result

        value = future.result()
        with entry.lock:
            return CacheResult(value, entry.failed)

    def refresh(self, key: str) -> Future:
        """Starts (or joins) a fetch for ``key`` regardless of freshness."""
        entry = self._entry(key)
        with entry.lock:
            future, start = self._claim_fetch_locked(entry, force=True)
        if start:
            self._executor.submit(self._run_fetch, key, entry, future)
        return future

    def notify_reconnected(self, exclude: Optional[str] = None) -> None:
        """Refreshes every key that has been requested, e.g. after an outage."""
        with self._lock:
            self._offline = False
            keys = [k for k in self._entries if k != exclude]
        for key in keys:
            self.refresh(key)

    def _run_fetch(self, key: str, entry: _Entry, future: Future) -> None:
        try:
            value = self._fetchers[key]()
        except Exception as exc:
            with entry.lock:
                entry.inflight = None
                entry.error = exc
                entry.failed = True
                entry.failures += 1
                delay = min(self.retry_base * 2 ** (entry.failures - 1), self.retry_max)
                self._schedule_locked(key, entry, delay)
                failures = entry.failures
            if isinstance(exc, self._network_errors):
                with self._lock:
                    self._offline = True
            logger.warning(
                "Cache refresh of %r failed (attempt %d), retrying in %.0fs: %s",
                key,
                failures,
                delay,
                exc,
            )
            future.set_exception(exc)
            return

        with entry.lock:
            entry.value = value
            entry.has_value = True
            entry.fetched_at = self._clock()
            entry.inflight = None
            entry.error = None
            entry.failed = False
            entry.failures = 0
            self._schedule_locked(key, entry, self.refresh_interval)
        with self._lock:
            reconnected = self._offline
        if reconnected:
            logger.info("Network recovered; refreshing all cached keys")
            self.notify_reconnected(exclude=key)
        future.set_result(value)

    def _schedule_locked(self, key: str, entry: _Entry, delay: float) -> None:
        if entry.timer is not None:
            entry.timer.cancel()
            entry.timer = None
        if self._closed or self._scheduler is None:
            return
        entry.timer = self._scheduler(delay, lambda: self._on_timer(key))

    def _on_timer(self, key: str) -> None:
        if not self._closed:
            self.refresh(key)

    def close(self) -> None:
        self._closed = True
        with self._lock:
            entries = list(self._entries.values())
        for entry in entries:
            with entry.lock:
                if entry.timer is not None:
                    entry.timer.cancel()
                    entry.timer = None
        if self._owns_executor:
            self._executor.shutdown(wait=False)


def build_portfolio_cache(
    client: PortfolioApiClient, settings: Optional[Settings] = None, **kwargs
) -> StaleWhileRevalidateCache:
    """Cache over the public "projects" and "profile" resources."""
    settings = settings or get_settings()
    kwargs.setdefault("refresh_interval", settings.cache_refresh_interval_seconds)
    kwargs.setdefault("dedupe_interval", settings.cache_dedupe_interval_seconds)
    return StaleWhileRevalidateCache(
        {"projects": client.list_projects, "profile": client.get_profile},
        **kwargs,
    )
