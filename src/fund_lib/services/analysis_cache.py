"""
Per-fund, per-day memoised indicator bundles.

    cache = AnalysisCache(store, client.fetch_raw_series, clock)
    bundle = await cache.get_or_compute("161725")

Key: ``fund:analysis:{code}:{local date}``.  A bundle is computed at most
once per fund per calendar day (in the clock's zone) and reused for the
rest of that day, whether or not the upstream series changed.

Failure policy:
  - fetch error, empty or malformed series → nothing stored, ``None``
    returned; the next call retries (no negative caching)
  - store outage (``redis.RedisError``): a failed read is a miss and a
    failed write is logged; the computed bundle is still returned
  - no eviction: old dates are never looked up again and just accumulate
  - no locking: two concurrent misses for the same key both compute and
    the second write overwrites the first with an equal bundle
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date

import redis

from fund_lib.analysis.signals import compute_bundle
from fund_lib.core.cache import CacheStore, cache_key, dumps, loads
from fund_lib.core.clock import Clock
from fund_lib.core.models import IndicatorBundle, Series

logger = logging.getLogger("analysis_cache")

FetchSeries = Callable[[str], Awaitable[Series]]


class AnalysisCache:
    def __init__(self, store: CacheStore, fetch_series: FetchSeries, clock: Clock):
        self.store = store
        self.fetch_series = fetch_series
        self.clock = clock

    @staticmethod
    def key(code: str, as_of: date) -> str:
        return cache_key("analysis", code, as_of.isoformat())

    def peek(self, code: str, as_of: date | None = None) -> IndicatorBundle | None:
        """Stored bundle for *code* on *as_of* (default today), without fetching."""
        try:
            raw = self.store.get(self.key(code, as_of or self.clock.local_date()))
        except redis.RedisError as exc:
            logger.warning("Cache read failed for %s, treating as miss: %s", code, exc)
            return None
        if raw is None:
            return None
        try:
            return IndicatorBundle.from_dict(loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable cache entry for %s: %s", code, exc)
            return None

    async def get_or_compute(self, code: str, as_of: date | None = None) -> IndicatorBundle | None:
        as_of = as_of or self.clock.local_date()
        cached = self.peek(code, as_of)
        if cached is not None:
            return cached

        try:
            series = await self.fetch_series(code)
        except Exception as exc:
            logger.warning("History fetch failed for %s: %s", code, exc)
            return None

        if not series:
            logger.info("Empty history for %s, not caching", code)
            return None

        bundle = compute_bundle(series, self.clock.now_ms())
        if bundle is None:
            logger.info("History for %s not computable, not caching", code)
            return None

        try:
            self.store.set(self.key(code, as_of), dumps(bundle.to_dict()))
        except redis.RedisError as exc:
            logger.warning("Cache write failed for %s, returning uncached result: %s", code, exc)
        else:
            logger.debug("Cached analysis for %s on %s", code, as_of)
        return bundle
