"""
Fund tracker — the service facade the API (and any other consumer) uses.

Wires the Eastmoney client, the batch orchestrator and the analysis
cache together.  The orchestrator is reused for every multi-fund call:

    get_realtime_estimates(codes)     → list[FundEstimate]
    get_previous_day_changes(codes)   → list[PreviousDayChange]
    get_analysis(codes)               → dict[code, IndicatorBundle]
    get_market_compass(codes)         → list[QuadrantPoint]

and single-fund views go straight to the client:

    get_perspective(code, range_key)  → Perspective
"""

import logging
from collections.abc import Iterable

from fund_lib.analysis.normalizer import range_start
from fund_lib.analysis.quadrant import build_compass
from fund_lib.analysis.signals import build_perspective
from fund_lib.core.cache import make_store
from fund_lib.core.clock import Clock, SystemClock
from fund_lib.core.config import Settings
from fund_lib.core.models import (
    FundEstimate,
    IndicatorBundle,
    Perspective,
    PreviousDayChange,
    QuadrantPoint,
)
from fund_lib.services.analysis_cache import AnalysisCache
from fund_lib.services.batch import fetch_all, fetch_batch
from fund_lib.services.eastmoney import EastmoneyClient

logger = logging.getLogger("tracker")


class FundTracker:
    def __init__(
        self,
        client: EastmoneyClient,
        cache: AnalysisCache,
        settings: Settings,
        clock: Clock,
    ):
        self.client = client
        self.cache = cache
        self.settings = settings
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "FundTracker":
        """Production wiring: real HTTP client, Redis-or-memory store, wall clock."""
        clock = SystemClock(settings.tz)
        client = EastmoneyClient(settings)
        cache = AnalysisCache(make_store(settings), client.fetch_raw_series, clock)
        return cls(client, cache, settings, clock)

    async def aclose(self) -> None:
        await self.client.aclose()

    def _batch_kwargs(self, label: str) -> dict:
        return {
            "window_size": self.settings.batch_size,
            "delay": self.settings.batch_delay,
            "label": label,
        }

    async def get_realtime_estimates(self, codes: Iterable[str]) -> list[FundEstimate]:
        return await fetch_all(codes, self.client.fetch_fund_info, **self._batch_kwargs("estimates"))

    async def get_previous_day_changes(self, codes: Iterable[str]) -> list[PreviousDayChange]:
        return await fetch_all(
            codes, self.client.fetch_previous_day_change, **self._batch_kwargs("prev_change")
        )

    async def get_analysis(self, codes: Iterable[str]) -> dict[str, IndicatorBundle]:
        result = await fetch_batch(codes, self.cache.get_or_compute, **self._batch_kwargs("analysis"))
        return result.results

    async def get_perspective(self, code: str, range_key: str) -> Perspective:
        """Detail view for one fund.

        An upstream failure propagates as ``UpstreamFetchError``; an unknown
        range raises ``ValueError`` before anything is fetched.
        """
        now = self.clock.now()
        range_start(range_key, now)
        series = await self.client.fetch_raw_series(code)
        return build_perspective(series, range_key, now)

    async def get_market_compass(self, codes: Iterable[str]) -> list[QuadrantPoint]:
        codes = list(dict.fromkeys(codes))
        histories = await fetch_batch(codes, self.client.fetch_raw_series, **self._batch_kwargs("compass"))
        estimates = await fetch_batch(
            histories.results, self.client.fetch_fund_info, **self._batch_kwargs("compass_names")
        )

        entries = []
        for code in codes:
            series = histories.results.get(code)
            if not series:
                continue
            estimate = estimates.results.get(code)
            name = estimate.name if estimate is not None and estimate.name else code
            entries.append((code, name, series))

        points = build_compass(entries)
        logger.info("Compass built: %d of %d funds placed", len(points), len(codes))
        return points
