"""
fund_lib.core — Core infrastructure modules.

Re-exports the public API from each sub-module so callers can do:

    from fund_lib.core import Settings, load_settings, make_store
"""

from fund_lib.core.cache import CacheStore, MemoryStore, RedisStore, cache_key, make_store
from fund_lib.core.clock import Clock, FixedClock, SystemClock
from fund_lib.core.config import Settings, load_settings
from fund_lib.core.errors import FundDataError, UpstreamFetchError
from fund_lib.core.logging_config import get_logger, setup_logging
from fund_lib.core.models import (
    BatchResult,
    ChartPoint,
    DrawdownResult,
    FundEstimate,
    FundHistory,
    IndicatorBundle,
    Perspective,
    PerspectiveSignals,
    PreviousDayChange,
    Quadrant,
    QuadrantPoint,
    RawPoint,
    Series,
    SupportResistance,
    Trend,
)

__all__ = [
    "BatchResult",
    "CacheStore",
    "ChartPoint",
    "Clock",
    "DrawdownResult",
    "FixedClock",
    "FundDataError",
    "FundEstimate",
    "FundHistory",
    "IndicatorBundle",
    "MemoryStore",
    "Perspective",
    "PerspectiveSignals",
    "PreviousDayChange",
    "Quadrant",
    "QuadrantPoint",
    "RawPoint",
    "RedisStore",
    "Series",
    "Settings",
    "SupportResistance",
    "SystemClock",
    "Trend",
    "UpstreamFetchError",
    "cache_key",
    "get_logger",
    "load_settings",
    "make_store",
    "setup_logging",
]
