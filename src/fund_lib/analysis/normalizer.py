"""
Series normalisation — turns raw NAV points into a time-ordered,
range-filtered, baseline-relative return series.

Pipeline:
  1. ``sort_series``    — ascending, unique timestamps, finite values only
  2. ``filter_window``  — keep ``time >= window_start``; if that leaves
                          nothing but history exists, keep the last N points
  3. ``normalize``      — ``100 * (value - base) / base`` against the first
                          retained point

The fallback count is always explicit.  ``FALLBACK_POINTS`` is the default
and is what the perspective chart uses.  ``SINGLE_RANGE_FALLBACK_POINTS``
is a wider tunable for callers that pass ``fallback_points`` themselves;
no view in this package uses it.

Values keep full float precision; round only at the display edge with
``round_series`` / ``DISPLAY_DECIMALS``.
"""

import math
from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from fund_lib.core.models import RawPoint, Series

FALLBACK_POINTS = 10
SINGLE_RANGE_FALLBACK_POINTS = 30
DISPLAY_DECIMALS = 2

# View range presets: key → calendar offset back from "now".
# "all" is special-cased to the same calendar day in 2000.
RANGE_OFFSETS: dict[str, pd.DateOffset] = {
    "7d": pd.DateOffset(days=7),
    "1m": pd.DateOffset(months=1),
    "3m": pd.DateOffset(months=3),
    "6m": pd.DateOffset(months=6),
    "1y": pd.DateOffset(years=1),
}
RANGE_ALL = "all"
VIEW_RANGES = (*RANGE_OFFSETS, RANGE_ALL)
DEFAULT_RANGE = "3m"
_ALL_HISTORY_YEAR = 2000


def sort_series(points: Iterable[RawPoint]) -> Series:
    """Return *points* sorted by time with duplicates and non-finite values removed.

    On duplicate timestamps the last occurrence wins, matching how the
    upstream appends same-day corrections.
    """
    by_time: dict[int, float] = {}
    for p in points:
        if p.value is None or not math.isfinite(p.value):
            continue
        by_time[int(p.time)] = float(p.value)
    return [RawPoint(t, by_time[t]) for t in sorted(by_time)]


def range_start(range_key: str, now: datetime) -> int:
    """Epoch-millis cutoff for a view range, using calendar arithmetic in *now*'s zone.

    Raises ``ValueError`` for an unknown range key.
    """
    if range_key == RANGE_ALL:
        cutoff = pd.Timestamp(now).replace(year=_ALL_HISTORY_YEAR)
    elif range_key in RANGE_OFFSETS:
        cutoff = pd.Timestamp(now) - RANGE_OFFSETS[range_key]
    else:
        raise ValueError(f"Unknown range {range_key!r}; expected one of {', '.join(VIEW_RANGES)}")
    return int(cutoff.timestamp() * 1000)


def filter_window(
    series: Series,
    window_start: int | None,
    fallback_points: int = FALLBACK_POINTS,
) -> Series:
    """Keep points at or after *window_start*.

    When the window holds no points but the series is non-empty, the last
    *fallback_points* points are returned so a view always has data when
    any history exists.
    """
    if not series:
        return []
    if window_start is None:
        return list(series)

    kept = [p for p in series if p.time >= window_start]
    if not kept:
        kept = list(series[-fallback_points:])
    return kept


def percent_of_base(value: float | None, base: float) -> float | None:
    """Express *value* as a percentage move from *base*.

    ``None`` when *value* is missing or *base* is zero.
    """
    if value is None or base == 0:
        return None
    return 100.0 * (value - base) / base


def normalize(
    series: Series,
    window_start: int | None = None,
    fallback_points: int = FALLBACK_POINTS,
) -> Series | None:
    """Filter *series* to the window and rebase it to percentage returns.

    Returns ``[]`` for an empty input and ``None`` when the first retained
    value is zero (the return series is not computable).  The first
    returned point is always exactly 0.
    """
    kept = filter_window(series, window_start, fallback_points)
    if not kept:
        return []

    base = kept[0].value
    if base == 0:
        return None
    return [RawPoint(p.time, 100.0 * (p.value - base) / base) for p in kept]


def round_series(series: Series, digits: int = DISPLAY_DECIMALS) -> Series:
    return [RawPoint(p.time, round(p.value, digits)) for p in series]
