"""
Indicator library for NAV series.

Every function here is pure and total: undersized input returns ``None``
("not computable"), degenerate input (zero base, zero level) returns
``None`` or a ``None`` field, and nothing raises or returns NaN.

Indicators run on the raw, un-normalised series.  Callers that plot them
over a percentage chart re-project the levels with
``normalizer.percent_of_base`` using the chart's own baseline.

Two windowing strategies are used and must not be mixed up:
  - ``time_window``  — trailing calendar span (drawdown, year high)
  - ``count_window`` — trailing number of points (support/resistance, RSI,
                       volatility)
"""

import numpy as np
import pandas as pd

from fund_lib.core.models import DrawdownResult, Series, SupportResistance, Trend

RSI_PERIOD = 14
VOLATILITY_PERIOD = 20
DRAWDOWN_WINDOW_DAYS = 365
SUPPORT_LOOKBACK_POINTS = 60
MA_SHORT = 20
MA_LONG = 60

_MS_PER_DAY = 86_400_000


# ---------------------------------------------------------------------------
# Windowing
# ---------------------------------------------------------------------------


def time_window(series: Series, days: int) -> Series:
    """Points within *days* calendar days of the last point.

    A series spanning less than *days* comes back whole.
    """
    if not series:
        return []
    cutoff = series[-1].time - days * _MS_PER_DAY
    return [p for p in series if p.time >= cutoff]


def count_window(series: Series, points: int) -> Series:
    """The trailing *points* entries (fewer if the series is shorter)."""
    if points <= 0:
        return []
    return list(series[-points:])


def _values(series: Series) -> np.ndarray:
    return np.fromiter((p.value for p in series), dtype=float, count=len(series))


# ---------------------------------------------------------------------------
# Moving averages
# ---------------------------------------------------------------------------


def moving_average(series: Series, window_size: int, index: int) -> float | None:
    """Mean of the *window_size* values ending at *index* (inclusive).

    No partial windows: ``None`` until *window_size* points are available.
    """
    if window_size < 1 or index < 0 or index >= len(series):
        return None
    if index < window_size - 1:
        return None
    window = series[index - window_size + 1 : index + 1]
    return float(np.mean(_values(window)))


def moving_average_series(series: Series, window_size: int) -> list[float | None]:
    """``moving_average`` evaluated at every index of *series*."""
    if not series:
        return []
    if window_size < 1:
        return [None] * len(series)
    rolled = pd.Series(_values(series)).rolling(window_size, min_periods=window_size).mean()
    return [None if pd.isna(v) else float(v) for v in rolled]


# ---------------------------------------------------------------------------
# Oscillators
# ---------------------------------------------------------------------------


def rsi(series: Series, period: int = RSI_PERIOD) -> float | None:
    """Relative Strength Index over the trailing ``period + 1`` points.

    Simple averages of gains and losses across the *period* deltas (no
    Wilder smoothing).  No losses → 100, checked before no gains → 0,
    so a flat window reads 100.
    """
    if period < 1 or len(series) < period + 1:
        return None

    deltas = np.diff(_values(count_window(series, period + 1)))
    gains = float(deltas[deltas > 0].sum())
    losses = float(-deltas[deltas < 0].sum())

    if losses == 0:
        return 100.0
    if gains == 0:
        return 0.0

    avg_gain = gains / period
    avg_loss = losses / period
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def volatility(series: Series, period: int = VOLATILITY_PERIOD) -> float | None:
    """Standard deviation of daily fractional returns, in percent.

    Uses the trailing *period* deltas and population variance (ddof=0).
    ``None`` with fewer than ``period + 1`` points or a zero value to
    divide by.
    """
    if period < 1 or len(series) < period + 1:
        return None

    values = _values(count_window(series, period + 1))
    prev = values[:-1]
    if np.any(prev == 0):
        return None

    returns = np.diff(values) / prev
    return float(np.sqrt(np.var(returns)) * 100.0)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------


def drawdown_from_high(series: Series, days: int = DRAWDOWN_WINDOW_DAYS) -> DrawdownResult | None:
    """Decline of the latest value from the trailing-year high.

    ``max_drawdown`` is ``(current - high) / high * 100``: never positive,
    exactly 0 when the latest value is the window high.  A non-positive
    high leaves ``max_drawdown`` as ``None``.
    """
    window = time_window(series, days)
    if not window:
        return None

    values = _values(window)
    high = float(values.max())
    current = float(values[-1])
    if high <= 0:
        return DrawdownResult(max_drawdown=None, high=high, current=current)
    return DrawdownResult(max_drawdown=(current - high) / high * 100.0, high=high, current=current)


def support_resistance(series: Series, lookback_points: int = SUPPORT_LOOKBACK_POINTS) -> SupportResistance | None:
    """Min / max over the trailing *lookback_points* points."""
    window = count_window(series, lookback_points)
    if not window:
        return None
    values = _values(window)
    return SupportResistance(support=float(values.min()), resistance=float(values.max()))


def distance_to_level(current: float, level: float) -> float | None:
    """Signed percent distance from *level*: positive above, negative below."""
    if level == 0:
        return None
    return (current - level) / level * 100.0


def trend_classification(ma20: float | None, ma60: float | None) -> Trend:
    """Bullish only when both averages exist and the short one is above the long one."""
    if ma20 is not None and ma60 is not None and ma20 > ma60:
        return Trend.BULLISH
    return Trend.BEARISH
