"""
Composite analysis built from the indicator library.

    compute_bundle(series, now_ms)          → IndicatorBundle | None
    build_perspective(series, range, now)   → Perspective

``compute_bundle`` is what the analysis cache stores once per fund per
day.  ``build_perspective`` feeds the single-fund detail view: the chart
is rebased to percent returns for the selected range, while moving
averages and support/resistance are computed on the full raw series
first and only then projected onto the chart's baseline.
"""

from datetime import datetime

from fund_lib.analysis.indicators import (
    MA_LONG,
    MA_SHORT,
    distance_to_level,
    drawdown_from_high,
    moving_average_series,
    rsi,
    support_resistance,
    trend_classification,
    volatility,
)
from fund_lib.analysis.normalizer import (
    DISPLAY_DECIMALS,
    FALLBACK_POINTS,
    normalize,
    percent_of_base,
    range_start,
    round_series,
    sort_series,
)
from fund_lib.core.models import (
    ChartPoint,
    IndicatorBundle,
    Perspective,
    PerspectiveSignals,
    Series,
    Trend,
)

# Distances to support/resistance are shown with one decimal.
DISTANCE_DECIMALS = 1


def _round(value: float | None, digits: int = DISPLAY_DECIMALS) -> float | None:
    return None if value is None else round(value, digits)


def compute_bundle(series: Series, now_ms: int) -> IndicatorBundle | None:
    """Full daily indicator bundle for one fund, or ``None`` if not computable.

    ``None`` for an empty series or a non-positive trailing-year high;
    RSI and volatility may individually be ``None`` on short histories.
    """
    series = sort_series(series)
    drawdown = drawdown_from_high(series)
    if drawdown is None or drawdown.max_drawdown is None:
        return None

    return IndicatorBundle(
        max_drawdown=round(drawdown.max_drawdown, DISPLAY_DECIMALS),
        year_high=drawdown.high,
        current_val=drawdown.current,
        rsi=_round(rsi(series)),
        volatility=_round(volatility(series)),
        last_updated=now_ms,
    )


def build_perspective(series: Series, range_key: str, now: datetime) -> Perspective:
    """Chart data and trading signals for one fund over a view range.

    Raises ``ValueError`` for an unknown *range_key*; an empty series
    gives an empty chart with no signals.
    """
    window_start = range_start(range_key, now)
    series = sort_series(series)
    if not series:
        return Perspective(range=range_key, chart=[], signals=None)

    ma20 = moving_average_series(series, MA_SHORT)
    ma60 = moving_average_series(series, MA_LONG)

    rebased = normalize(series, window_start, FALLBACK_POINTS)

    # A zero base leaves the chart empty and the projected levels undefined.
    chart: list[ChartPoint] = []
    base = 0.0
    if rebased is not None:
        # The window (or its fallback) is always a suffix of the sorted series.
        offset = len(series) - len(rebased)
        base = series[offset].value
        tz = now.tzinfo
        for i, point in enumerate(round_series(rebased), start=offset):
            chart.append(
                ChartPoint(
                    time=point.time,
                    date=datetime.fromtimestamp(point.time / 1000, tz=tz).date().isoformat(),
                    value=point.value,
                    ma20=_round(percent_of_base(ma20[i], base)),
                    ma60=_round(percent_of_base(ma60[i], base)),
                    original_value=series[i].value,
                )
            )

    levels = support_resistance(series)
    current = series[-1].value
    trend = trend_classification(ma20[-1], ma60[-1])

    signals = PerspectiveSignals(
        trend=trend,
        is_bullish=trend is Trend.BULLISH,
        support=levels.support,
        resistance=levels.resistance,
        norm_support=_round(percent_of_base(levels.support, base)),
        norm_resistance=_round(percent_of_base(levels.resistance, base)),
        dist_to_support=_round(distance_to_level(current, levels.support), DISTANCE_DECIMALS),
        dist_to_resist=_round(distance_to_level(current, levels.resistance), DISTANCE_DECIMALS),
        current_nav=current,
    )
    return Perspective(range=range_key, chart=chart, signals=signals)
