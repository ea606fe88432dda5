"""
Market compass — trend x valuation quadrants for a basket of funds.

Each fund is placed by two numbers:

  trend     — signed percent gap between MA20 and MA60 on the latest point
  position  — where the latest value sits inside the trailing-year
              low/high range, 0 (at the low) to 100 (at the high)

``classify`` maps the pair to a ``Quadrant`` (first match wins):

  trend > 0  and position <  50  → REVERSAL    rising from a cheap level
  trend > 0  and position >= 50  → MOMENTUM    rising and already expensive
  trend <= 0 and position >= 50  → CORRECTION  falling from an expensive level
  otherwise                      → WEAK        falling and cheap

``QUADRANT_LEGEND`` is the only place legend labels and colours live.
"""

import logging
from collections.abc import Iterable

import numpy as np

from fund_lib.analysis.indicators import (
    DRAWDOWN_WINDOW_DAYS,
    MA_LONG,
    MA_SHORT,
    moving_average,
    time_window,
)
from fund_lib.analysis.normalizer import DISPLAY_DECIMALS, sort_series
from fund_lib.core.models import Quadrant, QuadrantPoint, Series

logger = logging.getLogger("quadrant")

POSITION_MIDPOINT = 50.0

QUADRANT_LEGEND: dict[Quadrant, dict[str, str]] = {
    Quadrant.REVERSAL: {"label": "Golden pit (watch)", "color": "#22c55e"},
    Quadrant.MOMENTUM: {"label": "High momentum (chase)", "color": "#ef4444"},
    Quadrant.CORRECTION: {"label": "Correction (reduce)", "color": "#f59e0b"},
    Quadrant.WEAK: {"label": "Weak (wait)", "color": "#64748b"},
}


def classify(trend: float, position: float) -> Quadrant:
    if trend > 0 and position < POSITION_MIDPOINT:
        return Quadrant.REVERSAL
    if trend > 0 and position >= POSITION_MIDPOINT:
        return Quadrant.MOMENTUM
    if trend <= 0 and position >= POSITION_MIDPOINT:
        return Quadrant.CORRECTION
    return Quadrant.WEAK


def compass_metrics(series: Series) -> tuple[float, float] | None:
    """``(trend%, position%)`` for the latest point, or ``None``.

    ``None`` when either moving average is undefined, MA60 is zero, or
    the trailing-year window is flat (no range to place the value in).
    """
    series = sort_series(series)
    last = len(series) - 1
    ma_short = moving_average(series, MA_SHORT, last)
    ma_long = moving_average(series, MA_LONG, last)
    if ma_short is None or ma_long is None or ma_long == 0:
        return None

    window = time_window(series, DRAWDOWN_WINDOW_DAYS)
    values = np.fromiter((p.value for p in window), dtype=float, count=len(window))
    low, high = float(values.min()), float(values.max())
    if high == low:
        return None

    trend = (ma_short - ma_long) / ma_long * 100.0
    position = (series[-1].value - low) / (high - low) * 100.0
    return trend, position


def build_compass(entries: Iterable[tuple[str, str, Series]]) -> list[QuadrantPoint]:
    """Place each ``(code, name, series)`` entry on the compass.

    Entries whose metrics are not computable are skipped.
    """
    points: list[QuadrantPoint] = []
    for code, name, series in entries:
        metrics = compass_metrics(series)
        if metrics is None:
            logger.debug("Skipping %s on compass: not enough history", code)
            continue
        # Classify the displayed values so colour and coordinates agree.
        trend, position = (round(m, DISPLAY_DECIMALS) for m in metrics)
        points.append(
            QuadrantPoint(
                code=code,
                name=name,
                trend=trend,
                position=position,
                quadrant=classify(trend, position),
            )
        )
    return points


def legend() -> list[dict[str, str]]:
    return [
        {"quadrant": q.value, "label": meta["label"], "color": meta["color"]}
        for q, meta in QUADRANT_LEGEND.items()
    ]
