"""
Plain data records shared by the analysis and service layers.

Every record is a frozen dataclass: the display layer receives these as
immutable values and renders them with ``to_dict()``.  Optional fields are
``None`` when an indicator is not computable (too little history or a
degenerate input such as a zero base value).
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawPoint:
    """One NAV observation: epoch-millis timestamp and value."""

    time: int
    value: float


Series = list[RawPoint]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Trend(str, Enum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"


class Quadrant(str, Enum):
    """Trend x valuation-position categories for the compass view."""

    REVERSAL = "Reversal"      # rising, still cheap
    MOMENTUM = "Momentum"      # rising, already expensive
    CORRECTION = "Correction"  # falling from an expensive level
    WEAK = "Weak"              # falling and cheap


# ---------------------------------------------------------------------------
# Indicator results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrawdownResult:
    max_drawdown: float | None  # None when the window high is zero
    high: float
    current: float


@dataclass(frozen=True)
class SupportResistance:
    support: float
    resistance: float


@dataclass(frozen=True)
class IndicatorBundle:
    """Daily analysis snapshot for one instrument.

    Written once per (code, local day) by the analysis cache and replaced,
    never mutated, by the next day's computation.
    """

    max_drawdown: float
    year_high: float
    current_val: float
    rsi: float | None
    volatility: float | None
    last_updated: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxDrawdown": self.max_drawdown,
            "yearHigh": self.year_high,
            "currentVal": self.current_val,
            "rsi": self.rsi,
            "volatility": self.volatility,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndicatorBundle":
        return cls(
            max_drawdown=float(data["maxDrawdown"]),
            year_high=float(data["yearHigh"]),
            current_val=float(data["currentVal"]),
            rsi=None if data.get("rsi") is None else float(data["rsi"]),
            volatility=None if data.get("volatility") is None else float(data["volatility"]),
            last_updated=int(data["lastUpdated"]),
        )


@dataclass(frozen=True)
class QuadrantPoint:
    code: str
    name: str
    trend: float
    position: float
    quadrant: Quadrant

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["quadrant"] = self.quadrant.value
        return d


# ---------------------------------------------------------------------------
# Perspective (single-fund detail view)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChartPoint:
    time: int
    date: str
    value: float
    ma20: float | None
    ma60: float | None
    original_value: float


@dataclass(frozen=True)
class PerspectiveSignals:
    trend: Trend
    is_bullish: bool
    support: float
    resistance: float
    norm_support: float | None
    norm_resistance: float | None
    dist_to_support: float | None  # +2.5 means 2.5% above support
    dist_to_resist: float | None   # -5.0 means 5% below resistance
    current_nav: float


@dataclass(frozen=True)
class Perspective:
    range: str
    chart: list[ChartPoint]
    signals: PerspectiveSignals | None

    def to_dict(self) -> dict[str, Any]:
        signals = None
        if self.signals is not None:
            signals = asdict(self.signals)
            signals["trend"] = self.signals.trend.value
        return {
            "range": self.range,
            "chart": [asdict(p) for p in self.chart],
            "signals": signals,
        }


# ---------------------------------------------------------------------------
# Upstream payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FundEstimate:
    """Intraday valuation estimate for one fund."""

    code: str
    name: str
    nav: float | None          # last published unit NAV
    nav_date: str
    est_change: float | None   # estimated change today, percent
    est_time: str
    valuation: float | None    # estimated unit value right now

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PreviousDayChange:
    code: str
    prev_date: str
    prev_change: float | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FundHistory:
    ac_trend: Series = field(default_factory=list)   # cumulative NAV
    net_trend: Series = field(default_factory=list)  # unit NAV


# ---------------------------------------------------------------------------
# Batch retrieval
# ---------------------------------------------------------------------------


@dataclass
class BatchResult(Generic[T]):
    """Per-code outcome of a batched fetch.

    ``results`` holds every payload that came back, empty ones included;
    ``failed`` lists the codes whose fetch raised or returned nothing.
    """

    results: dict[str, T] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    def successes(self) -> list[T]:
        return list(self.results.values())
