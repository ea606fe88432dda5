"""
Tests for the market compass: quadrant classification, per-fund
metrics and basket assembly.
"""

import itertools

import pytest

from fund_lib.analysis.quadrant import (
    QUADRANT_LEGEND,
    build_compass,
    classify,
    compass_metrics,
    legend,
)
from fund_lib.core.models import Quadrant


class TestClassify:
    @pytest.mark.parametrize(
        "trend, position, expected",
        [
            (2.0, 20.0, Quadrant.REVERSAL),
            (2.0, 80.0, Quadrant.MOMENTUM),
            (-2.0, 80.0, Quadrant.CORRECTION),
            (-2.0, 20.0, Quadrant.WEAK),
        ],
    )
    def test_each_quadrant(self, trend, position, expected):
        assert classify(trend, position) is expected

    def test_position_50_counts_as_high(self):
        assert classify(1.0, 50.0) is Quadrant.MOMENTUM
        assert classify(-1.0, 50.0) is Quadrant.CORRECTION

    def test_zero_trend_counts_as_falling(self):
        assert classify(0.0, 80.0) is Quadrant.CORRECTION
        assert classify(0.0, 20.0) is Quadrant.WEAK
        assert classify(0.0, 50.0) is Quadrant.CORRECTION

    def test_total_over_grid(self):
        trends = [-100.0, -0.01, 0.0, 0.01, 100.0]
        positions = [0.0, 49.99, 50.0, 50.01, 100.0]
        seen = {classify(t, p) for t, p in itertools.product(trends, positions)}
        assert seen == set(Quadrant)

    def test_legend_covers_every_quadrant(self):
        assert set(QUADRANT_LEGEND) == set(Quadrant)
        assert [item["quadrant"] for item in legend()] == [q.value for q in QUADRANT_LEGEND]


class TestCompassMetrics:
    def test_rising_fund(self, rising_series):
        trend, position = compass_metrics(rising_series)
        assert trend > 0
        assert 50 <= position <= 100

    def test_falling_fund(self, falling_series):
        trend, position = compass_metrics(falling_series)
        assert trend < 0
        assert 0 <= position < 50

    def test_needs_ma60(self, make_series):
        assert compass_metrics(make_series([1.0 + i * 0.01 for i in range(59)])) is None

    def test_flat_window_not_computable(self, make_series):
        assert compass_metrics(make_series([1.0] * 80)) is None

    def test_empty(self):
        assert compass_metrics([]) is None


class TestBuildCompass:
    def test_places_funds_and_skips_short_history(self, rising_series, falling_series, make_series):
        points = build_compass(
            [
                ("000001", "Growth", rising_series),
                ("000002", "Bond", falling_series),
                ("000009", "New", make_series([1.0, 1.1])),
            ]
        )
        by_code = {p.code: p for p in points}
        assert set(by_code) == {"000001", "000002"}
        assert by_code["000001"].quadrant is Quadrant.MOMENTUM
        assert by_code["000002"].quadrant is Quadrant.WEAK
        assert by_code["000001"].name == "Growth"

    def test_rounded_and_consistent_with_classify(self, nav_series):
        (point,) = build_compass([("000003", "Index", nav_series)])
        assert point.trend == round(point.trend, 2)
        assert point.position == round(point.position, 2)
        assert point.quadrant is classify(point.trend, point.position)

    def test_to_dict(self, rising_series):
        (point,) = build_compass([("000001", "Growth", rising_series)])
        data = point.to_dict()
        assert data["quadrant"] == "Momentum"
        assert set(data) == {"code", "name", "trend", "position", "quadrant"}
