"""
fund_lib.analysis — pure NAV-series analytics (no I/O).

    from fund_lib.analysis.normalizer import normalize, sort_series, range_start
    from fund_lib.analysis.indicators import rsi, volatility, drawdown_from_high
    from fund_lib.analysis.signals import compute_bundle, build_perspective
    from fund_lib.analysis.quadrant import classify, build_compass
"""
