"""
fund_lib — NAV analytics and batched retrieval for tracked funds.

    # Core infrastructure
    from fund_lib.core.config import Settings, load_settings
    from fund_lib.core.cache import MemoryStore, RedisStore, make_store
    from fund_lib.core.clock import SystemClock, FixedClock
    from fund_lib.core.logging_config import setup_logging, get_logger

    # Analysis (pure, no I/O)
    from fund_lib.analysis.normalizer import normalize, sort_series, range_start
    from fund_lib.analysis.indicators import moving_average, rsi, volatility
    from fund_lib.analysis.indicators import drawdown_from_high, support_resistance
    from fund_lib.analysis.signals import compute_bundle, build_perspective
    from fund_lib.analysis.quadrant import classify, build_compass

    # Services
    from fund_lib.services.batch import fetch_all, fetch_batch
    from fund_lib.services.analysis_cache import AnalysisCache
    from fund_lib.services.eastmoney import EastmoneyClient
    from fund_lib.services.tracker import FundTracker
    from fund_lib.services.api import create_app

Install in editable mode for development:

    pip install -e ".[test]"
"""

__version__ = "0.1.0"
