"""
Runtime configuration read from environment variables.

    FUND_TIMEZONE            — zone used for calendar days and view ranges (default: Asia/Shanghai)
    BATCH_SIZE               — concurrent fetches per window (default: 5)
    BATCH_DELAY_MS           — pause between windows in milliseconds (default: 100)
    HTTP_TIMEOUT             — per-request timeout in seconds (default: 10)
    EASTMONEY_FUND_URL       — real-time estimate endpoint (JSONP)
    EASTMONEY_PINGZHONG_URL  — NAV history endpoint (JS variables)
    EASTMONEY_F10_URL        — F10 JSON API root
    REDIS_URL                — analysis cache backend (empty = in-memory)
    DISABLE_REDIS            — "1" forces the in-memory cache

Settings are read once by ``load_settings()`` and passed explicitly to
the components that need them.
"""

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Shanghai"
DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY_MS = 100
DEFAULT_HTTP_TIMEOUT = 10.0

DEFAULT_FUND_URL = "http://fundgz.1234567.com.cn/js"
DEFAULT_PINGZHONG_URL = "http://fund.eastmoney.com/pingzhongdata"
DEFAULT_F10_URL = "http://api.fund.eastmoney.com/f10"

# Eastmoney rejects requests without a browser-like Referer / UA pair.
DEFAULT_HEADERS = {
    "Referer": "http://fund.eastmoney.com/",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
}


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    timezone: str = DEFAULT_TIMEZONE
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY_MS / 1000.0
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    fund_url: str = DEFAULT_FUND_URL
    pingzhong_url: str = DEFAULT_PINGZHONG_URL
    f10_url: str = DEFAULT_F10_URL
    redis_url: str = ""
    disable_redis: bool = False

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_settings() -> Settings:
    """Build a ``Settings`` snapshot from the current environment."""
    batch_size = int(os.getenv("BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))
    if batch_size < 1:
        raise ValueError(f"BATCH_SIZE must be >= 1, got {batch_size}")

    return Settings(
        timezone=os.getenv("FUND_TIMEZONE", DEFAULT_TIMEZONE),
        batch_size=batch_size,
        batch_delay=int(os.getenv("BATCH_DELAY_MS", str(DEFAULT_BATCH_DELAY_MS))) / 1000.0,
        http_timeout=float(os.getenv("HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
        fund_url=os.getenv("EASTMONEY_FUND_URL", DEFAULT_FUND_URL).rstrip("/"),
        pingzhong_url=os.getenv("EASTMONEY_PINGZHONG_URL", DEFAULT_PINGZHONG_URL).rstrip("/"),
        f10_url=os.getenv("EASTMONEY_F10_URL", DEFAULT_F10_URL).rstrip("/"),
        redis_url=os.getenv("REDIS_URL", ""),
        disable_redis=_env_flag("DISABLE_REDIS"),
    )
