"""
Clock capability used for cache keys and view-range cutoffs.

Anything with ``now_ms()`` and ``local_date()`` works; tests pass a
fixed clock instead of ``SystemClock``.
"""

from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now_ms(self) -> int: ...

    def local_date(self) -> date: ...

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a fixed time zone (fund NAVs follow exchange-local days)."""

    def __init__(self, tz: ZoneInfo):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(tz=self.tz)

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)

    def local_date(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to one instant.  Used for replays and tests."""

    def __init__(self, at: datetime):
        if at.tzinfo is None:
            raise ValueError("FixedClock needs a tz-aware datetime")
        self.at = at

    def now(self) -> datetime:
        return self.at

    def now_ms(self) -> int:
        return int(self.at.timestamp() * 1000)

    def local_date(self) -> date:
        return self.at.date()
