"""
Exception hierarchy for fund data retrieval.

Only upstream retrieval raises.  Indicator math never raises on
degenerate or undersized input; it returns ``None`` instead.
"""


class FundDataError(Exception):
    """Base class for every error raised by fund_lib."""


class UpstreamFetchError(FundDataError):
    """A fetch from the quote provider failed.

    Covers timeouts, non-2xx responses, malformed and empty payloads.
    Callers treat all of them the same way: no data for this attempt.
    """

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"{code}: {reason}")
