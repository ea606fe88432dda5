"""
Eastmoney fund data client.

Three upstream payloads are used:

  fundgz      ``jsonpgz({...});``            real-time valuation estimate
  pingzhong   ``var Data_ACWorthTrend = [...];`` full NAV history (JS source)
  f10/lsjz    JSON                           latest published daily change

Parsing is done by pure module-level functions (``parse_jsonp``,
``parse_pingzhong``, ``parse_lsjz``) so it can be tested without I/O.
Every transport or payload problem surfaces as ``UpstreamFetchError``;
callers treat all of them as "no data for this attempt".

Usage::

    async with EastmoneyClient(load_settings()) as client:
        est = await client.fetch_fund_info("161725")
        series = await client.fetch_raw_series("161725")
"""

import json
import logging
import re
import time
from typing import Any

import httpx

from fund_lib.analysis.normalizer import sort_series
from fund_lib.core.config import DEFAULT_HEADERS, Settings
from fund_lib.core.errors import UpstreamFetchError
from fund_lib.core.models import FundEstimate, FundHistory, PreviousDayChange, RawPoint, Series

logger = logging.getLogger("eastmoney")

_JSONP_RE = re.compile(r"jsonpgz\((.*)\);", re.DOTALL)
_AC_TREND_RE = re.compile(r"var Data_ACWorthTrend\s*=\s*(\[.*?\]);", re.DOTALL)
_NET_TREND_RE = re.compile(r"var Data_netWorthTrend\s*=\s*(\[.*?\]);", re.DOTALL)


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _to_float(raw: Any) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def parse_jsonp(text: str) -> dict[str, Any] | None:
    """Unwrap ``jsonpgz({...});``.  ``None`` when the wrapper or JSON is invalid."""
    match = _JSONP_RE.search(text)
    if not match or not match.group(1).strip():
        return None
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_estimate(data: dict[str, Any]) -> FundEstimate:
    return FundEstimate(
        code=str(data.get("fundcode", "")),
        name=str(data.get("name", "")),
        nav=_to_float(data.get("dwjz")),
        nav_date=str(data.get("jzrq", "")),
        est_change=_to_float(data.get("gszzl")),
        est_time=str(data.get("gztime", "")),
        valuation=_to_float(data.get("gsz")),
    )


def _extract_array(pattern: re.Pattern, text: str) -> list[Any]:
    match = pattern.search(text)
    if not match:
        return []
    data = json.loads(match.group(1))
    if not isinstance(data, list):
        raise ValueError("trend variable is not an array")
    return data


def parse_pingzhong(text: str) -> FundHistory:
    """Extract the cumulative and unit NAV trends from a pingzhongdata script.

    A missing variable yields an empty series; a present but malformed
    one raises ``ValueError``.
    """
    ac_raw = _extract_array(_AC_TREND_RE, text)
    net_raw = _extract_array(_NET_TREND_RE, text)

    ac_points = [
        RawPoint(int(item[0]), float(item[1]))
        for item in ac_raw
        if isinstance(item, list) and len(item) >= 2 and item[1] is not None
    ]
    net_points = [
        RawPoint(int(item["x"]), float(item["y"]))
        for item in net_raw
        if isinstance(item, dict) and item.get("x") is not None and item.get("y") is not None
    ]
    return FundHistory(ac_trend=sort_series(ac_points), net_trend=sort_series(net_points))


def parse_lsjz(code: str, payload: Any) -> PreviousDayChange | None:
    """Latest row of an F10 ``lsjz`` response.

    ``None`` when there are no rows or the payload has an unexpected shape.
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("Data")
    if not isinstance(data, dict):
        return None
    rows = data.get("LSJZList")
    if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
        return None
    item = rows[0]
    return PreviousDayChange(
        code=code,
        prev_date=str(item.get("FSRQ", "")),
        prev_change=_to_float(item.get("JZZZL")),
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class EastmoneyClient:
    """Async client for the Eastmoney fund endpoints.

    Pass *http* to share a connection pool or to inject a mock transport;
    otherwise the client owns its ``httpx.AsyncClient``.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None):
        self.settings = settings
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            timeout=settings.http_timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "EastmoneyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _get(self, code: str, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            resp = await self._http.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(code, f"{type(exc).__name__}: {exc}") from exc
        return resp

    @staticmethod
    def _cache_buster() -> dict[str, int]:
        return {"rt": int(time.time() * 1000)}

    async def fetch_fund_info(self, code: str) -> FundEstimate:
        resp = await self._get(code, f"{self.settings.fund_url}/{code}.js", self._cache_buster())
        data = parse_jsonp(resp.text)
        if not data:
            raise UpstreamFetchError(code, "invalid estimate payload")
        return parse_estimate(data)

    async def fetch_fund_history(self, code: str) -> FundHistory:
        resp = await self._get(code, f"{self.settings.pingzhong_url}/{code}.js", self._cache_buster())
        try:
            return parse_pingzhong(resp.text)
        except (ValueError, TypeError, KeyError, IndexError) as exc:
            raise UpstreamFetchError(code, f"malformed history payload: {exc}") from exc

    async def fetch_raw_series(self, code: str) -> Series:
        """Cumulative NAV history, ascending by time.  May be empty."""
        history = await self.fetch_fund_history(code)
        return history.ac_trend

    async def fetch_previous_day_change(self, code: str) -> PreviousDayChange | None:
        params = {"fundCode": code, "pageIndex": 1, "pageSize": 1}
        resp = await self._get(code, f"{self.settings.f10_url}/lsjz", params)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamFetchError(code, "invalid lsjz payload") from exc
        return parse_lsjz(code, payload)
