"""
Fund Compass JSON API
=====================
Read-only endpoints serving tracker results to the dashboard.

Endpoints:
    GET /health                          — liveness + cache backend
    GET /api/funds/estimates?codes=a,b   — real-time valuation estimates
    GET /api/funds/prev-change?codes=a,b — latest published daily change
    GET /api/funds/analysis?codes=a,b    — per-day indicator bundles
    GET /api/funds/{code}/perspective    — chart + signals for one fund (?range=3m)
    GET /api/compass?codes=a,b           — trend x position quadrants
    GET /api/compass/legend              — quadrant labels and colours

Usage (from project root):
    uvicorn fund_lib.services.api:app --host 0.0.0.0 --port 8000
"""

import json
import math
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from fund_lib.analysis.normalizer import DEFAULT_RANGE, VIEW_RANGES
from fund_lib.analysis.quadrant import legend
from fund_lib.core.config import load_settings
from fund_lib.core.errors import UpstreamFetchError
from fund_lib.core.logging_config import get_logger, setup_logging
from fund_lib.services.tracker import FundTracker

logger = get_logger("api")

# Guard against runaway query strings hammering the upstream.
MAX_CODES_PER_REQUEST = 100


# ---------------------------------------------------------------------------
# JSON encoding: inf and NaN are rendered as null
# ---------------------------------------------------------------------------


def _sanitize(obj: Any) -> Any:
    """Recursively replace non-finite floats with None."""
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    return obj


class SafeJSONResponse(JSONResponse):
    """JSONResponse that renders non-finite floats as null and keeps CJK fund names readable."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            _sanitize(content),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")


def parse_codes(raw: str) -> list[str]:
    """Split ``"a, b,,a"`` into unique, non-empty codes in first-seen order."""
    codes = list(dict.fromkeys(c.strip() for c in raw.split(",") if c.strip()))
    if len(codes) > MAX_CODES_PER_REQUEST:
        raise HTTPException(
            status_code=400,
            detail=f"At most {MAX_CODES_PER_REQUEST} codes per request, got {len(codes)}",
        )
    return codes


def _tracker(request: Request) -> FundTracker:
    return request.app.state.tracker


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(tracker: FundTracker | None = None) -> FastAPI:
    """Build the API.  Without *tracker*, one is wired from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if tracker is None:
            setup_logging(service="fund-api")
            owned = FundTracker.from_settings(load_settings())
            app.state.tracker = owned
        logger.info("api_started", cache=type(app.state.tracker.cache.store).__name__)
        try:
            yield
        finally:
            if owned is not None:
                await owned.aclose()

    app = FastAPI(
        title="Fund Compass API",
        default_response_class=SafeJSONResponse,
        lifespan=lifespan,
    )
    if tracker is not None:
        app.state.tracker = tracker

    @app.get("/health")
    def health(request: Request):
        t = _tracker(request)
        return {
            "status": "ok",
            "timestamp": t.clock.now().isoformat(),
            "cache": getattr(t.cache.store, "name", type(t.cache.store).__name__),
        }

    @app.get("/api/funds/estimates")
    async def estimates(request: Request, codes: str = Query(..., description="Comma-separated fund codes")):
        items = await _tracker(request).get_realtime_estimates(parse_codes(codes))
        return [e.to_dict() for e in items]

    @app.get("/api/funds/prev-change")
    async def previous_day_change(request: Request, codes: str = Query(...)):
        items = await _tracker(request).get_previous_day_changes(parse_codes(codes))
        return [c.to_dict() for c in items]

    @app.get("/api/funds/analysis")
    async def analysis(request: Request, codes: str = Query(...)):
        bundles = await _tracker(request).get_analysis(parse_codes(codes))
        return {code: bundle.to_dict() for code, bundle in bundles.items()}

    @app.get("/api/funds/{code}/perspective")
    async def perspective(
        request: Request, code: str, range_key: str = Query(DEFAULT_RANGE, alias="range")
    ):
        if range_key not in VIEW_RANGES:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown range {range_key!r}; expected one of {', '.join(VIEW_RANGES)}",
            )
        try:
            view = await _tracker(request).get_perspective(code, range_key)
        except UpstreamFetchError as exc:
            logger.warning("perspective_fetch_failed", code=code, reason=exc.reason)
            raise HTTPException(status_code=502, detail=f"Upstream fetch failed for {code}") from exc
        return view.to_dict()

    @app.get("/api/compass")
    async def compass(request: Request, codes: str = Query(...)):
        points = await _tracker(request).get_market_compass(parse_codes(codes))
        return [p.to_dict() for p in points]

    @app.get("/api/compass/legend")
    def compass_legend():
        return legend()

    return app


app = create_app()
