"""
Batched retrieval with fixed concurrency windows and pacing.

    result = await fetch_batch(codes, client.fetch_fund_info)
    estimates = await fetch_all(codes, client.fetch_fund_info)

Codes are split into windows of ``window_size``.  All fetches in a
window run concurrently; the next window starts only after every fetch
in the current one has settled, with a ``delay`` pause in between (not
after the last window).  That pause is the only back-pressure toward
the upstream provider.

A fetch that raises or returns ``None`` is logged and recorded as failed;
it never aborts its window or the batch.  There is no cancellation and
no per-fetch timeout beyond the fetcher's own.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from fund_lib.core.config import DEFAULT_BATCH_DELAY_MS, DEFAULT_BATCH_SIZE
from fund_lib.core.models import BatchResult

logger = logging.getLogger("batch")

T = TypeVar("T")

FetchOne = Callable[[str], Awaitable[T | None]]
Sleep = Callable[[float], Awaitable[None]]


def _windows(codes: list[str], size: int) -> list[list[str]]:
    return [codes[i : i + size] for i in range(0, len(codes), size)]


async def _settle(code: str, fetch_one: FetchOne, label: str) -> tuple[str, object | None, bool]:
    try:
        payload = await fetch_one(code)
    except Exception as exc:
        logger.warning("[%s] fetch failed for %s: %s", label, code, exc)
        return code, None, False
    if payload is None:
        logger.debug("[%s] no data for %s", label, code)
        return code, None, False
    return code, payload, True


async def fetch_batch(
    codes: Iterable[str],
    fetch_one: FetchOne,
    *,
    window_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY_MS / 1000.0,
    label: str = "batch",
    sleep: Sleep = asyncio.sleep,
) -> BatchResult:
    """Fetch every code in paced windows and report per-code outcomes."""
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    unique = list(dict.fromkeys(codes))
    windows = _windows(unique, window_size)
    result: BatchResult = BatchResult()

    for i, window in enumerate(windows):
        settled = await asyncio.gather(*(_settle(code, fetch_one, label) for code in window))
        for code, payload, ok in settled:
            if ok:
                result.results[code] = payload
            else:
                result.failed.append(code)

        if i < len(windows) - 1:
            await sleep(delay)

    if result.failed:
        logger.info(
            "[%s] %d/%d fetched, failed: %s",
            label,
            len(result.results),
            len(unique),
            ", ".join(result.failed),
        )
    return result


async def fetch_all(
    codes: Iterable[str],
    fetch_one: FetchOne,
    *,
    window_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY_MS / 1000.0,
    label: str = "batch",
    sleep: Sleep = asyncio.sleep,
) -> list[T]:
    """Successful payloads only, in no guaranteed order."""
    result = await fetch_batch(
        codes, fetch_one, window_size=window_size, delay=delay, label=label, sleep=sleep
    )
    return result.successes()
