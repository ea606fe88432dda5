"""
Tests for the batch retrieval orchestrator.

Covers:
  - windowing (5, 5, 2 for twelve codes) and pacing only between windows
  - failure isolation: raising and None-returning fetchers
  - windows never overlap (next window starts after the previous settles)
  - concurrency inside a window
  - de-duplication of codes, empty input, invalid window size
"""

import asyncio

import pytest

from fund_lib.core.models import BatchResult
from fund_lib.services.batch import fetch_all, fetch_batch

CODES = [f"{i:06d}" for i in range(1, 13)]


class _Recorder:
    """Fake fetcher + sleep that log every event in order."""

    def __init__(self, fail=(), empty=()):
        self.fail = set(fail)
        self.empty = set(empty)
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, code):
        self.events.append(("start", code))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        self.events.append(("end", code))
        if code in self.fail:
            raise RuntimeError(f"boom {code}")
        if code in self.empty:
            return None
        return {"code": code}

    async def sleep(self, seconds):
        self.events.append(("sleep", str(seconds)))

    @property
    def sleeps(self):
        return [e for e in self.events if e[0] == "sleep"]


def _run(coro):
    return asyncio.run(coro)


class TestFetchAll:
    def test_twelve_codes_two_failures(self):
        rec = _Recorder(fail={CODES[2], CODES[8]})
        results = _run(fetch_all(CODES, rec.fetch, sleep=rec.sleep))
        assert len(results) == 10
        assert {r["code"] for r in results} == set(CODES) - {CODES[2], CODES[8]}

    def test_three_windows_two_pauses(self):
        rec = _Recorder()
        _run(fetch_all(CODES, rec.fetch, delay=0.1, sleep=rec.sleep))
        assert rec.sleeps == [("sleep", "0.1"), ("sleep", "0.1")]

        # Split the event log at each pause: 5, 5 and 2 fetches
        windows, current = [], []
        for kind, code in rec.events:
            if kind == "sleep":
                windows.append(current)
                current = []
            elif kind == "start":
                current.append(code)
        windows.append(current)
        assert [len(w) for w in windows] == [5, 5, 2]

    def test_no_pause_for_single_window(self):
        rec = _Recorder()
        _run(fetch_all(CODES[:5], rec.fetch, sleep=rec.sleep))
        assert rec.sleeps == []

    def test_windows_do_not_overlap(self):
        rec = _Recorder()
        _run(fetch_all(CODES, rec.fetch, sleep=rec.sleep))
        first_sleep = rec.events.index(("sleep", "0.1"))
        before = rec.events[:first_sleep]
        assert sum(1 for e in before if e[0] == "end") == 5
        assert all(e[1] in CODES[:5] for e in before)

    def test_fetches_run_concurrently_within_window(self):
        rec = _Recorder()
        _run(fetch_all(CODES, rec.fetch, sleep=rec.sleep))
        assert rec.max_in_flight == 5

    def test_all_fail_returns_empty(self):
        rec = _Recorder(fail=set(CODES))
        assert _run(fetch_all(CODES, rec.fetch, sleep=rec.sleep)) == []

    def test_empty_input(self):
        rec = _Recorder()
        assert _run(fetch_all([], rec.fetch, sleep=rec.sleep)) == []
        assert rec.events == []

    def test_real_sleep_path(self):
        rec = _Recorder()
        results = _run(fetch_all(CODES[:7], rec.fetch, delay=0.0))
        assert len(results) == 7


class TestFetchBatch:
    def test_failed_and_empty_are_marked(self):
        rec = _Recorder(fail={CODES[0]}, empty={CODES[1]})
        result = _run(fetch_batch(CODES[:4], rec.fetch, sleep=rec.sleep))
        assert isinstance(result, BatchResult)
        assert set(result.failed) == {CODES[0], CODES[1]}
        assert set(result.results) == {CODES[2], CODES[3]}

    def test_empty_payload_counts_as_success(self):
        async def fetch(code):
            return []

        result = _run(fetch_batch(["a", "b"], fetch, sleep=_Recorder().sleep))
        assert result.results == {"a": [], "b": []}
        assert result.failed == []

    def test_duplicate_codes_fetched_once(self):
        rec = _Recorder()
        result = _run(fetch_batch(["a", "b", "a", "c", "b"], rec.fetch, sleep=rec.sleep))
        starts = [code for kind, code in rec.events if kind == "start"]
        assert starts == ["a", "b", "c"]
        assert set(result.results) == {"a", "b", "c"}

    def test_custom_window_size(self):
        rec = _Recorder()
        _run(fetch_batch(CODES, rec.fetch, window_size=4, sleep=rec.sleep))
        assert len(rec.sleeps) == 2

    def test_invalid_window_size(self):
        rec = _Recorder()
        with pytest.raises(ValueError):
            _run(fetch_batch(CODES, rec.fetch, window_size=0, sleep=rec.sleep))
