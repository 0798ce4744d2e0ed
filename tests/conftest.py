# File: tests/conftest.py
import asyncio
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from fetch_window.config import FetcherConfig
from fetch_window.errors import FetchError


class FakeFetch:
    """
    Instrumented stand-in for the fetch primitive.

    Each locator sleeps for its configured latency and returns ``content:<locator>``
    or raises FetchError when listed in *failing*. Entry/exit are recorded so tests
    can check the window bound and the admission/settlement order.
    """

    def __init__(
        self,
        latencies: Optional[Dict[str, float]] = None,
        failing: Tuple[str, ...] = (),
        default_latency: float = 0.01,
    ) -> None:
        self.latencies = latencies or {}
        self.failing = set(failing)
        self.default_latency = default_latency
        self.calls: Counter = Counter()
        self.events: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.peak = 0

    @property
    def started(self) -> List[str]:
        return [loc for kind, loc in self.events if kind == "start"]

    @property
    def finished(self) -> List[str]:
        return [loc for kind, loc in self.events if kind == "end"]

    async def __call__(self, locator: str) -> str:
        self.calls[locator] += 1
        self.events.append(("start", locator))
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.latencies.get(locator, self.default_latency))
            if locator in self.failing:
                raise FetchError(locator, "HTTP 404", status=404)
            return f"content:{locator}"
        finally:
            self.in_flight -= 1
            self.events.append(("end", locator))


@pytest.fixture()
def fake_fetch():
    """Factory: ``fake_fetch(latencies=..., failing=...)`` -> FakeFetch."""
    return FakeFetch


@pytest.fixture()
def locators_file(tmp_path) -> Path:
    """
    Create a temporary locators file with a comment and a blank line.
    """
    path = tmp_path / "locators.txt"
    path.write_text("# sample\nhttp://example.com/a\n\nhttp://example.com/b\n", encoding="utf-8")
    return path


@pytest.fixture()
def basic_config() -> FetcherConfig:
    """
    Return a basic valid FetcherConfig for engine tests.
    """
    return FetcherConfig(
        max_concurrency=2,
        timeout=2.0,
        user_agent="TestAgent/1.0",
    )
