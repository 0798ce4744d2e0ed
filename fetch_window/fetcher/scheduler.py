# === FILE: fetch_window/fetcher/scheduler.py ===
"""
Sliding-window scheduler: fetches every locator with at most ``limit``
requests in flight, starting the next one as soon as any running fetch settles.
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Tuple

from fetch_window.errors import ConfigurationError, FetchError
from fetch_window.fetcher.models import Content, Failure, FetchFunc, Locator, Outcome, SchedulerStats
from fetch_window.logger import get_logger

__all__ = ("WindowScheduler", "validate_limit")

_Entry = Tuple[int, Locator]


def validate_limit(limit: object) -> int:
    """Return *limit* if it is a usable window size, else raise ConfigurationError."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ConfigurationError(f"limit must be an integer, got {limit!r}")
    if limit < 1:
        raise ConfigurationError(f"limit must be >= 1, got {limit}")
    return limit


class WindowScheduler:
    """
    Bounded-concurrency fetch scheduler.

    The window is filled with up to ``limit`` fetches, then the scheduler waits
    for *any* of them to settle (``asyncio.FIRST_COMPLETED``), records the
    outcome and admits the next pending locator in input order. A failing fetch
    frees its slot exactly like a successful one.

    Outcomes are returned in **settlement order**, not input order; every
    outcome carries ``index`` (its input position) so callers can re-sort.
    """

    def __init__(self, fetch: FetchFunc, limit: int, *, timeout: Optional[float] = None) -> None:
        self.limit = validate_limit(limit)
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {timeout}")
        self._fetch = fetch
        self.timeout = timeout
        self.stats = SchedulerStats()
        self.logger = get_logger("scheduler")

    async def run(self, locators: Iterable[Locator]) -> List[Outcome]:
        """Fetch all *locators*; returns one outcome per input entry."""
        self.stats = SchedulerStats()
        pending: Deque[_Entry] = deque(enumerate(locators))
        in_flight: Dict[asyncio.Task[Outcome], _Entry] = {}
        outcomes: List[Outcome] = []
        total = len(pending)
        start = time.monotonic()

        def admit() -> None:
            index, locator = pending.popleft()
            task = asyncio.create_task(self._settle(index, locator))
            in_flight[task] = (index, locator)
            self.stats.admitted += 1
            self.stats.peak_in_flight = max(self.stats.peak_in_flight, len(in_flight))
            self.logger.debug("Admitted #%d %s (%d in flight)", index, locator, len(in_flight))

        while pending and len(in_flight) < self.limit:
            admit()

        try:
            while in_flight:
                done, _ = await asyncio.wait(in_flight.keys(), return_when=asyncio.FIRST_COMPLETED)
                # simultaneous settlements are recorded in input order
                for task in sorted(done, key=lambda t: in_flight[t][0]):
                    index, locator = in_flight.pop(task)
                    outcome = self._collect(task, index, locator)
                    outcomes.append(outcome)
                    self.stats.settled += 1
                    if not outcome.ok:
                        self.stats.failed += 1
                    if pending:
                        admit()
                        self.stats.replenished += 1
        except asyncio.CancelledError:
            pending.clear()
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            self.logger.warning(
                "Fetch run cancelled: %d settled, %d in flight aborted", len(outcomes), len(in_flight)
            )
            raise

        duration = time.monotonic() - start
        self.logger.info(
            "Settled %d/%d locators in %.2f s (limit=%d, failed=%d)",
            len(outcomes), total, duration, self.limit, self.stats.failed,
        )
        return outcomes

    async def _settle(self, index: int, locator: Locator) -> Outcome:
        """Run one fetch and convert whatever happens into an Outcome."""
        try:
            if self.timeout is None:
                content = await self._fetch(locator)
            else:
                content = await asyncio.wait_for(self._fetch(locator), timeout=self.timeout)
        except FetchError as exc:
            return Failure(locator, index, exc)
        except Exception as exc:
            if isinstance(exc, asyncio.TimeoutError) and self.timeout is not None:
                reason = f"timed out after {self.timeout} s"
            else:
                reason = f"{type(exc).__name__}: {exc}"
            error = FetchError(locator, reason)
            error.__cause__ = exc
            return Failure(locator, index, error)
        return Content(locator, index, content)

    def _collect(self, task: asyncio.Task[Outcome], index: int, locator: Locator) -> Outcome:
        if task.cancelled():
            outcome: Outcome = Failure(locator, index, FetchError(locator, "cancelled"))
        else:
            outcome = task.result()
        if outcome.ok:
            self.logger.debug("Settled #%d %s", index, locator)
        else:
            self.logger.warning("Failed %s: %s", locator, outcome.error.reason)
        return outcome
