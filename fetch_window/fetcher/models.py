# fetch_window/fetcher/models.py
"""
Data models for the fetch scheduler.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from fetch_window.errors import FetchError

Locator = str
FetchFunc = Callable[[Locator], Awaitable[Union[str, bytes]]]


@dataclass(slots=True, frozen=True)
class Content:
    """Successful outcome: the locator, its input position and the fetched content."""

    locator: Locator
    index: int
    content: Union[str, bytes]

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class Failure:
    """Failed outcome: the locator, its input position and the cause."""

    locator: Locator
    index: int
    error: FetchError

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Content, Failure]


@dataclass(slots=True)
class SchedulerStats:
    """Counters collected during one scheduler run."""

    admitted: int = 0
    replenished: int = 0
    settled: int = 0
    failed: int = 0
    peak_in_flight: int = 0
