# fetch_window/fetcher/__init__.py
"""Fetch primitive, outcome models and the sliding-window scheduler."""

from fetch_window.fetcher.fetcher import Fetcher
from fetch_window.fetcher.models import Content, Failure, FetchFunc, Locator, Outcome, SchedulerStats
from fetch_window.fetcher.scheduler import WindowScheduler, validate_limit

__all__ = [
    "Content",
    "Failure",
    "FetchFunc",
    "Fetcher",
    "Locator",
    "Outcome",
    "SchedulerStats",
    "WindowScheduler",
    "validate_limit",
]
