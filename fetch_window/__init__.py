# fetch_window/__init__.py
"""
FetchWindow package initializer.
Defines package version and exposes the public API.
"""
__version__ = "0.1.0"

from fetch_window.engine import (
    Engine,
    fetch_all,
    fetch_all_async,
    fetch_all_sequential,
    fetch_all_sequential_async,
    fetch_and_hash,
    fetch_and_hash_async,
    hash_all,
    hash_all_async,
)
from fetch_window.errors import AggregateFailure, ConfigurationError, FetchError, FetchWindowError
from fetch_window.fetcher import Content, Failure, Fetcher, Outcome, WindowScheduler

__all__ = [
    "__version__",
    "AggregateFailure",
    "ConfigurationError",
    "Content",
    "Engine",
    "Failure",
    "FetchError",
    "FetchWindowError",
    "Fetcher",
    "Outcome",
    "WindowScheduler",
    "fetch_all",
    "fetch_all_async",
    "fetch_all_sequential",
    "fetch_all_sequential_async",
    "fetch_and_hash",
    "fetch_and_hash_async",
    "hash_all",
    "hash_all_async",
]
