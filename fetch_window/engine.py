# File: fetch_window/engine.py
"""fetch_window.engine: caller-facing operations built on the scheduler and the fetcher.

Every operation exists twice: a coroutine (``*_async``) for callers that
already run an event loop, and a synchronous wrapper that drives it with
:func:`asyncio.run`.

``fetch_all`` returns outcomes in *settlement* order: whichever fetch
finished first comes first. Pass ``ordered=True`` (or sort by
``outcome.index``) when input order matters.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional, Union

from fetch_window.config import FetcherConfig
from fetch_window.errors import AggregateFailure, FetchError
from fetch_window.fetcher.fetcher import Fetcher
from fetch_window.fetcher.models import FetchFunc, Locator, Outcome
from fetch_window.fetcher.scheduler import WindowScheduler, validate_limit
from fetch_window.hashing import check_algorithm, digest
from fetch_window.logger import logger

__all__ = [
    "Engine",
    "fetch_all",
    "fetch_all_async",
    "fetch_all_sequential",
    "fetch_all_sequential_async",
    "fetch_and_hash",
    "fetch_and_hash_async",
    "hash_all",
    "hash_all_async",
]


def _finish(outcomes: List[Outcome], *, raise_on_failure: bool, ordered: bool) -> List[Outcome]:
    # first to settle, whatever ordering was requested
    first = next((o for o in outcomes if not o.ok), None)
    if ordered:
        outcomes = sorted(outcomes, key=lambda o: o.index)
    if raise_on_failure and first is not None:
        raise AggregateFailure(first, outcomes) from first.error
    return outcomes


async def _run_window(
    locators: List[Locator],
    limit: int,
    fetch: Optional[FetchFunc],
    config: FetcherConfig,
    *,
    binary: bool = False,
) -> List[Outcome]:
    if fetch is not None:
        return await WindowScheduler(fetch, limit, timeout=config.timeout).run(locators)
    async with Fetcher(config) as fetcher:
        primitive = fetcher.fetch_bytes if binary else fetcher.fetch
        return await WindowScheduler(primitive, limit, timeout=config.timeout).run(locators)


async def fetch_all_async(
    locators: Iterable[Locator],
    limit: int,
    *,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
    raise_on_failure: bool = False,
    ordered: bool = False,
) -> List[Outcome]:
    """Fetch every locator with at most *limit* requests in flight.

    Failed fetches appear as :class:`Failure` outcomes. With
    ``raise_on_failure`` the run still completes, then raises
    :class:`AggregateFailure` carrying all outcomes.
    """
    validate_limit(limit)
    config = config or FetcherConfig()
    items = list(locators)
    outcomes = await _run_window(items, limit, fetch, config)
    return _finish(outcomes, raise_on_failure=raise_on_failure, ordered=ordered)


def fetch_all(
    locators: Iterable[Locator],
    limit: int,
    *,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
    raise_on_failure: bool = False,
    ordered: bool = False,
) -> List[Outcome]:
    """Synchronous :func:`fetch_all_async`; returns once every outcome is known."""
    validate_limit(limit)
    return asyncio.run(
        fetch_all_async(
            locators,
            limit,
            config=config,
            fetch=fetch,
            raise_on_failure=raise_on_failure,
            ordered=ordered,
        )
    )


async def fetch_all_sequential_async(
    locators: Iterable[Locator],
    *,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
) -> List[Union[str, bytes]]:
    """Fetch strictly one at a time, in input order; the first failure raises FetchError."""
    config = config or FetcherConfig()
    items = list(locators)

    async def _loop(primitive: FetchFunc) -> List[Union[str, bytes]]:
        contents: List[Union[str, bytes]] = []
        for locator in items:
            try:
                contents.append(await primitive(locator))
            except FetchError:
                raise
            except Exception as exc:
                raise FetchError(locator, f"{type(exc).__name__}: {exc}") from exc
        return contents

    if fetch is not None:
        return await _loop(fetch)
    async with Fetcher(config) as fetcher:
        return await _loop(fetcher.fetch)


def fetch_all_sequential(
    locators: Iterable[Locator],
    *,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
) -> List[Union[str, bytes]]:
    """Synchronous :func:`fetch_all_sequential_async`."""
    return asyncio.run(fetch_all_sequential_async(locators, config=config, fetch=fetch))


async def fetch_and_hash_async(
    locator: Locator,
    *,
    algorithm: Optional[str] = None,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
) -> str:
    """Fetch the raw bytes of *locator* and return their hex digest (MD5 by default)."""
    config = config or FetcherConfig()
    name = check_algorithm(algorithm or config.hash_algorithm)
    if fetch is not None:
        data = await fetch(locator)
    else:
        async with Fetcher(config) as fetcher:
            data = await fetcher.fetch_bytes(locator)
    return digest(data, name)


def fetch_and_hash(
    locator: Locator,
    *,
    algorithm: Optional[str] = None,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
) -> str:
    """Synchronous :func:`fetch_and_hash_async`."""
    return asyncio.run(fetch_and_hash_async(locator, algorithm=algorithm, config=config, fetch=fetch))


async def hash_all_async(
    locators: Iterable[Locator],
    limit: int,
    *,
    algorithm: Optional[str] = None,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
    ordered: bool = False,
) -> List[Outcome]:
    """Run fetch-and-hash for every locator through the window; ``Content.content`` is the digest."""
    validate_limit(limit)
    config = config or FetcherConfig()
    name = check_algorithm(algorithm or config.hash_algorithm)
    items = list(locators)

    async def _hash_with(primitive: FetchFunc) -> List[Outcome]:
        async def _one(locator: Locator) -> str:
            return digest(await primitive(locator), name)

        return await WindowScheduler(_one, limit, timeout=config.timeout).run(items)

    if fetch is not None:
        outcomes = await _hash_with(fetch)
    else:
        async with Fetcher(config) as fetcher:
            outcomes = await _hash_with(fetcher.fetch_bytes)
    return _finish(outcomes, raise_on_failure=False, ordered=ordered)


def hash_all(
    locators: Iterable[Locator],
    limit: int,
    *,
    algorithm: Optional[str] = None,
    config: Optional[FetcherConfig] = None,
    fetch: Optional[FetchFunc] = None,
    ordered: bool = False,
) -> List[Outcome]:
    """Synchronous :func:`hash_all_async`."""
    validate_limit(limit)
    return asyncio.run(
        hash_all_async(locators, limit, algorithm=algorithm, config=config, fetch=fetch, ordered=ordered)
    )


class Engine:
    """Фасад для CLI и тестов: хранит конфиг и запускает операции загрузки."""

    def __init__(self, config: Optional[FetcherConfig] = None) -> None:
        self.config = config or FetcherConfig()

    def fetch_all(
        self,
        locators: Iterable[Locator],
        limit: Optional[int] = None,
        *,
        raise_on_failure: Optional[bool] = None,
        ordered: Optional[bool] = None,
    ) -> List[Outcome]:
        """Запускает оконную загрузку; недостающие параметры берутся из конфига."""
        limit = self.config.max_concurrency if limit is None else limit
        items = list(locators)
        logger.info("Fetching %d locators (limit=%s)…", len(items), limit)
        try:
            return fetch_all(
                items,
                limit,
                config=self.config,
                raise_on_failure=self.config.raise_on_failure if raise_on_failure is None else raise_on_failure,
                ordered=self.config.ordered if ordered is None else ordered,
            )
        except AggregateFailure as exc:
            logger.error("Fetch run failed: %s", exc)
            raise

    def fetch_all_sequential(self, locators: Iterable[Locator]) -> List[Union[str, bytes]]:
        """Последовательная загрузка в порядке входа (для сравнения производительности)."""
        return fetch_all_sequential(locators, config=self.config)

    def fetch_and_hash(self, locator: Locator, algorithm: Optional[str] = None) -> str:
        return fetch_and_hash(locator, algorithm=algorithm, config=self.config)

    def hash_all(
        self,
        locators: Iterable[Locator],
        limit: Optional[int] = None,
        algorithm: Optional[str] = None,
        *,
        ordered: Optional[bool] = None,
    ) -> List[Outcome]:
        limit = self.config.max_concurrency if limit is None else limit
        return hash_all(
            locators,
            limit,
            algorithm=algorithm,
            config=self.config,
            ordered=self.config.ordered if ordered is None else ordered,
        )
