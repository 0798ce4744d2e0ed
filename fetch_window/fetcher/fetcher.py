# fetch_window/fetcher/fetcher.py
"""
Fetcher module: the single-request primitive used by the scheduler.

Supports ``http``/``https`` through a shared aiohttp session and local
resources given as ``file://`` URIs or plain filesystem paths.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from aiohttp import ClientError, ClientSession, ClientTimeout

from fetch_window.config import FetcherConfig
from fetch_window.errors import FetchError
from fetch_window.fetcher.models import Locator
from fetch_window.logger import get_logger
from fetch_window.utils import locator_scheme

__all__ = ("Fetcher",)

_HTTP_SCHEMES = ("http", "https")


class Fetcher:
    """Fetches one locator per call; safe to call concurrently."""

    def __init__(
        self,
        config: Optional[FetcherConfig] = None,
        *,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config or FetcherConfig()
        self.session = session
        self._owns_session = session is None
        self.logger = get_logger("fetcher")

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            timeout = ClientTimeout(total=self.config.timeout)
            self.session = ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, locator: Locator) -> str:
        """Return the resource content decoded as text."""
        return await self._get(locator, binary=False)

    async def fetch_bytes(self, locator: Locator) -> bytes:
        """Return the raw resource content."""
        return await self._get(locator, binary=True)

    async def _get(self, locator: Locator, *, binary: bool):
        scheme = locator_scheme(locator)
        self.logger.debug("GET %s (binary=%s)", locator, binary)
        if scheme in _HTTP_SCHEMES:
            return await self._get_http(locator, binary=binary)
        if scheme == "file":
            return await self._get_file(locator, binary=binary)
        raise FetchError(locator, f"unsupported scheme {scheme!r}")

    async def _get_http(self, url: str, *, binary: bool):
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                if resp.status >= 400:
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                if binary:
                    return await resp.read()
                return await resp.text()
        except FetchError:
            raise
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "request timed out") from exc
        except UnicodeDecodeError as exc:
            raise FetchError(url, f"cannot decode body: {exc.reason}") from exc
        except ClientError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

    async def _get_file(self, locator: Locator, *, binary: bool):
        path = self._local_path(locator)
        try:
            if binary:
                return await asyncio.to_thread(path.read_bytes)
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FetchError(locator, f"cannot decode file: {exc.reason}") from exc
        except OSError as exc:
            raise FetchError(locator, exc.strerror or str(exc)) from exc

    @staticmethod
    def _local_path(locator: Locator) -> Path:
        parsed = urlparse(locator)
        if parsed.scheme.lower() == "file":
            return Path(url2pathname(parsed.path))
        return Path(locator).expanduser()
