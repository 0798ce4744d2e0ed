# File: tests/test_engine.py
"""Tests for the caller-facing operations: fetch_all, fetch_all_sequential, fetch_and_hash."""
from __future__ import annotations

import asyncio
import hashlib
from collections import Counter
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from fetch_window.config import FetcherConfig
from fetch_window.engine import (
    Engine,
    fetch_all,
    fetch_all_async,
    fetch_all_sequential,
    fetch_all_sequential_async,
    fetch_and_hash,
    fetch_and_hash_async,
    hash_all,
)
from fetch_window.errors import AggregateFailure, ConfigurationError, FetchError
from fetch_window.fetcher.models import Content, Failure

PAGES: int = 12


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def test_server_pages(unused_tcp_port: int) -> AsyncIterator[tuple[str, dict]]:
    """Serve /page/<n> with a small latency; tracks concurrent requests."""
    app = web.Application()
    state = {"active": 0, "peak": 0, "hits": Counter()}

    async def handle_page(request):
        n = request.match_info["n"]
        state["hits"][n] += 1
        state["active"] += 1
        state["peak"] = max(state["peak"], state["active"])
        try:
            await asyncio.sleep(0.02 * (int(n) % 4 + 1))
            return web.Response(text=f"page {n}", content_type="text/plain")
        finally:
            state["active"] -= 1

    app.router.add_get("/page/{n}", handle_page)

    async for url in _serve_app(app, unused_tcp_port):
        yield url, state


# --------------------------------------------------------------------------- #
#                                  fetch_all                                  #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_fetch_all_against_server(test_server_pages):
    base, state = test_server_pages
    locators = [f"{base}/page/{i}" for i in range(PAGES)] + [f"{base}/nowhere"]

    outcomes = await fetch_all_async(locators, 3, config=FetcherConfig(timeout=5.0))

    assert len(outcomes) == PAGES + 1
    assert state["peak"] <= 3
    assert all(count == 1 for count in state["hits"].values())
    contents = {o.locator: o.content for o in outcomes if o.ok}
    assert contents == {f"{base}/page/{i}": f"page {i}" for i in range(PAGES)}
    failure = next(o for o in outcomes if not o.ok)
    assert failure.locator == f"{base}/nowhere"
    assert failure.error.status == 404


@pytest.mark.asyncio()
async def test_sequential_matches_concurrent_content(test_server_pages):
    base, _ = test_server_pages
    locators = [f"{base}/page/{i}" for i in range(6)]

    sequential = await fetch_all_sequential_async(locators)
    concurrent = await fetch_all_async(locators, 4)

    assert sequential == [f"page {i}" for i in range(6)]
    assert Counter(sequential) == Counter(o.content for o in concurrent)


def test_fetch_all_sync_with_custom_fetch(fake_fetch):
    fetch = fake_fetch(failing=("b",))
    outcomes = fetch_all(["a", "b", "c"], 2, fetch=fetch)
    assert sorted(o.locator for o in outcomes) == ["a", "b", "c"]
    assert [type(o) for o in sorted(outcomes, key=lambda o: o.index)] == [Content, Failure, Content]


def test_fetch_all_ordered(fake_fetch):
    locators = ["slow", "mid", "fast"]
    fetch = fake_fetch(latencies={"slow": 0.15, "mid": 0.1, "fast": 0.05})

    unordered = fetch_all(locators, 3, fetch=fetch)
    ordered = fetch_all(locators, 3, fetch=fake_fetch(latencies=fetch.latencies), ordered=True)

    assert [o.locator for o in unordered] == ["fast", "mid", "slow"]
    assert [o.locator for o in ordered] == locators


def test_fetch_all_raise_on_failure_runs_everything(fake_fetch):
    fetch = fake_fetch(latencies={"bad": 0.01, "ok1": 0.05, "ok2": 0.08}, failing=("bad",))

    with pytest.raises(AggregateFailure) as info:
        fetch_all(["ok1", "bad", "ok2"], 1, fetch=fetch, raise_on_failure=True)

    exc = info.value
    assert exc.first.locator == "bad"
    assert isinstance(exc.__cause__, FetchError)
    assert len(exc.outcomes) == 3
    assert sum(fetch.calls.values()) == 3
    assert sum(1 for o in exc.outcomes if o.ok) == 2


def test_fetch_all_raise_on_failure_without_failures(fake_fetch):
    outcomes = fetch_all(["a", "b"], 2, fetch=fake_fetch(), raise_on_failure=True)
    assert len(outcomes) == 2


@pytest.mark.parametrize("limit", [0, -3])
def test_fetch_all_invalid_limit(fake_fetch, limit):
    fetch = fake_fetch()
    with pytest.raises(ConfigurationError):
        fetch_all(["a"], limit, fetch=fetch)
    assert sum(fetch.calls.values()) == 0


def test_fetch_all_empty(fake_fetch):
    assert fetch_all([], 2, fetch=fake_fetch()) == []


def test_fetch_all_applies_config_timeout(fake_fetch):
    fetch = fake_fetch(latencies={"hang": 5.0})
    outcomes = fetch_all(["hang", "a"], 2, fetch=fetch, config=FetcherConfig(timeout=0.1))
    assert {o.locator: o.ok for o in outcomes} == {"hang": False, "a": True}


# --------------------------------------------------------------------------- #
#                              fetch_all_sequential                           #
# --------------------------------------------------------------------------- #


def test_sequential_preserves_input_order(fake_fetch):
    fetch = fake_fetch(latencies={"a": 0.05, "b": 0.01})
    assert fetch_all_sequential(["a", "b"], fetch=fetch) == ["content:a", "content:b"]
    assert fetch.peak == 1


def test_sequential_raises_first_failure(fake_fetch):
    fetch = fake_fetch(failing=("b",))
    with pytest.raises(FetchError) as info:
        fetch_all_sequential(["a", "b", "c"], fetch=fetch)
    assert info.value.locator == "b"
    assert "c" not in fetch.calls


# --------------------------------------------------------------------------- #
#                                  hashing                                    #
# --------------------------------------------------------------------------- #


def test_fetch_and_hash_local_file(tmp_path):
    data = b"hash me\x00\xff"
    path = tmp_path / "blob.bin"
    path.write_bytes(data)

    assert fetch_and_hash(path.as_uri()) == hashlib.md5(data).hexdigest()
    assert fetch_and_hash(str(path), algorithm="sha256") == hashlib.sha256(data).hexdigest()


def test_fetch_and_hash_uses_config_algorithm(tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"abc")
    cfg = FetcherConfig(hash_algorithm="sha1")
    assert fetch_and_hash(str(path), config=cfg) == hashlib.sha1(b"abc").hexdigest()


def test_fetch_and_hash_propagates_fetch_error(tmp_path):
    with pytest.raises(FetchError):
        fetch_and_hash(str(tmp_path / "missing.bin"))


def test_fetch_and_hash_unknown_algorithm(tmp_path):
    with pytest.raises(ConfigurationError):
        fetch_and_hash(str(tmp_path), algorithm="no-such-hash")


@pytest.mark.asyncio()
async def test_fetch_and_hash_over_http(test_server_pages):
    base, _ = test_server_pages
    digest = await fetch_and_hash_async(f"{base}/page/3")
    assert digest == hashlib.md5(b"page 3").hexdigest()


def test_hash_all(tmp_path):
    paths = []
    for i in range(5):
        p = tmp_path / f"f{i}.txt"
        p.write_bytes(f"file {i}".encode())
        paths.append(str(p))
    paths.append(str(tmp_path / "missing"))

    outcomes = hash_all(paths, 2, ordered=True)

    assert [o.index for o in outcomes] == list(range(6))
    for i, outcome in enumerate(outcomes[:5]):
        assert outcome.content == hashlib.md5(f"file {i}".encode()).hexdigest()
    assert not outcomes[5].ok


# --------------------------------------------------------------------------- #
#                                   Engine                                    #
# --------------------------------------------------------------------------- #


def test_engine_uses_config_defaults(tmp_path):
    paths = []
    for i in range(3):
        p = tmp_path / f"{i}.txt"
        p.write_text(f"text {i}", encoding="utf-8")
        paths.append(str(p))

    engine = Engine(FetcherConfig(max_concurrency=2, ordered=True))
    outcomes = engine.fetch_all(paths)

    assert [o.content for o in outcomes] == ["text 0", "text 1", "text 2"]
    assert engine.fetch_all_sequential(paths) == ["text 0", "text 1", "text 2"]
    assert engine.fetch_and_hash(paths[0]) == hashlib.md5(b"text 0").hexdigest()
    assert [o.content for o in engine.hash_all(paths)] == [
        hashlib.md5(f"text {i}".encode()).hexdigest() for i in range(3)
    ]


def test_engine_raise_on_failure_from_config(tmp_path):
    engine = Engine(FetcherConfig(raise_on_failure=True))
    with pytest.raises(AggregateFailure):
        engine.fetch_all([str(tmp_path / "missing")])


def test_engine_hash_all_ordered_override(tmp_path):
    paths = []
    for i in range(3):
        p = tmp_path / f"{i}.txt"
        p.write_text(f"text {i}", encoding="utf-8")
        paths.append(str(p))

    outcomes = Engine(FetcherConfig(ordered=False)).hash_all(paths, 3, ordered=True)

    assert [o.index for o in outcomes] == [0, 1, 2]
