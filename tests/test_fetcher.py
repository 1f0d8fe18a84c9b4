# End-to-end tests against a local aiohttp server
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from site_harvest.crawler.fetcher import FetchError, HttpFetcher
from site_harvest.crawler.models import CrawlTarget
from site_harvest.scanner import start_crawl
from site_harvest.store import JsonPageStore, MemoryPageStore

#: seconds the slow handler sleeps; longer than the 1 s client timeout
SLOW_SLEEP: float = 2.5


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def test_site(unused_tcp_port: int) -> AsyncIterator[tuple[str, dict]]:
    app = web.Application()
    seen = {"user_agents": [], "paths": []}

    @web.middleware
    async def record(request, handler):
        seen["user_agents"].append(request.headers.get("User-Agent"))
        seen["paths"].append(request.path)
        return await handler(request)

    app.middlewares.append(record)

    async def handle_root(_):
        return web.Response(
            text=(
                "<html><body><h1>Home</h1>"
                '<a href="/page1">P1</a><a href="/slow">Slow</a>'
                '<a href="/logo.png">Logo</a><a href="/missing">Gone</a>'
                '<a href="/page1#top">P1 again</a><a href="mailto:a@b.c">Mail</a>'
                '<a href="http://example.org/">Out</a>'
                "</body></html>"
            ),
            content_type="text/html",
        )

    async def handle_page1(_):
        return web.Response(
            text="<html><body><p>Page\n  one</p><script>var x = 1;</script></body></html>",
            content_type="text/html",
        )

    async def handle_slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text='<a href="/never">never</a>', content_type="text/html")

    async def handle_logo(_):
        return web.Response(body=b"\x89PNG\r\n", content_type="image/png")

    app.router.add_get("/", handle_root)
    app.router.add_get("/page1", handle_page1)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/logo.png", handle_logo)

    async for url in _serve_app(app, unused_tcp_port):
        yield url, seen


@pytest.mark.asyncio()
async def test_crawl_local_site(basic_config, test_site):
    base, seen = test_site
    store = MemoryPageStore()

    result = await start_crawl(basic_config, CrawlTarget(f"{base}/", "site"), store)

    assert result.visited_count == 5
    assert result.created == 2
    assert sorted(result.failed) == sorted(f"{base}{p}" for p in ("/slow", "/logo.png", "/missing"))
    assert store.get(f"{base}/page1", "site").content == "Page one"
    assert "/never" not in seen["paths"]
    assert seen["paths"].count("/page1") == 1
    assert set(seen["user_agents"]) == {"TestAgent/1.0"}


@pytest.mark.asyncio()
async def test_crawl_respects_limit_over_http(basic_config, test_site):
    base, seen = test_site
    store = MemoryPageStore()

    result = await start_crawl(basic_config, CrawlTarget(base, "site", page_limit=2), store)

    assert result.visited_count == 2
    assert seen["paths"] == ["/", "/page1"]


@pytest.mark.asyncio()
async def test_crawl_persists_to_json_store(basic_config, test_site):
    base, _ = test_site
    store = JsonPageStore(basic_config.store_path)

    await start_crawl(basic_config, CrawlTarget(base, "site", page_limit=2), store)

    reopened = JsonPageStore(basic_config.store_path)
    assert [p.url for p in reopened.list_pages("site")] == [f"{base}/page1", f"{base}/"]


@pytest.mark.asyncio()
async def test_fetcher_reports_status_and_content_type(test_site):
    base, _ = test_site
    async with HttpFetcher(timeout=1.0, user_agent="TestAgent/1.0") as fetcher:
        assert "<h1>Home</h1>" in await fetcher.fetch(f"{base}/")
        with pytest.raises(FetchError, match="HTTP 404"):
            await fetcher.fetch(f"{base}/missing")
        with pytest.raises(FetchError, match="image/png"):
            await fetcher.fetch(f"{base}/logo.png")
        with pytest.raises(FetchError, match="timed out"):
            await fetcher.fetch(f"{base}/slow")


@pytest.mark.asyncio()
async def test_fetcher_connection_refused(unused_tcp_port: int):
    async with HttpFetcher(timeout=1.0) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch(f"http://localhost:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_fetcher_requires_context():
    with pytest.raises(RuntimeError):
        await HttpFetcher().fetch("http://localhost/")
