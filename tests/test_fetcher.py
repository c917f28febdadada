# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import ClientSession, ClientTimeout, web

from greed.config import BrowserDriver
from greed.errors import FetchError
from greed.fetcher import browser, fetch_page
from greed.fetcher.http import download

from conftest import site_dict


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
async def shop_server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_item(request):
        agent = request.headers.get("User-Agent", "")
        return web.Response(
            text=f'<span class="price">42</span><i class="ua">{agent}</i>',
            content_type="text/html",
        )

    async def handle_gone(_):
        return web.Response(status=404, text="not here")

    async def handle_slow(_):
        await asyncio.sleep(2)
        return web.Response(text="late", content_type="text/html")

    async def handle_latin1(_):
        return web.Response(
            body=b"<p class=\"v\">caf\xe9 12</p>",
            headers={"Content-Type": "text/html; charset=utf-8"},
        )

    app.router.add_get("/item", handle_item)
    app.router.add_get("/latin1", handle_latin1)
    app.router.add_get("/gone", handle_gone)
    app.router.add_get("/slow", handle_slow)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_download_returns_markup_with_user_agent(shop_server: str):
    async with ClientSession(headers={"User-Agent": "TestAgent/1.0"}) as session:
        html = await download(session, f"{shop_server}/item")
    assert '<span class="price">42</span>' in html
    assert "TestAgent/1.0" in html


@pytest.mark.asyncio()
async def test_download_http_error_status(shop_server: str):
    async with ClientSession() as session:
        with pytest.raises(FetchError, match="404"):
            await download(session, f"{shop_server}/gone")


@pytest.mark.asyncio()
async def test_download_timeout(shop_server: str):
    async with ClientSession(timeout=ClientTimeout(total=0.2)) as session:
        with pytest.raises(FetchError, match="timed out"):
            await download(session, f"{shop_server}/slow")


@pytest.mark.asyncio()
async def test_download_connection_refused(unused_tcp_port: int):
    async with ClientSession() as session:
        with pytest.raises(FetchError):
            await download(session, f"http://localhost:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_fetch_page_direct_strategy(make_config, shop_server: str):
    cfg = make_config(site_dict(url=f"{shop_server}/item"))
    async with ClientSession() as session:
        html = await fetch_page(cfg, cfg.sites[0], session)
    assert "42" in html


class FakeDriver:
    instances: list[FakeDriver] = []

    def __init__(self, command_executor, options):
        self.command_executor = command_executor
        self.options = options
        self.visited: list[str] = []
        self.quit_called = False
        FakeDriver.instances.append(self)

    def get(self, url):
        if "broken" in url:
            raise RuntimeError("navigation failed")
        self.visited.append(url)

    @property
    def page_source(self):
        return "<html><body><p id='v'>rendered</p></body></html>"

    def quit(self):
        self.quit_called = True


@pytest.fixture()
def fake_remote(monkeypatch):
    FakeDriver.instances = []
    monkeypatch.setattr(browser.webdriver, "Remote", FakeDriver)
    return FakeDriver


def browser_config(make_config, url: str):
    return make_config(
        site_dict(url=url, use_browser=True),
        selenium={"url": "http://grid.local:4444/wd/hub", "driver": "firefox"},
    )


@pytest.mark.asyncio()
async def test_fetch_page_browser_strategy(make_config, fake_remote):
    cfg = browser_config(make_config, "http://example.com/spa")
    async with ClientSession() as session:
        html = await fetch_page(cfg, cfg.sites[0], session)

    assert "rendered" in html
    driver = fake_remote.instances[0]
    assert driver.command_executor == "http://grid.local:4444/wd/hub"
    assert driver.visited == ["http://example.com/spa"]
    assert driver.quit_called


@pytest.mark.asyncio()
async def test_browser_failure_quits_and_raises(make_config, fake_remote):
    cfg = browser_config(make_config, "http://example.com/broken")
    async with ClientSession() as session:
        with pytest.raises(FetchError, match="navigation failed"):
            await fetch_page(cfg, cfg.sites[0], session)
    assert fake_remote.instances[0].quit_called


def test_browser_options_per_driver():
    chrome = browser.browser_options(BrowserDriver.CHROME, "UA/1")
    assert "--user-agent=UA/1" in chrome.arguments
    firefox = browser.browser_options(BrowserDriver.FIREFOX, "UA/1")
    assert firefox.preferences["general.useragent.override"] == "UA/1"


@pytest.mark.asyncio()
async def test_download_replaces_undecodable_bytes(shop_server: str):
    async with ClientSession() as session:
        html = await download(session, f"{shop_server}/latin1")
    assert html == '<p class="v">caf\ufffd 12</p>'
