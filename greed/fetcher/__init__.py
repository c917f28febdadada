# greed/fetcher/__init__.py
"""
Fetch strategies: direct HTTP or remote browser, picked per site.
"""
from __future__ import annotations

from aiohttp import ClientSession

from greed.config import Config, SiteConfig
from greed.errors import FetchError
from greed.fetcher.browser import fetch_rendered
from greed.fetcher.http import download


async def fetch_page(config: Config, site: SiteConfig, session: ClientSession) -> str:
    """Return raw markup for *site* using the strategy its ``use_browser`` flag selects."""
    url = site.url
    if site.use_browser:
        if config.selenium is None:
            raise FetchError(f"site {site.name!r} needs a browser but none is configured")
        return await fetch_rendered(config.selenium, url, config.user_agent)
    return await download(session, url)


__all__ = ["fetch_page", "download", "fetch_rendered"]
