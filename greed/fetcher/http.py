# greed/fetcher/http.py
"""
Direct fetch strategy: a plain HTTP GET through the monitor's aiohttp session.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession

from greed.errors import FetchError
from greed.logger import get_logger

log = get_logger(__name__)


async def download(session: ClientSession, url: str) -> str:
    """
    GET *url* and return the decoded body.

    Transport errors, timeouts and HTTP statuses >= 400 raise FetchError.
    No retries: the caller decides what a failure means.
    """
    log.info("Downloading: %s", url)
    try:
        async with session.get(url, raise_for_status=False) as resp:
            if resp.status >= 400:
                raise FetchError(f"GET {url} returned HTTP {resp.status}")
            # undecodable bytes are replaced, not fatal
            return await resp.text(errors="replace")
    except asyncio.TimeoutError as exc:
        raise FetchError(f"GET {url} timed out") from exc
    except ClientError as exc:
        raise FetchError(f"GET {url} failed: {exc}") from exc


__all__ = ["download"]
