# File: greed/notifiers.py
"""greed.notifiers: delivering an alert about a triggered rule.

Channels form a closed set (:class:`greed.config.Channel`); :func:`send`
is the single place that dispatches on it. Adding a channel means adding
an enum member, its config section and one handler here.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession

from greed.config import Channel, Config, NtfyConfig, RuleSpec, SiteConfig, TelegramConfig
from greed.errors import NotifyError
from greed.logger import get_logger

__all__: Sequence[str] = (
    "format_value",
    "format_message",
    "send",
    "send_ntfy",
    "send_telegram",
    "notify",
    "TELEGRAM_API",
)

log = get_logger(__name__)

TELEGRAM_API = "https://api.telegram.org"
ABSENT = "<nothing>"


def format_value(value: Optional[str]) -> str:
    """Render a value for humans; an absent value and ``""`` look different."""
    if value is None:
        return ABSENT
    if value == "":
        return '""'
    return value


def format_message(site: SiteConfig, previous: Optional[str], new: str) -> str:
    return (
        f"Rule for {site.name} triggered! "
        f"Value changed from {format_value(previous)} to {format_value(new)}"
    )


async def _post(session: ClientSession, url: str, **kwargs) -> None:
    try:
        async with session.post(url, raise_for_status=False, **kwargs) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise NotifyError(f"POST {url} returned HTTP {resp.status}: {body[:200]}")
    except asyncio.TimeoutError as exc:
        raise NotifyError(f"POST {url} timed out") from exc
    except ClientError as exc:
        raise NotifyError(f"POST {url} failed: {exc}") from exc


async def send_ntfy(
    session: ClientSession,
    ntfy: NtfyConfig,
    site: SiteConfig,
    message: str,
    rule: Optional[RuleSpec] = None,
) -> None:
    url = f"{str(ntfy.server).rstrip('/')}/{ntfy.topic}"
    headers = {"Title": site.name, "Click": site.url}
    if rule is not None:
        headers["Tags"] = rule.type
    log.info("Sending ntfy notification to %s: %s", url, message)
    await _post(session, url, data=message.encode("utf-8"), headers=headers)


async def send_telegram(
    session: ClientSession,
    telegram: TelegramConfig,
    site: SiteConfig,
    message: str,
    api_base: Optional[str] = None,
) -> None:
    url = f"{(api_base or TELEGRAM_API).rstrip('/')}/bot{telegram.token}/sendMessage"
    payload = {
        "chat_id": telegram.chat_id,
        "text": f"{message}\n{site.url}",
        "disable_web_page_preview": False,
    }
    log.info("Sending telegram notification to chat %s: %s", telegram.chat_id, message)
    await _post(session, url, json=payload)


async def send(
    channel: Channel,
    config: Config,
    session: ClientSession,
    site: SiteConfig,
    previous: Optional[str],
    new: str,
    rule: Optional[RuleSpec] = None,
) -> None:
    """Deliver one alert for *site* on *channel*."""
    message = format_message(site, previous, new)

    if channel is Channel.NTFY:
        if config.ntfy is None:
            raise NotifyError("ntfy is not configured", site=site.name)
        await send_ntfy(session, config.ntfy, site, message, rule)
    elif channel is Channel.TELEGRAM:
        if config.telegram is None:
            raise NotifyError("telegram is not configured", site=site.name)
        await send_telegram(session, config.telegram, site, message)
    else:
        raise NotifyError(f"Unsupported channel: {channel!r}", site=site.name)


async def notify(
    config: Config,
    session: ClientSession,
    site: SiteConfig,
    previous: Optional[str],
    new: str,
    rule: Optional[RuleSpec] = None,
) -> None:
    """Send to every channel of *site* in order; stop at the first failure."""
    for channel in site.notifiers:
        log.info("Sending notification to: %s", channel.value)
        await send(channel, config, session, site, previous, new, rule)
