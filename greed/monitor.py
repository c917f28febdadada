# File: greed/monitor.py
"""greed.monitor: watching one site on a fixed schedule.

A monitor goes through three phases:

* **initializing** – the selector is compiled; a bad selector ends the
  monitor before its first tick;
* **running** – every tick fetches the page, extracts and transforms the
  value, evaluates the rules, notifies on a match and finally makes the
  new value the baseline for the next tick;
* **terminated** – the first error of any tick stops the monitor for good.

The baseline lives in an immutable :class:`SiteState`; :func:`advance` is
the pure transition ``(state, value) -> (state', matched rule)`` and the
monitor only swaps its state once a tick has fully succeeded.
"""

from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from aiohttp import ClientSession, ClientTimeout
from soupsieve import SoupSieve

from greed import notifiers
from greed.config import Config, RuleSpec, SiteConfig
from greed.errors import GreedError
from greed.fetcher import fetch_page
from greed.logger import get_logger
from greed.parser.extractor import compile_selector, extract
from greed.rules import evaluate
from greed.transform import apply_transformers

__all__ = [
    "FetchFn",
    "NotifyFn",
    "MonitorStatus",
    "SiteState",
    "TickResult",
    "Ticker",
    "SiteMonitor",
    "advance",
]

log = get_logger(__name__)

FetchFn = Callable[[SiteConfig], Awaitable[str]]
NotifyFn = Callable[[SiteConfig, Optional[str], str, RuleSpec], Awaitable[None]]


class MonitorStatus(str, Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class SiteState:
    """Everything a monitor carries from one tick to the next."""

    selector: SoupSieve
    last_value: Optional[str] = None

    @classmethod
    def initial(cls, site: SiteConfig) -> SiteState:
        return cls(selector=compile_selector(site.selector))


@dataclass(frozen=True, slots=True)
class TickResult:
    value: str
    previous: Optional[str]
    matched_rule: Optional[RuleSpec]

    @property
    def notified(self) -> bool:
        return self.matched_rule is not None


def advance(state: SiteState, value: str, rules: Sequence[RuleSpec]) -> Tuple[SiteState, Optional[RuleSpec]]:
    """Evaluate *rules* against ``state.last_value -> value``.

    The returned state always holds *value*, matched or not.
    """
    matched = evaluate(rules, state.last_value, value)
    return dataclasses.replace(state, last_value=value), matched


class Ticker:
    """Periodic timer: the first tick is immediate, the next ones are
    scheduled at ``start + k * interval`` so slow ticks do not add drift.
    Missed deadlines fire back to back.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.interval = interval
        self._deadline: Optional[float] = None

    async def wait(self) -> None:
        now = asyncio.get_running_loop().time()
        if self._deadline is None:
            self._deadline = now + self.interval
            return
        delay = self._deadline - now
        self._deadline += self.interval
        if delay > 0:
            await asyncio.sleep(delay)


class SiteMonitor:
    """Owns one site's state and HTTP session; use as ``async with``."""

    def __init__(
        self,
        config: Config,
        site: SiteConfig,
        *,
        fetch: Optional[FetchFn] = None,
        notify: Optional[NotifyFn] = None,
    ) -> None:
        self.config = config
        self.site = site
        self._fetch = fetch
        self._notify = notify
        self.session: Optional[ClientSession] = None
        self.state: Optional[SiteState] = None
        self.status = MonitorStatus.INITIALIZING

    async def __aenter__(self) -> SiteMonitor:
        try:
            self.state = SiteState.initial(self.site)
        except GreedError as exc:
            self.status = MonitorStatus.TERMINATED
            exc.site = self.site.name
            raise
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.request_timeout),
            headers={"User-Agent": self.config.user_agent},
        )
        self.status = MonitorStatus.RUNNING
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.status = MonitorStatus.TERMINATED
        if self.session and not self.session.closed:
            await self.session.close()

    @property
    def last_value(self) -> Optional[str]:
        return None if self.state is None else self.state.last_value

    async def fetch(self) -> str:
        if self._fetch is not None:
            return await self._fetch(self.site)
        if self.session is None:
            raise RuntimeError("Session not initialized")
        return await fetch_page(self.config, self.site, self.session)

    async def send(self, previous: Optional[str], new: str, rule: RuleSpec) -> None:
        if self._notify is not None:
            await self._notify(self.site, previous, new, rule)
            return
        if self.session is None:
            raise RuntimeError("Session not initialized")
        await notifiers.notify(self.config, self.session, self.site, previous, new, rule)

    async def observe(self) -> str:
        """Fetch, extract and transform: the value the page shows right now."""
        if self.state is None:
            raise RuntimeError("Monitor not initialized")
        try:
            html = await self.fetch()
            scraped = extract(html, self.state.selector)
            return apply_transformers(scraped, self.site.transformers)
        except GreedError as exc:
            exc.site = self.site.name
            raise

    async def check(self) -> TickResult:
        """Run one tick. Any error leaves the baseline untouched and propagates."""
        log.info("Checking site: %s", self.site.url)
        value = await self.observe()
        log.info("Value: %r", value)

        previous = self.state.last_value
        new_state, matched = advance(self.state, value, self.site.rules)
        if matched is not None:
            try:
                await self.send(previous, value, matched)
            except GreedError as exc:
                exc.site = self.site.name
                raise

        self.state = new_state
        log.info("Done checking site: %s", self.site.url)
        return TickResult(value=value, previous=previous, matched_rule=matched)

    async def run(self, max_ticks: Optional[int] = None) -> None:
        """Tick forever (or *max_ticks* times); the first failing tick ends the loop."""
        ticker = Ticker(self.site.interval)
        log.info("Started monitoring of: %s", self.site.url)
        done = 0
        try:
            while max_ticks is None or done < max_ticks:
                await ticker.wait()
                await self.check()
                done += 1
        finally:
            self.status = MonitorStatus.TERMINATED

