# File: greed/engine.py
"""greed.engine: orchestration layer launching one monitor per site."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional

from greed.config import Config, SiteConfig, load_config
from greed.errors import ConfigError, GreedError
from greed.logger import get_logger
from greed.monitor import SiteMonitor

__all__ = ["Engine", "MonitorOutcome", "run_sites"]

log = get_logger(__name__)

MonitorFactory = Callable[[Config, SiteConfig], SiteMonitor]


@dataclass(frozen=True, slots=True)
class MonitorOutcome:
    """How one site's monitor ended."""

    site: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def stage(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, "stage", "unknown")


async def _guarded(config: Config, site: SiteConfig, factory: MonitorFactory) -> MonitorOutcome:
    try:
        async with factory(config, site) as monitor:
            await monitor.run()
    except GreedError as exc:
        log.error("Monitoring of %s stopped at stage %s: %s", site.name, exc.stage, exc)
        return MonitorOutcome(site.name, exc)
    except Exception as exc:
        log.exception("Monitoring of %s stopped by an unexpected error", site.name)
        return MonitorOutcome(site.name, exc)
    log.info("Monitoring of %s finished", site.name)
    return MonitorOutcome(site.name)


async def run_sites(config: Config, monitor_factory: MonitorFactory = SiteMonitor) -> List[MonitorOutcome]:
    """Run every site's monitor concurrently; return once all of them have ended.

    A failing monitor is logged and reported in the result, never restarted,
    and never affects the others.
    """
    tasks = [
        asyncio.create_task(_guarded(config, site, monitor_factory), name=f"monitor:{site.name}")
        for site in config.sites
    ]
    log.info("Started %d monitors", len(tasks))
    return list(await asyncio.gather(*tasks))


class Engine:
    """Facade for the CLI and tests: load the config, run all monitors."""

    @staticmethod
    def load_config(path: Optional[str]) -> Config:
        """Load and validate the config; any problem becomes a ConfigError."""
        try:
            return load_config(path)
        except (OSError, ValueError, TypeError) as exc:
            raise ConfigError(str(exc)) from exc

    def __init__(self, config: Config, monitor_factory: MonitorFactory = SiteMonitor) -> None:
        self.config = config
        self.monitor_factory = monitor_factory

    def start(self) -> List[MonitorOutcome]:
        """Block until every monitor has finished and return their outcomes."""
        log.info("Starting %d site monitors…", len(self.config.sites))
        return asyncio.run(run_sites(self.config, self.monitor_factory))
