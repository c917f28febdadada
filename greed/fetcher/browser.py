# greed/fetcher/browser.py
"""
Browser fetch strategy: let a remote WebDriver render the page.

Selenium's client is blocking, so the whole session (open, navigate, read
source, quit) runs in a worker thread and the event loop keeps serving
the other sites meanwhile.
"""
from __future__ import annotations

import asyncio

from selenium import webdriver
from selenium.webdriver.common.options import ArgOptions

from greed.config import BrowserDriver, SeleniumConfig
from greed.errors import FetchError
from greed.logger import get_logger

log = get_logger(__name__)


def browser_options(driver: BrowserDriver, user_agent: str | None = None) -> ArgOptions:
    if driver is BrowserDriver.FIREFOX:
        options: ArgOptions = webdriver.FirefoxOptions()
        if user_agent:
            options.set_preference("general.useragent.override", user_agent)
    else:
        options = webdriver.ChromeOptions()
        if user_agent:
            options.add_argument(f"--user-agent={user_agent}")
    return options


def render_page(selenium: SeleniumConfig, url: str, user_agent: str | None = None) -> str:
    """Open a remote session, load *url* and return the rendered document."""
    log.info("Starting %s driver at %s", selenium.driver.value, selenium.url)
    driver = webdriver.Remote(
        command_executor=str(selenium.url),
        options=browser_options(selenium.driver, user_agent),
    )
    try:
        log.info("Navigating to: %s", url)
        driver.get(url)
        return driver.page_source
    finally:
        driver.quit()


async def fetch_rendered(selenium: SeleniumConfig, url: str, user_agent: str | None = None) -> str:
    try:
        return await asyncio.to_thread(render_page, selenium, url, user_agent)
    except Exception as exc:
        raise FetchError(f"Browser fetch of {url} failed: {exc}") from exc


__all__ = ["browser_options", "render_page", "fetch_rendered"]
