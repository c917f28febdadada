# File: tests/conftest.py
from typing import Any, Dict

import pytest

from greed.config import Config, SiteConfig


def site_dict(**overrides: Any) -> Dict[str, Any]:
    """Raw mapping for one site, as it would appear in a config file."""
    data: Dict[str, Any] = {
        "name": "shop",
        "url": "http://example.com/item",
        "interval": 60,
        "selector": "span.price",
        "rules": [{"type": "OnChange"}],
        "notifiers": ["ntfy"],
    }
    data.update(overrides)
    return data


def config_dict(*sites: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "user_agent": "TestAgent/1.0",
        "request_timeout": 2.0,
        "ntfy": {"server": "http://ntfy.local", "topic": "alerts"},
        "sites": list(sites) or [site_dict()],
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_config():
    """Build a validated Config from site mappings."""

    def _make(*sites: Dict[str, Any], **overrides: Any) -> Config:
        return Config(**config_dict(*sites, **overrides))

    return _make


@pytest.fixture()
def basic_config(make_config) -> Config:
    return make_config()


@pytest.fixture()
def basic_site(basic_config) -> SiteConfig:
    return basic_config.sites[0]


@pytest.fixture()
def price_page():
    """HTML page with the watched price split over several text nodes."""

    def _page(price: str) -> str:
        return (
            "<html><body>"
            '<div class="item"><span class="price">'
            f"<b>EUR</b> {price}<!-- sale --></span></div>"
            '<span class="price">999</span>'
            "</body></html>"
        )

    return _page


@pytest.fixture(autouse=True)
def _reset_greed_logger():
    """The CLI reconfigures the project logger; give every test a clean one."""
    import logging

    lg = logging.getLogger("greed")
    yield
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
    lg.propagate = True
    lg.setLevel(logging.NOTSET)
