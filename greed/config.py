# === FILE: greed/config.py ===
"""
Loading and validation of the greed configuration.

The schema is described with Pydantic; YAML, JSON and TOML files are
accepted. Anything wrong here is fatal at startup: no monitor is ever
launched from a configuration that does not validate.
"""
from __future__ import annotations

import errno
import json
import os
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from greed import __version__

DEFAULT_CONFIG_PATH = Path("greed.toml")
DEFAULT_NTFY_SERVER = "https://ntfy.sh"
DEFAULT_INTERVAL = 60.0 * 60.0  # 1 hour

_HTTP_URL = TypeAdapter(HttpUrl)


def default_user_agent() -> str:
    return f"greed/{__version__}"


# --------------------------------------------------------------------------- #
# Durations                                                                   #
# --------------------------------------------------------------------------- #

_DURATION_TOKEN = re.compile(r"(\d+(?:\.\d+)?)\s*([a-zA-Z]*)")
_DURATION_UNITS: Dict[str, float] = {
    "ms": 0.001,
    "msec": 0.001,
    "": 1.0,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
    "d": 86400.0,
    "day": 86400.0,
    "days": 86400.0,
    "w": 604800.0,
    "week": 604800.0,
    "weeks": 604800.0,
}


def parse_duration(text: str) -> float:
    """Parse a human readable duration (``"90s"``, ``"1h 30m"``) into seconds."""
    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")
    total = 0.0
    pos = 0
    for match in _DURATION_TOKEN.finditer(raw):
        if raw[pos:match.start()].strip():
            raise ValueError(f"invalid duration: {text!r}")
        unit = match.group(2).lower()
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown duration unit {match.group(2)!r} in {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[unit]
        pos = match.end()
    if pos == 0 or raw[pos:].strip():
        raise ValueError(f"invalid duration: {text!r}")
    return total


# --------------------------------------------------------------------------- #
# Transformers                                                                #
# --------------------------------------------------------------------------- #


class _Spec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class RegexExtract(_Spec):
    """Keep only the capture groups of the first regex match."""

    type: Literal["RegexExtract"] = "RegexExtract"
    # compiled when applied, not when loaded
    regex: str


class Replace(_Spec):
    """Replace every literal occurrence of ``from`` with ``to``."""

    type: Literal["Replace"] = "Replace"
    from_: str = Field(..., alias="from")
    to: str


TransformerSpec = Annotated[Union[RegexExtract, Replace], Field(discriminator="type")]


# --------------------------------------------------------------------------- #
# Rules                                                                       #
# --------------------------------------------------------------------------- #


class OnChange(_Spec):
    type: Literal["OnChange"] = "OnChange"


class OnChangeFrom(_Spec):
    type: Literal["OnChangeFrom"] = "OnChangeFrom"
    from_: str = Field(..., alias="from")


class OnChangeTo(_Spec):
    type: Literal["OnChangeTo"] = "OnChangeTo"
    to: str


class OnChangeFromTo(_Spec):
    type: Literal["OnChangeFromTo"] = "OnChangeFromTo"
    from_: str = Field(..., alias="from")
    to: str


class OnDecrease(_Spec):
    type: Literal["OnDecrease"] = "OnDecrease"


class OnIncrease(_Spec):
    type: Literal["OnIncrease"] = "OnIncrease"


class LessThan(_Spec):
    type: Literal["LessThan"] = "LessThan"
    threshold: float


class LessThanOrEqualTo(_Spec):
    type: Literal["LessThanOrEqualTo"] = "LessThanOrEqualTo"
    threshold: float


class EqualTo(_Spec):
    type: Literal["EqualTo"] = "EqualTo"
    threshold: float


class MoreThan(_Spec):
    type: Literal["MoreThan"] = "MoreThan"
    threshold: float


class MoreThanOrEqualTo(_Spec):
    type: Literal["MoreThanOrEqualTo"] = "MoreThanOrEqualTo"
    threshold: float


RuleSpec = Annotated[
    Union[
        OnChange,
        OnChangeFrom,
        OnChangeTo,
        OnChangeFromTo,
        OnDecrease,
        OnIncrease,
        LessThan,
        LessThanOrEqualTo,
        EqualTo,
        MoreThan,
        MoreThanOrEqualTo,
    ],
    Field(discriminator="type"),
]


# --------------------------------------------------------------------------- #
# Global sections                                                             #
# --------------------------------------------------------------------------- #


class Channel(str, Enum):
    """Notification channels a site can report to."""

    NTFY = "ntfy"
    TELEGRAM = "telegram"


class BrowserDriver(str, Enum):
    CHROME = "chrome"
    FIREFOX = "firefox"


class SeleniumConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: HttpUrl = Field(..., description="Remote WebDriver endpoint.")
    driver: BrowserDriver = Field(BrowserDriver.CHROME, description="Browser to request.")


class NtfyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    server: HttpUrl = Field(DEFAULT_NTFY_SERVER, validate_default=True, description="ntfy server.")
    topic: str = Field(..., min_length=1, description="Topic to publish to.")


class TelegramConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    token: str = Field(..., min_length=1, description="Bot API token.")
    chat_id: str = Field(..., min_length=1, description="Target chat.")

    @field_validator("chat_id", mode="before")
    def _chat_id_as_str(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class SiteConfig(BaseModel):
    """One monitored page: where to look, what to extract, when to alert."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    url: str = Field(..., description="Page to watch, kept exactly as written.")
    interval: float = Field(DEFAULT_INTERVAL, gt=0, description="Seconds between checks.")
    use_browser: bool = Field(False, description="Render the page in a remote browser.")
    selector: str = Field(..., min_length=1, description="CSS selector of the watched node.")
    transformers: list[TransformerSpec] = Field(default_factory=list)
    rules: list[RuleSpec]
    notifiers: list[Channel] = Field(default_factory=list)

    @field_validator("url")
    def _check_url(cls, v: str) -> str:
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as exc:
            raise ValueError(f"not a valid http(s) URL: {v!r}") from exc
        return v

    @field_validator("interval", mode="before")
    def _parse_interval(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_duration(v)
        return v


class Config(BaseModel):
    """Global settings plus the list of sites."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(default_factory=default_user_agent, min_length=1)
    request_timeout: float = Field(30.0, gt=0, description="Timeout for one fetch/notify call.")
    selenium: Optional[SeleniumConfig] = None
    ntfy: Optional[NtfyConfig] = None
    telegram: Optional[TelegramConfig] = None
    sites: list[SiteConfig] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_sites(self) -> Config:
        seen: set[str] = set()
        for site in self.sites:
            if site.name in seen:
                raise ValueError(f"duplicate site name: {site.name!r}")
            seen.add(site.name)
            if site.use_browser and self.selenium is None:
                raise ValueError(f"site {site.name!r} uses a browser but [selenium] is not configured")
            for channel in site.notifiers:
                if getattr(self, channel.value) is None:
                    raise ValueError(
                        f"site {site.name!r} notifies via {channel.value} but [{channel.value}] is not configured"
                    )
        return self

    def site(self, name: str) -> SiteConfig:
        for site in self.sites:
            if site.name == name:
                return site
        raise KeyError(name)


# --------------------------------------------------------------------------- #
# Loading                                                                     #
# --------------------------------------------------------------------------- #


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc


_READERS = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".json": _read_json,
    ".toml": _read_toml,
}


def load_config(path: Union[str, Path, None]) -> Config:
    """
    Read a YAML, JSON or TOML file and return a validated :class:`Config`.

    Without a path, ``greed.toml`` in the working directory is used.
    Raises FileNotFoundError when the file is missing, ValueError/TypeError
    on malformed content and pydantic's ValidationError on schema errors.
    """
    if path is None:
        path_obj = DEFAULT_CONFIG_PATH
    else:
        path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    reader = _READERS.get(suffix)
    if reader is None:
        raise ValueError(f"Unsupported config format: {suffix}")

    return Config(**reader(path_obj))


__all__ = [
    "Config",
    "SiteConfig",
    "SeleniumConfig",
    "NtfyConfig",
    "TelegramConfig",
    "Channel",
    "BrowserDriver",
    "TransformerSpec",
    "RegexExtract",
    "Replace",
    "RuleSpec",
    "OnChange",
    "OnChangeFrom",
    "OnChangeTo",
    "OnChangeFromTo",
    "OnDecrease",
    "OnIncrease",
    "LessThan",
    "LessThanOrEqualTo",
    "EqualTo",
    "MoreThan",
    "MoreThanOrEqualTo",
    "ValidationError",
    "load_config",
    "parse_duration",
]
