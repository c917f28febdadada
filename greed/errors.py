# File: greed/errors.py
"""greed.errors: exception hierarchy shared by every stage of a site check.

Each tick-time error carries the name of the stage that failed, so the
orchestrator can report *where* a site stopped without inspecting types.
"""

from __future__ import annotations

from typing import ClassVar, Optional

__all__ = [
    "GreedError",
    "ConfigError",
    "SelectorCompileError",
    "FetchError",
    "ExtractError",
    "TransformError",
    "InvalidPatternError",
    "PatternNoMatchError",
    "NotifyError",
]


class GreedError(Exception):
    """Base class for all errors raised by greed."""

    stage: ClassVar[str] = "unknown"

    def __init__(self, message: str, *, site: Optional[str] = None) -> None:
        super().__init__(message)
        self.site = site


class ConfigError(GreedError):
    """Configuration could not be loaded or is inconsistent."""

    stage = "config"


class SelectorCompileError(GreedError):
    """The site's CSS selector is not valid."""

    stage = "startup"


class FetchError(GreedError):
    """Raw page content could not be acquired."""

    stage = "fetch"


class ExtractError(GreedError):
    """No node matched the site's selector."""

    stage = "extract"


class TransformError(GreedError):
    stage = "transform"


class InvalidPatternError(TransformError):
    """A RegexExtract pattern does not compile."""


class PatternNoMatchError(TransformError):
    """A RegexExtract pattern did not match the current value."""


class NotifyError(GreedError):
    """A notification could not be delivered."""

    stage = "notify"
