# File: greed/transform.py
"""greed.transform: text transformers applied to the extracted value."""

from __future__ import annotations

import re
from typing import Sequence

from greed.config import RegexExtract, Replace, TransformerSpec
from greed.errors import InvalidPatternError, PatternNoMatchError
from greed.logger import get_logger

__all__: Sequence[str] = ("apply_transformers", "apply_transformer", "regex_extract", "replace")

log = get_logger(__name__)


def regex_extract(value: str, pattern: str) -> str:
    """Concatenate the capture groups of the first match of *pattern* in *value*.

    Groups that did not take part in the match contribute nothing. A pattern
    without groups therefore yields an empty string when it matches.
    """
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise InvalidPatternError(f"Error compiling regex {pattern!r}: {exc}") from exc

    match = compiled.search(value)
    if match is None:
        raise PatternNoMatchError(f"Regex {pattern!r} did not match {value!r}")

    return "".join(group for group in match.groups() if group is not None)


def replace(value: str, old: str, new: str) -> str:
    """Literal, non-overlapping replacement. An empty *old* leaves *value* untouched."""
    if not old:
        return value
    return value.replace(old, new)


def apply_transformer(value: str, transformer: TransformerSpec) -> str:
    log.debug("Applying transformer %r to %r", transformer, value)
    if isinstance(transformer, RegexExtract):
        return regex_extract(value, transformer.regex)
    if isinstance(transformer, Replace):
        return replace(value, transformer.from_, transformer.to)
    raise TypeError(f"Unknown transformer: {transformer!r}")


def apply_transformers(value: str, transformers: Sequence[TransformerSpec]) -> str:
    """Run *transformers* in order; the first failure aborts the whole chain."""
    log.debug("Applying %d transformers", len(transformers))
    for transformer in transformers:
        value = apply_transformer(value, transformer)
    return value
