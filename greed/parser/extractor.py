# === FILE: greed/parser/extractor.py ===
"""Selector compilation and text extraction.

A site's selector is compiled once, when its monitor starts; every tick
then runs the compiled query against freshly parsed markup:

* the markup is parsed with BeautifulSoup's ``html.parser`` backend;
* the *first* matching element in document order wins;
* its text is the plain concatenation of all descendant text nodes
  (no separator is inserted; script, style and template text counts,
  comments do not).
"""
from __future__ import annotations

from collections.abc import Sequence

import soupsieve
from bs4 import BeautifulSoup
from bs4.element import CData, NavigableString, Script, Stylesheet, TemplateString
from soupsieve import SoupSieve

from greed.errors import ExtractError, SelectorCompileError
from greed.logger import get_logger

__all__: Sequence[str] = ("compile_selector", "extract")

_TEXT_TYPES = (NavigableString, CData, Script, Stylesheet, TemplateString)

log = get_logger(__name__)


def compile_selector(expression: str) -> SoupSieve:
    """Compile a CSS selector or raise :class:`SelectorCompileError`."""
    try:
        return soupsieve.compile(expression)
    except (soupsieve.SelectorSyntaxError, TypeError, ValueError) as exc:
        raise SelectorCompileError(f"Failed to parse selector {expression!r}: {exc}") from exc


def extract(markup: str, selector: SoupSieve) -> str:
    """Return the text of the first node matching *selector* in *markup*."""
    log.debug("Searching for first occurrence of: %s", selector.pattern)
    soup = BeautifulSoup(markup, "html.parser")
    element = selector.select_one(soup)
    if element is None:
        raise ExtractError(f"Failed to find element matching selector: {selector.pattern}")
    return element.get_text(types=_TEXT_TYPES)
