"""greed.parser: turning fetched markup into the watched text."""

from greed.parser.extractor import compile_selector, extract

__all__ = ["compile_selector", "extract"]
