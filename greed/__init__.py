# greed/__init__.py
"""
greed package initializer.
Defines package version and exposes the CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from greed.cli import cli

__all__ = ["__version__", "cli"]
