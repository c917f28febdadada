# === FILE: greed/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for greed.

Commands:
  run       Start monitoring every configured site
  config    Print the validated configuration
  check     Fetch one site once and print the value it yields now

Common options:
  --config PATH       Config file (YAML, JSON or TOML; default: greed.toml)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only if omitted)
  --log-format FORMAT Logging format string

Also:
  --version, -v       Show the greed version

Example:
  greed --config greed.toml run
"""
import asyncio
import sys
from pathlib import Path

import click

from greed import __version__
from greed.engine import Engine
from greed.errors import ConfigError, GreedError
from greed.logger import DEFAULT_FORMAT, init_logging
from greed.monitor import SiteMonitor

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="greed, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default="greed.toml",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the configuration file.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file path (stdout if omitted)",
)
@click.option(
    "--log-format", "log_format",
    default=DEFAULT_FORMAT,
    show_default=True,
    help="Logging format string",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """greed: watch values on web pages and get notified when they change."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        cfg = Engine.load_config(str(config_path))
    except ConfigError as e:
        print_error(f"Failed to load configuration: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("run", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def run(ctx):
    """Monitor all sites until every monitor has stopped."""
    cfg = ctx.obj["config"]
    click.echo(f"Monitoring {len(cfg.sites)} site(s)")
    try:
        outcomes = Engine(cfg).start()
    except KeyboardInterrupt:
        click.echo("Interrupted")
        sys.exit(130)

    failed = [o for o in outcomes if not o.ok]
    for outcome in failed:
        click.secho(f"{outcome.site}: stopped at {outcome.stage}: {outcome.error}", fg="red", err=True)
    if failed:
        sys.exit(1)


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Print the current configuration as JSON."""
    cfg = ctx.obj["config"]
    click.echo(cfg.model_dump_json(indent=2, by_alias=True))


@cli.command("check", context_settings=CONTEXT_SETTINGS)
@click.argument("site_name")
@click.pass_context
def check(ctx, site_name):
    """Fetch SITE_NAME once and print the extracted value (no rules, no alerts)."""
    cfg = ctx.obj["config"]
    try:
        site = cfg.site(site_name)
    except KeyError:
        print_error(f"Unknown site: {site_name}")

    async def _observe() -> str:
        async with SiteMonitor(cfg, site) as monitor:
            return await monitor.observe()

    try:
        value = asyncio.run(_observe())
    except GreedError as e:
        print_error(f"{site_name}: {e.stage} failed: {e}")
    click.echo(value)


if __name__ == "__main__":
    cli()
