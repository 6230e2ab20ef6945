"""CLI entry point for the songwatch library sync watcher.

Commands:
    songwatch watch   — watch the music folder and sync changes to the library
    songwatch plan    — show the request a single change would produce
"""

import asyncio
import json
import logging
import sys

import click

from songwatch.config import DEFAULT_CONFIG_PATH, SyncConfig, load_config
from songwatch.errors import ConfigError, FatalWatchError

logger = logging.getLogger("songwatch")


def _load_config_or_exit(config_path: str) -> SyncConfig:
    """Fail loudly if the config is missing or invalid."""
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """songwatch — keep a media library in sync with a music folder."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ------------------------------------------------------------------
# songwatch watch
# ------------------------------------------------------------------


@cli.command()
@click.option(
    "--config",
    "config_path",
    default=str(DEFAULT_CONFIG_PATH),
    envvar="SONGWATCH_CONFIG",
    show_default=True,
    help="Dotenv or legacy JSON config file.",
)
@click.option("--dry-run", is_flag=True, help="Log requests instead of sending them.")
def watch(config_path: str, dry_run: bool) -> None:
    """Watch the music folder and sync changes to the library."""
    config = _load_config_or_exit(config_path)
    if not config.watch_dir.is_dir():
        click.echo(f"Error: Watch directory does not exist: {config.watch_dir}", err=True)
        sys.exit(1)

    try:
        asyncio.run(_watch_async(config, dry_run))
    except FatalWatchError as exc:
        logger.error("Watcher failed: %s", exc)
        sys.exit(1)


async def _watch_async(config: SyncConfig, dry_run: bool) -> None:
    from songwatch.integrations.library import LibraryClient
    from songwatch.sync.dispatcher import Dispatcher
    from songwatch.watchdog.watcher import watch_library

    click.echo(f"Watching {config.watch_dir} for changes (Ctrl+C to stop)…")
    click.echo(f"  Library:  {config.base_url}")
    click.echo(f"  Patterns: {list(config.file_patterns)}")
    if dry_run:
        click.echo("  Dry run:  requests are logged, not sent")
        await watch_library(config, Dispatcher(config, None, dry_run=True))
        return

    async with LibraryClient(config.base_url, timeout=config.request_timeout) as client:
        await watch_library(config, Dispatcher(config, client))


# ------------------------------------------------------------------
# songwatch plan
# ------------------------------------------------------------------


@cli.command()
@click.option(
    "--config",
    "config_path",
    default=str(DEFAULT_CONFIG_PATH),
    envvar="SONGWATCH_CONFIG",
    show_default=True,
    help="Dotenv or legacy JSON config file.",
)
@click.option("--old-path", default=None, help="Previous path (required for moved).")
@click.argument("operation", type=click.Choice(["created", "moved", "removed"]))
@click.argument("path")
def plan(config_path: str, old_path: str | None, operation: str, path: str) -> None:
    """Show the library request a single change would produce."""
    from pydantic import ValidationError

    from songwatch.errors import SerializationFailure
    from songwatch.schemas.sync import ChangeEvent, Operation
    from songwatch.sync.dispatcher import Dispatcher

    config = _load_config_or_exit(config_path)

    try:
        event = ChangeEvent(operation=Operation(operation), path=path, old_path=old_path)
    except ValidationError as exc:
        click.echo(f"Error: invalid event: {exc.errors()[0]['msg']}", err=True)
        sys.exit(1)

    dispatcher = Dispatcher(config, None, dry_run=True)
    try:
        intent, payload = dispatcher.plan(event)
    except SerializationFailure as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Intent: {intent.kind}")
    if payload is None:
        click.echo(f"Rejected: {intent.reason}")
        return
    click.echo(f"{payload.verb} {config.base_url}")
    click.echo(json.dumps(payload.to_dict(), indent=2))
