"""CLI interface for liveserve."""

import asyncio
import logging
import webbrowser
from pathlib import Path
from typing import cast

import click

from liveserve.config import Config
from liveserve.core import LiveServer
from liveserve.events import GoLiveEvent, GoOfflineEvent, ServerErrorEvent
from liveserve.live.source import WatchfilesChangeSource
from liveserve.middleware import StaticFileResolver
from liveserve.strategy import RELOADING_STRATEGIES, ReloadingStrategy


@click.group()
def cli() -> None:
    """liveserve - static files with live reload."""


@cli.command()
@click.argument(
    "root",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    required=False,
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover liveserve.toml)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=click.IntRange(min=1, max=65535),
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--index-file",
    default=None,
    help="File served for directory paths (overrides config)",
)
@click.option(
    "--debounce",
    "debounce_ms",
    type=click.IntRange(min=0),
    default=None,
    help="Quiet period in milliseconds before a change is broadcast (overrides config)",
)
@click.option(
    "--strategy",
    type=click.Choice(RELOADING_STRATEGIES),
    default=None,
    help="How HTML changes reach the browser (overrides config)",
)
@click.option(
    "--open/--no-open",
    "open_browser",
    default=False,
    help="Open the served root in a browser once the server is live",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)
def serve(
    root: Path | None,
    config_path: Path | None,
    host: str | None,
    port: int | None,
    index_file: str | None,
    debounce_ms: int | None,
    strategy: str | None,
    open_browser: bool,
    verbose: bool,
) -> None:
    """Serve ROOT with live reload."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    config = config.with_overrides(
        root_dir=root.resolve() if root is not None else None,
        host=host,
        port=port,
        index_file=index_file,
        debounce_ms=debounce_ms,
        reloading_strategy=cast(ReloadingStrategy | None, strategy),
    )
    if config.root_dir is None:
        config = config.with_overrides(root_dir=Path.cwd())

    click.echo(f"Root directory: {config.root_dir}")
    click.echo(f"Index file: {config.live_reload.index_file}")
    click.echo(f"Reloading strategy: {config.live_reload.reloading_strategy}")
    click.echo(f"Debounce: {config.live_reload.debounce_ms} ms")

    try:
        ok = asyncio.run(_run(config, open_browser=open_browser))
    except KeyboardInterrupt:
        ok = True
    if not ok:
        raise SystemExit(1)


async def _run(config: Config, *, open_browser: bool) -> bool:
    assert config.root_dir is not None
    source = WatchfilesChangeSource(config.root_dir)
    server = LiveServer(config, change_source=source)
    server.use_middleware(StaticFileResolver(lambda: server.config))

    errors: list[ServerErrorEvent] = []

    def on_live(event: GoLiveEvent) -> None:
        click.echo(f"Serving at {event.server.url}")
        if open_browser:
            webbrowser.open(event.server.url)

    def on_offline(event: GoOfflineEvent) -> None:
        click.echo("Server stopped")

    def on_error(event: ServerErrorEvent) -> None:
        errors.append(event)
        click.echo(f"Error ({event.code}): {event.message}", err=True)

    server.on_did_go_live.subscribe(on_live)
    server.on_did_go_offline.subscribe(on_offline)
    server.on_server_error.subscribe(on_error)

    await server.go_live()
    if not server.is_running:
        return False

    await source.start()
    try:
        await asyncio.Event().wait()
    finally:
        await source.stop()
        await server.shutdown()
    return not errors
