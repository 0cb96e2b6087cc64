"""trackbridge CLI - Main application entry point and commands."""

import asyncio
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

from rich.console import Console
import typer

from trackbridge.application.utilities import InlineBatchScheduler
from trackbridge.config import get_config, get_logger, log_startup_info, setup_loguru_logger
from trackbridge.infrastructure.cli.snapshot import load_snapshot
from trackbridge.infrastructure.cli.ui import (
    command_error_handler,
    render_batch_summary,
    render_playlist_detail,
    render_playlists,
)
from trackbridge.infrastructure.connectors.spotify import SpotifyPlaylistReader
from trackbridge.infrastructure.services.runtime import open_runtime

try:
    VERSION = version("trackbridge")
except PackageNotFoundError:
    VERSION = "0.1.0-dev"

console = Console(width=100)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"trackbridge v{VERSION} - reconcile imported playlists against Apple Music",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

OwnerOption = Annotated[
    str, typer.Option("--owner", "-o", help="Owner the playlists belong to")
]
ProcessOption = Annotated[
    bool,
    typer.Option(
        "--process/--no-process", help="Resolve pending tracks right after importing"
    ),
]


async def _import_and_process(command, process: bool) -> None:
    async with open_runtime() as runtime:
        scheduler = InlineBatchScheduler()
        result = await runtime.import_use_case(scheduler).execute(command)
        console.print(
            f"[green]✓[/green] {'Imported' if result.created else 'Re-imported'} "
            f"playlist [bold]{result.playlist.name}[/bold] (id {result.playlist_id}): "
            f"{result.playlist.total_tracks} tracks, {result.pending_tracks} pending"
        )
        if process and scheduler.pending:
            render_batch_summary(await runtime.drain_inline(scheduler))


@app.command(name="import", rich_help_panel="Import")
@command_error_handler
def import_snapshot(
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="JSON playlist snapshot"),
    ],
    owner: OwnerOption,
    process: ProcessOption = True,
) -> None:
    """Import a playlist from a JSON snapshot file."""
    command = load_snapshot(file, owner)
    asyncio.run(_import_and_process(command, process))


@app.command(name="import-spotify", rich_help_panel="Import")
@command_error_handler
def import_spotify(
    playlist_id: Annotated[str, typer.Argument(help="Spotify playlist ID")],
    owner: OwnerOption,
    token: Annotated[
        str,
        typer.Option(
            "--token",
            envvar="SPOTIFY_ACCESS_TOKEN",
            help="Spotify access token",
        ),
    ],
    process: ProcessOption = True,
) -> None:
    """Fetch a Spotify playlist and import it."""

    async def run() -> None:
        async with open_runtime() as runtime:
            scheduler = InlineBatchScheduler()
            use_case = runtime.import_source_use_case(
                SpotifyPlaylistReader(access_token=token), scheduler
            )
            result = await use_case.execute(owner, playlist_id)
            console.print(
                f"[green]✓[/green] Imported [bold]{result.playlist.name}[/bold] "
                f"(id {result.playlist_id}): {result.playlist.total_tracks} tracks"
            )
            if process and scheduler.pending:
                render_batch_summary(await runtime.drain_inline(scheduler))

    asyncio.run(run())


@app.command(name="process", rich_help_panel="Pipeline")
@command_error_handler
def process_playlist(
    playlist_id: Annotated[int, typer.Argument(help="Internal playlist ID")],
    storefront: Annotated[
        str | None, typer.Option("--storefront", help="Apple Music storefront")
    ] = None,
) -> None:
    """Resolve every pending track of one playlist in this process."""

    async def run() -> None:
        async with open_runtime() as runtime:
            scheduler = InlineBatchScheduler()
            await scheduler.enqueue(
                playlist_id,
                storefront or get_config("CATALOG_DEFAULT_STOREFRONT", "us"),
            )
            render_batch_summary(await runtime.drain_inline(scheduler))

    asyncio.run(run())


@app.command(name="resume", rich_help_panel="Pipeline")
@command_error_handler
def resume_pending(
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Worker count")
    ] = None,
) -> None:
    """Resume every playlist with pending tracks on a worker pool until idle."""

    async def run() -> None:
        async with open_runtime() as runtime:
            async with runtime.worker_pool(workers) as pool:
                result = await runtime.resume_use_case(pool).execute()
                console.print(f"Resuming {result.resumed} playlists")
                await pool.join()
            console.print(
                f"[green]✓[/green] {pool.completed} batch runs completed, "
                f"{pool.failed} failed"
            )

    asyncio.run(run())


@app.command(name="list", rich_help_panel="Read")
@command_error_handler
def list_playlists(owner: OwnerOption) -> None:
    """List an owner's playlists with their progress."""

    async def run() -> None:
        async with open_runtime() as runtime:
            render_playlists(await runtime.queries().list_owned(owner))

    asyncio.run(run())


@app.command(name="show", rich_help_panel="Read")
@command_error_handler
def show_playlist(
    playlist_id: Annotated[int, typer.Argument(help="Internal playlist ID")],
    owner: OwnerOption,
    all_tracks: Annotated[
        bool, typer.Option("--all", help="Include pending and unmatched tracks")
    ] = False,
) -> None:
    """Show a playlist and its tracks."""

    async def run() -> None:
        async with open_runtime() as runtime:
            detail = await runtime.queries().get(owner, playlist_id, all_tracks)
            if detail is None:
                console.print(f"[yellow]Playlist {playlist_id} not found[/yellow]")
                raise typer.Exit(code=1)
            render_playlist_detail(detail)

    asyncio.run(run())


@app.command(name="version", rich_help_panel="System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]trackbridge[/bold bright_blue] [dim]v{VERSION}[/dim]")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize trackbridge CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    setup_loguru_logger(verbose)
    if verbose:
        log_startup_info()


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
