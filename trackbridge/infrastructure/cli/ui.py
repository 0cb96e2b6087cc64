"""UI helpers for CLI interaction.

Reusable Rich rendering and the command error handler, keeping presentation
separate from the use cases.
"""

from collections.abc import Callable
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.table import Table
import typer

from trackbridge.application.use_cases import (
    PlaylistDetail,
    PlaylistSummary,
    ProcessPlaylistBatchResult,
)
from trackbridge.config import get_logger
from trackbridge.domain.entities import PlaylistStatus, TrackStatus

console = Console()
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

_STATUS_STYLES = {
    PlaylistStatus.IMPORTING: "cyan",
    PlaylistStatus.PROCESSING: "yellow",
    PlaylistStatus.READY: "green",
    PlaylistStatus.FAILED: "red",
    TrackStatus.PENDING: "yellow",
    TrackStatus.READY: "green",
    TrackStatus.UNMATCHED: "red",
}


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Errors are logged with their traceback, shown to the user as one line,
    and turned into exit code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def styled_status(status: str) -> str:
    style = _STATUS_STYLES.get(status, "white")  # type: ignore[call-overload]
    return f"[{style}]{status}[/{style}]"


def render_playlists(playlists: list[PlaylistSummary]) -> None:
    if not playlists:
        console.print("[dim]No playlists imported yet[/dim]")
        return

    table = Table(title="Playlists", show_lines=False)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Ready", justify="right")
    table.add_column("Unmatched", justify="right")
    table.add_column("Pending", justify="right")
    table.add_column("Total", justify="right")

    for playlist in playlists:
        table.add_row(
            str(playlist.id),
            playlist.name,
            str(playlist.source),
            styled_status(playlist.status),
            str(playlist.ready_tracks),
            str(playlist.unmatched_tracks),
            str(playlist.pending_tracks),
            str(playlist.total_tracks),
        )
    console.print(table)


def render_playlist_detail(detail: PlaylistDetail) -> None:
    summary = detail.summary
    counts = detail.counts
    console.print(
        f"[bold]{summary.name}[/bold] [dim]({summary.source} {summary.source_playlist_id})[/dim] "
        f"{styled_status(summary.status)}"
    )
    console.print(
        f"{counts.ready} ready, {counts.unmatched} unmatched, "
        f"{counts.pending} pending of {summary.total_tracks}"
    )

    table = Table(show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Status")
    table.add_column("Catalog match")

    for track in detail.tracks:
        if track.status == TrackStatus.READY:
            match = f"{track.catalog_title} - {track.catalog_artist_name}"
        else:
            match = track.unmatched_reason or ""
        table.add_row(
            str(track.position + 1),
            track.title,
            ", ".join(track.artist_names),
            styled_status(track.status),
            match,
        )
    console.print(table)


def render_batch_summary(results: list[ProcessPlaylistBatchResult]) -> None:
    processed = sum(result.processed for result in results)
    matched = sum(result.matched for result in results)
    unmatched = sum(result.unmatched for result in results)
    stale = sum(result.stale for result in results)
    console.print(
        f"[green]✓[/green] {len(results)} batch runs: {processed} tracks processed, "
        f"{matched} matched, {unmatched} unmatched"
        + (f", {stale} stale" if stale else "")
    )
