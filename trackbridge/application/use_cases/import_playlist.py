"""ImportPlaylist use cases: write an imported track list and start resolution.

``ImportPlaylistUseCase`` is the upsert contract. In one transaction it
creates the playlist (or finds it by owner and source playlist id), replaces
every track, bumps the import generation and seeds counts and status. Tracks
are seeded ready when they come from the target catalog or already carry
playable catalog data, and pending otherwise. The first batch run is
scheduled only after the transaction commits.

``ImportSourcePlaylistUseCase`` fetches the track list from a source catalog
first and records the playlist as failed when that fetch breaks.
"""

from datetime import UTC, datetime
from typing import Protocol

import attrs
from attrs import define, field, validators

from trackbridge.application.utilities.scheduling import BatchScheduler
from trackbridge.config import get_config, get_logger
from trackbridge.domain.entities import (
    TARGET_CATALOG,
    Playlist,
    PlaylistCounts,
    PlaylistSource,
    PlaylistStatus,
    PlaylistTrack,
    TrackStatus,
)
from trackbridge.domain.repositories import UnitOfWorkFactory

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class ImportTrack:
    """One track of an incoming track list, as the source catalog describes it.

    The catalog fields are only set when the source already knows the song in
    the target catalog.
    """

    position: int = field(validator=[validators.instance_of(int), validators.ge(0)])
    title: str = field(validator=validators.instance_of(str))
    artist_names: list[str] = field(factory=list)
    release_year: int | None = None
    image_url: str | None = None
    source_track_id: str | None = None
    isrc: str | None = None
    catalog_track_id: str | None = None
    catalog_album_name: str | None = None
    catalog_release_date: str | None = None
    preview_url: str | None = None
    artwork_url: str | None = None


@define(frozen=True, slots=True)
class ImportPlaylistCommand:
    """Replace an owner's copy of a source playlist with a fresh track list."""

    owner_id: str = field(validator=validators.min_len(1))
    source: PlaylistSource = field(converter=PlaylistSource)
    source_playlist_id: str = field(validator=validators.min_len(1))
    name: str
    description: str | None = None
    image_url: str | None = None
    tracks: list[ImportTrack] = field(factory=list)
    storefront: str | None = None

    @tracks.validator
    def _check_unique_positions(self, attribute, value: list[ImportTrack]) -> None:
        positions = [track.position for track in value]
        if len(positions) != len(set(positions)):
            raise ValueError("Track positions must be unique within a playlist")


@define(frozen=True, slots=True)
class ImportPlaylistResult:
    """Outcome of an import: the stored playlist and whether work was queued."""

    playlist: Playlist
    created: bool
    pending_tracks: int
    scheduled: bool

    @property
    def playlist_id(self) -> int:
        return self.playlist.id  # type: ignore[return-value]


def seed_track(track: ImportTrack, source: PlaylistSource) -> PlaylistTrack:
    """Build the stored track with its initial status."""
    primary_artist = track.artist_names[0] if track.artist_names else None

    if source == TARGET_CATALOG:
        # The source is the target catalog, its own ids are playable as-is
        return PlaylistTrack(
            position=track.position,
            title=track.title,
            artist_names=list(track.artist_names),
            status=TrackStatus.READY,
            isrc=track.isrc,
            release_year=track.release_year,
            image_url=track.image_url,
            source_track_id=track.source_track_id,
            catalog_track_id=track.catalog_track_id or track.source_track_id,
            catalog_title=track.title,
            catalog_artist_name=primary_artist,
            catalog_album_name=track.catalog_album_name,
            catalog_release_year=track.release_year,
            catalog_release_date=track.catalog_release_date,
            preview_url=track.preview_url,
            artwork_url=track.artwork_url or track.image_url,
            catalog_isrc=track.isrc,
        )

    pending = PlaylistTrack(
        position=track.position,
        title=track.title,
        artist_names=list(track.artist_names),
        isrc=track.isrc,
        release_year=track.release_year,
        image_url=track.image_url,
        source_track_id=track.source_track_id,
    )
    resolved = attrs.evolve(
        pending,
        status=TrackStatus.READY,
        catalog_track_id=track.catalog_track_id,
        catalog_title=track.title,
        catalog_artist_name=primary_artist,
        catalog_album_name=track.catalog_album_name,
        catalog_release_year=track.release_year if track.catalog_track_id else None,
        catalog_release_date=track.catalog_release_date,
        preview_url=track.preview_url,
        artwork_url=track.artwork_url,
    )
    # Partial catalog data is dropped, target fields belong to ready tracks only
    return resolved if resolved.is_pre_resolved else pending


class ImportPlaylistUseCase:
    """Upsert a playlist with its full track list."""

    def __init__(
        self, uow_factory: UnitOfWorkFactory, scheduler: BatchScheduler
    ) -> None:
        self.uow_factory = uow_factory
        self.scheduler = scheduler

    async def execute(self, command: ImportPlaylistCommand) -> ImportPlaylistResult:
        tracks = [seed_track(track, command.source) for track in command.tracks]
        ready = sum(1 for track in tracks if track.status == TrackStatus.READY)
        counts = PlaylistCounts(pending=len(tracks) - ready, ready=ready)

        async with self.uow_factory() as uow:
            playlist_repo = uow.get_playlist_repository()
            track_repo = uow.get_track_repository()

            existing = await playlist_repo.find_by_source_id(
                command.owner_id, command.source_playlist_id
            )
            playlist = Playlist(
                owner_id=command.owner_id,
                source=command.source,
                source_playlist_id=command.source_playlist_id,
                name=command.name,
                description=command.description,
                image_url=command.image_url,
                imported_at=datetime.now(UTC),
                status=counts.derive_status(PlaylistStatus.PROCESSING),
                total_tracks=counts.total,
                ready_tracks=counts.ready,
                unmatched_tracks=0,
            )

            if existing is not None:
                removed = await track_repo.delete_tracks(existing.id)
                playlist = attrs.evolve(
                    playlist, import_generation=existing.import_generation + 1
                )
                saved = await playlist_repo.replace_playlist(existing.id, playlist)
                logger.info(
                    f"Re-importing playlist {saved.id} '{saved.name}': replaced "
                    f"{removed} tracks with {counts.total}, generation {saved.import_generation}"
                )
            else:
                saved = await playlist_repo.create_playlist(playlist)
                logger.info(
                    f"Imported new playlist {saved.id} '{saved.name}' "
                    f"with {counts.total} tracks"
                )

            stored = await track_repo.add_tracks(
                saved.id, tracks, saved.import_generation
            )
            saved = saved.with_tracks(stored)

        scheduled = False
        if counts.pending > 0:
            storefront = command.storefront or get_config(
                "CATALOG_DEFAULT_STOREFRONT", "us"
            )
            await self.scheduler.enqueue(saved.id, storefront, saved.import_generation)
            scheduled = True

        return ImportPlaylistResult(
            playlist=saved,
            created=existing is None,
            pending_tracks=counts.pending,
            scheduled=scheduled,
        )


class SourcePlaylistReader(Protocol):
    """Reads a playlist from the catalog it was shared from."""

    async def get_playlist(
        self, source_playlist_id: str, owner_id: str
    ) -> ImportPlaylistCommand:
        """Fetch a playlist and describe it as an import command."""
        ...


class ImportSourcePlaylistUseCase:
    """Fetch a playlist from its source catalog and import it."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        reader: SourcePlaylistReader,
        importer: ImportPlaylistUseCase,
        source: PlaylistSource = PlaylistSource.SPOTIFY,
    ) -> None:
        self.uow_factory = uow_factory
        self.reader = reader
        self.importer = importer
        self.source = source

    async def execute(
        self, owner_id: str, source_playlist_id: str, storefront: str | None = None
    ) -> ImportPlaylistResult:
        """Import one source playlist.

        Raises:
            Whatever the reader raised, after the playlist was marked failed
        """
        try:
            command = await self.reader.get_playlist(source_playlist_id, owner_id)
        except Exception:
            logger.exception(
                f"Fetching {self.source} playlist {source_playlist_id} failed"
            )
            await self._record_failure(owner_id, source_playlist_id)
            raise

        if storefront is not None:
            command = attrs.evolve(command, storefront=storefront)
        return await self.importer.execute(command)

    async def _record_failure(self, owner_id: str, source_playlist_id: str) -> None:
        async with self.uow_factory() as uow:
            playlist_repo = uow.get_playlist_repository()
            existing = await playlist_repo.find_by_source_id(
                owner_id, source_playlist_id
            )
            if existing is not None:
                await playlist_repo.mark_failed(existing.id)
                return

            await playlist_repo.create_playlist(
                Playlist(
                    owner_id=owner_id,
                    source=self.source,
                    source_playlist_id=source_playlist_id,
                    name=source_playlist_id,
                    status=PlaylistStatus.FAILED,
                )
            )
