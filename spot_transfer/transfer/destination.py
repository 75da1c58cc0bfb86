"""
Target playlist resolution.

Either an explicit target playlist is looked up, or a new private
playlist is created for the authenticated user. Both paths are single
attempts: any failure ends the run.

Created playlist naming:
    name:        "<source name> (<tag>-<last 6 digits of epoch millis>)"
    description: 'Copy of "<source name>" created on <ISO-8601 instant>'
                 'Reversed copy of "<source name>" created on <...>'

    The millisecond suffix keeps repeated runs from producing playlists
    with identical names.
"""

from datetime import datetime, timezone
from typing import Callable

from spot_transfer.core.context import TransferMode
from spot_transfer.core.exceptions import (
    DestinationCreateError,
    SpotifyError,
    TargetNotFoundError,
)
from spot_transfer.core.logger import get_logger
from spot_transfer.spotify.client import SpotifyCatalog
from spot_transfer.spotify.models import (
    CatalogUser,
    CollectionReference,
    DestinationTarget,
    SourceCollection,
)

logger = get_logger(__name__)


_DESCRIPTION_PREFIX = {
    TransferMode.COPY: "Copy",
    TransferMode.REVERSED: "Reversed copy",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_destination_name(source_name: str, mode: TransferMode, now: datetime) -> str:
    """
    Name for a created playlist.

    Example:
        format_destination_name("Road Trip", TransferMode.REVERSED, now)
        # "Road Trip (reversed-483920)"
    """
    epoch_millis = int(now.timestamp() * 1000)
    suffix = str(epoch_millis)[-6:]
    return f"{source_name} ({mode.value}-{suffix})"


def format_destination_description(source_name: str, mode: TransferMode, now: datetime) -> str:
    """
    Description for a created playlist, e.g.
    'Copy of "Road Trip" created on 2024-05-01T09:30:00.000Z'.
    """
    instant = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    instant = instant.replace("+00:00", "Z")
    return f'{_DESCRIPTION_PREFIX[mode]} of "{source_name}" created on {instant}'


def fetch_target(catalog: SpotifyCatalog, target: CollectionReference) -> DestinationTarget:
    """
    Look up an explicitly requested target playlist.

    Raises:
        TargetNotFoundError: If the playlist cannot be fetched.
    """
    logger.info(f"Using existing playlist as target: {target.id}")
    try:
        data = catalog.get_collection(target.id, fields="id,name")
    except SpotifyError as e:
        raise TargetNotFoundError.from_spotify_error(
            f"Error accessing target playlist {target.id}: {e.message}",
            e,
            details={"playlist_id": target.id}
        ) from e

    destination = DestinationTarget(id=data["id"], name=data.get("name") or "", created=False)
    logger.info(f"Target playlist: {destination}")
    return destination


def create_target(
    catalog: SpotifyCatalog,
    source: SourceCollection,
    mode: TransferMode,
    public: bool = False,
    now: Callable[[], datetime] = utc_now
) -> DestinationTarget:
    """
    Create a new playlist owned by the authenticated user.

    Args:
        catalog: Catalog client for this run.
        source: Source playlist metadata (its name seeds the new name).
        mode: Transfer mode; selects the name tag and description.
        public: Visibility of the new playlist.
        now: Clock, injectable for tests.

    Raises:
        DestinationCreateError: If the current user cannot be read or the
                                playlist cannot be created.
    """
    instant = now()
    name = format_destination_name(source.name, mode, instant)
    description = format_destination_description(source.name, mode, instant)
    hint = (
        "Please create a playlist manually and re-run with its ID as the target argument."
    )

    try:
        logger.info("Getting current user information...")
        user = CatalogUser.from_spotify_api(catalog.get_current_user())
        logger.info(f"Current user: {user.display_name}")

        logger.info(f'Creating new playlist: "{name}"')
        data = catalog.create_collection(
            user.id,
            name,
            description=description,
            public=public
        )
    except SpotifyError as e:
        raise DestinationCreateError.from_spotify_error(
            f"Error creating playlist: {e.message}. {hint}",
            e,
            details={"name": name}
        ) from e

    return DestinationTarget(id=data["id"], name=data.get("name") or name, created=True)


def resolve_destination(
    catalog: SpotifyCatalog,
    source: SourceCollection,
    target: CollectionReference | None,
    mode: TransferMode,
    public: bool = False,
    now: Callable[[], datetime] = utc_now
) -> DestinationTarget:
    """
    Resolve the playlist tracks will be appended to.

    Args:
        catalog: Catalog client for this run.
        source: Source playlist metadata.
        target: Explicit target, or None to create a new playlist.
        mode: Transfer mode.
        public: Visibility of a created playlist.
        now: Clock, injectable for tests.

    Raises:
        TargetNotFoundError: Explicit target could not be fetched.
        DestinationCreateError: New playlist could not be created.
    """
    if target is not None:
        destination = fetch_target(catalog, target)
    else:
        destination = create_target(catalog, source, mode, public=public, now=now)

    logger.info(f"Using playlist: {destination}")
    return destination
