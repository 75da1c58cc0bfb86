"""
Source playlist collection.

Reads the source playlist's metadata and every page of its items,
keeping only tracks that can be added to another playlist.

Pagination:
    Pages are requested from offset 0, advancing by the number of items
    each page returned, until a page comes back shorter than the page
    size. The playlist's reported 'total' is not used to decide when to
    stop. Pages are fetched one after another; any failed page aborts the
    whole collection.

Filtering:
    An item is kept only when it has a track object that is not a local
    file and has a non-empty URI. Everything else (local files, removed
    tracks, episodes) is dropped and counted.
"""

from spot_transfer.core.exceptions import SourceFetchError, SpotifyError
from spot_transfer.core.logger import get_logger
from spot_transfer.spotify.client import MAX_PAGE_SIZE, MEMBER_FIELDS, SpotifyCatalog
from spot_transfer.spotify.models import CollectionReference, MemberItem, SourceCollection

logger = get_logger(__name__)


def fetch_source_collection(
    catalog: SpotifyCatalog,
    source: CollectionReference
) -> SourceCollection:
    """
    Fetch the source playlist's metadata.

    Raises:
        SourceFetchError: If the playlist cannot be read.
    """
    logger.info(f"Getting information for playlist: {source.id}")
    try:
        data = catalog.get_collection(source.id)
    except SpotifyError as e:
        raise SourceFetchError.from_spotify_error(
            f"Could not read source playlist {source.id}: {e.message}",
            e,
            details={"playlist_id": source.id}
        ) from e

    collection = SourceCollection.from_spotify_api(data)
    logger.info(f'Found playlist: "{collection.name}" by {collection.owner}')
    return collection


def collect_track_uris(
    catalog: SpotifyCatalog,
    source: CollectionReference,
    limit: int = MAX_PAGE_SIZE
) -> list[str]:
    """
    Collect the URIs of every transferable track of a playlist.

    Args:
        catalog: Catalog client for this run.
        source: Playlist to read.
        limit: Page size, 1..100. Fixed at 100 in normal use.

    Returns:
        Track URIs in playlist order (duplicates included).

    Raises:
        ValueError: If limit is outside 1..100. The catalog caps pages at
                    100, so a larger limit would end collection early.
        SourceFetchError: If any page fails. No partial result is returned.
    """
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")

    logger.info("Getting tracks from source playlist...")

    uris: list[str] = []
    offset = 0
    skipped = 0
    pages = 0

    while True:
        try:
            page = catalog.get_members(
                source.id,
                offset=offset,
                limit=limit,
                fields=MEMBER_FIELDS
            )
        except SpotifyError as e:
            raise SourceFetchError.from_spotify_error(
                f"Could not read tracks of playlist {source.id} at offset {offset}: {e.message}",
                e,
                details={"playlist_id": source.id, "offset": offset}
            ) from e

        items = page.get("items") or []
        pages += 1

        for raw_item in items:
            member = MemberItem.from_spotify_api(raw_item)
            if member is None or not member.is_transferable:
                skipped += 1
                continue
            uris.append(member.uri)

        logger.debug(f"Page {pages}: offset {offset}, {len(items)} items")

        if len(items) < limit:
            break
        offset += len(items)

    if skipped > 0:
        logger.warning(f"Skipped {skipped} items (local files, unavailable tracks, episodes)")

    logger.info(f"Found {len(uris)} valid tracks")
    return uris
