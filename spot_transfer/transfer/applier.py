"""
Batch application of a transfer set to the target playlist.

The transfer set is cut into contiguous batches of at most 100 URIs and
each batch is appended with one API call. Batches go out strictly one
after another, in order: the playlist appends in call order, so this is
what keeps the final track order intact.

Failure:
    The first failing batch stops the transfer with BatchApplyError.
    Batches already applied stay in the playlist (there is no rollback);
    the URIs that were not added are written to the uncommitted tracks
    report so the operator can see what is missing.
"""

from tqdm import tqdm

from spot_transfer.core.exceptions import BatchApplyError, SpotifyError
from spot_transfer.core.logger import get_logger, log_uncommitted_tracks
from spot_transfer.spotify.client import MAX_ITEMS_PER_ADD, SpotifyCatalog
from spot_transfer.spotify.models import DestinationTarget, TransferSet
from spot_transfer.utils import chunked

logger = get_logger(__name__)


MAX_BATCH_SIZE = MAX_ITEMS_PER_ADD


def apply_batches(
    catalog: SpotifyCatalog,
    destination: DestinationTarget,
    transfer_set: TransferSet,
    batch_size: int = MAX_BATCH_SIZE,
    show_progress: bool = False
) -> tuple[int, int]:
    """
    Append every URI of the transfer set to the destination playlist.

    Args:
        catalog: Catalog client for this run.
        destination: Playlist to append to.
        transfer_set: URIs to add, in order.
        batch_size: URIs per call, at most 100.
        show_progress: Whether to show a tqdm progress bar.

    Returns:
        Tuple of (committed track count, number of batches applied).

    Raises:
        ValueError: If batch_size is outside 1..100.
        BatchApplyError: If a batch fails. Carries the 1-based index of the
                         failed batch and the number of tracks committed by
                         earlier batches. Later batches are not attempted.
    """
    if not 1 <= batch_size <= MAX_BATCH_SIZE:
        raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {batch_size}")

    uris = list(transfer_set.uris)
    batches = list(chunked(uris, batch_size))
    total = len(batches)
    committed = 0

    logger.info(f"Adding {len(uris)} tracks to the playlist...")

    with tqdm(total=total, desc="Adding batches", unit="batch", disable=not show_progress) as progress:
        for index, batch in enumerate(batches, start=1):
            logger.info(f"Adding batch {index}/{total}...")
            try:
                catalog.append_members(destination.id, list(batch))
            except SpotifyError as e:
                log_uncommitted_tracks(logger, uris[committed:], str(destination), index)
                raise BatchApplyError(
                    f"Failed to add batch {index}/{total} to {destination}: {e.message} "
                    f"({committed} tracks were added before the failure)",
                    failed_index=index,
                    committed=committed,
                    details={"playlist_id": destination.id, "original_error": e.message},
                    api_error=e.api_error
                ) from e

            committed += len(batch)
            progress.update(1)

    return committed, total
