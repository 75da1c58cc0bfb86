"""
Transfer pipeline: copy (or reverse-copy) one playlist into another.

Workflow (one RunContext per run):
    1. EXTRACTING      Parse source / target inputs into playlist ids
    2. AUTHENTICATING  Exchange the refresh token for an access token
    3. COLLECTING      Read source metadata and every page of its tracks
    4. BUILDING        Deduplicate, reverse if requested
                       (an empty set ends the run here: nothing is
                       created or appended)
    5. RESOLVING       Look up the explicit target or create a new playlist
    6. APPLYING        Append the tracks in batches of 100, in order
    7. DONE

Any exception moves the run to FAILED and is re-raised unchanged. The
failure kind is the TransferError kind, or "unexpected" for anything else.
Nothing is retried and nothing already applied is rolled back.

Usage:
    pipeline = TransferPipeline(
        credentials=CredentialProvider(client_id, client_secret, redirect_uri),
        catalog_factory=SpotifyCatalog.from_access_token
    )
    context = RunContext(mode=TransferMode.REVERSED)
    result = pipeline.run(context, source_url, target_url, refresh_token)
"""

from datetime import datetime
from typing import Callable

from spot_transfer.core.context import RunContext, RunStage, TransferMode
from spot_transfer.core.exceptions import TransferError
from spot_transfer.core.logger import get_logger
from spot_transfer.spotify.auth import CredentialProvider
from spot_transfer.spotify.client import SpotifyCatalog
from spot_transfer.spotify.models import TransferResult
from spot_transfer.transfer.applier import apply_batches
from spot_transfer.transfer.builder import build_transfer_set
from spot_transfer.transfer.collector import collect_track_uris, fetch_source_collection
from spot_transfer.transfer.destination import resolve_destination, utc_now
from spot_transfer.utils import extract_playlist_id

logger = get_logger(__name__)


# RunContext.failure_kind for errors outside the TransferError taxonomy
UNEXPECTED_FAILURE = "unexpected"


class TransferPipeline:
    """
    Runs transfers. Holds only collaborators and settings; all per-run
    state lives in the RunContext passed to run().

    Attributes:
        _credentials: Exchanges refresh tokens for access tokens.
        _catalog_factory: Builds a catalog client from an access token.
        _public: Visibility of playlists created by a run.
        _now: Clock used to name created playlists.
        _show_progress: Whether the batch progress bar is shown.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        catalog_factory: Callable[[str], SpotifyCatalog],
        public: bool = False,
        now: Callable[[], datetime] = utc_now,
        show_progress: bool = False
    ) -> None:
        self._credentials = credentials
        self._catalog_factory = catalog_factory
        self._public = public
        self._now = now
        self._show_progress = show_progress

    def run(
        self,
        context: RunContext,
        source_input: str,
        target_input: str | None,
        refresh_token: str | None
    ) -> TransferResult:
        """
        Run one transfer to completion.

        Args:
            context: Fresh RunContext (stage IDLE) for this run.
            source_input: Source playlist URL, URI or id.
            target_input: Target playlist URL, URI or id, or None to
                          create a new playlist.
            refresh_token: Stored refresh token.

        Returns:
            TransferResult describing what was transferred.

        Raises:
            InvalidIdentifier, AuthError, SourceFetchError,
            TargetNotFoundError, DestinationCreateError, BatchApplyError:
                The run failed at the corresponding stage.
            RunStateError: If the context was already used.
            Exception: Anything else is re-raised after the run is marked
                       FAILED with kind "unexpected".
        """
        logger.info(f"[{context.run_id}] Starting {context.mode.value} for: {source_input}")

        try:
            context.advance(RunStage.EXTRACTING)
            context.source = extract_playlist_id(source_input)
            logger.info(f"Extracted source playlist ID: {context.source.id}")
            if target_input:
                context.target = extract_playlist_id(target_input)
                logger.info(f"Extracted target playlist ID: {context.target.id}")

            context.advance(RunStage.AUTHENTICATING)
            context.access_token = self._credentials.refresh(refresh_token)
            catalog = self._catalog_factory(context.access_token)

            context.advance(RunStage.COLLECTING)
            source = fetch_source_collection(catalog, context.source)
            uris = collect_track_uris(catalog, context.source)

            context.advance(RunStage.BUILDING)
            transfer_set = build_transfer_set(uris, reverse=context.mode.reverse)

            if transfer_set.is_empty:
                logger.info("No valid tracks found to transfer. Ending process.")
                context.advance(RunStage.DONE)
                return TransferResult(
                    source=source,
                    destination=None,
                    transfer_set=transfer_set,
                    committed=0,
                    batches=0
                )

            context.advance(RunStage.RESOLVING)
            destination = resolve_destination(
                catalog,
                source,
                context.target,
                context.mode,
                public=self._public,
                now=self._now
            )

            context.advance(RunStage.APPLYING)
            committed, batches = apply_batches(
                catalog,
                destination,
                transfer_set,
                show_progress=self._show_progress
            )

            context.advance(RunStage.DONE)

        except TransferError as e:
            context.fail(e.kind)
            logger.error(f"[{context.run_id}] Transfer failed ({e.kind}): {e.message}")
            raise

        except Exception as e:
            # A reused context is already terminal; leave its stage alone
            if not context.stage.is_terminal:
                context.fail(UNEXPECTED_FAILURE)
            logger.error(f"[{context.run_id}] Transfer failed unexpectedly: {e}")
            raise

        order = " in reverse order" if context.mode is TransferMode.REVERSED else ""
        logger.info(f"Successfully added {committed} tracks to {destination}{order}")

        return TransferResult(
            source=source,
            destination=destination,
            transfer_set=transfer_set,
            committed=committed,
            batches=batches
        )


def run_transfer(
    source_input: str,
    target_input: str | None,
    mode: TransferMode,
    credentials: CredentialProvider,
    refresh_token: str | None,
    catalog_factory: Callable[[str], SpotifyCatalog] = SpotifyCatalog.from_access_token,
    public: bool = False,
    show_progress: bool = False
) -> tuple[RunContext, TransferResult]:
    """
    Convenience entry point used by the CLI.

    Returns:
        Tuple of (finished RunContext, TransferResult).
    """
    pipeline = TransferPipeline(
        credentials=credentials,
        catalog_factory=catalog_factory,
        public=public,
        show_progress=show_progress
    )
    context = RunContext(mode=mode)
    result = pipeline.run(context, source_input, target_input, refresh_token)
    return context, result
