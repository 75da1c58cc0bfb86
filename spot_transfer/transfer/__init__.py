"""
Transfer pipeline for spot-transfer.

Stages:
    collector   - Read the source playlist, page by page
    builder     - Deduplicate and optionally reverse
    destination - Find or create the target playlist
    applier     - Append in ordered batches of 100
    pipeline    - Run the stages under a RunContext

Usage:
    from spot_transfer.transfer import run_transfer
"""

from spot_transfer.transfer.applier import MAX_BATCH_SIZE, apply_batches
from spot_transfer.transfer.builder import build_transfer_set, deduplicate
from spot_transfer.transfer.collector import collect_track_uris, fetch_source_collection
from spot_transfer.transfer.destination import resolve_destination
from spot_transfer.transfer.pipeline import TransferPipeline, run_transfer

__all__ = [
    "MAX_BATCH_SIZE",
    "apply_batches",
    "build_transfer_set",
    "deduplicate",
    "collect_track_uris",
    "fetch_source_collection",
    "resolve_destination",
    "TransferPipeline",
    "run_transfer",
]
