"""
Transfer set construction: first-occurrence deduplication, then optional
reversal. Pure functions, no I/O besides logging.
"""

from typing import Iterable

from spot_transfer.core.logger import get_logger
from spot_transfer.spotify.models import TransferSet

logger = get_logger(__name__)


def deduplicate(uris: Iterable[str]) -> list[str]:
    """Return `uris` without repeats, keeping each URI's first position."""
    seen: set[str] = set()
    unique: list[str] = []

    for uri in uris:
        if uri not in seen:
            seen.add(uri)
            unique.append(uri)

    return unique


def build_transfer_set(uris: Iterable[str], reverse: bool = False) -> TransferSet:
    """
    Build the transfer set from collected URIs.

    Args:
        uris: URIs in playlist order, possibly with duplicates.
        reverse: If True, the deduplicated sequence is reversed, so the
                 last first-occurrence becomes first.

    Returns:
        A new TransferSet. The input is not modified.

    Example:
        build_transfer_set(["a", "b", "a", "c"])                # a, b, c (1 removed)
        build_transfer_set(["a", "b", "a", "c"], reverse=True)  # c, b, a
    """
    uris = list(uris)
    unique = deduplicate(uris)
    removed = len(uris) - len(unique)

    if removed > 0:
        logger.info(f"Removed {removed} duplicate tracks")

    if reverse:
        unique.reverse()
        logger.info(f"Reversed the order of {len(unique)} tracks")

    return TransferSet(uris=tuple(unique), duplicates_removed=removed)
