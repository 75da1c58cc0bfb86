"""
Utility functions for spot-transfer.

This module provides small helpers used across the application:
    - Playlist id extraction from URLs, URIs and bare ids
    - Splitting a sequence into fixed-size batches

Usage:
    from spot_transfer.utils import extract_playlist_id, chunked
"""

import re
from typing import Iterator, Sequence, TypeVar

from spot_transfer.core.exceptions import InvalidIdentifier
from spot_transfer.spotify.models import CollectionReference


T = TypeVar("T")

# "https://open.spotify.com/playlist/<id>?si=...", "spotify:playlist:<id>", "<id>"
_PLAYLIST_ID_PATTERN = re.compile(
    r"playlist/([A-Za-z0-9]+)|^spotify:playlist:([A-Za-z0-9]+)$|^([A-Za-z0-9]+)$"
)


def extract_playlist_id(value: str) -> CollectionReference:
    """
    Extract a playlist reference from a URL, URI or bare id.

    Handles:
        - https://open.spotify.com/playlist/ID
        - https://open.spotify.com/playlist/ID?si=xxx
        - spotify:playlist:ID
        - Just the ID

    Args:
        value: User-supplied playlist URL, URI or id.

    Returns:
        CollectionReference for the playlist.

    Raises:
        InvalidIdentifier: If the input matches none of the forms above.

    Examples:
        extract_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=1")
        # Returns: CollectionReference(id="37i9dQZF1DXcBWIGoYBM5M")

        extract_playlist_id("37i9dQZF1DXcBWIGoYBM5M")
        # Returns: CollectionReference(id="37i9dQZF1DXcBWIGoYBM5M")
    """
    if not isinstance(value, str):
        raise InvalidIdentifier(
            "Playlist input must be a string",
            details={"input": repr(value)}
        )

    match = _PLAYLIST_ID_PATTERN.search(value.strip())
    playlist_id = next((group for group in match.groups() if group), None) if match else None

    if not playlist_id:
        raise InvalidIdentifier(
            f"Could not parse playlist ID from input: {value!r}",
            details={"input": value}
        )

    return CollectionReference(id=playlist_id)


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """
    Yield contiguous slices of at most `size` items, in order.

    Args:
        items: Sequence to split.
        size: Maximum slice length (must be positive).

    Raises:
        ValueError: If size is not positive.

    Example:
        list(chunked([1, 2, 3, 4, 5], 2))  # [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")

    for start in range(0, len(items), size):
        yield items[start:start + size]
