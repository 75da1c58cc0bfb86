"""
Data models for Spotify entities used by a transfer.

All models are frozen dataclasses: once built from an API response they
are passed between pipeline stages without modification.

Usage:
    from spot_transfer.spotify.models import CollectionReference, MemberItem

    source = CollectionReference(id="37i9dQZF1DXcBWIGoYBM5M")
    item = MemberItem.from_spotify_api(page["items"][0])
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CollectionReference:
    """
    Reference to a playlist by its Spotify id.

    Built by extract_playlist_id(), which guarantees the id only contains
    characters of Spotify's base62 id alphabet.

    Attributes:
        id: Playlist id, e.g. "37i9dQZF1DXcBWIGoYBM5M".
    """
    id: str

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class MemberItem:
    """
    One slot of a playlist listing, reduced to what a transfer needs.

    Attributes:
        uri: Track URI ("spotify:track:..."). May be empty for unavailable
             tracks or local files without a catalog URI.
        is_local: True for local files, which cannot be added elsewhere.
    """
    uri: str
    is_local: bool = False

    @property
    def is_transferable(self) -> bool:
        """True when the item is a catalog track with a URI."""
        return not self.is_local and bool(self.uri)

    @classmethod
    def from_spotify_api(cls, item: dict[str, Any] | None) -> "MemberItem | None":
        """
        Build a MemberItem from a `playlist_items` entry.

        Args:
            item: One element of the 'items' list, shaped by the field mask
                  'items(track(uri,is_local))'.

        Returns:
            The MemberItem, or None when the slot has no track object
            (track removed from Spotify, or filtered out by type).
        """
        if not isinstance(item, dict):
            return None

        track = item.get("track")
        if not isinstance(track, dict):
            return None

        return cls(
            uri=track.get("uri") or "",
            is_local=bool(track.get("is_local", False))
        )


@dataclass(frozen=True)
class SourceCollection:
    """
    Metadata of the source playlist.

    Attributes:
        id: Playlist id.
        name: Playlist name, used to name a created target playlist.
        owner: Owner display name (falls back to the owner id).
    """
    id: str
    name: str
    owner: str = ""

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "SourceCollection":
        owner = data.get("owner") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "Unknown Playlist",
            owner=owner.get("display_name") or owner.get("id") or ""
        )


@dataclass(frozen=True)
class CatalogUser:
    """The authenticated Spotify user."""
    id: str
    display_name: str = ""

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "CatalogUser":
        return cls(id=data["id"], display_name=data.get("display_name") or data["id"])


@dataclass(frozen=True)
class DestinationTarget:
    """
    The playlist tracks are appended to during one run.

    Attributes:
        id: Playlist id.
        name: Playlist name.
        created: True if the playlist was created by this run.
    """
    id: str
    name: str
    created: bool = False

    def __str__(self) -> str:
        return f'"{self.name}" ({self.id})'


@dataclass(frozen=True)
class TransferSet:
    """
    Ordered, duplicate-free sequence of track URIs to add to the target.

    Attributes:
        uris: The URIs, in the order they will be added.
        duplicates_removed: How many repeated URIs were dropped while
                            building the set. Informational only.
    """
    uris: tuple[str, ...]
    duplicates_removed: int = 0

    def __len__(self) -> int:
        return len(self.uris)

    def __iter__(self):
        return iter(self.uris)

    @property
    def is_empty(self) -> bool:
        return not self.uris


@dataclass(frozen=True)
class TransferResult:
    """
    Outcome of a completed transfer run.

    Attributes:
        source: Source playlist metadata.
        destination: Target playlist, or None when nothing was transferred.
        transfer_set: What was (or would have been) added.
        committed: Number of tracks added to the target.
        batches: Number of append calls issued.
    """
    source: SourceCollection
    destination: DestinationTarget | None
    transfer_set: TransferSet
    committed: int
    batches: int
