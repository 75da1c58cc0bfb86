"""
Spotify Web API adapter for spot-transfer.

This module wraps spotipy with the five catalog operations a transfer
needs, translating every spotipy / requests failure into a SpotifyError
that keeps the HTTP status and the structured error payload returned by
Spotify.

One SpotifyCatalog is built per run from that run's access token; there
is no shared client instance.

Retries:
    spotipy retries failed requests with backoff by default. A transfer
    treats every failed call as terminal, so the underlying client is
    built with retries=0 and status_retries=0.

Usage:
    from spot_transfer.spotify.client import SpotifyCatalog

    catalog = SpotifyCatalog.from_access_token(access_token, request_timeout=10)
    playlist = catalog.get_collection("37i9dQZF1DXcBWIGoYBM5M")
    page = catalog.get_members("37i9dQZF1DXcBWIGoYBM5M", offset=0, limit=100)
"""

from typing import Any, NoReturn

import requests
import spotipy

from spot_transfer.core.exceptions import SpotifyError


# Spotify rejects playlist_items pages and add-items calls above 100 entries
MAX_PAGE_SIZE = 100
MAX_ITEMS_PER_ADD = 100

# Field masks keep responses small; a transfer only needs these fields
COLLECTION_FIELDS = "id,name,owner(id,display_name)"
MEMBER_FIELDS = "items(track(uri,is_local)),total"


def _api_error_payload(error: spotipy.SpotifyException) -> dict[str, Any]:
    """Structured error body of a failed Web API call."""
    payload: dict[str, Any] = {"status": error.http_status, "message": error.msg}
    if getattr(error, "reason", None):
        payload["reason"] = error.reason
    return payload


def _raise_spotify_error(
    action: str,
    error: Exception,
    details: dict[str, Any]
) -> NoReturn:
    """
    Re-raise a spotipy or requests exception as SpotifyError.

    Args:
        action: What was being done, e.g. "fetch playlist".
        error: The original exception.
        details: Context for the error (ids, offsets).
    """
    details = {**details, "original_error": str(error)}

    if isinstance(error, spotipy.SpotifyException):
        if error.http_status == 429:
            message = f"Rate limited while trying to {action}"
        else:
            message = f"Failed to {action}: {error.msg}"
        raise SpotifyError(
            message,
            details={**details, "http_status": error.http_status},
            http_status=error.http_status,
            api_error=_api_error_payload(error)
        ) from error

    raise SpotifyError(
        f"Network error while trying to {action}: {error}",
        details=details
    ) from error


class SpotifyCatalog:
    """
    Catalog operations used by the transfer pipeline.

    Read operations:
        get_collection, get_current_user, get_members
    Write operations:
        create_collection, append_members

    All methods raise SpotifyError on failure.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        self._spotify = spotify_instance

    @classmethod
    def from_access_token(
        cls,
        access_token: str,
        request_timeout: int = 10
    ) -> "SpotifyCatalog":
        """
        Build a catalog client authorized with a bearer token.

        Args:
            access_token: Short-lived token from CredentialProvider.refresh().
            request_timeout: Per-request timeout in seconds.
        """
        spotify_instance = spotipy.Spotify(
            auth=access_token,
            requests_timeout=request_timeout,
            retries=0,
            status_retries=0
        )
        return cls(spotify_instance)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_collection(
        self,
        playlist_id: str,
        fields: str = COLLECTION_FIELDS
    ) -> dict[str, Any]:
        """
        Get playlist metadata.

        Args:
            playlist_id: Spotify playlist id.
            fields: Field mask for the response.

        Returns:
            Playlist dictionary restricted to `fields`
            (by default id, name and owner).

        Raises:
            SpotifyError: If the playlist is not found, not accessible,
                          or a network error occurs.
        """
        details = {"playlist_id": playlist_id}
        try:
            result = self._spotify.playlist(playlist_id, fields=fields)
        except (spotipy.SpotifyException, requests.RequestException) as e:
            _raise_spotify_error("fetch playlist", e, details)

        if result is None:
            raise SpotifyError(f"Playlist not found: {playlist_id}", details=details)
        return result

    def get_current_user(self) -> dict[str, Any]:
        """
        Get the profile of the user the access token belongs to.

        Returns:
            User dictionary with at least 'id' and 'display_name'.

        Raises:
            SpotifyError: On authentication or network failure.
        """
        try:
            result = self._spotify.current_user()
        except (spotipy.SpotifyException, requests.RequestException) as e:
            _raise_spotify_error("fetch current user", e, {})

        if result is None:
            raise SpotifyError("Failed to fetch current user")
        return result

    def get_members(
        self,
        playlist_id: str,
        offset: int = 0,
        limit: int = MAX_PAGE_SIZE,
        fields: str = MEMBER_FIELDS
    ) -> dict[str, Any]:
        """
        Get one page of playlist items.

        Args:
            playlist_id: Spotify playlist id.
            offset: Index of the first item to return.
            limit: Page size (max 100).
            fields: Field mask for the response.

        Returns:
            Page dictionary with an 'items' list (and 'total').
            Episodes are not requested, so their slots come back without
            a track object.

        Raises:
            SpotifyError: On any API or network failure.
        """
        details = {"playlist_id": playlist_id, "offset": offset, "limit": limit}
        try:
            result = self._spotify.playlist_items(
                playlist_id,
                fields=fields,
                limit=min(limit, MAX_PAGE_SIZE),
                offset=offset,
                additional_types=("track",)
            )
        except (spotipy.SpotifyException, requests.RequestException) as e:
            _raise_spotify_error("fetch playlist items", e, details)

        if result is None:
            raise SpotifyError("Failed to fetch playlist items", details=details)
        return result

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create_collection(
        self,
        owner_id: str,
        name: str,
        description: str = "",
        public: bool = False
    ) -> dict[str, Any]:
        """
        Create a new playlist owned by `owner_id`.

        Args:
            owner_id: Spotify user id (must be the authenticated user).
            name: Playlist name.
            description: Playlist description.
            public: Playlist visibility.

        Returns:
            The created playlist dictionary (contains 'id' and 'name').

        Raises:
            SpotifyError: On permission, quota or network failure.
        """
        details = {"owner_id": owner_id, "name": name}
        try:
            result = self._spotify.user_playlist_create(
                owner_id,
                name,
                public=public,
                description=description
            )
        except (spotipy.SpotifyException, requests.RequestException) as e:
            _raise_spotify_error("create playlist", e, details)

        if result is None:
            raise SpotifyError("Failed to create playlist", details=details)
        return result

    def append_members(self, playlist_id: str, uris: list[str]) -> None:
        """
        Append tracks to the end of a playlist in one call.

        Args:
            playlist_id: Target playlist id.
            uris: Track URIs, at most 100.

        Raises:
            ValueError: If more than 100 URIs are passed.
            SpotifyError: On any API or network failure.
        """
        if len(uris) > MAX_ITEMS_PER_ADD:
            raise ValueError(
                f"Cannot add {len(uris)} items in one call (max {MAX_ITEMS_PER_ADD})"
            )

        try:
            self._spotify.playlist_add_items(playlist_id, list(uris))
        except (spotipy.SpotifyException, requests.RequestException) as e:
            _raise_spotify_error(
                "add tracks to playlist",
                e,
                {"playlist_id": playlist_id, "batch_size": len(uris)}
            )
