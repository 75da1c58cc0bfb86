"""Test the spotipy adapter"""

from unittest.mock import Mock, patch

import pytest
import requests
import spotipy

from spot_transfer.core.exceptions import SpotifyError
from spot_transfer.spotify.client import (
    COLLECTION_FIELDS,
    MEMBER_FIELDS,
    SpotifyCatalog,
)


@pytest.fixture
def spotify():
    return Mock(spec=spotipy.Spotify)


@pytest.fixture
def catalog(spotify):
    return SpotifyCatalog(spotify)


class TestFromAccessToken:
    def test_builds_client_without_retries(self):
        with patch("spot_transfer.spotify.client.spotipy.Spotify") as spotify_cls:
            catalog = SpotifyCatalog.from_access_token("token", request_timeout=15)

        spotify_cls.assert_called_once_with(
            auth="token",
            requests_timeout=15,
            retries=0,
            status_retries=0
        )
        assert isinstance(catalog, SpotifyCatalog)


class TestReadOperations:
    """Test read calls and their arguments"""

    def test_get_collection(self, catalog, spotify):
        spotify.playlist.return_value = {"id": "p1", "name": "Mix"}

        assert catalog.get_collection("p1") == {"id": "p1", "name": "Mix"}
        spotify.playlist.assert_called_once_with("p1", fields=COLLECTION_FIELDS)

    def test_get_members(self, catalog, spotify):
        spotify.playlist_items.return_value = {"items": [], "total": 0}

        catalog.get_members("p1", offset=200, limit=100)

        spotify.playlist_items.assert_called_once_with(
            "p1",
            fields=MEMBER_FIELDS,
            limit=100,
            offset=200,
            additional_types=("track",)
        )

    def test_get_members_caps_page_size(self, catalog, spotify):
        spotify.playlist_items.return_value = {"items": []}

        catalog.get_members("p1", limit=500)

        assert spotify.playlist_items.call_args.kwargs["limit"] == 100

    def test_get_current_user(self, catalog, spotify):
        spotify.current_user.return_value = {"id": "u1", "display_name": "U"}

        assert catalog.get_current_user()["id"] == "u1"

    def test_none_response_is_an_error(self, catalog, spotify):
        spotify.playlist.return_value = None

        with pytest.raises(SpotifyError):
            catalog.get_collection("p1")


class TestWriteOperations:
    """Test write calls"""

    def test_create_collection(self, catalog, spotify):
        spotify.user_playlist_create.return_value = {"id": "new", "name": "Copy"}

        result = catalog.create_collection("u1", "Copy", description="desc", public=False)

        assert result["id"] == "new"
        spotify.user_playlist_create.assert_called_once_with(
            "u1", "Copy", public=False, description="desc"
        )

    def test_append_members(self, catalog, spotify):
        catalog.append_members("p1", ["spotify:track:a", "spotify:track:b"])

        spotify.playlist_add_items.assert_called_once_with("p1", ["spotify:track:a", "spotify:track:b"])

    def test_append_rejects_oversized_batch(self, catalog, spotify):
        with pytest.raises(ValueError):
            catalog.append_members("p1", [f"spotify:track:{i}" for i in range(101)])

        spotify.playlist_add_items.assert_not_called()


class TestErrorTranslation:
    """Test spotipy / requests errors become SpotifyError"""

    def test_http_error_keeps_payload(self, catalog, spotify):
        spotify.playlist.side_effect = spotipy.SpotifyException(
            404, -1, "Resource not found", reason="NOT_FOUND"
        )

        with pytest.raises(SpotifyError) as exc_info:
            catalog.get_collection("p1")

        error = exc_info.value
        assert error.http_status == 404
        assert error.api_error == {"status": 404, "message": "Resource not found", "reason": "NOT_FOUND"}
        assert error.details["playlist_id"] == "p1"
        assert isinstance(error.__cause__, spotipy.SpotifyException)

    def test_rate_limit_message(self, catalog, spotify):
        spotify.playlist_add_items.side_effect = spotipy.SpotifyException(429, -1, "Too many requests")

        with pytest.raises(SpotifyError) as exc_info:
            catalog.append_members("p1", ["spotify:track:a"])

        assert "Rate limited" in exc_info.value.message
        assert exc_info.value.http_status == 429

    def test_network_error(self, catalog, spotify):
        spotify.playlist_items.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(SpotifyError) as exc_info:
            catalog.get_members("p1")

        assert exc_info.value.http_status is None
        assert exc_info.value.api_error is None
        assert "Network error" in exc_info.value.message
        # called exactly once: no retry
        assert spotify.playlist_items.call_count == 1
