"""Test configuration and fixtures"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from spot_transfer.core.exceptions import SpotifyError


def track_item(uri):
    """A playlist_items entry for a catalog track"""
    return {"track": {"uri": uri, "is_local": False}}


def local_item(name):
    """A playlist_items entry for a local file"""
    return {"track": {"uri": f"spotify:local:::{name}:180", "is_local": True}}


def track_uris(count, prefix="t"):
    return [f"spotify:track:{prefix}{index:04d}" for index in range(count)]


def not_found_error(playlist_id):
    return SpotifyError(
        "Failed to fetch playlist: Resource not found",
        details={"playlist_id": playlist_id},
        http_status=404,
        api_error={"status": 404, "message": "Resource not found"}
    )


class FakeCatalog:
    """
    In-memory stand-in for SpotifyCatalog.

    Playlists are stored as {"id", "name", "owner", "items"} dicts. Every
    call is recorded in `calls` as (method, args). `fail(method, error, on_call)`
    makes the on_call-th call (1-based) of `method` raise `error`; with
    on_call=None every call of that method fails.
    """

    MUTATING = ("create_collection", "append_members")

    def __init__(self):
        self.playlists = {}
        self.user = {"id": "user_1", "display_name": "Test User"}
        self.calls = []
        self._failures = {}
        self._counts = {}
        self._created = 0

    # -- setup helpers -------------------------------------------------------

    def add_playlist(self, playlist_id, name="Source", items=None, owner="Owner"):
        self.playlists[playlist_id] = {
            "id": playlist_id,
            "name": name,
            "owner": {"id": owner.lower(), "display_name": owner},
            "items": list(items or []),
        }

    def fail(self, method, error=None, on_call=None):
        if error is None:
            error = SpotifyError(
                f"{method} failed",
                http_status=500,
                api_error={"status": 500, "message": "Server error"}
            )
        self._failures[method] = (on_call, error)

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    @property
    def mutating_calls(self):
        return [call for call in self.calls if call[0] in self.MUTATING]

    def uris_in(self, playlist_id):
        return [item["track"]["uri"] for item in self.playlists[playlist_id]["items"]]

    def _record(self, method, *args):
        self.calls.append((method, args))
        self._counts[method] = self._counts.get(method, 0) + 1

        if method in self._failures:
            on_call, error = self._failures[method]
            if on_call is None or on_call == self._counts[method]:
                raise error

    # -- catalog operations --------------------------------------------------

    def get_collection(self, playlist_id, fields=None):
        self._record("get_collection", playlist_id, fields)
        if playlist_id not in self.playlists:
            raise not_found_error(playlist_id)
        playlist = self.playlists[playlist_id]
        return {"id": playlist["id"], "name": playlist["name"], "owner": playlist["owner"]}

    def get_current_user(self):
        self._record("get_current_user")
        return dict(self.user)

    def get_members(self, playlist_id, offset=0, limit=100, fields=None):
        self._record("get_members", playlist_id, offset, limit, fields)
        if playlist_id not in self.playlists:
            raise not_found_error(playlist_id)
        items = self.playlists[playlist_id]["items"]
        return {"items": items[offset:offset + limit], "total": len(items)}

    def create_collection(self, owner_id, name, description="", public=False):
        self._record("create_collection", owner_id, name, description, public)
        self._created += 1
        playlist_id = f"created{self._created}"
        self.add_playlist(playlist_id, name=name, owner=owner_id)
        self.playlists[playlist_id]["description"] = description
        self.playlists[playlist_id]["public"] = public
        return {"id": playlist_id, "name": name}

    def append_members(self, playlist_id, uris):
        if len(uris) > 100:
            raise ValueError("more than 100 uris")
        self._record("append_members", playlist_id, list(uris))
        self.playlists[playlist_id]["items"].extend(track_item(uri) for uri in uris)


@pytest.fixture
def fake_catalog():
    """Empty in-memory catalog"""
    return FakeCatalog()


@pytest.fixture
def fixed_now():
    """Frozen clock for playlist naming"""
    instant = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def mock_credentials():
    """Credential provider returning a fixed access token"""
    credentials = Mock()
    credentials.refresh.return_value = "access-token"
    return credentials
