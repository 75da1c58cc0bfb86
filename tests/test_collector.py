"""Test source playlist collection"""

from unittest.mock import Mock

import pytest
import spotipy

from spot_transfer.core.exceptions import SourceFetchError
from spot_transfer.spotify.client import MEMBER_FIELDS, SpotifyCatalog
from spot_transfer.spotify.models import CollectionReference
from spot_transfer.transfer.collector import collect_track_uris, fetch_source_collection

from conftest import local_item, track_item, track_uris


SOURCE = CollectionReference(id="source1")


def interleaved_items(remote_count, local_count):
    """Remote tracks with a local file after every 25th one"""
    items = []
    locals_left = local_count
    for index, uri in enumerate(track_uris(remote_count)):
        items.append(track_item(uri))
        if locals_left and (index + 1) % 25 == 0:
            items.append(local_item(f"local{locals_left}"))
            locals_left -= 1
    return items


class TestCollectTrackUris:
    """Test paginated collection"""

    def test_skips_local_tracks_across_pages(self, fake_catalog):
        """250 remote tracks interleaved with 10 local ones yield 250 uris"""
        fake_catalog.add_playlist("source1", items=interleaved_items(250, 10))
        assert len(fake_catalog.playlists["source1"]["items"]) == 260

        uris = collect_track_uris(fake_catalog, SOURCE)

        assert uris == track_uris(250)

    def test_offsets_advance_by_returned_count(self, fake_catalog):
        fake_catalog.add_playlist("source1", items=interleaved_items(250, 10))

        collect_track_uris(fake_catalog, SOURCE)

        calls = fake_catalog.calls_to("get_members")
        assert [call[1] for call in calls] == [0, 100, 200]
        assert all(call[2] == 100 for call in calls)
        assert all(call[3] == MEMBER_FIELDS for call in calls)

    def test_exact_multiple_fetches_one_empty_page(self, fake_catalog):
        """A full last page is followed by one more request that comes back empty"""
        fake_catalog.add_playlist("source1", items=[track_item(u) for u in track_uris(200)])

        uris = collect_track_uris(fake_catalog, SOURCE)

        assert len(uris) == 200
        assert [call[1] for call in fake_catalog.calls_to("get_members")] == [0, 100, 200]

    def test_empty_playlist(self, fake_catalog):
        fake_catalog.add_playlist("source1", items=[])

        assert collect_track_uris(fake_catalog, SOURCE) == []
        assert len(fake_catalog.calls_to("get_members")) == 1

    def test_drops_unavailable_and_uriless_items(self, fake_catalog):
        items = [
            track_item("spotify:track:a"),
            {"track": None},
            {"track": {"uri": None, "is_local": False}},
            {"track": {"uri": "", "is_local": False}},
            None,
            track_item("spotify:track:b"),
        ]
        fake_catalog.add_playlist("source1", items=items)

        assert collect_track_uris(fake_catalog, SOURCE) == ["spotify:track:a", "spotify:track:b"]

    def test_keeps_duplicates(self, fake_catalog):
        """Deduplication is not the collector's job"""
        items = [track_item("spotify:track:a"), track_item("spotify:track:a")]
        fake_catalog.add_playlist("source1", items=items)

        assert collect_track_uris(fake_catalog, SOURCE) == ["spotify:track:a"] * 2

    def test_page_failure_raises_without_partial_result(self, fake_catalog):
        fake_catalog.add_playlist("source1", items=[track_item(u) for u in track_uris(250)])
        fake_catalog.fail("get_members", on_call=2)

        with pytest.raises(SourceFetchError) as exc_info:
            collect_track_uris(fake_catalog, SOURCE)

        error = exc_info.value
        assert error.kind == "source_fetch"
        assert error.details["offset"] == 100
        assert error.details["playlist_id"] == "source1"
        assert error.api_error == {"status": 500, "message": "Server error"}
        # no further pages after the failure
        assert len(fake_catalog.calls_to("get_members")) == 2


class TestFetchSourceCollection:
    """Test source metadata lookup"""

    def test_returns_metadata(self, fake_catalog):
        fake_catalog.add_playlist("source1", name="Road Trip", owner="Alex")

        source = fetch_source_collection(fake_catalog, SOURCE)

        assert source.id == "source1"
        assert source.name == "Road Trip"
        assert source.owner == "Alex"

    def test_missing_playlist(self, fake_catalog):
        with pytest.raises(SourceFetchError) as exc_info:
            fetch_source_collection(fake_catalog, SOURCE)

        assert exc_info.value.details["http_status"] == 404
        assert exc_info.value.api_error["status"] == 404


class TestPageSize:
    """Test page size handling against the spotipy adapter"""

    @pytest.fixture
    def spotipy_catalog(self):
        items = [track_item(u) for u in track_uris(250)]
        spotify = Mock(spec=spotipy.Spotify)
        spotify.playlist_items.side_effect = (
            lambda playlist_id, fields, limit, offset, additional_types:
                {"items": items[offset:offset + limit], "total": len(items)}
        )
        return SpotifyCatalog(spotify)

    def test_default_page_size_collects_everything(self, spotipy_catalog):
        assert collect_track_uris(spotipy_catalog, SOURCE) == track_uris(250)

    def test_small_page_size_collects_everything(self, spotipy_catalog):
        assert collect_track_uris(spotipy_catalog, SOURCE, limit=30) == track_uris(250)

    @pytest.mark.parametrize("limit", [0, 101, 150])
    def test_rejects_page_size_outside_catalog_range(self, spotipy_catalog, limit):
        """A page size the catalog would cap must not end collection early"""
        with pytest.raises(ValueError):
            collect_track_uris(spotipy_catalog, SOURCE, limit=limit)

        spotipy_catalog._spotify.playlist_items.assert_not_called()
