"""Test transfer set construction"""

import pytest

from spot_transfer.transfer.builder import build_transfer_set, deduplicate

from conftest import track_uris


class TestDeduplicate:
    """Test first-occurrence deduplication"""

    def test_keeps_first_occurrence(self):
        assert deduplicate(["a", "b", "a", "c", "b"]) == ["a", "b", "c"]

    def test_empty(self):
        assert deduplicate([]) == []


class TestBuildTransferSet:
    """Test build_transfer_set"""

    def test_idempotent(self):
        """Building from an already built set changes nothing"""
        uris = ["a", "b", "a", "c", "c", "d", "b"]
        once = build_transfer_set(uris)
        twice = build_transfer_set(once.uris)

        assert twice.uris == once.uris
        assert twice.duplicates_removed == 0

    @pytest.mark.parametrize("uris", [
        [],
        ["a"],
        ["a", "b", "c", "d"],
        track_uris(250),
    ])
    def test_reverse_order_law(self, uris):
        """For duplicate-free input, reversing commutes with building"""
        forward = build_transfer_set(uris)
        backward = build_transfer_set(uris, reverse=True)

        assert list(backward.uris) == list(reversed(forward.uris))

    def test_reverse_after_dedup(self):
        """Reversal applies to the deduplicated sequence"""
        result = build_transfer_set(["a", "b", "a", "c"], reverse=True)

        assert result.uris == ("c", "b", "a")
        assert result.duplicates_removed == 1

    def test_repeated_uri_at_positions_5_and_200(self):
        """A repeat among 300 entries is dropped at its later position"""
        uris = track_uris(300)
        repeated = uris[4]
        uris[199] = repeated

        result = build_transfer_set(uris)

        assert len(result) == 299
        assert result.duplicates_removed == 1
        assert result.uris[4] == repeated
        assert result.uris.count(repeated) == 1
        assert list(result.uris) == uris[:199] + uris[200:]

    def test_input_not_mutated(self):
        uris = ["a", "b", "a"]
        build_transfer_set(uris, reverse=True)

        assert uris == ["a", "b", "a"]

    def test_empty_input(self):
        result = build_transfer_set([])

        assert result.is_empty
        assert len(result) == 0
        assert result.duplicates_removed == 0
