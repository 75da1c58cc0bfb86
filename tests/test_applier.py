"""Test batch application"""

import math

import pytest

from spot_transfer.core.exceptions import BatchApplyError
from spot_transfer.spotify.models import DestinationTarget, TransferSet
from spot_transfer.transfer.applier import apply_batches

from conftest import track_uris


DESTINATION = DestinationTarget(id="target1", name="Target")


@pytest.fixture
def target_catalog(fake_catalog):
    fake_catalog.add_playlist("target1", name="Target")
    return fake_catalog


class TestApplyBatches:
    """Test apply_batches"""

    @pytest.mark.parametrize("size", [1, 99, 100, 101, 250, 300])
    def test_partition_law(self, target_catalog, size):
        """ceil(N/100) calls whose concatenation is the transfer set"""
        uris = track_uris(size)

        committed, batches = apply_batches(target_catalog, DESTINATION, TransferSet(uris=tuple(uris)))

        calls = target_catalog.calls_to("append_members")
        assert len(calls) == math.ceil(size / 100) == batches
        assert all(len(batch) == 100 for _, batch in calls[:-1])
        assert len(calls[-1][1]) == size - 100 * (len(calls) - 1)
        assert [uri for _, batch in calls for uri in batch] == uris
        assert committed == size
        assert target_catalog.uris_in("target1") == uris

    def test_250_tracks_in_three_batches(self, target_catalog):
        apply_batches(target_catalog, DESTINATION, TransferSet(uris=tuple(track_uris(250))))

        sizes = [len(batch) for _, batch in target_catalog.calls_to("append_members")]
        assert sizes == [100, 100, 50]

    def test_empty_set_makes_no_calls(self, target_catalog):
        committed, batches = apply_batches(target_catalog, DESTINATION, TransferSet(uris=()))

        assert (committed, batches) == (0, 0)
        assert target_catalog.mutating_calls == []

    def test_second_of_three_batches_fails(self, target_catalog):
        """Batch 2 of 3 fails: 100 tracks stay committed, batch 3 is never sent"""
        uris = track_uris(250)
        target_catalog.fail("append_members", on_call=2)

        with pytest.raises(BatchApplyError) as exc_info:
            apply_batches(target_catalog, DESTINATION, TransferSet(uris=tuple(uris)))

        error = exc_info.value
        assert error.failed_index == 2
        assert error.committed == 100
        assert error.kind == "batch_apply"
        assert error.api_error == {"status": 500, "message": "Server error"}
        assert len(target_catalog.calls_to("append_members")) == 2
        # no rollback of the first batch
        assert target_catalog.uris_in("target1") == uris[:100]

    def test_failure_reports_uncommitted_tracks(self, target_catalog, caplog):
        uris = track_uris(150)
        target_catalog.fail("append_members", on_call=1)

        with pytest.raises(BatchApplyError):
            apply_batches(target_catalog, DESTINATION, TransferSet(uris=tuple(uris)))

        records = [r for r in caplog.records if hasattr(r, "uncommitted_uris")]
        assert len(records) == 1
        assert records[0].uncommitted_uris == uris
        assert records[0].uncommitted_failed_batch == 1

    @pytest.mark.parametrize("batch_size", [0, 101])
    def test_rejects_invalid_batch_size(self, target_catalog, batch_size):
        with pytest.raises(ValueError):
            apply_batches(target_catalog, DESTINATION, TransferSet(uris=("a",)), batch_size=batch_size)

    def test_smaller_batch_size(self, target_catalog):
        apply_batches(target_catalog, DESTINATION, TransferSet(uris=tuple(track_uris(5))), batch_size=2)

        sizes = [len(batch) for _, batch in target_catalog.calls_to("append_members")]
        assert sizes == [2, 2, 1]
