"""Tests for BatchLoader paging and preview delivery."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from conftest import InstantDecoder, ManualDecoder
from photoswipe.application.services.batch_loader import BatchLoader, BatchResult
from photoswipe.application.services.dispatch import QueueDispatcher
from photoswipe.domain.models import PreviewImage, PreviewStatus
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import BatchLoadedEvent, PreviewReadyEvent
from photoswipe.infrastructure.sources import StaticAssetSource


def _source(total: int) -> StaticAssetSource:
    return StaticAssetSource.from_ids(f"asset-{i}" for i in range(total))


def _ids(loader: BatchLoader) -> list[str]:
    return [asset.id for asset in loader.buffer.assets()]


# ---------------------------------------------------------------------------
# BatchResult
# ---------------------------------------------------------------------------


class TestBatchResult:
    def test_has_more(self):
        assert BatchResult(fetch_cursor=30, total_count=31).has_more is True

    def test_has_no_more_at_end(self):
        assert BatchResult(fetch_cursor=31, total_count=31).has_more is False

    def test_defaults(self):
        result = BatchResult()
        assert result.items == []
        assert result.has_more is False


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------


class TestPaging:
    def test_first_batch_uses_default_size(self, manual_decoder):
        loader = BatchLoader(_source(100), manual_decoder)
        result = loader.load_next_batch()
        assert len(result.items) == 30
        assert result.start_slot == 0
        assert loader.fetch_cursor == 30
        assert len(manual_decoder.requests) == 30
        assert all(entry.status is PreviewStatus.PENDING for entry in loader.buffer)

    def test_batches_append_in_source_order(self, manual_decoder):
        loader = BatchLoader(_source(12), manual_decoder, batch_size=5)
        loader.load_next_batch()
        second = loader.load_next_batch()
        assert second.start_slot == 5
        assert _ids(loader) == [f"asset-{i}" for i in range(10)]

    def test_window_size_overrides_batch_size(self, manual_decoder):
        loader = BatchLoader(_source(12), manual_decoder, batch_size=5)
        result = loader.load_next_batch(window_size=2)
        assert len(result.items) == 2
        assert loader.fetch_cursor == 2

    def test_last_batch_is_partial(self, manual_decoder):
        loader = BatchLoader(_source(35), manual_decoder)
        loader.load_next_batch()
        result = loader.load_next_batch()
        assert len(result.items) == 5
        assert result.has_more is False
        assert loader.is_exhausted

    def test_load_after_exhaustion_is_noop(self, manual_decoder):
        loader = BatchLoader(_source(3), manual_decoder)
        loader.load_next_batch()
        before = _ids(loader)
        requests = len(manual_decoder.requests)

        result = loader.load_next_batch()

        assert result.items == []
        assert _ids(loader) == before
        assert len(manual_decoder.requests) == requests
        assert loader.fetch_cursor == 3

    def test_empty_source(self, manual_decoder):
        loader = BatchLoader(_source(0), manual_decoder)
        result = loader.load_next_batch()
        assert result.items == []
        assert loader.is_exhausted
        assert len(loader.buffer) == 0

    def test_invalid_batch_size(self, manual_decoder):
        with pytest.raises(ValueError):
            BatchLoader(_source(3), manual_decoder, batch_size=0)

    def test_excluded_ids_are_skipped_but_consumed(self, manual_decoder):
        loader = BatchLoader(_source(6), manual_decoder, batch_size=4)
        loader.reset({"asset-1", "asset-2"})
        assert _ids(loader) == ["asset-0", "asset-3"]
        assert loader.fetch_cursor == 4
        loader.load_next_batch()
        assert _ids(loader) == ["asset-0", "asset-3", "asset-4", "asset-5"]


# ---------------------------------------------------------------------------
# Preview delivery
# ---------------------------------------------------------------------------


class TestDelivery:
    def test_out_of_order_completions_land_in_their_slots(self, manual_decoder):
        loader = BatchLoader(_source(5), manual_decoder)
        loader.load_next_batch()

        for asset, _future in reversed(list(manual_decoder.requests)):
            manual_decoder.complete(asset.id)

        assert _ids(loader) == [f"asset-{i}" for i in range(5)]
        for entry in loader.buffer:
            assert entry.status is PreviewStatus.READY
            assert entry.preview.asset_id == entry.asset.id

    def test_stale_epoch_completions_are_dropped(self, manual_decoder):
        loader = BatchLoader(_source(3), manual_decoder)
        loader.load_next_batch()
        stale = list(manual_decoder.requests)

        loader.reset({"asset-0"})
        assert loader.epoch == 1
        for asset, future in stale:
            future.set_result(PreviewImage(asset.id, "stale"))

        assert all(entry.status is PreviewStatus.PENDING for entry in loader.buffer)

        manual_decoder.complete_all()
        assert [entry.preview.image for entry in loader.buffer] == ["bitmap", "bitmap"]

    def test_none_result_marks_slot_failed(self, manual_decoder):
        loader = BatchLoader(_source(2), manual_decoder)
        loader.load_next_batch()
        manual_decoder.fail("asset-0")
        manual_decoder.complete("asset-1")
        assert loader.buffer[0].status is PreviewStatus.FAILED
        assert loader.buffer[1].status is PreviewStatus.READY

    def test_exception_marks_slot_failed(self, manual_decoder):
        loader = BatchLoader(_source(1), manual_decoder)
        loader.load_next_batch()
        manual_decoder.fail("asset-0", OSError("truncated file"))
        assert loader.buffer[0].status is PreviewStatus.FAILED

    def test_request_that_raises_marks_slot_failed(self):
        decoder = Mock()
        decoder.request_preview.side_effect = RuntimeError("decoder offline")
        loader = BatchLoader(_source(2), decoder)
        loader.load_next_batch()
        assert [entry.status for entry in loader.buffer] == [PreviewStatus.FAILED] * 2

    def test_queue_dispatcher_defers_delivery_until_drained(self):
        dispatcher = QueueDispatcher()
        loader = BatchLoader(_source(2), InstantDecoder(), dispatcher=dispatcher)
        loader.load_next_batch()

        assert all(entry.status is PreviewStatus.PENDING for entry in loader.buffer)
        assert dispatcher.pending() == 2
        assert dispatcher.drain() == 2
        assert all(entry.status is PreviewStatus.READY for entry in loader.buffer)

    def test_reinsert_requests_preview_again(self, instant_decoder):
        loader = BatchLoader(_source(3), instant_decoder)
        loader.reset({"asset-1"})
        asset = _source(3).asset_at(1)

        slot = loader.reinsert(1, asset)

        assert slot == 1
        assert _ids(loader) == ["asset-0", "asset-1", "asset-2"]
        assert loader.buffer[1].status is PreviewStatus.READY
        assert loader.reinsert(0, asset) == 1


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_events_published(instant_decoder):
    bus = EventBus()
    batches, previews = [], []
    bus.subscribe(BatchLoadedEvent, batches.append)
    bus.subscribe(PreviewReadyEvent, previews.append)
    loader = BatchLoader(_source(3), InstantDecoder(failing=["asset-2"]), batch_size=2, event_bus=bus)

    loader.load_next_batch()
    loader.load_next_batch()

    assert [(e.start_slot, e.count, e.exhausted) for e in batches] == [(0, 2, False), (2, 1, True)]
    assert [(e.asset_id, e.slot, e.success) for e in previews] == [
        ("asset-0", 0, True),
        ("asset-1", 1, True),
        ("asset-2", 2, False),
    ]
