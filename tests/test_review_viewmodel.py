"""Tests for ReviewViewModel."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from conftest import ManualDecoder, MemoryCollectionStore
from photoswipe.application.services.batch_loader import BatchLoader
from photoswipe.application.services.dispatch import QueueDispatcher
from photoswipe.application.services.review_modes import ReviewMode, build_layout
from photoswipe.application.services.review_session import ReviewSession
from photoswipe.application.use_cases import CommitBucketsUseCase
from photoswipe.domain.models import AssetHandle, Outcome, ReviewState
from photoswipe.events.bus import EventBus
from photoswipe.gui.viewmodels import ReviewViewModel
from photoswipe.infrastructure.sources import StaticAssetSource


@pytest.fixture
def store() -> MemoryCollectionStore:
    return MemoryCollectionStore()


@pytest.fixture
def decoder() -> ManualDecoder:
    return ManualDecoder()


@pytest.fixture
def vm(decoder, store) -> ReviewViewModel:
    bus = EventBus()
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B", "C"]), decoder, event_bus=bus)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing, event_bus=bus)
    session.start()
    return ReviewViewModel(session, bus, CommitBucketsUseCase(store, event_bus=bus), collection_store=store)


def test_initial_state(vm):
    assert vm.position.value == 0
    assert vm.state.value is ReviewState.REVIEWING
    assert vm.current_asset.value.id == "A"
    assert vm.current_preview.value is None
    assert vm.bucket_counts.value == {"delete": 0, "keep": 0}
    assert vm.bucket_labels.value == {"delete": "Delete", "keep": "Keep"}
    assert vm.can_undo.value is False


def test_preview_for_current_slot_updates_binding(vm, decoder):
    decoder.complete("B")
    assert vm.current_preview.value is None
    decoder.complete("A")
    assert vm.current_preview.value.asset_id == "A"


def test_swipe_updates_observables(vm):
    swiped = Mock()
    vm.swiped.connect(swiped)
    vm.drag(-30, 4)
    assert vm.drag_hint.value == "left"

    outcome = vm.swipe(-300, 0)

    assert outcome is Outcome.PRIMARY
    swiped.assert_called_once_with(Outcome.PRIMARY)
    assert vm.drag_hint.value is None
    assert vm.position.value == 1
    assert vm.current_asset.value.id == "B"
    assert vm.bucket_counts.value["delete"] == 1
    assert vm.can_undo.value is True


def test_undo_and_choose(vm):
    vm.choose(Outcome.SECONDARY)
    assert vm.bucket_counts.value["keep"] == 1
    assert vm.undo() is True
    assert vm.position.value == 0
    assert vm.bucket_counts.value["keep"] == 0
    assert vm.undo() is False


def test_completion_and_commit(vm, store):
    completed = Mock()
    finished = Mock()
    vm.review_completed.connect(completed)
    vm.commit_finished.connect(finished)

    vm.swipe(-300, 0)
    vm.swipe(300, 0)
    vm.swipe(0, 0)

    assert vm.is_complete
    completed.assert_called_once_with({"delete": 1, "keep": 1})
    assert vm.current_asset.value is None

    response = vm.commit().result(timeout=10)

    assert response.success
    assert store.deleted == ["A"]
    assert vm.bucket_counts.value == {"delete": 0, "keep": 1}
    finished.assert_called_once_with(response)


def test_rename_bucket(vm):
    vm.rename_bucket("keep", "Favourites")
    assert vm.bucket_labels.value["keep"] == "Favourites"


def test_hide_and_show_assets(vm):
    vm.hide_assets(["A"])
    assert vm.filter_active.value is True
    assert vm.current_asset.value.id == "B"
    vm.show_all()
    assert vm.filter_active.value is False
    assert vm.current_asset.value.id == "A"


def test_commit_without_use_case_returns_none(decoder):
    loader = BatchLoader(StaticAssetSource.from_ids(["A"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    assert ReviewViewModel(session).commit() is None


def test_dispose_stops_event_updates(vm, decoder):
    vm.dispose()
    decoder.complete("A")
    assert vm.current_preview.value is None


def test_current_albums_follow_the_cursor(decoder):
    store = MemoryCollectionStore(["Trips", "Family"])
    store.members["c1"].append(AssetHandle(id="B"))
    store.members["c2"].append(AssetHandle(id="B"))
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    vm = ReviewViewModel(session, collection_store=store)

    assert vm.current_albums.value == []
    vm.swipe(300, 0)
    assert vm.current_albums.value == ["Family", "Trips"]
    vm.swipe(300, 0)
    assert vm.current_albums.value == []


def test_current_albums_empty_without_store(decoder):
    loader = BatchLoader(StaticAssetSource.from_ids(["A"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    assert ReviewViewModel(session).current_albums.value == []


def test_current_albums_refresh_after_commit(decoder):
    store = MemoryCollectionStore()
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B"]), decoder)
    buckets, routing = build_layout(ReviewMode.TAGGING, ["Trips"])
    session = ReviewSession(loader, buckets, routing)
    session.start()
    vm = ReviewViewModel(session, commit_use_case=CommitBucketsUseCase(store), collection_store=store)

    vm.choose(Outcome.PRIMARY)
    vm.undo()
    assert vm.current_albums.value == []
    vm.choose(Outcome.PRIMARY)
    vm.commit().result(timeout=10)
    vm.undo()

    assert vm.current_asset.value.id == "A"
    assert vm.current_albums.value == ["Trips"]


def test_commit_completion_is_applied_on_dispatcher(decoder):
    store = MemoryCollectionStore()
    dispatcher = QueueDispatcher()
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B", "C"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    vm = ReviewViewModel(session, commit_use_case=CommitBucketsUseCase(store), dispatcher=dispatcher)
    finished = Mock()
    vm.commit_finished.connect(finished)

    vm.swipe(-300, 0)
    future = vm.commit()
    assert vm.committing.value is True
    assert vm.commit() is future

    response = future.result(timeout=10)
    assert response.success
    assert store.deleted == ["A"]
    # Nothing reaches the live buckets until the owner drains the dispatcher.
    assert vm.bucket_counts.value["delete"] == 1
    finished.assert_not_called()

    assert dispatcher.drain() == 1
    assert vm.committing.value is False
    assert vm.bucket_counts.value["delete"] == 0
    finished.assert_called_once_with(response)
    vm.dispose()


def test_assets_filed_during_commit_are_kept(decoder):
    store = MemoryCollectionStore()
    dispatcher = QueueDispatcher()
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B", "C"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    vm = ReviewViewModel(session, commit_use_case=CommitBucketsUseCase(store), dispatcher=dispatcher)

    vm.swipe(-300, 0)
    future = vm.commit()
    vm.swipe(-300, 0)
    future.result(timeout=10)
    dispatcher.drain()

    assert store.deleted == ["A"]
    assert session.buckets.snapshot()["delete"] == ["B"]
    vm.dispose()


def test_failed_bucket_keeps_members_after_commit(decoder):
    store = MemoryCollectionStore(fail_delete=True)
    loader = BatchLoader(StaticAssetSource.from_ids(["A", "B"]), decoder)
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    session = ReviewSession(loader, buckets, routing)
    session.start()
    vm = ReviewViewModel(session, commit_use_case=CommitBucketsUseCase(store))

    vm.swipe(-300, 0)
    response = vm.commit().result(timeout=10)

    assert not response.success
    assert vm.committing.value is False
    assert vm.bucket_counts.value["delete"] == 1
    vm.dispose()
