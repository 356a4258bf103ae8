"""Tests for CommitBucketsUseCase."""

from __future__ import annotations

from unittest.mock import Mock

from conftest import MemoryCollectionStore
from photoswipe.application.services.review_modes import ReviewMode, build_layout
from photoswipe.application.use_cases import CommitBucketsRequest, CommitBucketsUseCase
from photoswipe.domain.models import AssetHandle, Bucket, BucketSet, CollectionHandle
from photoswipe.errors.handler import ErrorHandler, ErrorSeverity
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import BucketCommittedEvent


def _assets(*names: str) -> list[AssetHandle]:
    return [AssetHandle(id=name) for name in names]


def _buckets(**members: list[str]) -> BucketSet:
    buckets = BucketSet()
    for label, names in members.items():
        bucket = buckets.add(Bucket(label.lower(), label))
        for asset in _assets(*names):
            buckets.assign(asset, bucket.id)
    return buckets


def test_missing_collection_is_created_before_members_are_added():
    store = MemoryCollectionStore()
    buckets = _buckets(Keep=["A", "B"])

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert response.success
    assert store.calls == [("create", "Keep"), ("add", "c1", ["A", "B"])]
    result = response.results["keep"]
    assert result.success and result.created
    assert result.collection_id == "c1"
    assert buckets.get("keep").is_empty


def test_existing_collection_matched_by_exact_title():
    store = MemoryCollectionStore(["Trips", "trips"])
    buckets = _buckets(Trips=["A"])

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert store.calls == [("add", "c1", ["A"])]
    assert response.results["trips"].created is False


def test_explicit_collection_list_skips_lookup():
    store = MemoryCollectionStore(["Trips"])
    store.list_collections = Mock(side_effect=AssertionError("should not list"))
    buckets = _buckets(Trips=["A"])
    known = [CollectionHandle(id="c1", title="Trips")]

    response = CommitBucketsUseCase(store).execute(
        CommitBucketsRequest(buckets=buckets, collections=known)
    )

    assert response.success
    assert store.calls == [("add", "c1", ["A"])]


def test_reserved_bucket_deletes_and_keep_is_not_committed():
    store = MemoryCollectionStore()
    buckets, routing = build_layout(ReviewMode.CLEANUP)
    buckets.assign(AssetHandle(id="A"), "delete")
    buckets.assign(AssetHandle(id="B"), "keep")

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert store.calls == [("delete", ["A"])]
    assert store.deleted == ["A"]
    assert list(response.results) == ["delete"]
    assert buckets.snapshot() == {"delete": [], "keep": ["B"]}


def test_empty_buckets_are_skipped():
    store = MemoryCollectionStore()
    buckets = _buckets(Keep=[])
    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))
    assert response.success
    assert response.results == {}
    assert store.calls == []


def test_failure_is_isolated_to_its_bucket():
    store = MemoryCollectionStore(["Broken"], fail_add=["Broken"])
    buckets = _buckets(Broken=["A", "B"], Fine=["C"])

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert not response.success
    assert [r.bucket_id for r in response.failed] == ["broken"]
    assert "cannot add" in response.results["broken"].error
    assert response.results["fine"].success
    assert buckets.snapshot() == {"broken": ["A", "B"], "fine": []}


def test_failed_create_skips_add():
    store = MemoryCollectionStore(fail_create=["New"])
    buckets = _buckets(New=["A"])

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert store.calls == [("create", "New")]
    assert response.results["new"].success is False
    assert buckets.get("new").members == _assets("A")


def test_shared_label_fails_later_bucket():
    store = MemoryCollectionStore()
    buckets = BucketSet([Bucket("g1", "Same"), Bucket("g2", "Same")])
    buckets.assign(AssetHandle(id="A"), "g1")
    buckets.assign(AssetHandle(id="B"), "g2")

    response = CommitBucketsUseCase(store).execute(CommitBucketsRequest(buckets=buckets))

    assert response.results["g1"].success
    assert response.results["g2"].success is False
    assert "Same" in response.results["g2"].error
    assert store.calls == [("create", "Same"), ("add", "c1", ["A"])]
    assert buckets.snapshot() == {"g1": [], "g2": ["B"]}


def test_results_reported_on_bus_and_error_handler():
    store = MemoryCollectionStore(fail_delete=True)
    bus = EventBus()
    events = []
    bus.subscribe(BucketCommittedEvent, events.append)
    handler = Mock(spec=ErrorHandler)
    buckets = BucketSet([Bucket("delete", "Delete", reserved=True), Bucket("keep", "Keep")])
    buckets.assign(AssetHandle(id="A"), "delete")
    buckets.assign(AssetHandle(id="B"), "keep")

    CommitBucketsUseCase(store, event_bus=bus, error_handler=handler).execute(
        CommitBucketsRequest(buckets=buckets)
    )

    assert {(e.bucket_id, e.success) for e in events} == {("delete", False), ("keep", True)}
    handler.handle.assert_called_once()
    args = handler.handle.call_args.args
    assert args[1] is ErrorSeverity.ERROR
    assert args[2] == {"bucket_id": "delete"}
