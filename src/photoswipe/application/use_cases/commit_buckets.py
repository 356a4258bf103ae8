import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .base import UseCase, UseCaseRequest, UseCaseResponse
from photoswipe.config import COMMIT_WORKERS
from photoswipe.domain.models import AssetHandle, Bucket, BucketSet, CollectionHandle, CollectionKind
from photoswipe.domain.repositories import ICollectionStore
from photoswipe.errors import CollectionMutationError, LabelConflictError
from photoswipe.errors.handler import ErrorHandler, ErrorSeverity
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import BucketCommittedEvent


@dataclass(frozen=True)
class BucketCommitResult:
    bucket_id: str
    label: str
    success: bool
    member_count: int = 0
    collection_id: Optional[str] = None
    created: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class CommitBucketsRequest(UseCaseRequest):
    buckets: BucketSet = field(default_factory=BucketSet)
    # Known external collections; fetched from the store when omitted.
    collections: Optional[Sequence[CollectionHandle]] = None


@dataclass(frozen=True)
class CommitBucketsResponse(UseCaseResponse):
    results: Dict[str, BucketCommitResult] = field(default_factory=dict)

    @property
    def failed(self) -> List[BucketCommitResult]:
        return [result for result in self.results.values() if not result.success]


class CommitBucketsUseCase(UseCase):
    """Write the review's buckets to the collection store.

    Every bucket is committed independently and concurrently.  Inside one
    bucket a missing collection is created first and members are added only
    after the creation has completed.  Buckets that committed are emptied;
    failed buckets keep their members so the commit can be retried.
    """

    def __init__(
        self,
        store: ICollectionStore,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
        max_workers: int = COMMIT_WORKERS,
    ):
        self._store = store
        self._event_bus = event_bus
        self._errors = error_handler
        self._max_workers = max_workers
        self._logger = logging.getLogger(__name__)

    def execute(self, request: CommitBucketsRequest) -> CommitBucketsResponse:
        buckets = [
            bucket for bucket in request.buckets
            if bucket.persist and bucket.members
        ]
        if not buckets:
            return CommitBucketsResponse()

        collections = request.collections
        if collections is None:
            try:
                collections = self._store.list_collections(CollectionKind.ALBUM)
            except Exception as exc:
                self._logger.error(f"Could not list collections: {exc}")
                collections = []
        by_title: Dict[str, CollectionHandle] = {}
        for collection in collections:
            if collection.kind is CollectionKind.ALBUM:
                by_title.setdefault(collection.title, collection)

        results: Dict[str, BucketCommitResult] = {}
        claimed: Dict[str, str] = {}
        runnable: List[Bucket] = []
        for bucket in buckets:
            if bucket.reserved:
                runnable.append(bucket)
                continue
            owner = claimed.get(bucket.label)
            if owner is not None:
                error = LabelConflictError(
                    f"Bucket '{bucket.id}' shares the label '{bucket.label}' with '{owner}'"
                )
                results[bucket.id] = self._failure(bucket, error)
                continue
            claimed[bucket.label] = bucket.id
            runnable.append(bucket)

        # Members are snapshotted so the workers never read live bucket state.
        jobs = [(bucket, list(bucket.members)) for bucket in runnable]
        with ThreadPoolExecutor(
            max_workers=max(1, min(self._max_workers, len(jobs) or 1)),
            thread_name_prefix="CommitBuckets",
        ) as pool:
            futures = {
                bucket.id: pool.submit(self._commit_one, bucket, members, by_title.get(bucket.label))
                for bucket, members in jobs
            }
            for bucket, _members in jobs:
                results[bucket.id] = futures[bucket.id].result()

        for bucket in buckets:
            result = results[bucket.id]
            if result.success:
                request.buckets.clear(bucket.id)
            self._report(result)

        ordered = {bucket.id: results[bucket.id] for bucket in buckets}
        failed = [result for result in ordered.values() if not result.success]
        if failed:
            return CommitBucketsResponse(
                success=False,
                error=f"{len(failed)} of {len(ordered)} buckets failed to commit",
                results=ordered,
            )
        return CommitBucketsResponse(results=ordered)

    def _commit_one(
        self,
        bucket: Bucket,
        members: List[AssetHandle],
        existing: Optional[CollectionHandle],
    ) -> BucketCommitResult:
        try:
            if bucket.reserved:
                self._store.delete_assets(members).result()
                self._logger.info(f"Deleted {len(members)} assets from bucket '{bucket.label}'")
                return BucketCommitResult(
                    bucket_id=bucket.id,
                    label=bucket.label,
                    success=True,
                    member_count=len(members),
                )

            created = existing is None
            collection = existing
            if collection is None:
                collection = self._store.create_collection(bucket.label).result()
            self._store.add_members(collection, members).result()
            self._logger.info(
                f"Added {len(members)} assets to '{collection.title}'"
                + (" (new collection)" if created else "")
            )
            return BucketCommitResult(
                bucket_id=bucket.id,
                label=bucket.label,
                success=True,
                member_count=len(members),
                collection_id=collection.id,
                created=created,
            )
        except Exception as exc:
            error = exc if isinstance(exc, CollectionMutationError) else CollectionMutationError(
                f"Committing bucket '{bucket.label}' failed: {exc}"
            )
            return self._failure(bucket, error)

    @staticmethod
    def _failure(bucket: Bucket, error: Exception) -> BucketCommitResult:
        return BucketCommitResult(
            bucket_id=bucket.id,
            label=bucket.label,
            success=False,
            member_count=len(bucket.members),
            error=str(error),
        )

    def _report(self, result: BucketCommitResult) -> None:
        if not result.success:
            error = CollectionMutationError(result.error or f"Bucket '{result.label}' failed")
            if self._errors is not None:
                self._errors.handle(error, ErrorSeverity.ERROR, {"bucket_id": result.bucket_id})
            else:
                self._logger.warning(f"{error}")
        if self._event_bus is not None:
            self._event_bus.publish(BucketCommittedEvent(
                bucket_id=result.bucket_id,
                label=result.label,
                success=result.success,
                member_count=result.member_count,
                error=result.error,
            ))
