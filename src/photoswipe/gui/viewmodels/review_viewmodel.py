"""View model binding a :class:`ReviewSession` to presentation code."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from photoswipe.application.services.collection_overview import album_titles_for
from photoswipe.application.services.dispatch import Dispatcher, ImmediateDispatcher
from photoswipe.application.services.gesture_classifier import drag_direction
from photoswipe.application.services.review_session import ReviewSession
from photoswipe.application.use_cases.commit_buckets import (
    CommitBucketsRequest,
    CommitBucketsResponse,
    CommitBucketsUseCase,
)
from photoswipe.domain.models import BucketSet, GestureVector, Outcome, ReviewState
from photoswipe.domain.repositories import ICollectionStore
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import (
    BatchLoadedEvent,
    PreviewReadyEvent,
    ReviewCompletedEvent,
    UndoAppliedEvent,
)
from photoswipe.gui.viewmodels.base import BaseViewModel
from photoswipe.gui.viewmodels.signal import ObservableProperty, Signal


class ReviewViewModel(BaseViewModel):
    """Explicit review state for widgets to render.

    Every observable is refreshed from the session after each user action and
    after loader events, so views never read session internals directly.

    ``commit`` runs on a background worker against a copy of the buckets.
    Its completion is posted through *dispatcher* and only then are the
    committed members dropped from the live buckets.
    """

    def __init__(
        self,
        session: ReviewSession,
        event_bus: Optional[EventBus] = None,
        commit_use_case: Optional[CommitBucketsUseCase] = None,
        collection_store: Optional[ICollectionStore] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._commit = commit_use_case
        self._store = collection_store
        self._dispatcher: Dispatcher = dispatcher or ImmediateDispatcher()
        self._logger = logging.getLogger(__name__)
        self._album_cache: Dict[str, List[str]] = {}
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending_commit: Optional[Future] = None

        self.position = ObservableProperty(session.position)
        self.state = ObservableProperty(session.state)
        self.current_asset = ObservableProperty(None)
        self.current_preview = ObservableProperty(None)
        self.current_albums = ObservableProperty([])
        self.bucket_counts = ObservableProperty({})
        self.bucket_labels = ObservableProperty({})
        self.can_undo = ObservableProperty(False)
        self.drag_hint = ObservableProperty(None)
        self.filter_active = ObservableProperty(False)
        self.committing = ObservableProperty(False)

        self.swiped = Signal()
        self.review_completed = Signal()
        self.commit_finished = Signal()

        if event_bus is not None:
            self.subscribe_event(event_bus, PreviewReadyEvent, self._on_preview_ready)
            self.subscribe_event(event_bus, BatchLoadedEvent, lambda _e: self._sync())
            self.subscribe_event(event_bus, UndoAppliedEvent, lambda _e: self._sync())
            self.subscribe_event(event_bus, ReviewCompletedEvent, self._on_completed)
        self._sync()

    @property
    def session(self) -> ReviewSession:
        return self._session

    # -- user actions --------------------------------------------------------

    def drag(self, dx: float, dy: float) -> None:
        self.drag_hint.value = drag_direction(dx, dy)

    def end_drag(self) -> None:
        self.drag_hint.value = None

    def swipe(self, dx: float, dy: float) -> Outcome:
        """Finish a gesture: classify it, advance once and refresh state."""

        self.drag_hint.value = None
        before = self._session.position
        outcome = self._session.swipe(GestureVector(dx, dy))
        if self._session.position != before:
            self.swiped.emit(outcome)
        self._sync()
        return outcome

    def choose(self, outcome: Outcome) -> None:
        """Advance with an explicit outcome (buttons, keyboard)."""

        if self._session.advance(outcome) is not None:
            self.swiped.emit(outcome)
        self._sync()

    def undo(self) -> bool:
        record = self._session.undo()
        self._sync()
        return record is not None

    def rename_bucket(self, bucket_id: str, label: str) -> None:
        self._session.buckets.rename(bucket_id, label)
        self._sync()

    def hide_assets(self, asset_ids: Iterable[str]) -> None:
        excluded = list(asset_ids)
        self._session.apply_filter(excluded)
        self.filter_active.value = bool(excluded)
        self._sync()

    def show_all(self) -> None:
        self._session.clear_filter()
        self.filter_active.value = False
        self._sync()

    def commit(self) -> Optional["Future[CommitBucketsResponse]"]:
        """Start committing the buckets in the background.

        Returns the future of the commit response, the in-flight future when
        a commit is already running, or ``None`` without a commit use case.
        ``commit_finished`` fires on the dispatcher's thread.
        """

        if self._commit is None:
            self._logger.warning("Commit requested but no commit use case is configured")
            return None
        if self.committing.value:
            return self._pending_commit

        snapshot = self._session.buckets.copy()
        committed = snapshot.snapshot()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ReviewCommit")
        self.committing.value = True
        future = self._executor.submit(self._run_commit, snapshot, committed)
        self._pending_commit = future
        return future

    def dispose(self) -> None:
        super().dispose()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    # -- event handlers ------------------------------------------------------

    def _on_preview_ready(self, event: PreviewReadyEvent) -> None:
        if event.slot == self._session.position:
            self._sync()

    def _on_completed(self, _event: ReviewCompletedEvent) -> None:
        self._sync()
        self.review_completed.emit(self._session.buckets.sizes())

    # -- internal ------------------------------------------------------------

    def _run_commit(self, snapshot: BucketSet, committed: Dict[str, List[str]]) -> CommitBucketsResponse:
        # Worker thread: only the detached snapshot is touched here.
        try:
            response = self._commit.execute(CommitBucketsRequest(buckets=snapshot))
        except Exception:
            self._dispatcher.post(self._finish_commit, committed, None)
            raise
        self._dispatcher.post(self._finish_commit, committed, response)
        return response

    def _finish_commit(
        self,
        committed: Dict[str, List[str]],
        response: Optional[CommitBucketsResponse],
    ) -> None:
        buckets = self._session.buckets
        if response is not None:
            for result in response.results.values():
                if not result.success:
                    continue
                # Assets re-filed while the commit ran stay where they are now.
                for asset_id in committed.get(result.bucket_id, []):
                    if buckets.bucket_of(asset_id) == result.bucket_id:
                        buckets.remove(asset_id)
        else:
            self._logger.error("Commit did not complete; buckets were left unchanged")
        self._album_cache.clear()
        self.committing.value = False
        self._sync()
        if response is not None:
            self.commit_finished.emit(response)

    def _albums_for(self, asset_id: str) -> List[str]:
        if self._store is None:
            return []
        titles = self._album_cache.get(asset_id)
        if titles is None:
            try:
                titles = album_titles_for(self._store, asset_id)
            except Exception as exc:
                self._logger.warning("Could not look up albums for %s: %s", asset_id, exc)
                return []
            self._album_cache[asset_id] = titles
        return list(titles)

    def _sync(self) -> None:
        session = self._session
        entry = session.current_entry
        self.position.value = session.position
        self.state.value = session.state
        self.current_asset.value = entry.asset if entry is not None else None
        self.current_preview.value = entry.preview if entry is not None else None
        self.current_albums.value = self._albums_for(entry.asset.id) if entry is not None else []
        self.bucket_counts.value = session.buckets.sizes()
        self.bucket_labels.value = {bucket.id: bucket.label for bucket in session.buckets}
        self.can_undo.value = session.can_undo

    @property
    def is_complete(self) -> bool:
        return self.state.value is ReviewState.COMPLETE
