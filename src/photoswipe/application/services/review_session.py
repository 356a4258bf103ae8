"""Review session: the cursor, bucket assignment and undo for one pass."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from photoswipe.application.services.batch_loader import BatchLoader
from photoswipe.application.services.gesture_classifier import SwipeClassifier
from photoswipe.application.services.undo_stack import UndoStack
from photoswipe.config import LOOKAHEAD_MARGIN, UNDO_HISTORY_LIMIT
from photoswipe.domain.models import (
    AssetHandle,
    BucketSet,
    BufferEntry,
    GestureVector,
    Outcome,
    ReviewBuffer,
    ReviewState,
    UndoRecord,
)
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import (
    AssetClassifiedEvent,
    ReviewCompletedEvent,
    UndoAppliedEvent,
)

LOGGER = logging.getLogger(__name__)


class ReviewSession:
    """State machine over a cursor into the loader's buffer.

    The session is ``REVIEWING`` while the cursor points at a buffered entry
    and ``COMPLETE`` once it reaches the end of the buffer.  It returns to
    ``REVIEWING`` if the buffer grows past the cursor again.

    All methods must be called from a single timeline; asynchronous preview
    completions reach the buffer through the loader's dispatcher.
    """

    def __init__(
        self,
        loader: BatchLoader,
        buckets: BucketSet,
        outcome_buckets: Mapping[Outcome, str],
        classifier: Optional[SwipeClassifier] = None,
        *,
        lookahead_margin: int = LOOKAHEAD_MARGIN,
        history: Optional[UndoStack] = None,
        history_limit: int = UNDO_HISTORY_LIMIT,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        if lookahead_margin < 0:
            raise ValueError("lookahead_margin must be non-negative")
        for bucket_id in outcome_buckets.values():
            buckets.get(bucket_id)
        if Outcome.SKIP in outcome_buckets:
            raise ValueError("The skip outcome cannot be routed to a bucket")

        self._loader = loader
        self._buckets = buckets
        self._outcome_buckets = dict(outcome_buckets)
        self._classifier = classifier or SwipeClassifier()
        self._lookahead = lookahead_margin
        self._events = event_bus
        self._history = history if history is not None else UndoStack(history_limit=history_limit)
        self._history.set_session(self)

        self._position = 0
        self._completion_announced = False

    # -- properties --------------------------------------------------------

    @property
    def position(self) -> int:
        return self._position

    @property
    def buffer(self) -> ReviewBuffer:
        return self._loader.buffer

    @property
    def buckets(self) -> BucketSet:
        return self._buckets

    @property
    def loader(self) -> BatchLoader:
        return self._loader

    @property
    def history(self) -> UndoStack:
        return self._history

    @property
    def classifier(self) -> SwipeClassifier:
        return self._classifier

    @property
    def outcome_buckets(self) -> dict[Outcome, str]:
        return dict(self._outcome_buckets)

    @property
    def state(self) -> ReviewState:
        if self._position < len(self.buffer):
            return ReviewState.REVIEWING
        return ReviewState.COMPLETE

    @property
    def is_complete(self) -> bool:
        return self.state is ReviewState.COMPLETE

    @property
    def current_entry(self) -> Optional[BufferEntry]:
        if self._position < len(self.buffer):
            return self.buffer[self._position]
        return None

    @property
    def current_asset(self) -> Optional[AssetHandle]:
        entry = self.current_entry
        return entry.asset if entry is not None else None

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> ReviewState:
        """Load the first batch if nothing has been fetched yet."""

        if self._loader.fetch_cursor == 0 and len(self.buffer) == 0:
            self._loader.load_next_batch()
        self._ensure_lookahead()
        self._sync_completion()
        return self.state

    # -- transitions -------------------------------------------------------

    def classify(self, vector: GestureVector | tuple[float, float]) -> Outcome:
        return self._classifier.classify(vector)

    def swipe(self, vector: GestureVector | tuple[float, float]) -> Outcome:
        """Classify *vector* and advance exactly once with the result."""

        outcome = self.classify(vector)
        self.advance(outcome)
        return outcome

    def advance(self, outcome: Outcome) -> Optional[UndoRecord]:
        """File the current asset under *outcome* and move the cursor on.

        Returns the pushed undo record, or ``None`` when the session is
        already complete.
        """

        entry = self.current_entry
        if entry is None:
            return None
        asset = entry.asset

        bucket_id = None if outcome is Outcome.SKIP else self._outcome_buckets.get(outcome)
        record = self._assign(asset, bucket_id, advanced=True)
        self._position += 1

        LOGGER.debug("Classified %s as %s -> %s", asset.id, outcome.value, bucket_id)
        self._publish(AssetClassifiedEvent(
            asset_id=asset.id,
            outcome=outcome.value,
            bucket_id=bucket_id,
            position=self._position,
        ))
        self._ensure_lookahead()
        self._sync_completion()
        return record

    def assign(self, asset: AssetHandle, bucket_id: str) -> UndoRecord:
        """Move *asset* into *bucket_id* without touching the cursor."""

        self._buckets.get(bucket_id)
        return self._assign(asset, bucket_id, advanced=False)

    def undo(self) -> Optional[UndoRecord]:
        return self._history.pop_and_apply()

    def revert(self, record: UndoRecord) -> None:
        """Reverse *record*; called by the undo stack."""

        asset = record.asset
        if record.bucket_id is not None and record.previous_bucket_id != record.bucket_id:
            if self._buckets.bucket_of(asset.id) == record.bucket_id:
                self._buckets.remove(asset.id)
            if record.previous_bucket_id is not None:
                self._buckets.assign(asset, record.previous_bucket_id, index=record.previous_index)

        if record.advanced:
            self._position = max(0, self._position - 1)
            if self.buffer.index_of(asset.id) is None:
                self._loader.reinsert(self._position, asset)
            self._position = min(self._position, len(self.buffer))

        LOGGER.debug("Undid %s (bucket %s)", asset.id, record.bucket_id)
        self._publish(UndoAppliedEvent(
            asset_id=asset.id,
            bucket_id=record.bucket_id,
            position=self._position,
        ))
        self._sync_completion()

    def apply_filter(self, excluded_ids: Iterable[str]) -> ReviewState:
        """Rebuild the buffer without *excluded_ids* and restart at the top.

        Buckets and undo history are kept; undoing a swipe whose asset was
        filtered out puts that asset back at the cursor.
        """

        self._loader.reset(excluded_ids)
        self._position = 0
        self._ensure_lookahead()
        self._sync_completion()
        return self.state

    def clear_filter(self) -> ReviewState:
        return self.apply_filter(())

    def refresh(self) -> ReviewState:
        """Re-evaluate paging and completion after the buffer changed."""

        self._ensure_lookahead()
        self._sync_completion()
        return self.state

    # -- internal ----------------------------------------------------------

    def _assign(self, asset: AssetHandle, bucket_id: Optional[str], *, advanced: bool) -> UndoRecord:
        previous_bucket = self._buckets.bucket_of(asset.id)
        previous_index = self._buckets.index_in_bucket(asset.id)
        if bucket_id is not None:
            self._buckets.assign(asset, bucket_id)
        record = UndoRecord(
            asset=asset,
            bucket_id=bucket_id,
            prior_position=self._position,
            previous_bucket_id=previous_bucket,
            previous_index=previous_index,
            advanced=advanced,
        )
        self._history.record_and_push(record)
        return record

    def _ensure_lookahead(self) -> None:
        while (
            not self._loader.is_exhausted
            and self._position + self._lookahead >= len(self.buffer)
        ):
            self._loader.load_next_batch()

    def _sync_completion(self) -> None:
        if not self.is_complete:
            self._completion_announced = False
            return
        if self._completion_announced:
            return
        self._completion_announced = True
        LOGGER.info("Review complete after %d assets", self._position)
        self._publish(ReviewCompletedEvent(
            reviewed_count=self._position,
            bucket_sizes=self._buckets.sizes(),
        ))

    def _publish(self, event) -> None:
        if self._events is not None:
            self._events.publish(event)
