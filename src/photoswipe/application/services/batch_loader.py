"""Batch loader: page an asset source into the review buffer.

Handles are fetched ``batch_size`` at a time.  Each fetched handle gets a
pending buffer slot immediately and a preview request tagged with that slot
and the loader's epoch.  Completions are posted back through a dispatcher and
written into the slot that asked for them, so the buffer keeps source order
no matter in which order the decoder finishes.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Tuple

from photoswipe.application.services.dispatch import Dispatcher, ImmediateDispatcher
from photoswipe.config import DEFAULT_BATCH_SIZE, PREVIEW_TARGET_SIZE
from photoswipe.domain.models import AssetHandle, BufferEntry, PreviewImage, PreviewMode, ReviewBuffer
from photoswipe.domain.repositories import IAssetSource, IPreviewDecoder
from photoswipe.errors import DecodeFailedError
from photoswipe.events.bus import EventBus
from photoswipe.events.review_events import BatchLoadedEvent, PreviewReadyEvent

LOGGER = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Result of a single ``load_next_batch`` call."""

    items: List[AssetHandle] = field(default_factory=list)
    start_slot: int = 0
    fetch_cursor: int = 0
    total_count: int = 0

    @property
    def has_more(self) -> bool:
        return self.fetch_cursor < self.total_count


class BatchLoader:
    """Stateful pager over an :class:`IAssetSource`.

    ``fetch_cursor`` counts source indices consumed, including handles that
    were skipped because they are excluded; it never exceeds the source
    length.
    """

    def __init__(
        self,
        source: IAssetSource,
        decoder: IPreviewDecoder,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        target_size: Tuple[int, int] = PREVIEW_TARGET_SIZE,
        mode: PreviewMode = PreviewMode.FIT,
        dispatcher: Optional[Dispatcher] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._source = source
        self._decoder = decoder
        self._batch_size = batch_size
        self._target_size = target_size
        self._mode = mode
        self._dispatcher: Dispatcher = dispatcher or ImmediateDispatcher()
        self._events = event_bus

        # State
        self._buffer = ReviewBuffer()
        self._fetch_cursor: int = 0
        self._epoch: int = 0
        self._excluded: frozenset[str] = frozenset()

    # -- properties --------------------------------------------------------

    @property
    def buffer(self) -> ReviewBuffer:
        return self._buffer

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def fetch_cursor(self) -> int:
        return self._fetch_cursor

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def total_count(self) -> int:
        return self._source.count()

    @property
    def excluded_ids(self) -> AbstractSet[str]:
        return self._excluded

    @property
    def is_exhausted(self) -> bool:
        return self._fetch_cursor >= self._source.count()

    # -- public API --------------------------------------------------------

    def reset(self, excluded_ids: Iterable[str] = ()) -> BatchResult:
        """Rebuild the buffer from the start of the source minus *excluded_ids*.

        Bumping the epoch turns every in-flight preview request into a stale
        one; its completion will be dropped on arrival.
        """

        self._epoch += 1
        self._excluded = frozenset(excluded_ids)
        self._buffer.clear()
        self._fetch_cursor = 0
        LOGGER.debug("Loader reset to epoch %d (%d excluded)", self._epoch, len(self._excluded))
        return self.load_next_batch()

    def load_next_batch(self, window_size: Optional[int] = None) -> BatchResult:
        """Fetch up to *window_size* source indices and request their previews."""

        total = self._source.count()
        start_slot = len(self._buffer)
        if self._fetch_cursor >= total:
            return BatchResult(start_slot=start_slot, fetch_cursor=self._fetch_cursor, total_count=total)

        window = window_size if window_size is not None else self._batch_size
        end = min(self._fetch_cursor + max(window, 0), total)
        fetched: List[Tuple[int, AssetHandle]] = []
        for index in range(self._fetch_cursor, end):
            asset = self._source.asset_at(index)
            if asset.id in self._excluded:
                continue
            fetched.append((self._buffer.append(asset), asset))
        self._fetch_cursor = end

        epoch = self._epoch
        for slot, asset in fetched:
            self._request_preview(epoch, slot, asset)

        result = BatchResult(
            items=[asset for _, asset in fetched],
            start_slot=start_slot,
            fetch_cursor=self._fetch_cursor,
            total_count=total,
        )
        LOGGER.debug(
            "Loaded batch of %d at slot %d (cursor %d/%d)",
            len(result.items),
            start_slot,
            self._fetch_cursor,
            total,
        )
        if self._events is not None:
            self._events.publish(BatchLoadedEvent(
                epoch=epoch,
                start_slot=start_slot,
                count=len(result.items),
                fetch_cursor=self._fetch_cursor,
                exhausted=not result.has_more,
            ))
        return result

    def reinsert(self, slot: int, asset: AssetHandle) -> int:
        """Put *asset* back into the buffer at *slot* and request its preview again."""

        existing = self._buffer.index_of(asset.id)
        if existing is not None:
            return existing
        slot = max(0, min(slot, len(self._buffer)))
        self._buffer.insert(slot, BufferEntry(asset))
        self._request_preview(self._epoch, slot, asset)
        return slot

    # -- internal ----------------------------------------------------------

    def _request_preview(self, epoch: int, slot: int, asset: AssetHandle) -> None:
        try:
            future = self._decoder.request_preview(asset, self._target_size, self._mode)
        except Exception as exc:
            LOGGER.warning("Preview request for %s could not be started: %s", asset.id, exc)
            self._deliver(epoch, slot, asset, None, exc)
            return

        def _on_done(done: "Future[Optional[PreviewImage]]") -> None:
            # Runs on whichever thread completed the future.
            try:
                preview = done.result()
            except Exception as exc:
                self._dispatcher.post(self._deliver, epoch, slot, asset, None, exc)
                return
            self._dispatcher.post(self._deliver, epoch, slot, asset, preview, None)

        future.add_done_callback(_on_done)

    def _deliver(
        self,
        epoch: int,
        slot: int,
        asset: AssetHandle,
        preview: Optional[PreviewImage],
        error: Optional[BaseException],
    ) -> None:
        if epoch != self._epoch:
            LOGGER.debug("Dropping stale preview for %s (epoch %d != %d)", asset.id, epoch, self._epoch)
            return

        if preview is None:
            failure = DecodeFailedError(f"Could not decode preview for {asset.id}")
            if error is not None:
                failure.__cause__ = error
            LOGGER.warning("%s", failure)
            target = self._buffer.fail(slot, asset.id)
        else:
            target = self._buffer.fulfil(slot, asset.id, preview)

        if target is None:
            LOGGER.debug("Preview for %s arrived after its slot was removed", asset.id)
            return
        if self._events is not None:
            self._events.publish(PreviewReadyEvent(
                asset_id=asset.id,
                slot=target,
                success=preview is not None,
            ))
