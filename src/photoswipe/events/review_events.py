"""Events published while a review session runs and commits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from photoswipe.events.bus import Event


@dataclass(kw_only=True)
class BatchLoadedEvent(Event):
    epoch: int
    start_slot: int
    count: int
    fetch_cursor: int
    exhausted: bool = False


@dataclass(kw_only=True)
class PreviewReadyEvent(Event):
    asset_id: str
    slot: int
    success: bool = True


@dataclass(kw_only=True)
class AssetClassifiedEvent(Event):
    asset_id: str
    outcome: str
    bucket_id: Optional[str] = None
    position: int = 0


@dataclass(kw_only=True)
class UndoAppliedEvent(Event):
    asset_id: str
    bucket_id: Optional[str] = None
    position: int = 0


@dataclass(kw_only=True)
class ReviewCompletedEvent(Event):
    reviewed_count: int
    bucket_sizes: dict


@dataclass(kw_only=True)
class BucketCommittedEvent(Event):
    bucket_id: str
    label: str
    success: bool
    member_count: int = 0
    error: Optional[str] = None
