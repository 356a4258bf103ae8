from .bus import Event, EventBus, Subscription
from .review_events import (
    AssetClassifiedEvent,
    BatchLoadedEvent,
    BucketCommittedEvent,
    PreviewReadyEvent,
    ReviewCompletedEvent,
    UndoAppliedEvent,
)

__all__ = [
    "Event",
    "EventBus",
    "Subscription",
    "AssetClassifiedEvent",
    "BatchLoadedEvent",
    "BucketCommittedEvent",
    "PreviewReadyEvent",
    "ReviewCompletedEvent",
    "UndoAppliedEvent",
]
