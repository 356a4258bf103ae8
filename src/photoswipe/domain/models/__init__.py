from .buckets import Bucket, BucketSet
from .buffer import BufferEntry, PreviewStatus, ReviewBuffer
from .core import (
    AccessStatus,
    AssetHandle,
    CollectionHandle,
    CollectionKind,
    GestureVector,
    Outcome,
    PreviewImage,
    PreviewMode,
    ReviewState,
    UndoRecord,
)

__all__ = [
    "AccessStatus",
    "AssetHandle",
    "Bucket",
    "BucketSet",
    "BufferEntry",
    "CollectionHandle",
    "CollectionKind",
    "GestureVector",
    "Outcome",
    "PreviewImage",
    "PreviewMode",
    "PreviewStatus",
    "ReviewBuffer",
    "ReviewState",
    "UndoRecord",
]
