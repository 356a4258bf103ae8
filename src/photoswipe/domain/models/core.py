from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple, Optional


class Outcome(str, Enum):
    """Discrete result of classifying a swipe."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    SKIP = "skip"


class ReviewState(str, Enum):
    REVIEWING = "reviewing"
    COMPLETE = "complete"


class AccessStatus(str, Enum):
    GRANTED = "granted"
    LIMITED = "limited"
    DENIED = "denied"


class CollectionKind(str, Enum):
    ALBUM = "album"
    FOLDER = "folder"


class PreviewMode(str, Enum):
    # Scale to fit inside the target box, or crop to fill it.
    FIT = "fit"
    FILL = "fill"


class GestureVector(NamedTuple):
    """Drag displacement; negative ``dy`` points up."""

    dx: float
    dy: float


@dataclass(frozen=True)
class AssetHandle:
    """Opaque reference to one photo in an asset source.

    Identity is the ``id`` alone: the ordinal position, capture date and
    filesystem path are descriptive and do not take part in equality.
    """

    id: str
    position: int = field(default=0, compare=False)
    created_at: Optional[datetime] = field(default=None, compare=False)
    path: Optional[Path] = field(default=None, compare=False)


@dataclass(frozen=True)
class PreviewImage:
    asset_id: str
    image: Any  # PIL.Image.Image for the bundled decoder

    @property
    def size(self) -> tuple[int, int]:
        return tuple(getattr(self.image, "size", (0, 0)))  # type: ignore[return-value]


@dataclass(frozen=True)
class CollectionHandle:
    id: str
    title: str
    kind: CollectionKind = CollectionKind.ALBUM
    count: int = 0
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class UndoRecord:
    """One reversible assignment made during review."""

    asset: AssetHandle
    bucket_id: Optional[str]
    prior_position: int
    previous_bucket_id: Optional[str] = None
    previous_index: Optional[int] = None
    # Whether the record moved the cursor; explicit reassignments do not.
    advanced: bool = True
