"""Ordered review buffer filled by the batch loader."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from photoswipe.domain.models.core import AssetHandle, PreviewImage


class PreviewStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass
class BufferEntry:
    asset: AssetHandle
    preview: Optional[PreviewImage] = None
    status: PreviewStatus = PreviewStatus.PENDING


class ReviewBuffer:
    """Slots of ``(asset, preview)`` in source fetch order.

    Slots are appended by the loader and never reordered.  Preview writes
    address the slot that requested them and are checked against the asset
    held there, so a late delivery can neither land in the wrong slot nor
    bring back an entry that was dropped by a re-filter.
    """

    def __init__(self) -> None:
        self._entries: List[BufferEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, slot: int) -> BufferEntry:
        return self._entries[slot]

    def __iter__(self) -> Iterator[BufferEntry]:
        return iter(self._entries)

    def assets(self) -> List[AssetHandle]:
        return [entry.asset for entry in self._entries]

    def append(self, asset: AssetHandle) -> int:
        self._entries.append(BufferEntry(asset))
        return len(self._entries) - 1

    def insert(self, slot: int, entry: BufferEntry) -> None:
        slot = max(0, min(slot, len(self._entries)))
        self._entries.insert(slot, entry)

    def index_of(self, asset_id: str) -> Optional[int]:
        for slot, entry in enumerate(self._entries):
            if entry.asset.id == asset_id:
                return slot
        return None

    def resolve_slot(self, slot: int, asset_id: str) -> Optional[int]:
        """Return where *asset_id* lives now, preferring the requested *slot*."""

        if 0 <= slot < len(self._entries) and self._entries[slot].asset.id == asset_id:
            return slot
        return self.index_of(asset_id)

    def fulfil(self, slot: int, asset_id: str, preview: PreviewImage) -> Optional[int]:
        target = self.resolve_slot(slot, asset_id)
        if target is None:
            return None
        entry = self._entries[target]
        entry.preview = preview
        entry.status = PreviewStatus.READY
        return target

    def fail(self, slot: int, asset_id: str) -> Optional[int]:
        target = self.resolve_slot(slot, asset_id)
        if target is None:
            return None
        entry = self._entries[target]
        entry.preview = None
        entry.status = PreviewStatus.FAILED
        return target

    def clear(self) -> None:
        self._entries.clear()
