from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import List, Optional, Sequence, Tuple

from .models import (
    AccessStatus,
    AssetHandle,
    CollectionHandle,
    CollectionKind,
    PreviewImage,
    PreviewMode,
)


class IAssetSource(ABC):
    """Ordered, externally owned sequence of assets."""

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def asset_at(self, index: int) -> AssetHandle:
        """Return the handle at *index*; raises ``IndexError`` when out of range."""
        pass

    @abstractmethod
    def fetch_sorted(self, ascending: bool = True, limit: Optional[int] = None) -> "IAssetSource":
        """Return a new source ordered by creation date, optionally truncated."""
        pass


class IPreviewDecoder(ABC):
    @abstractmethod
    def request_preview(
        self,
        asset: AssetHandle,
        target_size: Tuple[int, int],
        mode: PreviewMode = PreviewMode.FIT,
    ) -> "Future[Optional[PreviewImage]]":
        """Start decoding *asset*; the future yields ``None`` when decoding fails."""
        pass


class ICollectionStore(ABC):
    @abstractmethod
    def list_collections(self, kind: Optional[CollectionKind] = None) -> List[CollectionHandle]:
        """Every collection of *kind* (all kinds when ``None``), at any depth."""
        pass

    @abstractmethod
    def list_members(self, collection: CollectionHandle) -> List[AssetHandle]:
        pass

    @abstractmethod
    def create_collection(self, title: str) -> "Future[CollectionHandle]":
        pass

    @abstractmethod
    def add_members(self, collection: CollectionHandle, assets: Sequence[AssetHandle]) -> "Future[None]":
        pass

    @abstractmethod
    def remove_members(self, collection: CollectionHandle, assets: Sequence[AssetHandle]) -> "Future[None]":
        pass

    @abstractmethod
    def delete_assets(self, assets: Sequence[AssetHandle]) -> "Future[None]":
        pass


class IAuthorizationGate(ABC):
    @abstractmethod
    def request_access(self) -> AccessStatus:
        pass
