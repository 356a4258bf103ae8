"""Buckets: named, exclusive groupings of assets accumulated during review."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from photoswipe.domain.models.core import AssetHandle
from photoswipe.errors import BucketNotFoundError


@dataclass
class Bucket:
    id: str
    label: str
    members: List[AssetHandle] = field(default_factory=list)
    reserved: bool = False
    # Buckets that only record a decision (e.g. "keep") are never committed.
    persist: bool = True

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, asset: object) -> bool:
        return asset in self.members

    @property
    def is_empty(self) -> bool:
        return not self.members


class BucketSet:
    """Ordered collection of buckets keyed by stable identifier.

    An asset is held by at most one bucket.  Labels are display text only and
    may be renamed freely, including to a label another bucket already uses.
    """

    def __init__(self, buckets: Optional[List[Bucket]] = None) -> None:
        self._buckets: Dict[str, Bucket] = {}
        self._owner: Dict[str, str] = {}
        for bucket in buckets or []:
            self.add(bucket)

    def add(self, bucket: Bucket) -> Bucket:
        if bucket.id in self._buckets:
            raise ValueError(f"Duplicate bucket id: {bucket.id}")
        self._buckets[bucket.id] = bucket
        for asset in list(bucket.members):
            previous = self._owner.get(asset.id)
            if previous is not None:
                self._buckets[previous].members.remove(asset)
            self._owner[asset.id] = bucket.id
        return bucket

    def get(self, bucket_id: str) -> Bucket:
        try:
            return self._buckets[bucket_id]
        except KeyError:
            raise BucketNotFoundError(f"Unknown bucket: {bucket_id}") from None

    def __contains__(self, bucket_id: object) -> bool:
        return bucket_id in self._buckets

    def __iter__(self) -> Iterator[Bucket]:
        return iter(list(self._buckets.values()))

    def __len__(self) -> int:
        return len(self._buckets)

    def bucket_of(self, asset_id: str) -> Optional[str]:
        return self._owner.get(asset_id)

    def assign(
        self,
        asset: AssetHandle,
        bucket_id: str,
        index: Optional[int] = None,
    ) -> Optional[str]:
        """Place *asset* in *bucket_id*; return the bucket it was moved out of.

        The asset is appended unless *index* names an insertion point.
        """

        target = self.get(bucket_id)
        previous = self._owner.get(asset.id)
        if previous == bucket_id:
            return previous
        if previous is not None:
            self._discard(self._buckets[previous], asset.id)
        if index is None:
            target.members.append(asset)
        else:
            target.members.insert(index, asset)
        self._owner[asset.id] = bucket_id
        return previous

    def index_in_bucket(self, asset_id: str) -> Optional[int]:
        owner = self._owner.get(asset_id)
        if owner is None:
            return None
        for index, member in enumerate(self._buckets[owner].members):
            if member.id == asset_id:
                return index
        return None

    def remove(self, asset_id: str) -> Optional[str]:
        """Take *asset_id* out of whichever bucket holds it."""

        owner = self._owner.pop(asset_id, None)
        if owner is not None:
            self._discard(self._buckets[owner], asset_id)
        return owner

    def rename(self, bucket_id: str, label: str) -> None:
        label = label.strip()
        if not label:
            raise ValueError("Bucket labels must not be blank")
        self.get(bucket_id).label = label

    def clear(self, bucket_id: str) -> List[AssetHandle]:
        bucket = self.get(bucket_id)
        members, bucket.members = bucket.members, []
        for asset in members:
            self._owner.pop(asset.id, None)
        return members

    def non_empty(self) -> List[Bucket]:
        return [bucket for bucket in self._buckets.values() if bucket.members]

    def sizes(self) -> Dict[str, int]:
        return {bucket_id: len(bucket.members) for bucket_id, bucket in self._buckets.items()}

    def copy(self) -> "BucketSet":
        """Detached copy; changes to either set do not reach the other."""

        return BucketSet([
            Bucket(bucket.id, bucket.label, list(bucket.members), bucket.reserved, bucket.persist)
            for bucket in self._buckets.values()
        ])

    def snapshot(self) -> Dict[str, List[str]]:
        """Return ``{bucket_id: [asset ids]}`` for comparisons and display."""

        return {
            bucket_id: [asset.id for asset in bucket.members]
            for bucket_id, bucket in self._buckets.items()
        }

    @staticmethod
    def _discard(bucket: Bucket, asset_id: str) -> None:
        bucket.members = [member for member in bucket.members if member.id != asset_id]
