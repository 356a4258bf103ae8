"""Asset sources backed by an in-memory list or a library folder."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from dateutil.parser import isoparse
from PIL import Image, UnidentifiedImageError

from ..config import IMAGE_EXTENSIONS, RECENTLY_DELETED_DIR_NAME, WORK_DIR_NAME
from ..domain.models import AssetHandle
from ..domain.repositories import IAssetSource
from ..errors import LibraryUnavailableError

LOGGER = logging.getLogger(__name__)

# EXIF tags: DateTimeOriginal / DateTimeDigitized live in the Exif IFD,
# DateTime in IFD0.
_EXIF_IFD = 0x8769
_DATETIME_ORIGINAL = 36867
_DATETIME_DIGITIZED = 36868
_DATETIME = 306
_OFFSET_ORIGINAL = 36881


class StaticAssetSource(IAssetSource):
    """Fixed, ordered list of handles."""

    def __init__(self, assets: Sequence[AssetHandle]) -> None:
        self._assets: List[AssetHandle] = list(assets)

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "StaticAssetSource":
        return cls([AssetHandle(id=asset_id, position=i) for i, asset_id in enumerate(ids)])

    def count(self) -> int:
        return len(self._assets)

    def asset_at(self, index: int) -> AssetHandle:
        if index < 0 or index >= len(self._assets):
            raise IndexError(f"Asset index {index} out of range")
        return self._assets[index]

    def fetch_sorted(self, ascending: bool = True, limit: Optional[int] = None) -> "StaticAssetSource":
        # Undated assets sort as oldest; ties keep their current order.
        floor = datetime.min.replace(tzinfo=timezone.utc)
        ordered = sorted(
            self._assets,
            key=lambda asset: _aware(asset.created_at) or floor,
            reverse=not ascending,
        )
        if limit is not None:
            ordered = ordered[: max(limit, 0)]
        return StaticAssetSource(
            [
                AssetHandle(id=asset.id, position=i, created_at=asset.created_at, path=asset.path)
                for i, asset in enumerate(ordered)
            ]
        )


class FolderAssetSource(StaticAssetSource):
    """Images below a library root, in directory-walk order.

    The work directory and the trash are skipped.  Asset ids are POSIX paths
    relative to the root so they stay stable across runs.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        if not self._root.is_dir():
            raise LibraryUnavailableError(f"Library root is not a directory: {self._root}")
        super().__init__(list(self._scan()))

    @property
    def root(self) -> Path:
        return self._root

    def _scan(self) -> Iterable[AssetHandle]:
        skipped = {WORK_DIR_NAME, RECENTLY_DELETED_DIR_NAME}
        position = 0
        for candidate in sorted(self._root.rglob("*")):
            rel = candidate.relative_to(self._root)
            if any(part in skipped or part.startswith("._") for part in rel.parts):
                continue
            if not candidate.is_file() or candidate.suffix.lower() not in IMAGE_EXTENSIONS:
                continue
            yield AssetHandle(
                id=rel.as_posix(),
                position=position,
                created_at=read_capture_time(candidate),
                path=candidate,
            )
            position += 1


def read_capture_time(path: Path) -> Optional[datetime]:
    """Return the EXIF capture time of *path*, else its modification time."""

    try:
        with Image.open(path) as img:
            exif = img.getexif()
            sub = exif.get_ifd(_EXIF_IFD)
            raw = sub.get(_DATETIME_ORIGINAL) or sub.get(_DATETIME_DIGITIZED) or exif.get(_DATETIME)
            offset = sub.get(_OFFSET_ORIGINAL)
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        LOGGER.debug("No EXIF for %s: %s", path, exc)
        raw = offset = None

    if isinstance(raw, str) and raw.strip():
        parsed = _parse_exif_datetime(raw.strip(), offset if isinstance(offset, str) else None)
        if parsed is not None:
            return parsed

    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None


def _parse_exif_datetime(value: str, offset: Optional[str]) -> Optional[datetime]:
    # EXIF uses "YYYY:MM:DD HH:MM:SS"; rewrite the date part into ISO form.
    date_part, _, time_part = value.partition(" ")
    iso = f"{date_part.replace(':', '-')}T{time_part}" if time_part else date_part.replace(":", "-")
    if offset and offset.strip():
        iso += offset.strip()
    try:
        parsed = isoparse(iso)
    except (ValueError, OverflowError):
        return None
    return _aware(parsed)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
