"""Preview decoding with Pillow on a worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import DECODE_WORKERS
from ..domain.models import AssetHandle, PreviewImage, PreviewMode
from ..domain.repositories import IPreviewDecoder

LOGGER = logging.getLogger(__name__)


def decode_preview(path: Path, target_size: Tuple[int, int], mode: PreviewMode = PreviewMode.FIT) -> Optional[Image.Image]:
    """Decode *path* into an RGB image bounded by *target_size*.

    ``FIT`` preserves the aspect ratio inside the box and never upscales;
    ``FILL`` crops to cover the box exactly.  Orientation tags are applied
    so the preview is upright.
    """

    width, height = target_size
    if width <= 0 or height <= 0:
        return None
    try:
        with Image.open(path) as img:
            # ``draft`` lets JPEG decode at a reduced scale when the target
            # is much smaller than the original.
            img.draft("RGB", (width, height))
            img = ImageOps.exif_transpose(img)
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
            if mode is PreviewMode.FILL:
                return ImageOps.fit(img, (width, height), Image.Resampling.LANCZOS)
            preview = img.copy()
            preview.thumbnail((width, height), Image.Resampling.LANCZOS)
            return preview
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as exc:
        LOGGER.warning("Pillow failed to decode %s: %s", path, exc)
        return None


class PillowPreviewDecoder(IPreviewDecoder):
    """Decode previews for file-backed assets on a thread pool."""

    def __init__(self, max_workers: int = DECODE_WORKERS) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="PreviewDecode")

    def request_preview(
        self,
        asset: AssetHandle,
        target_size: Tuple[int, int],
        mode: PreviewMode = PreviewMode.FIT,
    ) -> "Future[Optional[PreviewImage]]":
        return self._executor.submit(self._decode, asset, target_size, mode)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _decode(asset: AssetHandle, target_size: Tuple[int, int], mode: PreviewMode) -> Optional[PreviewImage]:
        if asset.path is None:
            LOGGER.warning("Asset %s has no file path to decode", asset.id)
            return None
        image = decode_preview(asset.path, target_size, mode)
        if image is None:
            return None
        return PreviewImage(asset_id=asset.id, image=image)
