"""Default configuration values for PhotoSwipe."""

from __future__ import annotations

from typing import Final

# Folder names inside a library root.  Deleted assets are moved into
# ``RECENTLY_DELETED_DIR_NAME``, never unlinked.
RECENTLY_DELETED_DIR_NAME: Final[str] = ".Trash"
WORK_DIR_NAME: Final[str] = ".photoswipe"
COLLECTIONS_FILE_NAME: Final[str] = "collections.json"

IMAGE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {".jpg", ".jpeg", ".png", ".heic", ".heif", ".webp", ".tif", ".tiff", ".bmp", ".gif"}
)

# ---------------------------------------------------------------------------
# Review engine
# ---------------------------------------------------------------------------

DEFAULT_BATCH_SIZE: Final[int] = 30
LOOKAHEAD_MARGIN: Final[int] = 5
HORIZONTAL_THRESHOLD: Final[float] = 120.0
VERTICAL_THRESHOLD: Final[float] = 120.0
UNDO_HISTORY_LIMIT: Final[int] = 50
PREVIEW_TARGET_SIZE: Final[tuple[int, int]] = (1000, 1000)
DECODE_WORKERS: Final[int] = 4
COMMIT_WORKERS: Final[int] = 4

# Reserved bucket identifiers.  The delete bucket is committed as a single
# delete-assets mutation instead of a collection create/add.
DELETE_BUCKET_ID: Final[str] = "delete"
KEEP_BUCKET_ID: Final[str] = "keep"
DEFAULT_GROUP_LABELS: Final[tuple[str, ...]] = ("Group 1", "Group 2", "Group 3")
