from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from photoswipe.application.services.review_modes import ReviewMode
from photoswipe.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_GROUP_LABELS,
    HORIZONTAL_THRESHOLD,
    LOOKAHEAD_MARGIN,
    PREVIEW_TARGET_SIZE,
    UNDO_HISTORY_LIMIT,
    VERTICAL_THRESHOLD,
)


@dataclass(frozen=True)
class ReviewOptions:
    """Tunables for one review session."""

    mode: ReviewMode = ReviewMode.CLEANUP
    start_from_last: bool = False
    limit: Optional[int] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    lookahead_margin: int = LOOKAHEAD_MARGIN
    horizontal_threshold: float = HORIZONTAL_THRESHOLD
    vertical_threshold: float = VERTICAL_THRESHOLD
    invert_horizontal: bool = False
    undo_depth: int = UNDO_HISTORY_LIMIT
    preview_size: Tuple[int, int] = PREVIEW_TARGET_SIZE
    group_labels: Tuple[str, ...] = field(default=DEFAULT_GROUP_LABELS)

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "ReviewOptions":
        """Build options from the ``review`` section of a settings manager."""

        def _get(key: str, default: Any) -> Any:
            return settings.get(f"review.{key}", default)

        size = _get("preview_size", list(PREVIEW_TARGET_SIZE))
        values = dict(
            mode=ReviewMode(_get("mode", ReviewMode.CLEANUP.value)),
            start_from_last=bool(_get("start_from_last", False)),
            batch_size=int(_get("batch_size", DEFAULT_BATCH_SIZE)),
            lookahead_margin=int(_get("lookahead_margin", LOOKAHEAD_MARGIN)),
            horizontal_threshold=float(_get("horizontal_threshold", HORIZONTAL_THRESHOLD)),
            vertical_threshold=float(_get("vertical_threshold", VERTICAL_THRESHOLD)),
            invert_horizontal=bool(_get("invert_horizontal", False)),
            undo_depth=int(_get("undo_depth", UNDO_HISTORY_LIMIT)),
            preview_size=(int(size[0]), int(size[1])),
            group_labels=tuple(_get("group_labels", list(DEFAULT_GROUP_LABELS))),
        )
        values.update(overrides)
        return cls(**values)
