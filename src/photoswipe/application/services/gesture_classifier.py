"""Threshold policy that turns a drag displacement into an outcome."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from photoswipe.config import HORIZONTAL_THRESHOLD, VERTICAL_THRESHOLD
from photoswipe.domain.models import GestureVector, Outcome


@dataclass(frozen=True)
class SwipeClassifier:
    """Classify gesture vectors by dominant axis and threshold.

    When ``|dx| > |dy|`` the horizontal component decides: beyond
    ``-horizontal_threshold`` is primary, beyond ``+horizontal_threshold`` is
    secondary (swapped when ``invert_horizontal`` is set).  Otherwise an
    upward drag past ``vertical_threshold`` is tertiary and a downward one
    maps to ``down_outcome``.  Anything shorter is a skip.
    """

    horizontal_threshold: float = HORIZONTAL_THRESHOLD
    vertical_threshold: float = VERTICAL_THRESHOLD
    invert_horizontal: bool = False
    down_outcome: Outcome = Outcome.SKIP

    def __post_init__(self) -> None:
        if self.horizontal_threshold < 0 or self.vertical_threshold < 0:
            raise ValueError("Swipe thresholds must be non-negative")

    def classify(self, vector: GestureVector | tuple[float, float]) -> Outcome:
        dx, dy = vector
        if abs(dx) > abs(dy):
            if dx < -self.horizontal_threshold:
                return Outcome.SECONDARY if self.invert_horizontal else Outcome.PRIMARY
            if dx > self.horizontal_threshold:
                return Outcome.PRIMARY if self.invert_horizontal else Outcome.SECONDARY
            return Outcome.SKIP
        if dy < -self.vertical_threshold:
            return Outcome.TERTIARY
        if dy > self.vertical_threshold:
            return self.down_outcome
        return Outcome.SKIP


def drag_direction(dx: float, dy: float) -> Optional[str]:
    """Return live drag feedback: ``"left"``, ``"right"``, ``"up"`` or ``None``.

    Unlike :meth:`SwipeClassifier.classify` this ignores thresholds; it only
    tells the presentation layer which way the card is leaning.
    """

    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    if dy < 0:
        return "up"
    return None
