"""Bounded undo history for a review session."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from photoswipe.config import UNDO_HISTORY_LIMIT
from photoswipe.domain.models import UndoRecord

if TYPE_CHECKING:
    from .review_session import ReviewSession


class UndoStack:
    """Keeps the most recent ``history_limit`` records; older ones fall off."""

    def __init__(
        self,
        session: ReviewSession | None = None,
        history_limit: int = UNDO_HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._session = session
        self._history_limit = history_limit
        self._records: list[UndoRecord] = []

    def set_session(self, session: ReviewSession | None) -> None:
        """Bind to a new review session and clear history."""
        self._session = session
        self.clear()

    @property
    def history_limit(self) -> int:
        return self._history_limit

    @property
    def can_undo(self) -> bool:
        return bool(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def peek(self) -> Optional[UndoRecord]:
        return self._records[-1] if self._records else None

    def clear(self) -> None:
        self._records.clear()

    def record_and_push(self, record: UndoRecord) -> None:
        self._records.append(record)
        if len(self._records) > self._history_limit:
            self._records.pop(0)

    def pop_and_apply(self) -> Optional[UndoRecord]:
        """Revert the newest record against the bound session.

        An empty stack, or one with no session bound, is a silent no-op.
        """
        if self._session is None or not self._records:
            return None
        record = self._records.pop()
        self._session.revert(record)
        return record
