"""Dispatcher that runs completions on the thread owning a Qt object."""

from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, Qt, Signal


class QtDispatcher(QObject):
    """Post callbacks into the Qt event loop of this object's thread.

    The internal signal is connected with ``Qt.QueuedConnection`` so an emit
    from a worker thread only enqueues the call; it runs when the owning
    thread's event loop processes events.
    """

    _posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self._posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._posted.emit((callback, args))

    def _run(self, payload: object) -> None:
        callback, args = payload  # type: ignore[misc]
        try:
            callback(*args)
        except Exception:
            self._logger.exception("Dispatched callback %r failed", callback)
