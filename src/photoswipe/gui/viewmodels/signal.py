"""Pure Python signal system, usable without a Qt event loop.

``Signal`` provides observer callbacks and ``ObservableProperty`` the
data-binding primitive used by the review view model.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

_logger = logging.getLogger(__name__)


class Signal:
    """Callback list guarded by a lock.

    A handler that raises is logged and skipped; the remaining handlers still
    run.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable] = []
        self._lock = threading.Lock()

    def connect(self, handler: Callable) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def disconnect(self, handler: Callable) -> None:
        with self._lock:
            self._handlers.remove(handler)

    def emit(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error("Signal handler %r failed: %s", handler, exc)

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)


class ObservableProperty:
    """Value holder that emits ``changed(new, old)`` when the value changes."""

    def __init__(self, initial_value: Any = None) -> None:
        self._value = initial_value
        self.changed = Signal()

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        # Identity first: PIL images do not define a cheap equality.
        if new_value is self._value:
            return
        if _comparable(new_value) and _comparable(self._value) and new_value == self._value:
            return
        old_value = self._value
        self._value = new_value
        self.changed.emit(new_value, old_value)


def _comparable(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool, tuple, dict, list, frozenset))
