"""Marshal asynchronous completions back onto the review timeline.

Decode and mutation callbacks fire on worker threads.  Nothing on those
threads may touch the buffer, buckets or cursor directly; instead the
callback is posted through a :class:`Dispatcher` and runs wherever the
session owner drains it.
"""

from __future__ import annotations

import logging
import queue
from typing import Any, Callable, Protocol

LOGGER = logging.getLogger(__name__)


class Dispatcher(Protocol):
    def post(self, callback: Callable[..., Any], *args: Any) -> None: ...


class ImmediateDispatcher:
    """Run callbacks inline on the calling thread.

    Only suitable when every completion already arrives on the owner's
    thread, e.g. with synchronous fakes in tests.
    """

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)


class QueueDispatcher:
    """Buffer callbacks in a thread-safe queue until the owner drains them."""

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[tuple[Callable[..., Any], tuple[Any, ...]]]" = queue.SimpleQueue()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, block: bool = False, timeout: float | None = None) -> int:
        """Run queued callbacks on the calling thread; return how many ran.

        With *block* set, wait up to *timeout* seconds for the first callback.
        """

        ran = 0
        if block:
            try:
                callback, args = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            self._run(callback, args)
            ran += 1
        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return ran
            self._run(callback, args)
            ran += 1

    @staticmethod
    def _run(callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            callback(*args)
        except Exception:
            LOGGER.exception("Dispatched callback %r failed", callback)
