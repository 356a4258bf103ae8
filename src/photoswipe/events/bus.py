"""In-process publish/subscribe bus for review events."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base event class."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    background: bool = False
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class EventBus:
    """Dispatch events to subscribers keyed by exact event type.

    Foreground handlers run on the publishing thread, in subscription order.
    Background handlers run on a small thread pool that is created on first
    use, so a bus with only foreground subscribers never spawns threads.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 2):
        self._logger = logger or logging.getLogger(__name__)
        self._subscriptions: Dict[Type[Event], List[Subscription]] = defaultdict(list)
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def subscribe(
        self,
        event_type: Type[Event],
        handler: Callable,
        background: bool = False,
    ) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, background=background)
        with self._lock:
            self._subscriptions[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        with self._lock:
            subs = self._subscriptions.get(subscription.event_type, [])
            if subscription in subs:
                subs.remove(subscription)

    def publish(self, event: Event) -> List[Future]:
        """Deliver *event*; return futures for any background handlers."""
        event_type = type(event)
        with self._lock:
            subs = [sub for sub in self._subscriptions[event_type] if sub.active]

        futures: List[Future] = []
        for sub in subs:
            if sub.background:
                futures.append(self._pool().submit(self._safe_call, sub.handler, event))
            else:
                self._safe_call(sub.handler, event)
        return futures

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="EventBus",
                )
            return self._executor

    def _safe_call(self, handler: Callable, event: Event) -> None:
        try:
            handler(event)
        except Exception as exc:
            self._logger.error("Handler %r failed for %s: %s", handler, type(event).__name__, exc)
