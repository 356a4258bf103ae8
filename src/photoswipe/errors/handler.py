import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from photoswipe.events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)


_UI_SEVERITIES = frozenset({ErrorSeverity.ERROR, ErrorSeverity.CRITICAL})


class ErrorHandler:
    """Report recoverable failures.

    Every error is logged at its severity and published as an
    ``ErrorOccurredEvent``; ERROR and CRITICAL also reach the UI callback.
    """

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None

    def register_ui_callback(self, callback: Callable[[str, ErrorSeverity], None]):
        self._ui_callback = callback

    def handle(self, error: Exception, severity: ErrorSeverity = ErrorSeverity.ERROR, context: Optional[dict] = None):
        context = context or {}
        log = getattr(self._logger, severity.value, self._logger.error)
        log("%s: %s", error.__class__.__name__, error, extra={"context": context})

        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if self._ui_callback is not None and severity in _UI_SEVERITIES:
            self._ui_callback(str(error), severity)
