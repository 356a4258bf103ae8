from .qt_dispatcher import QtDispatcher

__all__ = ["QtDispatcher"]
