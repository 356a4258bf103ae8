"""Persistent review preferences backed by a validated JSON file."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from PySide6.QtCore import QObject, Signal

from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def default_settings_path() -> Path:
    """Per-user location of ``settings.json`` (APPDATA, Application Support or XDG)."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "PhotoSwipe" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "PhotoSwipe" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "PhotoSwipe" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "PhotoSwipe" / "settings.json"
    return Path.home() / ".config" / "PhotoSwipe" / "settings.json"


class SettingsManager(QObject):
    """Review preferences with dotted-key access.

    Every successful ``set`` is written through to disk before
    ``settingsChanged`` fires, so listeners may re-read the file.
    """

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    def load(self) -> None:
        """Read the file (defaults when absent), validate it and write it back."""

        path = self.path
        self._path = path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"{path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"{path}: expected a JSON object")
        try:
            self._data = merge_with_defaults(payload)
        except Exception as exc:
            raise SettingsValidationError(str(exc)) from exc
        self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Look up a dotted *key* such as ``review.batch_size``."""

        target: Any = self._data
        for part in key.split("."):
            if not isinstance(target, dict) or part not in target:
                return default
            target = target[part]
        return deepcopy(target)

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value*, validate, persist and notify."""

        if isinstance(value, Path):
            value = str(value)
        elif isinstance(value, tuple):
            value = list(value)

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except Exception as exc:
            raise SettingsValidationError(str(exc)) from exc
        self._write()
        self.settingsChanged.emit(key, value)

    def remember_library(self, path: Path, limit: int = 10) -> None:
        """Move *path* to the front of the recently used libraries."""

        entry = str(path)
        recent = [item for item in self.get("last_libraries", []) if item != entry]
        self.set("last_libraries", [entry, *recent][:limit])

    def _write(self) -> None:
        path = self.path
        self._path = path
        write_json(path, self._data)


__all__ = ["SettingsManager", "default_settings_path"]
