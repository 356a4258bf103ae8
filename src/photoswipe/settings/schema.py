"""Schema helpers for the application settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_GROUP_LABELS,
    HORIZONTAL_THRESHOLD,
    LOOKAHEAD_MARGIN,
    PREVIEW_TARGET_SIZE,
    UNDO_HISTORY_LIMIT,
    VERTICAL_THRESHOLD,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "photoswipe/settings.schema.json",
    "type": "object",
    "required": ["schema", "review", "last_libraries"],
    "properties": {
        "schema": {"const": "photoswipe/settings@1"},
        "library_path": {"type": ["string", "null"]},
        "review": {
            "type": "object",
            "properties": {
                "mode": {"type": "string", "enum": ["cleanup", "tagging"]},
                "start_from_last": {"type": "boolean"},
                "batch_size": {"type": "integer", "minimum": 1},
                "lookahead_margin": {"type": "integer", "minimum": 0},
                "horizontal_threshold": {"type": "number", "minimum": 0},
                "vertical_threshold": {"type": "number", "minimum": 0},
                "invert_horizontal": {"type": "boolean"},
                "undo_depth": {"type": "integer", "minimum": 1},
                "preview_size": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 1},
                    "minItems": 2,
                    "maxItems": 2,
                },
                "group_labels": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                    "maxItems": 3,
                },
            },
            "additionalProperties": True,
        },
        "last_libraries": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "photoswipe/settings@1",
    "library_path": None,
    "review": {
        "mode": "cleanup",
        "start_from_last": False,
        "batch_size": DEFAULT_BATCH_SIZE,
        "lookahead_margin": LOOKAHEAD_MARGIN,
        "horizontal_threshold": HORIZONTAL_THRESHOLD,
        "vertical_threshold": VERTICAL_THRESHOLD,
        "invert_horizontal": False,
        "undo_depth": UNDO_HISTORY_LIMIT,
        "preview_size": list(PREVIEW_TARGET_SIZE),
        "group_labels": list(DEFAULT_GROUP_LABELS),
    },
    "last_libraries": [],
}

_VALIDATOR = Draft202012Validator(SETTINGS_SCHEMA)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def merge_with_defaults(payload: dict[str, Any] | None) -> dict[str, Any]:
    """Overlay *payload* on the defaults and validate the result.

    Raises :class:`jsonschema.ValidationError` when the merged document is
    invalid.
    """

    data = _merge(DEFAULT_SETTINGS, payload or {})
    data["schema"] = DEFAULT_SETTINGS["schema"]
    _VALIDATOR.validate(data)
    return data


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults"]
