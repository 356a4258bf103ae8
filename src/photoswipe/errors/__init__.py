"""Custom exception hierarchy for PhotoSwipe."""

from __future__ import annotations


class PhotoSwipeError(Exception):
    """Base class for all custom errors raised by PhotoSwipe."""


# --- 3-layer hierarchy ---

class DomainError(PhotoSwipeError):
    """Base class for domain-level errors."""


class InfrastructureError(PhotoSwipeError):
    """Base class for infrastructure-level errors."""


class ApplicationError(PhotoSwipeError):
    """Base class for application-level errors."""


# --- Domain errors ---

class BucketNotFoundError(DomainError):
    """Raised when a bucket identifier is not part of the session."""


class LabelConflictError(DomainError):
    """Raised when two buckets resolve to the same collection title in one commit."""


# --- Infrastructure errors ---

class DecodeFailedError(InfrastructureError):
    """Raised when a preview cannot be decoded for an asset."""


class CollectionMutationError(InfrastructureError):
    """Raised when creating, filling or deleting through the collection store fails."""


class LibraryUnavailableError(InfrastructureError):
    """Raised when the library root cannot be accessed."""


# --- Application errors ---

class AuthorizationDeniedError(ApplicationError):
    """Raised when access to the photo library has been denied."""


# --- DI-specific errors ---

class CircularDependencyError(PhotoSwipeError):
    """Raised when a circular dependency is detected during resolution."""


class ResolutionError(PhotoSwipeError):
    """Raised when a dependency cannot be resolved."""


# --- Settings ---

class SettingsError(PhotoSwipeError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


class ManifestInvalidError(InfrastructureError):
    """Raised when the collections manifest fails validation against the schema."""
