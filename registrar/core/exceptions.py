"""
Custom exceptions for the registrar package.
"""

from typing import Optional, Any, Dict


class RegistrarException(Exception):
    """Base exception for all registrar errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(RegistrarException):
    """Raised when constructor input is malformed."""
    pass


class DuplicateError(RegistrarException):
    """Raised when a membership, course or lesson is already present."""
    pass


class LimitExceededError(RegistrarException):
    """Raised when an entity has reached its configured capacity."""
    pass


class NotFoundError(RegistrarException):
    """Raised when a lookup or search yields nothing."""
    pass


class PersistenceError(RegistrarException):
    """Raised when writing persisted data fails."""
    pass


class DataLoadError(RegistrarException):
    """Raised when a persisted file is corrupt or unreadable.

    Only the load of ``filename`` is aborted; ``cause`` holds the underlying
    I/O, parse or validation error.
    """

    def __init__(self, message: str, filename: str, cause: Optional[BaseException] = None):
        super().__init__(message, error_code="DATA_LOAD", details={"filename": filename})
        self.filename = filename
        self.cause = cause


class SnapshotError(PersistenceError):
    """Raised when a backup blob cannot be decoded or fails validation."""
    pass
