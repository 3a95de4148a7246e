"""Custom exceptions for the application."""

from typing import Dict, Optional


class DirectoryError(Exception):
    """Base exception for user-directory errors."""
    pass


class RequestCancelledError(DirectoryError):
    """Exception raised when a caller cancels an in-flight operation."""
    pass


class NetworkError(DirectoryError):
    """Exception raised for transport-level failures (DNS, connect, timeout)."""
    pass


class HttpStatusError(DirectoryError):
    """Base exception for non-success HTTP responses."""

    def __init__(self, message: str, status_code: int, action: str):
        super().__init__(message)
        self.status_code = status_code
        self.action = action


class NotFoundError(HttpStatusError):
    """Exception raised for 404 responses."""
    pass


class PermissionDeniedError(HttpStatusError):
    """Exception raised for 403 responses."""
    pass


class ConflictError(HttpStatusError):
    """Exception raised for 409 responses."""
    pass


class ServerError(HttpStatusError):
    """Exception raised for 5xx responses."""
    pass


class ActionFailedError(HttpStatusError):
    """Exception raised for any other failed action."""
    pass


class ValidationError(DirectoryError):
    """Exception raised when form input violates a field constraint."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}
