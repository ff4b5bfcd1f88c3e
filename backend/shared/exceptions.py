"""
Base exception classes for the Auth Bridge backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class BridgeError(Exception):
    """
    Base exception for all Auth Bridge errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(BridgeError):
    """Resource not found."""

    pass


class ValidationError(BridgeError):
    """Input validation failed."""

    pass


class AuthenticationError(BridgeError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class ConflictError(BridgeError):
    """The request conflicts with the current state of a resource."""

    pass


class ExternalServiceError(BridgeError):
    """Error communicating with an external service."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
