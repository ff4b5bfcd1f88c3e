"""
Credentials module exceptions.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, ValidationError


class MissingRedirectTargetError(ValidationError):
    """Raised when no redirect URL is configured for the requesting client."""

    def __init__(self, client_id: Optional[str]):
        super().__init__(
            f"No redirect URL configured for client: {client_id}",
            code="MISSING_REDIRECT_TARGET",
            details={"client_id": client_id} if client_id else {},
        )


class InvalidAssertionError(AuthenticationError):
    """Raised when an identity assertion is missing or fails verification."""

    def __init__(self, message: str = "Invalid identity assertion"):
        super().__init__(message, code="INVALID_ASSERTION")
