"""
Linking module exceptions.

These exceptions are raised by the linking module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, ConflictError


class SessionInvalidError(AuthenticationError):
    """Raised when the session does not point at an existing user and profile."""

    def __init__(self, message: str = "Invalid session", user_id: Optional[str] = None):
        super().__init__(
            message,
            code="SESSION_INVALID",
            details={"user_id": user_id} if user_id else {},
        )


class AlreadyLinkedError(ConflictError):
    """
    Raised when the user already has a different account of this provider
    linked.

    This is the one linking error meant for the end user, so the message
    is phrased for them.
    """

    def __init__(self, provider: str, user_id: Optional[str] = None):
        super().__init__(
            f"This {provider} account is linked to a different user",
            code="ALREADY_LINKED",
            details={"provider": provider},
        )
        if user_id:
            self.details["user_id"] = user_id


class RoundTripFailedError(AuthenticationError):
    """
    Raised when a round trip is finished after its handshake failed.

    Carries the code of the original failure so the client application is
    told what went wrong (e.g. ALREADY_LINKED).
    """

    def __init__(self, code: str):
        super().__init__(f"Round trip failed: {code}", code=code)
