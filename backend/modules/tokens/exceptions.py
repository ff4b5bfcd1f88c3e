"""
Token module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError


class ProviderUnavailableError(ExternalServiceError):
    """
    Raised when the provider's token endpoint cannot be reached
    (network failure or timeout).

    Retryable: the same refresh token can be exchanged again later.
    """

    retryable = True

    def __init__(self, provider: str, reason: str):
        super().__init__(
            f"{provider} token endpoint unavailable: {reason}",
            service=provider,
            code="PROVIDER_UNAVAILABLE",
            details={"reason": reason},
        )


class TokenExchangeError(ExternalServiceError):
    """
    Raised when the provider rejects the exchange or answers with a body
    that is not a token response.

    Not retryable without a fresh refresh token.
    """

    retryable = False

    def __init__(self, provider: str, reason: str, status_code: Optional[int] = None):
        details: dict = {"reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"{provider} token exchange failed: {reason}",
            service=provider,
            code="TOKEN_EXCHANGE_FAILED",
            details=details,
        )
