"""Identity provider exceptions."""

from typing import Optional

from shared.exceptions import ValidationError


class UnknownProviderError(ValidationError):
    """Raised when a provider kind is outside the supported set, or is
    used in a flow it does not take part in."""

    def __init__(self, provider: str, reason: Optional[str] = None):
        message = f"Unknown provider: {provider}"
        if reason:
            message = f"Provider '{provider}' {reason}"
        super().__init__(
            message,
            code="UNKNOWN_PROVIDER",
            details={"provider": provider},
        )


class InvalidProfileError(ValidationError):
    """Raised when a verified provider profile carries no external id."""

    def __init__(self, provider: str, message: str = "Provider profile has no external id"):
        super().__init__(
            message,
            code="INVALID_PROFILE",
            details={"provider": provider},
        )
