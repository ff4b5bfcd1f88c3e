"""
Credentials module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from providers import ProviderKind

from .models import IdentityAssertion, LongLivedCredential


@runtime_checkable
class IAssertionVerifier(Protocol):
    """Verifies identity assertions issued by the primary identity platform."""

    async def verify(self, token: str) -> IdentityAssertion:
        """
        Verify an identity assertion.

        Raises:
            InvalidAssertionError: If the assertion is missing or invalid
        """
        ...


@runtime_checkable
class ICredentialService(Protocol):
    """Interface for issuing credentials to client applications."""

    def resolve_redirect_base(self, client_id: Optional[str]) -> str:
        """
        Get the configured redirect URL for a client application.

        Raises:
            MissingRedirectTargetError: If the client is not configured
        """
        ...

    async def issue_redirect_credential(
        self,
        kind: "ProviderKind | str | None",
        client_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> str:
        """
        Build the URL that hands a finished round trip back to the client.

        Args:
            kind: Provider the round trip went through
            client_id: Client application that started the round trip
            user_id: Canonical user id, required for providers that issue
                     a redirect token

        Returns:
            The client's redirect URL with ``provider`` and, for token
            issuing providers, ``token`` query parameters

        Raises:
            MissingRedirectTargetError: If the client has no redirect URL
            UnknownProviderError: If the provider is not supported
            SessionInvalidError: If a token is due but there is no user
        """
        ...

    def build_error_redirect(
        self,
        client_id: Optional[str],
        provider: Optional[str],
        error_code: str,
    ) -> str:
        """
        Build the URL that reports a failed round trip back to the client.

        Raises:
            MissingRedirectTargetError: If the client has no redirect URL
        """
        ...

    async def issue_long_lived_credential(self, id_token: str) -> LongLivedCredential:
        """
        Exchange a valid identity assertion for a 30-day bearer credential.

        Raises:
            InvalidAssertionError: If the assertion does not verify
        """
        ...

    def get_public_verification_material(self) -> str:
        """Return the PEM public key that verifies issued credentials."""
        ...
