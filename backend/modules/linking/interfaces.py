"""
Linking module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from providers import ProviderKind, ProviderProfile


@runtime_checkable
class ILinkingService(Protocol):
    """Interface for linking secondary providers to signed-in users."""

    async def link_secondary_provider(
        self,
        session_user_id: Optional[str],
        kind: ProviderKind,
        profile: ProviderProfile,
        refresh_token: str,
    ) -> None:
        """
        Link a verified secondary-provider account to the session's user.

        Stores the provider blob on the user's profile and exchanges the
        refresh token for a stored access token. Both writes are attempted;
        a failure in one does not undo the other, and calling again with
        the same inputs is safe.

        Args:
            session_user_id: Canonical user id from the session
            kind: Secondary provider that verified the profile
            profile: The verified profile
            refresh_token: Refresh token from the OAuth2 handshake

        Raises:
            SessionInvalidError: If the session user or profile is missing
            AlreadyLinkedError: If another account of this provider is linked
            InvalidProfileError: If the profile has no external id
            UnknownProviderError: If the provider is not a secondary provider
            ProviderUnavailableError: If the token endpoint is unreachable
            TokenExchangeError: If the token exchange is rejected
        """
        ...
