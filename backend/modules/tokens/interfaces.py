"""
Token module interface.

The linking flow depends on ITokenClient rather than on the HTTP client,
so tests can hand it a stub that never touches the network.
"""

from typing import Protocol, runtime_checkable

from modules.records.models import StoredToken


@runtime_checkable
class ITokenClient(Protocol):
    """Interface for OAuth2 refresh-token exchange."""

    async def exchange_refresh_token(self, refresh_token: str) -> StoredToken:
        """
        Exchange a refresh token for a fresh access token.

        Args:
            refresh_token: Refresh token issued by the provider

        Returns:
            StoredToken with an absolute expiry in epoch milliseconds

        Raises:
            ProviderUnavailableError: On network failure or timeout
            TokenExchangeError: On a rejected exchange or malformed response
        """
        ...
