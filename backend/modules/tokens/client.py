"""
OAuth2 token client.

Performs the refresh-token grant against a provider's token endpoint and
normalizes the response into a StoredToken.
"""

import logging
import time
from typing import Any, Callable, Optional

import httpx

from modules.records.models import StoredToken

from .exceptions import ProviderUnavailableError, TokenExchangeError
from .interfaces import ITokenClient

logger = logging.getLogger(__name__)


class OAuthTokenClient(ITokenClient):
    """
    Refresh-token client for an OAuth2 provider.

    ``expires_in`` in the token response is a lifetime in seconds (RFC 6749
    section 5.1); it is converted to an absolute epoch-millisecond expiry.
    """

    def __init__(
        self,
        provider: str,
        token_url: str,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the token client.

        Args:
            provider: Provider name, used in errors and logs
            token_url: The provider's OAuth2 token endpoint
            client_id: OAuth2 client id
            client_secret: OAuth2 client secret
            timeout: Request timeout in seconds
            http_client: Shared client to send requests with. If None, a
                         client is opened for each exchange.
            clock: Returns the current time in epoch seconds
        """
        self._provider = provider
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._http_client = http_client
        self._clock = clock

    async def exchange_refresh_token(self, refresh_token: str) -> StoredToken:
        """Exchange a refresh token for an access token."""
        if not refresh_token:
            raise TokenExchangeError(self._provider, "refresh token missing")

        form = {
            "refresh_token": refresh_token,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "refresh_token",
        }

        response = await self._post(form)

        if response.is_error:
            logger.warning(
                f"{self._provider} token exchange rejected with status {response.status_code}"
            )
            raise TokenExchangeError(
                self._provider,
                f"token endpoint answered {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            raise TokenExchangeError(self._provider, "response body is not JSON")

        return self._normalize(body, refresh_token)

    async def _post(self, form: dict[str, str]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        try:
            if self._http_client is not None:
                return await self._http_client.post(
                    self._token_url, data=form, headers=headers, timeout=self._timeout
                )
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.post(self._token_url, data=form, headers=headers)
        except httpx.TimeoutException:
            raise ProviderUnavailableError(self._provider, "request timed out")
        except httpx.TransportError as e:
            raise ProviderUnavailableError(self._provider, str(e) or e.__class__.__name__)

    def _normalize(self, body: Any, refresh_token: str) -> StoredToken:
        """Turn a token response body into a StoredToken."""
        if not isinstance(body, dict):
            raise TokenExchangeError(self._provider, "response body is not an object")

        access_token = body.get("access_token")
        expires_in = body.get("expires_in")
        if not access_token:
            raise TokenExchangeError(self._provider, "response has no access_token")
        try:
            expires_in_seconds = int(expires_in)
        except (TypeError, ValueError):
            raise TokenExchangeError(self._provider, "response has no valid expires_in")

        now_ms = int(self._clock() * 1000)
        return StoredToken(
            access_token=access_token,
            # Providers that do not rotate refresh tokens omit the field
            refresh_token=body.get("refresh_token") or refresh_token,
            token_type=body.get("token_type") or "Bearer",
            scope=body.get("scope") or "",
            expires_at=now_ms + expires_in_seconds * 1000,
        )
