"""
Credential service implementation.

Issues the credentials a client application receives at the end of a
round trip (redirect handoff with a custom token) and the long-lived
bearer credential it can trade an identity assertion for.
"""

import logging
import time
from typing import Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import jwt

from modules.linking.exceptions import SessionInvalidError
from providers import ProviderKind, get_provider
from shared.config import Settings

from .exceptions import MissingRedirectTargetError
from .interfaces import IAssertionVerifier, ICredentialService
from .models import LongLivedCredential

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "RS256"
SECONDS_PER_DAY = 24 * 60 * 60


class CredentialService(ICredentialService):
    """
    Implementation of the credential service.

    Both the custom tokens and the long-lived credentials are RS256 JWTs
    signed with the configured private key; the matching public key is
    published for verification.
    """

    def __init__(
        self,
        settings: Settings,
        verifier: IAssertionVerifier,
        clock: Callable[[], float] = time.time,
    ):
        if not settings.jwt_private_key or not settings.jwt_public_key:
            raise RuntimeError(
                "Signing keys missing. "
                "Set JWT_PRIVATE_KEY and JWT_PUBLIC_KEY environment variables."
            )
        self._settings = settings
        self._verifier = verifier
        self._clock = clock

    def resolve_redirect_base(self, client_id: Optional[str]) -> str:
        """
        Get the configured redirect URL for a client.

        Raises:
            MissingRedirectTargetError: If the client is not configured
        """
        redirect_url = self._settings.valid_clients.get(client_id or "")
        if not redirect_url:
            raise MissingRedirectTargetError(client_id)
        return redirect_url

    async def issue_redirect_credential(
        self,
        kind: "ProviderKind | str | None",
        client_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> str:
        redirect_url = self.resolve_redirect_base(client_id)
        provider = get_provider(kind)

        query = {"provider": provider.kind.value}
        if provider.issues_redirect_token:
            if not user_id:
                raise SessionInvalidError("Invalid session: not logged in")
            query["token"] = self.issue_custom_token(user_id)
        # Providers without a redirect token have already persisted their
        # data; the client reads it through its own session.

        return _append_query(redirect_url, query)

    def build_error_redirect(
        self,
        client_id: Optional[str],
        provider: Optional[str],
        error_code: str,
    ) -> str:
        redirect_url = self.resolve_redirect_base(client_id)
        query = {"provider": provider} if provider else {}
        query["error"] = error_code
        return _append_query(redirect_url, query)

    def issue_custom_token(self, user_id: str) -> str:
        """
        Mint a one-time custom token the client exchanges for its own session.

        The claims follow the Firebase custom token format.
        """
        now = int(self._clock())
        payload = {
            "iss": self._settings.custom_token_issuer,
            "sub": self._settings.custom_token_issuer,
            "aud": self._settings.custom_token_audience,
            "iat": now,
            "exp": now + self._settings.custom_token_ttl_seconds,
            "uid": user_id,
        }
        return jwt.encode(payload, self._settings.jwt_private_key, algorithm=SIGNING_ALGORITHM)

    async def issue_long_lived_credential(self, id_token: str) -> LongLivedCredential:
        assertion = await self._verifier.verify(id_token)

        issued_at = int(self._clock())
        expires_at = issued_at + self._settings.long_lived_token_days * SECONDS_PER_DAY
        payload = {
            "uid": assertion.uid,
            "sub": assertion.uid,
            "iss": self._settings.jwt_issuer,
            "aud": assertion.audience,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._settings.jwt_private_key, algorithm=SIGNING_ALGORITHM)
        logger.info(f"Issued long-lived credential for user {assertion.uid}")
        return LongLivedCredential(token=token, expires=expires_at * 1000)

    def get_public_verification_material(self) -> str:
        return self._settings.jwt_public_key


def _append_query(url: str, params: dict[str, str]) -> str:
    """Append query parameters to a URL, keeping any it already has."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
