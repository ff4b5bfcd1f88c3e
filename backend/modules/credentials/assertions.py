"""
Identity assertion verification.

Assertions are RS256 JWTs issued by the primary identity platform. The
verification key is either a PEM public key or a JWKS endpoint.
"""

import asyncio
import logging
from typing import Optional, Sequence

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientError

from shared.config import Settings

from .exceptions import InvalidAssertionError
from .interfaces import IAssertionVerifier
from .models import IdentityAssertion

logger = logging.getLogger(__name__)


class JWTAssertionVerifier(IAssertionVerifier):
    """PyJWT-based verifier for identity assertions."""

    def __init__(
        self,
        public_key: Optional[str] = None,
        jwks_url: Optional[str] = None,
        issuer: Optional[str] = None,
        audiences: Optional[Sequence[str]] = None,
        algorithms: Sequence[str] = ("RS256",),
    ):
        """
        Initialize the verifier.

        Args:
            public_key: PEM public key. Takes precedence over jwks_url.
            jwks_url: JWKS endpoint to fetch signing keys from
            issuer: Required ``iss`` claim, if set
            audiences: Accepted ``aud`` values. Empty accepts any audience.
            algorithms: Accepted signing algorithms
        """
        if not public_key and not jwks_url:
            raise RuntimeError(
                "Identity assertion verification not configured. "
                "Set ASSERTION_PUBLIC_KEY or ASSERTION_JWKS_URL."
            )
        self._public_key = public_key or None
        self._jwks_client = PyJWKClient(jwks_url) if jwks_url and not public_key else None
        self._issuer = issuer
        self._audiences = list(audiences or [])
        self._algorithms = list(algorithms)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTAssertionVerifier":
        return cls(
            public_key=settings.assertion_public_key,
            jwks_url=settings.assertion_jwks_url,
            issuer=settings.assertion_issuer,
            audiences=settings.assertion_audiences,
        )

    async def verify(self, token: str) -> IdentityAssertion:
        if not token:
            raise InvalidAssertionError("Missing id token")

        try:
            key = await self._signing_key(token)
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._audiences or None,
                issuer=self._issuer,
                options={
                    "require": ["exp", "sub", "aud"],
                    "verify_aud": bool(self._audiences),
                },
            )
        except jwt.ExpiredSignatureError:
            raise InvalidAssertionError("Identity assertion has expired")
        except (jwt.InvalidTokenError, PyJWKClientError) as e:
            logger.debug(f"Identity assertion rejected: {e}")
            raise InvalidAssertionError(f"Invalid identity assertion: {e}")

        audience = claims["aud"]
        if isinstance(audience, list):
            audience = audience[0] if audience else ""
        if not audience:
            raise InvalidAssertionError("Identity assertion has no audience")

        return IdentityAssertion(uid=str(claims["sub"]), audience=str(audience), claims=claims)

    async def _signing_key(self, token: str):
        if self._public_key is not None:
            return self._public_key
        # PyJWKClient fetches keys with blocking I/O
        signing_key = await asyncio.to_thread(self._jwks_client.get_signing_key_from_jwt, token)
        return signing_key.key
