"""
Login and link round trips.

Glue between the session layer, the OpenID / OAuth handshake layer and the
core services. The handshake layer calls ``complete_login`` with the
verified payload (or ``fail`` when applying it raised); ``GET
/auth/callback`` then calls ``finish`` once and clears the outcome.
"""

import logging
from typing import Any, Optional

from modules.credentials.exceptions import MissingRedirectTargetError
from modules.credentials.interfaces import ICredentialService
from modules.identity.interfaces import IIdentityService
from modules.linking.exceptions import RoundTripFailedError, SessionInvalidError
from modules.linking.interfaces import ILinkingService
from providers import ProviderKind, get_provider
from shared.exceptions import BridgeError

from ..session import SessionContext

logger = logging.getLogger(__name__)


class AuthFlowService:
    """Drives a login (primary provider) or link (secondary provider)."""

    def __init__(
        self,
        identity: IIdentityService,
        linking: ILinkingService,
        credentials: ICredentialService,
    ):
        self._identity = identity
        self._linking = linking
        self._credentials = credentials

    def start(
        self,
        session: SessionContext,
        provider_name: str,
        client_id: Optional[str],
    ) -> SessionContext:
        """
        Begin a round trip for a client application.

        Any outcome of an earlier round trip is dropped.

        Returns:
            The session context to store for the round trip

        Raises:
            UnknownProviderError: If the provider is not supported
            MissingRedirectTargetError: If the client is not configured
            SessionInvalidError: If a link is started without a signed-in user
        """
        provider = get_provider(provider_name)
        self._credentials.resolve_redirect_base(client_id)

        if not provider.is_primary and not session.user_id:
            raise SessionInvalidError(
                f"Sign in before linking a {provider.kind.value} account"
            )

        return SessionContext(
            user_id=session.user_id,
            client_id=client_id,
            provider=provider.kind.value,
        )

    async def complete_login(
        self,
        session: SessionContext,
        kind: "ProviderKind | str",
        payload: dict[str, Any],
        refresh_token: Optional[str] = None,
    ) -> SessionContext:
        """
        Apply a verified provider payload handed over by the handshake layer.

        Primary providers reconcile the canonical user and sign them in;
        secondary providers are linked to the user already in the session.

        Returns:
            The updated session context, marked completed
        """
        provider = get_provider(kind)
        if session.provider and session.provider != provider.kind.value:
            raise SessionInvalidError(
                f"Invalid session: round trip started for {session.provider}, "
                f"completed by {provider.kind.value}"
            )

        profile = provider.parse_profile(payload)

        if provider.is_primary:
            user = await self._identity.reconcile(provider.kind, profile)
            user_id = user.id
        else:
            await self._linking.link_secondary_provider(
                session.user_id, provider.kind, profile, refresh_token or ""
            )
            user_id = session.user_id

        return session.model_copy(
            update={
                "user_id": user_id,
                "provider": provider.kind.value,
                "completed": True,
                "error": None,
            }
        )

    def fail(self, session: SessionContext, error: BridgeError) -> SessionContext:
        """Record a failed handshake so the callback reports it to the client."""
        logger.info(f"Round trip for {session.provider} failed: {error.code}")
        return session.model_copy(update={"completed": False, "error": error.code})

    def clear_outcome(self, session: SessionContext) -> SessionContext:
        """Drop the round trip outcome; a second ``finish`` then fails."""
        return session.model_copy(update={"completed": False, "error": None})

    async def finish(self, session: SessionContext) -> str:
        """
        Build the redirect URL that returns the user to the client.

        Raises:
            SessionInvalidError: If no handshake was completed for the round trip
            RoundTripFailedError: If the handshake failed
        """
        if not session.provider:
            raise SessionInvalidError("Invalid session: provider missing")
        if session.error:
            raise RoundTripFailedError(session.error)
        if not session.completed:
            raise SessionInvalidError("Invalid session: round trip not completed")
        return await self._credentials.issue_redirect_credential(
            session.provider, session.client_id, session.user_id
        )

    def error_redirect(self, session: SessionContext, error: BridgeError) -> Optional[str]:
        """
        Build a redirect that reports ``error`` to the client, or None when
        the client has no configured redirect URL.
        """
        try:
            return self._credentials.build_error_redirect(
                session.client_id, session.provider, error.code
            )
        except MissingRedirectTargetError:
            return None
