"""
Linking service implementation.

Sequences the secondary-provider linking flow: session checks, the
conflict rule, then the profile write and the token exchange side by side.
"""

import asyncio
import logging
from typing import Optional

from modules.records.interfaces import IRecordStore
from modules.records.models import ProfileUpdate
from modules.tokens.interfaces import ITokenClient
from providers import (
    IdentityProvider,
    InvalidProfileError,
    ProviderKind,
    ProviderProfile,
    UnknownProviderError,
    get_provider,
)

from .exceptions import AlreadyLinkedError, SessionInvalidError
from .interfaces import ILinkingService

logger = logging.getLogger(__name__)


class LinkingService(ILinkingService):
    """
    Links secondary-provider accounts to canonical users.

    There is no locking: re-running a link with the same external id never
    conflicts, so a partially applied link is fixed by retrying it.
    """

    def __init__(
        self,
        store: IRecordStore,
        token_clients: dict[ProviderKind, ITokenClient],
    ):
        """
        Initialize the linking service.

        Args:
            store: Record store holding users, profiles and tokens
            token_clients: Token client for each secondary provider
        """
        self._store = store
        self._token_clients = token_clients

    async def link_secondary_provider(
        self,
        session_user_id: Optional[str],
        kind: ProviderKind,
        profile: ProviderProfile,
        refresh_token: str,
    ) -> None:
        provider = get_provider(kind)
        if provider.is_primary:
            raise UnknownProviderError(provider.kind.value, "cannot be linked to a user")

        token_client = self._token_clients.get(provider.kind)
        if token_client is None:
            raise UnknownProviderError(provider.kind.value, "has no token client configured")

        if not session_user_id:
            raise SessionInvalidError("Invalid session: user id missing")

        user = await self._store.find_user_by_id(session_user_id)
        if user is None:
            raise SessionInvalidError(
                f"Invalid session: unknown user {session_user_id}", user_id=session_user_id
            )

        record = await self._store.find_profile(session_user_id)
        if record is None:
            raise SessionInvalidError(
                f"User {session_user_id} has no profile", user_id=session_user_id
            )

        if not profile.external_id:
            raise InvalidProfileError(provider.kind.value)

        if provider.conflicts_with(record.providers.get(provider.kind.value), profile):
            logger.info(
                f"Refusing to link {provider.kind.value} account {profile.external_id} "
                f"to user {session_user_id}: a different account is already linked"
            )
            raise AlreadyLinkedError(provider.kind.value, user_id=session_user_id)

        results = await asyncio.gather(
            self._store_profile(session_user_id, provider, profile),
            self._store_token(session_user_id, provider, token_client, refresh_token),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            logger.warning(
                f"Linking {provider.kind.value} to user {session_user_id} partially failed: "
                f"{failures[0]!r}"
            )
            raise failures[0]

        logger.info(
            f"Linked {provider.kind.value} account {profile.external_id} to user {session_user_id}"
        )

    async def _store_profile(
        self,
        user_id: str,
        provider: IdentityProvider,
        profile: ProviderProfile,
    ) -> None:
        await self._store.update_profile(
            user_id, ProfileUpdate(providers={provider.kind.value: profile.raw})
        )

    async def _store_token(
        self,
        user_id: str,
        provider: IdentityProvider,
        token_client: ITokenClient,
        refresh_token: str,
    ) -> None:
        token = await token_client.exchange_refresh_token(refresh_token)
        await self._store.put_token(user_id, provider.kind, token)
