"""
Identity service implementation.

Reconciles verified primary-provider profiles against canonical users.
"""

import logging

from modules.records.interfaces import IRecordStore
from modules.records.models import CanonicalUser, ProfileUpdate, UserCreate, UserUpdate
from providers import (
    IdentityProvider,
    InvalidProfileError,
    ProviderKind,
    ProviderProfile,
    UnknownProviderError,
    get_provider,
)

from .interfaces import IIdentityService
from .models import LinkedUser

logger = logging.getLogger(__name__)


class IdentityService(IIdentityService):
    """
    Find-or-create reconciliation on top of the record store.

    Display data follows the provider: every login overwrites the user's
    display name and avatar with the latest values.
    """

    def __init__(self, store: IRecordStore):
        self._store = store

    async def reconcile(self, kind: ProviderKind, profile: ProviderProfile) -> LinkedUser:
        provider = get_provider(kind)
        if not provider.is_primary:
            raise UnknownProviderError(
                provider.kind.value, "cannot establish a canonical identity"
            )
        if not profile.external_id:
            raise InvalidProfileError(provider.kind.value)

        existing = await self._store.find_profile_by_provider_external_id(
            provider.kind, profile.external_id
        )

        if existing is None:
            user = await self._create_user(provider, profile)
            await self._store.get_or_create_profile(user.id)
        else:
            user = await self._refresh_user(provider, profile, existing.user_id)

        record = await self._store.update_profile(
            user.id,
            ProfileUpdate(
                display_name=profile.display_name,
                photo_url=profile.photo_url,
                providers={provider.kind.value: profile.raw},
            ),
        )
        return LinkedUser(user=user, profile=record)

    async def _create_user(
        self,
        provider: IdentityProvider,
        profile: ProviderProfile,
        user_id: str | None = None,
    ) -> CanonicalUser:
        user = await self._store.create_user(
            UserCreate(
                id=user_id,
                email=provider.placeholder_email(profile.external_id),
                email_verified=False,
                display_name=profile.display_name,
                photo_url=profile.photo_url,
                disabled=False,
            )
        )
        logger.info(f"Created user {user.id} for {provider.kind.value} account {profile.external_id}")
        return user

    async def _refresh_user(
        self,
        provider: IdentityProvider,
        profile: ProviderProfile,
        user_id: str,
    ) -> CanonicalUser:
        user = await self._store.update_user(
            user_id,
            UserUpdate(display_name=profile.display_name, photo_url=profile.photo_url),
        )
        if user is None:
            # Profile outlived its user; recreate under the same id so the
            # external id keeps resolving to a single user.
            logger.warning(
                f"Profile {user_id} for {provider.kind.value} account "
                f"{profile.external_id} has no user, recreating it"
            )
            user = await self._create_user(provider, profile, user_id=user_id)
        return user
