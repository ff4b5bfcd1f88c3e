"""
In-memory record store.

Used by the test-suite and for local development (RECORD_STORE=memory).
Keeps everything in process dictionaries; nothing survives a restart.
"""

from datetime import datetime, timezone
from typing import Optional
import uuid

from providers import ProviderKind, get_provider

from .interfaces import IRecordStore
from .models import (
    CanonicalUser,
    ProfileRecord,
    ProfileUpdate,
    StoredToken,
    UserCreate,
    UserUpdate,
)


class InMemoryRecordStore(IRecordStore):
    """
    Dictionary-backed implementation of the record store.

    Every write is appended to ``write_log`` as ``(operation, user_id)``
    so callers can observe exactly which writes a flow performed.
    """

    def __init__(self):
        self._users: dict[str, CanonicalUser] = {}
        self._profiles: dict[str, ProfileRecord] = {}
        self._tokens: dict[tuple[str, ProviderKind], StoredToken] = {}
        self.write_log: list[tuple[str, str]] = []

    async def find_user_by_id(self, user_id: str) -> Optional[CanonicalUser]:
        return self._users.get(user_id)

    async def find_profile(self, user_id: str) -> Optional[ProfileRecord]:
        return self._profiles.get(user_id)

    async def find_profile_by_provider_external_id(
        self,
        kind: ProviderKind,
        external_id: str,
    ) -> Optional[ProfileRecord]:
        provider = get_provider(kind)
        matches = [
            profile
            for profile in self._profiles.values()
            if provider.external_id_of(profile.providers.get(kind.value)) == external_id
        ]
        if not matches:
            return None
        return min(matches, key=lambda profile: profile.created_at)

    async def create_user(self, fields: UserCreate) -> CanonicalUser:
        user_id = fields.id or str(uuid.uuid4())
        user = CanonicalUser(
            id=user_id,
            email=fields.email,
            email_verified=fields.email_verified,
            display_name=fields.display_name,
            photo_url=fields.photo_url,
            disabled=fields.disabled,
            created_at=datetime.now(timezone.utc),
        )
        self._users[user_id] = user
        self.write_log.append(("create_user", user_id))
        return user

    async def update_user(self, user_id: str, fields: UserUpdate) -> Optional[CanonicalUser]:
        user = self._users.get(user_id)
        if user is None:
            return None
        user = user.model_copy(update=fields.model_dump(exclude_none=True))
        self._users[user_id] = user
        self.write_log.append(("update_user", user_id))
        return user

    async def get_or_create_profile(self, user_id: str) -> ProfileRecord:
        profile = self._profiles.get(user_id)
        if profile is None:
            now = datetime.now(timezone.utc)
            profile = ProfileRecord(user_id=user_id, created_at=now, updated_at=now)
            self._profiles[user_id] = profile
            self.write_log.append(("create_profile", user_id))
        return profile

    async def update_profile(self, user_id: str, fields: ProfileUpdate) -> ProfileRecord:
        now = datetime.now(timezone.utc)
        profile = self._profiles.get(user_id) or ProfileRecord(
            user_id=user_id, created_at=now, updated_at=now
        )
        update = fields.model_dump(exclude_none=True, exclude={"providers"})
        update["providers"] = {**profile.providers, **fields.providers}
        update["updated_at"] = now
        profile = profile.model_copy(update=update)
        self._profiles[user_id] = profile
        self.write_log.append(("update_profile", user_id))
        return profile

    async def put_token(self, user_id: str, kind: ProviderKind, token: StoredToken) -> None:
        self._tokens[(user_id, kind)] = token
        self.write_log.append(("put_token", user_id))

    async def get_token(self, user_id: str, kind: ProviderKind) -> Optional[StoredToken]:
        return self._tokens.get((user_id, kind))

    def token_count(self, user_id: str) -> int:
        """Number of tokens stored for a user, across providers."""
        return sum(1 for (owner, _kind) in self._tokens if owner == user_id)
