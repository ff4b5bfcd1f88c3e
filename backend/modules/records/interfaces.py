"""
Record store interface.

The store is an external keyed record store. Every operation is keyed and
last-write-wins, and a missing record is reported as None rather than an
error.
"""

from typing import Optional, Protocol, runtime_checkable

from providers import ProviderKind

from .models import (
    CanonicalUser,
    ProfileRecord,
    ProfileUpdate,
    StoredToken,
    UserCreate,
    UserUpdate,
)


@runtime_checkable
class IRecordStore(Protocol):
    """Interface for user, profile and token persistence."""

    async def find_user_by_id(self, user_id: str) -> Optional[CanonicalUser]:
        """Get a canonical user by id, or None."""
        ...

    async def find_profile(self, user_id: str) -> Optional[ProfileRecord]:
        """Get a user's profile record, or None."""
        ...

    async def find_profile_by_provider_external_id(
        self,
        kind: ProviderKind,
        external_id: str,
    ) -> Optional[ProfileRecord]:
        """
        Find the profile whose provider blob for ``kind`` carries
        ``external_id``.

        When several profiles match, the earliest-created one is returned.
        """
        ...

    async def create_user(self, fields: UserCreate) -> CanonicalUser:
        """Create a canonical user."""
        ...

    async def update_user(self, user_id: str, fields: UserUpdate) -> Optional[CanonicalUser]:
        """Apply a partial update to a canonical user and return it, or None
        if the user does not exist."""
        ...

    async def get_or_create_profile(self, user_id: str) -> ProfileRecord:
        """Get a user's profile record, creating an empty one if needed."""
        ...

    async def update_profile(self, user_id: str, fields: ProfileUpdate) -> ProfileRecord:
        """Apply a partial update to a profile record, creating the record if
        it does not exist yet, and return it."""
        ...

    async def put_token(self, user_id: str, kind: ProviderKind, token: StoredToken) -> None:
        """Store (replace) the token for a user and provider."""
        ...

    async def get_token(self, user_id: str, kind: ProviderKind) -> Optional[StoredToken]:
        """Get the stored token for a user and provider, or None."""
        ...
