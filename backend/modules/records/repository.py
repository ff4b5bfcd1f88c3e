"""
Supabase-backed record store.

Tables:
- users: canonical users
- profiles: one row per user, provider blobs in the ``providers`` jsonb column
- provider_tokens: OAuth2 tokens, unique on (user_id, provider)
"""

from datetime import datetime, timezone
from typing import Any, Optional

from providers import ProviderKind, get_provider
from shared.repository import BaseRepository

from .interfaces import IRecordStore
from .models import (
    CanonicalUser,
    ProfileRecord,
    ProfileUpdate,
    StoredToken,
    UserCreate,
    UserUpdate,
)


class SupabaseRecordStore(BaseRepository[CanonicalUser], IRecordStore):
    """
    Record store on top of Supabase (PostgREST).

    Every query runs through ``_execute`` so the synchronous Supabase
    client never blocks the event loop. Provider blobs are merged inside
    Postgres by the ``merge_profile`` function, so concurrent writes for
    different provider kinds never overwrite each other.
    """

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def find_user_by_id(self, user_id: str) -> Optional[CanonicalUser]:
        result = await self._execute(self._db.table("users").select("*").eq("id", user_id))
        row = self._first(result)
        return self._map_to_user(row) if row else None

    async def create_user(self, fields: UserCreate) -> CanonicalUser:
        data = fields.model_dump(exclude_none=True)
        result = await self._execute(self._db.table("users").insert(data))
        return self._map_to_user(result.data[0])

    async def update_user(self, user_id: str, fields: UserUpdate) -> Optional[CanonicalUser]:
        data = fields.model_dump(exclude_none=True)
        if not data:
            return await self.find_user_by_id(user_id)
        result = await self._execute(self._db.table("users").update(data).eq("id", user_id))
        row = self._first(result)
        return self._map_to_user(row) if row else None

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    async def find_profile(self, user_id: str) -> Optional[ProfileRecord]:
        result = await self._execute(
            self._db.table("profiles").select("*").eq("user_id", user_id)
        )
        row = self._first(result)
        return self._map_to_profile(row) if row else None

    async def find_profile_by_provider_external_id(
        self,
        kind: ProviderKind,
        external_id: str,
    ) -> Optional[ProfileRecord]:
        field = get_provider(kind).external_id_field
        result = await self._execute(
            self._db.table("profiles")
            .select("*")
            .eq(f"providers->{kind.value}->>{field}", external_id)
            .order("created_at")
            .limit(1)
        )
        row = self._first(result)
        return self._map_to_profile(row) if row else None

    async def get_or_create_profile(self, user_id: str) -> ProfileRecord:
        profile = await self.find_profile(user_id)
        if profile is not None:
            return profile

        await self._execute(
            self._db.table("profiles").upsert(
                {"user_id": user_id, "providers": {}},
                on_conflict="user_id",
                ignore_duplicates=True,
            )
        )
        profile = await self.find_profile(user_id)
        if profile is None:
            raise RuntimeError(f"Profile for user {user_id} could not be created")
        return profile

    async def update_profile(self, user_id: str, fields: ProfileUpdate) -> ProfileRecord:
        # Upserts the row and merges providers with jsonb || in one statement
        result = await self._execute(
            self._db.rpc(
                "merge_profile",
                {
                    "p_user_id": user_id,
                    "p_display_name": fields.display_name,
                    "p_photo_url": fields.photo_url,
                    "p_providers": fields.providers,
                },
            )
        )
        row = self._first(result)
        if row is None:
            raise RuntimeError(f"Profile for user {user_id} could not be written")
        return self._map_to_profile(row)

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    async def put_token(self, user_id: str, kind: ProviderKind, token: StoredToken) -> None:
        data = {
            "user_id": user_id,
            "provider": kind.value,
            **token.model_dump(),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        await self._execute(
            self._db.table("provider_tokens").upsert(data, on_conflict="user_id,provider")
        )

    async def get_token(self, user_id: str, kind: ProviderKind) -> Optional[StoredToken]:
        result = await self._execute(
            self._db.table("provider_tokens")
            .select("*")
            .eq("user_id", user_id)
            .eq("provider", kind.value)
        )
        row = self._first(result)
        if not row:
            return None
        return StoredToken(
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            token_type=row.get("token_type") or "Bearer",
            scope=row.get("scope") or "",
            expires_at=int(row["expires_at"]),
        )

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_user(self, row: dict[str, Any]) -> CanonicalUser:
        return CanonicalUser(
            id=str(row["id"]),
            email=row["email"],
            email_verified=bool(row.get("email_verified", False)),
            display_name=row.get("display_name"),
            photo_url=row.get("photo_url"),
            disabled=bool(row.get("disabled", False)),
            created_at=self._parse_timestamp(row["created_at"]),
        )

    def _map_to_profile(self, row: dict[str, Any]) -> ProfileRecord:
        created_at = self._parse_timestamp(row["created_at"])
        return ProfileRecord(
            user_id=str(row["user_id"]),
            display_name=row.get("display_name"),
            photo_url=row.get("photo_url"),
            providers=row.get("providers") or {},
            created_at=created_at,
            updated_at=self._parse_timestamp(row.get("updated_at") or created_at),
        )
