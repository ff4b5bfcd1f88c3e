"""Tests for the in-memory record store."""

import pytest

from modules.records.interfaces import IRecordStore
from modules.records.memory import InMemoryRecordStore
from modules.records.models import ProfileUpdate, StoredToken, UserCreate, UserUpdate
from providers import ProviderKind


def make_token(access_token: str = "access", expires_at: int = 1000) -> StoredToken:
    return StoredToken(
        access_token=access_token,
        refresh_token="refresh",
        token_type="Bearer",
        scope="identify",
        expires_at=expires_at,
    )


class TestInMemoryRecordStore:
    @pytest.fixture
    def store(self):
        return InMemoryRecordStore()

    def test_implements_interface(self, store):
        assert isinstance(store, IRecordStore)

    @pytest.mark.asyncio
    async def test_create_and_find_user(self, store):
        """Created users should be readable by id."""
        user = await store.create_user(UserCreate(email="1@steamcommunity.com", display_name="Ana"))

        found = await store.find_user_by_id(user.id)
        assert found == user
        assert found.email_verified is False
        assert found.disabled is False

    @pytest.mark.asyncio
    async def test_create_user_with_id(self, store):
        user = await store.create_user(UserCreate(id="fixed-id", email="1@steamcommunity.com"))
        assert user.id == "fixed-id"

    @pytest.mark.asyncio
    async def test_find_missing_user_returns_none(self, store):
        assert await store.find_user_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_update_user_partial(self, store):
        """Unset fields should be left alone."""
        user = await store.create_user(
            UserCreate(email="1@steamcommunity.com", display_name="Ana", photo_url="http://x/a.png")
        )

        updated = await store.update_user(user.id, UserUpdate(display_name="Ana2"))

        assert updated.display_name == "Ana2"
        assert updated.photo_url == "http://x/a.png"
        assert updated.id == user.id

    @pytest.mark.asyncio
    async def test_update_missing_user_returns_none(self, store):
        assert await store.update_user("nope", UserUpdate(display_name="x")) is None
        assert store.write_log == []

    @pytest.mark.asyncio
    async def test_get_or_create_profile_is_idempotent(self, store):
        first = await store.get_or_create_profile("u1")
        second = await store.get_or_create_profile("u1")

        assert first == second
        assert store.write_log == [("create_profile", "u1")]

    @pytest.mark.asyncio
    async def test_update_profile_merges_provider_blobs(self, store):
        """Updating one provider blob should keep the others."""
        await store.update_profile("u1", ProfileUpdate(providers={"steam": {"steamid": "1"}}))
        profile = await store.update_profile("u1", ProfileUpdate(providers={"discord": {"id": "2"}}))

        assert profile.providers == {"steam": {"steamid": "1"}, "discord": {"id": "2"}}

    @pytest.mark.asyncio
    async def test_update_profile_replaces_blob_for_same_kind(self, store):
        await store.update_profile("u1", ProfileUpdate(providers={"steam": {"steamid": "1", "a": 1}}))
        profile = await store.update_profile("u1", ProfileUpdate(providers={"steam": {"steamid": "1"}}))

        assert profile.providers["steam"] == {"steamid": "1"}

    @pytest.mark.asyncio
    async def test_find_profile_by_provider_external_id(self, store):
        await store.update_profile("u1", ProfileUpdate(providers={"steam": {"steamid": "76561198"}}))

        found = await store.find_profile_by_provider_external_id(ProviderKind.STEAM, "76561198")
        missing = await store.find_profile_by_provider_external_id(ProviderKind.STEAM, "other")
        other_kind = await store.find_profile_by_provider_external_id(ProviderKind.DISCORD, "76561198")

        assert found.user_id == "u1"
        assert missing is None
        assert other_kind is None

    @pytest.mark.asyncio
    async def test_find_profile_by_external_id_earliest_wins(self, store):
        """With duplicate index entries the earliest-created profile wins."""
        await store.update_profile("u-old", ProfileUpdate(providers={"steam": {"steamid": "7"}}))
        await store.update_profile("u-new", ProfileUpdate(providers={"steam": {"steamid": "7"}}))

        found = await store.find_profile_by_provider_external_id(ProviderKind.STEAM, "7")

        assert found.user_id == "u-old"

    @pytest.mark.asyncio
    async def test_put_token_replaces(self, store):
        """A second put should replace the stored token for that provider."""
        await store.put_token("u1", ProviderKind.DISCORD, make_token("first"))
        await store.put_token("u1", ProviderKind.DISCORD, make_token("second"))

        token = await store.get_token("u1", ProviderKind.DISCORD)
        assert token.access_token == "second"
        assert store.token_count("u1") == 1

    @pytest.mark.asyncio
    async def test_get_missing_token_returns_none(self, store):
        assert await store.get_token("u1", ProviderKind.DISCORD) is None

