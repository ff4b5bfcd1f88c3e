"""Tests for the secondary-provider linking service."""

import asyncio

import pytest

from modules.identity.service import IdentityService
from modules.linking.exceptions import AlreadyLinkedError, SessionInvalidError
from modules.linking.interfaces import ILinkingService
from modules.linking.service import LinkingService
from modules.records.memory import InMemoryRecordStore
from modules.records.models import UserCreate
from modules.tokens.exceptions import ProviderUnavailableError
from providers import (
    InvalidProfileError,
    ProviderKind,
    ProviderProfile,
    UnknownProviderError,
    get_provider,
)
from tests.conftest import StubTokenClient, discord_payload, steam_payload


def discord_profile(**kwargs) -> ProviderProfile:
    return get_provider(ProviderKind.DISCORD).parse_profile(discord_payload(**kwargs))


class FailingProfileStore(InMemoryRecordStore):
    """Record store whose profile writes fail."""

    async def update_profile(self, user_id, fields):
        raise RuntimeError("profile write failed")


class WaitingProfileStore(InMemoryRecordStore):
    """Record store whose profile write waits until the token exchange has started."""

    def __init__(self, exchange_started: asyncio.Event):
        super().__init__()
        self.exchange_started = exchange_started

    async def update_profile(self, user_id, fields):
        await asyncio.wait_for(self.exchange_started.wait(), timeout=1)
        return await super().update_profile(user_id, fields)


class SignallingTokenClient(StubTokenClient):
    def __init__(self, exchange_started: asyncio.Event):
        super().__init__()
        self.exchange_started = exchange_started

    async def exchange_refresh_token(self, refresh_token):
        self.exchange_started.set()
        return await super().exchange_refresh_token(refresh_token)


class TestLinkingService:
    @pytest.fixture
    def store(self):
        return InMemoryRecordStore()

    @pytest.fixture
    def service(self, store, stub_token_client):
        return LinkingService(store, {ProviderKind.DISCORD: stub_token_client})

    async def _login(self, store) -> str:
        steam = get_provider(ProviderKind.STEAM).parse_profile(steam_payload())
        linked = await IdentityService(store).reconcile(ProviderKind.STEAM, steam)
        store.write_log.clear()
        return linked.id

    def test_implements_interface(self, service):
        assert isinstance(service, ILinkingService)

    @pytest.mark.asyncio
    async def test_links_profile_and_stores_token(self, service, store, stub_token_client):
        """A successful link should write the blob and the exchanged token."""
        user_id = await self._login(store)

        await service.link_secondary_provider(
            user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
        )

        profile = await store.find_profile(user_id)
        assert profile.providers["discord"]["id"] == "80351110224678912"
        assert "steam" in profile.providers
        assert "refreshToken" not in profile.providers["discord"]
        token = await store.get_token(user_id, ProviderKind.DISCORD)
        assert token.access_token == "access-1"
        assert token.refresh_token == "refresh-1"
        assert stub_token_client.calls == ["refresh-1"]

    @pytest.mark.asyncio
    async def test_relinking_same_account_is_idempotent(self, service, store):
        """Linking the same account twice leaves one token, the newest."""
        user_id = await self._login(store)

        await service.link_secondary_provider(
            user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
        )
        await service.link_secondary_provider(
            user_id, ProviderKind.DISCORD, discord_profile(username="nelly2"), "refresh-2"
        )

        assert store.token_count(user_id) == 1
        token = await store.get_token(user_id, ProviderKind.DISCORD)
        assert token.refresh_token == "refresh-2"
        profile = await store.find_profile(user_id)
        assert profile.providers["discord"]["username"] == "nelly2"

    @pytest.mark.asyncio
    async def test_different_account_conflicts_without_writes(
        self, service, store, stub_token_client
    ):
        """A second, different Discord account is refused before any write."""
        user_id = await self._login(store)
        await service.link_secondary_provider(
            user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
        )
        store.write_log.clear()
        stub_token_client.calls.clear()

        with pytest.raises(AlreadyLinkedError) as exc_info:
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(discord_id="999"), "refresh-2"
            )

        assert exc_info.value.code == "ALREADY_LINKED"
        assert exc_info.value.message == "This discord account is linked to a different user"
        assert store.write_log == []
        assert stub_token_client.calls == []
        profile = await store.find_profile(user_id)
        assert profile.providers["discord"]["id"] == "80351110224678912"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("session_user_id", [None, ""])
    async def test_missing_session_user(self, service, store, session_user_id):
        with pytest.raises(SessionInvalidError):
            await service.link_secondary_provider(
                session_user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )
        assert store.write_log == []

    @pytest.mark.asyncio
    async def test_unknown_session_user(self, service, store):
        with pytest.raises(SessionInvalidError) as exc_info:
            await service.link_secondary_provider(
                "ghost", ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )
        assert exc_info.value.code == "SESSION_INVALID"
        assert store.write_log == []

    @pytest.mark.asyncio
    async def test_user_without_profile(self, service, store):
        user_id = await self._login(store)
        del store._profiles[user_id]

        with pytest.raises(SessionInvalidError):
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )

    @pytest.mark.asyncio
    async def test_empty_external_id(self, service, store):
        user_id = await self._login(store)
        profile = ProviderProfile(kind=ProviderKind.DISCORD, external_id="")

        with pytest.raises(InvalidProfileError):
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, profile, "refresh-1"
            )
        assert store.write_log == []

    @pytest.mark.asyncio
    async def test_primary_provider_cannot_be_linked(self, service, store):
        user_id = await self._login(store)
        steam = get_provider(ProviderKind.STEAM).parse_profile(steam_payload())

        with pytest.raises(UnknownProviderError):
            await service.link_secondary_provider(user_id, ProviderKind.STEAM, steam, "r")

    @pytest.mark.asyncio
    async def test_missing_token_client(self, store):
        user_id = await self._login(store)
        service = LinkingService(store, {})

        with pytest.raises(UnknownProviderError):
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )

    @pytest.mark.asyncio
    async def test_token_failure_keeps_profile_write(self, store):
        """The profile write lands even when the exchange fails; the error surfaces."""
        user_id = await self._login(store)
        failing = StubTokenClient(error=ProviderUnavailableError("discord", "request timed out"))
        service = LinkingService(store, {ProviderKind.DISCORD: failing})

        with pytest.raises(ProviderUnavailableError):
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )

        profile = await store.find_profile(user_id)
        assert profile.providers["discord"]["id"] == "80351110224678912"
        assert await store.get_token(user_id, ProviderKind.DISCORD) is None

    @pytest.mark.asyncio
    async def test_profile_failure_keeps_token_write(self, stub_token_client):
        """The token lands even when the profile write fails; the error surfaces."""
        store = FailingProfileStore()
        user_id = await self._seed_user(store)
        service = LinkingService(store, {ProviderKind.DISCORD: stub_token_client})

        with pytest.raises(RuntimeError, match="profile write failed"):
            await service.link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )

        assert await store.get_token(user_id, ProviderKind.DISCORD) is not None

    @pytest.mark.asyncio
    async def test_retry_after_partial_failure_completes(self, store, stub_token_client):
        """Retrying a partially applied link with the same account succeeds."""
        user_id = await self._login(store)
        failing = StubTokenClient(error=ProviderUnavailableError("discord", "request timed out"))

        with pytest.raises(ProviderUnavailableError):
            await LinkingService(store, {ProviderKind.DISCORD: failing}).link_secondary_provider(
                user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
            )
        await LinkingService(
            store, {ProviderKind.DISCORD: stub_token_client}
        ).link_secondary_provider(user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1")

        assert store.token_count(user_id) == 1

    @pytest.mark.asyncio
    async def test_profile_write_and_token_exchange_overlap(self):
        """The profile write is still pending when the token exchange starts."""
        exchange_started = asyncio.Event()
        store = WaitingProfileStore(exchange_started)
        user_id = await self._seed_user(store)
        token_client = SignallingTokenClient(exchange_started)
        service = LinkingService(store, {ProviderKind.DISCORD: token_client})

        await service.link_secondary_provider(
            user_id, ProviderKind.DISCORD, discord_profile(), "refresh-1"
        )

        profile = await store.find_profile(user_id)
        assert "discord" in profile.providers
        assert token_client.calls == ["refresh-1"]
        assert await store.get_token(user_id, ProviderKind.DISCORD) is not None

    async def _seed_user(self, store: InMemoryRecordStore) -> str:
        """Seed a user and an empty profile without going through update_profile."""
        user = await store.create_user(UserCreate(email="76561198@steamcommunity.com"))
        await store.get_or_create_profile(user.id)
        return user.id
