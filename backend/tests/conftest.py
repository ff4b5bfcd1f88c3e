"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import time
from typing import Any, Callable, Optional

import jwt  # PyJWT
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from api.dependencies import reset_container
from modules.records.models import StoredToken
from shared.config import Settings, get_settings


TEST_CLIENT_ID = "test-app"
TEST_REDIRECT_URL = "https://app.example.com/auth/done"
TEST_ASSERTION_AUDIENCE = "test-app-project"


def generate_keypair() -> tuple[str, str]:
    """Generate an RSA keypair as (private PEM, public PEM)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def signing_keys() -> tuple[str, str]:
    """Keypair the service signs its credentials with."""
    return generate_keypair()


@pytest.fixture(scope="session")
def assertion_keys() -> tuple[str, str]:
    """Keypair of the identity platform that issues assertions."""
    return generate_keypair()


@pytest.fixture
def test_settings(signing_keys, assertion_keys) -> Settings:
    """Settings for an in-memory deployment with one client application."""
    private_pem, public_pem = signing_keys
    return Settings(
        _env_file=None,
        record_store="memory",
        session_https_only=False,
        valid_clients={TEST_CLIENT_ID: TEST_REDIRECT_URL},
        handshake_urls={
            "steam": "https://handshake.example.com/steam",
            "discord": "https://handshake.example.com/discord",
        },
        jwt_private_key=private_pem,
        jwt_public_key=public_pem,
        jwt_issuer="auth-bridge-test",
        assertion_public_key=assertion_keys[1],
        assertion_audiences=[TEST_ASSERTION_AUDIENCE],
        discord_client_id="discord-client",
        discord_client_secret="discord-secret",
        discord_token_url="https://discord.test/api/oauth2/token",
    )


@pytest.fixture
def make_assertion(assertion_keys) -> Callable[..., str]:
    """Factory for identity assertions signed by the identity platform."""

    def _make(
        uid: str = "u1",
        audience: str = TEST_ASSERTION_AUDIENCE,
        expired: bool = False,
        private_key: Optional[str] = None,
        **extra_claims: Any,
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": uid,
            "aud": audience,
            "iat": now - 7200 if expired else now,
            "exp": now - 3600 if expired else now + 3600,
            **extra_claims,
        }
        return jwt.encode(payload, private_key or assertion_keys[0], algorithm="RS256")

    return _make


def steam_payload(
    steamid: str = "76561198",
    display_name: str = "Ana",
    avatar: str = "http://x/a.png",
) -> dict[str, Any]:
    """A verified Steam profile as produced by the OpenID handshake."""
    return {
        "provider": "steam",
        "id": steamid,
        "displayName": display_name,
        "photos": [
            {"value": "http://x/small.png"},
            {"value": "http://x/medium.png"},
            {"value": avatar},
        ],
        "_json": {
            "steamid": steamid,
            "personaname": display_name,
            "avatarfull": avatar,
            "profileurl": f"https://steamcommunity.com/profiles/{steamid}/",
        },
    }


def discord_payload(
    discord_id: str = "80351110224678912",
    username: str = "nelly",
    avatar: Optional[str] = "8342729096ea3675442027381ff50dfe",
) -> dict[str, Any]:
    """A verified Discord user object as produced by the OAuth2 handshake."""
    return {
        "id": discord_id,
        "username": username,
        "discriminator": "0",
        "avatar": avatar,
        "accessToken": "handshake-access-token",
        "refreshToken": "handshake-refresh-token",
    }


class StubTokenClient:
    """Token client that never touches the network."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: list[str] = []

    async def exchange_refresh_token(self, refresh_token: str) -> StoredToken:
        self.calls.append(refresh_token)
        if self.error is not None:
            raise self.error
        return StoredToken(
            access_token=f"access-{len(self.calls)}",
            refresh_token=refresh_token,
            token_type="Bearer",
            scope="identify",
            expires_at=1_700_000_000_000 + len(self.calls),
        )


@pytest.fixture
def stub_token_client() -> StubTokenClient:
    return StubTokenClient()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and the service container around each test."""
    get_settings.cache_clear()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_container()
