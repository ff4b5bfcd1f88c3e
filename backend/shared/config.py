"""
Centralized configuration for the Auth Bridge backend.

All settings are loaded from environment variables with sensible defaults.
The resulting Settings value is frozen: it is built once at startup and
handed to every component that needs it.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


FIREBASE_CUSTOM_TOKEN_AUDIENCE = (
    "https://identitytoolkit.googleapis.com/"
    "google.identity.identitytoolkit.v1.IdentityToolkit"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = "Auth Bridge"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Session cookie (one login / link round trip)
    session_secret: str = "dev-session-secret"
    session_cookie_name: str = "auth_bridge_session"
    session_max_age: int = 600  # seconds
    session_https_only: bool = True

    # Record store
    record_store: Literal["supabase", "memory"] = "supabase"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # direct Postgres URL, used by run_migrations.py

    # Client applications allowed to receive redirects: client_id -> URL
    valid_clients: dict[str, str] = {}

    # Handshake entrypoints mounted by the OpenID / OAuth layer: provider -> URL
    handshake_urls: dict[str, str] = {}

    # Signing keypair for issued credentials (PEM)
    jwt_private_key: str = ""
    jwt_public_key: str = ""
    jwt_issuer: str = "auth-bridge"
    long_lived_token_days: int = 30

    # Custom tokens handed to the client after a primary login
    custom_token_issuer: str = "auth-bridge"
    custom_token_audience: str = FIREBASE_CUSTOM_TOKEN_AUDIENCE
    custom_token_ttl_seconds: int = 3600

    # Verification of primary-provider identity assertions
    assertion_public_key: str = ""
    assertion_jwks_url: str = ""
    assertion_issuer: Optional[str] = None
    assertion_audiences: list[str] = []

    # Discord OAuth2
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_token_url: str = "https://discord.com/api/oauth2/token"
    provider_http_timeout: float = 10.0

    @field_validator("jwt_private_key", "jwt_public_key", "assertion_public_key")
    @classmethod
    def _unescape_pem(cls, value: str) -> str:
        # PEM blocks are usually passed through env vars on a single line
        return value.replace("\\n", "\n")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
