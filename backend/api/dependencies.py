"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations from one Settings
value.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.credentials.service import CredentialService
    from modules.identity.interfaces import IIdentityService
    from modules.linking.interfaces import ILinkingService
    from modules.records.interfaces import IRecordStore
    from modules.tokens.interfaces import ITokenClient
    from providers import ProviderKind
    from .services.auth_flow import AuthFlowService


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._records: "IRecordStore | None" = None
        self._token_clients: "dict[ProviderKind, ITokenClient] | None" = None
        self._identity: "IIdentityService | None" = None
        self._linking: "ILinkingService | None" = None
        self._credentials: "CredentialService | None" = None
        self._auth_flow: "AuthFlowService | None" = None

    @property
    def records(self) -> "IRecordStore":
        """Get the record store."""
        if self._records is None:
            if self.settings.record_store == "memory":
                from modules.records.memory import InMemoryRecordStore
                self._records = InMemoryRecordStore()
            else:
                from modules.records.repository import SupabaseRecordStore
                from shared.database import get_supabase_client
                self._records = SupabaseRecordStore(get_supabase_client(self.settings))
        return self._records

    @property
    def token_clients(self) -> "dict[ProviderKind, ITokenClient]":
        """Get the token client for each secondary provider."""
        if self._token_clients is None:
            from modules.tokens.client import OAuthTokenClient
            from providers import ProviderKind
            self._token_clients = {
                ProviderKind.DISCORD: OAuthTokenClient(
                    provider=ProviderKind.DISCORD.value,
                    token_url=self.settings.discord_token_url,
                    client_id=self.settings.discord_client_id,
                    client_secret=self.settings.discord_client_secret,
                    timeout=self.settings.provider_http_timeout,
                ),
            }
        return self._token_clients

    @property
    def identity(self) -> "IIdentityService":
        """Get the identity service instance."""
        if self._identity is None:
            from modules.identity.service import IdentityService
            self._identity = IdentityService(self.records)
        return self._identity

    @property
    def linking(self) -> "ILinkingService":
        """Get the linking service instance."""
        if self._linking is None:
            from modules.linking.service import LinkingService
            self._linking = LinkingService(self.records, self.token_clients)
        return self._linking

    @property
    def credentials(self) -> "CredentialService":
        """Get the credential service instance."""
        if self._credentials is None:
            from modules.credentials.assertions import JWTAssertionVerifier
            from modules.credentials.service import CredentialService
            self._credentials = CredentialService(
                self.settings,
                JWTAssertionVerifier.from_settings(self.settings),
            )
        return self._credentials

    @property
    def auth_flow(self) -> "AuthFlowService":
        """Get the login / link flow service."""
        if self._auth_flow is None:
            from .services.auth_flow import AuthFlowService
            self._auth_flow = AuthFlowService(self.identity, self.linking, self.credentials)
        return self._auth_flow

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._records = None
        self._token_clients = None
        self._identity = None
        self._linking = None
        self._credentials = None
        self._auth_flow = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def init_container(settings: Settings) -> ServiceContainer:
    """Replace the singleton container with one built from ``settings``."""
    global _container
    _container = ServiceContainer(settings)
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_credential_service() -> "CredentialService":
    """FastAPI dependency for the credential service."""
    return get_container().credentials


def get_auth_flow_service() -> "AuthFlowService":
    """FastAPI dependency for the login / link flow service."""
    return get_container().auth_flow
