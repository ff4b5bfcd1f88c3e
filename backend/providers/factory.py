"""Factory functions for looking up identity providers."""

from .base import IdentityProvider, ProviderKind
from .discord import DiscordProvider
from .exceptions import UnknownProviderError
from .steam import SteamProvider


_PROVIDERS: dict[ProviderKind, IdentityProvider] = {
    ProviderKind.STEAM: SteamProvider(),
    ProviderKind.DISCORD: DiscordProvider(),
}

_missing = set(ProviderKind) - set(_PROVIDERS)
if _missing:
    raise RuntimeError(
        f"No identity provider registered for: {sorted(k.value for k in _missing)}"
    )


def parse_provider_kind(value: "str | ProviderKind | None") -> ProviderKind:
    """Parse a provider name (e.g. from the session) into a ProviderKind.

    Raises:
        UnknownProviderError: If the value is not a supported provider
    """
    if isinstance(value, ProviderKind):
        return value
    try:
        return ProviderKind(value)
    except ValueError:
        raise UnknownProviderError(str(value))


def get_provider(value: "str | ProviderKind | None") -> IdentityProvider:
    """Get the provider for a kind or its string name.

    Raises:
        UnknownProviderError: If the value is not a supported provider
    """
    return _PROVIDERS[parse_provider_kind(value)]
