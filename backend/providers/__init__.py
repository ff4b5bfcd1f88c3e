"""Identity provider variants."""

from .base import IdentityProvider, ProviderKind, ProviderProfile, ProviderRole
from .exceptions import InvalidProfileError, UnknownProviderError
from .factory import get_provider, parse_provider_kind

__all__ = [
    "IdentityProvider",
    "ProviderKind",
    "ProviderProfile",
    "ProviderRole",
    "InvalidProfileError",
    "UnknownProviderError",
    "get_provider",
    "parse_provider_kind",
]
