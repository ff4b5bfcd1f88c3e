"""
Token module.

OAuth2 token lifecycle for secondary providers: refresh-token exchange
and normalization into storable token records.

Public API:
- ITokenClient: Interface for token exchange
- OAuthTokenClient: httpx implementation
- Token exceptions: ProviderUnavailableError, TokenExchangeError
"""

from .interfaces import ITokenClient
from .client import OAuthTokenClient
from .exceptions import ProviderUnavailableError, TokenExchangeError

__all__ = [
    # Interface
    "ITokenClient",
    # Implementation
    "OAuthTokenClient",
    # Exceptions
    "ProviderUnavailableError",
    "TokenExchangeError",
]
