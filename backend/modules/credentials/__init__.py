"""
Credentials module.

Issues signed credentials to client applications.

Public API:
- ICredentialService: Interface for credential issuance
- IAssertionVerifier: Interface for identity assertion verification
- CredentialService / JWTAssertionVerifier: implementations
- LongLivedCredential, IdentityAssertion: models
- Credential exceptions: MissingRedirectTargetError, InvalidAssertionError
"""

from .interfaces import IAssertionVerifier, ICredentialService
from .models import (
    IdentityAssertion,
    LongLivedCredential,
    LongLivedCredentialRequest,
    PublicKeyResponse,
)
from .exceptions import InvalidAssertionError, MissingRedirectTargetError
from .assertions import JWTAssertionVerifier
from .service import CredentialService

__all__ = [
    # Interfaces
    "IAssertionVerifier",
    "ICredentialService",
    # Implementations
    "CredentialService",
    "JWTAssertionVerifier",
    # Models
    "IdentityAssertion",
    "LongLivedCredential",
    "LongLivedCredentialRequest",
    "PublicKeyResponse",
    # Exceptions
    "InvalidAssertionError",
    "MissingRedirectTargetError",
]
