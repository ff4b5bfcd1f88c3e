"""
Linking module.

Links secondary-provider accounts (Discord) to users who already hold a
primary (Steam) session.

Public API:
- ILinkingService: Interface for linking
- LinkingService: Implementation
- Linking exceptions: SessionInvalidError, AlreadyLinkedError,
  RoundTripFailedError
"""

from .interfaces import ILinkingService
from .service import LinkingService
from .exceptions import AlreadyLinkedError, RoundTripFailedError, SessionInvalidError

__all__ = [
    # Interface
    "ILinkingService",
    # Implementation
    "LinkingService",
    # Exceptions
    "AlreadyLinkedError",
    "RoundTripFailedError",
    "SessionInvalidError",
]
