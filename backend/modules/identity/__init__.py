"""
Identity module.

Reconciles primary-provider logins with canonical users.

Public API:
- IIdentityService: Interface for reconciliation
- IdentityService: Record-store backed implementation
- LinkedUser: Merged user + profile view
"""

from .interfaces import IIdentityService
from .models import LinkedUser
from .service import IdentityService

__all__ = [
    "IIdentityService",
    "IdentityService",
    "LinkedUser",
]
