"""
Record store module.

Keyed persistence for canonical users, profile records and provider tokens.

Public API:
- IRecordStore: Interface for record store operations
- InMemoryRecordStore / SupabaseRecordStore: implementations
- CanonicalUser, ProfileRecord, StoredToken: stored records
"""

from .interfaces import IRecordStore
from .models import (
    CanonicalUser,
    ProfileRecord,
    ProfileUpdate,
    StoredToken,
    UserCreate,
    UserUpdate,
)
from .memory import InMemoryRecordStore

__all__ = [
    # Interface
    "IRecordStore",
    # Implementations
    "InMemoryRecordStore",
    # Models
    "CanonicalUser",
    "ProfileRecord",
    "ProfileUpdate",
    "StoredToken",
    "UserCreate",
    "UserUpdate",
]
