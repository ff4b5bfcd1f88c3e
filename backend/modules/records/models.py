"""
Record store data models.

These are the records the store owns: canonical users, their profile
records and the OAuth2 tokens kept per (user, provider).
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field


class CanonicalUser(BaseModel):
    """
    The single identity every provider account is reconciled against.

    The id is generated by the store, never changes, and is the join key
    for profiles and tokens.
    """

    model_config = {"frozen": True}

    id: str = Field(..., description="Opaque stable user id")
    email: EmailStr = Field(..., description="Placeholder e-mail for provider-created users")
    email_verified: bool = Field(default=False)
    display_name: Optional[str] = Field(None, description="Display name")
    photo_url: Optional[str] = Field(None, description="Avatar URL")
    disabled: bool = Field(default=False)
    created_at: datetime = Field(..., description="Account creation time")


class ProfileRecord(BaseModel):
    """
    Profile data attached one-to-one to a CanonicalUser.

    ``providers`` maps a provider kind (e.g. "steam") to the raw verified
    profile blob that provider returned.
    """

    model_config = {"frozen": True}

    user_id: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    providers: dict[str, dict[str, Any]] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class StoredToken(BaseModel):
    """
    OAuth2 token record stored per (user, provider).

    A refresh replaces the whole record; it is never merged field by field.
    """

    model_config = {"frozen": True}

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    scope: str = ""
    expires_at: int = Field(..., description="Absolute expiry, epoch milliseconds")


class UserCreate(BaseModel):
    """Fields for creating a canonical user."""

    id: Optional[str] = Field(None, description="Reuse an existing id (recreating a lost user)")
    email: EmailStr
    email_verified: bool = False
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    disabled: bool = False


class UserUpdate(BaseModel):
    """Partial update of a canonical user. Unset fields are left alone."""

    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    disabled: Optional[bool] = None


class ProfileUpdate(BaseModel):
    """
    Partial update of a profile record.

    Entries in ``providers`` replace the blob for that provider kind only;
    blobs for other kinds are kept.
    """

    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    providers: dict[str, dict[str, Any]] = Field(default_factory=dict)
