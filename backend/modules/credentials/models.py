"""
Credentials module data models.
"""

from typing import Any
from pydantic import BaseModel, Field


class IdentityAssertion(BaseModel):
    """
    A verified short-lived identity assertion issued by the primary
    identity platform (e.g. a Firebase ID token).
    """

    model_config = {"frozen": True}

    uid: str = Field(..., description="Canonical user id (token subject)")
    audience: str = Field(..., description="Client the assertion was issued for")
    claims: dict[str, Any] = Field(default_factory=dict)


class LongLivedCredential(BaseModel):
    """A signed long-lived bearer credential."""

    token: str = Field(..., description="RS256-signed JWT")
    expires: int = Field(..., description="Expiry, epoch milliseconds")


class LongLivedCredentialRequest(BaseModel):
    """Request to extend an identity assertion into a long-lived credential."""

    model_config = {"populate_by_name": True}

    id_token: str = Field("", alias="idToken")


class PublicKeyResponse(BaseModel):
    """Public verification material for issued credentials."""

    key: str
