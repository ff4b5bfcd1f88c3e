"""
Identity module data models.
"""

from typing import Optional
from pydantic import BaseModel

from modules.records.models import CanonicalUser, ProfileRecord


class LinkedUser(BaseModel):
    """
    Merged view of a canonical user and its profile record.

    This is what a primary login resolves to.
    """

    model_config = {"frozen": True}

    user: CanonicalUser
    profile: ProfileRecord

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def display_name(self) -> Optional[str]:
        return self.user.display_name

    @property
    def photo_url(self) -> Optional[str]:
        return self.user.photo_url
