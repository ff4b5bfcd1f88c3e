"""Base classes and models for identity providers."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field


class ProviderKind(str, Enum):
    """The closed set of supported identity providers."""

    STEAM = "steam"
    DISCORD = "discord"


class ProviderRole(str, Enum):
    """How a provider takes part in authentication.

    PRIMARY providers establish (or create) the canonical user and get a
    redirect token. SECONDARY providers can only be linked to a user who
    already holds a primary session.
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"


class ProviderProfile(BaseModel):
    """A verified provider profile, normalized from the handshake payload.

    Attributes:
        kind: Provider that verified this profile
        external_id: Provider-assigned stable account id
        display_name: Name shown for the account
        photo_url: Avatar URL
        raw: The provider blob persisted on the profile record
    """

    model_config = {"frozen": True}

    kind: ProviderKind
    external_id: str = ""
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)


class IdentityProvider(ABC):
    """Abstract base class for identity providers.

    Each variant carries, as data, the rules the core applies to it:
    its role, whether it is handed a redirect token, where its external
    id lives inside the stored blob and the domain used for placeholder
    e-mail addresses.
    """

    kind: ClassVar[ProviderKind]
    role: ClassVar[ProviderRole]
    issues_redirect_token: ClassVar[bool]
    external_id_field: ClassVar[str]
    email_domain: ClassVar[str]

    @property
    def is_primary(self) -> bool:
        return self.role is ProviderRole.PRIMARY

    @abstractmethod
    def parse_profile(self, payload: dict[str, Any]) -> ProviderProfile:
        """Normalize a handshake payload into a ProviderProfile.

        Args:
            payload: Verified profile as produced by the handshake layer

        Returns:
            The normalized profile

        Raises:
            InvalidProfileError: If the payload has no external id
        """
        pass

    def external_id_of(self, blob: Optional[dict[str, Any]]) -> Optional[str]:
        """Read the external id out of a stored provider blob."""
        if not blob:
            return None
        value = blob.get(self.external_id_field)
        if value is None or value == "":
            return None
        return str(value)

    def placeholder_email(self, external_id: str) -> str:
        """Deterministic, per-provider unique e-mail for new users."""
        return f"{external_id}@{self.email_domain}"

    def conflicts_with(
        self,
        existing_blob: Optional[dict[str, Any]],
        profile: ProviderProfile,
    ) -> bool:
        """True when the stored blob belongs to a different external account."""
        existing_id = self.external_id_of(existing_blob)
        return existing_id is not None and existing_id != profile.external_id
