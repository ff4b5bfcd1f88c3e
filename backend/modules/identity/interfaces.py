"""
Identity module interface.

Other modules should depend on IIdentityService, not the concrete
implementation.
"""

from typing import Protocol, runtime_checkable

from providers import ProviderKind, ProviderProfile

from .models import LinkedUser


@runtime_checkable
class IIdentityService(Protocol):
    """Interface for reconciling provider identities with canonical users."""

    async def reconcile(self, kind: ProviderKind, profile: ProviderProfile) -> LinkedUser:
        """
        Find or create the canonical user for a verified provider profile.

        A first sight of the external id creates the user and its profile
        record. Later logins refresh display name and avatar on the same
        user.

        Args:
            kind: Primary provider that verified the profile
            profile: The verified profile

        Returns:
            LinkedUser with the user and its profile record

        Raises:
            InvalidProfileError: If the profile has no external id
            UnknownProviderError: If the provider cannot establish identities
        """
        ...
