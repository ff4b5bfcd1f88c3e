"""Steam OpenID identity provider.

Steam is the primary provider: a successful Steam login creates or
refreshes the canonical user and the client is handed a custom token.
"""

from typing import Any

from .base import IdentityProvider, ProviderKind, ProviderProfile, ProviderRole
from .exceptions import InvalidProfileError

# Index of the full-size avatar in the strategy's photos list
FULL_AVATAR_INDEX = 2


class SteamProvider(IdentityProvider):
    """Provider for Steam accounts.

    Handshake payloads have the shape produced by passport-steam:
    ``{"id", "displayName", "photos": [{"value"}, ...], "_json": {...}}``
    where ``_json`` is the raw GetPlayerSummaries entry.
    """

    kind = ProviderKind.STEAM
    role = ProviderRole.PRIMARY
    issues_redirect_token = True
    external_id_field = "steamid"
    email_domain = "steamcommunity.com"

    def parse_profile(self, payload: dict[str, Any]) -> ProviderProfile:
        summary = dict(payload.get("_json") or {})
        external_id = payload.get("id") or summary.get("steamid")
        if not external_id:
            raise InvalidProfileError(self.kind.value)
        external_id = str(external_id)
        summary[self.external_id_field] = external_id

        return ProviderProfile(
            kind=self.kind,
            external_id=external_id,
            display_name=payload.get("displayName") or summary.get("personaname"),
            photo_url=self._avatar_url(payload, summary),
            raw=summary,
        )

    @staticmethod
    def _avatar_url(payload: dict[str, Any], summary: dict[str, Any]) -> str | None:
        photos = payload.get("photos") or []
        if len(photos) > FULL_AVATAR_INDEX:
            return photos[FULL_AVATAR_INDEX].get("value")
        if photos:
            return photos[-1].get("value")
        return summary.get("avatarfull")
