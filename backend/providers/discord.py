"""Discord OAuth2 identity provider.

Discord is a secondary provider. It can only be linked to a user who is
already signed in with Steam, and its OAuth2 tokens are kept so the
client can talk to Discord on the user's behalf.
"""

from typing import Any

from .base import IdentityProvider, ProviderKind, ProviderProfile, ProviderRole
from .exceptions import InvalidProfileError

AVATAR_URL_TEMPLATE = "https://cdn.discordapp.com/avatars/{id}/{avatar}.png"

# Keys some OAuth strategies attach to the profile; never persisted
_CREDENTIAL_KEYS = ("accessToken", "refreshToken", "access_token", "refresh_token")


class DiscordProvider(IdentityProvider):
    """Provider for Discord accounts.

    Handshake payloads are Discord user objects:
    ``{"id", "username", "global_name", "avatar", ...}``.
    """

    kind = ProviderKind.DISCORD
    role = ProviderRole.SECONDARY
    issues_redirect_token = False
    external_id_field = "id"
    email_domain = "discord.com"

    DEFAULT_TOKEN_URL = "https://discord.com/api/oauth2/token"

    def parse_profile(self, payload: dict[str, Any]) -> ProviderProfile:
        external_id = payload.get("id")
        if not external_id:
            raise InvalidProfileError(self.kind.value)
        external_id = str(external_id)

        raw = {k: v for k, v in payload.items() if k not in _CREDENTIAL_KEYS}
        raw[self.external_id_field] = external_id

        photo_url = None
        if payload.get("avatar"):
            photo_url = AVATAR_URL_TEMPLATE.format(id=external_id, avatar=payload["avatar"])

        return ProviderProfile(
            kind=self.kind,
            external_id=external_id,
            display_name=payload.get("global_name") or payload.get("username"),
            photo_url=photo_url,
            raw=raw,
        )
