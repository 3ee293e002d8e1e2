"""Discord REST API identity provider."""

import logging

import httpx

from core.config import settings
from core.exceptions import IdentityNotFoundError, UpstreamUnavailableError
from infrastructure.identity.provider import IdentityUser

logger = logging.getLogger(__name__)

CDN_BASE_URL = "https://cdn.discordapp.com"
SERVICE_NAME = "identity provider"


def avatar_url_for(user_id: str, avatar_hash: str | None, discriminator: str | None) -> str:
    """Build the CDN avatar URL, falling back to the default embed avatar."""
    if avatar_hash:
        return f"{CDN_BASE_URL}/avatars/{user_id}/{avatar_hash}.png?size=512"
    index = 0
    if discriminator and discriminator != "0" and discriminator.isdigit():
        index = int(discriminator) % 5
    elif user_id.isdigit():
        # Users on the new username system have discriminator "0"
        index = (int(user_id) >> 22) % 6
    return f"{CDN_BASE_URL}/embed/avatars/{index}.png"


class DiscordIdentityProvider:
    """Looks up Discord users with a bot token."""

    def __init__(
        self,
        bot_token: str = settings.discord_bot_token,
        base_url: str = settings.discord_api_base_url,
        timeout: float = settings.identity_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_user(self, user_id: str) -> IdentityUser:
        """Fetch a Discord user by snowflake id."""
        if not self._bot_token:
            raise UpstreamUnavailableError(SERVICE_NAME, "Identity provider is not configured")

        headers = {
            "Authorization": f"Bot {self._bot_token}",
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(f"/users/{user_id}", headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Discord lookup for %s failed: %s", user_id, exc)
            raise UpstreamUnavailableError(SERVICE_NAME) from exc

        if response.status_code == 404:
            raise IdentityNotFoundError(user_id)
        if response.is_error:
            logger.warning(
                "Discord lookup for %s returned HTTP %d", user_id, response.status_code
            )
            raise UpstreamUnavailableError(SERVICE_NAME)

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Unexpected Discord payload for %s", user_id)
            raise UpstreamUnavailableError(SERVICE_NAME) from exc
        if not isinstance(data, dict):
            logger.warning("Unexpected Discord payload for %s", user_id)
            raise UpstreamUnavailableError(SERVICE_NAME)

        try:
            discriminator = data.get("discriminator")
            return IdentityUser(
                id=str(data["id"]),
                username=data["username"],
                global_name=data.get("global_name"),
                discriminator=discriminator,
                avatar_url=avatar_url_for(str(data["id"]), data.get("avatar"), discriminator),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            logger.warning("Unexpected Discord payload for %s", user_id)
            raise UpstreamUnavailableError(SERVICE_NAME) from exc
