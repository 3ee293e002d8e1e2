"""Identity provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class IdentityUser:
    """User record returned by the external identity provider."""

    id: str
    username: str
    avatar_url: str
    global_name: Optional[str] = None
    discriminator: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Preferred display name: the global name, else the username."""
        return self.global_name or self.username

    @property
    def handle(self) -> str:
        """Provider handle, with the legacy discriminator when present."""
        if self.discriminator and self.discriminator != "0":
            return f"{self.username}#{self.discriminator}"
        return self.username


class IIdentityProvider(Protocol):
    """Read-only lookup of users in the external identity provider."""

    async def get_user(self, user_id: str) -> IdentityUser:
        """
        Fetch a user by id.

        Raises:
            IdentityNotFoundError: The provider has no such user
            UpstreamUnavailableError: The provider could not be reached
        """
        ...
