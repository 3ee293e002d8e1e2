"""Profile repository protocol."""

from typing import Any, Protocol

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile aggregates."""

    async def get(self, owner_id: str) -> Profile | None:
        """Get a profile by owner ID."""
        ...

    async def get_by_slug(self, slug: str) -> Profile | None:
        """Get a profile by shareable slug."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        ...

    async def update(self, owner_id: str, changes: dict[str, Any]) -> Profile | None:
        """Apply a validated change set in one statement; None if missing."""
        ...

    async def sync_view_count(self, owner_id: str, count: int) -> bool:
        """Raise the cached view count to ``count`` if it is lower."""
        ...
