"""View counter repository protocol."""

from datetime import datetime
from typing import Protocol

from domain.entities.view_counter import SiteCounter, ViewCounter


class IViewCounterRepository(Protocol):
    """Repository interface for per-profile and site-wide counters."""

    async def get(self, profile_id: str) -> ViewCounter | None:
        """Get the counter record for a profile."""
        ...

    async def increment(self, profile_id: str, viewed_at: datetime) -> ViewCounter:
        """Atomically add one view, creating the record if needed."""
        ...

    async def get_site(self) -> SiteCounter | None:
        """Get the site-wide counter row."""
        ...

    async def increment_site(self, viewed_at: datetime, new_visitor: bool) -> SiteCounter:
        """Atomically add one site view, creating the row if needed."""
        ...
