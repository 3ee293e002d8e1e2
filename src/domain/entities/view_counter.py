"""View counting domain entities."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ViewCounter:
    """Authoritative per-profile view total."""

    profile_id: str
    count: int = 0
    last_viewed_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class SiteCounter:
    """Site-wide view totals.

    ``unique_visitors`` is approximate: it grows once per browser that
    arrives without the visitor cookie, with no server-side dedup.
    """

    total_views: int = 0
    unique_visitors: int = 0
    last_updated_at: datetime | None = None


@dataclass(frozen=True)
class ViewResult:
    """Counts returned after recording a view event."""

    profile_view_count: int
    site_total_views: int
