"""Pydantic schemas for view counting and site statistics."""

from datetime import datetime

from pydantic import BaseModel

from api.v1.schemas.common import CamelModel


class ViewRecordedResponse(CamelModel):
    """Counts after a view event."""

    profile_view_count: int
    site_total_views: int


class ViewRecordedDetailResponse(BaseModel):
    """Envelope for a recorded view."""

    data: ViewRecordedResponse


class ReconcileResponse(CamelModel):
    """Cached view count after reconciliation."""

    profile_view_count: int


class ReconcileDetailResponse(BaseModel):
    """Envelope for a reconciliation result."""

    data: ReconcileResponse


class SiteStatsResponse(CamelModel):
    """Site-wide counters. ``uniqueVisitors`` is approximate."""

    total_views: int
    unique_visitors: int
    last_updated_at: datetime | None = None


class SiteStatsDetailResponse(BaseModel):
    """Envelope for site statistics."""

    data: SiteStatsResponse
