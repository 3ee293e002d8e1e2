"""Site statistics routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_view_counter_service
from api.v1.schemas.site import SiteStatsDetailResponse, SiteStatsResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.view_counter_service import ViewCounterService

router = APIRouter(prefix="/site", tags=["site"])


@router.get(
    "/stats",
    response_model=SiteStatsDetailResponse,
    summary="Site-wide view statistics",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_site_stats(
    request: Request,
    service: ViewCounterService = Depends(get_view_counter_service),
) -> SiteStatsDetailResponse:
    """Total views across all profiles and the approximate unique visitor count."""
    site = await service.get_site_stats()
    return SiteStatsDetailResponse(
        data=SiteStatsResponse(
            total_views=site.total_views,
            unique_visitors=site.unique_visitors,
            last_updated_at=site.last_updated_at,
        )
    )
