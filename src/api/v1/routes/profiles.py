"""Profile API routes."""

from fastapi import APIRouter, Cookie, Depends, File, Request, Response, UploadFile, status

from api.dependencies.auth import CurrentUser, OptionalUser
from api.v1.dependencies import get_profile_service, get_view_counter_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import (
    ProfileCreate,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdate,
)
from api.v1.schemas.site import (
    ReconcileDetailResponse,
    ReconcileResponse,
    ViewRecordedDetailResponse,
    ViewRecordedResponse,
)
from core.config import settings
from core.exceptions import AuthorizationError
from core.rate_limit import READ_LIMIT, VIEW_EVENT_LIMIT, WRITE_LIMIT, limiter
from domain.entities.profile import Profile
from domain.services.profile_service import ProfileInit, ProfileService
from domain.services.view_counter_service import ViewCounterService
from infrastructure.storage.provider import UploadPurpose

router = APIRouter(prefix="/profiles", tags=["profiles"])

VISITOR_COOKIE = "biolink_visitor"
VISITOR_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read up to one byte past ``max_bytes``; the upload store rejects the overflow."""
    return await file.read(max_bytes + 1)


def _to_response(profile: Profile, is_owner_view: bool = False) -> ProfileResponse:
    """Convert domain entity to response schema."""
    return ProfileResponse(
        owner_id=profile.owner_id,
        display_name=profile.display_name,
        status_text=profile.status_text,
        location=profile.location,
        mood=profile.mood,
        join_date=profile.join_date,
        avatar_ref=profile.avatar_ref,
        provider_username=profile.provider_username,
        social_links=profile.social_links,
        view_count=profile.view_count,
        shareable_slug=profile.shareable_slug,
        share_url=f"{settings.public_base_url.rstrip('/')}/u/{profile.effective_slug}",
        theme_id=profile.theme_id,
        background_kind=profile.background_kind,
        background_ref=profile.background_ref,
        audio_ref=profile.audio_ref,
        audio_title=profile.audio_title,
        name_style=profile.name_style,
        name_color=profile.name_color,
        social_icon_style=profile.social_icon_style,
        social_icon_color=profile.social_icon_color,
        is_owner_view=is_owner_view,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


@router.get(
    "/by-slug/{slug}",
    response_model=ProfileDetailResponse,
    summary="Get a profile by shareable slug",
    responses={404: {"model": ErrorResponse, "description": "No profile uses this slug"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile_by_slug(
    request: Request,
    slug: str,
    user: OptionalUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Resolve a share link. Slug matching is case-insensitive."""
    view = await service.get_by_slug(slug, caller_id=user.id if user else None)
    return ProfileDetailResponse(data=_to_response(view.profile, view.is_owner_view))


@router.get(
    "/{owner_id}",
    response_model=ProfileDetailResponse,
    summary="Get a profile by owner id",
    responses={404: {"model": ErrorResponse, "description": "Profile not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    owner_id: str,
    user: OptionalUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Public read. ``isOwnerView`` is true when the bearer owns the profile."""
    view = await service.get(owner_id, caller_id=user.id if user else None)
    return ProfileDetailResponse(data=_to_response(view.profile, view.is_owner_view))


@router.post(
    "",
    response_model=ProfileDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the caller's profile",
    responses={
        201: {"description": "Profile created"},
        400: {"model": ErrorResponse, "description": "Invalid field values"},
        409: {"model": ErrorResponse, "description": "Profile or slug already exists"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    body: ProfileCreate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Create a profile owned by the authenticated caller.

    Without a ``displayName`` the identity provider's name is used, then the
    name carried by the token.
    """
    fields = body.model_dump(exclude_unset=True)
    init = ProfileInit(
        display_name=fields.pop("display_name", None),
        join_date=fields.pop("join_date", None),
        fields=fields,
    )
    profile = await service.create(user.id, init, fallback_name=user.display_name)
    return ProfileDetailResponse(data=_to_response(profile, is_owner_view=True))


@router.patch(
    "/{owner_id}",
    response_model=ProfileDetailResponse,
    summary="Update a profile",
    responses={
        200: {"description": "Profile updated"},
        400: {"model": ErrorResponse, "description": "Invalid field values"},
        403: {"model": ErrorResponse, "description": "Caller does not own the profile"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
        409: {"model": ErrorResponse, "description": "Slug taken or inconsistent state"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    owner_id: str,
    body: ProfileUpdate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Apply a partial update. Only fields present in the body are touched."""
    profile = await service.update(owner_id, user.id, body.model_dump(exclude_unset=True))
    return ProfileDetailResponse(data=_to_response(profile, is_owner_view=True))


@router.post(
    "/{owner_id}/views",
    response_model=ViewRecordedDetailResponse,
    summary="Record a profile view",
    responses={404: {"model": ErrorResponse, "description": "Profile not found"}},
)
@limiter.limit(VIEW_EVENT_LIMIT)  # type: ignore[untyped-decorator]
async def record_view(
    request: Request,
    response: Response,
    owner_id: str,
    service: ViewCounterService = Depends(get_view_counter_service),
    visitor: str | None = Cookie(default=None, alias=VISITOR_COOKIE),
) -> ViewRecordedDetailResponse:
    """Count one render of the public page.

    Sent once per page load by the client. A request without the visitor
    cookie counts towards the approximate unique visitor total and gets
    the cookie set.
    """
    result = await service.record_view(owner_id, new_visitor=visitor is None)
    if visitor is None:
        response.set_cookie(
            VISITOR_COOKIE,
            "1",
            max_age=VISITOR_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=settings.is_production,
        )
    return ViewRecordedDetailResponse(
        data=ViewRecordedResponse(
            profile_view_count=result.profile_view_count,
            site_total_views=result.site_total_views,
        )
    )


@router.post(
    "/{owner_id}/views/reconcile",
    response_model=ReconcileDetailResponse,
    summary="Repair the cached view count",
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not own the profile"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def reconcile_views(
    request: Request,
    owner_id: str,
    user: CurrentUser,
    service: ViewCounterService = Depends(get_view_counter_service),
) -> ReconcileDetailResponse:
    """Copy the authoritative counter into the profile's ``viewCount``."""
    if user.id != owner_id:
        raise AuthorizationError("Only the profile owner can reconcile views")
    count = await service.reconcile(owner_id)
    return ReconcileDetailResponse(data=ReconcileResponse(profile_view_count=count))


@router.post(
    "/{owner_id}/sync",
    response_model=ProfileDetailResponse,
    summary="Refresh identity fields from Discord",
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not own the profile"},
        404: {"model": ErrorResponse, "description": "Profile or identity not found"},
        503: {"model": ErrorResponse, "description": "Identity provider unavailable"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def sync_identity(
    request: Request,
    owner_id: str,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Pull display name, handle and avatar from the identity provider."""
    profile = await service.sync_identity(owner_id, user.id)
    return ProfileDetailResponse(data=_to_response(profile, is_owner_view=True))


@router.post(
    "/{owner_id}/avatar",
    response_model=ProfileDetailResponse,
    summary="Upload an avatar image",
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not own the profile"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Unsupported media type"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def upload_avatar(
    request: Request,
    owner_id: str,
    user: CurrentUser,
    file: UploadFile = File(...),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Store an image and set it as the avatar."""
    data = await read_limited(file, service.upload_limit(UploadPurpose.AVATAR))
    profile = await service.upload_avatar(owner_id, user.id, data, file.content_type or "")
    return ProfileDetailResponse(data=_to_response(profile, is_owner_view=True))


@router.post(
    "/{owner_id}/background",
    response_model=ProfileDetailResponse,
    summary="Upload background media",
    responses={
        403: {"model": ErrorResponse, "description": "Caller does not own the profile"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Unsupported media type"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def upload_background(
    request: Request,
    owner_id: str,
    user: CurrentUser,
    file: UploadFile = File(...),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Store an image or video and switch the background to it."""
    data = await read_limited(file, service.upload_limit(UploadPurpose.BACKGROUND))
    profile = await service.upload_background(owner_id, user.id, data, file.content_type or "")
    return ProfileDetailResponse(data=_to_response(profile, is_owner_view=True))
