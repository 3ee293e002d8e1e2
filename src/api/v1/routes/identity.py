"""Identity provider lookup routes."""

from fastapi import APIRouter, Depends, Path, Request

from api.v1.dependencies import get_identity_provider
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.identity import IdentityDetailResponse, IdentityResponse
from core.rate_limit import READ_LIMIT, limiter
from infrastructure.identity.provider import IIdentityProvider

router = APIRouter(prefix="/identity", tags=["identity"])


@router.get(
    "/{user_id}",
    response_model=IdentityDetailResponse,
    summary="Look up a user in the identity provider",
    responses={
        404: {"model": ErrorResponse, "description": "Identity provider has no such user"},
        503: {"model": ErrorResponse, "description": "Identity provider unavailable"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_identity(
    request: Request,
    user_id: str = Path(pattern=r"^\d{1,25}$", description="Identity provider user id"),
    provider: IIdentityProvider = Depends(get_identity_provider),
) -> IdentityDetailResponse:
    """Name, handle and avatar of an identity provider user."""
    user = await provider.get_user(user_id)
    return IdentityDetailResponse(
        data=IdentityResponse(
            id=user.id,
            username=user.username,
            global_name=user.global_name,
            discriminator=user.discriminator,
            avatar_url=user.avatar_url,
        )
    )
