"""Pydantic schemas for identity provider lookups."""

from pydantic import BaseModel

from api.v1.schemas.common import CamelModel


class IdentityResponse(CamelModel):
    """User record as reported by the identity provider."""

    id: str
    username: str
    global_name: str | None = None
    discriminator: str | None = None
    avatar_url: str


class IdentityDetailResponse(BaseModel):
    """Envelope for an identity lookup."""

    data: IdentityResponse
