"""Pydantic schemas for Profile API."""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from api.v1.schemas.common import CamelModel


class ProfileFields(BaseModel):
    """Writable profile fields; all optional, validated by the merge engine.

    Unknown keys are ignored so newer clients keep working.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    display_name: Optional[str] = None
    status_text: Optional[str] = None
    location: Optional[str] = None
    mood: Optional[str] = None
    join_date: Optional[str] = None
    avatar_ref: Optional[str] = None
    social_links: Optional[dict[str, Optional[str]]] = None
    shareable_slug: Optional[str] = None
    theme_id: Optional[str] = None
    background_kind: Optional[str] = None
    background_ref: Optional[str] = None
    audio_ref: Optional[str] = None
    audio_title: Optional[str] = None
    name_style: Optional[str] = None
    name_color: Optional[str] = None
    social_icon_style: Optional[str] = None
    social_icon_color: Optional[str] = None

    @field_validator("social_links", mode="before")
    @classmethod
    def decode_social_links(cls, value: Any) -> Any:
        """Older clients send the links as a JSON-encoded string."""
        if isinstance(value, str):
            if not value.strip():
                return {}
            try:
                return json.loads(value)
            except ValueError as exc:
                raise ValueError("socialLinks must be an object or JSON object string") from exc
        return value


class ProfileCreate(ProfileFields):
    """Schema for creating the caller's profile."""


class ProfileUpdate(ProfileFields):
    """Schema for a partial profile update."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "mood": "Happy",
                "socialLinks": {
                    "github": "https://github.com/octocat",
                    "discord": "https://discord.gg/example",
                },
                "shareableSlug": "octo",
            }
        },
    )

    owner_id: Optional[str] = None


class ProfileResponse(CamelModel):
    """Schema for Profile response."""

    owner_id: str
    display_name: str
    status_text: str
    location: str
    mood: str
    join_date: str
    avatar_ref: Optional[str]
    provider_username: Optional[str] = None
    social_links: dict[str, str] = Field(default_factory=dict)
    view_count: int
    shareable_slug: Optional[str]
    share_url: str
    theme_id: str
    background_kind: str
    background_ref: Optional[str]
    audio_ref: Optional[str]
    audio_title: Optional[str]
    name_style: str
    name_color: str
    social_icon_style: str
    social_icon_color: str
    is_owner_view: bool = False
    created_at: datetime
    updated_at: datetime


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile response."""

    data: ProfileResponse
