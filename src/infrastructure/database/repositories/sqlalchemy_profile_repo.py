"""SQLAlchemy implementation of Profile repository."""

import json
import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import (
    DEFAULT_BACKGROUND_KIND,
    DEFAULT_LOCATION,
    DEFAULT_MOOD,
    DEFAULT_NAME_COLOR,
    DEFAULT_NAME_STYLE,
    DEFAULT_SOCIAL_ICON_COLOR,
    DEFAULT_SOCIAL_ICON_STYLE,
    DEFAULT_STATUS_TEXT,
    DEFAULT_THEME,
    THEMES,
    Profile,
)
from infrastructure.database.models import ProfileModel

logger = logging.getLogger(__name__)


def _load_social_links(raw: str | None) -> dict[str, str]:
    """Decode the stored JSON sub-document, tolerating legacy garbage."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable social links JSON")
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items() if isinstance(v, str) and v.strip()}


def _dump_social_links(links: dict[str, str]) -> str:
    return json.dumps(links, sort_keys=True, separators=(",", ":"))


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, owner_id: str) -> Profile | None:
        """Get a profile by owner ID."""
        stmt = select(ProfileModel).where(ProfileModel.owner_id == owner_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_slug(self, slug: str) -> Profile | None:
        """Get a profile by shareable slug."""
        stmt = select(ProfileModel).where(ProfileModel.shareable_slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, owner_id: str, changes: dict[str, Any]) -> Profile | None:
        """Write a validated change set as a single UPDATE statement."""
        values = dict(changes)
        if "social_links" in values:
            values["social_links_json"] = _dump_social_links(values.pop("social_links"))

        stmt = (
            update(ProfileModel)
            .where(ProfileModel.owner_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            return None

        await self._session.flush()
        stmt_get = (
            select(ProfileModel)
            .where(ProfileModel.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        model = (await self._session.execute(stmt_get)).scalar_one()
        return self._to_entity(model)

    async def sync_view_count(self, owner_id: str, count: int) -> bool:
        """Raise the cached view count; never lowers it."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.owner_id == owner_id, ProfileModel.view_count < count)
            .values(view_count=count)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity, materializing defaults."""
        theme = model.theme_id if model.theme_id in THEMES else DEFAULT_THEME
        return Profile(
            owner_id=model.owner_id,
            display_name=model.display_name,
            join_date=model.join_date,
            status_text=model.status_text or DEFAULT_STATUS_TEXT,
            location=model.location or DEFAULT_LOCATION,
            mood=model.mood or DEFAULT_MOOD,
            avatar_ref=model.avatar_ref,
            provider_username=model.provider_username,
            social_links=_load_social_links(model.social_links_json),
            view_count=model.view_count or 0,
            shareable_slug=model.shareable_slug,
            theme_id=theme,
            background_kind=model.background_kind or DEFAULT_BACKGROUND_KIND,
            background_ref=model.background_ref,
            audio_ref=model.audio_ref,
            audio_title=model.audio_title,
            name_style=model.name_style or DEFAULT_NAME_STYLE,
            name_color=model.name_color or DEFAULT_NAME_COLOR,
            social_icon_style=model.social_icon_style or DEFAULT_SOCIAL_ICON_STYLE,
            social_icon_color=model.social_icon_color or DEFAULT_SOCIAL_ICON_COLOR,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            owner_id=entity.owner_id,
            display_name=entity.display_name,
            join_date=entity.join_date,
            status_text=entity.status_text,
            location=entity.location,
            mood=entity.mood,
            avatar_ref=entity.avatar_ref,
            provider_username=entity.provider_username,
            social_links_json=_dump_social_links(entity.social_links),
            view_count=entity.view_count,
            shareable_slug=entity.shareable_slug,
            theme_id=entity.theme_id,
            background_kind=entity.background_kind,
            background_ref=entity.background_ref,
            audio_ref=entity.audio_ref,
            audio_title=entity.audio_title,
            name_style=entity.name_style,
            name_color=entity.name_color,
            social_icon_style=entity.social_icon_style,
            social_icon_color=entity.social_icon_color,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
