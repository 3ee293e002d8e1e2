"""SQLAlchemy implementation of View Counter repository."""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.view_counter import SiteCounter, ViewCounter
from infrastructure.database.models import SITE_COUNTER_ID, SiteCounterModel, ViewCounterModel

# Dialects with INSERT .. ON CONFLICT DO UPDATE support
_UPSERT_INSERTS: dict[str, Any] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SQLAlchemyViewCounterRepository:
    """SQLAlchemy implementation of IViewCounterRepository.

    Increments are single upsert statements so concurrent view events
    never read-modify-write in Python and cannot lose updates.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _insert(self, model: type[Any]) -> Any:
        dialect = self._session.get_bind().dialect.name
        try:
            insert = _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Atomic counters not supported on {dialect}") from None
        return insert(model)

    async def get(self, profile_id: str) -> ViewCounter | None:
        """Get the counter record for a profile."""
        stmt = select(ViewCounterModel).where(ViewCounterModel.profile_id == profile_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return ViewCounter(
            profile_id=model.profile_id,
            count=model.count,
            last_viewed_at=model.last_viewed_at,
        )

    async def increment(self, profile_id: str, viewed_at: datetime) -> ViewCounter:
        """Insert with count 1, or add one to the existing count."""
        stmt = self._insert(ViewCounterModel).values(
            profile_id=profile_id,
            count=1,
            last_viewed_at=viewed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ViewCounterModel.profile_id],
            set_={
                "count": ViewCounterModel.count + 1,
                "last_viewed_at": viewed_at,
            },
        ).returning(ViewCounterModel.count, ViewCounterModel.last_viewed_at)

        count, last_viewed_at = (await self._session.execute(stmt)).one()
        return ViewCounter(profile_id=profile_id, count=count, last_viewed_at=last_viewed_at)

    async def get_site(self) -> SiteCounter | None:
        """Get the site-wide counter row."""
        stmt = select(SiteCounterModel).where(SiteCounterModel.id == SITE_COUNTER_ID)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return SiteCounter(
            total_views=model.total_views,
            unique_visitors=model.unique_visitors,
            last_updated_at=model.last_updated_at,
        )

    async def increment_site(self, viewed_at: datetime, new_visitor: bool) -> SiteCounter:
        """Insert the singleton row, or add one view (and maybe a visitor)."""
        visitor_increment = 1 if new_visitor else 0
        stmt = self._insert(SiteCounterModel).values(
            id=SITE_COUNTER_ID,
            total_views=1,
            unique_visitors=visitor_increment,
            last_updated_at=viewed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SiteCounterModel.id],
            set_={
                "total_views": SiteCounterModel.total_views + 1,
                "unique_visitors": SiteCounterModel.unique_visitors + visitor_increment,
                "last_updated_at": viewed_at,
            },
        ).returning(
            SiteCounterModel.total_views,
            SiteCounterModel.unique_visitors,
            SiteCounterModel.last_updated_at,
        )

        total_views, unique_visitors, last_updated_at = (await self._session.execute(stmt)).one()
        return SiteCounter(
            total_views=total_views,
            unique_visitors=unique_visitors,
            last_updated_at=last_updated_at,
        )
