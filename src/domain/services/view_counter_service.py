"""View counting service."""

from collections.abc import Callable
from datetime import datetime

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import ProfileNotFoundError
from domain.entities.view_counter import SiteCounter, ViewResult
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class ViewCounterService:
    """Records view events and keeps the profile's cached count in step.

    The counter record is authoritative. ``profiles.view_count`` is a
    denormalized copy that is refreshed after each increment and can be
    repaired with :meth:`reconcile`.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def record_view(self, owner_id: str, new_visitor: bool = False) -> ViewResult:
        """Count one render of ``owner_id``'s page.

        Args:
            owner_id: Profile being viewed.
            new_visitor: The caller looks like a first-time visitor (no
                visitor cookie); feeds the approximate unique visitor count.

        Returns:
            The profile's new total and the site total.
        """
        now = datetime.utcnow()
        async with self._uow_factory() as uow:
            if not await uow.profiles.get(owner_id):
                raise ProfileNotFoundError(owner_id)

            counter = await uow.view_counters.increment(owner_id, now)
            site = await uow.view_counters.increment_site(now, new_visitor)
            await uow.commit()

        await self._propagate(owner_id, counter.count)
        return ViewResult(profile_view_count=counter.count, site_total_views=site.total_views)

    async def reconcile(self, owner_id: str) -> int:
        """Copy the authoritative count into the profile and return it."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(owner_id)
            if not profile:
                raise ProfileNotFoundError(owner_id)

            counter = await uow.view_counters.get(owner_id)
            count = counter.count if counter else 0
            if count > profile.view_count:
                await uow.profiles.sync_view_count(owner_id, count)
                await uow.commit()
                logger.info(
                    "view_count_reconciled",
                    owner_id=owner_id,
                    cached=profile.view_count,
                    count=count,
                )
            return max(count, profile.view_count)

    async def get_site_stats(self) -> SiteCounter:
        """Read the site-wide counters; zeroes before the first view."""
        async with self._uow_factory() as uow:
            site = await uow.view_counters.get_site()
            return site or SiteCounter()

    async def _propagate(self, owner_id: str, count: int) -> None:
        """Best-effort refresh of the cached count; counters stay committed."""
        try:
            async with self._uow_factory() as uow:
                await uow.profiles.sync_view_count(owner_id, count)
                await uow.commit()
        except SQLAlchemyError:
            logger.warning(
                "view_count_propagation_failed",
                owner_id=owner_id,
                count=count,
                exc_info=True,
            )
