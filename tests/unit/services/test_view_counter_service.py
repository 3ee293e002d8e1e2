"""Unit tests for ViewCounterService."""

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import ProfileNotFoundError
from domain.entities.profile import Profile
from domain.entities.view_counter import SiteCounter, ViewCounter
from domain.services.view_counter_service import ViewCounterService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> ViewCounterService:
    return ViewCounterService(lambda: uow)


class TestRecordView:
    @pytest.mark.asyncio
    async def test_increments_profile_and_site(
        self, service: ViewCounterService, uow: FakeUnitOfWork, profile: Profile, owner_id: str
    ):
        uow.profiles.get.return_value = profile
        uow.view_counters.increment.return_value = ViewCounter(profile_id=owner_id, count=5)
        uow.view_counters.increment_site.return_value = SiteCounter(total_views=42)

        result = await service.record_view(owner_id, new_visitor=True)

        assert result.profile_view_count == 5
        assert result.site_total_views == 42
        assert uow.view_counters.increment_site.call_args.args[1] is True
        uow.profiles.sync_view_count.assert_called_once_with(owner_id, 5)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_unknown_profile_counts_nothing(
        self, service: ViewCounterService, uow: FakeUnitOfWork
    ):
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.record_view("ghost")

        uow.view_counters.increment.assert_not_called()
        uow.view_counters.increment_site.assert_not_called()

    @pytest.mark.asyncio
    async def test_propagation_failure_is_not_fatal(
        self, service: ViewCounterService, uow: FakeUnitOfWork, profile: Profile, owner_id: str
    ):
        uow.profiles.get.return_value = profile
        uow.view_counters.increment.return_value = ViewCounter(profile_id=owner_id, count=3)
        uow.view_counters.increment_site.return_value = SiteCounter(total_views=3)
        uow.profiles.sync_view_count.side_effect = OperationalError("UPDATE", {}, Exception("locked"))

        result = await service.record_view(owner_id)

        assert result.profile_view_count == 3


class TestReconcile:
    @pytest.mark.asyncio
    async def test_raises_cached_count(
        self, service: ViewCounterService, uow: FakeUnitOfWork, profile: Profile, owner_id: str
    ):
        profile.view_count = 2
        uow.profiles.get.return_value = profile
        uow.view_counters.get.return_value = ViewCounter(profile_id=owner_id, count=7)

        assert await service.reconcile(owner_id) == 7
        uow.profiles.sync_view_count.assert_called_once_with(owner_id, 7)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_never_lowers_cached_count(
        self, service: ViewCounterService, uow: FakeUnitOfWork, profile: Profile, owner_id: str
    ):
        profile.view_count = 10
        uow.profiles.get.return_value = profile
        uow.view_counters.get.return_value = None

        assert await service.reconcile(owner_id) == 10
        uow.profiles.sync_view_count.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_profile(self, service: ViewCounterService, uow: FakeUnitOfWork):
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.reconcile("ghost")


class TestSiteStats:
    @pytest.mark.asyncio
    async def test_zero_before_first_view(self, service: ViewCounterService, uow: FakeUnitOfWork):
        uow.view_counters.get_site.return_value = None

        stats = await service.get_site_stats()

        assert stats.total_views == 0
        assert stats.unique_visitors == 0
        assert stats.last_updated_at is None

    @pytest.mark.asyncio
    async def test_returns_stored_counters(self, service: ViewCounterService, uow: FakeUnitOfWork):
        now = datetime.utcnow()
        uow.view_counters.get_site.return_value = SiteCounter(
            total_views=9, unique_visitors=4, last_updated_at=now
        )

        stats = await service.get_site_stats()

        assert (stats.total_views, stats.unique_visitors, stats.last_updated_at) == (9, 4, now)
