"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.profile_merge import ProfileMergeEngine
from domain.services.profile_service import ProfileService
from domain.services.view_counter_service import ViewCounterService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.identity.discord_provider import DiscordIdentityProvider
from infrastructure.storage.local_upload import LocalUploadService


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_identity_provider() -> DiscordIdentityProvider:
    """Get identity provider instance."""
    return DiscordIdentityProvider()


@lru_cache
def get_upload_service() -> LocalUploadService:
    """Get upload storage instance."""
    return LocalUploadService()


@lru_cache
def get_merge_engine() -> ProfileMergeEngine:
    """Get merge engine configured from settings."""
    return ProfileMergeEngine(
        upload_url_prefix=settings.upload_url_prefix,
        strict_social_links=settings.social_links_strict,
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        merge_engine=get_merge_engine(),
        identity_provider=get_identity_provider(),
        upload_service=get_upload_service(),
        slug_falls_back_to_owner_id=settings.slug_lookup_falls_back_to_owner_id,
    )


@lru_cache
def get_view_counter_service() -> ViewCounterService:
    """Get View counter service instance."""
    return ViewCounterService(get_uow_factory())
