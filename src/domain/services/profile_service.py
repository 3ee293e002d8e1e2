"""Profile service layer with business logic."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    AppException,
    AuthorizationError,
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
    SlugTakenError,
    UpstreamUnavailableError,
)
from domain.entities.profile import BackgroundKinds, Profile
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.profile_merge import ProfileMergeEngine, normalize_slug
from infrastructure.identity.provider import IIdentityProvider, IdentityUser
from infrastructure.storage.provider import IUploadService, UploadPurpose

logger = logging.getLogger(__name__)


@dataclass
class ProfileInit:
    """Initial values for a new profile; everything is optional."""

    display_name: str | None = None
    join_date: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProfileView:
    """A profile as seen by a particular caller."""

    profile: Profile
    is_owner_view: bool


class ProfileService:
    """Service layer for the profile store: lookup, create, merge and sync."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        merge_engine: ProfileMergeEngine | None = None,
        identity_provider: Optional[IIdentityProvider] = None,
        upload_service: Optional[IUploadService] = None,
        slug_falls_back_to_owner_id: bool = False,
    ) -> None:
        self._uow_factory = uow_factory
        self._merge = merge_engine or ProfileMergeEngine()
        self._identity = identity_provider
        self._uploads = upload_service
        self._slug_fallback = slug_falls_back_to_owner_id

    async def get(self, owner_id: str, caller_id: str | None = None) -> ProfileView:
        """Get a profile by owner id."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(owner_id)
            if not profile:
                raise ProfileNotFoundError(owner_id)
            return ProfileView(profile, profile.is_owner_view(caller_id))

    async def get_by_slug(self, slug: str, caller_id: str | None = None) -> ProfileView:
        """Get a profile by shareable slug.

        Slugs and owner ids are separate key spaces unless the legacy
        fallback is enabled, in which case an unknown slug is retried as
        an owner id.
        """
        key = normalize_slug(slug)
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_slug(key) if key else None
            if not profile and self._slug_fallback:
                profile = await uow.profiles.get(slug.strip())
            if not profile:
                raise ProfileNotFoundError(slug)
            return ProfileView(profile, profile.is_owner_view(caller_id))

    async def create(
        self,
        owner_id: str,
        init: ProfileInit | None = None,
        fallback_name: str | None = None,
    ) -> Profile:
        """Create the profile for ``owner_id``.

        The display name comes from ``init``, then the identity provider,
        then ``fallback_name``, then the owner id itself.
        """
        init = init or ProfileInit()
        display_name = init.display_name
        if not display_name:
            display_name = await self._lookup_display_name(owner_id) or fallback_name or owner_id

        async with self._uow_factory() as uow:
            if await uow.profiles.get(owner_id):
                raise ProfileAlreadyExistsError(owner_id)

            blank = Profile(
                owner_id=owner_id,
                display_name=display_name,
                join_date=init.join_date or date.today().isoformat(),
            )
            patch = {**init.fields, "display_name": display_name, "join_date": blank.join_date}
            changes = self._merge.merge(blank, patch)
            changes.pop("updated_at", None)

            slug = changes.get("shareable_slug")
            if slug and await uow.profiles.get_by_slug(slug):
                raise SlugTakenError(slug)

            for name, value in changes.items():
                setattr(blank, name, value)

            try:
                created = await uow.profiles.create(blank)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                # Lost a race on either unique key
                if slug and "slug" in str(exc.orig).lower():
                    raise SlugTakenError(slug) from exc
                raise ProfileAlreadyExistsError(owner_id) from exc

            logger.info("Created profile for owner %s", owner_id)
            return created

    async def update(
        self,
        owner_id: str,
        caller_id: str | None,
        patch: Mapping[str, Any],
    ) -> Profile:
        """Merge a partial update into the caller's own profile."""
        self._require_owner(owner_id, caller_id)
        return await self._apply(owner_id, patch)

    async def sync_identity(self, owner_id: str, caller_id: str | None) -> Profile:
        """Refresh name, handle and avatar from the identity provider.

        Provider failures propagate before anything is written.
        """
        self._require_owner(owner_id, caller_id)
        await self._get_existing(owner_id)

        if not self._identity:
            raise UpstreamUnavailableError("identity provider", "Identity provider is not configured")
        identity = await self._identity.get_user(owner_id)

        return await self._apply(owner_id, self._identity_patch(identity), trusted=True)

    async def upload_avatar(
        self,
        owner_id: str,
        caller_id: str | None,
        data: bytes,
        content_type: str,
    ) -> Profile:
        """Store an avatar image and point the profile at it."""
        self._require_owner(owner_id, caller_id)
        await self._get_existing(owner_id)

        media = await self._require_uploads().store(data, content_type, UploadPurpose.AVATAR)
        return await self._apply_upload(owner_id, media.url, {"avatar_ref": media.url})

    async def upload_background(
        self,
        owner_id: str,
        caller_id: str | None,
        data: bytes,
        content_type: str,
    ) -> Profile:
        """Store background media and switch the background to it."""
        self._require_owner(owner_id, caller_id)
        await self._get_existing(owner_id)

        media = await self._require_uploads().store(data, content_type, UploadPurpose.BACKGROUND)
        kind = BackgroundKinds.VIDEO if media.kind == "video" else BackgroundKinds.IMAGE
        return await self._apply_upload(
            owner_id,
            media.url,
            {"background_kind": kind, "background_ref": media.url},
        )

    def upload_limit(self, purpose: UploadPurpose) -> int:
        """Largest upload the store accepts for ``purpose``."""
        return self._require_uploads().max_bytes(purpose)

    async def _apply(
        self,
        owner_id: str,
        patch: Mapping[str, Any],
        trusted: bool = False,
    ) -> Profile:
        """Validate, check slug uniqueness and persist in one transaction."""
        async with self._uow_factory() as uow:
            current = await uow.profiles.get(owner_id)
            if not current:
                raise ProfileNotFoundError(owner_id)

            if trusted:
                changes = dict(patch)
            else:
                changes = self._merge.merge(current, patch)
            if not changes:
                return current

            slug = changes.get("shareable_slug")
            if slug and slug != current.shareable_slug:
                holder = await uow.profiles.get_by_slug(slug)
                if holder and holder.owner_id != owner_id:
                    raise SlugTakenError(slug)

            try:
                updated = await uow.profiles.update(owner_id, changes)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if slug:
                    raise SlugTakenError(slug) from exc
                raise

            if not updated:
                raise ProfileNotFoundError(owner_id)
            logger.debug("Updated profile %s fields %s", owner_id, sorted(changes))
            return updated

    async def _apply_upload(self, owner_id: str, url: str, patch: dict[str, Any]) -> Profile:
        """Apply an upload reference, discarding the file if the write fails."""
        try:
            return await self._apply(owner_id, patch)
        except Exception:
            await self._require_uploads().discard(url)
            raise

    async def _get_existing(self, owner_id: str) -> Profile:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(owner_id)
            if not profile:
                raise ProfileNotFoundError(owner_id)
            return profile

    async def _lookup_display_name(self, owner_id: str) -> str | None:
        """Best-effort provider lookup used when creating a profile."""
        if not self._identity:
            return None
        try:
            identity = await self._identity.get_user(owner_id)
        except AppException as exc:
            logger.warning("Identity lookup for new profile %s failed: %s", owner_id, exc.message)
            return None
        return identity.display_name[:100]

    def _identity_patch(self, identity: IdentityUser) -> dict[str, Any]:
        """Changes written by an identity sync; provider data bypasses the merge engine."""
        return {
            "display_name": identity.display_name[:100],
            "provider_username": identity.handle[:100],
            "avatar_ref": identity.avatar_url,
            "updated_at": datetime.utcnow(),
        }

    def _require_uploads(self) -> IUploadService:
        if not self._uploads:
            raise UpstreamUnavailableError("upload storage", "Upload storage is not configured")
        return self._uploads

    @staticmethod
    def _require_owner(owner_id: str, caller_id: str | None) -> None:
        if caller_id != owner_id:
            raise AuthorizationError("Only the profile owner can change this profile")
