"""Profile merge engine.

Turns a raw, partially populated and untrusted patch into a validated set
of field assignments for one atomic write. No I/O happens here; the slug
collision check needs the store and lives in ``ProfileService``.
"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from core.exceptions import InvalidStateError, ProfileValidationError
from domain.entities.profile import (
    DEFAULT_LOCATION,
    DEFAULT_MOOD,
    DEFAULT_NAME_COLOR,
    DEFAULT_NAME_STYLE,
    DEFAULT_SOCIAL_ICON_COLOR,
    DEFAULT_SOCIAL_ICON_STYLE,
    DEFAULT_STATUS_TEXT,
    DEFAULT_THEME,
    SOCIAL_PLATFORMS,
    THEMES,
    BackgroundKinds,
    Profile,
)

# Text fields that fall back to a default when cleared
_DEFAULTED_TEXT_FIELDS: dict[str, tuple[str, int]] = {
    "status_text": (DEFAULT_STATUS_TEXT, 200),
    "location": (DEFAULT_LOCATION, 100),
    "mood": (DEFAULT_MOOD, 100),
    "name_style": (DEFAULT_NAME_STYLE, 50),
    "social_icon_style": (DEFAULT_SOCIAL_ICON_STYLE, 50),
}

_COLOR_FIELDS: dict[str, str] = {
    "name_color": DEFAULT_NAME_COLOR,
    "social_icon_color": DEFAULT_SOCIAL_ICON_COLOR,
}

# Media references; cleared to None when empty
_REF_FIELDS = ("avatar_ref", "background_ref", "audio_ref")

WRITABLE_FIELDS = frozenset(
    {
        "display_name",
        "join_date",
        "audio_title",
        "social_links",
        "shareable_slug",
        "theme_id",
        "background_kind",
        *_DEFAULTED_TEXT_FIELDS,
        *_COLOR_FIELDS,
        *_REF_FIELDS,
    }
)

MAX_DISPLAY_NAME = 100
MAX_JOIN_DATE = 50
MAX_AUDIO_TITLE = 200
MAX_REF = 500

_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9_-]{2,49}$")
_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def normalize_slug(slug: str) -> str:
    """Canonical form used for storing and looking up slugs."""
    return slug.strip().lower()


class ProfileMergeEngine:
    """Validates and merges partial profile updates."""

    def __init__(self, upload_url_prefix: str = "/uploads", strict_social_links: bool = False) -> None:
        self._upload_prefix = upload_url_prefix.rstrip("/") + "/"
        self._strict_social_links = strict_social_links

    def merge(self, current: Profile, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Return the field assignments ``patch`` makes to ``current``.

        Absent fields are left alone. An empty result means nothing to write;
        otherwise ``updated_at`` is included.

        Raises:
            InvalidStateError: ``owner_id`` change or background kind without media
            ProfileValidationError: One or more malformed fields (all reported)
        """
        requested_owner = patch.get("owner_id")
        if requested_owner is not None and requested_owner != current.owner_id:
            raise InvalidStateError(
                "ownerId cannot be changed by a profile update",
                ["owner_id"],
            )

        errors: list[dict[str, str]] = []
        changes: dict[str, Any] = {}

        for name in WRITABLE_FIELDS & patch.keys():
            value = patch[name]
            try:
                changes[name] = self._coerce(name, value)
            except ValueError as exc:
                errors.append({"field": name, "message": str(exc)})

        if errors:
            errors.sort(key=lambda error: error["field"])
            raise ProfileValidationError(errors)

        self._check_background(current, changes)

        if changes:
            changes["updated_at"] = datetime.utcnow()
        return changes

    def _coerce(self, name: str, value: Any) -> Any:
        """Validate one field and return the value to store."""
        if name == "social_links":
            return self._clean_social_links(value)

        if value is None:
            text = ""
        elif isinstance(value, str):
            text = value.strip()
        else:
            raise ValueError("must be a string")

        if name in _DEFAULTED_TEXT_FIELDS:
            default, max_length = _DEFAULTED_TEXT_FIELDS[name]
            _check_length(text, max_length)
            return text or default

        if name in _COLOR_FIELDS:
            if not text:
                return _COLOR_FIELDS[name]
            if not _COLOR_RE.match(text):
                raise ValueError("must be a hex color like #8B5CF6")
            return text.upper()

        if name in _REF_FIELDS:
            if not text:
                return None
            _check_length(text, MAX_REF)
            self._check_ref(text)
            return text

        if name == "display_name":
            if not text:
                raise ValueError("cannot be empty")
            _check_length(text, MAX_DISPLAY_NAME)
            return text

        if name == "join_date":
            if not text:
                raise ValueError("cannot be empty")
            _check_length(text, MAX_JOIN_DATE)
            return text

        if name == "audio_title":
            _check_length(text, MAX_AUDIO_TITLE)
            return text or None

        if name == "shareable_slug":
            slug = normalize_slug(text)
            if not slug:
                return None
            if not _SLUG_RE.match(slug):
                raise ValueError(
                    "must be 3-50 characters of letters, digits, '-' or '_' "
                    "starting with a letter or digit"
                )
            return slug

        if name == "theme_id":
            return text if text in THEMES else DEFAULT_THEME

        if name == "background_kind":
            kind = text.lower() or BackgroundKinds.PARTICLES
            if kind not in BackgroundKinds.ALL:
                raise ValueError(f"unknown background kind '{text}'")
            return kind

        raise ValueError("is not writable")

    def _clean_social_links(self, value: Any) -> dict[str, str]:
        """Build the full replacement social links mapping."""
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("must be an object of platform to URL")

        links: dict[str, str] = {}
        for raw_key, raw_url in value.items():
            if raw_url is None:
                continue
            if not isinstance(raw_url, str):
                raise ValueError(f"{raw_key}: must be a string")
            url = raw_url.strip()
            if not url:
                continue
            key = str(raw_key).strip().lower()
            if key not in SOCIAL_PLATFORMS:
                if self._strict_social_links:
                    raise ValueError(f"{raw_key}: unsupported platform")
                continue
            if len(url) > MAX_REF:
                raise ValueError(f"{key}: must be at most {MAX_REF} characters")
            scheme = _SCHEME_RE.match(url)
            if scheme and scheme.group(0).lower() not in ("http:", "https:"):
                raise ValueError(f"{key}: only http and https links are allowed")
            links[key] = url
        return links

    def _check_ref(self, ref: str) -> None:
        if ref.startswith(self._upload_prefix):
            if ".." in ref:
                raise ValueError("must not contain '..'")
            return
        parts = urlsplit(ref)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("must be an http(s) URL or an uploaded file")

    def _check_background(self, current: Profile, changes: dict[str, Any]) -> None:
        """A media background kind needs a media reference."""
        kind = changes.get("background_kind", current.background_kind)
        if kind not in BackgroundKinds.MEDIA:
            return
        if "background_kind" not in changes and "background_ref" not in changes:
            return
        ref = changes["background_ref"] if "background_ref" in changes else current.background_ref
        if not ref:
            raise InvalidStateError(
                f"backgroundKind '{kind}' requires a backgroundRef",
                ["background_kind", "background_ref"],
            )


def _check_length(text: str, max_length: int) -> None:
    if len(text) > max_length:
        raise ValueError(f"must be at most {max_length} characters")
